"""
Configuration management for Chef API Python SDK

This module reads connection settings from knife/chef-client configuration
files and CHEF_* environment variables.
"""

from .knife_config import (
    KnifeConfig,
    filter_quotes,
    split_whitespace,
    load_knife_config,
    load_environment_overrides,
    connect_from_knife_config,
    ENV_SERVER_URL,
    ENV_NODE_NAME,
    ENV_CLIENT_KEY,
    ENV_VERSION,
)

__all__ = [
    'KnifeConfig',
    'filter_quotes',
    'split_whitespace',
    'load_knife_config',
    'load_environment_overrides',
    'connect_from_knife_config',
    'ENV_SERVER_URL',
    'ENV_NODE_NAME',
    'ENV_CLIENT_KEY',
    'ENV_VERSION',
]
