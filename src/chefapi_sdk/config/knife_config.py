"""
knife.rb / client.rb configuration for Python SDK

Reads the handful of settings needed to talk to a Chef server from a knife
or chef-client configuration file. Only simple ``name value`` lines are
understood; Ruby expressions are ignored.
"""

import logging
import os
import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional, Union

from ..connection import ConnectionContext, DEFAULT_CHEF_VERSION, connect_url
from ..exceptions import ConfigNotFoundError, ValidationError

logger = logging.getLogger(__name__)

ENV_SERVER_URL = "CHEF_SERVER_URL"
ENV_NODE_NAME = "CHEF_NODE_NAME"
ENV_CLIENT_KEY = "CHEF_CLIENT_KEY"
ENV_VERSION = "CHEF_VERSION"

_WHITESPACE = re.compile(r'\s+')
_QUOTES = re.compile(r'''^['"]|['"]$''')


def filter_quotes(value: str) -> str:
    """Strip one leading and one trailing quote character."""
    return _QUOTES.sub('', value)


def split_whitespace(line: str) -> list:
    """Split a line on runs of whitespace."""
    return _WHITESPACE.split(line.strip())


@dataclass(frozen=True)
class KnifeConfig:
    """
    Connection settings read from a knife configuration

    Attributes:
        node_name: Client or user name
        client_key: Path to the client key (relative paths resolved against
            the configuration file's directory)
        chef_server_url: Chef server URL
        ssl_verify_mode: ``verify_peer`` or ``verify_none``
        version: X-Chef-Version to send
    """
    node_name: Optional[str] = None
    client_key: Optional[str] = None
    chef_server_url: Optional[str] = None
    ssl_verify_mode: str = "verify_peer"
    version: str = DEFAULT_CHEF_VERSION

    @property
    def tls_skip_verify(self) -> bool:
        return self.ssl_verify_mode == "verify_none"

    @classmethod
    def from_string(cls, content: str, base_dir: Optional[Union[str, Path]] = None) -> 'KnifeConfig':
        """Parse knife configuration text"""
        values = {}
        for line in content.splitlines():
            parts = split_whitespace(line)
            if len(parts) != 2:
                continue

            name, value = parts[0], filter_quotes(parts[1])
            if name == "node_name":
                values['node_name'] = value
            elif name == "client_key":
                values['client_key'] = _resolve_path(value, base_dir)
            elif name == "chef_server_url":
                values['chef_server_url'] = value
            elif name == "ssl_verify_mode":
                values['ssl_verify_mode'] = value.lstrip(':')

        return cls(**values)

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> 'KnifeConfig':
        """Load knife configuration from file"""
        path = Path(file_path).expanduser()
        if not path.is_file():
            raise ConfigNotFoundError(
                f"Configuration file not found: {path}",
                details={"path": str(path)}
            )

        try:
            content = path.read_text(encoding='utf-8')
        except OSError as e:
            raise ConfigNotFoundError(
                f"Failed to read configuration file {path}: {e}",
                details={"path": str(path)}
            ) from e

        logger.debug(f"Loaded knife configuration from {path}")
        return cls.from_string(content, base_dir=path.parent)

    def with_environment_overrides(self, environ: Optional[Mapping[str, str]] = None) -> 'KnifeConfig':
        """Return a copy with CHEF_* environment variables applied"""
        environ = os.environ if environ is None else environ
        overrides = {}
        if environ.get(ENV_SERVER_URL):
            overrides['chef_server_url'] = environ[ENV_SERVER_URL]
        if environ.get(ENV_NODE_NAME):
            overrides['node_name'] = environ[ENV_NODE_NAME]
        if environ.get(ENV_CLIENT_KEY):
            overrides['client_key'] = environ[ENV_CLIENT_KEY]
        if environ.get(ENV_VERSION):
            overrides['version'] = environ[ENV_VERSION]
        return replace(self, **overrides)

    def to_connection(self, version: Optional[str] = None) -> ConnectionContext:
        """
        Resolve the settings into a connection.

        Raises:
            ValidationError: If a required setting is missing
            InvalidUrlError: If chef_server_url is not usable
            KeyParseError: If the client key cannot be loaded
        """
        for name in ('node_name', 'client_key', 'chef_server_url'):
            if not getattr(self, name):
                raise ValidationError(f"{name} is not set", "MISSING_SETTING", {"setting": name})

        return connect_url(
            self.chef_server_url,
            version or self.version,
            self.node_name,
            self.client_key,
            tls_skip_verify=self.tls_skip_verify,
        )


def _resolve_path(value: str, base_dir: Optional[Union[str, Path]]) -> str:
    path = Path(value).expanduser()
    if not path.is_absolute() and base_dir is not None:
        path = Path(base_dir) / path
    return str(path)


def load_knife_config(file_path: Union[str, Path]) -> KnifeConfig:
    """Load knife configuration from file"""
    return KnifeConfig.from_file(file_path)


def load_environment_overrides(
    config: Optional[KnifeConfig] = None,
    environ: Optional[Mapping[str, str]] = None
) -> KnifeConfig:
    """Apply CHEF_* environment variables on top of config (or defaults)"""
    return (config or KnifeConfig()).with_environment_overrides(environ)


def connect_from_knife_config(
    file_path: Union[str, Path],
    version: Optional[str] = None
) -> ConnectionContext:
    """
    Build a connection from a knife configuration file.

    Args:
        file_path: Path to knife.rb or client.rb
        version: X-Chef-Version override

    Returns:
        ConnectionContext: Resolved connection
    """
    return load_knife_config(file_path).to_connection(version)
