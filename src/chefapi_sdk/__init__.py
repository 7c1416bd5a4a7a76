"""
Chef API Python SDK
Authenticated client for the Chef server REST API
"""

from .version import __version__
from .crypto import (
    RSAPrivateKey,
    CRTPrecomputed,
    CRTValue,
    key_from_string,
    key_from_file,
    load_key,
    private_encrypt,
    public_decrypt,
)
from .exceptions import (
    ChefSDKError,
    ValidationError,
    ConfigNotFoundError,
    KeyParseError,
    InvalidUrlError,
    InvalidHostFormatError,
    SigningError,
    ContentTooLongError,
    TransportError,
    HttpStatusError,
)
from .connection import (
    ConnectionContext,
    DEFAULT_CHEF_VERSION,
    connect_credentials,
    connect_url,
    parse_server_url,
)
from .config import (
    KnifeConfig,
    load_knife_config,
    connect_from_knife_config,
)
from .http_client import (
    ChefClient,
    create_client,
    response_body,
)
from .signing import (
    RequestAuthorizer,
    AuthorizationResult,
    SigningInput,
    HttpMethod,
    generate_request_headers,
    verify_authorization,
    build_canonical_string,
    base64_block_encode,
    digest_blocks,
    hash_and_base64,
    generate_timestamp,
    format_rfc3339_timestamp,
    SigningSession,
)

# Public API exports
__all__ = [
    '__version__',
    # Key material and raw RSA
    'RSAPrivateKey',
    'CRTPrecomputed',
    'CRTValue',
    'key_from_string',
    'key_from_file',
    'load_key',
    'private_encrypt',
    'public_decrypt',
    # Exceptions
    'ChefSDKError',
    'ValidationError',
    'ConfigNotFoundError',
    'KeyParseError',
    'InvalidUrlError',
    'InvalidHostFormatError',
    'SigningError',
    'ContentTooLongError',
    'TransportError',
    'HttpStatusError',
    # Connection
    'ConnectionContext',
    'DEFAULT_CHEF_VERSION',
    'connect_credentials',
    'connect_url',
    'parse_server_url',
    'KnifeConfig',
    'load_knife_config',
    'connect_from_knife_config',
    # HTTP Client
    'ChefClient',
    'create_client',
    'response_body',
    # Request Signing
    'RequestAuthorizer',
    'AuthorizationResult',
    'SigningInput',
    'HttpMethod',
    'generate_request_headers',
    'verify_authorization',
    'build_canonical_string',
    'base64_block_encode',
    'digest_blocks',
    'hash_and_base64',
    'generate_timestamp',
    'format_rfc3339_timestamp',
    'SigningSession',
]
