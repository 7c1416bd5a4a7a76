"""
Connection parameters for a Chef server

A ConnectionContext is created once at connect time and shared, read-only,
by every request issued through it.
"""

import logging
import os
from dataclasses import dataclass
from typing import Tuple, Union
from urllib.parse import urlparse

from .crypto.rsa_key import RSAPrivateKey, load_key
from .exceptions import InvalidHostFormatError, InvalidUrlError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CHEF_VERSION = "11.12.0"
DEFAULT_PORTS = {
    'http': '80',
    'https': '443',
}


@dataclass(frozen=True)
class ConnectionContext:
    """
    Resolved connection parameters for a Chef server.

    Attributes:
        host: Server host name
        port: Server port
        url: Base URL requests are issued against
        version: Value sent as X-Chef-Version
        user_id: Client or user name the key belongs to
        key: Client RSA private key
        tls_skip_verify: Disable TLS certificate verification
    """
    host: str
    port: str
    url: str
    version: str
    user_id: str
    key: RSAPrivateKey
    tls_skip_verify: bool = False

    def __post_init__(self):
        """Validate connection context."""
        if not self.url:
            raise ValidationError("Server url cannot be empty")

        if not self.user_id:
            raise ValidationError("User id cannot be empty")

        if not isinstance(self.key, RSAPrivateKey):
            raise ValidationError("key must be an RSAPrivateKey instance")

        if self.url.endswith('/'):
            object.__setattr__(self, 'url', self.url.rstrip('/'))

    def __repr__(self) -> str:
        return (
            f"ConnectionContext(url={self.url!r}, user_id={self.user_id!r}, "
            f"version={self.version!r}, tls_skip_verify={self.tls_skip_verify})"
        )


def parse_server_url(server_url: str) -> Tuple[str, str]:
    """
    Extract host and port from a Chef server URL.

    Args:
        server_url: URL such as https://chef.example.com/organizations/acme

    Returns:
        tuple: (host, port); the port is derived from the scheme when absent

    Raises:
        InvalidUrlError: If the URL cannot be parsed or the scheme has no
            default port
        InvalidHostFormatError: If the host/port part is malformed
    """
    try:
        parsed = urlparse(server_url)
    except (ValueError, TypeError) as e:
        raise InvalidUrlError(f"Invalid server URL {server_url!r}: {e}", details={"url": server_url}) from e

    if not parsed.scheme or not parsed.netloc:
        raise InvalidUrlError(f"Invalid server URL format: {server_url}", details={"url": server_url})

    try:
        port = parsed.port
    except ValueError as e:
        raise InvalidHostFormatError(
            f"Invalid host format: {parsed.netloc}",
            details={"url": server_url}
        ) from e

    host = parsed.hostname
    if not host:
        raise InvalidHostFormatError(f"Invalid host format: {parsed.netloc}", details={"url": server_url})

    if port is not None:
        return host, str(port)

    scheme = parsed.scheme.lower()
    if scheme not in DEFAULT_PORTS:
        raise InvalidUrlError(
            f"Invalid http scheme: {parsed.scheme}",
            "INVALID_SCHEME",
            {"url": server_url, "scheme": parsed.scheme}
        )
    return host, DEFAULT_PORTS[scheme]


def _resolve_key(key: Union[str, bytes, os.PathLike, RSAPrivateKey]) -> RSAPrivateKey:
    if isinstance(key, RSAPrivateKey):
        return key
    return load_key(key)


def connect_credentials(
    host: str,
    port: str,
    version: str,
    user_id: str,
    key: Union[str, bytes, os.PathLike, RSAPrivateKey],
    tls_skip_verify: bool = False
) -> ConnectionContext:
    """
    Build a connection from explicit host and port.

    Args:
        host: Server host name
        port: Server port; 443 maps to https://host, 80 to http://host,
            anything else to https://host:port
        version: Value sent as X-Chef-Version
        user_id: Client or user name
        key: Inline PEM text, path to a PEM file, or a loaded key
        tls_skip_verify: Disable TLS certificate verification

    Returns:
        ConnectionContext: Resolved connection

    Raises:
        KeyParseError: If the key cannot be loaded
    """
    port = str(port)
    if port == '443':
        url = f"https://{host}"
    elif port == '80':
        url = f"http://{host}"
    else:
        url = f"https://{host}:{port}"

    context = ConnectionContext(
        host=host,
        port=port,
        url=url,
        version=version,
        user_id=user_id,
        key=_resolve_key(key),
        tls_skip_verify=tls_skip_verify,
    )
    logger.info(f"Connected to Chef server {context.url} as {user_id}")
    return context


def connect_url(
    server_url: str,
    version: str,
    user_id: str,
    key: Union[str, bytes, os.PathLike, RSAPrivateKey],
    tls_skip_verify: bool = False
) -> ConnectionContext:
    """
    Build a connection from a Chef server URL.

    Args:
        server_url: Chef server URL, optionally including an organization path
        version: Value sent as X-Chef-Version
        user_id: Client or user name
        key: Inline PEM text, path to a PEM file, or a loaded key
        tls_skip_verify: Disable TLS certificate verification

    Returns:
        ConnectionContext: Resolved connection

    Raises:
        InvalidUrlError: If the URL is not usable
        KeyParseError: If the key cannot be loaded
    """
    host, port = parse_server_url(server_url)
    context = ConnectionContext(
        host=host,
        port=port,
        url=server_url,
        version=version,
        user_id=user_id,
        key=_resolve_key(key),
        tls_skip_verify=tls_skip_verify,
    )
    logger.info(f"Connected to Chef server {context.url} as {user_id}")
    return context
