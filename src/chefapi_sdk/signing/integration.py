"""
HTTP client integration for request signing

This module plugs the Chef request authorizer into the requests library so
that outbound requests carry the X-Ops authentication headers.
"""

import logging
from typing import Optional, Union
from urllib.parse import urlsplit

import requests
from requests.models import PreparedRequest
from requests.sessions import Session

from .authorizer import RequestAuthorizer
from .types import SigningErrorCodes
from ..exceptions import SigningError

logger = logging.getLogger(__name__)


def sign_prepared_request(
    prepared_request: PreparedRequest,
    authorizer: RequestAuthorizer,
    timestamp: Optional[str] = None
) -> PreparedRequest:
    """
    Sign a prepared request.

    The signed path is the URL path without the query string and the signed
    body is exactly the body that will be sent.

    Args:
        prepared_request: Prepared request to sign
        authorizer: Authorizer holding the client key
        timestamp: Optional fixed timestamp

    Returns:
        PreparedRequest: Request with authorization headers added

    Raises:
        SigningError: If the body cannot be signed or signing fails
    """
    body: Union[str, bytes, None] = prepared_request.body
    if body is not None and not isinstance(body, (str, bytes)):
        raise SigningError(
            "Streaming request bodies cannot be signed",
            SigningErrorCodes.INVALID_REQUEST,
            {"body_type": type(body).__name__}
        )

    path = urlsplit(prepared_request.url).path or "/"
    headers = authorizer.headers(prepared_request.method, path, body or "", timestamp)
    prepared_request.headers.update(headers)
    return prepared_request


class SigningSession:
    """
    HTTP session wrapper with automatic request signing.

    This class wraps a requests.Session and signs every outgoing request.
    A request that cannot be signed is never sent.
    """

    def __init__(
        self,
        authorizer: RequestAuthorizer,
        session: Optional[Session] = None,
        verify: bool = True,
        timeout: Optional[float] = None
    ):
        """
        Initialize signing session.

        Args:
            authorizer: Authorizer used for every request
            session: Optional existing requests session to wrap
            verify: Whether to verify TLS certificates
            timeout: Default timeout in seconds
        """
        self.authorizer = authorizer
        self.session = session or requests.Session()
        self.verify = verify
        self.timeout = timeout

    def prepare(self, method: str, url: str, **kwargs) -> PreparedRequest:
        """
        Build and sign a request without sending it.

        Args:
            method: HTTP method
            url: Request URL
            **kwargs: Arguments accepted by requests.Request

        Returns:
            PreparedRequest: Signed request
        """
        request = requests.Request(method.upper(), url, **kwargs)
        prepared = self.session.prepare_request(request)
        sign_prepared_request(prepared, self.authorizer)
        logger.debug(f"Signed {prepared.method} request to {prepared.url}")
        return prepared

    def send(self, prepared_request: PreparedRequest, **kwargs) -> requests.Response:
        """
        Send an already signed request.

        Raises:
            requests.exceptions.RequestException: On transport failures
        """
        kwargs.setdefault('verify', self.verify)
        if self.timeout is not None:
            kwargs.setdefault('timeout', self.timeout)
        return self.session.send(prepared_request, **kwargs)

    def request(self, method: str, url: str, **kwargs) -> requests.Response:
        """
        Sign and send an HTTP request.

        Args:
            method: HTTP method
            url: Request URL
            **kwargs: Arguments accepted by requests.Request, plus
                ``timeout`` which is passed to send

        Returns:
            requests.Response: HTTP response
        """
        send_kwargs = {}
        if 'timeout' in kwargs:
            send_kwargs['timeout'] = kwargs.pop('timeout')
        return self.send(self.prepare(method, url, **kwargs), **send_kwargs)

    def get(self, url: str, **kwargs) -> requests.Response:
        """Make GET request."""
        return self.request('GET', url, **kwargs)

    def post(self, url: str, **kwargs) -> requests.Response:
        """Make POST request."""
        return self.request('POST', url, **kwargs)

    def put(self, url: str, **kwargs) -> requests.Response:
        """Make PUT request."""
        return self.request('PUT', url, **kwargs)

    def delete(self, url: str, **kwargs) -> requests.Response:
        """Make DELETE request."""
        return self.request('DELETE', url, **kwargs)

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def create_signing_session(
    authorizer: RequestAuthorizer,
    verify: bool = True,
    timeout: Optional[float] = None
) -> SigningSession:
    """
    Create a new signing session.

    Args:
        authorizer: Authorizer used for every request
        verify: Whether to verify TLS certificates
        timeout: Default timeout in seconds

    Returns:
        SigningSession: Configured signing session
    """
    if not verify:
        logger.warning("TLS certificate verification is disabled for this session")
    return SigningSession(authorizer, verify=verify, timeout=timeout)
