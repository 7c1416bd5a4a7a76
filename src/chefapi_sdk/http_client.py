"""
HTTP client for the Chef server API

This module provides an authenticated HTTP client for a Chef server. Every
request is signed with the connection's client key before it is sent.
"""

import json
import logging
import os
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urlencode

import requests
from requests.models import PreparedRequest

from .connection import ConnectionContext, DEFAULT_CHEF_VERSION, connect_url
from .crypto.rsa_key import RSAPrivateKey
from .exceptions import HttpStatusError, TransportError, ValidationError
from .signing.authorizer import RequestAuthorizer
from .signing.integration import SigningSession
from .signing.types import TimestampGenerator

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded'
JSON_CONTENT_TYPE = 'application/json'
USER_AGENT = 'Chef-API-Python-SDK'


class ChefClient:
    """
    HTTP client for communicating with a Chef server.

    Request parameters for GET are sent on the query string; for other
    methods they are sent as a form-encoded body, and that body is what the
    request signature covers.
    """

    def __init__(
        self,
        context: ConnectionContext,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
        timestamp_generator: Optional[TimestampGenerator] = None
    ):
        """
        Initialize the HTTP client.

        Args:
            context: Resolved connection parameters
            timeout: Request timeout in seconds
            session: Optional requests session to send through
            timestamp_generator: Optional clock for X-Ops-Timestamp
        """
        if timeout <= 0:
            raise ValidationError("Timeout must be positive")

        self.context = context
        self.timeout = timeout
        self.authorizer = RequestAuthorizer(
            context.key,
            context.user_id,
            context.version,
            timestamp_generator=timestamp_generator,
        )
        self.session = SigningSession(
            self.authorizer,
            session=session,
            verify=not context.tls_skip_verify,
            timeout=timeout,
        )
        self.session.session.headers.update({'User-Agent': USER_AGENT})

        if context.tls_skip_verify:
            logger.warning(f"TLS certificate verification disabled for {context.url}")
        logger.info(f"Initialized Chef HTTP client for server: {context.url}")

    def url_for(self, endpoint: str) -> str:
        """Absolute URL for an API endpoint."""
        return f"{self.context.url}/{endpoint.lstrip('/')}"

    def generate_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Mapping[str, str]] = None,
        json_body: Optional[Any] = None
    ) -> PreparedRequest:
        """
        Build a signed request without sending it.

        Args:
            method: HTTP method
            endpoint: API endpoint relative to the server URL
            params: Query (GET) or form body (other methods) parameters
            json_body: JSON document to send as the body instead of params

        Returns:
            PreparedRequest: Signed request

        Raises:
            SigningError: If the request cannot be signed
        """
        method = method.upper()
        kwargs: Dict[str, Any] = {}
        headers = {}

        if json_body is not None:
            kwargs['data'] = json.dumps(json_body)
            headers['Content-Type'] = JSON_CONTENT_TYPE
            if params:
                kwargs['params'] = dict(params)
        elif params:
            if method == 'GET':
                kwargs['params'] = dict(params)
            else:
                kwargs['data'] = urlencode(sorted(params.items()))
                headers['Content-Type'] = FORM_CONTENT_TYPE

        if headers:
            kwargs['headers'] = headers

        return self.session.prepare(method, self.url_for(endpoint), **kwargs)

    def do(self, prepared_request: PreparedRequest) -> requests.Response:
        """
        Send a signed request.

        Raises:
            TransportError: On network errors
        """
        logger.debug(f"Making {prepared_request.method} request to {prepared_request.url}")
        try:
            return self.session.send(prepared_request)
        except requests.exceptions.Timeout as e:
            raise TransportError(
                f"Request timeout after {self.timeout} seconds",
                "TIMEOUT",
                {"url": prepared_request.url}
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise TransportError(f"Connection error: {e}", "CONNECTION_ERROR", {"url": prepared_request.url}) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request failed: {e}", details={"url": prepared_request.url}) from e

    def make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Mapping[str, str]] = None,
        json_body: Optional[Any] = None
    ) -> requests.Response:
        """Sign and send a request."""
        return self.do(self.generate_request(method, endpoint, params, json_body))

    def get(self, endpoint: str) -> requests.Response:
        """Authenticated GET request."""
        return self.make_request('GET', endpoint)

    def get_with_params(self, endpoint: str, params: Mapping[str, str]) -> requests.Response:
        """Authenticated GET request with query string parameters."""
        return self.make_request('GET', endpoint, params)

    def post(
        self,
        endpoint: str,
        params: Optional[Mapping[str, str]] = None,
        json_body: Optional[Any] = None
    ) -> requests.Response:
        """Authenticated POST request."""
        return self.make_request('POST', endpoint, params, json_body)

    def put(
        self,
        endpoint: str,
        params: Optional[Mapping[str, str]] = None,
        json_body: Optional[Any] = None
    ) -> requests.Response:
        """Authenticated PUT request."""
        return self.make_request('PUT', endpoint, params, json_body)

    def delete(self, endpoint: str, params: Optional[Mapping[str, str]] = None) -> requests.Response:
        """Authenticated DELETE request."""
        return self.make_request('DELETE', endpoint, params)

    def close(self):
        """Close the HTTP session."""
        self.session.close()
        logger.debug("HTTP session closed")

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def response_body(response: requests.Response) -> bytes:
    """
    Return the body of a successful response.

    Args:
        response: Response from the Chef server

    Returns:
        bytes: Raw response body

    Raises:
        HttpStatusError: If the status code is not 2xx
    """
    if not 200 <= response.status_code < 300:
        status_text = f"{response.status_code} {response.reason or ''}".strip()
        raise HttpStatusError(
            f"Server request failed: {status_text}",
            http_status=response.status_code,
            status_text=status_text,
            details={'url': response.url}
        )
    return response.content


def create_client(
    server_url: str,
    user_id: str,
    key: Union[str, bytes, os.PathLike, RSAPrivateKey],
    version: str = DEFAULT_CHEF_VERSION,
    tls_skip_verify: bool = False,
    timeout: float = 30.0
) -> ChefClient:
    """
    Create a Chef HTTP client from connection parameters.

    Args:
        server_url: Chef server URL
        user_id: Client or user name
        key: Inline PEM text, path to a PEM file, or a loaded key
        version: Value sent as X-Chef-Version
        tls_skip_verify: Disable TLS certificate verification
        timeout: Request timeout in seconds

    Returns:
        ChefClient: Configured HTTP client
    """
    context = connect_url(server_url, version, user_id, key, tls_skip_verify=tls_skip_verify)
    return ChefClient(context, timeout=timeout)
