"""
Type definitions for request signing functionality

This module provides type definitions and data classes for the Chef
server's X-Ops request authentication protocol (sign version 1.0).
"""

from typing import Dict, Tuple, Optional, Union, Callable
from dataclasses import dataclass
from enum import Enum


class HttpMethod(str, Enum):
    """HTTP methods supported for signing"""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


# Wire constants
SIGN_VERSION = "version=1.0"
ACCEPT_JSON = "application/json"
AUTHORIZATION_HEADER_PREFIX = "X-Ops-Authorization-"
BASE64_LINE_LENGTH = 60

HEADER_ACCEPT = "accept"
HEADER_CHEF_VERSION = "x-chef-version"
HEADER_TIMESTAMP = "x-ops-timestamp"
HEADER_USERID = "x-ops-userid"
HEADER_SIGN = "x-ops-sign"
HEADER_CONTENT_HASH = "x-ops-content-hash"


@dataclass(frozen=True)
class SigningInput:
    """
    Values covered by a request signature

    Attributes:
        method: Upper-case HTTP method
        path: Request path as sent on the wire (without query string)
        body: Serialized request body ("" when there is none)
        timestamp: RFC 3339 UTC timestamp
        user_id: Client or user name the key belongs to
    """
    method: str
    path: str
    body: Union[str, bytes]
    timestamp: str
    user_id: str

    def __post_init__(self):
        """Validate signing input"""
        if not self.method:
            raise ValueError("Method cannot be empty")

        if not self.timestamp:
            raise ValueError("Timestamp cannot be empty")

        if not isinstance(self.body, (str, bytes)):
            raise ValueError("Body must be str or bytes")


@dataclass(frozen=True)
class AuthorizationResult:
    """
    Generated request authorization

    Attributes:
        headers: All headers that should be added to the request, in order
        canonical_string: The exact string that was signed
        signature_lines: Base64 signature split into 60-character lines
    """
    headers: Dict[str, str]
    canonical_string: str
    signature_lines: Tuple[str, ...]

    def __post_init__(self):
        """Validate authorization result"""
        if not self.signature_lines:
            raise ValueError("Signature cannot be empty")


class SigningErrorCodes:
    """Standard error codes for signing operations"""

    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_METHOD = "INVALID_METHOD"
    INVALID_TIMESTAMP = "INVALID_TIMESTAMP"
    INVALID_HEADERS = "INVALID_HEADERS"
    MISSING_REQUIRED_HEADER = "MISSING_REQUIRED_HEADER"

    SIGNING_FAILED = "SIGNING_FAILED"
    CANONICAL_MESSAGE_FAILED = "CANONICAL_MESSAGE_FAILED"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"


# Type aliases for convenience
TimestampGenerator = Callable[[], str]
HeaderSet = Dict[str, str]
RequestBody = Optional[Union[str, bytes]]
