"""
Chef server request authorization

This module builds the X-Ops header set the Chef server requires on every
API request: the canonical string covering method, path, body, timestamp
and user id is signed with the client's RSA key and the base64 signature
is spread over numbered X-Ops-Authorization-N headers.
"""

import base64
import binascii
import logging
import re
from typing import Dict, List, Mapping, Optional, Union

from ..crypto.rsa_key import RSAPrivateKey
from ..crypto.private_encrypt import private_encrypt, public_decrypt
from ..exceptions import SigningError
from .types import (
    AuthorizationResult,
    HeaderSet,
    HttpMethod,
    RequestBody,
    SigningErrorCodes,
    SigningInput,
    TimestampGenerator,
    ACCEPT_JSON,
    AUTHORIZATION_HEADER_PREFIX,
    HEADER_ACCEPT,
    HEADER_CHEF_VERSION,
    HEADER_CONTENT_HASH,
    HEADER_SIGN,
    HEADER_TIMESTAMP,
    HEADER_USERID,
    SIGN_VERSION,
)
from .utils import (
    base64_block_encode,
    generate_timestamp,
    normalize_header_name,
    to_bytes,
    validate_timestamp,
    PerformanceTimer,
)
from .canonical_message import CanonicalMessageBuilder, build_canonical_string

logger = logging.getLogger(__name__)

SLOW_SIGNING_THRESHOLD_MS = 50
_AUTHORIZATION_HEADER_RE = re.compile(
    r'^' + re.escape(AUTHORIZATION_HEADER_PREFIX.lower()) + r'(\d+)$'
)


def _normalize_method(method: Union[str, HttpMethod]) -> str:
    if isinstance(method, HttpMethod):
        return method.value
    try:
        return HttpMethod(str(method).upper()).value
    except ValueError:
        raise SigningError(
            f"Unsupported HTTP method: {method}",
            SigningErrorCodes.INVALID_METHOD,
            {"method": str(method)}
        ) from None


class RequestAuthorizer:
    """
    Signs Chef API requests with a client key

    An authorizer only reads its key, so one instance can be shared by any
    number of threads issuing requests.
    """

    def __init__(
        self,
        key: RSAPrivateKey,
        user_id: str,
        version: str,
        timestamp_generator: Optional[TimestampGenerator] = None
    ):
        """
        Initialize the authorizer.

        Args:
            key: Client RSA private key
            user_id: Client or user name registered with the server
            version: Value for the X-Chef-Version header
            timestamp_generator: Optional clock returning RFC 3339 strings

        Raises:
            SigningError: If configuration is invalid
        """
        if not isinstance(key, RSAPrivateKey):
            raise SigningError("key must be an RSAPrivateKey", SigningErrorCodes.INVALID_REQUEST)
        if not user_id:
            raise SigningError("user_id cannot be empty", SigningErrorCodes.INVALID_REQUEST)

        self.key = key
        self.user_id = user_id
        self.version = version
        self.timestamp_generator = timestamp_generator or generate_timestamp

    def authorize(
        self,
        method: Union[str, HttpMethod],
        path: str,
        body: RequestBody = "",
        timestamp: Optional[str] = None
    ) -> AuthorizationResult:
        """
        Produce the authorization for a request.

        Args:
            method: HTTP method
            path: Request path (no query string)
            body: Serialized request body
            timestamp: Fixed RFC 3339 timestamp (defaults to the clock)

        Returns:
            AuthorizationResult: Headers, canonical string and signature lines

        Raises:
            SigningError: If signing fails (ContentTooLongError included)
        """
        timer = PerformanceTimer()

        try:
            if timestamp is None:
                timestamp = self.timestamp_generator()

            if not validate_timestamp(timestamp):
                raise SigningError(
                    f"Invalid timestamp: {timestamp}",
                    SigningErrorCodes.INVALID_TIMESTAMP,
                    {"timestamp": timestamp}
                )

            signing_input = SigningInput(
                method=_normalize_method(method),
                path=path,
                body=to_bytes(body),
                timestamp=timestamp,
                user_id=self.user_id,
            )

            builder = CanonicalMessageBuilder(signing_input)
            canonical_string = builder.build()
            content_hash = builder.content_hash()

            signature = private_encrypt(self.key, canonical_string.encode('utf-8'))
            signature_lines = tuple(base64_block_encode(signature))

            headers = {
                HEADER_ACCEPT: ACCEPT_JSON,
                HEADER_CHEF_VERSION: self.version,
                HEADER_TIMESTAMP: timestamp,
                HEADER_USERID: self.user_id,
                HEADER_SIGN: SIGN_VERSION,
                HEADER_CONTENT_HASH: content_hash,
            }
            headers.update(authorization_headers(signature_lines))

            elapsed_ms = timer.elapsed_ms()
            if elapsed_ms > SLOW_SIGNING_THRESHOLD_MS:
                logger.warning(
                    f"Signing operation took {elapsed_ms:.2f}ms (target: <{SLOW_SIGNING_THRESHOLD_MS}ms)"
                )
            logger.debug(f"Signed {signing_input.method} {path} as {self.user_id}")

            return AuthorizationResult(
                headers=headers,
                canonical_string=canonical_string,
                signature_lines=signature_lines,
            )

        except Exception as e:
            if isinstance(e, SigningError):
                raise

            raise SigningError(
                f"Request authorization failed: {e}",
                SigningErrorCodes.SIGNING_FAILED,
                {"original_error": str(e)}
            ) from e

    def headers(
        self,
        method: Union[str, HttpMethod],
        path: str,
        body: RequestBody = "",
        timestamp: Optional[str] = None
    ) -> HeaderSet:
        """Header set for a request; see authorize()."""
        return self.authorize(method, path, body, timestamp).headers


def authorization_headers(signature_lines) -> HeaderSet:
    """
    Flatten signature lines into numbered X-Ops-Authorization headers.

    Args:
        signature_lines: Ordered base64 lines

    Returns:
        dict: X-Ops-Authorization-1 .. X-Ops-Authorization-N
    """
    return {
        f"{AUTHORIZATION_HEADER_PREFIX}{index}": line
        for index, line in enumerate(signature_lines, start=1)
    }


def collect_signature_lines(headers: Mapping[str, str]) -> List[str]:
    """
    Gather numbered X-Ops-Authorization headers back into ordered lines.

    Header names are matched case-insensitively and ordered numerically.

    Args:
        headers: Request headers

    Returns:
        list: Signature lines in order

    Raises:
        SigningError: If no authorization headers are present or the
            numbering has a gap
    """
    numbered = {}
    for name, value in headers.items():
        match = _AUTHORIZATION_HEADER_RE.match(normalize_header_name(name))
        if match:
            numbered[int(match.group(1))] = value

    if not numbered:
        raise SigningError(
            "No X-Ops-Authorization headers present",
            SigningErrorCodes.MISSING_REQUIRED_HEADER
        )

    indexes = sorted(numbered)
    if indexes != list(range(1, len(indexes) + 1)):
        raise SigningError(
            "X-Ops-Authorization headers are not numbered contiguously from 1",
            SigningErrorCodes.INVALID_HEADERS,
            {"indexes": indexes}
        )

    return [numbered[i] for i in indexes]


def verify_authorization(
    key: RSAPrivateKey,
    headers: Mapping[str, str],
    method: Union[str, HttpMethod],
    path: str,
    body: RequestBody = ""
) -> bool:
    """
    Check request headers the way the Chef server does.

    Args:
        key: Key whose public half is used for the check
        headers: Headers produced for the request
        method: HTTP method of the request
        path: Request path
        body: Request body

    Returns:
        bool: True if the signature covers exactly this request

    Raises:
        SigningError: If required headers are missing or malformed
    """
    lowered: Dict[str, str] = {normalize_header_name(k): v for k, v in headers.items()}
    for required in (HEADER_TIMESTAMP, HEADER_USERID):
        if required not in lowered:
            raise SigningError(
                f"Required header missing: {required}",
                SigningErrorCodes.MISSING_REQUIRED_HEADER,
                {"header": required}
            )

    lines = collect_signature_lines(headers)
    try:
        signature = base64.b64decode("".join(lines), validate=True)
    except binascii.Error as e:
        raise SigningError(
            f"Authorization headers are not valid base64: {e}",
            SigningErrorCodes.INVALID_SIGNATURE
        ) from e

    expected = build_canonical_string(SigningInput(
        method=_normalize_method(method),
        path=path,
        body=to_bytes(body),
        timestamp=lowered[HEADER_TIMESTAMP],
        user_id=lowered[HEADER_USERID],
    ))

    try:
        recovered = public_decrypt(key, signature)
    except SigningError as e:
        logger.debug(f"Signature check failed: {e}")
        return False

    return recovered == expected.encode('utf-8')


def generate_request_headers(
    key: RSAPrivateKey,
    method: Union[str, HttpMethod],
    path: str,
    body: RequestBody,
    user_id: str,
    version: str,
    timestamp: Optional[str] = None
) -> HeaderSet:
    """
    Build the full Chef header set for a request.

    Args:
        key: Client RSA private key
        method: HTTP method
        path: Request path
        body: Serialized request body
        user_id: Client or user name
        version: Value for X-Chef-Version
        timestamp: Fixed RFC 3339 timestamp (current time if None)

    Returns:
        dict: Ordered header set
    """
    authorizer = RequestAuthorizer(key, user_id, version)
    return authorizer.headers(method, path, body, timestamp)
