"""
Chef API Python SDK - Request Signing Module

Chef server request authentication (X-Ops-Sign version 1.0): canonical
string construction, raw RSA signing and header assembly.
"""

from .types import (
    SigningInput,
    AuthorizationResult,
    HttpMethod,
    HeaderSet,
    TimestampGenerator,
    SIGN_VERSION,
    AUTHORIZATION_HEADER_PREFIX,
    BASE64_LINE_LENGTH,
)

from .authorizer import (
    RequestAuthorizer,
    authorization_headers,
    collect_signature_lines,
    verify_authorization,
    generate_request_headers,
)

from .canonical_message import (
    CanonicalMessageBuilder,
    build_canonical_string,
    parse_canonical_string,
)

from .utils import (
    base64_block_encode,
    digest_blocks,
    hash_and_base64,
    generate_timestamp,
    format_rfc3339_timestamp,
    validate_timestamp,
    normalize_header_name,
)

from .integration import (
    SigningSession,
    create_signing_session,
    sign_prepared_request,
)

# Public API exports
__all__ = [
    # Types
    'SigningInput',
    'AuthorizationResult',
    'HttpMethod',
    'HeaderSet',
    'TimestampGenerator',
    'SIGN_VERSION',
    'AUTHORIZATION_HEADER_PREFIX',
    'BASE64_LINE_LENGTH',
    # Authorization
    'RequestAuthorizer',
    'authorization_headers',
    'collect_signature_lines',
    'verify_authorization',
    'generate_request_headers',
    # Canonical string
    'CanonicalMessageBuilder',
    'build_canonical_string',
    'parse_canonical_string',
    # Utilities
    'base64_block_encode',
    'digest_blocks',
    'hash_and_base64',
    'generate_timestamp',
    'format_rfc3339_timestamp',
    'validate_timestamp',
    'normalize_header_name',
    # HTTP Integration
    'SigningSession',
    'create_signing_session',
    'sign_prepared_request',
]
