"""
Utility functions for request signing

This module provides the hashing, base64 block encoding and timestamp
helpers used to build Chef request signatures.
"""

import base64
import hashlib
import time
import re
from datetime import datetime, timezone
from typing import List, Optional, Union

from .types import BASE64_LINE_LENGTH, RequestBody

RFC3339_FORMAT = '%Y-%m-%dT%H:%M:%SZ'
RFC3339_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z$')


def to_bytes(content: RequestBody) -> bytes:
    """
    Normalize request content to bytes.

    Args:
        content: String (UTF-8 encoded), bytes, or None (empty)

    Returns:
        bytes: Content bytes
    """
    if content is None:
        return b""
    if isinstance(content, str):
        return content.encode('utf-8')
    if isinstance(content, (bytes, bytearray)):
        return bytes(content)
    raise TypeError(f"Content must be string, bytes, or None, got {type(content).__name__}")


def base64_block_encode(content: bytes) -> List[str]:
    """
    Base64-encode content and split it into 60 character lines.

    Args:
        content: Bytes to encode

    Returns:
        list: Consecutive chunks of the base64 text; the last chunk may be
            shorter, and empty input yields no chunks
    """
    encoded = base64.b64encode(content).decode('ascii')
    return [
        encoded[i:i + BASE64_LINE_LENGTH]
        for i in range(0, len(encoded), BASE64_LINE_LENGTH)
    ]


def digest_blocks(content: RequestBody) -> List[str]:
    """
    SHA-1 digest of content as base64 blocks.

    Args:
        content: Content to hash (strings are UTF-8 encoded)

    Returns:
        list: Base64 digest lines (a single 28 character line)
    """
    return base64_block_encode(hashlib.sha1(to_bytes(content)).digest())


def hash_and_base64(content: RequestBody) -> str:
    """
    SHA-1 digest of content as newline-joined base64 blocks.

    Args:
        content: Content to hash

    Returns:
        str: Value used for Hashed Path and X-Ops-Content-Hash
    """
    return "\n".join(digest_blocks(content))


def generate_timestamp() -> str:
    """
    Generate the current UTC time as an RFC 3339 string.

    Returns:
        str: Timestamp such as 2024-01-02T15:04:05Z
    """
    return format_rfc3339_timestamp()


def format_rfc3339_timestamp(value: Optional[Union[datetime, int, float]] = None) -> str:
    """
    Format a point in time as an RFC 3339 UTC string.

    Args:
        value: datetime (naive values are taken as UTC), Unix timestamp,
            or None for the current time

    Returns:
        str: RFC 3339 formatted timestamp string
    """
    if value is None:
        value = datetime.now(timezone.utc)
    elif isinstance(value, (int, float)):
        value = datetime.fromtimestamp(value, timezone.utc)
    elif value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)

    return value.astimezone(timezone.utc).strftime(RFC3339_FORMAT)


def validate_timestamp(timestamp: str) -> bool:
    """
    Validate that timestamp is an RFC 3339 UTC string with second precision.

    Args:
        timestamp: Timestamp to validate

    Returns:
        bool: True if timestamp is valid
    """
    if not isinstance(timestamp, str) or not RFC3339_PATTERN.match(timestamp):
        return False

    try:
        datetime.strptime(timestamp, RFC3339_FORMAT)
    except ValueError:
        return False
    return True


def normalize_header_name(name: str) -> str:
    """
    Normalize header name to lowercase for consistent processing.

    Args:
        name: Header name to normalize

    Returns:
        str: Lowercase header name
    """
    return name.lower().strip()


class PerformanceTimer:
    """Simple performance timer for monitoring signing operations."""

    def __init__(self):
        self.start_time = time.perf_counter()

    def elapsed_ms(self) -> float:
        """Get elapsed time in milliseconds."""
        return (time.perf_counter() - self.start_time) * 1000
