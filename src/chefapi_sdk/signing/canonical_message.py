"""
Canonical string construction for Chef request signatures

The string to sign is always five lines in a fixed order, joined by "\\n"
with no trailing newline:

    Method:GET
    Hashed Path:<base64 SHA-1 of path>
    X-Ops-Content-Hash:<base64 SHA-1 of body>
    X-Ops-Timestamp:2024-01-02T15:04:05Z
    X-Ops-UserId:<user id>
"""

from typing import Dict

from .types import (
    SigningInput,
    SigningErrorCodes,
)
from .utils import hash_and_base64
from ..exceptions import SigningError

CANONICAL_FIELDS = (
    "Method",
    "Hashed Path",
    "X-Ops-Content-Hash",
    "X-Ops-Timestamp",
    "X-Ops-UserId",
)


class CanonicalMessageBuilder:
    """
    Canonical string builder for sign version 1.0
    """

    def __init__(self, signing_input: SigningInput):
        self.signing_input = signing_input

    def build(self) -> str:
        """
        Build the canonical string for signing.

        Returns:
            str: Canonical string

        Raises:
            SigningError: If a value would break the line structure
        """
        for name in ("method", "timestamp", "user_id"):
            value = getattr(self.signing_input, name)
            if "\n" in value or "\r" in value:
                raise SigningError(
                    f"Line break not allowed in {name}",
                    SigningErrorCodes.CANONICAL_MESSAGE_FAILED,
                    {"field": name}
                )

        values = (
            self.signing_input.method,
            hash_and_base64(self.signing_input.path),
            self.content_hash(),
            self.signing_input.timestamp,
            self.signing_input.user_id,
        )
        return "\n".join(f"{name}:{value}" for name, value in zip(CANONICAL_FIELDS, values))

    def content_hash(self) -> str:
        """Hash of the request body, as sent in X-Ops-Content-Hash."""
        return hash_and_base64(self.signing_input.body)


def build_canonical_string(signing_input: SigningInput) -> str:
    """
    Build canonical string for signing.

    Args:
        signing_input: Values covered by the signature

    Returns:
        str: Canonical string
    """
    return CanonicalMessageBuilder(signing_input).build()


def parse_canonical_string(canonical_string: str) -> Dict[str, str]:
    """
    Split a canonical string back into its named fields.

    Args:
        canonical_string: String produced by build_canonical_string

    Returns:
        dict: Field name to value, in canonical order

    Raises:
        SigningError: If the string does not have the canonical layout
    """
    lines = canonical_string.split("\n")
    if len(lines) != len(CANONICAL_FIELDS):
        raise SigningError(
            f"Canonical string must have {len(CANONICAL_FIELDS)} lines, got {len(lines)}",
            SigningErrorCodes.CANONICAL_MESSAGE_FAILED
        )

    fields = {}
    for expected, line in zip(CANONICAL_FIELDS, lines):
        name, sep, value = line.partition(":")
        if not sep or name != expected:
            raise SigningError(
                f"Expected canonical field {expected!r}, got {line!r}",
                SigningErrorCodes.CANONICAL_MESSAGE_FAILED,
                {"expected": expected}
            )
        fields[name] = value
    return fields
