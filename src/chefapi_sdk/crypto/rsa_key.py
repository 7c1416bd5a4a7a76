"""
RSA private key loading for Chef API Python SDK

This module parses PEM-encoded RSA private keys (client keys issued by the
Chef server) into an immutable representation that exposes the raw integers
needed for the private-key transform, including the Chinese Remainder
Theorem values used to accelerate it.
"""

import os
import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ..exceptions import KeyParseError

logger = logging.getLogger(__name__)

PEM_BEGIN_MARKER = "-----BEGIN"
PEM_KEY_SUFFIX = "PRIVATE KEY-----"


@dataclass(frozen=True)
class CRTValue:
    """
    CRT values for a prime beyond the first two of a multi-prime key.

    Attributes:
        exp: d mod (prime - 1)
        coeff: R^-1 mod prime
        r: product of all preceding primes
    """
    exp: int
    coeff: int
    r: int


@dataclass(frozen=True)
class CRTPrecomputed:
    """
    Precomputed CRT values of an RSA private key.

    Attributes:
        dp: d mod (p - 1)
        dq: d mod (q - 1)
        qinv: q^-1 mod p
        crt_values: values for each additional prime, in prime order
    """
    dp: int
    dq: int
    qinv: int
    crt_values: Tuple[CRTValue, ...] = ()


@dataclass(frozen=True)
class RSAPrivateKey:
    """
    RSA private key as raw integers.

    Attributes:
        n: Modulus
        e: Public exponent
        d: Private exponent
        primes: Prime factors of n (at least two)
        precomputed: CRT values, or None to force plain exponentiation
    """
    n: int
    e: int
    d: int
    primes: Tuple[int, ...]
    precomputed: Optional[CRTPrecomputed] = None

    def __post_init__(self):
        """Validate key structure after initialization"""
        if self.n <= 0 or self.d <= 0 or self.e <= 0:
            raise KeyParseError("RSA key integers must be positive", "INVALID_KEY_STRUCTURE")

        if len(self.primes) < 2:
            raise KeyParseError("RSA key must have at least two prime factors", "INVALID_KEY_STRUCTURE")

        product = 1
        for prime in self.primes:
            product *= prime
        if product != self.n:
            raise KeyParseError("RSA prime factors do not match modulus", "INVALID_KEY_STRUCTURE")

        if self.precomputed is not None and len(self.precomputed.crt_values) != len(self.primes) - 2:
            raise KeyParseError(
                "CRT values do not match the number of prime factors",
                "INVALID_KEY_STRUCTURE"
            )

    @property
    def size_in_bytes(self) -> int:
        """Byte length of the modulus (k)."""
        return (self.n.bit_length() + 7) // 8

    @property
    def has_crt(self) -> bool:
        return self.precomputed is not None

    def without_crt(self) -> "RSAPrivateKey":
        """Return the same key with the CRT values withheld."""
        return replace(self, precomputed=None)

    def __repr__(self) -> str:
        # Never expose private integers
        return f"RSAPrivateKey(bits={self.n.bit_length()}, primes={len(self.primes)}, crt={self.has_crt})"


def precompute(n: int, d: int, primes: Tuple[int, ...]) -> CRTPrecomputed:
    """
    Compute CRT values for a key with two or more primes.

    Args:
        n: Modulus
        d: Private exponent
        primes: Prime factors of n

    Returns:
        CRTPrecomputed: Values for CRT-accelerated exponentiation
    """
    p, q = primes[0], primes[1]
    crt_values = []
    r = p * q
    for prime in primes[2:]:
        crt_values.append(CRTValue(
            exp=d % (prime - 1),
            coeff=pow(r, -1, prime),
            r=r,
        ))
        r *= prime

    return CRTPrecomputed(
        dp=d % (p - 1),
        dq=d % (q - 1),
        qinv=pow(q, -1, p),
        crt_values=tuple(crt_values),
    )


def from_private_numbers(private_key: rsa.RSAPrivateKey) -> RSAPrivateKey:
    """
    Convert a cryptography RSA private key into an RSAPrivateKey.

    Args:
        private_key: Key object from the cryptography package

    Returns:
        RSAPrivateKey: Raw key with CRT values
    """
    numbers = private_key.private_numbers()
    public = numbers.public_numbers
    return RSAPrivateKey(
        n=public.n,
        e=public.e,
        d=numbers.d,
        primes=(numbers.p, numbers.q),
        precomputed=CRTPrecomputed(
            dp=numbers.dmp1,
            dq=numbers.dmq1,
            qinv=numbers.iqmp,
        ),
    )


def key_from_string(key: Union[str, bytes]) -> RSAPrivateKey:
    """
    Parse a PEM-encoded RSA private key.

    Args:
        key: PEM text (PKCS#1 or PKCS#8, unencrypted)

    Returns:
        RSAPrivateKey: Parsed key

    Raises:
        KeyParseError: If the PEM block is missing or malformed, or the key
            is not an unencrypted RSA private key
    """
    if isinstance(key, str):
        key = key.encode("utf-8")

    if not isinstance(key, bytes):
        raise KeyParseError("Private key must be str or bytes", "INVALID_KEY_TYPE")

    try:
        parsed = serialization.load_pem_private_key(key, password=None)
    except TypeError as e:
        raise KeyParseError(
            "Private key is encrypted; only unencrypted client keys are supported",
            "ENCRYPTED_PRIVATE_KEY"
        ) from e
    except (ValueError, UnsupportedAlgorithm) as e:
        raise KeyParseError(f"Failed to parse PEM private key: {e}", "INVALID_PEM") from e

    if not isinstance(parsed, rsa.RSAPrivateKey):
        raise KeyParseError(
            f"Expected RSA private key, got {type(parsed).__name__}",
            "UNSUPPORTED_KEY_TYPE"
        )

    return from_private_numbers(parsed)


def key_from_file(path: Union[str, os.PathLike]) -> RSAPrivateKey:
    """
    Read and parse a PEM-encoded RSA private key file.

    Args:
        path: Path to the key file

    Returns:
        RSAPrivateKey: Parsed key

    Raises:
        KeyParseError: If the file cannot be read or parsed
    """
    path = os.path.expanduser(os.fspath(path))
    try:
        with open(path, "rb") as fh:
            content = fh.read()
    except OSError as e:
        raise KeyParseError(
            f"Failed to read private key file {path}: {e}",
            "KEY_FILE_UNREADABLE",
            {"path": path}
        ) from e

    logger.debug(f"Loaded private key material from {path}")
    return key_from_string(content)


def is_pem_key(value: Union[str, bytes]) -> bool:
    """Check whether value looks like inline PEM key material rather than a path."""
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    return PEM_BEGIN_MARKER in value and PEM_KEY_SUFFIX in value


def load_key(key_or_path: Union[str, bytes, os.PathLike]) -> RSAPrivateKey:
    """
    Load a private key given either inline PEM text or a file path.

    Args:
        key_or_path: PEM text, or path to a PEM file

    Returns:
        RSAPrivateKey: Parsed key
    """
    if isinstance(key_or_path, (str, bytes)) and is_pem_key(key_or_path):
        return key_from_string(key_or_path)
    return key_from_file(key_or_path)
