"""
Raw RSA private-key transform used by Chef request signing

The Chef server checks request signatures with OpenSSL's RSA_public_decrypt,
so the client must produce the output of RSA_private_encrypt: the content is
wrapped in a PKCS#1 v1.5 type 1 block (no DigestInfo, no hashing) and
exponentiated with the private key. A padded ``sign`` call from a crypto
library would add a DigestInfo prefix and is not interchangeable.
"""

import logging

from .rsa_key import RSAPrivateKey
from ..exceptions import ContentTooLongError, SigningError

logger = logging.getLogger(__name__)

# RFC 2313 section 8: data may be at most k - 11 octets
PKCS1_PADDING_OVERHEAD = 11
BLOCK_TYPE_PRIVATE = 0x01
PADDING_BYTE = 0xFF


def max_content_length(key: RSAPrivateKey) -> int:
    """Largest content (in bytes) that can be signed with key."""
    return key.size_in_bytes - PKCS1_PADDING_OVERHEAD


def _encode_block(content: bytes, k: int) -> bytes:
    # 00 01 FF .. FF 00 content
    t_len = len(content)
    em = bytearray(k)
    em[1] = BLOCK_TYPE_PRIVATE
    for i in range(2, k - t_len - 1):
        em[i] = PADDING_BYTE
    em[k - t_len:] = content
    return bytes(em)


def _decrypt_crt(key: RSAPrivateKey, c: int) -> int:
    pre = key.precomputed
    p, q = key.primes[0], key.primes[1]

    m = pow(c, pre.dp, p)
    m2 = pow(c, pre.dq, q)
    m = (m - m2) * pre.qinv % p
    m = m * q + m2

    for prime, values in zip(key.primes[2:], pre.crt_values):
        m2 = pow(c, values.exp, prime)
        m2 = (m2 - m) * values.coeff % prime
        m += m2 * values.r

    return m


def _int_to_bytes(value: int) -> bytes:
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def private_encrypt(key: RSAPrivateKey, content: bytes) -> bytes:
    """
    Apply the raw RSA private-key transform to content.

    Args:
        key: RSA private key
        content: Bytes to sign, at most k - 11 bytes for a k-byte modulus

    Returns:
        bytes: Minimal big-endian encoding of the result (leading zero
            bytes are dropped)

    Raises:
        ContentTooLongError: If content does not fit in the modulus
    """
    if not isinstance(content, (bytes, bytearray)):
        raise SigningError(
            f"Content must be bytes, got {type(content).__name__}",
            "INVALID_CONTENT_TYPE"
        )

    k = key.size_in_bytes
    limit = k - PKCS1_PADDING_OVERHEAD
    if len(content) > limit:
        raise ContentTooLongError(
            f"Data too long: {len(content)} bytes exceeds {limit} for a {k}-byte modulus",
            details={"length": len(content), "max_length": limit}
        )

    c = int.from_bytes(_encode_block(bytes(content), k), "big")
    if c >= key.n:
        raise ContentTooLongError(
            "Encoded block is not smaller than the modulus",
            "MESSAGE_REPRESENTATIVE_OUT_OF_RANGE",
            {"modulus_bits": key.n.bit_length()}
        )

    if key.has_crt:
        m = _decrypt_crt(key, c)
    else:
        m = pow(c, key.d, key.n)

    return _int_to_bytes(m)


def public_decrypt(key: RSAPrivateKey, signature: bytes) -> bytes:
    """
    Recover signed content with the public half of key.

    This is the check the server performs on X-Ops-Authorization headers.

    Args:
        key: RSA key (only n and e are used)
        signature: Output of private_encrypt

    Returns:
        bytes: The original content

    Raises:
        SigningError: If the signature does not decode to a type 1 block
    """
    k = key.size_in_bytes
    s = int.from_bytes(signature, "big")
    if s >= key.n:
        raise SigningError("Signature representative out of range", "INVALID_SIGNATURE")

    em = pow(s, key.e, key.n).to_bytes(k, "big")
    if em[0] != 0x00 or em[1] != BLOCK_TYPE_PRIVATE:
        raise SigningError("Signature block has wrong type", "INVALID_SIGNATURE")

    separator = em.find(b"\x00", 2)
    if separator < 0 or any(b != PADDING_BYTE for b in em[2:separator]):
        raise SigningError("Signature block has malformed padding", "INVALID_SIGNATURE")

    return em[separator + 1:]
