"""
Shared fixtures for Chef API SDK tests
"""

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from chefapi_sdk.crypto.rsa_key import RSAPrivateKey, from_private_numbers, precompute

FIXED_TIMESTAMP = "2024-01-02T15:04:05Z"

# Mersenne primes, used to build a small three-prime key by hand
MERSENNE_PRIMES = (2 ** 89 - 1, 2 ** 107 - 1, 2 ** 127 - 1)


def build_multi_prime_key(primes=MERSENNE_PRIMES, e=65537) -> RSAPrivateKey:
    """RSA key with more than two primes and its CRT values."""
    n = 1
    lam = 1
    for prime in primes:
        n *= prime
        phi = prime - 1
        a, b = lam, phi
        while b:
            a, b = b, a % b
        lam = lam * phi // a
    d = pow(e, -1, lam)
    return RSAPrivateKey(n=n, e=e, d=d, primes=tuple(primes), precomputed=precompute(n, d, tuple(primes)))


@pytest.fixture(scope="session")
def crypto_key():
    """2048-bit key from the cryptography package"""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_key(crypto_key):
    return from_private_numbers(crypto_key)


@pytest.fixture(scope="session")
def pem_pkcs1(crypto_key):
    return crypto_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption()
    ).decode('ascii')


@pytest.fixture(scope="session")
def pem_pkcs8(crypto_key):
    return crypto_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    ).decode('ascii')


@pytest.fixture
def key_file(tmp_path, pem_pkcs1):
    path = tmp_path / "client.pem"
    path.write_text(pem_pkcs1)
    return path


@pytest.fixture(scope="session")
def multi_prime_key():
    return build_multi_prime_key()
