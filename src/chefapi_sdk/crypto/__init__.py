"""
Cryptographic operations for Chef API Python SDK
"""

from .rsa_key import (
    RSAPrivateKey,
    CRTPrecomputed,
    CRTValue,
    precompute,
    from_private_numbers,
    key_from_string,
    key_from_file,
    is_pem_key,
    load_key,
)

from .private_encrypt import (
    private_encrypt,
    public_decrypt,
    max_content_length,
)

__all__ = [
    # Key material
    'RSAPrivateKey',
    'CRTPrecomputed',
    'CRTValue',
    'precompute',
    'from_private_numbers',
    'key_from_string',
    'key_from_file',
    'is_pem_key',
    'load_key',
    # Raw RSA transform
    'private_encrypt',
    'public_decrypt',
    'max_content_length',
]
