"""
Tests for the raw RSA private-key transform
"""

import pytest
from unittest.mock import patch

from chefapi_sdk.crypto.private_encrypt import (
    private_encrypt,
    public_decrypt,
    max_content_length,
)
from chefapi_sdk.exceptions import ContentTooLongError, SigningError


def expected_block(content: bytes, k: int) -> bytes:
    return b"\x00\x01" + b"\xff" * (k - len(content) - 3) + b"\x00" + content


class TestPrivateEncrypt:
    """Test RSA_private_encrypt compatible signing"""

    def test_public_exponent_recovers_padded_block(self, rsa_key):
        content = b"Method:GET\nX-Ops-UserId:tester"
        signature = private_encrypt(rsa_key, content)

        k = rsa_key.size_in_bytes
        recovered = pow(int.from_bytes(signature, "big"), rsa_key.e, rsa_key.n).to_bytes(k, "big")
        assert recovered == expected_block(content, k)

    def test_public_decrypt_round_trip(self, rsa_key):
        content = b"hello chef"
        assert public_decrypt(rsa_key, private_encrypt(rsa_key, content)) == content

    def test_deterministic(self, rsa_key):
        assert private_encrypt(rsa_key, b"abc") == private_encrypt(rsa_key, b"abc")

    def test_empty_content(self, rsa_key):
        signature = private_encrypt(rsa_key, b"")
        assert public_decrypt(rsa_key, signature) == b""

    def test_output_is_minimal_big_endian(self, rsa_key):
        signature = private_encrypt(rsa_key, b"x")
        assert len(signature) <= rsa_key.size_in_bytes
        assert signature[0] != 0

    def test_crt_matches_plain_exponentiation(self, rsa_key):
        for content in (b"", b"a", b"Method:POST", bytes(range(200))):
            assert private_encrypt(rsa_key, content) == private_encrypt(rsa_key.without_crt(), content)

    def test_multi_prime_crt_matches_plain_exponentiation(self, multi_prime_key):
        for content in (b"", b"chef", b"x" * max_content_length(multi_prime_key)):
            with_crt = private_encrypt(multi_prime_key, content)
            plain = private_encrypt(multi_prime_key.without_crt(), content)
            assert with_crt == plain
            assert public_decrypt(multi_prime_key, with_crt) == content

    def test_max_length_accepted(self, rsa_key):
        content = b"z" * (rsa_key.size_in_bytes - 11)
        assert max_content_length(rsa_key) == 245
        assert public_decrypt(rsa_key, private_encrypt(rsa_key, content)) == content

    def test_content_too_long(self, rsa_key):
        content = b"z" * (rsa_key.size_in_bytes - 10)
        with pytest.raises(ContentTooLongError) as exc_info:
            private_encrypt(rsa_key, content)
        assert exc_info.value.error_code == "CONTENT_TOO_LONG"
        assert exc_info.value.details["max_length"] == 245

    def test_content_too_long_is_signing_error(self, multi_prime_key):
        with pytest.raises(SigningError):
            private_encrypt(multi_prime_key, b"y" * 31)

    def test_block_not_below_modulus(self, rsa_key):
        oversized = b"\xff" * rsa_key.size_in_bytes
        with patch("chefapi_sdk.crypto.private_encrypt._encode_block", return_value=oversized):
            with pytest.raises(ContentTooLongError) as exc_info:
                private_encrypt(rsa_key, b"abc")
        assert exc_info.value.error_code == "MESSAGE_REPRESENTATIVE_OUT_OF_RANGE"

    def test_rejects_text(self, rsa_key):
        with pytest.raises(SigningError):
            private_encrypt(rsa_key, "not bytes")


class TestPublicDecrypt:
    """Test signature checking"""

    def test_garbage_signature(self, rsa_key):
        with pytest.raises(SigningError):
            public_decrypt(rsa_key, b"\x01\x02\x03")

    def test_out_of_range_signature(self, rsa_key):
        too_big = (rsa_key.n + 1).to_bytes(rsa_key.size_in_bytes + 1, "big")
        with pytest.raises(SigningError):
            public_decrypt(rsa_key, too_big)

    def test_signature_from_other_content(self, rsa_key):
        signature = private_encrypt(rsa_key, b"one")
        assert public_decrypt(rsa_key, signature) != b"two"
