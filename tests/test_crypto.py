"""Tests for AES string encryption."""

import base64

import pytest
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from expressivetext import EncryptedBlob, decrypt_with_aes, encrypt_with_aes
from expressivetext.crypto import encrypt_blob
from expressivetext.exceptions import CipherFormatError, InvalidArgumentError

KEY = "0123456789abcdef"


def _full_decrypt(encoded: str, key: str) -> str:
    """Decrypt every block, for checking the wire format."""
    raw = base64.b64decode(encoded)
    decryptor = Cipher(algorithms.AES(key.encode("utf-8")), modes.CBC(raw[:16])).decryptor()
    padded = decryptor.update(raw[16:]) + decryptor.finalize()
    unpadder = padding.PKCS7(128).unpadder()
    return (unpadder.update(padded) + unpadder.finalize()).decode("utf-8")


def _first_block_padding_valid(encoded: str, key: str) -> bool:
    """Check whether the first block decrypts to valid PKCS7 padding under ``key``."""
    raw = base64.b64decode(encoded)
    decryptor = Cipher(algorithms.AES(key.encode("utf-8")), modes.CBC(raw[:16])).decryptor()
    block = decryptor.update(raw[16:32]) + decryptor.finalize()
    unpadder = padding.PKCS7(128).unpadder()
    try:
        unpadder.update(block) + unpadder.finalize()
    except ValueError:
        return False
    return True


class TestEncrypt:
    """Tests for encryption."""

    def test_blob_layout(self):
        raw = base64.b64decode(encrypt_with_aes("Hello, World!", KEY))
        assert len(raw) == 32

        raw = base64.b64decode(encrypt_with_aes("x" * 20, KEY))
        assert len(raw) == 16 + 32

    def test_full_block_gets_padding_block(self):
        raw = base64.b64decode(encrypt_with_aes("0123456789ABCDEF", KEY))
        assert len(raw) == 16 + 32

    def test_ciphertext_covers_whole_plaintext(self):
        plaintext = "The quick brown fox jumps over the lazy dog"
        assert _full_decrypt(encrypt_with_aes(plaintext, KEY), KEY) == plaintext

    def test_fresh_iv_per_call(self):
        first = encrypt_blob("Hello", KEY)
        second = encrypt_blob("Hello", KEY)

        assert len(first.iv) == 16
        assert first.iv != second.iv
        assert first.to_base64() != second.to_base64()

    @pytest.mark.parametrize("key", ["k" * 24, "k" * 32])
    def test_longer_keys(self, key):
        assert decrypt_with_aes(encrypt_with_aes("Hello", key), key) == "Hello"

    @pytest.mark.parametrize("plaintext", ["", None])
    def test_empty_plaintext(self, plaintext):
        with pytest.raises(InvalidArgumentError, match="cannot be encrypted"):
            encrypt_with_aes(plaintext, KEY)

    @pytest.mark.parametrize("key", ["", None])
    def test_empty_key(self, key):
        with pytest.raises(InvalidArgumentError, match="empty key"):
            encrypt_with_aes("Hello", key)

    def test_bad_key_size(self):
        with pytest.raises(InvalidArgumentError, match="16, 24 or 32"):
            encrypt_with_aes("Hello", "mykey")


class TestDecrypt:
    """Tests for first-block decryption."""

    @pytest.mark.parametrize("plaintext", ["Hello, World!", "a", "123456789012345", "héllo"])
    def test_single_block_roundtrip(self, plaintext):
        assert decrypt_with_aes(encrypt_with_aes(plaintext, KEY), KEY) == plaintext

    def test_full_block_roundtrip(self):
        plaintext = "0123456789ABCDEF"
        assert decrypt_with_aes(encrypt_with_aes(plaintext, KEY), KEY) == plaintext

    def test_long_plaintext_truncated_to_first_block(self):
        plaintext = "The quick brown fox jumps over the lazy dog"
        assert decrypt_with_aes(encrypt_with_aes(plaintext, KEY), KEY) == "The quick brown "

    def test_decrypts_externally_built_blob(self):
        iv = bytes(range(16))
        padder = padding.PKCS7(128).padder()
        padded = padder.update(b"interop") + padder.finalize()
        encryptor = Cipher(algorithms.AES(KEY.encode("utf-8")), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        encoded = base64.b64encode(iv + ciphertext).decode("ascii")

        assert decrypt_with_aes(encoded, KEY) == "interop"

    @pytest.mark.parametrize("encoded", ["", None])
    def test_empty_input(self, encoded):
        with pytest.raises(InvalidArgumentError):
            decrypt_with_aes(encoded, KEY)

    def test_empty_key(self):
        with pytest.raises(InvalidArgumentError):
            decrypt_with_aes(encrypt_with_aes("Hello", KEY), "")

    def test_not_base64(self):
        with pytest.raises(CipherFormatError):
            decrypt_with_aes("!!! not base64 !!!", KEY)

    def test_truncated_blob(self):
        encoded = base64.b64encode(b"x" * 20).decode("ascii")
        with pytest.raises(CipherFormatError):
            decrypt_with_aes(encoded, KEY)

    def test_wrong_key_single_block(self):
        wrong_key = "fedcba9876543210"
        # Skip the rare blob whose wrong-key block happens to end in valid padding
        encoded = encrypt_with_aes("Hello", KEY)
        while _first_block_padding_valid(encoded, wrong_key):
            encoded = encrypt_with_aes("Hello", KEY)

        with pytest.raises(CipherFormatError, match="invalid padding"):
            decrypt_with_aes(encoded, wrong_key)

    def test_unpadded_single_block(self):
        iv = bytes(16)
        encryptor = Cipher(algorithms.AES(KEY.encode("utf-8")), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(b"A" * 16) + encryptor.finalize()
        encoded = base64.b64encode(iv + ciphertext).decode("ascii")

        with pytest.raises(CipherFormatError):
            decrypt_with_aes(encoded, KEY)

    def test_wrapped_base64(self):
        encoded = encrypt_with_aes("Hello", KEY)
        wrapped = encoded[:20] + "\r\n" + encoded[20:] + "\n"

        assert decrypt_with_aes(wrapped, KEY) == "Hello"


class TestEncryptedBlob:
    """Tests for blob serialization."""

    def test_parse(self):
        blob = EncryptedBlob(iv=b"i" * 16, ciphertext=b"c" * 32)
        parsed = EncryptedBlob.from_base64(blob.to_base64())

        assert parsed == blob
        assert parsed.first_block == b"c" * 16
        assert parsed.to_bytes() == b"i" * 16 + b"c" * 32
