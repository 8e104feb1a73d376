"""AES string encryption producing base64(iv || ciphertext)."""

import os
import logging
from typing import Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from expressivetext.exceptions import CipherFormatError, InvalidArgumentError
from expressivetext.models import BLOCK_SIZE, EncryptedBlob

logger = logging.getLogger(__name__)

VALID_KEY_SIZES = (16, 24, 32)


def _key_bytes(key: Optional[str], action: str) -> bytes:
    """
    Use the UTF-8 bytes of ``key`` directly as AES key material.

    No key derivation is applied, so the key must encode to 16, 24 or 32
    bytes.
    """
    if not key:
        raise InvalidArgumentError(
            f"Cannot {action} using an empty key. Please supply a key."
        )

    raw = key.encode("utf-8")
    if len(raw) not in VALID_KEY_SIZES:
        raise InvalidArgumentError(
            f"Key encodes to {len(raw)} bytes; AES keys must be 16, 24 or 32 bytes."
        )
    return raw


def encrypt_blob(plaintext: Optional[str], key: Optional[str]) -> EncryptedBlob:
    """
    Encrypt a string with AES-CBC and PKCS7 padding under a fresh random IV.

    Raises:
        InvalidArgumentError: If plaintext or key is empty, or the key has
            an invalid size
    """
    if not plaintext:
        raise InvalidArgumentError("An empty string value cannot be encrypted.")
    key_material = _key_bytes(key, "encrypt")

    iv = os.urandom(BLOCK_SIZE)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

    encryptor = Cipher(algorithms.AES(key_material), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()

    logger.debug(f"Encrypted {len(padded)} padded bytes")
    return EncryptedBlob(iv=iv, ciphertext=ciphertext)


def encrypt_with_aes(plaintext: Optional[str], key: Optional[str]) -> str:
    """
    Encrypt a string using the supplied key.

    Args:
        plaintext: Text to encrypt
        key: Key whose UTF-8 bytes are the AES key (16, 24 or 32 bytes)

    Returns:
        base64 of the 16-byte IV followed by the ciphertext

    Raises:
        InvalidArgumentError: If plaintext or key is empty, or the key has
            an invalid size
    """
    return encrypt_blob(plaintext, key).to_base64()


def decrypt_with_aes(encoded: Optional[str], key: Optional[str]) -> str:
    """
    Decrypt a value produced by encrypt_with_aes.

    Only the first 16-byte ciphertext block is decrypted. Plaintexts that
    fit in one block (15 UTF-8 bytes or fewer) come back whole; longer
    plaintexts come back as their first 16 bytes. A single-block blob must
    carry valid PKCS7 padding; the first block of a longer blob is returned
    as is. Bytes that do not decode as UTF-8 are replaced with U+FFFD.

    Args:
        encoded: base64(iv || ciphertext)
        key: Key used for encryption

    Returns:
        The decrypted text of the first block

    Raises:
        InvalidArgumentError: If encoded or key is empty, or the key has an
            invalid size
        CipherFormatError: If encoded is not base64, is too short, or its
            only block does not decrypt to valid padding (wrong key or
            corrupted value)
    """
    if not encoded:
        raise InvalidArgumentError("An empty string value cannot be decrypted.")
    key_material = _key_bytes(key, "decrypt")

    blob = EncryptedBlob.from_base64(encoded)
    decryptor = Cipher(algorithms.AES(key_material), modes.CBC(blob.iv)).decryptor()
    block = decryptor.update(blob.first_block) + decryptor.finalize()

    if len(blob.ciphertext) > BLOCK_SIZE:
        logger.debug(f"Decrypting first block of {len(blob.ciphertext)} ciphertext bytes")
        return _strip_padding(block, strict=False).decode("utf-8", errors="replace")

    return _strip_padding(block, strict=True).decode("utf-8", errors="replace")


def _strip_padding(block: bytes, strict: bool) -> bytes:
    """Remove PKCS7 padding; a block without valid padding is kept unless ``strict``."""
    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    try:
        return unpadder.update(block) + unpadder.finalize()
    except ValueError as e:
        if strict:
            raise CipherFormatError(
                "Decrypted block has invalid padding; the key is wrong or the value is corrupted"
            ) from e
        return block
