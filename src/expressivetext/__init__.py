"""
expressive-text: pattern-driven validation, text location and string encryption.

This package provides a runtime-configurable registry of email, IP and URL
patterns, validators built on it, marker/prefix/suffix text location
primitives, and AES string encryption with a base64(iv || ciphertext) format.
"""

__version__ = "0.1.0"

from expressivetext.crypto import decrypt_with_aes, encrypt_with_aes
from expressivetext.exceptions import (
    CipherFormatError,
    ExpressiveTextError,
    InvalidArgumentError,
    PatternConfigurationError,
)
from expressivetext.locator import (
    TextLocator,
    contains_words,
    ends_with_any,
    find_between,
    starts_with_any,
)
from expressivetext.models import EncryptedBlob, MatchSpan, PatternKind, PatternSpec
from expressivetext.registry import (
    PatternRegistry,
    default_registry,
    get_pattern,
    load_registry,
    set_pattern,
)
from expressivetext.validator import (
    Validator,
    is_date,
    is_email,
    is_ip_address,
    is_numeric,
    is_url,
)

__all__ = [
    "PatternRegistry",
    "default_registry",
    "get_pattern",
    "set_pattern",
    "load_registry",
    "Validator",
    "is_email",
    "is_ip_address",
    "is_url",
    "is_date",
    "is_numeric",
    "TextLocator",
    "find_between",
    "starts_with_any",
    "ends_with_any",
    "contains_words",
    "encrypt_with_aes",
    "decrypt_with_aes",
    "PatternKind",
    "PatternSpec",
    "MatchSpan",
    "EncryptedBlob",
    "ExpressiveTextError",
    "InvalidArgumentError",
    "PatternConfigurationError",
    "CipherFormatError",
]
