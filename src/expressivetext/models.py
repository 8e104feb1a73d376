"""Data models for expressive-text."""

import base64
import binascii
from dataclasses import dataclass
from enum import Enum

from expressivetext.exceptions import CipherFormatError

BLOCK_SIZE = 16


class PatternKind(str, Enum):
    """Categories of configurable validation patterns."""

    EMAIL = "email"
    IP = "ip"
    URL = "url"


@dataclass(frozen=True)
class PatternSpec:
    """Active pattern for one kind."""

    kind: PatternKind
    pattern: str


@dataclass(frozen=True)
class MatchSpan:
    """A located occurrence inside a string."""

    start: int
    length: int
    text: str

    @property
    def end(self) -> int:
        """Return the exclusive end offset."""
        return self.start + self.length

    @property
    def span(self) -> tuple[int, int]:
        """Return (start, end) tuple."""
        return (self.start, self.end)

    def shifted(self, offset: int) -> "MatchSpan":
        """Return a copy moved right by ``offset`` characters."""
        return MatchSpan(start=self.start + offset, length=self.length, text=self.text)

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class EncryptedBlob:
    """IV and ciphertext produced by one encryption call."""

    iv: bytes
    ciphertext: bytes

    def to_bytes(self) -> bytes:
        """Serialize as iv || ciphertext."""
        return self.iv + self.ciphertext

    def to_base64(self) -> str:
        """Serialize as base64(iv || ciphertext)."""
        return base64.b64encode(self.to_bytes()).decode("ascii")

    @property
    def first_block(self) -> bytes:
        """Return the first ciphertext block."""
        return self.ciphertext[:BLOCK_SIZE]

    @classmethod
    def from_base64(cls, encoded: str) -> "EncryptedBlob":
        """
        Parse a base64 blob. Whitespace and line breaks are ignored.

        Raises:
            CipherFormatError: If the input is not base64 or holds less than
                an IV plus one block
        """
        try:
            raw = base64.b64decode("".join(encoded.split()), validate=True)
        except (binascii.Error, ValueError) as e:
            raise CipherFormatError(f"Encrypted value is not valid base64: {e}") from e

        if len(raw) < 2 * BLOCK_SIZE:
            raise CipherFormatError(
                f"Encrypted value is {len(raw)} bytes, expected at least {2 * BLOCK_SIZE}"
            )

        return cls(iv=raw[:BLOCK_SIZE], ciphertext=raw[BLOCK_SIZE:])


@dataclass
class ValidationResult:
    """Result from a validate call."""

    text: str
    kind: str
    is_valid: bool
