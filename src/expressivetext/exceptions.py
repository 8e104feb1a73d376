"""Exception types for expressive-text."""


class ExpressiveTextError(Exception):
    """Base class for all expressive-text errors."""


class InvalidArgumentError(ExpressiveTextError, ValueError):
    """A required argument was empty or missing."""


class PatternConfigurationError(ExpressiveTextError, ValueError):
    """An installed pattern could not be compiled."""

    def __init__(self, kind: str, pattern: str, reason: str) -> None:
        self.kind = kind
        self.pattern = pattern
        super().__init__(f"Failed to compile {kind} pattern: {reason}")


class CipherFormatError(ExpressiveTextError, ValueError):
    """Encrypted input is not valid base64 or is too short."""
