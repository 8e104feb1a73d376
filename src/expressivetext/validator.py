"""Syntactic validation of emails, IP addresses, URLs, dates and numbers."""

import re
import logging
from datetime import datetime
from typing import Any, Optional, Union

from dateutil import parser as date_parser

from expressivetext.models import PatternKind, ValidationResult
from expressivetext.registry import PatternRegistry, default_registry

logger = logging.getLogger(__name__)

NUMERIC_PATTERN = re.compile(r"^-[0-9]+$|^[0-9]+$")

_FIRST_DEFAULT = datetime(2000, 1, 1)
_SECOND_DEFAULT = datetime(2001, 2, 2)

VALIDATION_KINDS = ("email", "ip", "url", "date", "numeric")


class Validator:
    """
    Classifies strings against the patterns held by a PatternRegistry.

    Misses are reported as False and never raised. A malformed pattern in
    the registry raises PatternConfigurationError when it is first used.
    """

    def __init__(self, registry: Optional[PatternRegistry] = None) -> None:
        """
        Initialize validator.

        Args:
            registry: Registry to read patterns from. If None, the
                process-wide default registry is used.
        """
        self.registry = registry if registry is not None else default_registry

    def is_email(self, s: Any) -> bool:
        """Return True if ``s`` is an email address."""
        return self._search(PatternKind.EMAIL, s)

    def is_ip_address(self, s: Any) -> bool:
        """Return True if ``s`` contains a dotted-decimal IPv4 address."""
        return self._search(PatternKind.IP, s)

    def is_url(self, s: Any) -> bool:
        """
        Return True if ``s`` ends in a URL.

        The default pattern is anchored only at the end, so text before the
        scheme is accepted: "see http://example.com" is a URL.
        """
        return self._search(PatternKind.URL, s)

    @staticmethod
    def is_date(s: Any) -> bool:
        """
        Return True if ``s`` can be parsed as a date.

        The day and month must both come from ``s``; the year may be left
        out. Bare numbers ("1") and lone month names ("may") are rejected,
        as are time-only strings.
        """
        if not isinstance(s, str) or not s:
            return False
        try:
            first = date_parser.parse(s, default=_FIRST_DEFAULT)
            second = date_parser.parse(s, default=_SECOND_DEFAULT)
        except (ValueError, OverflowError):
            return False
        # A component filled in from the default differs between the two parses
        return first.month == second.month and first.day == second.day

    @staticmethod
    def is_numeric(s: Any) -> bool:
        """Return True if ``s`` is an optionally negative run of digits."""
        if not isinstance(s, str):
            return False
        return NUMERIC_PATTERN.search(s) is not None

    def validate(self, text: str, kind: Union[PatternKind, str]) -> ValidationResult:
        """
        Validate text against one kind.

        Args:
            text: Text to validate
            kind: One of email, ip, url, date, numeric

        Returns:
            ValidationResult indicating if text is valid

        Raises:
            ValueError: If kind is unknown
        """
        kind_name = kind.value if isinstance(kind, PatternKind) else kind
        checks = {
            "email": self.is_email,
            "ip": self.is_ip_address,
            "url": self.is_url,
            "date": self.is_date,
            "numeric": self.is_numeric,
        }
        if kind_name not in checks:
            raise ValueError(f"Unknown validation kind: {kind_name}")

        return ValidationResult(text=text, kind=kind_name, is_valid=checks[kind_name](text))

    def _search(self, kind: PatternKind, s: Any) -> bool:
        if not isinstance(s, str) or not s:
            return False
        return self.registry.compiled(kind).search(s) is not None


_default_validator = Validator()


def is_email(s: Any) -> bool:
    """Check ``s`` against the process-wide email pattern."""
    return _default_validator.is_email(s)


def is_ip_address(s: Any) -> bool:
    """Check ``s`` against the process-wide IP pattern."""
    return _default_validator.is_ip_address(s)


def is_url(s: Any) -> bool:
    """Check ``s`` against the process-wide URL pattern."""
    return _default_validator.is_url(s)


def is_date(s: Any) -> bool:
    return Validator.is_date(s)


def is_numeric(s: Any) -> bool:
    return Validator.is_numeric(s)
