"""Text location primitives: delimited extraction and multi-value matching."""

import re
import logging
from typing import Iterable, Optional

from expressivetext.exceptions import InvalidArgumentError
from expressivetext.models import MatchSpan

logger = logging.getLogger(__name__)

DEFAULT_MAX_NARROWING_STEPS = 1000


def _span(match: "re.Match[str]", offset: int = 0) -> MatchSpan:
    start, end = match.span()
    return MatchSpan(start=start + offset, length=end - start, text=match.group(0))


class TextLocator:
    """
    Locates text by markers, prefixes, suffixes and words.

    All returned spans are offsets into the string passed by the caller.
    """

    def __init__(self, max_narrowing_steps: int = DEFAULT_MAX_NARROWING_STEPS) -> None:
        """
        Initialize locator.

        Args:
            max_narrowing_steps: Upper bound on re-narrowing passes made by
                find_between in recursive mode
        """
        if max_narrowing_steps < 1:
            raise InvalidArgumentError("max_narrowing_steps must be at least 1")
        self.max_narrowing_steps = max_narrowing_steps

    def find_between(
        self,
        s: str,
        start_marker: str,
        end_marker: str,
        recursive: bool = True,
    ) -> list[MatchSpan]:
        """
        Find text lying between a start and an end marker.

        Markers are matched literally. Each match runs from just after a
        start marker to just before the last end marker on the same line.

        With ``recursive`` set, a first match that still contains the start
        marker is searched again (suffixed with the end marker) until it is
        bounded by the last start marker before the end marker.

        Args:
            s: Text to search
            start_marker: Text that must precede the match
            end_marker: Text that must follow the match
            recursive: Narrow to the last start marker before the end marker

        Returns:
            All matches of the final search, in order
        """
        regex = re.compile(
            "(?<=" + re.escape(start_marker) + ").*(?=" + re.escape(end_marker) + ")"
        )
        spans = [_span(m) for m in regex.finditer(s)]

        if not recursive:
            return spans

        steps = 0
        while spans and start_marker in spans[0].text:
            if steps >= self.max_narrowing_steps:
                logger.warning(
                    f"find_between stopped after {steps} narrowing steps without converging"
                )
                break

            first = spans[0]
            candidate = first.text + end_marker
            narrowed = [_span(m, offset=first.start) for m in regex.finditer(candidate)]

            # Each pass must strictly shrink the first match
            if not narrowed or narrowed[0].length >= first.length:
                logger.warning(
                    f"find_between stopped narrowing at offset {first.start}: match no longer shrinks"
                )
                break

            spans = narrowed
            steps += 1

        return spans

    def starts_with_any(
        self,
        s: str,
        values: Optional[Iterable[str]],
        ignore_case: bool = True,
        culture: Optional[str] = None,
    ) -> bool:
        """
        Check whether any line of ``s`` starts with one of ``values``.

        Values are regular expression fragments joined as ``^v1|^v2``.
        Matching is multiline, so ``^`` binds at the start of every line,
        not only the start of the string. ``culture`` is accepted for
        interface parity; case folding is always Unicode-aware.

        Raises:
            InvalidArgumentError: If values is empty or None
        """
        values = self._require_values(values)
        pattern = "^" + "|^".join(values)
        return self._compile_any(pattern, ignore_case).search(s) is not None

    def ends_with_any(
        self,
        s: str,
        values: Optional[Iterable[str]],
        ignore_case: bool = True,
        culture: Optional[str] = None,
    ) -> bool:
        """
        Check whether any line of ``s`` ends with one of ``values``.

        Built as ``v1$|v2$`` with the same multiline caveat as
        starts_with_any.

        Raises:
            InvalidArgumentError: If values is empty or None
        """
        values = self._require_values(values)
        pattern = "$|".join(values) + "$"
        return self._compile_any(pattern, ignore_case).search(s) is not None

    @staticmethod
    def contains_words(s: str, *words: str) -> list[MatchSpan]:
        """
        Find every occurrence of any of ``words``, ignoring case.

        Words are matched literally and are not wrapped in word boundaries,
        so "test" also matches inside "testing".

        Raises:
            InvalidArgumentError: If no words are given
        """
        if not words:
            raise InvalidArgumentError("At least one word is required.")

        pattern = "|".join("(" + re.escape(word) + ")" for word in words)
        regex = re.compile(pattern, re.IGNORECASE | re.MULTILINE)
        return [_span(m) for m in regex.finditer(s)]

    @staticmethod
    def contains(s: str, sub: str, case_sensitive: bool = True) -> bool:
        """Check for a substring, optionally ignoring case."""
        if case_sensitive:
            return sub in s
        return sub.casefold() in s.casefold()

    @staticmethod
    def word_instance_count(s: str, word: str) -> int:
        """Count whole-word occurrences of ``word``, ignoring case."""
        return len(re.findall(r"\b" + re.escape(word) + r"\b", s, re.IGNORECASE))

    @staticmethod
    def word_count(s: str) -> int:
        """Count whitespace-separated words."""
        return len(re.findall(r"[^\s]+", s))

    @staticmethod
    def _require_values(values: Optional[Iterable[str]]) -> list[str]:
        values = list(values) if values is not None else []
        if not values:
            raise InvalidArgumentError("An empty values cannot be located.")
        return values

    @staticmethod
    def _compile_any(pattern: str, ignore_case: bool) -> "re.Pattern[str]":
        flags = re.MULTILINE
        if ignore_case:
            flags |= re.IGNORECASE
        try:
            return re.compile(pattern, flags)
        except re.error as e:
            raise InvalidArgumentError(f"Values do not form a valid pattern: {e}") from e


_default_locator = TextLocator()


def find_between(
    s: str, start_marker: str, end_marker: str, recursive: bool = True
) -> list[MatchSpan]:
    return _default_locator.find_between(s, start_marker, end_marker, recursive)


def starts_with_any(
    s: str, values: Optional[Iterable[str]], ignore_case: bool = True, culture: Optional[str] = None
) -> bool:
    return _default_locator.starts_with_any(s, values, ignore_case, culture)


def ends_with_any(
    s: str, values: Optional[Iterable[str]], ignore_case: bool = True, culture: Optional[str] = None
) -> bool:
    return _default_locator.ends_with_any(s, values, ignore_case, culture)


def contains_words(s: str, *words: str) -> list[MatchSpan]:
    return TextLocator.contains_words(s, *words)
