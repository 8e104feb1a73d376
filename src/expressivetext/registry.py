"""Pattern registry holding the active email, IP and URL patterns."""

import re
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Union

import yaml
import jsonschema

from expressivetext.exceptions import PatternConfigurationError
from expressivetext.models import PatternKind, PatternSpec

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schemas" / "pattern-schema.json"

DEFAULT_EMAIL_PATTERN = (
    r"^[\w!#$%&'*+\-/=?\^_`{|}~]+(\.[\w!#$%&'*+\-/=?\^_`{|}~]+)*"
    + "@"
    + r"((([\-\w]+\.)+[a-zA-Z]{2,4})|(([0-9]{1,3}\.){3}[0-9]{1,3}))\z"
)

DEFAULT_IP_PATTERN = (
    r"\b(25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.(25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)"
    r"\.(25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.(25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\b"
)

DEFAULT_URL_PATTERN = (
    r"(file|gopher|news|nntp|telnet|http|ftp|https|ftps|sftp):\/\/"
    + "?(([0-9a-z_!~*'().&=+$%-]+: )?[0-9a-z_!~*'().&=+$%-]+@)?"  # user@
    + r"(([0-9]{1,3}\.){3}[0-9]{1,3}"  # IP- 199.194.52.184
    + "|"  # IP or domain
    + r"([0-9a-z_!~*'()-]+\.)*"  # tertiary domain(s)- www.
    + r"([0-9a-z][0-9a-z-]{0,61})?[0-9a-z]"  # second level domain
    + r"(\.[a-z]{2,6})?)"  # optional first level domain- .com or .museum
    + "(:[0-9]{1,5})?"  # port- :80
    + "((/?)|"  # no slash needed without a file name
    + "(/[0-9a-z_!~*'().;?:@&=+$,%#-]+)+/?)$"
)

DEFAULT_PATTERNS: dict[PatternKind, str] = {
    PatternKind.EMAIL: DEFAULT_EMAIL_PATTERN,
    PatternKind.IP: DEFAULT_IP_PATTERN,
    PatternKind.URL: DEFAULT_URL_PATTERN,
}

# \z (absolute end) is written as \Z in Python; an escaped backslash before z is left alone
_ABSOLUTE_END = re.compile(r"(?<!\\)((?:\\\\)*)\\z")


def translate_pattern(pattern: str) -> str:
    """Rewrite PCRE/.NET-only anchors into their Python spelling."""
    return _ABSOLUTE_END.sub(r"\1\\Z", pattern)


@lru_cache(maxsize=128)
def _compile(pattern: str) -> "re.Pattern[str]":
    return re.compile(translate_pattern(pattern))


class PatternRegistry:
    """
    Registry of the active pattern per kind.

    Patterns are stored one attribute per kind and replaced whole, so a
    concurrent reader sees either the previous or the new pattern. There is
    no locking; callers needing a consistent batch should use snapshot().
    """

    def __init__(self, patterns: Optional[dict[PatternKind, str]] = None) -> None:
        """Initialize registry with the built-in defaults, then any overrides."""
        self._email: str = DEFAULT_EMAIL_PATTERN
        self._ip: str = DEFAULT_IP_PATTERN
        self._url: str = DEFAULT_URL_PATTERN
        self._version: int = 0
        for kind, pattern in (patterns or {}).items():
            self.set_pattern(kind, pattern)

    def get_pattern(self, kind: Union[PatternKind, str]) -> str:
        """Get the active pattern string for a kind."""
        kind = PatternKind(kind)
        if kind is PatternKind.EMAIL:
            return self._email
        if kind is PatternKind.IP:
            return self._ip
        return self._url

    def set_pattern(self, kind: Union[PatternKind, str], pattern: str) -> "PatternRegistry":
        """
        Replace the active pattern for a kind.

        The pattern is not checked here; a malformed pattern fails with
        PatternConfigurationError the first time it is matched.
        """
        kind = PatternKind(kind)
        if kind is PatternKind.EMAIL:
            self._email = pattern
        elif kind is PatternKind.IP:
            self._ip = pattern
        else:
            self._url = pattern

        self._version += 1
        logger.info(f"Replaced {kind.value} pattern (registry v{self._version})")
        return self

    def set_email_pattern(self, pattern: str) -> "PatternRegistry":
        return self.set_pattern(PatternKind.EMAIL, pattern)

    def set_ip_pattern(self, pattern: str) -> "PatternRegistry":
        return self.set_pattern(PatternKind.IP, pattern)

    def set_url_pattern(self, pattern: str) -> "PatternRegistry":
        return self.set_pattern(PatternKind.URL, pattern)

    def get_spec(self, kind: Union[PatternKind, str]) -> PatternSpec:
        """Get the active pattern as a PatternSpec."""
        kind = PatternKind(kind)
        return PatternSpec(kind=kind, pattern=self.get_pattern(kind))

    def compiled(self, kind: Union[PatternKind, str]) -> "re.Pattern[str]":
        """
        Compile the active pattern for a kind.

        Raises:
            PatternConfigurationError: If the pattern is not a valid regex
        """
        kind = PatternKind(kind)
        pattern = self.get_pattern(kind)
        try:
            compiled = _compile(pattern)
        except re.error as e:
            raise PatternConfigurationError(kind.value, pattern, str(e)) from e
        logger.debug(f"Using compiled {kind.value} pattern")
        return compiled

    def snapshot(self) -> dict[PatternKind, str]:
        """Return a point-in-time copy of all active patterns."""
        return {kind: self.get_pattern(kind) for kind in PatternKind}

    def reset(self) -> None:
        """Restore the built-in default patterns."""
        for kind, pattern in DEFAULT_PATTERNS.items():
            self.set_pattern(kind, pattern)

    @property
    def version(self) -> int:
        """Get current registry version (increments on changes)."""
        return self._version

    def __repr__(self) -> str:
        """String representation."""
        return f"PatternRegistry(version={self._version})"


default_registry = PatternRegistry()


def get_pattern(kind: Union[PatternKind, str]) -> str:
    """Get the active pattern from the process-wide registry."""
    return default_registry.get_pattern(kind)


def set_pattern(kind: Union[PatternKind, str], pattern: str) -> PatternRegistry:
    """Replace a pattern in the process-wide registry."""
    return default_registry.set_pattern(kind, pattern)


def load_registry(
    path: Optional[Union[str, Path]] = None,
    validate_schema: bool = True,
    validate_examples: bool = True,
) -> PatternRegistry:
    """
    Build a registry from a YAML pattern file.

    Kinds not listed in the file keep their built-in defaults.

    Args:
        path: YAML file to load. If None, returns a registry of defaults.
        validate_schema: Whether to validate against JSON schema
        validate_examples: Whether to validate examples against patterns

    Returns:
        PatternRegistry with loaded patterns

    Raises:
        FileNotFoundError: If pattern file not found
        ValueError: If pattern validation fails
    """
    registry = PatternRegistry()
    if path is None:
        return registry

    path = Path(path)
    logger.info(f"Loading patterns from {path}")
    data = _load_yaml_file(path)

    if validate_schema:
        _validate_schema(data)

    for entry in data.get("patterns", []):
        kind = PatternKind(entry["kind"])
        registry.set_pattern(kind, entry["pattern"])
        if validate_examples and "examples" in entry:
            _validate_examples(registry, kind, entry["examples"])

    logger.info(f"Loaded {len(data.get('patterns', []))} pattern overrides from {path}")
    return registry


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load YAML file."""
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _validate_schema(data: dict[str, Any]) -> None:
    """Validate pattern data against JSON schema."""
    with open(SCHEMA_PATH, "r", encoding="utf-8") as f:
        schema = yaml.safe_load(f)

    try:
        jsonschema.validate(data, schema)
    except jsonschema.ValidationError as e:
        raise ValueError(f"Pattern schema validation failed: {e.message}") from e


def _validate_examples(
    registry: PatternRegistry, kind: PatternKind, examples: dict[str, list[str]]
) -> None:
    """Validate pattern examples match/nomatch expectations."""
    compiled = registry.compiled(kind)
    errors = []

    for example in examples.get("match", []):
        if not compiled.search(example):
            errors.append(f"Example should match but doesn't: '{example}'")

    for example in examples.get("nomatch", []):
        if compiled.search(example):
            errors.append(f"Example should NOT match but does: '{example}'")

    if errors:
        raise ValueError(f"Pattern {kind.value} example validation failed:\n" + "\n".join(errors))

    logger.debug(f"Pattern {kind.value} examples validated successfully")
