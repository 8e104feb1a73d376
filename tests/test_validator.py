"""Tests for the validator."""

import pytest

from expressivetext import PatternRegistry, Validator
from expressivetext.exceptions import PatternConfigurationError
from expressivetext.models import PatternKind

GOOD_EMAILS = [
    "joe@home.org",
    "joe+pepe@home.org",
    "joe@joebob.name",
    "joe&bob@bob.com",
    "~joe@bob.com",
    "joe$@bob.com",
    "joe+bob@bob.com",
    "o'reilly@there.com",
    "joe@home.com",
    "joe.bob@home.com",
    "joe@his.home.com",
    "a@abc.org",
    "a@abc-xyz.org",
    "a@192.168.0.1",
    "a@10.1.100.1",
]

BAD_EMAILS = [
    "joe",
    "joe@home",
    "a@b.c",  # top-level label must be 2-4 characters
    "joe-bob[at]home.com",
    "joe@his.home.place",  # top-level label too long
    "joe.@bob.com",  # trailing dot in local part
    ".joe@bob.com",  # leading dot in local part
    "john..doe@bob.com",  # doubled dot in local part
    "john.doe@bob..com",  # doubled dot in domain
    "joe<>bob@bob.com",
    "joe@his.home.com.",
    "a@10.1.100.1a",
    "joe<>bob@bob.com\n",
    "joe<>bob@bob.com\r",
    "joe@home.org\n",
]


@pytest.fixture
def registry():
    """Create a private registry."""
    return PatternRegistry()


@pytest.fixture
def validator(registry):
    """Create validator instance."""
    return Validator(registry)


class TestEmail:
    """Tests for email validation."""

    @pytest.mark.parametrize("email", GOOD_EMAILS)
    def test_good_emails(self, validator, email):
        assert validator.is_email(email) is True

    @pytest.mark.parametrize("email", BAD_EMAILS)
    def test_bad_emails(self, validator, email):
        assert validator.is_email(email) is False

    def test_unicode_local_part(self, validator):
        assert validator.is_email("jöe@home.org") is True


class TestIPAddress:
    """Tests for IP address validation."""

    def test_plain_address(self, validator):
        assert validator.is_ip_address("192.168.1.1") is True

    def test_substring_counts(self, validator):
        assert validator.is_ip_address("foo 192.168.1.1 bar") is True

    def test_octet_range(self, validator):
        assert validator.is_ip_address("999.999.999.999") is False
        assert validator.is_ip_address("256.1.1.1") is False
        assert validator.is_ip_address("255.255.255.255") is True
        assert validator.is_ip_address("0.0.0.0") is True

    def test_too_few_octets(self, validator):
        assert validator.is_ip_address("10.0.1") is False

    def test_custom_pattern_applies_immediately(self, registry, validator):
        assert validator.is_ip_address("192.168.1.1") is True

        registry.set_pattern(PatternKind.IP, r"^10\.\d{1,3}\.\d{1,3}\.\d{1,3}$")

        assert validator.is_ip_address("192.168.1.1") is False
        assert validator.is_ip_address("10.0.0.1") is True

    def test_invalid_pattern_raises_on_use(self, registry, validator):
        registry.set_pattern(PatternKind.IP, "[0-9")

        with pytest.raises(PatternConfigurationError):
            validator.is_ip_address("10.0.0.1")


class TestUrl:
    """Tests for URL validation."""

    @pytest.mark.parametrize(
        "url",
        [
            "http://www.example.com",
            "https://example.com:8080/path/to/page",
            "ftp://192.168.0.1/file.txt",
            "https://user@example.com/",
            "sftp://files.example.org",
        ],
    )
    def test_valid_urls(self, validator, url):
        assert validator.is_url(url) is True

    @pytest.mark.parametrize(
        "url",
        [
            "not a url",
            "www.example.com",
            "http://example.com/a b",
            "mailto://example.com",
        ],
    )
    def test_invalid_urls(self, validator, url):
        assert validator.is_url(url) is False

    def test_only_end_is_anchored(self, validator):
        assert validator.is_url("junk http://example.com") is True
        assert validator.is_url("http://example.com junk") is False


class TestDateAndNumeric:
    """Tests for date and numeric checks."""

    @pytest.mark.parametrize("value", ["12/31/1971", "2024-01-15", "Jan 5 2020", "March 4"])
    def test_dates(self, validator, value):
        assert validator.is_date(value) is True

    @pytest.mark.parametrize("value", ["hello world", "", "banana", "1", "may", "10:30"])
    def test_not_dates(self, validator, value):
        assert validator.is_date(value) is False

    def test_numeric(self, validator):
        assert validator.is_numeric("123") is True
        assert validator.is_numeric("-42") is True
        assert validator.is_numeric("4.2") is False
        assert validator.is_numeric("12a") is False
        assert validator.is_numeric("") is False


class TestFailClosed:
    """Tests that bad input returns False instead of raising."""

    @pytest.mark.parametrize("value", ["", None, 42])
    def test_non_strings(self, validator, value):
        assert validator.is_email(value) is False
        assert validator.is_ip_address(value) is False
        assert validator.is_url(value) is False
        assert validator.is_date(value) is False
        assert validator.is_numeric(value) is False


class TestValidate:
    """Tests for validate dispatch."""

    def test_valid(self, validator):
        result = validator.validate("joe@home.org", "email")

        assert result.is_valid is True
        assert result.kind == "email"
        assert result.text == "joe@home.org"

    def test_pattern_kind(self, validator):
        assert validator.validate("10.0.0.1", PatternKind.IP).is_valid is True

    def test_invalid(self, validator):
        assert validator.validate("joe", "email").is_valid is False

    def test_unknown_kind(self, validator):
        with pytest.raises(ValueError, match="Unknown validation kind"):
            validator.validate("x", "phone")

    def test_default_registry(self):
        assert Validator().validate("127.0.0.1", "ip").is_valid is True
