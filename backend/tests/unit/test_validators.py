from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from shortlinks.schemas.link import LinkCreate
from shortlinks.utils.validators import get_client_ip, is_valid_short_code, is_valid_url, normalize_url


def make_request(headers=None, host="198.51.100.7"):
    return SimpleNamespace(
        headers=headers or {},
        client=SimpleNamespace(host=host) if host else None,
    )


@pytest.mark.parametrize("raw, expected", [
    ("example.com/page", "https://example.com/page"),
    ("  http://example.com  ", "http://example.com"),
    ("https://example.com", "https://example.com"),
])
def test_normalize_url(raw, expected):
    assert normalize_url(raw) == expected


@pytest.mark.parametrize("url", [
    "https://example.com",
    "http://sub.example.com:8080/path?q=1#frag",
])
def test_valid_urls(url):
    assert is_valid_url(url) == (True, "")


@pytest.mark.parametrize("url", [
    "",
    "https://",
    "ftp://example.com",
    "https://exa mple.com",
    "https://example.com/" + "a" * 2048,
])
def test_invalid_urls(url):
    is_valid, message = is_valid_url(url)
    assert not is_valid
    assert message


@pytest.mark.parametrize("code, expected", [
    ("abc123", True),
    ("my-link_2", True),
    ("a" * 50, True),
    ("a" * 51, False),
    ("", False),
    ("bad code", False),
    ("favicon.ico", False),
])
def test_short_code_format(code, expected):
    assert is_valid_short_code(code) is expected


def test_blank_slug_means_generated_code():
    assert LinkCreate(originalUrl="example.com", customSlug="   ").custom_slug is None


def test_slug_charset_enforced():
    with pytest.raises(ValidationError) as exc_info:
        LinkCreate(originalUrl="example.com", customSlug="no/slashes")
    assert "Only letters, numbers, hyphens, and underscores allowed" in str(exc_info.value)


def test_slug_length_enforced():
    with pytest.raises(ValidationError):
        LinkCreate(originalUrl="example.com", customSlug="x" * 51)


def test_client_ip_priority():
    assert get_client_ip(make_request({
        "CF-Connecting-IP": "1.1.1.1",
        "X-Forwarded-For": "2.2.2.2",
    })) == "1.1.1.1"
    assert get_client_ip(make_request({"X-Forwarded-For": "2.2.2.2, 10.0.0.1"})) == "2.2.2.2"
    assert get_client_ip(make_request({"X-Real-IP": "3.3.3.3"})) == "3.3.3.3"
    assert get_client_ip(make_request()) == "198.51.100.7"
    assert get_client_ip(make_request(host=None)) == "unknown"
