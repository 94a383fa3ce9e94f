from pathlib import Path

import pytest

from site_email_finder.errors import ConfigError
from site_email_finder.validation import (
    dedupe_emails,
    filter_valid,
    is_supported_url,
    is_valid_email,
    is_website_valid_for_email,
    load_lines_from_file,
    validate_pipeline_constraints,
    validate_runtime_constraints,
)


@pytest.mark.parametrize(
    ("email", "expected"),
    [
        ("info@business.com", True),
        ("  Sales@Business.COM  ", True),
        ("noreply@business.com", False),
        ("NoReply-team@business.com", False),
        ("no-reply@business.com", False),
        ("no_reply@business.com", False),
        ("mailer-daemon@business.com", False),
        ("user@example.com", False),
        ("USER@Example.COM", False),
        ("user@test.com", False),
        ("user@localhost", False),
        ("errors@sentry.io", False),
        ("not-an-email", False),
        ("two@@business.com", False),
        ("", False),
    ],
)
def test_is_valid_email(email: str, expected: bool) -> None:
    assert is_valid_email(email) is expected


def test_blocked_domains_match_exactly() -> None:
    assert is_valid_email("hello@myexample.com") is True
    assert is_valid_email("hello@notsentry.io") is True


def test_dedupe_emails_is_case_insensitive_and_ordered() -> None:
    emails = ["Info@Biz.com", "info@biz.com", " OTHER@shop.org", "other@shop.org", "a@b.com"]
    assert dedupe_emails(emails) == ["info@biz.com", "other@shop.org", "a@b.com"]


def test_dedupe_emails_empty_inputs() -> None:
    assert dedupe_emails([]) == []
    assert dedupe_emails(None) == []
    assert dedupe_emails(["  ", ""]) == []


def test_filter_valid_dedupes_then_validates() -> None:
    emails = ["Real@Biz.com", "noreply@biz.com", "real@biz.com", "x@example.com"]
    assert filter_valid(emails) == ["real@biz.com"]


@pytest.mark.parametrize(
    ("website", "expected"),
    [
        ("", False),
        ("https://example.com", True),
        ("http://bakery.example.org/home", True),
        ("https://facebook.com/somepage", False),
        ("https://Facebook.com/somepage", False),
        ("https://instagram.com/somepage", False),
        ("https://twitter.com/somepage", False),
        ("https://linkedin.com/in/someone", False),
        ("https://youtube.com/channel/abc", False),
        ("https://tiktok.com/@user", False),
        ("https://pinterest.com/user", False),
        ("https://yelp.com/biz/something", False),
        ("https://tripadvisor.com/Restaurant-abc", False),
        ("example.com", False),
        ("ftp://example.com", False),
    ],
)
def test_is_website_valid_for_email(website: str, expected: bool) -> None:
    assert is_website_valid_for_email(website) is expected


def test_is_supported_url() -> None:
    assert is_supported_url("https://example.com/a") is True
    assert is_supported_url("ftp://example.com/file") is False
    assert is_supported_url("https://") is False


def test_validate_pipeline_constraints_rejects_bad_values() -> None:
    valid = {
        "http_timeout": 10.0,
        "global_timeout": 45.0,
        "homepage_retries": 2,
        "contact_page_retries": 1,
        "retry_backoff": (1.0, 3.0),
        "max_response_bytes": 1024,
        "max_redirects": 3,
        "max_contact_pages": 5,
        "max_browser_contact_pages": 3,
    }
    validate_pipeline_constraints(**valid)
    for key, value in [
        ("http_timeout", 0),
        ("global_timeout", -1),
        ("homepage_retries", -1),
        ("retry_backoff", ()),
        ("retry_backoff", (1.0, -2.0)),
        ("max_response_bytes", 0),
        ("max_redirects", -1),
        ("max_contact_pages", -1),
    ]:
        with pytest.raises(ConfigError):
            validate_pipeline_constraints(**{**valid, key: value})


def test_validate_runtime_constraints() -> None:
    with pytest.raises(ConfigError):
        validate_runtime_constraints(websites=tuple(), workers=1)
    with pytest.raises(ConfigError):
        validate_runtime_constraints(websites=("https://biz.com",), workers=0)


def test_load_lines_from_file(tmp_path: Path) -> None:
    sample = tmp_path / "sample.txt"
    sample.write_text("https://one.com\n\n https://two.com \n", encoding="utf-8")
    assert load_lines_from_file(str(sample)) == ["https://one.com", "https://two.com"]
