"""Validation and runtime guardrails."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from urllib.parse import urlparse

from email_validator import EmailNotValidError, validate_email

from .errors import ConfigError

BLOCKED_LOCAL_PREFIXES = ("noreply", "no-reply", "no_reply", "mailer-daemon")
BLOCKED_EMAIL_DOMAINS = frozenset({"example.com", "test.com", "localhost", "sentry.io"})
BLOCKED_WEBSITE_SUBSTRINGS = (
    "facebook",
    "instagram",
    "twitter",
    "linkedin",
    "youtube",
    "tiktok",
    "pinterest",
    "yelp",
    "tripadvisor",
)


def is_supported_url(url: str) -> bool:
    """Allow only absolute HTTP(S) URLs with a hostname."""
    parsed = urlparse(url)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def is_blocked_website(url: str) -> bool:
    """Return True for social and review platform URLs."""
    lowered = url.lower()
    return any(item in lowered for item in BLOCKED_WEBSITE_SUBSTRINGS)


def is_website_valid_for_email(url: str) -> bool:
    """Gate for running the pipeline at all: a real http(s) business site."""
    value = (url or "").strip()
    if not value or not is_supported_url(value):
        return False
    return not is_blocked_website(value)


def is_valid_email(candidate: str) -> bool:
    """Accept syntactically valid addresses that are not automated or placeholder."""
    value = (candidate or "").strip()
    if not value:
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False

    lower = value.lower()
    local, _, domain = lower.rpartition("@")
    if local.startswith(BLOCKED_LOCAL_PREFIXES):
        return False
    return domain not in BLOCKED_EMAIL_DOMAINS


def dedupe_emails(emails: Iterable[str] | None) -> list[str]:
    """Lowercase and dedupe addresses while preserving first-seen order."""
    output: list[str] = []
    seen: set[str] = set()
    for raw in emails or ():
        value = raw.strip().lower()
        if not value or value in seen:
            continue
        seen.add(value)
        output.append(value)
    return output


def filter_valid(emails: Iterable[str] | None) -> list[str]:
    """Dedupe, then keep only acceptable addresses."""
    return [email for email in dedupe_emails(emails) if is_valid_email(email)]


def load_lines_from_file(path: str) -> list[str]:
    """Load non-empty lines from a UTF-8 text file."""
    content = Path(path).read_text(encoding="utf-8")
    return [line.strip() for line in content.splitlines() if line.strip()]


def validate_pipeline_constraints(
    *,
    http_timeout: float,
    global_timeout: float,
    homepage_retries: int,
    contact_page_retries: int,
    retry_backoff: tuple[float, ...],
    max_response_bytes: int,
    max_redirects: int,
    max_contact_pages: int,
    max_browser_contact_pages: int,
) -> None:
    """Validate pipeline limits and raise ConfigError on invalid values."""
    if http_timeout <= 0 or global_timeout <= 0:
        raise ConfigError("Timeouts must be > 0.")
    if homepage_retries < 0 or contact_page_retries < 0:
        raise ConfigError("Retry counts must be >= 0.")
    if not retry_backoff:
        raise ConfigError("retry_backoff needs at least one delay.")
    if any(delay < 0 for delay in retry_backoff):
        raise ConfigError("retry_backoff delays must be >= 0.")
    if max_response_bytes < 1:
        raise ConfigError("max_response_bytes must be >= 1.")
    if max_redirects < 0:
        raise ConfigError("max_redirects must be >= 0.")
    if max_contact_pages < 0 or max_browser_contact_pages < 0:
        raise ConfigError("Contact page limits must be >= 0.")


def validate_runtime_constraints(*, websites: tuple[str, ...], workers: int) -> None:
    """Validate CLI/runtime configuration and raise ConfigError on invalid values."""
    if not websites:
        raise ConfigError("Provide --websites or --websites-file.")
    if workers < 1:
        raise ConfigError("--workers must be >= 1.")
