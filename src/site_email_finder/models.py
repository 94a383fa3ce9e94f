"""Protocols, status values and the mutable target record."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from .deadline import Deadline

STATUS_FOUND = "found"
STATUS_NOT_FOUND = "not_found"
STATUS_WEBSITE_ERROR = "website_error"
# Assigned before a pipeline is ever constructed.
STATUS_NO_WEBSITE = "no_website"
STATUS_BLOCKED_DOMAIN = "blocked_domain"
STATUS_SKIPPED = "skipped"

SOURCE_HOMEPAGE = "homepage"
SOURCE_CONTACT_PAGE = "contact_page"
SOURCE_BROWSER_HOMEPAGE = "browser_homepage"
SOURCE_BROWSER_CONTACT_PAGE = "browser_contact_page"

EMAIL_STATUSES = frozenset(
    {
        STATUS_FOUND,
        STATUS_NOT_FOUND,
        STATUS_WEBSITE_ERROR,
        STATUS_NO_WEBSITE,
        STATUS_BLOCKED_DOMAIN,
        STATUS_SKIPPED,
    }
)
EMAIL_SOURCES = frozenset(
    {
        SOURCE_HOMEPAGE,
        SOURCE_CONTACT_PAGE,
        SOURCE_BROWSER_HOMEPAGE,
        SOURCE_BROWSER_CONTACT_PAGE,
    }
)


class RenderFetcher(Protocol):
    """Contract for browser-backed page rendering.

    A render must give up once ``deadline`` has no time left. Any exception it
    raises only skips the page being rendered.
    """

    def render(self, url: str, deadline: Deadline) -> str:
        """Return the fully rendered HTML for a URL, or raise RenderError."""


@dataclass
class Target:
    """A business website and the email lookup result written onto it."""

    website: str
    emails: list[str] = field(default_factory=list)
    email_status: str = ""
    email_source: str = ""

    def set_found(self, emails: list[str], source: str) -> None:
        if not emails or source not in EMAIL_SOURCES:
            raise ValueError(f"found needs emails and a known source, got {source!r}")
        self.emails = list(emails)
        self.email_status = STATUS_FOUND
        self.email_source = source

    def set_outcome(self, status: str) -> None:
        """Record a non-found outcome; emails and source are always cleared."""
        if status == STATUS_FOUND or status not in EMAIL_STATUSES:
            raise ValueError(f"not a non-found status: {status!r}")
        self.emails = []
        self.email_status = status
        self.email_source = ""
