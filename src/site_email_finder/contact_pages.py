"""Same-site contact and about page discovery."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

MAX_CONTACT_PAGES = 5
TEXT_MATCH_PRIORITY = 100

# Most contact-like first; index is the priority.
CONTACT_PATH_PATTERNS = (
    "/contact",
    "/contacts",
    "/contatti",
    "/kontakt",
    "/contacto",
    "/get-in-touch",
    "/reach-us",
    "/about",
    "/about-us",
    "/chi-siamo",
    "/impressum",
    "/who-we-are",
)
CONTACT_TEXT_PATTERNS = (
    "contact",
    "contatti",
    "kontakt",
    "contacto",
    "chi siamo",
    "about us",
    "get in touch",
    "reach us",
    "impressum",
    "who we are",
)
SKIP_EXTENSIONS = frozenset(
    {
        ".pdf",
        ".jpg",
        ".jpeg",
        ".png",
        ".gif",
        ".svg",
        ".webp",
        ".zip",
        ".tar",
        ".gz",
        ".doc",
        ".docx",
        ".xls",
        ".xlsx",
        ".mp3",
        ".mp4",
        ".avi",
        ".mov",
    }
)


@dataclass(frozen=True)
class ContactPageCandidate:
    url: str
    priority: int


def canonicalize_url(href: str, base: str) -> str:
    """Resolve relative URLs and strip hash fragments."""
    return urljoin(base, href).split("#", maxsplit=1)[0]


def path_priority(path: str) -> int | None:
    lowered = path.lower()
    for index, pattern in enumerate(CONTACT_PATH_PATTERNS):
        if pattern in lowered:
            return index
    return None


def text_matches(text: str) -> bool:
    lowered = text.strip().lower()
    return any(pattern in lowered for pattern in CONTACT_TEXT_PATTERNS)


def rank_contact_links(document: BeautifulSoup, base_url: str) -> list[ContactPageCandidate]:
    """Collect every same-site contact-like link with its priority, best first."""
    base_host = urlparse(base_url).netloc.lower()
    candidates: list[ContactPageCandidate] = []
    seen: set[str] = set()

    for anchor in document.find_all("a", href=True):
        href = str(anchor["href"]).strip()
        if not href or href.startswith("#"):
            continue
        if href.lower().startswith("javascript:"):
            continue
        try:
            resolved = canonicalize_url(href, base_url)
            parsed = urlparse(resolved)
        except ValueError:
            continue
        if parsed.netloc.lower() != base_host:
            continue
        if posixpath.splitext(parsed.path)[1].lower() in SKIP_EXTENSIONS:
            continue
        if resolved in seen:
            continue

        priority = path_priority(parsed.path)
        if priority is None and text_matches(anchor.get_text(" ")):
            priority = TEXT_MATCH_PRIORITY + len(candidates)
        if priority is None:
            continue
        seen.add(resolved)
        candidates.append(ContactPageCandidate(url=resolved, priority=priority))

    return sorted(candidates, key=lambda item: item.priority)


def discover_contact_pages(
    document: BeautifulSoup, base_url: str, limit: int = MAX_CONTACT_PAGES
) -> list[str]:
    """Return up to ``limit`` same-site URLs likely to be contact or about pages."""
    return [item.url for item in rank_contact_links(document, base_url)[:limit]]
