"""Email candidate extraction from parsed documents and raw payloads."""

from __future__ import annotations

import copy
import re

from bs4 import BeautifulSoup, ParserRejectedMarkup

from .validation import filter_valid

EMAIL_PATTERN = r"[a-zA-Z0-9._%+\-]+@(?:[a-zA-Z0-9\-]+\.)+[a-zA-Z]{2,}"
EMAIL_REGEX = re.compile(EMAIL_PATTERN)
EMAIL_BYTES_REGEX = re.compile(EMAIL_PATTERN.encode("ascii"))
HIDDEN_TAGS = ["script", "style", "noscript"]


def parse_document(body: bytes | str) -> BeautifulSoup | None:
    """Parse HTML, returning None when the parser rejects the markup."""
    try:
        return BeautifulSoup(body or b"", "html.parser")
    except ParserRejectedMarkup:
        return None


def find_mailto_addresses(document: BeautifulSoup) -> list[str]:
    """Return raw addresses from mailto: anchors, scheme and query stripped."""
    addresses: list[str] = []
    for anchor in document.find_all("a", href=True):
        href = str(anchor["href"]).strip()
        if not href.lower().startswith("mailto:"):
            continue
        address = href[len("mailto:") :].split("?", maxsplit=1)[0].strip()
        if address:
            addresses.append(address)
    return addresses


def visible_text(document: BeautifulSoup) -> str:
    """Text of a document copy with script, style and noscript content removed."""
    working = copy.copy(document)
    for tag in working.find_all(HIDDEN_TAGS):
        tag.decompose()
    return working.get_text(" ")


def find_text_addresses(text: str) -> list[str]:
    return [match.group(0) for match in EMAIL_REGEX.finditer(text or "")]


def find_raw_addresses(body: bytes) -> list[str]:
    return [
        match.group(0).decode("ascii")
        for match in EMAIL_BYTES_REGEX.finditer(body or b"")
    ]


def extract_emails(document: BeautifulSoup | None, body: bytes) -> list[str]:
    """Run the mailto, visible-text and raw-bytes strategies in order.

    Each strategy only runs when the previous one produced no acceptable
    address. Results are deduplicated, lowercased and validated.
    """
    if document is not None:
        found = filter_valid(find_mailto_addresses(document))
        if found:
            return found
        found = filter_valid(find_text_addresses(visible_text(document)))
        if found:
            return found
    return filter_valid(find_raw_addresses(body))


def extract_from_payload(body: bytes) -> tuple[list[str], BeautifulSoup | None]:
    """Parse a payload and extract emails, returning the document for reuse."""
    document = parse_document(body)
    return extract_emails(document, body), document
