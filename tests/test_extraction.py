from site_email_finder.extraction import (
    extract_emails,
    extract_from_payload,
    find_mailto_addresses,
    find_raw_addresses,
    parse_document,
    visible_text,
)


def _extract(html: str) -> list[str]:
    body = html.encode("utf-8")
    return extract_emails(parse_document(body), body)


def test_mailto_links_strip_scheme_and_query() -> None:
    document = parse_document(
        b'<a href="MAILTO:Contact@Business.com">Mail</a>'
        b'<a href="mailto:sales@business.com?subject=Hello">Sales</a>'
        b'<a href="/contact">Contact</a>'
    )
    assert document is not None
    assert find_mailto_addresses(document) == ["Contact@Business.com", "sales@business.com"]


def test_mailto_wins_over_visible_text() -> None:
    html = """
    <html><body>
      <a href="mailto:Sales@Biz.com?subject=Hi">Write to us</a>
      <p>Or try other@biz.com and owner@biz.com</p>
    </body></html>
    """
    assert _extract(html) == ["sales@biz.com"]


def test_invalid_mailto_falls_through_to_visible_text() -> None:
    html = """
    <a href="mailto:noreply@biz.com">Automated</a>
    <p>Reach us at support@company.org for help.</p>
    """
    assert _extract(html) == ["support@company.org"]


def test_visible_text_ignores_script_style_and_noscript() -> None:
    html = """
    <html><head><style>.x{content:"style@biz.com"}</style></head>
    <body>
      <script>var e = "hidden@biz.com";</script>
      <noscript>nojs@biz.com</noscript>
      <p>shown@biz.com</p>
    </body></html>
    """
    document = parse_document(html.encode("utf-8"))
    assert document is not None
    text = visible_text(document)
    assert "hidden@biz.com" not in text
    assert "nojs@biz.com" not in text
    assert _extract(html) == ["shown@biz.com"]
    # Stripping works on a copy; the parsed document keeps its scripts.
    assert document.find("script") is not None


def test_raw_bytes_fallback_finds_attribute_emails() -> None:
    html = '<div data-email="info@shop.com"></div><input value="hello@shop.com">'
    assert _extract(html) == ["info@shop.com", "hello@shop.com"]


def test_raw_bytes_used_when_no_document() -> None:
    body = b"<p>noreply@company.com and user@example.com and valid@company.com</p>"
    assert extract_emails(None, body) == ["valid@company.com"]


def test_extraction_dedupes_and_lowercases() -> None:
    html = """
    <a href="mailto:info@business.com">Info</a>
    <a href="mailto:INFO@business.com">Info Again</a>
    """
    assert _extract(html) == ["info@business.com"]


def test_no_emails_returns_empty_list() -> None:
    emails, document = extract_from_payload(b"<html><body><p>No emails here</p></body></html>")
    assert emails == []
    assert document is not None


def test_find_raw_addresses_requires_dotted_domain() -> None:
    assert find_raw_addresses(b"user@localhost and user@shop.co.uk.") == ["user@shop.co.uk"]
