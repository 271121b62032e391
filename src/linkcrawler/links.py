"""
Link extraction from HTML documents.
"""
from __future__ import annotations

import logging
from itertools import chain
from typing import List, Optional, Tuple
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, ParserRejectedMarkup, SoupStrainer, Tag

from linkcrawler.errors import (
    InvalidBaseURLError,
    LinkExtractionError,
    ParseError,
    URLParseError,
)
from linkcrawler.urls import resolve_url

logger = logging.getLogger(__name__)

# SoupStrainer to parse only <a> tags (faster link extraction)
LINK_STRAINER = SoupStrainer("a", href=True)


def parse_html(html: str, parse_only: Optional[SoupStrainer] = None) -> BeautifulSoup:
    """Parse markup into a node tree, raising ParseError if it is rejected."""
    try:
        return BeautifulSoup(html, "lxml", parse_only=parse_only)
    except ParserRejectedMarkup as e:
        raise ParseError(f"document could not be parsed: {e}") from e


def get_links(node: Tag) -> List[str]:
    """Collect href values of every <a> element, in document order."""
    links = []
    for element in chain((node,), node.descendants):
        if isinstance(element, Tag) and element.name == "a":
            href = element.get("href")
            if href is not None:
                links.append(href)
    return links


def _is_valid_base(base_url: str) -> bool:
    try:
        parsed = urlsplit(base_url)
        parsed.port
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.hostname)


def get_urls_from_html(
    html: str,
    base_url: str,
) -> Tuple[List[str], Optional[LinkExtractionError]]:
    """
    Extract absolute link URLs from an HTML document.

    Links with a scheme and host are kept as-is; everything else is resolved
    against `base_url`. Extraction is best-effort: hrefs that fail to parse
    are skipped, and if `base_url` is unusable, relative links are dropped.
    Either condition is reported through the returned error, alongside
    whatever URLs could still be produced.

    Returns:
        Tuple of (URLs in document order, degradation error or None).
    """
    try:
        soup = parse_html(html, parse_only=LINK_STRAINER)
    except ParseError as e:
        return [], e

    hrefs = get_links(soup)
    base_valid = _is_valid_base(base_url)

    urls: List[str] = []
    invalid: List[str] = []
    for href in hrefs:
        href = href.strip()
        try:
            parsed = urlsplit(href)
            parsed.port
        except ValueError:
            logger.debug("Skipping invalid link %r", href)
            invalid.append(href)
            continue

        if parsed.netloc and (parsed.scheme or not base_valid):
            urls.append(href)
        elif base_valid:
            urls.append(resolve_url(href, base_url))

    if hrefs and not base_valid:
        return urls, InvalidBaseURLError(base_url, invalid_links=invalid)
    if invalid:
        return urls, URLParseError(invalid)
    return urls, None
