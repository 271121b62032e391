"""
Exception hierarchy for per-page crawl failures.

None of these escape a crawl: the orchestrator absorbs them per task and
records them in the task result and crawl statistics.
"""
from __future__ import annotations

from typing import List, Optional


class CrawlerError(Exception):
    """Base class for all crawler errors."""


class FetchError(CrawlerError):
    """A page could not be fetched as HTML."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url


class NetworkError(FetchError):
    """The transport could not complete the request."""


class HTTPStatusError(FetchError):
    """The response status was outside the 2xx range."""

    def __init__(self, url: str, status_code: int, reason: str = "") -> None:
        super().__init__(url, f"HTTP {status_code} {reason}".rstrip())
        self.status_code = status_code


class UnsupportedContentType(FetchError):
    """The response was not an HTML document."""

    def __init__(self, url: str, content_type: str) -> None:
        super().__init__(url, f"unsupported content type {content_type!r}")
        self.content_type = content_type


class LinkExtractionError(CrawlerError):
    """
    Link extraction produced degraded (but not absent) results.

    `base_invalid` is set when relative links could not be resolved;
    `invalid_links` lists the hrefs that were skipped.
    """

    def __init__(
        self,
        message: str,
        base_invalid: bool = False,
        invalid_links: Optional[List[str]] = None,
    ) -> None:
        super().__init__(message)
        self.base_invalid = base_invalid
        self.invalid_links = list(invalid_links or [])


class ParseError(LinkExtractionError):
    """The document could not be parsed; it yields no links."""


class URLParseError(LinkExtractionError):
    """One or more hrefs could not be parsed and were skipped."""

    def __init__(self, hrefs: List[str]) -> None:
        super().__init__(f"{len(hrefs)} invalid link(s)", invalid_links=hrefs)


class InvalidBaseURLError(LinkExtractionError):
    """The base URL cannot be used to resolve relative links."""

    def __init__(self, base_url: str, invalid_links: Optional[List[str]] = None) -> None:
        super().__init__(
            f"invalid base URL: {base_url!r}",
            base_invalid=True,
            invalid_links=invalid_links,
        )
        self.base_url = base_url
