"""
HTTP page fetching with status and content-type validation.
"""
from __future__ import annotations

import logging
from typing import Optional

import requests
from requests.adapters import HTTPAdapter

from linkcrawler.errors import HTTPStatusError, NetworkError, UnsupportedContentType

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 15.0
DEFAULT_USER_AGENT = "LinkCrawler/1.0"


class PageFetcher:
    """
    Fetches HTML pages over a shared requests session.

    Each call makes exactly one GET; redirects are followed. Anything other
    than a 2xx HTML response raises a FetchError subclass.
    """

    def __init__(
        self,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        user_agent: str = DEFAULT_USER_AGENT,
        pool_size: int = 10,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout_s = timeout_s
        if session is None:
            session = requests.Session()
            # One pooled connection per worker, no transport-level retries
            adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size, max_retries=0)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        session.headers["User-Agent"] = user_agent
        self.session = session

    def fetch(self, url: str) -> str:
        """
        Return the body text of an HTML page.

        The body is streamed and only read once status and content type
        have been accepted; rejected responses are closed unread.
        """
        try:
            resp = self.session.get(url, timeout=self.timeout_s, allow_redirects=True, stream=True)
        except requests.RequestException as e:
            raise NetworkError(url, str(e)) from e

        with resp:
            if not 200 <= resp.status_code < 300:
                raise HTTPStatusError(url, resp.status_code, resp.reason or "")

            content_type = resp.headers.get("content-type") or ""
            if "text/html" not in content_type.lower():
                raise UnsupportedContentType(url, content_type)

            try:
                return resp.text
            except requests.RequestException as e:
                raise NetworkError(url, str(e)) from e

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "PageFetcher":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
