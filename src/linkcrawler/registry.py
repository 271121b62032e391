"""
Thread-safe registry of visited pages.
"""
from __future__ import annotations

from threading import Lock
from typing import Dict


class VisitedRegistry:
    """
    Maps normalized URLs to the number of times they were linked.

    A single lock guards the whole map; every operation holds it for its
    full duration. Entries are never removed.
    """

    def __init__(self, max_pages: int) -> None:
        if max_pages < 1:
            raise ValueError(f"max_pages must be at least 1, got {max_pages}")
        self.max_pages = max_pages
        self._lock = Lock()
        self._pages: Dict[str, int] = {}

    def at_capacity(self) -> bool:
        """Check if the number of distinct pages has reached max_pages."""
        with self._lock:
            return len(self._pages) >= self.max_pages

    def add_or_increment(self, key: str) -> bool:
        """
        Record one visit to `key`.

        Returns True if this is the first visit, in which case the caller
        owns fetching the page.
        """
        with self._lock:
            if key in self._pages:
                self._pages[key] += 1
                return False
            self._pages[key] = 1
            return True

    def count(self, key: str) -> int:
        with self._lock:
            return self._pages.get(key, 0)

    def snapshot(self) -> Dict[str, int]:
        """Return a copy of the current counts."""
        with self._lock:
            return dict(self._pages)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pages)
