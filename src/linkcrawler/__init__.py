"""
Concurrent same-host web crawler.
Counts how often each page on a site is linked, bounding both total pages
and concurrently active fetches.
"""
from linkcrawler.core import CrawlConfig, CrawlReport, CrawlStats, Crawler, TaskOutcome, TaskResult, crawl
from linkcrawler.registry import VisitedRegistry
from linkcrawler.urls import normalize_url, same_domain

__version__ = "1.0.0"
__all__ = [
    "crawl",
    "Crawler",
    "CrawlConfig",
    "CrawlReport",
    "CrawlStats",
    "TaskOutcome",
    "TaskResult",
    "VisitedRegistry",
    "normalize_url",
    "same_domain",
]
