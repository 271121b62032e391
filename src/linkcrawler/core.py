"""
Core crawling logic and data structures.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from queue import Queue
from threading import Lock, Thread
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from linkcrawler.errors import CrawlerError, FetchError
from linkcrawler.fetcher import DEFAULT_TIMEOUT_S, DEFAULT_USER_AGENT, PageFetcher
from linkcrawler.links import get_urls_from_html
from linkcrawler.registry import VisitedRegistry
from linkcrawler.urls import normalize_url, same_domain

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    def fetch(self, url: str) -> str: ...


@dataclass(frozen=True, slots=True)
class CrawlConfig:
    """Settings for one crawl; fixed for its lifetime."""
    base_url: str
    max_concurrency: int
    max_pages: int
    timeout_s: float = DEFAULT_TIMEOUT_S
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {self.max_concurrency}")
        if self.max_pages < 1:
            raise ValueError(f"max_pages must be at least 1, got {self.max_pages}")
        if self.timeout_s <= 0:
            raise ValueError(f"timeout_s must be positive, got {self.timeout_s}")


@dataclass(frozen=True, slots=True)
class CrawlTask:
    """A discovered URL waiting to be crawled."""
    url: str


class TaskOutcome(Enum):
    AT_CAPACITY = "at_capacity"
    OUT_OF_SCOPE = "out_of_scope"
    ALREADY_VISITED = "already_visited"
    FETCH_FAILED = "fetch_failed"
    EXPANDED = "expanded"


@dataclass(slots=True)
class TaskResult:
    """What happened to a single task."""
    url: str
    outcome: TaskOutcome
    normalized_url: Optional[str] = None
    links_found: int = 0
    error: Optional[CrawlerError] = None


@dataclass(slots=True)
class CrawlStats:
    """Statistics collected during crawl for summary output."""
    tasks_processed: int = 0
    pages_fetched: int = 0
    links_found: int = 0
    outcome_counts: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    error_counts: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def record_result(self, result: TaskResult) -> None:
        """Record a finished task."""
        self.tasks_processed += 1
        self.outcome_counts[result.outcome.value] += 1
        if result.outcome is TaskOutcome.EXPANDED:
            self.pages_fetched += 1
            self.links_found += result.links_found
        if result.error is not None:
            self.record_error(result.error)

    def record_error(self, error: CrawlerError) -> None:
        """Record an error by type name."""
        self.error_counts[type(error).__name__] += 1


@dataclass(slots=True)
class CrawlReport:
    """Final registry contents and statistics of a finished crawl."""
    base_url: str
    pages: Dict[str, int]
    stats: CrawlStats

    def sorted_pages(self) -> List[Tuple[str, int]]:
        """Return (url, count) pairs, most linked first, ties by URL."""
        return sorted(self.pages.items(), key=lambda item: (-item[1], item[0]))


# Worker shutdown marker
_STOP = None


class Crawler:
    """
    Concurrent same-host crawler.

    Tasks go through an unbounded queue drained by `max_concurrency` worker
    threads, so at most that many pages are being processed at once. The
    queue's unfinished-task count tracks outstanding work: a task's children
    are enqueued before the task is marked done, and the crawl is over when
    the count drops to zero.
    """

    def __init__(
        self,
        config: CrawlConfig,
        fetcher: Optional[Fetcher] = None,
        on_result: Optional[Callable[[TaskResult], None]] = None,
    ) -> None:
        self.config = config
        self.registry = VisitedRegistry(config.max_pages)
        self.stats = CrawlStats()
        self.on_result = on_result
        self.fetcher: Optional[Fetcher] = fetcher
        self._tasks: "Queue[Optional[CrawlTask]]" = Queue()
        self._stats_lock = Lock()
        self._started = False

    def run(self) -> CrawlReport:
        """Crawl from the base URL until no work remains."""
        if self._started:
            raise RuntimeError("Crawler instances can only run once")
        self._started = True

        logger.info(
            "Starting crawl of %s (max_concurrency=%d, max_pages=%d)",
            self.config.base_url,
            self.config.max_concurrency,
            self.config.max_pages,
        )

        own_fetcher: Optional[PageFetcher] = None
        if self.fetcher is None:
            self.fetcher = own_fetcher = PageFetcher(
                timeout_s=self.config.timeout_s,
                user_agent=self.config.user_agent,
                pool_size=self.config.max_concurrency,
            )

        workers = [
            Thread(target=self._work, name=f"crawler-worker-{i}", daemon=True)
            for i in range(self.config.max_concurrency)
        ]
        try:
            for worker in workers:
                worker.start()
            self.submit(self.config.base_url)
            self._tasks.join()

            for _ in workers:
                self._tasks.put(_STOP)
            for worker in workers:
                worker.join()
        finally:
            if own_fetcher is not None:
                own_fetcher.close()

        logger.info(
            "Crawl finished: %d pages registered, %d fetched",
            len(self.registry),
            self.stats.pages_fetched,
        )
        return CrawlReport(
            base_url=self.config.base_url,
            pages=self.registry.snapshot(),
            stats=self.stats,
        )

    def submit(self, url: str) -> None:
        """Register a URL as outstanding work."""
        self._tasks.put(CrawlTask(url))

    def process_task(self, task: CrawlTask) -> TaskResult:
        """
        Run one task to completion.

        Capacity, scope and duplicate checks happen before any network
        activity. Only the first visitor of a normalized URL fetches it; later
        visitors just bump its count. Fetch failures end the task quietly.
        """
        url = task.url

        if self.registry.at_capacity():
            logger.debug("Page limit reached, skipping %s", url)
            return TaskResult(url=url, outcome=TaskOutcome.AT_CAPACITY)

        if not same_domain(self.config.base_url, url):
            logger.debug("Out of scope: %s", url)
            return TaskResult(url=url, outcome=TaskOutcome.OUT_OF_SCOPE)

        normalized = normalize_url(url)
        if not self.registry.add_or_increment(normalized):
            logger.debug("Already visited: %s (linked %d times)", normalized, self.registry.count(normalized))
            return TaskResult(url=url, outcome=TaskOutcome.ALREADY_VISITED, normalized_url=normalized)

        logger.debug("Fetching %s", url)
        try:
            html = self.fetcher.fetch(url)
        except FetchError as e:
            logger.info("Fetch failed: %s", e)
            return TaskResult(url=url, outcome=TaskOutcome.FETCH_FAILED, normalized_url=normalized, error=e)

        links, error = get_urls_from_html(html, self.config.base_url)
        if error is not None:
            logger.warning("Link extraction degraded on %s: %s", url, error)

        for link in links:
            self.submit(link)

        return TaskResult(
            url=url,
            outcome=TaskOutcome.EXPANDED,
            normalized_url=normalized,
            links_found=len(links),
            error=error,
        )

    def _work(self) -> None:
        while True:
            task = self._tasks.get()
            try:
                if task is _STOP:
                    return
                self._run_task(task)
            finally:
                self._tasks.task_done()

    def _run_task(self, task: CrawlTask) -> None:
        try:
            result = self.process_task(task)
        except Exception:
            logger.exception("Unexpected error while crawling %s", task.url)
            return

        with self._stats_lock:
            self.stats.record_result(result)

        if self.on_result is not None:
            try:
                self.on_result(result)
            except Exception:
                logger.exception("Result callback failed for %s", task.url)


def crawl(
    start_url: str,
    max_concurrency: int,
    max_pages: int,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    user_agent: str = DEFAULT_USER_AGENT,
    fetcher: Optional[Fetcher] = None,
    on_result: Optional[Callable[[TaskResult], None]] = None,
) -> CrawlReport:
    """
    Crawl every page reachable from a URL on the same host.

    Args:
        start_url: The URL to start crawling from.
        max_concurrency: Maximum number of pages processed at once.
        max_pages: Maximum number of distinct pages to register.
        timeout_s: HTTP request timeout in seconds.
        user_agent: User-Agent header to use for requests.
        fetcher: Optional object with a `fetch(url) -> str` method to use
                 instead of the HTTP fetcher.
        on_result: Optional callback invoked with each finished task's result.

    Returns:
        Crawl report with visit counts per normalized URL.
    """
    config = CrawlConfig(
        base_url=start_url,
        max_concurrency=max_concurrency,
        max_pages=max_pages,
        timeout_s=timeout_s,
        user_agent=user_agent,
    )
    return Crawler(config, fetcher=fetcher, on_result=on_result).run()
