"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional
from urllib.parse import urlsplit

from linkcrawler.core import CrawlReport, CrawlStats, TaskOutcome, TaskResult, crawl
from linkcrawler.fetcher import DEFAULT_TIMEOUT_S, DEFAULT_USER_AGENT


class ArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors on a single line."""

    def error(self, message: str) -> None:
        self.exit(1, f"{self.prog}: error: {message}\n")


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value!r}")
    return number


def http_url(value: str) -> str:
    try:
        parsed = urlsplit(value)
        parsed.port
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid URL: {value!r}") from None
    if parsed.scheme.lower() not in ("http", "https") or not parsed.hostname:
        raise argparse.ArgumentTypeError(f"URL needs an http(s) scheme and host: {value!r}")
    return value


def print_report(report: CrawlReport) -> None:
    """Print visit counts to stdout."""
    print("=" * 50)
    print(f"REPORT for {report.base_url}")
    print("=" * 50)
    print()
    for url, count in report.sorted_pages():
        print(f"{count}  {url}")


def print_summary(stats: CrawlStats) -> None:
    """Print crawl summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("CRAWL SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    sys.stderr.write(f"Tasks processed:        {stats.tasks_processed}\n")
    sys.stderr.write(f"Pages fetched:          {stats.pages_fetched}\n")
    sys.stderr.write(f"Links discovered:       {stats.links_found}\n\n")

    for outcome in TaskOutcome:
        count = stats.outcome_counts.get(outcome.value, 0)
        if count:
            sys.stderr.write(f"  {outcome.value}: {count}\n")

    if stats.error_counts:
        sys.stderr.write("\nErrors by type:\n")
        for error_type, count in sorted(stats.error_counts.items()):
            sys.stderr.write(f"  {error_type}: {count}\n")
    else:
        sys.stderr.write("\nNo errors encountered.\n")

    sys.stderr.write("\n")


def print_scan_line(result: TaskResult) -> None:
    """Print single scan result line for fetched pages."""
    if result.outcome is TaskOutcome.EXPANDED:
        sys.stderr.write(f"  → OK  {result.url} (+{result.links_found} links)\n")
    elif result.outcome is TaskOutcome.FETCH_FAILED:
        sys.stderr.write(f"  ✗ ERR {result.url}: {result.error}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = ArgumentParser(
        description="Crawl all pages on a URL's host and count internal links to each."
    )
    parser.add_argument("start_url", type=http_url, help="Start URL (e.g. https://example.com)")
    parser.add_argument("max_concurrency", type=positive_int, help="Maximum pages fetched at once")
    parser.add_argument("max_pages", type=positive_int, help="Maximum distinct pages to visit")
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT_S,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT_S:g})",
    )
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument("--verbose", action="store_true", help="Show progress and summary")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the crawler CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.timeout <= 0:
        parser.error(f"argument --timeout: must be positive: {args.timeout:g}")

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.verbose:
        sys.stderr.write(f"Starting crawl from: {args.start_url}\n")
        sys.stderr.write(f"Max concurrency: {args.max_concurrency}\n")
        sys.stderr.write(f"Max pages: {args.max_pages}\n\n")

    report = crawl(
        start_url=args.start_url,
        max_concurrency=args.max_concurrency,
        max_pages=args.max_pages,
        timeout_s=args.timeout,
        user_agent=args.user_agent,
        on_result=print_scan_line if args.verbose else None,
    )

    if args.verbose:
        sys.stderr.write("\n")
        print_summary(report.stats)

    print_report(report)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
