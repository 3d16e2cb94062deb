"""
Command-line interface for the dead link checker.
"""
from __future__ import annotations

import argparse
import logging
import sys
import threading
from typing import List, Optional, TextIO

from deadlinks.core import (
    DEFAULT_CONCURRENCY,
    DEFAULT_DELAY_MS,
    DEFAULT_USER_AGENT,
    CrawlReport,
    crawl,
    normalize_seed,
)
from deadlinks.results import FETCH_ERROR

logger = logging.getLogger("deadlinks")

GREEN = "\033[32m"
RED = "\033[31m"
RESET = "\033[0m"

USAGE = "deadlinks <URL> [-v] [--concurrent=<number>] [--delay=<milliseconds>]"


class ProgressLine:
    """Live `Checked: n/total` line on stdout, rewritten in place on every update."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream
        self._lock = threading.Lock()

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def __call__(self, checked: int, total: int) -> None:
        with self._lock:
            self.stream.write(f"\r\033[K⏳ Checked: {checked}/{total} links")
            self.stream.flush()

    def finish(self) -> None:
        with self._lock:
            self.stream.write("\n\n")
            self.stream.flush()


def print_verbose_summary(report: CrawlReport, stream: Optional[TextIO] = None) -> None:
    """Print every checked link and its status."""
    stream = stream or sys.stdout
    stream.write("\nSummary of checked links:\n")
    for outcome in report.outcomes:
        if outcome.status == FETCH_ERROR:
            status_text = f"{FETCH_ERROR} ({outcome.error})"
        else:
            status_text = str(outcome.status)
        stream.write(f"- {outcome.address} (Status: {status_text})\n")


def print_result(report: CrawlReport) -> int:
    """Print the dead link summary and return the exit code."""
    if report.ok:
        sys.stdout.write(f"{GREEN}✅ No dead links found.{RESET}\n")
        return 0

    sys.stderr.write(f"{RED}❌ Dead links found:{RESET}\n")
    for outcome in report.dead:
        sys.stderr.write(f"- {outcome.address} (Status: {outcome.describe()})\n")
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="deadlinks",
        usage=USAGE,
        description="Crawl a website and report every link that is not reachable.",
    )
    # Optional here so a missing URL exits 1 with our own usage line
    parser.add_argument("url", nargs="?", help="Start URL (e.g. https://example.com)")
    parser.add_argument("-v", "--verbose", action="store_true", help="List every checked link")
    parser.add_argument(
        "--concurrent",
        type=int,
        default=DEFAULT_CONCURRENCY,
        help=f"Number of concurrent workers (default: {DEFAULT_CONCURRENCY})",
    )
    parser.add_argument(
        "--delay",
        type=int,
        default=DEFAULT_DELAY_MS,
        help=f"Delay per worker between requests in milliseconds (default: {DEFAULT_DELAY_MS})",
    )
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds (default: none)")
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument("--no-progress", action="store_true", help="Do not show the progress line")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostic log level (default: WARNING)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the dead link checker CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.url:
        sys.stderr.write(f"Usage: {USAGE}\n")
        return 1
    if args.concurrent < 1:
        sys.stderr.write("--concurrent must be at least 1\n")
        return 1
    if args.delay < 0:
        sys.stderr.write("--delay must not be negative\n")
        return 1

    logging.basicConfig(
        level=args.log_level,
        stream=sys.stderr,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        normalize_seed(args.url)
    except ValueError as e:
        sys.stderr.write(f"{e}\nUsage: {USAGE}\n")
        return 1

    progress = None if args.no_progress else ProgressLine()

    try:
        sys.stdout.write(f"Starting to check links on: {args.url}\n\n")
        sys.stdout.flush()
        report = crawl(
            start_url=args.url,
            concurrency=args.concurrent,
            delay_ms=args.delay,
            timeout_s=args.timeout,
            user_agent=args.user_agent,
            progress=progress,
        )
    except KeyboardInterrupt:
        sys.stderr.write("\nInterrupted.\n")
        return 130
    except Exception:
        logger.exception("An unexpected error occurred")
        return 1

    if progress is not None:
        progress.finish()

    if args.verbose:
        print_verbose_summary(report)

    return print_result(report)


if __name__ == "__main__":
    raise SystemExit(main())
