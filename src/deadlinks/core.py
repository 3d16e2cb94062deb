"""
Crawl session: one Frontier, one ResultAggregator and one WorkerPool per run.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import requests

from deadlinks.checker import check
from deadlinks.frontier import Frontier, Task, TaskKind
from deadlinks.pool import SessionFactory, WorkerPool
from deadlinks.results import LinkOutcome, ResultAggregator
from deadlinks.urls import Origin, normalize_url, origin_of

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 25
DEFAULT_DELAY_MS = 10
DEFAULT_USER_AGENT = "DeadLinkChecker/1.0"

ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True, slots=True)
class CrawlReport:
    """Everything a finished crawl found."""
    seed: str
    outcomes: List[LinkOutcome]
    dead: List[LinkOutcome]
    total: int
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.dead


@dataclass
class CrawlSession:
    """Shared state for a single crawl, created at start and dropped at the end."""
    seed: str
    origin: Origin
    timeout: Optional[float] = None
    progress: Optional[ProgressCallback] = None
    frontier: Frontier = field(default_factory=Frontier)
    results: ResultAggregator = field(default_factory=ResultAggregator)

    def handle(self, task: Task, session: requests.Session) -> None:
        """Run one task and report progress."""
        check(task, session, self.frontier, self.results, self.origin, timeout=self.timeout)
        if self.progress is not None:
            self.progress(self.results.checked, self.frontier.total)

    def report(self, elapsed: float = 0.0) -> CrawlReport:
        return CrawlReport(
            seed=self.seed,
            outcomes=self.results.outcomes(),
            dead=self.results.dead(),
            total=self.frontier.total,
            elapsed=elapsed,
        )


def normalize_seed(url: str) -> str:
    """Normalize the start URL against itself; raise ValueError if it is unusable."""
    seed = normalize_url(url, url)
    if not seed:
        raise ValueError(f"Invalid start URL: {url}")
    return seed


def _session_factory(user_agent: str, base: SessionFactory) -> SessionFactory:
    def factory() -> requests.Session:
        session = base()
        session.headers["User-Agent"] = user_agent
        return session
    return factory


def crawl(
    start_url: str,
    concurrency: int = DEFAULT_CONCURRENCY,
    delay_ms: int = DEFAULT_DELAY_MS,
    timeout_s: Optional[float] = None,
    user_agent: str = DEFAULT_USER_AGENT,
    progress: Optional[ProgressCallback] = None,
    session_factory: SessionFactory = requests.Session,
) -> CrawlReport:
    """
    Check every link reachable from a start URL.

    Internal pages (same scheme, host and port as the start URL) are crawled
    recursively; external links are checked once and never crawled.

    Args:
        start_url: The URL to start crawling from.
        concurrency: Number of worker threads.
        delay_ms: Pause each worker takes after every task, in milliseconds.
        timeout_s: HTTP request timeout in seconds (None for no timeout).
        user_agent: User-Agent header to use for requests.
        progress: Called with (checked, total) after every task.
        session_factory: Builds one HTTP session per worker.

    Returns:
        The crawl report with every outcome and the dead subset.
    """
    seed = normalize_seed(start_url)
    ctx = CrawlSession(seed=seed, origin=origin_of(seed), timeout=timeout_s, progress=progress)
    ctx.frontier.schedule(seed, TaskKind.CRAWL)

    if progress is not None:
        progress(0, ctx.frontier.total)

    pool = WorkerPool(
        ctx.frontier,
        ctx.handle,
        concurrency=concurrency,
        delay=delay_ms / 1000.0,
        session_factory=_session_factory(user_agent, session_factory),
    )

    logger.debug("Crawling %s with %d workers", seed, concurrency)
    started = time.monotonic()
    pool.run()
    elapsed = time.monotonic() - started

    report = ctx.report(elapsed)
    logger.info(
        "Checked %d links in %.2fs, %d dead", len(report.outcomes), elapsed, len(report.dead)
    )
    return report
