"""
Fetch a single address, classify the response and schedule follow-up work.
"""
from __future__ import annotations

import logging
from typing import List, Optional

import requests
from bs4 import BeautifulSoup, SoupStrainer

from deadlinks.frontier import Frontier, Task, TaskKind
from deadlinks.results import FETCH_ERROR, LinkOutcome, ResultAggregator
from deadlinks.urls import Origin, is_internal, normalize_url, resolve_redirect

logger = logging.getLogger(__name__)

# SoupStrainer to parse only <a> tags (faster link extraction)
LINK_STRAINER = SoupStrainer("a", href=True)

NO_LOCATION_ERROR = "Redirect with no Location header"


def extract_links(html: str) -> List[str]:
    """Extract all href values from <a> tags, in document order."""
    soup = BeautifulSoup(html, "lxml", parse_only=LINK_STRAINER)
    return [a["href"] for a in soup.find_all("a", href=True)]


def is_html(content_type: Optional[str]) -> bool:
    return "text/html" in (content_type or "").lower()


def schedule_address(
    frontier: Frontier,
    address: str,
    origin: Origin,
    depth: int,
    parent: Optional[str] = None,
) -> bool:
    """Queue an address as a crawl task if internal, a check task otherwise."""
    kind = TaskKind.CRAWL if is_internal(address, origin) else TaskKind.CHECK
    return frontier.schedule(address, kind, depth=depth, parent=parent)


def check(
    task: Task,
    session: requests.Session,
    frontier: Frontier,
    results: ResultAggregator,
    origin: Origin,
    timeout: Optional[float] = None,
) -> Optional[LinkOutcome]:
    """
    Check one address and record its outcome.

    Redirects are never followed by the transport: the redirect target is
    scheduled as its own task at the same depth. For crawl tasks a 2xx HTML
    body is parsed and every new link found is scheduled one level deeper.

    Transport failures are recorded as FETCH_ERROR and never raised.
    Returns None only if the address was already crawled.
    """
    address = task.address
    crawl = task.kind is TaskKind.CRAWL
    if crawl and not frontier.mark_visited(address):
        logger.debug("Already crawled %s", address)
        return None

    html: Optional[str] = None
    try:
        with session.get(address, allow_redirects=False, stream=True, timeout=timeout) as resp:
            status = resp.status_code
            location = resp.headers.get("location")
            # Only internal pages are ever read and parsed
            if crawl and 200 <= status < 300 and is_html(resp.headers.get("content-type")):
                html = resp.text
    except requests.RequestException as e:
        logger.info("Fetch failed for %s: %s", address, e)
        return _record(results, LinkOutcome(address, FETCH_ERROR, str(e)))

    logger.debug(
        "%s %s (%s, depth %d, from %s)", status, address, task.kind.value, task.depth, task.parent or "-"
    )

    if status >= 400:
        return _record(results, LinkOutcome(address, status))

    if 300 <= status < 400:
        return _follow_redirect(task, status, location, frontier, results, origin)

    outcome = _record(results, LinkOutcome(address, status))
    if html is not None:
        _schedule_links(task, html, frontier, origin)
    return outcome


def _record(results: ResultAggregator, outcome: LinkOutcome) -> LinkOutcome:
    results.record(outcome)
    return outcome


def _follow_redirect(
    task: Task,
    status: int,
    location: Optional[str],
    frontier: Frontier,
    results: ResultAggregator,
    origin: Origin,
) -> LinkOutcome:
    """Record a 3xx response and schedule its target."""
    if not location:
        return _record(results, LinkOutcome(task.address, status, NO_LOCATION_ERROR))

    target = resolve_redirect(location, task.address)
    if target is None:
        return _record(
            results,
            LinkOutcome(task.address, status, f"Redirect to unsupported location: {location}"),
        )

    outcome = _record(results, LinkOutcome(task.address, status))
    if schedule_address(frontier, target, origin, depth=task.depth, parent=task.address):
        logger.debug("Redirect %s -> %s", task.address, target)
    return outcome


def _schedule_links(task: Task, html: str, frontier: Frontier, origin: Origin) -> int:
    """Normalize every anchor on a page and schedule the unseen ones."""
    new_links = 0
    for href in extract_links(html):
        target = normalize_url(href, base=task.address)
        if not target:
            continue
        if schedule_address(frontier, target, origin, depth=task.depth + 1, parent=task.address):
            new_links += 1

    logger.debug("%s: +%d links", task.address, new_links)
    return new_links
