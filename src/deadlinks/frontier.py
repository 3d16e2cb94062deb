"""
Shared work queue with deduplication and termination detection.

Workers pull tasks with `acquire()` and must call `task_done()` once the task
and every follow-up it schedules have finished. Crawling is over when the
queue is empty and no task is in flight; both are checked under one lock so a
worker cannot exit while another may still schedule work.
"""
from __future__ import annotations

import enum
import threading
from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional, Set


class TaskKind(enum.Enum):
    """What a worker does with an address."""
    CRAWL = "crawl"  # fetch, classify, extract links from HTML
    CHECK = "check"  # fetch and classify only


@dataclass(frozen=True, slots=True)
class Task:
    """A unit of work pulled from the frontier."""
    address: str
    kind: TaskKind
    depth: int = 0
    parent: Optional[str] = None


class Frontier:
    """Deduplicated task queue shared by every worker of a crawl."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._tasks: Deque[Task] = deque()
        self._queued: Set[str] = set()
        self._visited: Set[str] = set()
        self._in_flight = 0
        self._aborted = False

    def schedule(
        self,
        address: str,
        kind: TaskKind,
        depth: int = 0,
        parent: Optional[str] = None,
    ) -> bool:
        """Queue an address unless it was ever queued before. Returns True if queued."""
        with self._cond:
            if address in self._queued:
                return False
            self._queued.add(address)
            self._tasks.append(Task(address, kind, depth, parent))
            self._cond.notify()
            return True

    def mark_visited(self, address: str) -> bool:
        """Claim the one crawl pass for an address. Returns False if already claimed."""
        with self._cond:
            if address in self._visited:
                return False
            self._visited.add(address)
            return True

    def acquire(self) -> Optional[Task]:
        """
        Block until a task is available or crawling is finished.

        Returns None once the queue is empty with nothing in flight, or after
        `abort()`; the caller should then exit.
        """
        with self._cond:
            while True:
                if self._aborted:
                    return None
                if self._tasks:
                    self._in_flight += 1
                    return self._tasks.popleft()
                if self._in_flight == 0:
                    # Wake the others so they observe the same condition
                    self._cond.notify_all()
                    return None
                self._cond.wait()

    def task_done(self) -> None:
        """Mark a previously acquired task as complete."""
        with self._cond:
            if self._in_flight <= 0:
                raise RuntimeError("task_done() called more times than acquire()")
            self._in_flight -= 1
            if self._in_flight == 0 and not self._tasks:
                self._cond.notify_all()

    def abort(self) -> None:
        """Stop handing out tasks and release every waiting worker."""
        with self._cond:
            self._aborted = True
            self._cond.notify_all()

    @property
    def total(self) -> int:
        """Number of addresses ever scheduled. Grows while the crawl runs."""
        with self._cond:
            return len(self._queued)

    @property
    def pending(self) -> int:
        with self._cond:
            return len(self._tasks)

    @property
    def in_flight(self) -> int:
        with self._cond:
            return self._in_flight

    @property
    def finished(self) -> bool:
        with self._cond:
            return not self._tasks and self._in_flight == 0
