"""
Fixed-size pool of worker threads draining a Frontier.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, List, Optional

import requests

from deadlinks.frontier import Frontier, Task

logger = logging.getLogger(__name__)

TaskHandler = Callable[[Task, requests.Session], None]
SessionFactory = Callable[[], requests.Session]


class WorkerPool:
    """
    Runs `concurrency` threads, each looping acquire -> handle -> sleep(delay).

    Every worker owns its own HTTP session. The delay is applied per worker
    after each task, so the overall request rate is roughly concurrency / delay.
    An exception escaping the handler aborts the frontier and is re-raised
    from `run()` once all workers have stopped.
    """

    def __init__(
        self,
        frontier: Frontier,
        handler: TaskHandler,
        concurrency: int,
        delay: float = 0.0,
        session_factory: SessionFactory = requests.Session,
    ) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        if delay < 0:
            raise ValueError(f"delay must not be negative, got {delay}")
        self.frontier = frontier
        self.handler = handler
        self.concurrency = concurrency
        self.delay = delay
        self.session_factory = session_factory
        self._error: Optional[BaseException] = None
        self._error_lock = threading.Lock()

    def run(self) -> None:
        """Start all workers and block until every one of them has exited."""
        workers: List[threading.Thread] = [
            threading.Thread(target=self._work, args=(i,), name=f"deadlinks-worker-{i}", daemon=True)
            for i in range(self.concurrency)
        ]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join()

        if self._error is not None:
            raise self._error

    def _work(self, worker_id: int) -> None:
        logger.debug("Worker %d started", worker_id)
        try:
            session = self.session_factory()
        except Exception as e:
            logger.error("Worker %d could not create a session: %s", worker_id, e)
            self._fail(e)
            return

        try:
            while True:
                task = self.frontier.acquire()
                if task is None:
                    break
                try:
                    self.handler(task, session)
                except Exception as e:
                    logger.error("Worker %d failed on %s: %s", worker_id, task.address, e)
                    self._fail(e)
                    return
                finally:
                    self.frontier.task_done()
                if self.delay:
                    time.sleep(self.delay)
        finally:
            session.close()
            logger.debug("Worker %d stopped", worker_id)

    def _fail(self, error: BaseException) -> None:
        with self._error_lock:
            if self._error is None:
                self._error = error
        self.frontier.abort()
