"""Tests for the frontier queue and its termination protocol."""

from __future__ import annotations

import threading

import pytest

from deadlinks.frontier import Frontier, TaskKind


class TestSchedule:
    def test_address_is_scheduled_once(self) -> None:
        frontier = Frontier()
        assert frontier.schedule("https://site.test/", TaskKind.CRAWL) is True
        assert frontier.schedule("https://site.test/", TaskKind.CRAWL) is False
        assert frontier.schedule("https://site.test/", TaskKind.CHECK) is False
        assert frontier.total == 1
        assert frontier.pending == 1

    def test_total_counts_finished_addresses(self) -> None:
        frontier = Frontier()
        frontier.schedule("https://site.test/a", TaskKind.CRAWL)
        frontier.acquire()
        frontier.task_done()
        frontier.schedule("https://other.test/b", TaskKind.CHECK, depth=1, parent="https://site.test/a")
        assert frontier.total == 2

    def test_task_carries_depth_and_parent(self) -> None:
        frontier = Frontier()
        frontier.schedule("https://site.test/x", TaskKind.CHECK, depth=3, parent="https://site.test/")
        task = frontier.acquire()
        assert task.address == "https://site.test/x"
        assert task.kind is TaskKind.CHECK
        assert task.depth == 3
        assert task.parent == "https://site.test/"

    def test_mark_visited_claims_once(self) -> None:
        frontier = Frontier()
        assert frontier.mark_visited("https://site.test/") is True
        assert frontier.mark_visited("https://site.test/") is False


class TestTermination:
    def test_empty_frontier_is_finished(self) -> None:
        frontier = Frontier()
        assert frontier.finished
        assert frontier.acquire() is None

    def test_acquire_waits_while_work_is_in_flight(self) -> None:
        frontier = Frontier()
        frontier.schedule("https://site.test/", TaskKind.CRAWL)
        assert frontier.acquire() is not None
        assert frontier.in_flight == 1

        received = []
        waiter = threading.Thread(target=lambda: received.append(frontier.acquire()))
        waiter.start()
        waiter.join(0.2)
        assert waiter.is_alive(), "worker must not exit while a task is in flight"

        # The in-flight task discovers new work before completing
        frontier.schedule("https://site.test/next", TaskKind.CRAWL)
        waiter.join(2)
        assert not waiter.is_alive()
        assert received[0].address == "https://site.test/next"

        frontier.task_done()
        frontier.task_done()
        assert frontier.finished
        assert frontier.acquire() is None

    def test_last_task_done_releases_waiters(self) -> None:
        frontier = Frontier()
        frontier.schedule("https://site.test/", TaskKind.CRAWL)
        frontier.acquire()

        results = []
        waiters = [threading.Thread(target=lambda: results.append(frontier.acquire())) for _ in range(4)]
        for waiter in waiters:
            waiter.start()

        frontier.task_done()
        for waiter in waiters:
            waiter.join(2)
            assert not waiter.is_alive()
        assert results == [None] * 4

    def test_abort_releases_waiters_with_pending_work(self) -> None:
        frontier = Frontier()
        frontier.schedule("https://site.test/", TaskKind.CRAWL)
        frontier.acquire()
        frontier.schedule("https://site.test/a", TaskKind.CRAWL)

        frontier.abort()
        assert frontier.acquire() is None

    def test_task_done_without_acquire_raises(self) -> None:
        with pytest.raises(RuntimeError):
            Frontier().task_done()
