"""
Per-link outcomes and their thread-safe aggregation.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import List, Optional, Union

# Status tag for transport-level failures (DNS, connection, timeout)
FETCH_ERROR = "FETCH_ERROR"

Status = Union[int, str]


@dataclass(frozen=True, slots=True)
class LinkOutcome:
    """Result of checking a single address."""
    address: str
    status: Status
    error: Optional[str] = None

    @property
    def is_dead(self) -> bool:
        if self.status == FETCH_ERROR or self.error is not None:
            return True
        return isinstance(self.status, int) and self.status >= 400

    def describe(self) -> str:
        """Status text used in the dead-link listing."""
        if self.error:
            return f"{self.status}, Error: {self.error}"
        return str(self.status)


class ResultAggregator:
    """
    Collects outcomes in arrival order and keeps the dead subset alongside.

    Each address is recorded at most once; a second record for the same
    address is a programming error and raises ValueError.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._outcomes: List[LinkOutcome] = []
        self._dead: List[LinkOutcome] = []
        self._recorded: set[str] = set()

    def record(self, outcome: LinkOutcome) -> None:
        """Store an outcome."""
        with self._lock:
            if outcome.address in self._recorded:
                raise ValueError(f"Outcome already recorded for {outcome.address}")
            self._recorded.add(outcome.address)
            self._outcomes.append(outcome)
            if outcome.is_dead:
                self._dead.append(outcome)

    @property
    def checked(self) -> int:
        with self._lock:
            return len(self._outcomes)

    def outcomes(self) -> List[LinkOutcome]:
        with self._lock:
            return list(self._outcomes)

    def dead(self) -> List[LinkOutcome]:
        with self._lock:
            return list(self._dead)
