"""Priority scheduler for pending test runs.

Runs are popped in (priority, submitted_at, submission sequence) order: lower
numeric priority first, then earlier submission. Runs submitted with the same
priority at the same clock instant come out in submission order.
"""

from __future__ import annotations

import heapq
import itertools
import threading
import time
from collections.abc import Callable

from qa_dashboard.errors import EmptyQueue
from qa_dashboard.records import ScheduledRun

# Heap entry: (priority, submitted_at, sequence, run)
_Entry = tuple[int, float, int, ScheduledRun]


class RunScheduler:
    """Binary min-heap of scheduled runs.

    Submission never validates the test case id; referential checks belong
    to the caller. ``submit`` and ``pop_next`` are atomic with respect to
    each other.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        first_run_id: int = 1,
    ) -> None:
        self._clock = clock
        self._heap: list[_Entry] = []
        self._run_ids = itertools.count(first_run_id)
        self._sequence = itertools.count()
        self._lock = threading.Lock()

    def submit(self, test_case_id: int, priority: int) -> ScheduledRun:
        """Schedule a run of a test case.

        Args:
            test_case_id: Id of the test case to run. Not validated.
            priority: Numeric priority, lower is more urgent.

        Returns:
            The newly created ScheduledRun.

        Raises:
            TypeError: If priority is not an integer.
        """
        if isinstance(priority, bool) or not isinstance(priority, int):
            raise TypeError(
                f"priority must be an int, got {type(priority).__name__}"
            )
        with self._lock:
            run = ScheduledRun(
                run_id=next(self._run_ids),
                test_case_id=test_case_id,
                priority=priority,
                submitted_at=self._clock(),
            )
            heapq.heappush(
                self._heap,
                (run.priority, run.submitted_at, next(self._sequence), run),
            )
        return run

    def pop_next(self) -> ScheduledRun:
        """Remove and return the most urgent pending run.

        Raises:
            EmptyQueue: If no runs are pending.
        """
        with self._lock:
            if not self._heap:
                raise EmptyQueue()
            return heapq.heappop(self._heap)[-1]

    def is_empty(self) -> bool:
        with self._lock:
            return not self._heap

    def pending(self) -> list[ScheduledRun]:
        """Return the pending runs in pop order without removing them."""
        with self._lock:
            return [entry[-1] for entry in sorted(self._heap)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._heap)
