"""Id allocation for test cases and defects."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from qa_dashboard.errors import DuplicateIdConflict
from qa_dashboard.records import MIN_RECORD_ID

logger = logging.getLogger(__name__)


def next_available_id(existing_max: int | None, floor: int = MIN_RECORD_ID) -> int:
    """Return the first id above existing_max, never below floor.

    Args:
        existing_max: Largest id present in the store, or None if empty.
        floor: Smallest id that may be handed out.
    """
    if existing_max is None:
        return floor
    return max(floor, existing_max + 1)


class IdAllocator:
    """Monotonic id counter shared by test cases and defects."""

    def __init__(self, start: int = MIN_RECORD_ID, floor: int = MIN_RECORD_ID) -> None:
        self.floor = floor
        self._next = max(start, floor)
        self._lock = threading.Lock()

    @property
    def peek(self) -> int:
        """The id the next allocate() call will try."""
        return self._next

    def allocate(self, is_taken: Callable[[int], bool] | None = None) -> int:
        """Hand out the next id.

        Args:
            is_taken: Optional check against the authoritative store.

        Raises:
            DuplicateIdConflict: If is_taken reports the candidate as used.
                The counter is not advanced; call rederive() before retrying.
        """
        with self._lock:
            candidate = self._next
            if is_taken is not None and is_taken(candidate):
                raise DuplicateIdConflict(candidate)
            self._next = candidate + 1
            return candidate

    def rederive(self, authoritative_max: int | None) -> int:
        """Move the counter past the authoritative maximum id.

        The counter never moves backwards.

        Returns:
            The id the next allocate() call will try.
        """
        with self._lock:
            target = next_available_id(authoritative_max, self.floor)
            if target > self._next:
                logger.debug("Id counter moved from %d to %d", self._next, target)
                self._next = target
            return self._next
