"""Append-only execution history.

Holds the human-readable run summaries in insertion order. Entries are never
removed or rewritten; numbering them for display is left to the caller.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable

from qa_dashboard.records import ScheduledRun


def format_run_entry(run: ScheduledRun, passed: bool) -> str:
    """Format the history line for a completed run."""
    outcome = "PASS" if passed else "FAIL"
    return f"Run {run.run_id}: testCase {run.test_case_id} -> {outcome}"


def format_error_entry(run: ScheduledRun, message: str) -> str:
    """Format the history line for a run that could not be executed."""
    return f"Run {run.run_id}: testCase {run.test_case_id} -> ERROR ({message})"


class ExecutionHistory:
    """Ordered log of run outcomes, oldest first."""

    def __init__(self, entries: Iterable[str] = ()) -> None:
        self._entries: list[str] = list(entries)
        self._lock = threading.Lock()

    def append(self, text: str) -> None:
        """Add an entry at the end of the log.

        Raises:
            TypeError: If text is not a string.
        """
        if not isinstance(text, str):
            raise TypeError(
                f"history entry must be a str, got {type(text).__name__}"
            )
        with self._lock:
            self._entries.append(text)

    def all_entries(self) -> list[str]:
        """Return a snapshot of every entry in insertion order."""
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
