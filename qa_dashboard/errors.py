"""Exception types raised by the QA dashboard core."""

from __future__ import annotations


class QADashboardError(Exception):
    """Base class for all dashboard errors."""


class EmptyQueue(QADashboardError, LookupError):
    """Raised when popping from a scheduler with no pending runs."""

    def __init__(self, message: str = "No scheduled runs are pending") -> None:
        super().__init__(message)


class DuplicateIdConflict(QADashboardError):
    """Raised when the id allocator hands out an id that is already in use."""

    def __init__(self, conflicting_id: int) -> None:
        super().__init__(f"Id {conflicting_id} is already in use")
        self.conflicting_id = conflicting_id


class PersistenceUnavailable(QADashboardError):
    """Raised when a call into the document store fails."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(f"{operation} failed: {reason}")
        self.operation = operation
        self.reason = reason


class OracleExhausted(QADashboardError):
    """Raised when a scripted outcome oracle has no outcomes left."""


class UnknownTestCase(QADashboardError, KeyError):
    """Raised when a test case id does not exist in the store."""

    def __init__(self, test_case_id: int) -> None:
        super().__init__(f"Test case {test_case_id} not found")
        self.test_case_id = test_case_id

    def __str__(self) -> str:
        return str(self.args[0])
