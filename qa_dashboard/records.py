"""Record types shared by the scheduler, the engine and the document store.

Each record knows how to turn itself into a plain dict document and, where the
store hands records back, how to rebuild itself from one.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

# Lowest id handed out to test cases and defects
MIN_RECORD_ID = 1000


class PriorityClass(str, enum.Enum):
    """Business priority of a test case."""

    P0 = "P0"
    P1 = "P1"
    P2 = "P2"

    @classmethod
    def parse(cls, value: str | PriorityClass) -> PriorityClass:
        """Parse a priority class, accepting any letter case.

        Raises:
            ValueError: If the value is not P0, P1 or P2.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(
                f"Invalid priority class '{value}'. "
                f"Must be one of: {[p.value for p in cls]}"
            ) from None


class Severity(str, enum.Enum):
    CRITICAL = "Critical"
    MAJOR = "Major"
    MINOR = "Minor"

    @classmethod
    def parse(cls, value: str | Severity) -> Severity:
        """Parse a severity name, accepting any letter case.

        Raises:
            ValueError: If the value is not a known severity.
        """
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        raise ValueError(
            f"Invalid severity '{value}'. "
            f"Must be one of: {[s.value for s in cls]}"
        )


class DefectStatus(str, enum.Enum):
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    CLOSED = "Closed"


@dataclass(frozen=True)
class TestCase:
    """A test case tracked by the dashboard."""

    __test__ = False  # keep pytest from collecting this class

    id: int
    name: str
    description: str = ""
    priority: PriorityClass = PriorityClass.P1
    automated: bool = False

    def __post_init__(self) -> None:
        if self.id < MIN_RECORD_ID:
            raise ValueError(
                f"Test case id {self.id} is below the minimum {MIN_RECORD_ID}"
            )
        object.__setattr__(self, "priority", PriorityClass.parse(self.priority))

    def to_doc(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "priority": self.priority.value,
            "automated": self.automated,
        }

    @classmethod
    def from_doc(cls, doc: dict[str, Any]) -> TestCase:
        """Rebuild a test case from a stored document.

        Missing optional fields fall back to their defaults, matching
        documents written by older versions of the dashboard.
        """
        return cls(
            id=int(doc["id"]),
            name=doc.get("name") or "",
            description=doc.get("description") or "",
            priority=PriorityClass.parse(doc.get("priority") or "P1"),
            automated=bool(doc.get("automated", False)),
        )


@dataclass(frozen=True)
class ScheduledRun:
    """A pending execution of a test case.

    Lower ``priority`` values are more urgent. ``submitted_at`` comes from a
    monotonic clock and is only meaningful relative to other runs submitted
    to the same scheduler.
    """

    run_id: int
    test_case_id: int
    priority: int
    submitted_at: float

    def to_doc(self) -> dict[str, Any]:
        return {
            "runId": self.run_id,
            "testCaseId": self.test_case_id,
            "priority": self.priority,
            "submittedAt": self.submitted_at,
        }


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of executing one scheduled run."""

    test_case_id: int
    passed: bool
    notes: str = ""

    def to_doc(self) -> dict[str, Any]:
        return {
            "testCaseId": self.test_case_id,
            "passed": self.passed,
            "notes": self.notes,
        }


@dataclass
class Defect:
    """A defect raised against a test case."""

    id: int
    test_case_id: int
    title: str
    severity: Severity
    status: DefectStatus = DefectStatus.OPEN

    def to_doc(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "testCaseId": self.test_case_id,
            "title": self.title,
            "severity": self.severity.value,
            "status": self.status.value,
        }

    @classmethod
    def from_doc(cls, doc: dict[str, Any]) -> Defect:
        return cls(
            id=int(doc["id"]),
            test_case_id=int(doc["testCaseId"]),
            title=doc.get("title") or "",
            severity=Severity.parse(doc.get("severity") or "Major"),
            status=DefectStatus(doc.get("status") or "Open"),
        )
