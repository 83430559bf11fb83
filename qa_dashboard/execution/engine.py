"""Execution engine: drains the scheduler and records outcomes.

The engine pops runs in priority order, asks an outcome oracle whether each
run passed, appends a history line per run and raises a defect for every
failure. Persistence goes through a run sink whose failures are reported as
warnings; they never undo in-memory effects and never stop the drain.
"""

from __future__ import annotations

import datetime
import enum
import logging
import random
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol

from qa_dashboard.errors import EmptyQueue, OracleExhausted, PersistenceUnavailable
from qa_dashboard.execution.history import (
    ExecutionHistory,
    format_error_entry,
    format_run_entry,
)
from qa_dashboard.execution.scheduler import RunScheduler
from qa_dashboard.ids import IdAllocator
from qa_dashboard.records import (
    Defect,
    DefectStatus,
    ExecutionResult,
    ScheduledRun,
    Severity,
)

logger = logging.getLogger(__name__)

# Runs at or below this numeric priority raise Critical defects on failure
DEFAULT_CRITICAL_THRESHOLD = 3

PASS_NOTES = "Passed"
FAIL_NOTES = "Failed - check logs"

OutcomeOracle = Callable[[ScheduledRun], bool]


def random_oracle(rng: random.Random | None = None) -> OutcomeOracle:
    """Oracle that passes or fails each run with equal probability."""
    source = rng if rng is not None else random.Random()

    def decide(run: ScheduledRun) -> bool:
        return bool(source.getrandbits(1))

    return decide


def scripted_oracle(outcomes: Iterable[bool]) -> OutcomeOracle:
    """Oracle that replays a fixed sequence of outcomes in pop order.

    Raises:
        OracleExhausted: From the returned oracle once the sequence is used up.
    """
    remaining = iter(outcomes)

    def decide(run: ScheduledRun) -> bool:
        try:
            return bool(next(remaining))
        except StopIteration:
            raise OracleExhausted(
                f"No scripted outcome left for run {run.run_id}"
            ) from None

    return decide


class RunSink(Protocol):
    """Where the engine sends records for durable storage."""

    def persist_run(self, run: ScheduledRun) -> None: ...

    def persist_result(
        self, run_id: int, result: ExecutionResult, executed_at: str
    ) -> None: ...

    def persist_history_entry(self, text: str, timestamp: str) -> None: ...

    def persist_defect(self, defect: Defect) -> None: ...


class _NullSink:
    """Sink used when the engine runs without a store."""

    def persist_run(self, run: ScheduledRun) -> None:
        pass

    def persist_result(
        self, run_id: int, result: ExecutionResult, executed_at: str
    ) -> None:
        pass

    def persist_history_entry(self, text: str, timestamp: str) -> None:
        pass

    def persist_defect(self, defect: Defect) -> None:
        pass


class EngineState(enum.Enum):
    IDLE = "idle"
    DRAINING = "draining"


@dataclass
class RunExecution:
    """A run that was popped and given an outcome."""

    run: ScheduledRun
    result: ExecutionResult
    executed_at: str
    defect: Defect | None = None


@dataclass
class RunError:
    """A run that was popped but could not be executed."""

    run: ScheduledRun
    message: str


@dataclass
class DrainReport:
    """Everything that happened during one drain_all() call."""

    executions: list[RunExecution] = field(default_factory=list)
    defects: list[Defect] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[RunError] = field(default_factory=list)

    @property
    def passed(self) -> int:
        return sum(1 for e in self.executions if e.result.passed)

    @property
    def failed(self) -> int:
        return sum(1 for e in self.executions if not e.result.passed)


def _utc_now() -> str:
    return datetime.datetime.now(tz=datetime.timezone.utc).isoformat()


class ExecutionEngine:
    """Owns the scheduler and history and turns pending runs into outcomes.

    Only one drain runs at a time; draining always runs to completion. A run
    that has been popped is never re-queued, whatever happens downstream.
    """

    def __init__(
        self,
        scheduler: RunScheduler | None = None,
        history: ExecutionHistory | None = None,
        oracle: OutcomeOracle | None = None,
        sink: RunSink | None = None,
        id_source: Callable[[], int] | None = None,
        critical_threshold: int = DEFAULT_CRITICAL_THRESHOLD,
        timestamp: Callable[[], str] = _utc_now,
    ) -> None:
        self.scheduler = scheduler if scheduler is not None else RunScheduler()
        self.history = history if history is not None else ExecutionHistory()
        self.oracle = oracle if oracle is not None else random_oracle()
        self.sink: RunSink = sink if sink is not None else _NullSink()
        self.id_source = id_source if id_source is not None else IdAllocator().allocate
        self.critical_threshold = critical_threshold
        self._timestamp = timestamp
        self._state = EngineState.IDLE
        self._state_lock = threading.Lock()

    @property
    def state(self) -> EngineState:
        return self._state

    def submit(self, test_case_id: int, priority: int) -> ScheduledRun:
        """Schedule a run and hand a copy to the sink.

        A sink failure is logged; the run stays scheduled.
        """
        run = self.scheduler.submit(test_case_id, priority)
        try:
            self.sink.persist_run(run)
        except PersistenceUnavailable as e:
            logger.warning("Run %d scheduled but not stored: %s", run.run_id, e)
        return run

    def drain_all(self) -> DrainReport:
        """Execute every pending run in priority order.

        Returns:
            DrainReport describing executions, defects, warnings and errors.

        Raises:
            RuntimeError: If another drain is already in progress.
        """
        with self._state_lock:
            if self._state is EngineState.DRAINING:
                raise RuntimeError("A drain is already in progress")
            self._state = EngineState.DRAINING
        logger.debug("Draining %d scheduled runs", len(self.scheduler))

        report = DrainReport()
        try:
            while not self.scheduler.is_empty():
                try:
                    run = self.scheduler.pop_next()
                except EmptyQueue:
                    break
                recorded = len(report.executions)
                try:
                    self._execute(run, report)
                except Exception as e:
                    self._record_error(
                        run, e, report,
                        outcome_recorded=len(report.executions) > recorded,
                    )
        finally:
            with self._state_lock:
                self._state = EngineState.IDLE

        logger.debug(
            "Drain finished: %d passed, %d failed, %d errors",
            report.passed, report.failed, len(report.errors),
        )
        return report

    def classify_severity(self, priority: int) -> Severity:
        if priority <= self.critical_threshold:
            return Severity.CRITICAL
        return Severity.MAJOR

    def _execute(self, run: ScheduledRun, report: DrainReport) -> None:
        # Every step that can fail for this run comes before the history
        # line, so each run gets exactly one history entry.
        passed = bool(self.oracle(run))
        result = ExecutionResult(
            test_case_id=run.test_case_id,
            passed=passed,
            notes=PASS_NOTES if passed else FAIL_NOTES,
        )
        defect = None
        if not passed:
            defect = Defect(
                id=self.id_source(),
                test_case_id=run.test_case_id,
                title=f"Auto-generated defect for test {run.test_case_id}",
                severity=self.classify_severity(run.priority),
                status=DefectStatus.OPEN,
            )
        executed_at = self._timestamp()
        entry = format_run_entry(run, passed)

        self.history.append(entry)
        report.executions.append(
            RunExecution(run=run, result=result, executed_at=executed_at, defect=defect)
        )
        if defect is not None:
            report.defects.append(defect)

        self._emit(report, self.sink.persist_result, run.run_id, result, executed_at)
        self._emit(report, self.sink.persist_history_entry, entry, self._timestamp())
        if defect is not None:
            self._emit(report, self.sink.persist_defect, defect)

    def _record_error(
        self,
        run: ScheduledRun,
        error: Exception,
        report: DrainReport,
        outcome_recorded: bool = False,
    ) -> None:
        message = str(error) or type(error).__name__
        if outcome_recorded:
            # Outcome line already written; only storing it went wrong
            logger.warning(
                "Run %s (test case %s) executed but not fully stored: %s",
                run.run_id, run.test_case_id, message,
            )
            report.warnings.append(f"Run {run.run_id}: {message}")
            return
        logger.warning(
            "Run %s (test case %s) failed to execute: %s",
            run.run_id, run.test_case_id, message,
        )
        report.errors.append(RunError(run=run, message=message))
        entry = format_error_entry(run, message)
        self.history.append(entry)
        self._emit(report, self.sink.persist_history_entry, entry, self._timestamp())

    def _emit(
        self, report: DrainReport, persist: Callable[..., Any], *args: Any
    ) -> None:
        try:
            persist(*args)
        except PersistenceUnavailable as e:
            logger.warning("%s", e)
            report.warnings.append(str(e))
