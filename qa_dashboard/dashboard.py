"""QA dashboard: test case and defect records around the execution core.

QADashboard wires the prefix index, the execution engine and the store
gateway together. It owns the referential checks the core leaves to its
callers (a run can only be scheduled for a known test case) and keeps the
index in step with the store by rebuilding it after deletions.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from qa_dashboard.config import DashboardConfig
from qa_dashboard.errors import DuplicateIdConflict, PersistenceUnavailable, UnknownTestCase
from qa_dashboard.execution.engine import DrainReport, ExecutionEngine, OutcomeOracle
from qa_dashboard.execution.history import ExecutionHistory
from qa_dashboard.execution.scheduler import RunScheduler
from qa_dashboard.ids import IdAllocator
from qa_dashboard.records import (
    Defect,
    DefectStatus,
    PriorityClass,
    ScheduledRun,
    Severity,
    TestCase,
)
from qa_dashboard.reporting.reporter import Reporter
from qa_dashboard.search.prefix_index import PrefixIndex
from qa_dashboard.storage.gateway import StoreGateway
from qa_dashboard.storage.json_store import JsonDocumentStore

logger = logging.getLogger(__name__)


class QADashboard:
    """Test case, defect and run management backed by a document store.

    On construction the index is rebuilt from the stored test case names,
    the history is seeded from stored entries and the shared id counter is
    moved past every id already used by a test case or defect.
    """

    def __init__(
        self,
        gateway: StoreGateway,
        oracle: OutcomeOracle | None = None,
        config: DashboardConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config if config is not None else DashboardConfig()
        self.gateway = gateway
        self.index = PrefixIndex()
        self.ids = IdAllocator(
            start=gateway.next_available_id(gateway.max_existing_id()),
            floor=self.config.id_floor,
        )
        self.engine = ExecutionEngine(
            scheduler=RunScheduler(clock=clock, first_run_id=self.config.first_run_id),
            history=ExecutionHistory(gateway.load_all_history_entries()),
            oracle=oracle,
            sink=gateway,
            id_source=self._allocate_id,
            critical_threshold=self.config.critical_priority_threshold,
        )
        self.index.rebuild(gateway.load_all_test_case_names())

    @classmethod
    def from_config(
        cls, config: DashboardConfig, oracle: OutcomeOracle | None = None
    ) -> QADashboard:
        """Open the dashboard on the JSON store named by the config."""
        store = JsonDocumentStore(config.store_path)
        return cls(StoreGateway(store, id_floor=config.id_floor), oracle=oracle, config=config)

    # --- Test cases ---

    def create_test_case(
        self,
        name: str,
        description: str = "",
        priority: PriorityClass | str = PriorityClass.P1,
        automated: bool = False,
    ) -> TestCase:
        """Create, store and index a test case.

        Raises:
            ValueError: If the priority class is invalid.
            PersistenceUnavailable: If the store rejects the record. The name
                is not indexed in that case.
        """
        test_case = TestCase(
            id=self._allocate_id(),
            name=name.strip(),
            description=description.strip(),
            priority=PriorityClass.parse(priority),
            automated=automated,
        )
        self.gateway.insert_test_case(test_case)
        self.index.insert(test_case.name)
        logger.debug("Created test case %d (%s)", test_case.id, test_case.name)
        return test_case

    def list_test_cases(self) -> list[TestCase]:
        return self.gateway.list_test_cases()

    def search(self, prefix: str) -> list[str]:
        """Names of known test cases starting with prefix, lower-cased."""
        return self.index.search_prefix(prefix.strip())

    def delete_test_case(self, test_case_id: int) -> None:
        """Delete a test case and rebuild the name index from the store.

        Runs already scheduled for the test case stay scheduled.

        Raises:
            UnknownTestCase: If no test case has this id.
        """
        if not self.gateway.delete_test_case(test_case_id):
            raise UnknownTestCase(test_case_id)
        self.index.rebuild(self.gateway.load_all_test_case_names())

    # --- Runs ---

    def schedule_run(self, test_case_id: int, priority: int) -> ScheduledRun:
        """Schedule a run of an existing test case.

        Args:
            test_case_id: Id of a stored test case.
            priority: Numeric priority, 1 is the most urgent.

        Raises:
            UnknownTestCase: If the test case does not exist.
        """
        if self.gateway.find_test_case(test_case_id) is None:
            raise UnknownTestCase(test_case_id)
        return self.engine.submit(test_case_id, priority)

    def execute_scheduled_runs(self) -> DrainReport:
        return self.engine.drain_all()

    def write_report(self, drain: DrainReport, path: Path) -> None:
        """Write a drain report plus the full history in the configured format."""
        reporter = Reporter()
        reporter.add_drain(drain)
        reporter.set_history(self.engine.history.all_entries())
        reporter.write(path, self.config.report_format)

    # --- Defects ---

    def add_defect(
        self, test_case_id: int, title: str, severity: Severity | str
    ) -> Defect:
        """Record a manually reported defect with status Open."""
        defect = Defect(
            id=self._allocate_id(),
            test_case_id=test_case_id,
            title=title.strip(),
            severity=Severity.parse(severity),
            status=DefectStatus.OPEN,
        )
        self.gateway.persist_defect(defect)
        return defect

    def list_defects(self) -> list[Defect]:
        return self.gateway.list_defects()

    # --- History ---

    def view_history(self) -> list[tuple[int, str]]:
        """History entries numbered from 1, oldest first."""
        return list(enumerate(self.engine.history.all_entries(), start=1))

    # --- Ids ---

    def _allocate_id(self) -> int:
        try:
            return self.ids.allocate(self._id_in_use)
        except DuplicateIdConflict as e:
            logger.warning(
                "Id %d is already in use, re-deriving from the store",
                e.conflicting_id,
            )
            self.ids.rederive(self.gateway.max_existing_id())
            return self.ids.allocate(self._id_in_use)

    def _id_in_use(self, candidate: int) -> bool:
        try:
            return self.gateway.id_in_use(candidate)
        except PersistenceUnavailable as e:
            logger.warning("Cannot check id %d against the store: %s", candidate, e)
            return False
