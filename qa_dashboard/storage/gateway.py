"""Boundary between the in-memory core and the document store.

StoreGateway loads the data the core is seeded from and accepts the records
the core emits. Every store failure comes out as PersistenceUnavailable so the
engine can treat it as a warning.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from qa_dashboard.errors import PersistenceUnavailable
from qa_dashboard.ids import next_available_id
from qa_dashboard.records import (
    MIN_RECORD_ID,
    Defect,
    ExecutionResult,
    ScheduledRun,
    TestCase,
)
from qa_dashboard.storage.store import DocumentStore

logger = logging.getLogger(__name__)


@contextmanager
def _store_call(operation: str) -> Iterator[None]:
    try:
        yield
    except PersistenceUnavailable:
        raise
    except Exception as e:
        raise PersistenceUnavailable(operation, str(e) or type(e).__name__) from e


class StoreGateway:
    """Loads seed data from and persists core records to a DocumentStore."""

    def __init__(self, store: DocumentStore, id_floor: int = MIN_RECORD_ID) -> None:
        self.store = store
        self.id_floor = id_floor

    # --- Seeding ---

    def load_all_test_case_names(self) -> list[str]:
        with _store_call("load test case names"):
            return [
                doc["name"]
                for doc in self.store.find("testcases")
                if isinstance(doc.get("name"), str)
            ]

    def load_all_history_entries(self) -> list[str]:
        with _store_call("load history"):
            return [
                doc["entry"]
                for doc in self.store.find("history")
                if isinstance(doc.get("entry"), str)
            ]

    def max_existing_id(self) -> int | None:
        """Largest id used by any test case or defect, or None if none exist."""
        with _store_call("read max id"):
            ids = [
                value
                for value in (
                    self.store.max_value("testcases", "id"),
                    self.store.max_value("defects", "id"),
                )
                if value is not None
            ]
        return max(ids) if ids else None

    def next_available_id(self, existing_max: int | None) -> int:
        return next_available_id(existing_max, self.id_floor)

    def id_in_use(self, record_id: int) -> bool:
        with _store_call("check id"):
            return (
                self.store.find_one("testcases", id=record_id) is not None
                or self.store.find_one("defects", id=record_id) is not None
            )

    # --- Emission from the engine ---

    def persist_run(self, run: ScheduledRun) -> None:
        with _store_call(f"persist run {run.run_id}"):
            self.store.insert_one("testruns", run.to_doc())

    def persist_result(
        self, run_id: int, result: ExecutionResult, executed_at: str
    ) -> None:
        doc = {
            "runId": run_id,
            "testCaseId": result.test_case_id,
            "executedAt": executed_at,
            "result": result.to_doc(),
        }
        with _store_call(f"persist result of run {run_id}"):
            self.store.insert_one("testruns", doc)

    def persist_history_entry(self, text: str, timestamp: str) -> None:
        with _store_call("persist history entry"):
            self.store.insert_one("history", {"entry": text, "timestamp": timestamp})

    def persist_defect(self, defect: Defect) -> None:
        with _store_call(f"persist defect {defect.id}"):
            self.store.insert_one("defects", defect.to_doc())

    # --- Record CRUD ---

    def insert_test_case(self, test_case: TestCase) -> None:
        with _store_call(f"insert test case {test_case.id}"):
            self.store.insert_one("testcases", test_case.to_doc())

    def find_test_case(self, test_case_id: int) -> TestCase | None:
        with _store_call(f"find test case {test_case_id}"):
            doc = self.store.find_one("testcases", id=test_case_id)
        return TestCase.from_doc(doc) if doc is not None else None

    def list_test_cases(self) -> list[TestCase]:
        with _store_call("list test cases"):
            docs = self.store.find("testcases")
        return [TestCase.from_doc(doc) for doc in docs]

    def delete_test_case(self, test_case_id: int) -> bool:
        with _store_call(f"delete test case {test_case_id}"):
            return self.store.delete_one("testcases", id=test_case_id)

    def list_defects(self) -> list[Defect]:
        with _store_call("list defects"):
            docs = self.store.find("defects")
        return [Defect.from_doc(doc) for doc in docs]

    def list_results(self) -> list[dict]:
        """Stored execution results, oldest first."""
        with _store_call("list results"):
            return [doc for doc in self.store.find("testruns") if "result" in doc]
