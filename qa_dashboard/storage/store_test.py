"""Unit tests for the in-memory document store."""

from __future__ import annotations

import pytest

from qa_dashboard.storage.store import COLLECTIONS, DocumentStore


class TestDocumentStore:
    """Tests for DocumentStore queries."""

    def test_starts_empty(self):
        store = DocumentStore()
        for name in COLLECTIONS:
            assert store.find(name) == []

    def test_insert_and_find(self):
        store = DocumentStore()
        store.insert_one("testcases", {"id": 1000, "name": "a"})
        store.insert_one("testcases", {"id": 1001, "name": "b"})
        assert store.find("testcases", name="b") == [{"id": 1001, "name": "b"}]
        assert store.find_one("testcases", id=1000) == {"id": 1000, "name": "a"}
        assert store.find_one("testcases", id=9) is None

    def test_documents_are_copied(self):
        store = DocumentStore()
        doc = {"id": 1000, "tags": ["x"]}
        store.insert_one("testcases", doc)
        doc["tags"].append("y")
        found = store.find_one("testcases", id=1000)
        found["tags"].append("z")
        assert store.find_one("testcases", id=1000) == {"id": 1000, "tags": ["x"]}

    def test_delete_one(self):
        store = DocumentStore()
        store.insert_one("testcases", {"id": 1000})
        store.insert_one("testcases", {"id": 1000})
        assert store.delete_one("testcases", id=1000) is True
        assert store.count("testcases") == 1
        assert store.delete_one("testcases", id=5) is False

    def test_max_value(self):
        store = DocumentStore()
        assert store.max_value("defects", "id") is None
        store.insert_one("defects", {"id": 1003})
        store.insert_one("defects", {"id": 1010})
        store.insert_one("defects", {"id": "bogus"})
        assert store.max_value("defects", "id") == 1010

    def test_unknown_collection(self):
        with pytest.raises(ValueError, match="Unknown collection"):
            DocumentStore().find("users")

    def test_clear(self):
        store = DocumentStore()
        store.insert_one("history", {"entry": "x"})
        store.clear()
        assert store.count("history") == 0


class FlakyStore(DocumentStore):
    """Store whose commits fail once ``offline`` is set."""

    offline = False

    def _commit(self):
        if self.offline:
            raise OSError("disk full")


class TestFailedCommit:
    """A write whose commit fails leaves the collections as they were."""

    def test_insert_rolled_back(self):
        store = FlakyStore()
        store.insert_one("testcases", {"id": 1000})
        store.offline = True
        with pytest.raises(OSError):
            store.insert_one("testcases", {"id": 1001})
        assert store.find("testcases") == [{"id": 1000}]

    def test_delete_rolled_back_in_place(self):
        store = FlakyStore()
        for record_id in (1000, 1001, 1002):
            store.insert_one("testcases", {"id": record_id})
        store.offline = True
        with pytest.raises(OSError):
            store.delete_one("testcases", id=1001)
        assert [d["id"] for d in store.find("testcases")] == [1000, 1001, 1002]

    def test_clear_rolled_back(self):
        store = FlakyStore()
        store.insert_one("history", {"entry": "x"})
        store.offline = True
        with pytest.raises(OSError):
            store.clear()
        assert store.find("history") == [{"entry": "x"}]
