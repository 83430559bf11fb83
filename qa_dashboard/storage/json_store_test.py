"""Unit tests for the JSON file backed document store."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pytest

from qa_dashboard.errors import PersistenceUnavailable
from qa_dashboard.storage.json_store import JsonDocumentStore


class TestJsonDocumentStore:
    """Tests for reading and writing the store file."""

    def test_missing_file_starts_empty(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = JsonDocumentStore(Path(tmpdir) / "store.json")
            assert store.find("testcases") == []
            assert not store.path.exists()

    def test_write_creates_file_and_parent_dirs(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "sub" / "dir" / "store.json"
            store = JsonDocumentStore(path)
            store.insert_one("history", {"entry": "Run 1: testCase 42 -> PASS"})

            data = json.loads(path.read_text())
            assert data["history"] == [{"entry": "Run 1: testCase 42 -> PASS"}]
            assert data["testcases"] == []

    def test_roundtrip(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "store.json"
            store = JsonDocumentStore(path)
            store.insert_one("testcases", {"id": 1000, "name": "login"})
            store.insert_one("defects", {"id": 1001, "testCaseId": 1000})
            store.delete_one("defects", id=1001)

            reopened = JsonDocumentStore(path)
            assert reopened.find("testcases") == [{"id": 1000, "name": "login"}]
            assert reopened.find("defects") == []

    def test_corrupt_file_starts_fresh(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "store.json"
            path.write_text("{not json")
            store = JsonDocumentStore(path)
            assert store.find("testcases") == []

    def test_non_object_file_starts_fresh(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "store.json"
            path.write_text("[1, 2, 3]")
            assert JsonDocumentStore(path).find("history") == []

    def test_missing_sections_and_bad_docs_ignored(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "store.json"
            path.write_text(json.dumps({"testcases": [{"id": 1000}, "junk"]}))
            store = JsonDocumentStore(path)
            assert store.find("testcases") == [{"id": 1000}]
            assert store.find("defects") == []

    def test_unwritable_path_raises_persistence_unavailable(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            # A directory where the file should be makes open() fail
            path = Path(tmpdir) / "store.json"
            path.mkdir()
            store = JsonDocumentStore(path)
            with pytest.raises(PersistenceUnavailable):
                store.insert_one("history", {"entry": "x"})
            assert store.find("history") == []

    def test_failed_delete_keeps_document(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "store.json"
            store = JsonDocumentStore(path)
            store.insert_one("testcases", {"id": 1000, "name": "login"})
            store.insert_one("testcases", {"id": 1001, "name": "cart"})
            # Swap the file for a directory so the next write fails
            path.unlink()
            path.mkdir()

            with pytest.raises(PersistenceUnavailable):
                store.delete_one("testcases", id=1000)
            assert [d["id"] for d in store.find("testcases")] == [1000, 1001]
