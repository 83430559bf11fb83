"""In-memory document store.

A minimal collection-of-dicts store with the handful of queries the dashboard
needs. Subclasses make it durable by overriding ``_commit``.
"""

from __future__ import annotations

import copy
import threading
from typing import Any

# Collections the dashboard reads and writes
COLLECTIONS = ("testcases", "defects", "testruns", "history")


class DocumentStore:
    """Collections of plain dict documents, held in memory.

    Documents are copied on the way in and on the way out so callers never
    share mutable state with the store.
    """

    def __init__(self) -> None:
        self._data: dict[str, list[dict[str, Any]]] = {
            name: [] for name in COLLECTIONS
        }
        self._lock = threading.RLock()

    def insert_one(self, collection: str, doc: dict[str, Any]) -> None:
        """Append a copy of doc. Nothing is kept if the commit fails."""
        with self._lock:
            docs = self._collection(collection)
            docs.append(copy.deepcopy(doc))
            try:
                self._commit()
            except Exception:
                docs.pop()
                raise

    def find(self, collection: str, **filters: Any) -> list[dict[str, Any]]:
        """Return copies of all documents whose fields equal the filters."""
        with self._lock:
            return [
                copy.deepcopy(doc)
                for doc in self._collection(collection)
                if _matches(doc, filters)
            ]

    def find_one(self, collection: str, **filters: Any) -> dict[str, Any] | None:
        with self._lock:
            for doc in self._collection(collection):
                if _matches(doc, filters):
                    return copy.deepcopy(doc)
            return None

    def delete_one(self, collection: str, **filters: Any) -> bool:
        """Delete the first matching document.

        The document is restored if the commit fails.

        Returns:
            True if a document was deleted, False if none matched.
        """
        with self._lock:
            docs = self._collection(collection)
            for index, doc in enumerate(docs):
                if _matches(doc, filters):
                    del docs[index]
                    try:
                        self._commit()
                    except Exception:
                        docs.insert(index, doc)
                        raise
                    return True
            return False

    def max_value(self, collection: str, field: str) -> int | None:
        """Largest integer value of a field across a collection, or None."""
        with self._lock:
            values = [
                doc[field]
                for doc in self._collection(collection)
                if isinstance(doc.get(field), int)
            ]
            return max(values) if values else None

    def count(self, collection: str) -> int:
        with self._lock:
            return len(self._collection(collection))

    def clear(self) -> None:
        with self._lock:
            saved = {name: list(docs) for name, docs in self._data.items()}
            for docs in self._data.values():
                docs.clear()
            try:
                self._commit()
            except Exception:
                for name, docs in saved.items():
                    self._data[name][:] = docs
                raise

    def _collection(self, name: str) -> list[dict[str, Any]]:
        if name not in self._data:
            raise ValueError(
                f"Unknown collection '{name}'. Must be one of: {list(COLLECTIONS)}"
            )
        return self._data[name]

    def _commit(self) -> None:
        """Hook called after every write while the lock is held."""


def _matches(doc: dict[str, Any], filters: dict[str, Any]) -> bool:
    return all(doc.get(key) == value for key, value in filters.items())
