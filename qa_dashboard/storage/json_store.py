"""JSON file backed document store.

Keeps every collection in a single JSON file and rewrites the file after each
write. The layout is::

    {"testcases": [...], "defects": [...], "testruns": [...], "history": [...]}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from qa_dashboard.errors import PersistenceUnavailable
from qa_dashboard.storage.store import COLLECTIONS, DocumentStore

logger = logging.getLogger(__name__)


class JsonDocumentStore(DocumentStore):
    """DocumentStore persisted to a JSON file."""

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)
        if self.path.exists():
            self._load()

    def _load(self) -> None:
        """Load collections from the file."""
        try:
            data = json.loads(self.path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            # If file is corrupted, start fresh
            logger.warning("Ignoring unreadable store file %s: %s", self.path, e)
            return

        if not isinstance(data, dict):
            logger.warning("Ignoring store file %s: not a JSON object", self.path)
            return

        for name in COLLECTIONS:
            docs = data.get(name, [])
            if isinstance(docs, list):
                self._data[name] = [d for d in docs if isinstance(d, dict)]

    def _commit(self) -> None:
        """Write all collections to the file.

        Raises:
            PersistenceUnavailable: If the file cannot be written.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                json.dump(self._data, f, indent=2)
                f.write("\n")
        except OSError as e:
            raise PersistenceUnavailable(f"write {self.path}", str(e)) from e
