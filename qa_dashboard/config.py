"""Dashboard configuration file management.

Reads and writes the JSON configuration that tells the dashboard where its
store lives and how the engine classifies failures.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "store_path": ".qa_dashboard/store.json",
    "id_floor": 1000,
    "critical_priority_threshold": 3,
    "first_run_id": 1,
    "report_format": "yaml",
}

VALID_REPORT_FORMATS = frozenset({"yaml", "json"})


class DashboardConfig:
    """Manages the dashboard JSON configuration file."""

    def __init__(self, path: Path | None = None, **overrides: Any) -> None:
        self.path = path
        self._data: dict[str, Any] = dict(DEFAULT_CONFIG)
        if path is not None and path.exists():
            self._load()
        unknown = set(overrides) - set(DEFAULT_CONFIG)
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        self._data.update(overrides)

    def _load(self) -> None:
        """Load config from the file."""
        assert self.path is not None
        try:
            data = json.loads(self.path.read_text())
            if isinstance(data, dict):
                self._data = {**DEFAULT_CONFIG, **data}
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Using default config, cannot read %s: %s", self.path, e)
            self._data = dict(DEFAULT_CONFIG)

    def save(self) -> None:
        """Write config to the file."""
        if self.path is None:
            raise ValueError("No config file path specified")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(self._data, f, indent=2)
            f.write("\n")

    @property
    def config(self) -> dict[str, Any]:
        """Get the full configuration dict."""
        return dict(self._data)

    @property
    def store_path(self) -> Path:
        """Get the path of the JSON document store.

        Relative paths are resolved against the config file's directory.
        """
        path = Path(self._data.get("store_path", DEFAULT_CONFIG["store_path"]))
        if not path.is_absolute() and self.path is not None:
            path = self.path.parent / path
        return path

    @property
    def id_floor(self) -> int:
        """Get the smallest id handed out to test cases and defects."""
        return int(self._data.get("id_floor", DEFAULT_CONFIG["id_floor"]))

    @property
    def critical_priority_threshold(self) -> int:
        """Get the highest numeric priority whose failures are Critical."""
        return int(
            self._data.get(
                "critical_priority_threshold",
                DEFAULT_CONFIG["critical_priority_threshold"],
            )
        )

    @property
    def first_run_id(self) -> int:
        """Get the run id assigned to the first scheduled run."""
        return int(self._data.get("first_run_id", DEFAULT_CONFIG["first_run_id"]))

    @property
    def report_format(self) -> str:
        """Get the drain report format (yaml or json)."""
        value = str(self._data.get("report_format", DEFAULT_CONFIG["report_format"]))
        if value not in VALID_REPORT_FORMATS:
            raise ValueError(
                f"Invalid report format '{value}'. "
                f"Must be one of: {sorted(VALID_REPORT_FORMATS)}"
            )
        return value

    def set_config(
        self,
        critical_priority_threshold: int | None = None,
        report_format: str | None = None,
    ) -> None:
        """Update configuration values."""
        if critical_priority_threshold is not None:
            self._data["critical_priority_threshold"] = critical_priority_threshold
        if report_format is not None:
            if report_format not in VALID_REPORT_FORMATS:
                raise ValueError(
                    f"Invalid report format '{report_format}'. "
                    f"Must be one of: {sorted(VALID_REPORT_FORMATS)}"
                )
            self._data["report_format"] = report_format
