"""Report generation for drained test runs.

Collects DrainReports from the execution engine and writes them as JSON or
YAML documents with a summary, one entry per run, the defects raised and any
persistence warnings.
"""

from __future__ import annotations

import datetime
import json
from pathlib import Path
from typing import Any

import yaml

from qa_dashboard.execution.engine import DrainReport, RunError, RunExecution


class Reporter:
    """Collects drain results and generates reports."""

    def __init__(self) -> None:
        self.drains: list[DrainReport] = []
        self.history: list[str] | None = None

    def add_drain(self, drain: DrainReport) -> None:
        """Add the outcome of one drain_all() call."""
        self.drains.append(drain)

    def set_history(self, entries: list[str]) -> None:
        """Include the execution history, oldest first, in the report."""
        self.history = list(entries)

    def generate_report(self) -> dict[str, Any]:
        """Generate the full report structure.

        Returns:
            Dictionary with a single "report" key.
        """
        runs: list[dict[str, Any]] = []
        defects: list[dict[str, Any]] = []
        warnings: list[str] = []
        for drain in self.drains:
            runs.extend(self._format_execution(e) for e in drain.executions)
            runs.extend(self._format_error(e) for e in drain.errors)
            defects.extend(d.to_doc() for d in drain.defects)
            warnings.extend(drain.warnings)

        report: dict[str, Any] = {
            "generated_at": datetime.datetime.now(
                tz=datetime.timezone.utc
            ).isoformat(),
            "summary": self._compute_summary(),
            "runs": runs,
            "defects": defects,
        }
        if warnings:
            report["warnings"] = warnings
        if self.history is not None:
            report["history"] = [
                {"number": number, "entry": entry}
                for number, entry in enumerate(self.history, start=1)
            ]
        return {"report": report}

    def write_report(self, path: Path) -> None:
        """Write the report as a JSON file.

        Args:
            path: File path to write the JSON report to.
        """
        report = self.generate_report()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(report, f, indent=2)

    def write_yaml(self, path: Path) -> None:
        """Write the report as a YAML file.

        Args:
            path: File path to write the YAML report to.
        """
        report = self.generate_report()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(
                report,
                f,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
            )

    def write(self, path: Path, report_format: str = "yaml") -> None:
        """Write the report in the given format ("yaml" or "json")."""
        if report_format == "yaml":
            self.write_yaml(path)
        elif report_format == "json":
            self.write_report(path)
        else:
            raise ValueError(f"Unknown report format: {report_format}")

    def _compute_summary(self) -> dict[str, Any]:
        executions = [e for d in self.drains for e in d.executions]
        passed = sum(1 for e in executions if e.result.passed)
        return {
            "total": len(executions) + sum(len(d.errors) for d in self.drains),
            "passed": passed,
            "failed": len(executions) - passed,
            "errored": sum(len(d.errors) for d in self.drains),
            "defects_created": sum(len(d.defects) for d in self.drains),
            "persistence_warnings": sum(len(d.warnings) for d in self.drains),
        }

    def _format_execution(self, execution: RunExecution) -> dict[str, Any]:
        run = execution.run
        entry: dict[str, Any] = {
            "run_id": run.run_id,
            "test_case_id": run.test_case_id,
            "priority": run.priority,
            "status": "passed" if execution.result.passed else "failed",
            "notes": execution.result.notes,
            "executed_at": execution.executed_at,
        }
        if execution.defect is not None:
            entry["defect_id"] = execution.defect.id
        return entry

    def _format_error(self, error: RunError) -> dict[str, Any]:
        return {
            "run_id": error.run.run_id,
            "test_case_id": error.run.test_case_id,
            "priority": error.run.priority,
            "status": "error",
            "message": error.message,
        }
