"""Unit tests for the dashboard config module."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pytest

from qa_dashboard.config import DEFAULT_CONFIG, DashboardConfig


class TestDefaults:
    """Tests for default values."""

    def test_no_path(self):
        config = DashboardConfig()
        assert config.config == DEFAULT_CONFIG
        assert config.id_floor == 1000
        assert config.critical_priority_threshold == 3
        assert config.first_run_id == 1
        assert config.report_format == "yaml"
        assert config.store_path == Path(".qa_dashboard/store.json")

    def test_missing_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config = DashboardConfig(Path(tmpdir) / "qa.json")
            assert config.config == DEFAULT_CONFIG

    def test_overrides(self):
        config = DashboardConfig(critical_priority_threshold=5, first_run_id=10)
        assert config.critical_priority_threshold == 5
        assert config.first_run_id == 10

    def test_unknown_override(self):
        with pytest.raises(ValueError, match="Unknown config keys"):
            DashboardConfig(mongo_uri="mongodb://localhost")


class TestFile:
    """Tests for loading and saving the config file."""

    def test_partial_file_merges_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "qa.json"
            path.write_text(json.dumps({"critical_priority_threshold": 2}))
            config = DashboardConfig(path)
            assert config.critical_priority_threshold == 2
            assert config.id_floor == 1000

    def test_corrupt_file_uses_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "qa.json"
            path.write_text("not json")
            assert DashboardConfig(path).config == DEFAULT_CONFIG

    def test_store_path_relative_to_config(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "qa.json"
            path.write_text(json.dumps({"store_path": "data/store.json"}))
            assert DashboardConfig(path).store_path == Path(tmpdir) / "data" / "store.json"

    def test_save_roundtrip(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "sub" / "qa.json"
            config = DashboardConfig(path)
            config.set_config(critical_priority_threshold=4, report_format="json")
            config.save()

            reloaded = DashboardConfig(path)
            assert reloaded.critical_priority_threshold == 4
            assert reloaded.report_format == "json"

    def test_save_without_path(self):
        with pytest.raises(ValueError, match="No config file path"):
            DashboardConfig().save()


class TestValidation:
    def test_invalid_report_format(self):
        with pytest.raises(ValueError, match="Invalid report format"):
            DashboardConfig().set_config(report_format="xml")

    def test_invalid_report_format_from_file(self):
        config = DashboardConfig(report_format="csv")
        with pytest.raises(ValueError):
            config.report_format
