"""Drain result reporting: JSON and YAML report generation."""

from qa_dashboard.reporting.reporter import Reporter

__all__ = [
    "Reporter",
]
