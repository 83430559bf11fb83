"""QA dashboard: test case search, priority run scheduling and defect tracking."""

from qa_dashboard.config import DashboardConfig
from qa_dashboard.dashboard import QADashboard
from qa_dashboard.errors import (
    DuplicateIdConflict,
    EmptyQueue,
    OracleExhausted,
    PersistenceUnavailable,
    QADashboardError,
    UnknownTestCase,
)

__all__ = [
    "DashboardConfig",
    "DuplicateIdConflict",
    "EmptyQueue",
    "OracleExhausted",
    "PersistenceUnavailable",
    "QADashboard",
    "QADashboardError",
    "UnknownTestCase",
]
