"""Run execution: priority scheduler, history log and the draining engine."""

from qa_dashboard.execution.engine import (
    DrainReport,
    EngineState,
    ExecutionEngine,
    RunError,
    RunExecution,
    random_oracle,
    scripted_oracle,
)
from qa_dashboard.execution.history import ExecutionHistory
from qa_dashboard.execution.scheduler import RunScheduler

__all__ = [
    "DrainReport",
    "EngineState",
    "ExecutionEngine",
    "ExecutionHistory",
    "RunError",
    "RunExecution",
    "RunScheduler",
    "random_oracle",
    "scripted_oracle",
]
