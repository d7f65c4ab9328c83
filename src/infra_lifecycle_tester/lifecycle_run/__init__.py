"""Lifecycle run domain exports."""

from .lifecycle_run import LifecycleRun, OutputAssertionError
from .lifecycle_run_use_case import (
    RunExecutionError,
    execute_lifecycle_run,
    execute_lifecycle_runs,
    run_configured_lifecycles,
)
from .run_contracts import PhaseFailure, RunOutcome, RunReport, RunRequest, RunState

__all__ = [
    "LifecycleRun",
    "OutputAssertionError",
    "RunState",
    "RunRequest",
    "RunOutcome",
    "RunReport",
    "PhaseFailure",
    "RunExecutionError",
    "execute_lifecycle_run",
    "execute_lifecycle_runs",
    "run_configured_lifecycles",
]
