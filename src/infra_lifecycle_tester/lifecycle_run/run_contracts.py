"""Lifecycle run entities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from infra_lifecycle_tester.provisioning_driver.driver_contracts import OutputBinding


class RunState(str, Enum):
    """Progress of one apply-validate-destroy cycle."""

    PENDING = "pending"
    APPLIED = "applied"
    VALIDATED = "validated"
    DESTROYED = "destroyed"
    FAILED = "failed"


@dataclass(frozen=True)
class RunRequest:
    """Input contract for executing the configured lifecycle runs."""

    config_path: str
    target_names: tuple[str, ...] = ()
    parallelism: int | None = None


@dataclass(frozen=True)
class PhaseFailure:
    """A failure attributed to one lifecycle phase (init/apply/output/assert/destroy)."""

    phase: str
    message: str

    @staticmethod
    def from_exception(error: BaseException) -> PhaseFailure:
        return PhaseFailure(phase=getattr(error, "phase", "run"), message=str(error))


@dataclass(frozen=True)
class RunOutcome:
    """Output contract for one finished lifecycle run."""

    target_name: str
    state: RunState
    output: OutputBinding | None
    failure: PhaseFailure | None
    teardown_failure: PhaseFailure | None
    destroy_calls: int

    @property
    def passed(self) -> bool:
        return self.failure is None and self.teardown_failure is None


@dataclass(frozen=True)
class RunReport:
    """Outcomes of every lifecycle run started by one invocation."""

    outcomes: tuple[RunOutcome, ...]
    started_at: datetime
    finished_at: datetime

    @property
    def passed(self) -> bool:
        return all(outcome.passed for outcome in self.outcomes)

    @property
    def failed_count(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.passed)
