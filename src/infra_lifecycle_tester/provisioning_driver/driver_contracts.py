"""Provisioning driver capability contract and error taxonomy."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from infra_lifecycle_tester.configuration.runtime_settings import ProvisioningTarget


@dataclass(frozen=True)
class OutputBinding:
    """One named output value read from provisioned state."""

    key: str
    value: str
    sensitive: bool = False


class ProvisioningError(Exception):
    """Base class for failures reported while driving the provisioning engine."""

    phase = "provisioning"

    def __init__(self, target_name: str, reason: str, diagnostics: Sequence[str] = ()) -> None:
        self.target_name = target_name
        self.reason = reason
        self.diagnostics = tuple(diagnostics)
        message = f"{self.phase} failed for target '{target_name}': {reason}"
        if self.diagnostics:
            message = "\n".join((message, *self.diagnostics))
        super().__init__(message)


class InitError(ProvisioningError):
    """Raised when the working directory cannot be initialized."""

    phase = "init"


class ApplyError(ProvisioningError):
    """Raised when apply exits non-zero or reports an error diagnostic."""

    phase = "apply"


class OutputReadError(ProvisioningError):
    """Raised when outputs cannot be read from state."""

    phase = "output"


class OutputNotFoundError(OutputReadError):
    """Raised when state is readable but does not hold the requested output."""

    def __init__(
        self, target_name: str, key: str, available_keys: Sequence[str] = ()
    ) -> None:
        self.key = key
        self.available_keys = tuple(available_keys)
        available = ", ".join(self.available_keys) or "none"
        super().__init__(
            target_name,
            f"output '{key}' not found in state (available outputs: {available})",
        )


class DestroyError(ProvisioningError):
    """Raised when teardown of provisioned resources fails."""

    phase = "destroy"


class ProvisioningDriver(Protocol):
    """Blocking capability interface over the external provisioning engine."""

    def initialize(self, target: ProvisioningTarget) -> None:
        """Prepare working state for the target; safe to repeat."""

    def apply(self, target: ProvisioningTarget) -> None:
        """Provision the target's infrastructure."""

    def output(self, target: ProvisioningTarget, key: str) -> OutputBinding:
        """Read one output from the target's current state."""

    def destroy(self, target: ProvisioningTarget) -> None:
        """Tear down everything provisioned for the target."""
