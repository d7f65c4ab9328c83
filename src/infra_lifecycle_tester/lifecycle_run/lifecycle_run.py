"""Scoped apply-validate-destroy lifecycle for one provisioning target."""

from __future__ import annotations

import logging
from types import TracebackType

from infra_lifecycle_tester.configuration.runtime_settings import ProvisioningTarget
from infra_lifecycle_tester.provisioning_driver.driver_contracts import (
    DestroyError,
    OutputBinding,
    ProvisioningDriver,
    ProvisioningError,
)

from .run_contracts import RunState

LOGGER = logging.getLogger(__name__)


class OutputAssertionError(AssertionError):
    """Raised when a provisioned output does not have the expected shape."""

    phase = "assert"

    def __init__(self, target_name: str, key: str) -> None:
        self.target_name = target_name
        self.key = key
        super().__init__(
            f"assert failed for target '{target_name}': output '{key}' is empty in state"
        )


class LifecycleRun:
    """One apply-validate-destroy cycle whose teardown is armed at construction.

    Use it as a context manager. Leaving the ``with`` block destroys the target
    exactly once, whether the block finished, raised, or failed an assertion::

        with LifecycleRun(target, driver) as run:
            run.apply()
            run.validate_output()

    A destroy failure never hides an earlier failure: it is attached to the
    propagating exception as a note and kept on ``teardown_error``.
    """

    def __init__(self, target: ProvisioningTarget, driver: ProvisioningDriver) -> None:
        self.target = target
        self.state = RunState.PENDING
        self.output: OutputBinding | None = None
        self.teardown_error: DestroyError | None = None
        self.destroy_calls = 0
        self.phase = "init"
        self._driver = driver
        self._teardown_armed = True

    def __enter__(self) -> LifecycleRun:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool:
        if exc is not None:
            self.state = RunState.FAILED
        try:
            self.teardown()
        except DestroyError as destroy_error:
            if exc is None:
                raise
            exc.add_note(f"teardown also failed: {destroy_error}")
        return False

    def apply(self) -> None:
        """Initialize the working directory and provision the target."""
        self._require_state("apply", RunState.PENDING)
        LOGGER.info("applying target '%s'", self.target.name)
        try:
            self.phase = "init"
            self._driver.initialize(self.target)
            self.phase = "apply"
            self._driver.apply(self.target)
        except ProvisioningError:
            self.state = RunState.FAILED
            raise
        self.state = RunState.APPLIED

    def read_output(self, key: str | None = None) -> OutputBinding:
        """Read an output from provisioned state; defaults to the target's output key."""
        self._require_state("read output", RunState.APPLIED, RunState.VALIDATED)
        output_key = key or self.target.output_key
        self.phase = "output"
        try:
            return self._driver.output(self.target, output_key)
        except ProvisioningError:
            self.state = RunState.FAILED
            raise

    def validate_output(self, key: str | None = None) -> OutputBinding:
        """Assert the provisioned output is a non-empty string."""
        binding = self.read_output(key)
        self.phase = "assert"
        if not binding.value.strip():
            self.state = RunState.FAILED
            raise OutputAssertionError(self.target.name, binding.key)
        LOGGER.info("target '%s' output '%s' validated", self.target.name, binding.key)
        self.output = binding
        self.state = RunState.VALIDATED
        return binding

    def teardown(self) -> None:
        """Destroy the target; only the first call reaches the driver."""
        if not self._teardown_armed:
            return
        self._teardown_armed = False
        self.destroy_calls += 1
        LOGGER.info("destroying target '%s'", self.target.name)
        try:
            self._driver.destroy(self.target)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            error = (
                exc
                if isinstance(exc, DestroyError)
                else DestroyError(self.target.name, f"{type(exc).__name__}: {exc}")
            )
            LOGGER.error("teardown of target '%s' failed: %s", self.target.name, error.reason)
            self.teardown_error = error
            self.state = RunState.FAILED
            if error is exc:
                raise
            raise error from exc
        if self.state is not RunState.FAILED:
            self.state = RunState.DESTROYED

    def _require_state(self, action: str, *allowed: RunState) -> None:
        if not self._teardown_armed or self.state not in allowed:
            raise RuntimeError(
                f"Cannot {action} for target '{self.target.name}' in state {self.state.value}."
            )
