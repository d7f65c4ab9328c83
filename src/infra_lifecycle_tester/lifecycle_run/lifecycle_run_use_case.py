"""Lifecycle run use-case service."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime

from infra_lifecycle_tester.configuration import (
    ConfigurationError,
    DriverSettings,
    HarnessConfiguration,
    ProvisioningTarget,
    load_configuration,
)
from infra_lifecycle_tester.provisioning_driver import (
    ProvisioningDriver,
    ProvisioningError,
    TerraformDriver,
)

from .lifecycle_run import LifecycleRun, OutputAssertionError
from .run_contracts import PhaseFailure, RunOutcome, RunReport, RunRequest

LOGGER = logging.getLogger(__name__)

DriverFactory = Callable[[], ProvisioningDriver]


class RunExecutionError(Exception):
    """Raised when lifecycle runs cannot be started."""


def execute_lifecycle_run(target: ProvisioningTarget, driver: ProvisioningDriver) -> RunOutcome:
    """Apply, validate and destroy one target, capturing failures per phase."""
    run = LifecycleRun(target, driver)
    failure: PhaseFailure | None = None
    try:
        with run:
            run.apply()
            run.validate_output()
    except (ProvisioningError, OutputAssertionError) as exc:
        if exc is not run.teardown_error:
            failure = PhaseFailure.from_exception(exc)
    except Exception as exc:  # pylint: disable=broad-exception-caught
        LOGGER.exception("lifecycle run for target '%s' failed unexpectedly", target.name)
        failure = PhaseFailure(
            phase=run.phase,
            message=(
                f"{run.phase} failed for target '{target.name}': {type(exc).__name__}: {exc}"
            ),
        )

    teardown_failure = (
        PhaseFailure.from_exception(run.teardown_error) if run.teardown_error else None
    )
    return RunOutcome(
        target_name=target.name,
        state=run.state,
        output=run.output,
        failure=failure,
        teardown_failure=teardown_failure,
        destroy_calls=run.destroy_calls,
    )


def execute_lifecycle_runs(
    targets: Sequence[ProvisioningTarget],
    driver_factory: DriverFactory,
    *,
    parallelism: int = 1,
) -> tuple[RunOutcome, ...]:
    """Run independent targets concurrently, one driver per run, outcomes in target order."""
    if not targets:
        return ()
    max_workers = max(1, min(parallelism, len(targets)))
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [
            executor.submit(execute_lifecycle_run, target, driver_factory()) for target in targets
        ]
        return tuple(future.result() for future in futures)


def run_configured_lifecycles(
    request: RunRequest,
    *,
    driver_cls: Callable[[DriverSettings], ProvisioningDriver] | None = None,
) -> RunReport:
    """Load the lifecycle configuration and execute every selected target."""
    resolved_driver_cls = driver_cls or TerraformDriver
    configuration = _load_run_configuration(request.config_path)
    targets = _select_targets(configuration, request.target_names)
    parallelism = request.parallelism or configuration.parallelism
    if parallelism <= 0:
        raise RunExecutionError("Parallelism must be greater than zero.")

    started_at = datetime.now(UTC)
    outcomes = execute_lifecycle_runs(
        targets,
        lambda: resolved_driver_cls(configuration.driver),
        parallelism=parallelism,
    )
    return RunReport(outcomes=outcomes, started_at=started_at, finished_at=datetime.now(UTC))


def _load_run_configuration(config_path: str) -> HarnessConfiguration:
    try:
        return load_configuration(config_path)
    except (ConfigurationError, OSError) as exc:
        raise RunExecutionError(str(exc)) from exc


def _select_targets(
    configuration: HarnessConfiguration, target_names: Sequence[str]
) -> tuple[ProvisioningTarget, ...]:
    if not target_names:
        return configuration.targets
    by_name = {target.name: target for target in configuration.targets}
    unknown = [name for name in target_names if name not in by_name]
    if unknown:
        raise RunExecutionError(f"Unknown target(s): {', '.join(unknown)}")
    return tuple(by_name[name] for name in dict.fromkeys(target_names))
