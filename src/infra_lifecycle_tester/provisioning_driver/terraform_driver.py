"""Terraform CLI implementation of the provisioning driver."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from infra_lifecycle_tester.configuration.runtime_settings import (
    DriverSettings,
    ProvisioningTarget,
)

from .command_runner import (
    CommandExecutionError,
    CommandResult,
    CommandRunner,
    run_terraform_command,
)
from .driver_contracts import (
    ApplyError,
    DestroyError,
    InitError,
    OutputBinding,
    OutputNotFoundError,
    OutputReadError,
    ProvisioningError,
)

LOGGER = logging.getLogger(__name__)

ErrorFactory = Callable[[str, str, tuple[str, ...]], ProvisioningError]


class TerraformDriver:
    """Drive ``terraform`` init/apply/output/destroy for one or more targets.

    Every call blocks until Terraform exits. Nothing is retried here; retry
    behaviour belongs to Terraform and its providers.
    """

    def __init__(
        self,
        settings: DriverSettings | None = None,
        *,
        run_command: CommandRunner | None = None,
    ) -> None:
        self._settings = settings or DriverSettings()
        self._run_command = run_command or run_terraform_command
        self._initialized_dirs: set[Path] = set()

    def initialize(self, target: ProvisioningTarget) -> None:
        if target.terraform_dir in self._initialized_dirs:
            LOGGER.debug("target '%s' already initialized", target.name)
            return
        command = (
            self._settings.binary,
            "init",
            "-input=false",
            *self._color_flags(),
            *(f"-backend-config={key}={value}" for key, value in target.backend_config.items()),
        )
        result = self._execute(command, target, self._settings.timeouts.init, InitError)
        if not result.succeeded:
            raise InitError(
                target.name,
                f"terraform init exited with code {result.returncode}",
                result.stderr_lines(),
            )
        self._initialized_dirs.add(target.terraform_dir)

    def apply(self, target: ProvisioningTarget) -> None:
        command = (
            self._settings.binary,
            "apply",
            "-auto-approve",
            "-input=false",
            "-json",
            *self._lock_flags(),
            *_variable_flags(target),
        )
        result = self._execute(command, target, self._settings.timeouts.apply, ApplyError)
        diagnostics = _error_diagnostics(result.stdout.splitlines())
        if not result.succeeded:
            raise ApplyError(
                target.name,
                f"terraform apply exited with code {result.returncode}",
                diagnostics or result.stderr_lines(),
            )
        if diagnostics:
            raise ApplyError(target.name, "terraform apply reported errors", diagnostics)

    def output(self, target: ProvisioningTarget, key: str) -> OutputBinding:
        command = (self._settings.binary, "output", "-json", *self._color_flags())
        result = self._execute(command, target, self._settings.timeouts.output, OutputReadError)
        if not result.succeeded:
            raise OutputReadError(
                target.name,
                f"terraform output exited with code {result.returncode}",
                result.stderr_lines(),
            )
        try:
            outputs = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as exc:
            raise OutputReadError(
                target.name, f"terraform output is not valid JSON: {exc}"
            ) from exc
        if not isinstance(outputs, dict):
            raise OutputReadError(target.name, "terraform output JSON must be an object")

        entry = outputs.get(key)
        if not isinstance(entry, dict) or "value" not in entry:
            raise OutputNotFoundError(target.name, key, sorted(outputs))
        return OutputBinding(
            key=key,
            value=_render_output_value(entry["value"]),
            sensitive=bool(entry.get("sensitive", False)),
        )

    def destroy(self, target: ProvisioningTarget) -> None:
        try:
            self.initialize(target)
        except InitError as exc:
            raise DestroyError(target.name, exc.reason, exc.diagnostics) from exc
        command = (
            self._settings.binary,
            "destroy",
            "-auto-approve",
            "-input=false",
            *self._color_flags(),
            *self._lock_flags(),
            *_variable_flags(target),
        )
        result = self._execute(command, target, self._settings.timeouts.destroy, DestroyError)
        if not result.succeeded:
            raise DestroyError(
                target.name,
                f"terraform destroy exited with code {result.returncode}",
                result.stderr_lines(),
            )

    def _execute(
        self,
        command: tuple[str, ...],
        target: ProvisioningTarget,
        timeout_seconds: float | None,
        error_cls: ErrorFactory,
    ) -> CommandResult:
        try:
            return self._run_command(command, target.terraform_dir, target.env, timeout_seconds)
        except CommandExecutionError as exc:
            raise error_cls(target.name, str(exc), ()) from exc

    def _color_flags(self) -> tuple[str, ...]:
        return ("-no-color",) if self._settings.no_color else ()

    def _lock_flags(self) -> tuple[str, ...]:
        return () if self._settings.lock else ("-lock=false",)


def _variable_flags(target: ProvisioningTarget) -> tuple[str, ...]:
    flags = [f"-var-file={var_file}" for var_file in target.var_files]
    for name, value in target.variables.items():
        flags.extend(("-var", f"{name}={_render_variable_value(value)}"))
    return tuple(flags)


def _render_variable_value(value: object) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"))


def _render_output_value(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), sort_keys=True)


def _error_diagnostics(lines: Iterable[str]) -> tuple[str, ...]:
    """Collect error-level diagnostics from Terraform's machine-readable UI stream."""
    diagnostics: list[str] = []
    for line in lines:
        try:
            event = json.loads(line)
        except json.JSONDecodeError:
            continue
        if not isinstance(event, dict) or event.get("type") != "diagnostic":
            continue
        if event.get("@level") != "error":
            continue
        diagnostic = event.get("diagnostic")
        if not isinstance(diagnostic, dict):
            diagnostic = {}
        summary = diagnostic.get("summary") or event.get("@message") or "unknown error"
        detail = diagnostic.get("detail")
        diagnostics.append(f"{summary}: {detail}" if detail else summary)
    return tuple(diagnostics)
