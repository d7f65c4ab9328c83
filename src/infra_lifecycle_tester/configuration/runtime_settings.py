"""Configuration domain entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_OUTPUT_KEY = "pipeline_name"
TERRAFORM_FILE_SUFFIXES = (".tf", ".tf.json")


class ConfigurationError(Exception):
    """Raised when the configuration file or a provisioning target is invalid."""


@dataclass(frozen=True)
class CommandTimeouts:
    """Per-phase command timeouts in seconds; ``None`` waits for the engine indefinitely."""

    init: float | None = None
    apply: float | None = None
    output: float | None = None
    destroy: float | None = None


@dataclass(frozen=True)
class DriverSettings:
    """Terraform CLI invocation settings shared by every run."""

    binary: str = "terraform"
    timeouts: CommandTimeouts = field(default_factory=CommandTimeouts)
    no_color: bool = True
    lock: bool = True


@dataclass(frozen=True)
class ProvisioningTarget:  # pylint: disable=too-many-instance-attributes
    """Terraform root module plus the variable inputs provisioned by one run."""

    name: str
    terraform_dir: Path
    var_files: tuple[Path, ...] = ()
    variables: Mapping[str, object] = field(default_factory=dict)
    backend_config: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)
    output_key: str = DEFAULT_OUTPUT_KEY

    @classmethod
    def resolve(
        cls,
        terraform_dir: Path | str,
        var_files: tuple[Path | str, ...] = (),
        *,
        name: str | None = None,
        variables: Mapping[str, object] | None = None,
        backend_config: Mapping[str, str] | None = None,
        env: Mapping[str, str] | None = None,
        output_key: str = DEFAULT_OUTPUT_KEY,
    ) -> ProvisioningTarget:
        """Build a target after checking it is a self-contained configuration set.

        Raises:
          ConfigurationError: If the directory holds no Terraform files, a var file
            is missing, or the output key is blank.
        """
        directory = Path(terraform_dir).resolve()
        if not directory.is_dir():
            raise ConfigurationError(f"Terraform directory not found: {directory}")
        if not any(_is_terraform_file(path) for path in directory.iterdir()):
            raise ConfigurationError(
                f"Terraform directory has no configuration files: {directory}"
            )

        resolved_var_files = tuple(Path(var_file).resolve() for var_file in var_files)
        for var_file in resolved_var_files:
            if not var_file.is_file():
                raise ConfigurationError(f"Variable file not found: {var_file}")

        if not output_key.strip():
            raise ConfigurationError("Output key must not be empty.")

        return cls(
            name=name or directory.name,
            terraform_dir=directory,
            var_files=resolved_var_files,
            variables=dict(variables or {}),
            backend_config=dict(backend_config or {}),
            env=dict(env or {}),
            output_key=output_key.strip(),
        )


@dataclass(frozen=True)
class HarnessConfiguration:
    """Top-level configuration aggregate."""

    path: Path
    driver: DriverSettings
    targets: tuple[ProvisioningTarget, ...]
    parallelism: int = 1


def _is_terraform_file(path: Path) -> bool:
    return path.is_file() and path.name.endswith(TERRAFORM_FILE_SUFFIXES)
