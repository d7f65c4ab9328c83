"""Configuration loader service."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from .runtime_settings import (
    DEFAULT_OUTPUT_KEY,
    CommandTimeouts,
    ConfigurationError,
    DriverSettings,
    HarnessConfiguration,
    ProvisioningTarget,
)


def load_configuration(config_path: Path | str) -> HarnessConfiguration:
    """Load and validate the configuration file."""
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:  # pragma: no cover - exercised indirectly
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    base_path = path.resolve().parent
    driver = _parse_terraform_section(parsed.get("terraform"))
    parallelism = _require_positive_int(parsed.get("parallelism", 1), "parallelism")
    targets = _parse_targets_section(parsed.get("targets"), base_path)

    return HarnessConfiguration(
        path=path,
        driver=driver,
        targets=targets,
        parallelism=parallelism,
    )


def _parse_terraform_section(value: Any) -> DriverSettings:
    if value is None:
        return DriverSettings()
    section = _require_mapping(value, "terraform")
    binary = _require_non_empty_string(section.get("binary", "terraform"), "terraform.binary")
    no_color = _require_bool(section.get("no_color", True), "terraform.no_color")
    lock = _require_bool(section.get("lock", True), "terraform.lock")
    timeouts = _parse_timeouts(section.get("timeouts"))
    return DriverSettings(binary=binary, timeouts=timeouts, no_color=no_color, lock=lock)


def _parse_timeouts(value: Any) -> CommandTimeouts:
    if value is None:
        return CommandTimeouts()
    section = _require_mapping(value, "terraform.timeouts")
    unknown = set(section) - {"init", "apply", "output", "destroy"}
    if unknown:
        raise ConfigurationError(
            f"Unknown terraform.timeouts entries: {', '.join(sorted(unknown))}"
        )
    return CommandTimeouts(
        init=_optional_positive_number(section.get("init"), "terraform.timeouts.init"),
        apply=_optional_positive_number(section.get("apply"), "terraform.timeouts.apply"),
        output=_optional_positive_number(section.get("output"), "terraform.timeouts.output"),
        destroy=_optional_positive_number(section.get("destroy"), "terraform.timeouts.destroy"),
    )


def _parse_targets_section(value: Any, base_path: Path) -> tuple[ProvisioningTarget, ...]:
    if not isinstance(value, Sequence) or isinstance(value, str) or not value:
        raise ConfigurationError("Configuration section 'targets' must be a non-empty list.")

    targets = tuple(
        _parse_target(item, base_path, f"targets[{index}]") for index, item in enumerate(value)
    )

    seen_names: set[str] = set()
    seen_dirs: set[Path] = set()
    for target in targets:
        if target.name in seen_names:
            raise ConfigurationError(f"Duplicate target name: {target.name}")
        if target.terraform_dir in seen_dirs:
            raise ConfigurationError(
                f"Targets must not share a Terraform directory: {target.terraform_dir}"
            )
        seen_names.add(target.name)
        seen_dirs.add(target.terraform_dir)
    return targets


def _parse_target(value: Any, base_path: Path, label: str) -> ProvisioningTarget:
    section = _require_mapping(value, label)
    terraform_dir = _resolve_path(
        base_path, _require_non_empty_string(section.get("dir"), f"{label}.dir")
    )
    var_files = tuple(
        _resolve_path(base_path, raw_path)
        for raw_path in _normalize_string_sequence(section.get("var_files"), f"{label}.var_files")
    )
    name = _optional_string(section.get("name"), f"{label}.name")
    output_key = _require_non_empty_string(
        section.get("output_key", DEFAULT_OUTPUT_KEY), f"{label}.output_key"
    )
    variables = _variable_mapping(section.get("vars"), f"{label}.vars")
    backend_config = _string_mapping(section.get("backend_config"), f"{label}.backend_config")
    env = _string_mapping(section.get("env"), f"{label}.env")

    return ProvisioningTarget.resolve(
        terraform_dir,
        var_files,
        name=name,
        variables=variables,
        backend_config=backend_config,
        env=env,
        output_key=output_key,
    )


def _normalize_string_sequence(value: Any, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        stripped = value.strip()
        return (stripped,) if stripped else ()
    if isinstance(value, Sequence):
        normalized = []
        for item in value:
            if not isinstance(item, str):
                raise ConfigurationError(f"{field_name} entries must be strings.")
            stripped = item.strip()
            if stripped:
                normalized.append(stripped)
        return tuple(normalized)
    raise ConfigurationError(f"{field_name} must be a string or list of strings.")


def _optional_mapping(value: Any, field_name: str) -> dict[str, object]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"{field_name} must be a mapping.")
    return {str(key): item for key, item in value.items()}


def _variable_mapping(value: Any, field_name: str) -> dict[str, object]:
    mapping = _optional_mapping(value, field_name)
    for key, item in mapping.items():
        try:
            json.dumps(item)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"{field_name}.{key} must be a string, number, boolean, list or mapping; "
                "quote dates and other typed YAML values."
            ) from exc
    return mapping


def _string_mapping(value: Any, field_name: str) -> dict[str, str]:
    mapping = _optional_mapping(value, field_name)
    normalized: dict[str, str] = {}
    for key, item in mapping.items():
        if isinstance(item, bool) or not isinstance(item, (str, int, float)):
            raise ConfigurationError(f"{field_name}.{key} must be a scalar value.")
        normalized[key] = str(item)
    return normalized


def _resolve_path(base_path: Path, raw_path: str) -> Path:
    candidate = Path(raw_path)
    if not candidate.is_absolute():
        return (base_path / candidate).resolve()
    return candidate


def _require_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' is required.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None


def _require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be true or false.")
    return value


def _require_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if value <= 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return value


def _optional_positive_number(value: Any, field_name: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{field_name} must be a number of seconds.")
    if value <= 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return float(value)
