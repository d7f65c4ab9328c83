"""CLI orchestration integration tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import ClassVar

import yaml
from click.testing import CliRunner
from infra_lifecycle_tester.cli import cli, main
from infra_lifecycle_tester.configuration.runtime_settings import (
    DriverSettings,
    ProvisioningTarget,
)
from infra_lifecycle_tester.provisioning_driver.driver_contracts import (
    ApplyError,
    OutputBinding,
)


class _FakeTerraformDriver:
    instances: ClassVar[list[_FakeTerraformDriver]] = []
    failing_targets: ClassVar[set[str]] = set()

    def __init__(self, settings: DriverSettings) -> None:
        self.settings = settings
        self.calls: list[tuple[str, str]] = []
        _FakeTerraformDriver.instances.append(self)

    def initialize(self, target: ProvisioningTarget) -> None:
        self.calls.append(("initialize", target.name))

    def apply(self, target: ProvisioningTarget) -> None:
        self.calls.append(("apply", target.name))
        if target.name in self.failing_targets:
            raise ApplyError(target.name, "terraform apply exited with code 1", ("LimitExceeded",))

    def output(self, target: ProvisioningTarget, key: str) -> OutputBinding:
        self.calls.append(("output", target.name))
        return OutputBinding(key=key, value=f"{target.name}-codepipeline")

    def destroy(self, target: ProvisioningTarget) -> None:
        self.calls.append(("destroy", target.name))


def _write_config(tmp_path: Path, names: tuple[str, ...]) -> Path:
    targets = []
    for name in names:
        root = tmp_path / name
        root.mkdir()
        (root / "main.tf").write_text('output "pipeline_name" { value = "x" }\n', encoding="utf-8")
        (root / "terraform.tfvars").write_text('name = "x"\n', encoding="utf-8")
        targets.append({"name": name, "dir": name, "var_files": [f"{name}/terraform.tfvars"]})
    path = tmp_path / "lifecycle.json"
    path.write_text(
        json.dumps({"terraform": {"timeouts": {"apply": 600}}, "targets": targets}),
        encoding="utf-8",
    )
    return path


def _reset_fake(monkeypatch, failing: set[str] | None = None) -> None:
    _FakeTerraformDriver.instances.clear()
    _FakeTerraformDriver.failing_targets = failing or set()
    monkeypatch.setattr("infra_lifecycle_tester.cli.TerraformDriver", _FakeTerraformDriver)


def test_generate_config_command_writes_scaffold(tmp_path: Path) -> None:
    runner = CliRunner()
    output_path = tmp_path / "lifecycle.yaml"

    result = runner.invoke(cli, ["generate-config", "--output", str(output_path)])

    assert result.exit_code == 0
    assert str(output_path.resolve()) in result.output
    assert "targets" in yaml.safe_load(output_path.read_text(encoding="utf-8"))


def test_run_command_reports_passed_lifecycle(tmp_path: Path, monkeypatch) -> None:
    _reset_fake(monkeypatch)
    config_path = _write_config(tmp_path, ("currency-converter",))

    result = CliRunner().invoke(cli, ["run", "--config", str(config_path)])

    assert result.exit_code == 0
    assert (
        "PASS currency-converter (destroyed) pipeline_name=currency-converter-codepipeline"
        in result.output
    )
    assert "PASSED: 1/1 lifecycle runs passed" in result.output
    driver = _FakeTerraformDriver.instances[0]
    assert driver.settings.timeouts.apply == 600.0
    assert [call for call, _ in driver.calls] == ["initialize", "apply", "output", "destroy"]


def test_run_command_returns_non_zero_and_phase_diagnostic_on_apply_failure(
    tmp_path: Path, monkeypatch, capsys
) -> None:
    _reset_fake(monkeypatch, failing={"beta"})
    config_path = _write_config(tmp_path, ("alpha", "beta"))

    exit_code = main(["run", "--config", str(config_path), "--parallelism", "2"])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "PASS alpha" in captured.out
    assert "FAIL beta (failed)" in captured.out
    assert "[apply] apply failed for target 'beta'" in captured.out
    assert "LimitExceeded" in captured.out
    assert "1 lifecycle run(s) failed." in captured.err
    beta_driver = next(
        driver
        for driver in _FakeTerraformDriver.instances
        if any(name == "beta" for _, name in driver.calls)
    )
    assert [call for call, _ in beta_driver.calls] == ["initialize", "apply", "destroy"]


def test_run_command_reports_unexpected_driver_error_and_keeps_other_targets(
    tmp_path: Path, monkeypatch, capsys
) -> None:
    class _CrashingTerraformDriver(_FakeTerraformDriver):
        def apply(self, target: ProvisioningTarget) -> None:
            self.calls.append(("apply", target.name))
            if target.name == "alpha":
                raise TypeError("Object of type date is not JSON serializable")

    _reset_fake(monkeypatch)
    monkeypatch.setattr("infra_lifecycle_tester.cli.TerraformDriver", _CrashingTerraformDriver)
    config_path = _write_config(tmp_path, ("alpha", "beta"))

    exit_code = main(["run", "--config", str(config_path)])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "FAIL alpha (failed)" in captured.out
    assert "[apply] apply failed for target 'alpha': TypeError" in captured.out
    assert "PASS beta" in captured.out
    assert "1 lifecycle run(s) failed." in captured.err
    assert len(_FakeTerraformDriver.instances) == 2
    assert all(driver.calls[-1][0] == "destroy" for driver in _FakeTerraformDriver.instances)


def test_run_command_selects_targets(tmp_path: Path, monkeypatch) -> None:
    _reset_fake(monkeypatch)
    config_path = _write_config(tmp_path, ("alpha", "beta"))

    result = CliRunner().invoke(
        cli, ["run", "--config", str(config_path), "--target", "beta"]
    )

    assert result.exit_code == 0
    assert "alpha" not in result.output
    assert "PASS beta" in result.output
    assert len(_FakeTerraformDriver.instances) == 1


def test_run_command_rejects_unknown_target(tmp_path: Path, monkeypatch, capsys) -> None:
    _reset_fake(monkeypatch)
    config_path = _write_config(tmp_path, ("alpha",))

    exit_code = main(["run", "--config", str(config_path), "--target", "omega"])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "Unknown target(s): omega" in captured.err
    assert _FakeTerraformDriver.instances == []
