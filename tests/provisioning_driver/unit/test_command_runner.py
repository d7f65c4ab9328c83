"""Tests for provisioning command execution."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest
from infra_lifecycle_tester.provisioning_driver.command_runner import (
    CommandNotFoundError,
    CommandTimeoutError,
    run_terraform_command,
)


def test_run_terraform_command_captures_output_and_merges_environment(
    tmp_path: Path, monkeypatch
) -> None:
    captured: dict[str, object] = {}

    def _fake_run(command, **kwargs):
        captured["command"] = command
        captured.update(kwargs)
        return subprocess.CompletedProcess(command, 2, stdout="plan\n", stderr="Error: boom\n")

    monkeypatch.setenv("HOME_MARKER", "kept")
    monkeypatch.setattr(
        "infra_lifecycle_tester.provisioning_driver.command_runner.subprocess.run", _fake_run
    )

    result = run_terraform_command(
        ("terraform", "apply"), tmp_path, {"AWS_PROFILE": "ci"}, 30.0
    )

    assert result.returncode == 2
    assert result.succeeded is False
    assert result.stdout == "plan\n"
    assert result.stderr_lines() == ("Error: boom",)
    assert captured["command"] == ["terraform", "apply"]
    assert captured["cwd"] == tmp_path
    assert captured["timeout"] == 30.0
    assert captured["check"] is False
    env = captured["env"]
    assert isinstance(env, dict)
    assert env["AWS_PROFILE"] == "ci"
    assert env["HOME_MARKER"] == "kept"
    assert env["TF_IN_AUTOMATION"] == "1"


def test_run_terraform_command_wraps_missing_binary(tmp_path: Path, monkeypatch) -> None:
    def _fake_run(command, **kwargs):
        raise FileNotFoundError(command[0])

    monkeypatch.setattr(
        "infra_lifecycle_tester.provisioning_driver.command_runner.subprocess.run", _fake_run
    )

    with pytest.raises(CommandNotFoundError, match="Command not found: terraform init"):
        run_terraform_command(("terraform", "init"), tmp_path, {}, None)


def test_run_terraform_command_wraps_timeout(tmp_path: Path, monkeypatch) -> None:
    def _fake_run(command, **kwargs):
        raise subprocess.TimeoutExpired(command, kwargs["timeout"])

    monkeypatch.setattr(
        "infra_lifecycle_tester.provisioning_driver.command_runner.subprocess.run", _fake_run
    )

    with pytest.raises(CommandTimeoutError, match="timed out after 5 seconds"):
        run_terraform_command(("terraform", "destroy"), tmp_path, {}, 5)
