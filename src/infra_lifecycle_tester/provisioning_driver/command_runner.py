"""Subprocess execution for provisioning engine commands."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of one finished command."""

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0

    def stderr_lines(self) -> tuple[str, ...]:
        return tuple(line for line in self.stderr.splitlines() if line.strip())


CommandRunner = Callable[[tuple[str, ...], Path, Mapping[str, str], float | None], CommandResult]


class CommandExecutionError(Exception):
    """Raised when a command could not run to completion."""


class CommandNotFoundError(CommandExecutionError):
    """Raised when the command executable is missing."""


class CommandTimeoutError(CommandExecutionError):
    """Raised when a command exceeds its configured timeout."""


def run_terraform_command(
    command: tuple[str, ...],
    cwd: Path,
    env: Mapping[str, str],
    timeout_seconds: float | None,
) -> CommandResult:
    """Run one command to completion and capture its output.

    Non-zero exit codes are returned, not raised; callers decide which phase error applies.
    """
    command_text = shlex.join(command)
    LOGGER.info("running %s (cwd=%s)", command_text, cwd)
    try:
        completed = subprocess.run(
            list(command),
            cwd=cwd,
            env=_command_environment(env),
            capture_output=True,
            text=True,
            timeout=timeout_seconds,
            check=False,
        )
    except FileNotFoundError as exc:
        raise CommandNotFoundError(f"Command not found: {command_text}") from exc
    except subprocess.TimeoutExpired as exc:
        raise CommandTimeoutError(
            f"Command timed out after {timeout_seconds} seconds: {command_text}"
        ) from exc

    for line in completed.stdout.splitlines():
        LOGGER.debug("stdout: %s", line)
    for line in completed.stderr.splitlines():
        LOGGER.debug("stderr: %s", line)
    LOGGER.info("%s exited with code %d", command_text, completed.returncode)
    return CommandResult(
        command=command,
        returncode=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
    )


def _command_environment(extra_env: Mapping[str, str]) -> dict[str, str]:
    environment = dict(os.environ)
    environment["TF_IN_AUTOMATION"] = "1"
    environment.update(extra_env)
    return environment
