"""Provisioning driver domain exports."""

from .command_runner import (
    CommandExecutionError,
    CommandNotFoundError,
    CommandResult,
    CommandRunner,
    CommandTimeoutError,
    run_terraform_command,
)
from .driver_contracts import (
    ApplyError,
    DestroyError,
    InitError,
    OutputBinding,
    OutputNotFoundError,
    OutputReadError,
    ProvisioningDriver,
    ProvisioningError,
)
from .terraform_driver import TerraformDriver

__all__ = [
    "OutputBinding",
    "ProvisioningDriver",
    "ProvisioningError",
    "InitError",
    "ApplyError",
    "OutputReadError",
    "OutputNotFoundError",
    "DestroyError",
    "CommandResult",
    "CommandRunner",
    "CommandExecutionError",
    "CommandNotFoundError",
    "CommandTimeoutError",
    "run_terraform_command",
    "TerraformDriver",
]
