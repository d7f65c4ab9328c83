"""Configuration domain exports."""

from .config_scaffold_builder import (
    DEFAULT_CONFIG_FILENAME,
    build_placeholder_configuration,
    write_placeholder_configuration,
)
from .loader import load_configuration
from .runtime_settings import (
    DEFAULT_OUTPUT_KEY,
    CommandTimeouts,
    ConfigurationError,
    DriverSettings,
    HarnessConfiguration,
    ProvisioningTarget,
)

__all__ = [
    "CommandTimeouts",
    "DriverSettings",
    "HarnessConfiguration",
    "ProvisioningTarget",
    "DEFAULT_OUTPUT_KEY",
    "ConfigurationError",
    "load_configuration",
    "DEFAULT_CONFIG_FILENAME",
    "build_placeholder_configuration",
    "write_placeholder_configuration",
]
