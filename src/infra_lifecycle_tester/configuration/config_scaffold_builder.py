"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "lifecycle.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Lifecycle configuration template for infra-lifecycle-tester.
# Replace every <REQUIRED> placeholder before running run.
# Remove or fill <OPTIONAL> entries only when your setup needs them.

terraform:
  binary: "terraform"
  # no_color: true
  # lock: true
  # Timeouts are in seconds. Leave a phase unset to wait for Terraform indefinitely.
  # timeouts:
  #   init: <OPTIONAL>
  #   apply: <OPTIONAL>
  #   output: <OPTIONAL>
  #   destroy: <OPTIONAL>

# Independent targets may run in parallel; each target needs its own Terraform directory.
parallelism: 1

targets:
  - name: "<REQUIRED>"
    # Paths are resolved relative to this file.
    dir: "<REQUIRED>"
    var_files:
      - "<OPTIONAL>"
    # Output read from Terraform state after apply; it must be a non-empty string.
    output_key: "pipeline_name"
    # vars:
    #   <OPTIONAL>: <OPTIONAL>
    # backend_config:
    #   <OPTIONAL>: <OPTIONAL>
    # env:
    #   <OPTIONAL>: <OPTIONAL>
"""


def build_placeholder_configuration() -> str:
    """Build a YAML lifecycle configuration template with placeholders and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder lifecycle configuration template to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(
            f"Lifecycle configuration file already exists: {destination.resolve()}"
        )
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
