"""End-to-end lifecycle against a real Terraform root.

Provisions real infrastructure. Point ``INFRA_LIFECYCLE_TERRAFORM_DIR`` at the
root module (and optionally ``INFRA_LIFECYCLE_VAR_FILES`` at ``os.pathsep``
separated var files); the test is skipped when Terraform or the root is missing.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

import pytest
from infra_lifecycle_tester.configuration import DriverSettings, ProvisioningTarget
from infra_lifecycle_tester.lifecycle_run import LifecycleRun
from infra_lifecycle_tester.provisioning_driver import TerraformDriver

pytestmark = pytest.mark.e2e

_DEFAULT_TERRAFORM_DIR = Path(__file__).resolve().parents[3] / "Terraform"


def _pipeline_target() -> ProvisioningTarget:
    terraform_dir = Path(os.environ.get("INFRA_LIFECYCLE_TERRAFORM_DIR", _DEFAULT_TERRAFORM_DIR))
    if not terraform_dir.is_dir():
        pytest.skip(f"Terraform root not available: {terraform_dir}")
    if shutil.which(os.environ.get("INFRA_LIFECYCLE_TERRAFORM_BINARY", "terraform")) is None:
        pytest.skip("terraform binary not found on PATH")

    raw_var_files = os.environ.get("INFRA_LIFECYCLE_VAR_FILES")
    if raw_var_files is None:
        default_var_file = terraform_dir / "terraform.tfvars"
        var_files: tuple[Path, ...] = (default_var_file,) if default_var_file.exists() else ()
    else:
        var_files = tuple(Path(item) for item in raw_var_files.split(os.pathsep) if item)
    return ProvisioningTarget.resolve(terraform_dir, var_files, output_key="pipeline_name")


def test_pipeline_lifecycle() -> None:
    target = _pipeline_target()
    driver = TerraformDriver(
        DriverSettings(binary=os.environ.get("INFRA_LIFECYCLE_TERRAFORM_BINARY", "terraform"))
    )

    with LifecycleRun(target, driver) as run:
        run.apply()
        pipeline_name = run.validate_output("pipeline_name")

    assert pipeline_name.value
