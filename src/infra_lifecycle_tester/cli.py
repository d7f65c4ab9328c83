"""Command line interface entry point."""

from __future__ import annotations

import logging
import sys

import click

from infra_lifecycle_tester.configuration import (
    DEFAULT_CONFIG_FILENAME,
    write_placeholder_configuration,
)
from infra_lifecycle_tester.lifecycle_run import (
    RunExecutionError,
    RunRequest,
    run_configured_lifecycles,
)
from infra_lifecycle_tester.provisioning_driver import TerraformDriver
from infra_lifecycle_tester.results_reporting import render_run_report

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class CliError(Exception):
    """Custom CLI error."""


class LifecycleFailedError(CliError):
    """Raised after reporting when at least one lifecycle run failed."""


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="infra-lifecycle-tester")
def cli() -> None:
    """Apply, validate and destroy Terraform targets."""


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML lifecycle configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a placeholder YAML lifecycle configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="run")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to YAML/JSON lifecycle configuration file",
)
@click.option(
    "--target",
    "target_names",
    multiple=True,
    help="Run only the named target; repeat to select several",
)
@click.option(
    "--parallelism",
    type=click.IntRange(min=1),
    default=None,
    help="Override the configured number of concurrent lifecycle runs",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Log Terraform commands and their output to stderr.",
)
def run_lifecycles(
    config_path: str, target_names: tuple[str, ...], parallelism: int | None, verbose: bool
) -> None:
    """Apply each target, validate its output and always destroy it."""
    _configure_logging(verbose)
    try:
        report = run_configured_lifecycles(
            RunRequest(
                config_path=config_path,
                target_names=target_names,
                parallelism=parallelism,
            ),
            driver_cls=TerraformDriver,
        )
    except RunExecutionError as exc:
        raise CliError(str(exc)) from exc
    click.echo(render_run_report(report))
    if not report.passed:
        raise LifecycleFailedError(f"{report.failed_count} lifecycle run(s) failed.")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=_LOG_FORMAT,
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
