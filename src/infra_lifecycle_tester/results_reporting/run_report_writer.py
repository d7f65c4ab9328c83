"""Human-readable rendering of lifecycle run reports."""

from __future__ import annotations

from infra_lifecycle_tester.lifecycle_run.run_contracts import PhaseFailure, RunOutcome, RunReport

_INDENT = "    "


def render_run_report(report: RunReport) -> str:
    """Render one status line per target, followed by any phase diagnostics."""
    lines: list[str] = []
    for outcome in report.outcomes:
        lines.extend(_render_outcome(outcome))

    duration = (report.finished_at - report.started_at).total_seconds()
    total = len(report.outcomes)
    summary = "PASSED" if report.passed else "FAILED"
    lines.append(
        f"{summary}: {total - report.failed_count}/{total} lifecycle runs passed "
        f"in {duration:.1f}s"
    )
    return "\n".join(lines)


def _render_outcome(outcome: RunOutcome) -> list[str]:
    status = "PASS" if outcome.passed else "FAIL"
    header = f"{status} {outcome.target_name} ({outcome.state.value})"
    if outcome.output is not None:
        shown = "<sensitive>" if outcome.output.sensitive else outcome.output.value
        header = f"{header} {outcome.output.key}={shown}"
    lines = [header]
    for failure in (outcome.failure, outcome.teardown_failure):
        if failure is not None:
            lines.extend(_render_failure(failure))
    return lines


def _render_failure(failure: PhaseFailure) -> list[str]:
    message_lines = failure.message.splitlines() or [""]
    rendered = [f"{_INDENT}[{failure.phase}] {message_lines[0]}"]
    rendered.extend(f"{_INDENT}{_INDENT}{line}" for line in message_lines[1:])
    return rendered
