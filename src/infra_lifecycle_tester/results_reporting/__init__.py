"""Results reporting domain exports."""

from .run_report_writer import render_run_report

__all__ = ["render_run_report"]
