"""Render an inference report as plain text lines."""

from __future__ import annotations

from autobox.analyzer.models import InferenceReport


def render_text(report: InferenceReport, with_diagnostics: bool = True) -> str:
    """One ``Side effect: label(argument)`` line per effect.

    Diagnostics follow as ``warning:`` lines when requested.
    """
    lines = report.lines()
    if with_diagnostics:
        for d in report.diagnostics:
            lines.append(f"warning: [{d.kind}] {d.message}")
    return "\n".join(lines)
