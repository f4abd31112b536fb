"""Render an inference report as a Markdown document."""

from __future__ import annotations

from autobox.analyzer.models import InferenceReport

_KIND_LABELS = {
    "unknown_function": "Unknown function",
    "recursive_cycle": "Recursive cycle",
    "dangling_reference": "Dangling reference",
    "unsupported_statement": "Unsupported statement",
    "depth_limit": "Depth limit",
}


def render_markdown(report: InferenceReport) -> str:
    """Produce a Markdown report: summary, effects table, degradations."""
    sections: list[str] = []

    # ── Title ────────────────────────────────────────────────────────────
    sections.append(f"# Side Effects: `{report.entrypoint}`\n")

    # ── Summary ──────────────────────────────────────────────────────────
    partial = sum(1 for e in report.effects if not e.resolved)
    summary_lines = [
        f"- **Entry point**: `{report.entrypoint}`",
        f"- **Effects**: {len(report.effects)} ({partial} partially resolved)",
        f"- **Functions inferred**: {len(report.functions_inferred)}",
        f"- **Coverage**: {'partial' if report.partial else 'complete'}",
    ]
    sections.append("\n".join(summary_lines) + "\n")

    # ── Effects ──────────────────────────────────────────────────────────
    if report.effects:
        sections.append("## Effects\n")
        sections.append("| # | Effect | Argument | Resolved |")
        sections.append("|---|---|---|---|")
        for i, e in enumerate(report.effects, 1):
            args = ", ".join(e.arguments).replace("|", "\\|")
            sections.append(f"| {i} | `{e.label}` | `{args}` | {'yes' if e.resolved else 'no'} |")
        sections.append("")
    else:
        sections.append("No side effects found.\n")

    # ── Diagnostics ──────────────────────────────────────────────────────
    if report.diagnostics:
        sections.append("## Degraded Coverage\n")
        for d in report.diagnostics:
            sections.append(f"- **{_KIND_LABELS.get(d.kind, d.kind)}** `{d.function}`: {d.message}")
        sections.append("")

    return "\n".join(sections)
