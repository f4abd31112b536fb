"""CLI entry point for autobox."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from autobox import __version__
from autobox.analyzer.engine import DEFAULT_MAX_DEPTH, EngineOptions
from autobox.errors import AutoboxError
from autobox.ir.registry import DuplicatePolicy
from autobox.scanner import scan


@click.command()
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option(
    "-e", "--entrypoint",
    default=None,
    help="Function to start inference from (default: the manifest's entrypoint).",
)
@click.option(
    "-f", "--format", "fmt",
    type=click.Choice(["text", "md", "json"], case_sensitive=False),
    default="text",
    help="Output format (default: text).",
)
@click.option(
    "-o", "--output",
    type=click.Path(resolve_path=True),
    default=None,
    help="Output file path. Defaults to stdout.",
)
@click.option(
    "--max-depth",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_DEPTH,
    show_default=True,
    help="Maximum nesting of inferred functions before calls become opaque.",
)
@click.option(
    "--on-duplicate",
    type=click.Choice([p.value for p in DuplicatePolicy], case_sensitive=False),
    default=DuplicatePolicy.REJECT.value,
    show_default=True,
    help="What to do when two declarations share a function name.",
)
@click.option("--strict", is_flag=True, default=False,
              help="Exit with status 2 when coverage was degraded.")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose logging.")
@click.version_option(version=__version__)
def main(
    manifest: str,
    entrypoint: str | None,
    fmt: str,
    output: str | None,
    max_depth: int,
    on_duplicate: str,
    strict: bool,
    verbose: bool,
) -> None:
    """Infer the side effects reachable from an entry point."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s %(levelname)s: %(message)s",
    )

    options = EngineOptions(
        max_depth=max_depth,
        on_duplicate=DuplicatePolicy(on_duplicate.lower()),
    )
    try:
        result = scan(Path(manifest), entrypoint=entrypoint, options=options)
    except AutoboxError as exc:
        raise click.ClickException(str(exc)) from exc

    if fmt == "json":
        text = result.report.model_dump_json(indent=2)
    elif fmt == "md":
        from autobox.render.markdown import render_markdown
        text = render_markdown(result.report)
    else:
        from autobox.render.text import render_text
        text = render_text(result.report)

    _write(text, output)

    if strict and result.report.partial:
        raise SystemExit(2)


def _write(text: str, output: str | None) -> None:
    if output:
        Path(output).write_text(text + "\n")
        click.echo(f"Report written to {output}", err=True)
    else:
        click.echo(text)


if __name__ == "__main__":
    main()
