"""Unified runner: manifest -> registry -> inference report in one pass."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from autobox.analyzer.engine import EngineOptions, InferenceEngine
from autobox.analyzer.manifest import build_registry, load_manifest
from autobox.analyzer.models import InferenceReport
from autobox.errors import ManifestError
from autobox.ir.registry import EffectRegistry

log = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Result of one inference run."""
    report: InferenceReport
    registry: EffectRegistry
    manifest_path: Path


def scan(
    manifest_path: Path,
    *,
    entrypoint: str | None = None,
    options: EngineOptions | None = None,
) -> ScanResult:
    """Run the full inference pipeline on a declarations manifest.

    Args:
        manifest_path: JSON or YAML declarations manifest.
        entrypoint: Function to start from. Defaults to the manifest's
                    ``entrypoint`` field.
        options: Engine options (depth limit, collision policy).

    Returns:
        ScanResult with the report and the registry it was computed from.
    """
    options = options or EngineOptions()
    manifest_path = manifest_path.resolve()
    log.info("Loading declarations from %s", manifest_path)

    manifest = load_manifest(manifest_path)
    entrypoint = entrypoint or manifest.entrypoint
    if not entrypoint:
        raise ManifestError(f"{manifest_path}: no entrypoint given or declared")

    registry = build_registry(manifest, on_duplicate=options.on_duplicate)
    report = InferenceEngine(registry, options).run(entrypoint)

    return ScanResult(
        report=report,
        registry=registry,
        manifest_path=manifest_path,
    )
