"""
Declarations manifest loading.

Usage:
    from pathlib import Path
    from autobox.analyzer.manifest import build_registry, load_manifest

    manifest = load_manifest(Path("effects.yaml"))
    registry = build_registry(manifest)

A manifest is JSON or YAML:

    entrypoint: main
    functions:
      - name: fn_with_effects
        parameters: [A, B]
        effects: ["reads_file(A + '/' + B)"]
        returns: "A + '/' + B"
      - name: main
        kind: inferred
        body:
          - {op: literal, target: x, value: "~"}
          - {op: call, function: fn_with_effects, arguments: [x, "'cfg'"]}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from autobox.analyzer.models import (
    DeclarationsManifest,
    EffectDecl,
    FunctionDecl,
    StatementDecl,
)
from autobox.errors import ExpressionSyntaxError, ManifestError
from autobox.ir.nodes import (
    CallAssign,
    LiteralAssign,
    MoveAssign,
    Statement,
    UnsupportedStatement,
)
from autobox.ir.parser import parse_effect_clause, parse_expression
from autobox.ir.registry import (
    DuplicatePolicy,
    EffectClause,
    EffectRegistry,
    FunctionEffectSpec,
    SpecKind,
)

log = logging.getLogger(__name__)

_YAML_SUFFIXES = {".yaml", ".yml"}


def load_manifest(path: Path) -> DeclarationsManifest:
    """Read and validate a JSON or YAML declarations manifest."""
    try:
        text = path.read_text()
    except OSError as exc:
        raise ManifestError(f"cannot read {path}: {exc}") from exc

    try:
        if path.suffix.lower() in _YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ManifestError(f"cannot parse {path}: {exc}") from exc

    return parse_manifest(data, source=str(path))


def parse_manifest(data: Any, source: str = "<manifest>") -> DeclarationsManifest:
    if data is None:
        data = {}
    try:
        manifest = DeclarationsManifest.model_validate(data)
    except ValidationError as exc:
        raise ManifestError(f"invalid manifest {source}: {exc}") from exc
    log.debug("Manifest %s: %d functions, %d externals",
              source, len(manifest.functions), len(manifest.externals))
    return manifest


def build_registry(
    manifest: DeclarationsManifest,
    on_duplicate: DuplicatePolicy = DuplicatePolicy.REJECT,
) -> EffectRegistry:
    """Convert manifest declarations into an EffectRegistry.

    External declarations share the flat namespace with project functions.
    """
    specs = [
        to_spec(decl)
        for decl in manifest.functions + manifest.externals
    ]
    return EffectRegistry.from_specs(specs, on_duplicate=on_duplicate)


def to_spec(decl: FunctionDecl) -> FunctionEffectSpec:
    try:
        return FunctionEffectSpec(
            name=decl.name,
            parameters=tuple(decl.parameters),
            effects=tuple(_to_clause(e) for e in decl.effects),
            updates={p: parse_expression(e) for p, e in decl.updates.items()},
            returns=parse_expression(decl.returns) if decl.returns is not None else None,
            kind=SpecKind(decl.kind),
            body=tuple(_to_statement(s) for s in decl.body),
        )
    except ExpressionSyntaxError as exc:
        raise ManifestError(f"function {decl.name}: {exc}") from exc


def _to_clause(decl: EffectDecl | str) -> EffectClause:
    if isinstance(decl, str):
        label, arguments, binding = parse_effect_clause(decl)
        return EffectClause(label, arguments, binding)
    return EffectClause(
        decl.label,
        tuple(parse_expression(a) for a in decl.arguments),
        decl.output,
    )


def _to_statement(decl: StatementDecl) -> Statement:
    # Anything the tracer does not model is passed on as UnsupportedStatement
    # so that the engine can degrade that one function.
    if decl.op == "literal" and decl.target and decl.value is not None:
        return LiteralAssign(decl.target, decl.value)
    if decl.op == "move" and decl.target and decl.source:
        return MoveAssign(decl.target, decl.source)
    if decl.op == "call" and decl.function:
        return CallAssign(
            decl.target,
            decl.function,
            tuple(parse_expression(a) for a in decl.arguments),
        )
    if decl.op in ("literal", "move", "call"):
        raise ManifestError(f"incomplete {decl.op!r} statement: {decl.model_dump()}")
    return UnsupportedStatement(decl.op, decl.detail)
