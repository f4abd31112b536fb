"""Tests for loading declarations manifests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from autobox.analyzer.manifest import build_registry, load_manifest, parse_manifest
from autobox.errors import DuplicateFunctionError, ManifestError
from autobox.ir.expressions import Concat, EffectOutput, Literal, Variable
from autobox.ir.nodes import CallAssign, LiteralAssign, MoveAssign, UnsupportedStatement
from autobox.ir.registry import DuplicatePolicy, SpecKind

YAML_MANIFEST = """\
entrypoint: main
functions:
  - name: fn_with_effects
    parameters: [A, B]
    effects:
      - "reads_file(A + '/' + B)"
    returns: "A + '/' + B"
  - name: main
    kind: inferred
    body:
      - {op: literal, target: x, value: "~"}
      - {op: move, target: y, source: x}
      - {op: call, target: r, function: fn_with_effects, arguments: [y, "'cfg'"]}
      - {op: loop, detail: "for item in items"}
externals:
  - name: getenv
    parameters: [K]
    effects:
      - label: reads_env
        arguments: [K]
        output: value
    returns: "@value"
"""


def _write(tmp_path: Path, name: str, content: str) -> Path:
    p = tmp_path / name
    p.write_text(content)
    return p


def test_load_yaml(tmp_path):
    manifest = load_manifest(_write(tmp_path, "effects.yaml", YAML_MANIFEST))
    assert manifest.entrypoint == "main"
    assert [f.name for f in manifest.functions] == ["fn_with_effects", "main"]
    assert manifest.externals[0].name == "getenv"


def test_load_json(tmp_path):
    data = {"entrypoint": "main", "functions": [{"name": "main", "kind": "inferred"}]}
    manifest = load_manifest(_write(tmp_path, "effects.json", json.dumps(data)))
    assert manifest.functions[0].kind == "inferred"


def test_build_registry(tmp_path):
    registry = build_registry(load_manifest(_write(tmp_path, "effects.yml", YAML_MANIFEST)))
    assert set(registry) == {"fn_with_effects", "main", "getenv"}

    fn = registry["fn_with_effects"]
    assert fn.kind is SpecKind.DECLARED
    assert fn.parameters == ("A", "B")
    assert fn.effects[0].label == "reads_file"
    assert fn.effects[0].argument == Concat(Variable("A"), Concat(Literal("/"), Variable("B")))

    main = registry["main"]
    assert main.kind is SpecKind.INFERRED
    assert main.body[0] == LiteralAssign("x", "~")
    assert main.body[1] == MoveAssign("y", "x")
    assert main.body[2] == CallAssign("r", "fn_with_effects", (Variable("y"), Literal("cfg")))
    assert main.body[3] == UnsupportedStatement("loop", "for item in items")

    getenv = registry["getenv"]
    assert getenv.effects[0].output_binding == "value"
    assert getenv.returns == EffectOutput("value")


def test_duplicate_names_rejected():
    data = {"functions": [{"name": "f"}], "externals": [{"name": "f"}]}
    with pytest.raises(DuplicateFunctionError):
        build_registry(parse_manifest(data))


def test_duplicate_names_replaced():
    data = {
        "functions": [{"name": "f", "returns": "'project'"}],
        "externals": [{"name": "f", "returns": "'external'"}],
    }
    registry = build_registry(parse_manifest(data), on_duplicate=DuplicatePolicy.REPLACE)
    assert registry["f"].returns == Literal("external")


def test_invalid_expression(tmp_path):
    data = {"functions": [{"name": "f", "returns": "A * B"}]}
    with pytest.raises(ManifestError, match="function f"):
        build_registry(parse_manifest(data))


def test_incomplete_statement():
    data = {"functions": [{"name": "f", "kind": "inferred", "body": [{"op": "move", "target": "x"}]}]}
    with pytest.raises(ManifestError, match="incomplete 'move'"):
        build_registry(parse_manifest(data))


def test_schema_violation():
    with pytest.raises(ManifestError, match="invalid manifest"):
        parse_manifest({"functions": [{"kind": "declared"}]})


def test_bad_kind():
    with pytest.raises(ManifestError):
        parse_manifest({"functions": [{"name": "f", "kind": "magic"}]})


def test_unreadable_file(tmp_path):
    with pytest.raises(ManifestError, match="cannot read"):
        load_manifest(tmp_path / "missing.yaml")


def test_malformed_json(tmp_path):
    with pytest.raises(ManifestError, match="cannot parse"):
        load_manifest(_write(tmp_path, "bad.json", "{not json"))


def test_empty_yaml(tmp_path):
    manifest = load_manifest(_write(tmp_path, "empty.yaml", ""))
    assert manifest.functions == []
    assert manifest.entrypoint is None
