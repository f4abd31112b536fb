"""Symbolic expression values used by specifications and the tracer.

An expression is a pure tree over four node types. Every operation here
returns a new tree; nothing is mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Union


@dataclass(frozen=True)
class Literal:
    """A known string constant."""
    value: str


@dataclass(frozen=True)
class Variable:
    """A named value, bound by an environment or still unresolved."""
    name: str


@dataclass(frozen=True)
class Concat:
    """String concatenation of two expressions (the only operator)."""
    left: "Expression"
    right: "Expression"


@dataclass(frozen=True)
class EffectOutput:
    """The output of an effect clause evaluated earlier in the same walk."""
    binding: str


Expression = Union[Literal, Variable, Concat, EffectOutput]


def concat(*parts: Expression) -> Expression:
    """Build a right-nested Concat from one or more parts."""
    if not parts:
        return Literal("")
    result = parts[-1]
    for part in reversed(parts[:-1]):
        result = Concat(part, result)
    return result


def flatten(expr: Expression) -> list[Expression]:
    """Return the non-Concat leaves of expr, left to right."""
    if isinstance(expr, Concat):
        return flatten(expr.left) + flatten(expr.right)
    return [expr]


def free_names(expr: Expression) -> list[str]:
    """Variable names referenced by expr, in order, without repeats."""
    names: list[str] = []
    for leaf in flatten(expr):
        if isinstance(leaf, Variable) and leaf.name not in names:
            names.append(leaf.name)
    return names


def output_refs(expr: Expression) -> list[str]:
    """Effect-output bindings referenced by expr, in order, without repeats."""
    refs: list[str] = []
    for leaf in flatten(expr):
        if isinstance(leaf, EffectOutput) and leaf.binding not in refs:
            refs.append(leaf.binding)
    return refs


def substitute(expr: Expression, bindings: Mapping[str, Expression]) -> Expression:
    """Replace bound Variables simultaneously.

    Substituted values are not themselves rewritten. Names left free in
    expr are untouched, so callers that export expr to another scope must
    rename them first.
    """
    if isinstance(expr, Variable):
        return bindings.get(expr.name, expr)
    if isinstance(expr, Concat):
        return Concat(substitute(expr.left, bindings), substitute(expr.right, bindings))
    return expr


def fold(expr: Expression) -> Expression:
    """Normalize expr: flatten concatenation and merge adjacent literals.

    A fully concrete expression folds to a single Literal.
    """
    if not isinstance(expr, Concat):
        return expr
    parts: list[Expression] = []
    for leaf in flatten(expr):
        if isinstance(leaf, Literal) and parts and isinstance(parts[-1], Literal):
            parts[-1] = Literal(parts[-1].value + leaf.value)
        else:
            parts.append(leaf)
    return concat(*parts)


def is_resolved(expr: Expression) -> bool:
    return isinstance(expr, Literal)


def quote(value: str) -> str:
    """Double-quote a literal for display."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def render(expr: Expression) -> str:
    """Textual form of expr, e.g. ``"~/" + home + @out``."""
    pieces = []
    for leaf in flatten(expr):
        if isinstance(leaf, Literal):
            pieces.append(quote(leaf.value))
        elif isinstance(leaf, Variable):
            pieces.append(leaf.name)
        else:
            pieces.append(f"@{leaf.binding}")
    return " + ".join(pieces)
