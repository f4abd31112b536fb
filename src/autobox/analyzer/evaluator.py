"""Reduce expressions to concrete strings, or leave them symbolic."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from autobox.analyzer.environment import BindingEnvironment
from autobox.ir.expressions import (
    Expression,
    Literal,
    free_names,
    quote,
    render,
)


@dataclass(frozen=True)
class Resolved:
    """A fully concrete string value."""
    value: str

    @property
    def expression(self) -> Expression:
        return Literal(self.value)

    @property
    def text(self) -> str:
        return quote(self.value)


@dataclass(frozen=True)
class PartiallyResolved:
    """A value with at least one unresolved part.

    ``expression`` is the residual tree with every known part substituted;
    ``unresolved`` lists the names still standing in for unknown values.
    """
    expression: Expression
    unresolved: tuple[str, ...] = ()

    @property
    def text(self) -> str:
        return render(self.expression)


Value = Union[Resolved, PartiallyResolved]


def evaluate(expr: Expression, env: BindingEnvironment) -> Value:
    """Evaluate expr against env.

    Unbound variables never fail: they yield a PartiallyResolved value that
    carries the variable name. A reference to an effect output that has not
    been recorded yet raises DanglingReferenceError.
    """
    residual = env.resolve(expr)
    return to_value(residual)


def to_value(expr: Expression) -> Value:
    """Classify an already-folded expression."""
    if isinstance(expr, Literal):
        return Resolved(expr.value)
    return PartiallyResolved(expr, tuple(free_names(expr)))
