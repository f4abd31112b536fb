"""IR (Intermediate Representation) package for autobox.

Provides the expression model, normalized statements and the effect
specification registry.
"""

from __future__ import annotations

from autobox.ir.expressions import (
    Concat,
    EffectOutput,
    Expression,
    Literal,
    Variable,
    concat,
    render,
)
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

__all__ = [
    "CallAssign",
    "Concat",
    "DuplicatePolicy",
    "EffectClause",
    "EffectOutput",
    "EffectRegistry",
    "Expression",
    "FunctionEffectSpec",
    "Literal",
    "LiteralAssign",
    "MoveAssign",
    "SpecKind",
    "Statement",
    "UnsupportedStatement",
    "Variable",
    "concat",
    "parse_effect_clause",
    "parse_expression",
    "render",
]
