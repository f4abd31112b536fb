"""Statement dataclasses for normalized function bodies — pure data, no logic."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from autobox.ir.expressions import Expression


@dataclass(frozen=True)
class LiteralAssign:
    target: str
    value: str                            # x = "s"


@dataclass(frozen=True)
class MoveAssign:
    target: str
    source: str                           # x = y


@dataclass(frozen=True)
class CallAssign:
    target: str | None                    # None for a bare call
    function: str
    arguments: tuple[Expression, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class UnsupportedStatement:
    construct: str                        # "branch"|"loop"|... as flagged upstream
    detail: str = ""


Statement = Union[LiteralAssign, MoveAssign, CallAssign, UnsupportedStatement]
