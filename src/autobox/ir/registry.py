"""Function effect specifications and the registry that holds them.

The registry is built once per run and is read-only afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from autobox.errors import DuplicateFunctionError
from autobox.ir.expressions import Expression, Literal, free_names, output_refs
from autobox.ir.nodes import Statement

log = logging.getLogger(__name__)

# Clauses with this label only bind their value; they are never reported.
EVAL_LABEL = "eval"


class SpecKind(str, Enum):
    DECLARED = "declared"    # effects asserted, never re-derived
    INFERRED = "inferred"    # effects derived from the body on first use


class DuplicatePolicy(str, Enum):
    REJECT = "reject"
    REPLACE = "replace"      # last write wins


@dataclass(frozen=True)
class EffectClause:
    label: str                                  # "reads_file", "eval", ...
    arguments: tuple[Expression, ...] = field(default_factory=tuple)
    output_binding: str | None = None

    @property
    def argument(self) -> Expression:
        """The first argument, for the common single-argument clause."""
        return self.arguments[0] if self.arguments else Literal("")

    @property
    def is_eval(self) -> bool:
        return self.label == EVAL_LABEL


@dataclass(frozen=True)
class FunctionEffectSpec:
    name: str
    parameters: tuple[str, ...] = field(default_factory=tuple)
    effects: tuple[EffectClause, ...] = field(default_factory=tuple)
    updates: Mapping[str, Expression] = field(default_factory=dict)
    returns: Expression | None = None
    kind: SpecKind = SpecKind.DECLARED
    body: tuple[Statement, ...] = field(default_factory=tuple)

    def undefined_names(self) -> list[str]:
        """Names used in effects/updates/returns that nothing defines.

        A name is defined if it is a parameter or the output binding of an
        earlier clause. Only meaningful for declared specs; inferred specs
        derive their effects from the body.
        """
        defined = set(self.parameters)
        missing: list[str] = []

        def check(expr: Expression) -> None:
            for name in free_names(expr) + output_refs(expr):
                if name not in defined and name not in missing:
                    missing.append(name)

        for clause in self.effects:
            for arg in clause.arguments:
                check(arg)
            if clause.output_binding:
                defined.add(clause.output_binding)
        for param, expr in self.updates.items():
            if param not in self.parameters and param not in missing:
                missing.append(param)
            check(expr)
        if self.returns is not None:
            check(self.returns)
        return missing


class EffectRegistry(Mapping[str, FunctionEffectSpec]):
    """Immutable name -> FunctionEffectSpec mapping (flat namespace)."""

    def __init__(self, specs: Mapping[str, FunctionEffectSpec]) -> None:
        self._specs = MappingProxyType(dict(specs))

    @classmethod
    def from_specs(
        cls,
        specs: Iterable[FunctionEffectSpec],
        on_duplicate: DuplicatePolicy = DuplicatePolicy.REJECT,
    ) -> "EffectRegistry":
        """Build a registry, applying the collision policy to repeated names."""
        collected: dict[str, FunctionEffectSpec] = {}
        for spec in specs:
            if spec.name in collected:
                if on_duplicate is DuplicatePolicy.REJECT:
                    raise DuplicateFunctionError(spec.name)
                log.warning("Replacing earlier specification for %s", spec.name)
            collected[spec.name] = spec
        return cls(collected)

    def lookup(self, name: str) -> FunctionEffectSpec | None:
        return self._specs.get(name)

    def __getitem__(self, name: str) -> FunctionEffectSpec:
        return self._specs[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    def __repr__(self) -> str:
        return f"EffectRegistry({len(self)} functions)"
