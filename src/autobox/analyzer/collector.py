"""Accumulate effect instances in discovery order and render the report."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from autobox.analyzer.evaluator import Resolved, to_value
from autobox.analyzer.models import Diagnostic, EffectRecord
from autobox.ir.expressions import Expression, fold

log = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class EffectInstance:
    """One resolved (or partially resolved) effect.

    Two instances are equal when their label and rendered argument text
    are equal.
    """
    label: str
    arguments: tuple[Expression, ...] = field(default_factory=tuple)

    @property
    def argument_texts(self) -> tuple[str, ...]:
        return tuple(to_value(fold(arg)).text for arg in self.arguments)

    @property
    def argument_text(self) -> str:
        return ", ".join(self.argument_texts)

    @property
    def resolved(self) -> bool:
        return all(isinstance(to_value(fold(arg)), Resolved) for arg in self.arguments)

    @property
    def key(self) -> tuple[str, str]:
        return (self.label, self.argument_text)

    def render(self) -> str:
        return f"Side effect: {self.label}({self.argument_text})"

    def to_record(self) -> EffectRecord:
        return EffectRecord(
            label=self.label,
            arguments=list(self.argument_texts),
            resolved=self.resolved,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EffectInstance):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)


class EffectCollector:
    """Deduplicating ordered set of EffectInstances plus diagnostics."""

    def __init__(self) -> None:
        self._instances: dict[tuple[str, str], EffectInstance] = {}
        self._diagnostics: dict[tuple[str, str, str], Diagnostic] = {}

    def add(self, instance: EffectInstance) -> bool:
        """Add instance; return False if an equal one was already seen."""
        if instance.key in self._instances:
            log.debug("Duplicate effect dropped: %s", instance.render())
            return False
        self._instances[instance.key] = instance
        return True

    def collect(self, stream: Iterable[EffectInstance]) -> list[EffectInstance]:
        for instance in stream:
            self.add(instance)
        return self.instances()

    def note(self, diagnostic: Diagnostic) -> None:
        key = (diagnostic.kind, diagnostic.function, diagnostic.message)
        if key not in self._diagnostics:
            self._diagnostics[key] = diagnostic

    def instances(self) -> list[EffectInstance]:
        return list(self._instances.values())

    def diagnostics(self) -> list[Diagnostic]:
        return list(self._diagnostics.values())

    def records(self) -> list[EffectRecord]:
        return [i.to_record() for i in self._instances.values()]

    def render(self) -> list[str]:
        return [i.render() for i in self._instances.values()]

    def __len__(self) -> int:
        return len(self._instances)
