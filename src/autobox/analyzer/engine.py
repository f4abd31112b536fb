"""Interprocedural effect inference over the registry's call graph.

Starting from an entry function, each call is resolved against the
registry:

* declared functions have their clauses evaluated directly against the
  call's arguments;
* inferred functions are walked once with symbolic parameters to build a
  template, cached by name, and every call substitutes its own arguments
  into that template;
* unknown, failed, cyclic or too-deep calls are opaque: no effects and an
  unresolved return value.

Names a callee leaves unresolved reach the caller under their scoped name
(`g.path`), never as a bare identifier a caller variable could capture.

Every local failure becomes a Diagnostic; nothing aborts the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from autobox.analyzer.collector import EffectCollector, EffectInstance
from autobox.analyzer.environment import BindingEnvironment, scoped_name
from autobox.analyzer.evaluator import evaluate
from autobox.analyzer.models import Diagnostic, DiagnosticKind, InferenceReport
from autobox.errors import DanglingReferenceError, UnsupportedStatementError
from autobox.ir.expressions import (
    Expression,
    Literal,
    Variable,
    concat,
    fold,
    free_names,
    substitute,
)
from autobox.ir.nodes import (
    CallAssign,
    LiteralAssign,
    MoveAssign,
    Statement,
    UnsupportedStatement,
)
from autobox.ir.registry import (
    DuplicatePolicy,
    EffectRegistry,
    FunctionEffectSpec,
    SpecKind,
)

log = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64


@dataclass
class EngineOptions:
    max_depth: int = DEFAULT_MAX_DEPTH              # in-progress inferred functions
    on_duplicate: DuplicatePolicy = DuplicatePolicy.REJECT


@dataclass(frozen=True)
class CallSummary:
    """What one call contributes to its caller."""
    effects: tuple[EffectInstance, ...] = ()
    returns: Expression = Literal("")
    updates: Mapping[str, Expression] = field(default_factory=dict)  # param -> post-call value
    opaque: bool = False


def opaque_value(name: str) -> Variable:
    """Unresolved marker for the result of something we cannot see into."""
    return Variable(f"{name}(...)")


class InferenceEngine:
    """Call-graph walker. One instance per run; use fork() for another entry."""

    def __init__(
        self,
        registry: EffectRegistry,
        options: EngineOptions | None = None,
    ) -> None:
        self.registry = registry
        self.options = options or EngineOptions()
        self._templates: dict[str, CallSummary] = {}
        self._inferred: dict[str, None] = {}        # walk completion order
        self._failed: set[str] = set()
        self._stack: list[str] = []
        self._cut_at: int | None = None              # shallowest stack index a cut hit
        self._collector = EffectCollector()

    def fork(self) -> "InferenceEngine":
        """A fresh engine over the same registry, sharing no mutable state."""
        return InferenceEngine(self.registry, self.options)

    # ── Public entry points ──────────────────────────────────────────────

    def run(self, entrypoint: str) -> InferenceReport:
        """Infer every effect reachable from entrypoint.

        Parameters of the entry function are left symbolic.
        """
        self._reset()
        log.info("Inferring effects from %s (%d functions registered)",
                 entrypoint, len(self.registry))

        summary = self.infer(entrypoint, (), exported=False)
        self._collector.collect(summary.effects)

        report = InferenceReport(
            entrypoint=entrypoint,
            effects=self._collector.records(),
            diagnostics=self._collector.diagnostics(),
            functions_inferred=list(self._inferred),
        )
        log.info("Inference complete: %d effects, %d diagnostics",
                 len(report.effects), len(report.diagnostics))
        return report

    def infer(
        self,
        name: str,
        arguments: Sequence[Expression],
        *,
        exported: bool = True,
    ) -> CallSummary:
        """Resolve one call of name with the given argument expressions.

        With exported (the default) the summary is meant for a caller, so
        names the callee leaves unresolved are scoped. The entry point is
        run with exported=False and keeps its bare parameter names.
        """
        spec = self.registry.lookup(name)
        if spec is None:
            self._diagnose(
                "unknown_function", name,
                f"no specification for {name}; treated as opaque",
            )
            return self._opaque(name)
        if name in self._failed:
            return self._opaque(name)
        if name in self._stack:
            path = " -> ".join(self._stack + [name])
            self._diagnose(
                "recursive_cycle", name,
                f"recursive call to {name} cut ({path})",
            )
            self._note_cut(self._stack.index(name))
            return self._opaque(name)
        if len(self._stack) >= self.options.max_depth:
            self._diagnose(
                "depth_limit", name,
                f"call depth limit {self.options.max_depth} reached at {name}",
            )
            self._note_cut(0)                   # depends on this occurrence's depth
            return self._opaque(name)

        try:
            if spec.kind is SpecKind.DECLARED:
                return self._apply_declared(spec, arguments, exported)
            template = self._template(spec)
        except DanglingReferenceError as exc:
            self._fail(spec.name, "dangling_reference", str(exc))
            return self._opaque(name)
        except UnsupportedStatementError as exc:
            self._fail(spec.name, "unsupported_statement", str(exc))
            return self._opaque(name)
        return _instantiate(spec, template, arguments, exported)

    # ── Declared functions ───────────────────────────────────────────────

    def _apply_declared(
        self,
        spec: FunctionEffectSpec,
        arguments: Sequence[Expression],
        exported: bool = True,
    ) -> CallSummary:
        undefined = spec.undefined_names()
        if undefined:
            raise DanglingReferenceError(spec.name, undefined)

        env = BindingEnvironment.for_parameters(
            spec.name, spec.parameters, arguments, qualify=exported,
        )
        effects: list[EffectInstance] = []
        for clause in spec.effects:
            args = tuple(evaluate(arg, env).expression for arg in clause.arguments)
            if clause.is_eval:
                value = fold(concat(*args))
            else:
                effects.append(EffectInstance(clause.label, args))
                value = opaque_value(clause.label)
            if clause.output_binding:
                env.bind_output(clause.output_binding, value)

        updates = {param: evaluate(expr, env).expression for param, expr in spec.updates.items()}
        if spec.returns is not None:
            returns = evaluate(spec.returns, env).expression
        else:
            returns = opaque_value(spec.name)
        return CallSummary(tuple(effects), returns, updates)

    # ── Inferred functions ───────────────────────────────────────────────

    def _template(self, spec: FunctionEffectSpec) -> CallSummary:
        """Effects and return of spec in terms of its own parameters.

        A template is cached unless its walk was cut at a function further
        up the stack: that cut belongs to this occurrence only, and a call
        from elsewhere must walk the body again.
        """
        cached = self._templates.get(spec.name)
        if cached is not None:
            return cached

        log.debug("Walking body of %s (%d statements)", spec.name, len(spec.body))
        depth = len(self._stack)
        outer_cut, self._cut_at = self._cut_at, None
        self._stack.append(spec.name)
        try:
            env = BindingEnvironment.symbolic(spec.name, spec.parameters)
            effects: list[EffectInstance] = []
            for stmt in spec.body:
                effects.extend(self._step(stmt, env))
            if spec.returns is not None:
                returns = evaluate(spec.returns, env).expression
            else:
                returns = opaque_value(spec.name)
        finally:
            self._stack.pop()
            cut, self._cut_at = self._cut_at, outer_cut
            if cut is not None:
                self._note_cut(cut)

        template = CallSummary(tuple(effects), returns)
        self._inferred.setdefault(spec.name)
        if cut is None or cut >= depth:
            self._templates[spec.name] = template
        else:
            log.debug("Not caching %s: walk was cut at %s", spec.name, self._stack[cut])
        return template

    def _step(self, stmt: Statement, env: BindingEnvironment) -> list[EffectInstance]:
        """Apply one statement to env; return the effects it emits."""
        if isinstance(stmt, LiteralAssign):
            env.bind(stmt.target, Literal(stmt.value))
            return []
        if isinstance(stmt, MoveAssign):
            env.bind(stmt.target, env.resolve_name(stmt.source))
            return []
        if isinstance(stmt, CallAssign):
            return self._call(stmt, env)
        if isinstance(stmt, UnsupportedStatement):
            construct = stmt.construct + (f" ({stmt.detail})" if stmt.detail else "")
            raise UnsupportedStatementError(env.function, construct)
        raise UnsupportedStatementError(env.function, type(stmt).__name__)

    def _call(self, stmt: CallAssign, env: BindingEnvironment) -> list[EffectInstance]:
        arguments = tuple(evaluate(arg, env).expression for arg in stmt.arguments)
        summary = self.infer(stmt.function, arguments)

        # Mutation only flows back through plain variables passed in.
        callee = self.registry.lookup(stmt.function)
        if callee is not None and summary.updates:
            for param, raw in zip(callee.parameters, stmt.arguments):
                if param in summary.updates and isinstance(raw, Variable):
                    env.bind(raw.name, summary.updates[param])

        if stmt.target is not None:
            env.bind(stmt.target, summary.returns)
        return list(summary.effects)

    # ── Bookkeeping ──────────────────────────────────────────────────────

    def _opaque(self, name: str) -> CallSummary:
        return CallSummary(returns=opaque_value(name), opaque=True)

    def _note_cut(self, index: int) -> None:
        if self._cut_at is None or index < self._cut_at:
            self._cut_at = index

    def _fail(self, name: str, kind: DiagnosticKind, message: str) -> None:
        self._failed.add(name)
        self._diagnose(kind, name, message)

    def _diagnose(self, kind: DiagnosticKind, function: str, message: str) -> None:
        log.debug("%s: %s", kind, message)
        self._collector.note(Diagnostic(kind=kind, function=function, message=message))

    def _reset(self) -> None:
        self._templates.clear()
        self._inferred.clear()
        self._failed.clear()
        self._stack.clear()
        self._cut_at = None
        self._collector = EffectCollector()


def _instantiate(
    spec: FunctionEffectSpec,
    template: CallSummary,
    arguments: Sequence[Expression],
    exported: bool = True,
) -> CallSummary:
    """Substitute one call's arguments into a cached template."""
    bindings: dict[str, Expression] = dict(zip(spec.parameters, arguments))
    if exported:
        # unbound locals and parameters without an argument
        for expr in _template_expressions(template):
            for name in free_names(expr):
                if name not in bindings and name.isidentifier():
                    bindings[name] = Variable(scoped_name(spec.name, name))
    effects = tuple(
        EffectInstance(
            effect.label,
            tuple(fold(substitute(arg, bindings)) for arg in effect.arguments),
        )
        for effect in template.effects
    )
    return CallSummary(effects, fold(substitute(template.returns, bindings)))


def _template_expressions(template: CallSummary) -> list[Expression]:
    exprs = [arg for effect in template.effects for arg in effect.arguments]
    exprs.append(template.returns)
    return exprs


def infer_effects(
    registry: EffectRegistry,
    entrypoint: str,
    options: EngineOptions | None = None,
) -> InferenceReport:
    """Convenience wrapper: run a fresh engine from entrypoint."""
    return InferenceEngine(registry, options).run(entrypoint)
