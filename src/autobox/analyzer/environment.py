"""Per-call-site binding environment used while walking one function body."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from autobox.errors import DanglingReferenceError
from autobox.ir.expressions import (
    Concat,
    EffectOutput,
    Expression,
    Variable,
    fold,
    substitute,
)

log = logging.getLogger(__name__)


def scoped_name(function: str, name: str) -> str:
    """Name for a value left unresolved inside function, e.g. ``g.path``.

    The dot keeps it out of the identifier namespace, so no parameter or
    local of any other function can match it during substitution.
    """
    return f"{function}.{name}"


class BindingEnvironment:
    """Maps local names to (possibly symbolic) expressions.

    One environment is created per traversal of one body under one caller
    context. Effect outputs recorded during that traversal live beside the
    local bindings so that ``EffectOutput`` references are order-checked.
    """

    def __init__(self, function: str = "<anonymous>") -> None:
        self.function = function
        self._bindings: dict[str, Expression] = {}
        self._outputs: dict[str, Expression] = {}

    @classmethod
    def for_parameters(
        cls,
        function: str,
        parameters: Sequence[str],
        arguments: Sequence[Expression],
        qualify: bool = False,
    ) -> "BindingEnvironment":
        """Bind arguments positionally to parameters.

        Parameters without an argument stay symbolic; surplus arguments are
        dropped. With qualify, a missing parameter is bound to its scoped
        name (see scoped_name) so that it cannot be captured by a caller
        variable of the same name.
        """
        env = cls(function)
        if len(arguments) > len(parameters):
            log.debug(
                "%s: %d surplus argument(s) dropped",
                function, len(arguments) - len(parameters),
            )
        for param, arg in zip(parameters, arguments):
            env.bind(param, arg)
        if qualify:
            for param in parameters[len(arguments):]:
                env.bind(param, Variable(scoped_name(function, param)))
        return env

    @classmethod
    def symbolic(cls, function: str, parameters: Iterable[str]) -> "BindingEnvironment":
        """Bind every parameter to itself; used to build inference templates."""
        env = cls(function)
        for param in parameters:
            env.bind(param, Variable(param))
        return env

    def bind(self, name: str, value: Expression) -> None:
        self._bindings[name] = value

    def lookup(self, name: str) -> Expression | None:
        return self._bindings.get(name)

    def resolve_name(self, name: str) -> Expression:
        """The bound value of name, or the unresolved marker Variable(name)."""
        return self._bindings.get(name, Variable(name))

    def bind_output(self, binding: str, value: Expression) -> None:
        self._outputs[binding] = value

    def output(self, binding: str) -> Expression:
        if binding not in self._outputs:
            raise DanglingReferenceError(self.function, [binding])
        return self._outputs[binding]

    def has_output(self, binding: str) -> bool:
        return binding in self._outputs

    def resolve(self, expr: Expression) -> Expression:
        """Substitute this environment into expr and fold the result.

        Outputs are visible both as ``@name`` and as a plain name, with
        local bindings taking precedence for plain names.
        """
        expr = _replace_outputs(expr, self)
        scope = {**self._outputs, **self._bindings}
        return fold(substitute(expr, scope))

    def names(self) -> list[str]:
        return list(self._bindings)

    def __contains__(self, name: object) -> bool:
        return name in self._bindings

    def __repr__(self) -> str:
        return f"BindingEnvironment({self.function!r}, {len(self._bindings)} bindings)"


def _replace_outputs(expr: Expression, env: BindingEnvironment) -> Expression:
    if isinstance(expr, EffectOutput):
        return env.output(expr.binding)
    if isinstance(expr, Concat):
        return Concat(_replace_outputs(expr.left, env), _replace_outputs(expr.right, env))
    return expr
