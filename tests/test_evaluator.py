"""Tests for the binding environment and the evaluator."""

from __future__ import annotations

import pytest

from autobox.analyzer.environment import BindingEnvironment
from autobox.analyzer.evaluator import PartiallyResolved, Resolved, evaluate
from autobox.errors import DanglingReferenceError
from autobox.ir.expressions import Concat, EffectOutput, Literal, Variable, concat


class TestBindingEnvironment:
    def test_positional_binding(self):
        env = BindingEnvironment.for_parameters("f", ["A", "B"], [Literal("~"), Literal("x")])
        assert env.lookup("A") == Literal("~")
        assert env.lookup("B") == Literal("x")

    def test_missing_arguments_stay_unbound(self):
        env = BindingEnvironment.for_parameters("f", ["A", "B"], [Literal("~")])
        assert env.lookup("B") is None
        assert env.resolve_name("B") == Variable("B")

    def test_missing_arguments_qualified(self):
        env = BindingEnvironment.for_parameters("f", ["A", "B"], [Literal("~")], qualify=True)
        assert env.lookup("A") == Literal("~")
        assert env.lookup("B") == Variable("f.B")

    def test_surplus_arguments_dropped(self):
        env = BindingEnvironment.for_parameters("f", ["A"], [Literal("1"), Literal("2")])
        assert env.names() == ["A"]

    def test_symbolic(self):
        env = BindingEnvironment.symbolic("f", ["a", "b"])
        assert env.lookup("a") == Variable("a")
        assert "b" in env

    def test_resolve_folds(self):
        env = BindingEnvironment("f")
        env.bind("x", Literal("~"))
        assert env.resolve(concat(Variable("x"), Literal("/"), Literal("d"))) == Literal("~/d")

    def test_output_lookup(self):
        env = BindingEnvironment("f")
        env.bind_output("o", Literal("v"))
        assert env.has_output("o")
        assert env.resolve(EffectOutput("o")) == Literal("v")
        # outputs are visible by plain name too
        assert env.resolve(Variable("o")) == Literal("v")

    def test_unrecorded_output_raises(self):
        env = BindingEnvironment("f")
        with pytest.raises(DanglingReferenceError) as info:
            env.output("nope")
        assert info.value.function == "f"
        assert info.value.names == ["nope"]


class TestEvaluate:
    def test_literal(self):
        assert evaluate(Literal("s"), BindingEnvironment()) == Resolved("s")

    def test_bound_variable(self):
        env = BindingEnvironment()
        env.bind("x", Literal("~"))
        assert evaluate(Variable("x"), env) == Resolved("~")

    def test_unbound_variable_is_partial(self):
        result = evaluate(Variable("home"), BindingEnvironment())
        assert isinstance(result, PartiallyResolved)
        assert result.unresolved == ("home",)
        assert result.text == "home"

    def test_concat_resolves_when_both_sides_do(self):
        env = BindingEnvironment()
        env.bind("a", Literal("~"))
        env.bind("b", Literal("cfg"))
        result = evaluate(concat(Variable("a"), Literal("/"), Variable("b")), env)
        assert result == Resolved("~/cfg")
        assert result.text == '"~/cfg"'

    def test_concat_partial_keeps_known_parts(self):
        env = BindingEnvironment()
        env.bind("a", Literal("~"))
        result = evaluate(concat(Variable("a"), Literal("/"), Variable("b")), env)
        assert isinstance(result, PartiallyResolved)
        assert result.text == '"~/" + b'

    def test_associativity(self):
        env = BindingEnvironment()
        a, b, c = Literal("x"), Literal("y"), Literal("z")
        assert evaluate(Concat(Concat(a, b), c), env) == evaluate(Concat(a, Concat(b, c)), env)

    def test_effect_output_in_order(self):
        env = BindingEnvironment()
        env.bind_output("u", Literal("~/"))
        assert evaluate(Concat(EffectOutput("u"), Literal("f")), env) == Resolved("~/f")

    def test_effect_output_before_evaluation(self):
        with pytest.raises(DanglingReferenceError):
            evaluate(EffectOutput("u"), BindingEnvironment())

    def test_bound_to_symbolic_value(self):
        env = BindingEnvironment()
        env.bind("x", Variable("y"))
        result = evaluate(Variable("x"), env)
        assert isinstance(result, PartiallyResolved)
        assert result.unresolved == ("y",)
