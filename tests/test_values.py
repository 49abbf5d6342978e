"""Tests for node values, the promotion lattice and result arithmetic."""

from __future__ import annotations

import pytest

from lambdatree import results
from lambdatree.ast_nodes import Node
from lambdatree.results import Failure, NoValue, PendingNode, Value
from lambdatree.source import Span
from lambdatree.tokens import Token
from lambdatree.values import Kind, NodeValue


def n(value: int) -> NodeValue:
    return NodeValue(Kind.NARROW_INT, value)


def w(value: int) -> NodeValue:
    return NodeValue(Kind.WIDE_INT, value)


def f(text: str) -> NodeValue:
    return NodeValue.parse(Kind.NARROW_FLOAT, text)


def d(value: float) -> NodeValue:
    return NodeValue(Kind.WIDE_FLOAT, value)


class TestParse:
    def test_int(self):
        assert NodeValue.parse(Kind.NARROW_INT, "42") == n(42)
        assert NodeValue.parse(Kind.NARROW_INT, "-7") == n(-7)

    def test_int_out_of_range(self):
        assert NodeValue.parse(Kind.NARROW_INT, "2147483648").is_error
        assert NodeValue.parse(Kind.WIDE_INT, "2147483648") == w(2147483648)

    def test_not_a_number(self):
        assert NodeValue.parse(Kind.NARROW_INT, "1.5").is_error
        assert NodeValue.parse(Kind.NARROW_FLOAT, "abc").is_error
        assert NodeValue.parse(Kind.ERROR, "1").is_error

    def test_float(self):
        assert NodeValue.parse(Kind.WIDE_FLOAT, "1.5") == d(1.5)
        assert f("3").kind == Kind.NARROW_FLOAT

    def test_narrow_float_range(self):
        assert f("1e39").is_error
        assert NodeValue.parse(Kind.WIDE_FLOAT, "1e39") == d(1e39)

    def test_text(self):
        assert NodeValue.parse(Kind.TEXT, "hi") == NodeValue.text("hi")


class TestRender:
    def test_ints(self):
        assert n(-3).render() == "-3"
        assert w(2**100).render() == str(2**100)

    def test_narrow_float_shortest(self):
        assert f("0.1").render() == "0.1"
        assert f("3.5").render() == "3.5"

    def test_wide_float(self):
        assert d(0.1).render() == "0.1"
        assert d(2.0).render() == "2.0"

    def test_text(self):
        assert NodeValue.text("a b").render() == "a b"


class TestLattice:
    def test_same_kind(self):
        assert n(2) + n(3) == n(5)
        assert n(2) - n(3) == n(-1)
        assert n(4) * n(3) == n(12)

    def test_int_plus_wide_float(self):
        assert n(2) + d(1.5) == d(3.5)

    def test_wide_float_plus_int(self):
        assert d(1.5) + n(2) == d(3.5)

    def test_wide_int_and_narrow_float(self):
        assert w(2) + f("1.5") == f("3.5")

    def test_int_promotes_to_wide_int(self):
        assert n(1) + w(2**40) == w(2**40 + 1)

    def test_exact_division_stays_int(self):
        assert n(6) / n(2) == n(3)
        assert n(-6) / n(2) == n(-3)

    def test_inexact_division_promotes_result(self):
        assert n(7) / n(2) == NodeValue(Kind.NARROW_FLOAT, 3.5)
        assert w(7) / w(2) == d(3.5)

    @pytest.mark.parametrize("lhs, rhs", [
        (n(1), n(0)),
        (w(1), w(0)),
        (f("1.0"), f("0.0")),
        (d(1.0), d(0.0)),
        (n(1), d(0.0)),
        (d(1.0), n(0)),
    ])
    def test_division_by_zero(self, lhs, rhs):
        result = lhs / rhs
        assert result.is_error
        assert result.data == "division by zero"

    def test_narrow_int_overflow_widens(self):
        assert n(2**31 - 1) + n(1) == w(2**31)
        assert n(2**20) * n(2**20) == w(2**40)

    def test_wide_int_overflow_errors(self):
        assert (w(2**127 - 1) + w(1)).is_error

    def test_narrow_float_overflow_widens(self):
        result = f("3e38") * f("10")
        assert result.kind == Kind.WIDE_FLOAT

    def test_negation(self):
        assert -n(5) == n(-5)
        assert -n(-(2**31)) == w(2**31)
        assert -d(1.5) == d(-1.5)
        assert (-NodeValue.text("a")).is_error


class TestTextAndErrors:
    def test_text_concatenation(self):
        assert NodeValue.text("ab") + NodeValue.text("cd") == NodeValue.text("abcd")

    def test_text_other_operators(self):
        assert (NodeValue.text("a") * NodeValue.text("b")).is_error
        assert (NodeValue.text("a") / NodeValue.text("b")).is_error

    def test_text_and_number(self):
        result = NodeValue.text("a") + n(1)
        assert result.is_error
        assert "text" in result.data

    def test_left_error_wins(self):
        left = NodeValue.error("left")
        right = NodeValue.error("right")
        assert left + right == left
        assert left / right == left
        assert n(1) * right == right


def leaf(value: str) -> Node:
    span = Span("<test>", 0, len(value), 1, 1, 1, len(value) + 1)
    return Node.leaf(Token("num", value, span))


class TestResults:
    def test_render(self):
        assert str(NoValue()) == "None"
        assert str(Value(n(3))) == "3"
        assert str(PendingNode(leaf("7"))) == "<unevaluated: 7>"
        assert str(Failure("boom")) == "boom"

    def test_add_values(self):
        assert results.add(Value(n(2)), Value(d(1.5))) == Value(d(3.5))

    def test_failure_short_circuits_left_first(self):
        assert results.add(Failure("a"), Failure("b")) == Failure("a")
        assert results.mul(Value(n(1)), Failure("b")) == Failure("b")
        assert results.neg(Failure("c")) == Failure("c")

    def test_lattice_error_becomes_failure(self):
        assert results.div(Value(n(1)), Value(n(0))) == Failure("division by zero")

    def test_non_values_fail(self):
        result = results.sub(Value(n(1)), NoValue())
        assert isinstance(result, Failure)
        assert "None" in result.message
        result = results.add(PendingNode(leaf("7")), Value(n(1)))
        assert isinstance(result, Failure)
        assert "unevaluated" in result.message
