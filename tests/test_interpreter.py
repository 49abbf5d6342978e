"""Tests for the interpreter facade."""

from __future__ import annotations

import pytest

from lambdatree.cursor import Cursor
from lambdatree.errors import EvaluationError, ParseError
from lambdatree.grammar import Grammar, tok
from lambdatree.instructions import NamedNoArgOp
from lambdatree.interpreter import Interpreter, render
from lambdatree.lexer import Lexer
from lambdatree.results import Failure, NoValue, PendingNode, Value
from lambdatree.values import Kind, NodeValue


def single_op(result_factory) -> Interpreter:
    """Helper: an interpreter whose only rule calls one operation."""
    lexer = Lexer(skip=r"\s*")
    lexer.define("word", r"[a-z]+")
    grammar = Grammar("S")
    grammar.define("S", tok("word"), NamedNoArgOp("op"))
    interp = Interpreter(lexer, grammar)
    interp.operations.define("op", result_factory)
    return interp


class TestParseAndEvaluate:
    def test_worked_example(self, calc):
        ast = calc.parse_one(Cursor("(2+3)*4"))
        assert calc.evaluate(ast) == Value(NodeValue(Kind.NARROW_INT, 20))

    def test_parse_one_shares_cursor(self, calc):
        cursor = Cursor("1+1 2*2")
        first = calc.parse_one(cursor)
        second = calc.parse_one(cursor)
        assert str(first) == "( 1 + 1 )"
        assert str(second) == "( 2 * 2 )"


class TestRun:
    def test_run(self, calc):
        assert calc.run("(2+3)*4") == "20"
        assert calc.run(" 1 + 2 * 3 ") == "7"

    def test_trailing_input(self, calc):
        with pytest.raises(ParseError) as exc:
            calc.run("1 2")
        assert "'2'" in exc.value.message
        assert exc.value.span.start == 2

    def test_trailing_operator(self, calc):
        with pytest.raises(ParseError):
            calc.run("1 +")

    def test_parse_failure(self, calc):
        with pytest.raises(ParseError):
            calc.run("*")

    def test_failure_raises_evaluation_error(self, calc):
        with pytest.raises(EvaluationError) as exc:
            calc.run("99999999999 + 1")
        assert "out of range" in exc.value.message
        assert exc.value.code == "E300"
        assert exc.value.span is not None

    def test_no_value_renders_none(self):
        assert single_op(lambda frame: NoValue()).run("x") == "None"

    def test_pending_node_renders(self):
        interp = single_op(lambda frame: PendingNode(frame.node))
        assert interp.run("abc") == "<unevaluated: abc>"

    def test_runaway_evaluation_is_failure(self):
        interp = single_op(lambda frame: frame.evaluator.evaluate(frame.node))
        ast = interp.parse_one(Cursor("x"))
        assert interp.evaluate(ast) == Failure("expression nests too deeply to evaluate")
        with pytest.raises(EvaluationError, match="nests too deeply"):
            interp.run("x")

    def test_deep_sum(self, calc):
        assert calc.run("+".join(["1"] * 300)) == "300"

    def test_operation_failure_is_evaluation_error(self, calc):
        calc.operations.define("mul", lambda frame: Failure("no"))
        with pytest.raises(EvaluationError, match="no"):
            calc.run("2*3")


class TestRunAll:
    def test_consecutive_units(self, calc):
        assert calc.run_all("1+2 3*4\n(5)") == ["3", "12", "5"]

    def test_empty(self, calc):
        assert calc.run_all("  \n ") == []

    def test_stops_at_first_error(self, calc):
        with pytest.raises(ParseError):
            calc.run_all("1 2 *")


class TestRender:
    def test_value(self):
        assert render(Value(NodeValue.text("hi"))) == "hi"

    def test_failure(self):
        with pytest.raises(EvaluationError, match="bad"):
            render(Failure("bad"))
