"""Shared test helpers for the lambdatree test suite."""

from __future__ import annotations

from lambdatree import results
from lambdatree.cursor import Cursor
from lambdatree.evaluator import Operations
from lambdatree.grammar import Grammar, Rule, choice, seq, tok
from lambdatree.instructions import ChoiceOf, Default, Descend, LiteralLeaf, NamedOp
from lambdatree.interpreter import Interpreter
from lambdatree.lexer import Lexer
from lambdatree.values import Kind


def arith_lexer() -> Lexer:
    lexer = Lexer(skip=r"\s*")
    lexer.define("num", r"[0-9]+")
    lexer.define("op", r"[-+*/()]")
    return lexer


def arith_grammar() -> Grammar:
    """EXPR -> TERM '+' EXPR | TERM, TERM -> FACTOR '*' TERM | FACTOR,
    FACTOR -> '(' EXPR ')' | NUM.
    """
    grammar = Grammar("EXPR")
    grammar.define(
        "EXPR",
        choice(seq(Rule("TERM"), tok("op", "+"), Rule("EXPR")), Rule("TERM")),
        ChoiceOf((NamedOp("add", (1, 3)), Default())),
    )
    grammar.define(
        "TERM",
        choice(seq(Rule("FACTOR"), tok("op", "*"), Rule("TERM")), Rule("FACTOR")),
        ChoiceOf((NamedOp("mul", (1, 3)), Default())),
    )
    grammar.define(
        "FACTOR",
        choice(seq(tok("op", "("), Rule("EXPR"), tok("op", ")")), Rule("NUM")),
        ChoiceOf((Descend(2), Default())),
    )
    grammar.define("NUM", tok("num"), LiteralLeaf(Kind.NARROW_INT))
    return grammar


def arith_operations() -> Operations:
    ops = Operations()
    ops.define("add", lambda frame: results.add(*frame.evaluate()))
    ops.define("mul", lambda frame: results.mul(*frame.evaluate()))
    return ops


def arith() -> Interpreter:
    """A small interpreter over the arithmetic grammar above."""
    return Interpreter(arith_lexer(), arith_grammar(), arith_operations())


def state(cursor: Cursor) -> tuple[int, int, int, int, int, int]:
    """Every positional field of *cursor*."""
    return (
        cursor.start, cursor.end,
        cursor.start_line, cursor.start_col,
        cursor.end_line, cursor.end_col,
    )
