"""The ``math`` language: arithmetic, text, variables and assignment.

Grammar (ordered choice, first match wins)::

    EXPR   -> ident '=' EXPR | SUM
    SUM    -> TERM '+' SUM | TERM '-' SUM | TERM
    TERM   -> FACTOR '*' TERM | FACTOR '/' TERM | FACTOR
    FACTOR -> '(' EXPR ')' | '-' FACTOR | NUM | VAR | TEXT
    NUM    -> float | int
    VAR    -> ident
    TEXT   -> text

Binary operators nest to the right, so ``8-4-2`` is ``8-(4-2)``.
"""

from __future__ import annotations

from lambdatree import results
from lambdatree.evaluator import Frame, Operations
from lambdatree.grammar import Grammar, Rule, choice, seq, tok
from lambdatree.instructions import (
    ChoiceOf,
    Default,
    Descend,
    LiteralLeaf,
    NamedNoArgOp,
    NamedOp,
)
from lambdatree.interpreter import Interpreter
from lambdatree.lexer import Lexer
from lambdatree.results import Failure, NoValue, Result, Value
from lambdatree.values import Kind, NodeValue


class Environment:
    """Variable bindings of one interpreter."""

    def __init__(self) -> None:
        self._values: dict[str, NodeValue] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def get(self, name: str) -> NodeValue | None:
        return self._values.get(name)

    def set(self, name: str, value: NodeValue) -> None:
        self._values[name] = value


def build_lexer() -> Lexer:
    lexer = Lexer(skip=r"\s*")
    # float before int: first match wins
    lexer.define("float", r"[0-9]+\.[0-9]+")
    lexer.define("int", r"[0-9]+")
    lexer.define("ident", r"[a-zA-Z_][a-zA-Z_0-9]*")
    lexer.define("text", r'"[^"]*"')
    lexer.define("op", r"\+|-|\*|/|\(|\)|=")
    return lexer


def build_grammar() -> Grammar:
    grammar = Grammar("EXPR")
    grammar.define(
        "EXPR",
        choice(seq(tok("ident"), tok("op", "="), Rule("EXPR")), Rule("SUM")),
        ChoiceOf((NamedOp("assign", (1, 3)), Default())),
    )
    grammar.define(
        "SUM",
        choice(
            seq(Rule("TERM"), tok("op", "+"), Rule("SUM")),
            seq(Rule("TERM"), tok("op", "-"), Rule("SUM")),
            Rule("TERM"),
        ),
        ChoiceOf((NamedOp("add", (1, 3)), NamedOp("sub", (1, 3)), Default())),
    )
    grammar.define(
        "TERM",
        choice(
            seq(Rule("FACTOR"), tok("op", "*"), Rule("TERM")),
            seq(Rule("FACTOR"), tok("op", "/"), Rule("TERM")),
            Rule("FACTOR"),
        ),
        ChoiceOf((NamedOp("mul", (1, 3)), NamedOp("div", (1, 3)), Default())),
    )
    grammar.define(
        "FACTOR",
        choice(
            seq(tok("op", "("), Rule("EXPR"), tok("op", ")")),
            seq(tok("op", "-"), Rule("FACTOR")),
            Rule("NUM"),
            Rule("VAR"),
            Rule("TEXT"),
        ),
        ChoiceOf((Descend(2), NamedOp("neg", (2,)), Default(), Default(), Default())),
    )
    grammar.define(
        "NUM",
        choice(tok("float"), tok("int")),
        ChoiceOf((LiteralLeaf(Kind.NARROW_FLOAT), NamedNoArgOp("integer"))),
    )
    grammar.define("VAR", tok("ident"), NamedNoArgOp("lookup"))
    grammar.define("TEXT", tok("text"), NamedNoArgOp("text"))
    return grammar


def build_operations(env: Environment) -> Operations:
    ops = Operations()

    @ops.define("add")
    def add(frame: Frame) -> Result:
        lhs, rhs = frame.evaluate()
        return results.add(lhs, rhs)

    @ops.define("sub")
    def sub(frame: Frame) -> Result:
        lhs, rhs = frame.evaluate()
        return results.sub(lhs, rhs)

    @ops.define("mul")
    def mul(frame: Frame) -> Result:
        lhs, rhs = frame.evaluate()
        return results.mul(lhs, rhs)

    @ops.define("div")
    def div(frame: Frame) -> Result:
        lhs, rhs = frame.evaluate()
        return results.div(lhs, rhs)

    @ops.define("neg")
    def neg(frame: Frame) -> Result:
        (operand,) = frame.evaluate()
        return results.neg(operand)

    @ops.define("integer")
    def integer(frame: Frame) -> Result:
        # too large for int: read it as bigint instead
        value = frame.literal(Kind.NARROW_INT)
        if isinstance(value, Failure):
            return frame.literal(Kind.WIDE_INT)
        return value

    @ops.define("text")
    def text(frame: Frame) -> Result:
        raw = frame.token.value if frame.token else ""
        return Value(NodeValue.text(raw[1:-1]))

    @ops.define("lookup")
    def lookup(frame: Frame) -> Result:
        name = frame.token.value if frame.token else ""
        value = env.get(name)
        if value is None:
            return Failure(f"undefined variable `{name}`")
        return Value(value)

    @ops.define("assign")
    def assign(frame: Frame) -> Result:
        target = frame.child(0).token
        if target is None:
            return Failure(f"cannot assign to `{frame.child(0)}`")
        result = frame.evaluate_arg(1)
        if isinstance(result, Failure):
            return result
        if not isinstance(result, Value):
            return Failure(f"cannot assign `{result}` to `{target.value}`")
        env.set(target.value, result.value)
        return NoValue()

    return ops


def build() -> Interpreter:
    """A fresh ``math`` interpreter with its own empty environment."""
    env = Environment()
    return Interpreter(
        build_lexer(),
        build_grammar(),
        build_operations(env),
        name="math",
        environment=env,
    )
