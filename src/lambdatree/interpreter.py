"""Bundles a lexer, a grammar and operations into a runnable language."""

from __future__ import annotations

import logging

from lambdatree.ast_nodes import AST
from lambdatree.cursor import Cursor
from lambdatree.errors import EvaluationError, ParseError
from lambdatree.evaluator import Evaluator, Operations
from lambdatree.grammar import Grammar
from lambdatree.lexer import Lexer
from lambdatree.parser import Parser, recursion_headroom
from lambdatree.results import Failure, Result

logger = logging.getLogger(__name__)


def render(result: Result) -> str:
    """Text of a non-failure result. Raises EvaluationError for a Failure."""
    if isinstance(result, Failure):
        raise EvaluationError(result.message)
    return str(result)


class Interpreter:
    """One language: text in, rendered results out.

    The lexer, grammar and operations are shared by reference, so they can
    still be extended after the interpreter is built.
    """

    def __init__(
        self,
        lexer: Lexer,
        grammar: Grammar,
        operations: Operations | None = None,
        *,
        name: str = "",
        environment: object | None = None,
    ) -> None:
        self.name = name
        self.environment = environment
        self.lexer = lexer
        self.grammar = grammar
        self.operations = operations or Operations()
        self.parser = Parser(lexer, grammar)
        self.evaluator = Evaluator(self.operations)

    def parse_one(self, cursor: Cursor) -> AST:
        return self.parser.parse_one(cursor)

    def evaluate(self, ast: AST) -> Result:
        try:
            with recursion_headroom():
                return self.evaluator.evaluate(ast.root)
        except RecursionError:
            return Failure("expression nests too deeply to evaluate")

    def run(self, text: str, filename: str = "<stdin>") -> str:
        """Parse and evaluate exactly one unit of *text*.

        Raises ParseError when the text does not parse or input is left over,
        EvaluationError when evaluation fails.
        """
        cursor = Cursor(text, filename)
        ast = self.parse_one(cursor)
        if not self.lexer.at_end(cursor):
            span = cursor.span_ahead(1, self.lexer.skip_length(cursor))
            raise ParseError(
                f"unexpected {span.text(text)!r} after a complete expression",
                span,
                notes=[f"parsed `{ast.source.strip()}`"],
            )
        return self._render(ast)

    def run_all(self, text: str, filename: str = "<stdin>") -> list[str]:
        """Evaluate consecutive units until only ignorable text remains."""
        cursor = Cursor(text, filename)
        rendered: list[str] = []
        while not self.lexer.at_end(cursor):
            before = cursor.end
            ast = self.parse_one(cursor)
            if cursor.end == before:
                raise ParseError(
                    f"`{self.grammar.start}` matched no input",
                    cursor.point,
                    notes=["a rule that consumes nothing cannot be repeated"],
                )
            rendered.append(self._render(ast))
        return rendered

    def _render(self, ast: AST) -> str:
        result = self.evaluate(ast)
        logger.debug("%s => %r", ast, result)
        if isinstance(result, Failure):
            raise EvaluationError(result.message, ast.root.span)
        return render(result)
