"""Backtracking parser driven by grammar expressions.

The parser walks a grammar expression against the cursor:

- ``Match`` asks the lexer for a token at the cursor and advances over it,
- ``Sequence`` parses every item in order, failing as a whole,
- ``Choice`` saves the cursor before each alternative, keeps the first
  alternative that succeeds and restores the cursor after each failure,
- ``Rule`` looks the rule up by name and parses its expression.

Alternative failures are the ``NoMatch`` exception, recovered by the
enclosing choice. Grammar problems (undefined rules, instruction mismatch)
are GrammarErrors and always propagate.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

from lambdatree.ast_nodes import AST, Node
from lambdatree.cursor import Cursor
from lambdatree.errors import GrammarError, ParseError, UndefinedRuleError
from lambdatree.grammar import Choice, Expression, Grammar, Match, Rule, Sequence
from lambdatree.instructions import ChoiceOf, Default, Instruction
from lambdatree.lexer import Lexer
from lambdatree.source import Span

logger = logging.getLogger(__name__)

# Nested rules, parentheses and operator chains map onto Python recursion.
RECURSION_LIMIT = 20000


@contextmanager
def recursion_headroom(limit: int = RECURSION_LIMIT) -> Iterator[None]:
    """Raise the interpreter's recursion limit to at least *limit* for a block."""
    previous = sys.getrecursionlimit()
    if previous < limit:
        sys.setrecursionlimit(limit)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


class NoMatch(Exception):
    """An expression did not match at the cursor."""

    def __init__(self, message: str, span: Span) -> None:
        self.message = message
        self.span = span
        super().__init__(message)


class Parser:
    """Parses text from a cursor into AST nodes using *grammar*."""

    def __init__(self, lexer: Lexer, grammar: Grammar) -> None:
        self.lexer = lexer
        self.grammar = grammar
        self._validated: tuple[int, int] | None = None
        self._furthest = -1
        self._furthest_span: Span | None = None
        self._found = ""
        self._expected: set[str] = set()

    # ── Top level ────────────────────────────────────────────────

    def parse_one(self, cursor: Cursor, start: str | None = None) -> AST:
        """Parse one unit from the start rule and commit the cursor past it.

        Raises GrammarError when the grammar is unusable and ParseError when
        the input does not match or nests deeper than ``RECURSION_LIMIT``.
        On failure the cursor is left where it was.
        """
        self._validate()
        start = start or self.grammar.start
        if start not in self.grammar:
            raise UndefinedRuleError(start, notes=["the start rule must be defined before parsing"])

        depth = cursor.depth
        cursor.push()
        self._furthest = -1
        self._furthest_span = None
        self._found = ""
        self._expected = set()

        try:
            with recursion_headroom():
                root = self.parse(Rule(start), cursor, Default())
        except NoMatch as e:
            cursor.unwind(depth)
            raise self._no_match_error(start, e) from None
        except RecursionError:
            span = cursor.point
            cursor.unwind(depth)
            raise ParseError(
                f"input nests too deeply while parsing `{start}`",
                span,
            ) from None
        except GrammarError:
            cursor.unwind(depth)
            raise

        cursor.pull()
        source = cursor.span.text(cursor.text)
        cursor.commit()
        logger.debug("parsed %s: %s", start, root)
        return AST(root, source)

    def parse(self, expr: Expression, cursor: Cursor, instruction: Instruction) -> Node:
        """Parse *expr* at the cursor, tagging the result with *instruction*.

        Every grammar level recurses straight back into this method, keeping
        the Python stack to one frame per nested expression.
        """
        if isinstance(expr, Match):
            return self._parse_match(expr, cursor, instruction)

        if isinstance(expr, Sequence):
            children: list[Node] = []
            for item in expr.items:
                children.append(self.parse(item, cursor, Default()))
            return Node.branch(children, instruction)

        if isinstance(expr, Choice):
            for i, alt in enumerate(expr.alternatives):
                option = self._option(expr, instruction, i)
                cursor.push()
                try:
                    node = self.parse(alt, cursor, option)
                except NoMatch as e:
                    cursor.pop()
                    logger.debug("alternative %d `%s` failed: %s", i + 1, alt, e.message)
                    continue
                cursor.pull()
                return node
            raise NoMatch(f"no alternative of `{expr}` matched", cursor.point)

        if isinstance(expr, Rule):
            rule_def = self.grammar.get(expr.name, cursor.point)
            logger.debug("rule %s at %d:%d", expr.name, cursor.end_line, cursor.end_col)
            node = self.parse(rule_def.expression, cursor, rule_def.instruction)
            if not node.rule:
                node.rule = expr.name
            if not isinstance(instruction, Default):
                node.instruction = instruction
            return node

        raise GrammarError(f"not a grammar expression: {expr!r}")

    # ── Helpers ──────────────────────────────────────────────────

    def _parse_match(self, expr: Match, cursor: Cursor, instruction: Instruction) -> Node:
        tok = self.lexer.match(expr.token_type, cursor)
        if tok is None or (expr.value and tok.value != expr.value):
            self._record_failure(expr, cursor)
            raise NoMatch(f"expected {expr}", cursor.point)
        cursor.advance(tok.consumed)
        return Node.leaf(tok, instruction)

    def _option(self, expr: Choice, instruction: Instruction, index: int) -> Instruction:
        """The instruction that belongs to alternative *index* of *expr*."""
        if not isinstance(instruction, ChoiceOf):
            return instruction
        if index >= len(instruction.options):
            raise GrammarError(
                f"no instruction for alternative {index + 1} of `{expr}` in `{instruction}`"
            )
        return instruction.options[index]

    def _validate(self) -> None:
        revision = (self.grammar.revision, self.lexer.revision)
        if self._validated != revision:
            self.grammar.validate(self.lexer)
            self._validated = revision

    def _record_failure(self, expr: Match, cursor: Cursor) -> None:
        """Remember the furthest position a token failed to match."""
        skip = self.lexer.skip_length(cursor)
        pos = cursor.end + skip
        if pos > self._furthest:
            self._furthest = pos
            self._expected = set()
            length = 0 if pos >= len(cursor.text) else 1
            self._furthest_span = cursor.span_ahead(length, skip)
            self._found = cursor.text[pos:pos + length]
        if pos == self._furthest:
            self._expected.add(str(expr))

    def _no_match_error(self, start: str, error: NoMatch) -> ParseError:
        span = self._furthest_span or error.span
        if self._found:
            found = repr(self._found)
        else:
            found = "end of input"
        expected = ", ".join(sorted(self._expected))
        notes = [f"expected one of: {expected}"] if expected else []
        return ParseError(f"unexpected {found} while parsing `{start}`", span, notes=notes)
