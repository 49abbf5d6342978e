"""Grammar expressions and the rule table.

A grammar is built from four combinators:

- ``Choice``: ordered alternatives, the first that matches wins,
- ``Sequence``: every item in order, all or nothing,
- ``Rule``: a reference to a named rule, resolved at parse time,
- ``Match``: one token of a type, optionally with an exact value.

Rules refer to each other by name, so recursive grammars need no cyclic
objects. ``Grammar.validate`` checks a grammar before it is used: every
name resolves, every instruction fits the expression it tags, and no rule
is left-recursive.
"""

from __future__ import annotations

import difflib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from lambdatree.errors import GrammarError, LeftRecursionError, Suggestion, UndefinedRuleError
from lambdatree.instructions import (
    ChoiceOf,
    Default,
    Descend,
    Instruction,
    LiteralLeaf,
    NamedOp,
)

if TYPE_CHECKING:
    from lambdatree.lexer import Lexer
    from lambdatree.source import Span

logger = logging.getLogger(__name__)


# ── Expressions ──────────────────────────────────────────────────


@dataclass(frozen=True)
class Match:
    token_type: str
    value: str = ""  # empty matches any value

    def __str__(self) -> str:
        if self.value:
            return f"{self.token_type} {self.value!r}"
        return self.token_type


@dataclass(frozen=True)
class Rule:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Sequence:
    items: tuple[Expression, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))

    def __str__(self) -> str:
        return " ".join(_grouped(item) for item in self.items)


@dataclass(frozen=True)
class Choice:
    alternatives: tuple[Expression, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "alternatives", tuple(self.alternatives))

    def __str__(self) -> str:
        return " | ".join(_grouped(alt) for alt in self.alternatives)


Expression = Union[Choice, Sequence, Rule, Match]


def _grouped(expr: Expression) -> str:
    if isinstance(expr, (Choice, Sequence)):
        return f"({expr})"
    return str(expr)


def tok(token_type: str, value: str = "") -> Match:
    return Match(token_type, value)


def seq(*items: Expression) -> Sequence:
    return Sequence(items)


def choice(*alternatives: Expression) -> Choice:
    return Choice(alternatives)


# ── Rule table ───────────────────────────────────────────────────


@dataclass(frozen=True)
class RuleDef:
    name: str
    expression: Expression
    instruction: Instruction


class Grammar:
    """Named rules, each an expression plus its default instruction."""

    def __init__(self, start: str = "EXPR") -> None:
        self.start = start
        self.revision = 0
        self._rules: dict[str, RuleDef] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._rules

    @property
    def names(self) -> list[str]:
        return list(self._rules)

    def define(
        self,
        name: str,
        expression: Expression,
        instruction: Instruction | None = None,
    ) -> RuleDef:
        """Add a rule, replacing any existing rule of that name."""
        rule_def = RuleDef(name, expression, instruction or Default())
        if name in self._rules:
            logger.debug("redefining rule %s", name)
        else:
            logger.debug("defining rule %s -> %s", name, expression)
        self._rules[name] = rule_def
        self.revision += 1
        return rule_def

    def get(self, name: str, span: Span | None = None) -> RuleDef:
        """Look up a rule. Raises UndefinedRuleError."""
        rule_def = self._rules.get(name)
        if rule_def is None:
            raise UndefinedRuleError(name, span, suggestions=self._suggest(name))
        return rule_def

    def _suggest(self, name: str) -> list[Suggestion]:
        return [
            Suggestion(f"did you mean `{close}`?", close)
            for close in difflib.get_close_matches(name, self._rules, n=3)
        ]

    # ── Validation ───────────────────────────────────────────────

    def validate(self, lexer: Lexer | None = None) -> None:
        """Check references, instruction shapes and left recursion.

        Token types are only checked when *lexer* is given. Raises a
        GrammarError subclass on the first problem found.
        """
        for rule_def in self._rules.values():
            self._check_references(rule_def.name, rule_def.expression, lexer)
        for rule_def in self._rules.values():
            self._check_instruction(rule_def.name, rule_def.expression, rule_def.instruction)
        self._check_left_recursion(lexer)

    def _check_references(self, owner: str, expr: Expression, lexer: Lexer | None) -> None:
        if isinstance(expr, Rule):
            if expr.name not in self._rules:
                raise UndefinedRuleError(
                    expr.name,
                    notes=[f"referenced from rule `{owner}`"],
                    suggestions=self._suggest(expr.name),
                )
        elif isinstance(expr, Match):
            if lexer is not None and expr.token_type not in lexer:
                raise GrammarError(
                    f"rule `{owner}` matches undefined token type `{expr.token_type}`",
                    notes=[f"defined token types: {', '.join(lexer.token_types) or 'none'}"],
                )
        else:
            for sub in _subexpressions(expr):
                self._check_references(owner, sub, lexer)

    def _check_instruction(self, owner: str, expr: Expression, instr: Instruction) -> None:
        if isinstance(expr, Choice):
            if isinstance(instr, ChoiceOf):
                if len(instr.options) != len(expr.alternatives):
                    raise GrammarError(
                        f"rule `{owner}`: {len(expr.alternatives)} alternatives but "
                        f"{len(instr.options)} instructions in `{instr}`"
                    )
                pairs = zip(expr.alternatives, instr.options)
            else:
                pairs = ((alt, instr) for alt in expr.alternatives)
            for alt, option in pairs:
                self._check_instruction(owner, alt, option)
            return

        if isinstance(instr, ChoiceOf):
            raise GrammarError(f"rule `{owner}`: `{instr}` tags `{expr}`, which is not a choice")

        if isinstance(expr, Sequence):
            if isinstance(instr, LiteralLeaf):
                raise GrammarError(f"rule `{owner}`: `{instr}` tags sequence `{expr}`, not a token")
            for index in _child_references(instr):
                if not 1 <= index <= len(expr.items):
                    raise GrammarError(
                        f"rule `{owner}`: `{instr}` refers to child {index} "
                        f"of `{expr}`, which has {len(expr.items)}"
                    )
            for item in expr.items:
                self._check_instruction(owner, item, Default())
        elif isinstance(expr, Match):
            if _child_references(instr):
                raise GrammarError(f"rule `{owner}`: `{instr}` refers to children of token `{expr}`")

    def _check_left_recursion(self, lexer: Lexer | None) -> None:
        nullable = self._nullable_rules(lexer)

        def is_nullable(expr: Expression) -> bool:
            return _nullable(expr, nullable, lexer)

        def leftmost(expr: Expression) -> set[str]:
            if isinstance(expr, Match):
                return set()
            if isinstance(expr, Rule):
                return {expr.name}
            if isinstance(expr, Choice):
                return set().union(*(leftmost(alt) for alt in expr.alternatives))
            names: set[str] = set()
            for item in expr.items:
                names |= leftmost(item)
                if not is_nullable(item):
                    break
            return names

        edges = {name: sorted(leftmost(r.expression)) for name, r in self._rules.items()}
        visiting: list[str] = []
        done: set[str] = set()

        def visit(name: str) -> None:
            if name in done:
                return
            if name in visiting:
                raise LeftRecursionError(visiting[visiting.index(name):] + [name])
            visiting.append(name)
            for target in edges.get(name, []):
                visit(target)
            visiting.pop()
            done.add(name)

        for name in self._rules:
            visit(name)

    def _nullable_rules(self, lexer: Lexer | None) -> set[str]:
        """Fixpoint of the rules that can match without consuming input."""
        nullable: set[str] = set()
        changed = True
        while changed:
            changed = False
            for name, rule_def in self._rules.items():
                if name not in nullable and _nullable(rule_def.expression, nullable, lexer):
                    nullable.add(name)
                    changed = True
        return nullable


def _nullable(expr: Expression, nullable_rules: set[str], lexer: Lexer | None) -> bool:
    """Whether *expr* can match without consuming input."""
    if isinstance(expr, Match):
        if expr.value or lexer is None:
            return False
        token_def = lexer.get(expr.token_type)
        return token_def is not None and token_def.nullable
    if isinstance(expr, Rule):
        return expr.name in nullable_rules
    if isinstance(expr, Sequence):
        return all(_nullable(item, nullable_rules, lexer) for item in expr.items)
    return any(_nullable(alt, nullable_rules, lexer) for alt in expr.alternatives)


def _subexpressions(expr: Expression) -> tuple[Expression, ...]:
    if isinstance(expr, Sequence):
        return expr.items
    if isinstance(expr, Choice):
        return expr.alternatives
    return ()


def _child_references(instr: Instruction) -> tuple[int, ...]:
    if isinstance(instr, NamedOp):
        return instr.args
    if isinstance(instr, Descend):
        return (instr.index,)
    return ()
