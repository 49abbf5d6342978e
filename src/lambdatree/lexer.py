"""Regex-driven token matching anchored at a cursor.

A Lexer is an ordered set of named patterns. The grammar engine asks it for
a token of one specific type at the cursor's pending end (``match``); the
``tokens`` command and ``tokenize`` ask for the first pattern of any type
that matches (``match_any``). Registration order breaks ties: the first
pattern that matches wins, not the longest one.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass

from lambdatree.cursor import Cursor
from lambdatree.errors import ParseError, PatternError
from lambdatree.tokens import Token

logger = logging.getLogger(__name__)


def _compile(pattern: str, what: str) -> re.Pattern[str]:
    try:
        return re.compile(f"(?:{pattern})")
    except re.error as e:
        raise PatternError(f"cannot build {what} from pattern {pattern!r}: {e}") from e


@dataclass(frozen=True)
class TokenDef:
    """A named pattern. Matching is always anchored at the given position."""

    token_type: str
    pattern: re.Pattern[str]

    @classmethod
    def compile(cls, token_type: str, pattern: str) -> TokenDef:
        return cls(token_type, _compile(pattern, f"token definition `{token_type}`"))

    @property
    def nullable(self) -> bool:
        """Whether the pattern can match without consuming anything."""
        return self.pattern.match("") is not None


class Lexer:
    """Tokenizes text on demand for the parser.

    *skip* is an optional pattern of ignorable text (typically ``r"\\s*"``)
    consumed in front of every token. It is not part of the token value.
    """

    def __init__(self, skip: str | None = None) -> None:
        self.revision = 0
        self._definitions: dict[str, TokenDef] = {}
        self._skip = _compile(skip, "skip rule") if skip else None

    def __contains__(self, token_type: str) -> bool:
        return token_type in self._definitions

    @property
    def token_types(self) -> list[str]:
        """Defined token types in registration order."""
        return list(self._definitions)

    def get(self, token_type: str) -> TokenDef | None:
        return self._definitions.get(token_type)

    # ── Definitions ──────────────────────────────────────────────

    def define(self, token_type: str, pattern: str) -> TokenDef:
        """Add or replace a token definition. Raises PatternError."""
        return self.define_token(TokenDef.compile(token_type, pattern))

    def define_token(self, token_def: TokenDef) -> TokenDef:
        """Register a compiled definition. A replaced type keeps its position."""
        if token_def.token_type in self._definitions:
            logger.debug("redefining token %s", token_def.token_type)
        else:
            logger.debug("defining token %s = %s", token_def.token_type, token_def.pattern.pattern)
        self._definitions[token_def.token_type] = token_def
        self.revision += 1
        return token_def

    # ── Matching ─────────────────────────────────────────────────

    def match(self, token_type: str, cursor: Cursor) -> Token | None:
        """Match a token of *token_type* at the cursor. Does not move it."""
        token_def = self._definitions.get(token_type)
        if token_def is None:
            return None
        return self._match_def(token_def, cursor)

    def match_any(self, cursor: Cursor) -> Token | None:
        """Match the first defined token type, in registration order."""
        for token_def in self._definitions.values():
            tok = self._match_def(token_def, cursor)
            if tok is not None:
                return tok
        return None

    def skip_length(self, cursor: Cursor) -> int:
        """Length of the ignorable text at the cursor's pending end."""
        if self._skip is None:
            return 0
        m = self._skip.match(cursor.text, cursor.end)
        return m.end() - cursor.end if m else 0

    def at_end(self, cursor: Cursor) -> bool:
        """True when nothing but ignorable text remains."""
        return cursor.end + self.skip_length(cursor) >= len(cursor.text)

    def tokenize(self, cursor: Cursor) -> Iterator[Token]:
        """Yield tokens with ``match_any`` until the input is exhausted.

        The cursor is advanced and committed past each token.
        """
        while not self.at_end(cursor):
            tok = self.match_any(cursor)
            if tok is None or not tok.value:
                span = cursor.span_ahead(1, self.skip_length(cursor))
                ch = span.text(cursor.text)
                raise ParseError(f"no token matches {ch!r}", span)
            cursor.advance(tok.consumed)
            cursor.commit()
            yield tok

    def _match_def(self, token_def: TokenDef, cursor: Cursor) -> Token | None:
        skip = self.skip_length(cursor)
        m = token_def.pattern.match(cursor.text, cursor.end + skip)
        if m is None:
            return None
        value = m.group(0)
        skipped = cursor.text[cursor.end:cursor.end + skip]
        return Token(
            token_def.token_type,
            value,
            cursor.span_ahead(len(value), skip),
            skipped,
        )
