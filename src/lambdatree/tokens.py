"""Token representation produced by the lexer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lambdatree.source import Span


@dataclass(frozen=True)
class Token:
    token_type: str
    value: str
    span: Span
    skipped: str = ""  # ignorable text matched before the token

    def __str__(self) -> str:
        return f"{self.token_type}:{self.value}"

    @property
    def consumed(self) -> str:
        """Everything the cursor must advance over to get past this token."""
        return self.skipped + self.value
