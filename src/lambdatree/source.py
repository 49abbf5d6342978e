"""Source text spans for tokens, nodes and diagnostics."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Span:
    """A range within a source text.

    Offsets are 0-based and ``end`` is exclusive. Lines and columns are
    1-based points: ``(end_line, end_col)`` is where the next character
    after the span would sit.
    """

    file: str
    start: int
    end: int
    start_line: int
    start_col: int
    end_line: int
    end_col: int

    def __str__(self) -> str:
        return f"{self.file}:{self.start_line}:{self.start_col}"

    def __len__(self) -> int:
        return self.end - self.start

    def through(self, other: Span) -> Span:
        """Build a span from the start of this span to the end of *other*."""
        return Span(
            self.file,
            self.start, other.end,
            self.start_line, self.start_col,
            other.end_line, other.end_col,
        )

    def text(self, source: str) -> str:
        """Extract the text covered by this span."""
        return source[self.start:self.end]
