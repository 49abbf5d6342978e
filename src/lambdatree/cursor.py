"""Position cursor over a text buffer with a backtracking stack.

The cursor tracks a *pending* span ``start..end``. Matching advances the
end; ``commit`` accepts everything consumed so far by moving the start up to
the end. Snapshots pushed with ``push`` capture the whole position so that a
failed grammar alternative can be rolled back exactly.
"""

from __future__ import annotations

from lambdatree.source import Span

# (start, end, start_line, start_col, end_line, end_col)
_State = tuple[int, int, int, int, int, int]


class Cursor:
    """Offset/line/column window into *text*."""

    def __init__(self, text: str, filename: str = "<stdin>") -> None:
        self.text = text
        self.filename = filename
        self.start = 0
        self.end = 0
        self.start_line = 1
        self.start_col = 1
        self.end_line = 1
        self.end_col = 1
        self._stack: list[_State] = []

    def __repr__(self) -> str:
        return (
            f"Cursor({self.start}..{self.end}, "
            f"{self.start_line}:{self.start_col}..{self.end_line}:{self.end_col}, "
            f"depth={self.depth})"
        )

    # ── Reading ──────────────────────────────────────────────────

    @property
    def span(self) -> Span:
        """The pending (uncommitted) span."""
        return Span(
            self.filename,
            self.start, self.end,
            self.start_line, self.start_col,
            self.end_line, self.end_col,
        )

    @property
    def point(self) -> Span:
        """An empty span at the pending end."""
        return Span(
            self.filename,
            self.end, self.end,
            self.end_line, self.end_col,
            self.end_line, self.end_col,
        )

    @property
    def remaining(self) -> str:
        return self.text[self.end:]

    @property
    def at_end(self) -> bool:
        return self.end >= len(self.text)

    @property
    def depth(self) -> int:
        """Number of snapshots currently saved."""
        return len(self._stack)

    # ── Seeking ──────────────────────────────────────────────────

    def advance(self, consumed: str) -> None:
        """Move the pending end over *consumed*, which must be the next text.

        ``\\n``, ``\\r\\n`` and a bare ``\\r`` each count as one line break.
        """
        if not self.text.startswith(consumed, self.end):
            raise ValueError(
                f"cannot advance over {consumed!r}: text at offset {self.end} differs"
            )
        self.end, self.end_line, self.end_col = self._walk(
            self.end, self.end_line, self.end_col, len(consumed),
        )

    def span_ahead(self, length: int, skip: int = 0) -> Span:
        """Span of the *length* characters found *skip* characters past the
        pending end. The cursor does not move.
        """
        pos, line, col = self._walk(self.end, self.end_line, self.end_col, skip)
        end, end_line, end_col = self._walk(pos, line, col, length)
        return Span(self.filename, pos, end, line, col, end_line, end_col)

    def commit(self) -> None:
        """Accept the pending span: the start moves up to the end."""
        self.start = self.end
        self.start_line = self.end_line
        self.start_col = self.end_col

    def back(self) -> None:
        """Undo the pending advance: the end returns to the start."""
        self.end = self.start
        self.end_line = self.start_line
        self.end_col = self.start_col

    # ── Backtracking ─────────────────────────────────────────────

    def push(self) -> None:
        """Save the current position."""
        self._stack.append(self._state())

    def pop(self) -> None:
        """Restore the most recently saved position and drop it."""
        if not self._stack:
            raise IndexError("pop from a cursor with no saved position")
        (self.start, self.end,
         self.start_line, self.start_col,
         self.end_line, self.end_col) = self._stack.pop()

    def pull(self) -> None:
        """Drop the most recently saved position without restoring it."""
        if not self._stack:
            raise IndexError("pull from a cursor with no saved position")
        self._stack.pop()

    def unwind(self, depth: int) -> None:
        """Pop saved positions until only *depth* remain.

        Restores the position saved by the outermost of the unwound pushes.
        """
        while len(self._stack) > depth:
            self.pop()

    # ── Helpers ──────────────────────────────────────────────────

    def _state(self) -> _State:
        return (
            self.start, self.end,
            self.start_line, self.start_col,
            self.end_line, self.end_col,
        )

    def _walk(self, pos: int, line: int, col: int, count: int) -> tuple[int, int, int]:
        """Step *count* characters forward from ``(pos, line, col)``."""
        for _ in range(count):
            ch = self.text[pos]
            pos += 1
            if ch == '\n' or (ch == '\r' and self._char_at(pos) != '\n'):
                line += 1
                col = 1
            else:
                col += 1
        return pos, line, col

    def _char_at(self, offset: int) -> str:
        if offset < len(self.text):
            return self.text[offset]
        return '\0'
