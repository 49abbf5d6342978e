"""Tests for the position cursor."""

from __future__ import annotations

import pytest

from lambdatree.cursor import Cursor
from tests.helpers import state


class TestCursorMovement:
    def test_initial_position(self):
        cursor = Cursor("abc")
        assert state(cursor) == (0, 0, 1, 1, 1, 1)
        assert cursor.depth == 0
        assert not cursor.at_end

    def test_advance_moves_end_only(self):
        cursor = Cursor("abc")
        cursor.advance("ab")
        assert state(cursor) == (0, 2, 1, 1, 1, 3)
        assert cursor.remaining == "c"

    def test_advance_over_newline(self):
        cursor = Cursor("ab\ncd")
        cursor.advance("ab\nc")
        assert (cursor.end, cursor.end_line, cursor.end_col) == (4, 2, 2)

    def test_crlf_is_one_line_break(self):
        cursor = Cursor("a\r\nb")
        cursor.advance("a\r\n")
        assert (cursor.end, cursor.end_line, cursor.end_col) == (3, 2, 1)

    def test_bare_cr_is_line_break(self):
        cursor = Cursor("a\rb")
        cursor.advance("a\r")
        assert (cursor.end_line, cursor.end_col) == (2, 1)

    def test_advance_rejects_other_text(self):
        cursor = Cursor("abc")
        with pytest.raises(ValueError):
            cursor.advance("x")
        assert cursor.end == 0

    def test_commit(self):
        cursor = Cursor("abc")
        cursor.advance("ab")
        cursor.commit()
        assert state(cursor) == (2, 2, 1, 3, 1, 3)

    def test_back(self):
        cursor = Cursor("abc")
        cursor.advance("a")
        cursor.commit()
        cursor.advance("b")
        cursor.back()
        assert state(cursor) == (1, 1, 1, 2, 1, 2)

    def test_span_is_pending_region(self):
        cursor = Cursor("abc", "calc")
        cursor.advance("a")
        cursor.commit()
        cursor.advance("bc")
        span = cursor.span
        assert (span.start, span.end) == (1, 3)
        assert span.text(cursor.text) == "bc"
        assert str(span) == "calc:1:2"
        assert cursor.at_end

    def test_span_ahead_does_not_move(self):
        cursor = Cursor("  xy")
        span = cursor.span_ahead(2, 1)
        assert (span.start, span.end, span.start_col, span.end_col) == (1, 3, 2, 4)
        assert state(cursor) == (0, 0, 1, 1, 1, 1)


class TestCursorBacktracking:
    def test_pop_restores_exactly(self):
        cursor = Cursor("12\n34 + 5")
        cursor.advance("1")
        before = state(cursor)
        cursor.push()
        cursor.advance("2\n34 ")
        cursor.commit()
        cursor.advance("+")
        cursor.pop()
        assert state(cursor) == before
        assert cursor.depth == 0

    def test_pull_keeps_position(self):
        cursor = Cursor("abc")
        cursor.push()
        cursor.advance("ab")
        cursor.pull()
        assert cursor.end == 2
        assert cursor.depth == 0

    def test_nested_snapshots(self):
        cursor = Cursor("abcd")
        cursor.push()
        cursor.advance("a")
        cursor.push()
        cursor.advance("bc")
        cursor.pop()
        assert cursor.end == 1
        cursor.pop()
        assert cursor.end == 0

    def test_unwind_restores_outermost(self):
        cursor = Cursor("abcd")
        cursor.advance("a")
        cursor.push()
        cursor.advance("b")
        cursor.push()
        cursor.advance("c")
        cursor.unwind(0)
        assert cursor.end == 1
        assert cursor.depth == 0

    def test_pop_empty_raises(self):
        with pytest.raises(IndexError):
            Cursor("").pop()

    def test_pull_empty_raises(self):
        with pytest.raises(IndexError):
            Cursor("").pull()
