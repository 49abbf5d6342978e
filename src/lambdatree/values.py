"""Numeric and text values produced by evaluation.

Numbers live on a small promotion lattice::

    NARROW_INT < WIDE_INT < NARROW_FLOAT < WIDE_FLOAT

Mixed-kind arithmetic promotes the narrower operand to the wider kind by
rendering it to text and parsing it back as the wider kind. TEXT only
combines with TEXT. Errors are values too (kind ERROR) so arithmetic can
short-circuit on them without a separate failure channel.
"""

from __future__ import annotations

import math
import re
import struct
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum


class Kind(Enum):
    NARROW_INT = "int"
    WIDE_INT = "bigint"
    NARROW_FLOAT = "float"
    WIDE_FLOAT = "bigfloat"
    TEXT = "text"
    ERROR = "error"


_RANK: dict[Kind, int] = {
    Kind.NARROW_INT: 0,
    Kind.WIDE_INT: 1,
    Kind.NARROW_FLOAT: 2,
    Kind.WIDE_FLOAT: 3,
}

_INT_BITS: dict[Kind, int] = {
    Kind.NARROW_INT: 32,
    Kind.WIDE_INT: 128,
}

# inexact integer division promotes the result to the matching float kind
_FLOAT_OF: dict[Kind, Kind] = {
    Kind.NARROW_INT: Kind.NARROW_FLOAT,
    Kind.WIDE_INT: Kind.WIDE_FLOAT,
}

_F32_MAX = 3.4028234663852886e38

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
    r"|[+-]?(?:inf|infinity|nan)",
    re.IGNORECASE,
)


def _int_fits(kind: Kind, n: int) -> bool:
    bits = _INT_BITS[kind]
    return -(1 << (bits - 1)) <= n < (1 << (bits - 1))


def _to_f32(x: float) -> float:
    """Round a double to the nearest single-precision value."""
    return struct.unpack("f", struct.pack("f", x))[0]


def _f32_repr(x: float) -> str:
    """Shortest decimal text that reads back as the same single."""
    if not math.isfinite(x):
        return repr(x)
    for digits in range(1, 10):
        candidate = float(f"{x:.{digits}g}")
        if _to_f32(candidate) == x:
            return repr(candidate)
    return repr(x)


@dataclass(frozen=True)
class NodeValue:
    kind: Kind
    data: int | float | str

    def __str__(self) -> str:
        return self.render()

    # ── Construction ─────────────────────────────────────────────

    @classmethod
    def error(cls, message: str) -> NodeValue:
        return cls(Kind.ERROR, message)

    @classmethod
    def text(cls, value: str) -> NodeValue:
        return cls(Kind.TEXT, value)

    @classmethod
    def integer(cls, kind: Kind, n: int) -> NodeValue:
        """An integer result of *kind*; narrow overflow widens."""
        if _int_fits(kind, n):
            return cls(kind, n)
        if kind == Kind.NARROW_INT and _int_fits(Kind.WIDE_INT, n):
            return cls(Kind.WIDE_INT, n)
        return cls.error(f"integer overflow: {n} does not fit in {Kind.WIDE_INT.value}")

    @classmethod
    def floating(cls, kind: Kind, x: float) -> NodeValue:
        """A float result of *kind*; values beyond single range widen."""
        if kind == Kind.NARROW_FLOAT:
            if math.isfinite(x) and abs(x) > _F32_MAX:
                return cls(Kind.WIDE_FLOAT, x)
            return cls(kind, _to_f32(x))
        return cls(kind, x)

    @classmethod
    def parse(cls, kind: Kind, text: str) -> NodeValue:
        """Parse literal *text* as *kind*. Failures are ERROR values."""
        if kind in _INT_BITS:
            if not _INT_RE.fullmatch(text):
                return cls.error(f"cannot parse {text!r} as {kind.value}")
            n = int(text)
            if not _int_fits(kind, n):
                return cls.error(f"{text!r} is out of range for {kind.value}")
            return cls(kind, n)
        if kind in (Kind.NARROW_FLOAT, Kind.WIDE_FLOAT):
            if not _FLOAT_RE.fullmatch(text):
                return cls.error(f"cannot parse {text!r} as {kind.value}")
            x = float(text)
            if kind == Kind.NARROW_FLOAT:
                if math.isfinite(x) and abs(x) > _F32_MAX:
                    return cls.error(f"{text!r} is out of range for {kind.value}")
                x = _to_f32(x)
            return cls(kind, x)
        if kind == Kind.TEXT:
            return cls.text(text)
        return cls.error(f"cannot parse {text!r} as {kind.value}")

    # ── Queries ──────────────────────────────────────────────────

    @property
    def is_error(self) -> bool:
        return self.kind == Kind.ERROR

    @property
    def is_numeric(self) -> bool:
        return self.kind in _RANK

    @property
    def is_zero(self) -> bool:
        return self.is_numeric and self.data == 0

    def render(self) -> str:
        if self.kind == Kind.NARROW_FLOAT:
            return _f32_repr(self.data)  # type: ignore[arg-type]
        if self.kind == Kind.WIDE_FLOAT:
            return repr(self.data)
        return str(self.data)

    def promote(self, kind: Kind) -> NodeValue:
        """Re-read this value as *kind* through its text rendering."""
        if kind == self.kind:
            return self
        return NodeValue.parse(kind, self.render())

    # ── Arithmetic ───────────────────────────────────────────────

    def __add__(self, other: NodeValue) -> NodeValue:
        return self._binary(other, "+", _add)

    def __sub__(self, other: NodeValue) -> NodeValue:
        return self._binary(other, "-", _sub)

    def __mul__(self, other: NodeValue) -> NodeValue:
        return self._binary(other, "*", _mul)

    def __truediv__(self, other: NodeValue) -> NodeValue:
        if self.is_error:
            return self
        if other.is_error:
            return other
        if other.is_zero:
            return NodeValue.error("division by zero")
        return self._binary(other, "/", _div)

    def __neg__(self) -> NodeValue:
        if self.kind in _INT_BITS:
            return NodeValue.integer(self.kind, -self.data)  # type: ignore[operator]
        if self.is_numeric:
            return NodeValue(self.kind, -self.data)  # type: ignore[operator]
        if self.is_error:
            return self
        return NodeValue.error(f"cannot negate {self.kind.value}")

    def _binary(
        self,
        other: NodeValue,
        symbol: str,
        op: Callable[[NodeValue, NodeValue], NodeValue],
    ) -> NodeValue:
        if self.is_error:
            return self
        if other.is_error:
            return other
        if self.kind == other.kind:
            if self.kind == Kind.TEXT:
                if symbol == "+":
                    return NodeValue.text(self.data + other.data)  # type: ignore[operator]
                return NodeValue.error(f"unsupported operator `{symbol}` for text")
            return op(self, other)
        if not (self.is_numeric and other.is_numeric):
            return NodeValue.error(
                f"cannot combine {self.kind.value} and {other.kind.value} with `{symbol}`"
            )
        wider = max(self.kind, other.kind, key=_RANK.__getitem__)
        lhs = self.promote(wider)
        rhs = other.promote(wider)
        return lhs._binary(rhs, symbol, op)


# Same-kind numeric operations. Both operands share a numeric kind.


def _add(lhs: NodeValue, rhs: NodeValue) -> NodeValue:
    if lhs.kind in _INT_BITS:
        return NodeValue.integer(lhs.kind, lhs.data + rhs.data)  # type: ignore[operator]
    return NodeValue.floating(lhs.kind, lhs.data + rhs.data)  # type: ignore[operator]


def _sub(lhs: NodeValue, rhs: NodeValue) -> NodeValue:
    if lhs.kind in _INT_BITS:
        return NodeValue.integer(lhs.kind, lhs.data - rhs.data)  # type: ignore[operator]
    return NodeValue.floating(lhs.kind, lhs.data - rhs.data)  # type: ignore[operator]


def _mul(lhs: NodeValue, rhs: NodeValue) -> NodeValue:
    if lhs.kind in _INT_BITS:
        return NodeValue.integer(lhs.kind, lhs.data * rhs.data)  # type: ignore[operator]
    return NodeValue.floating(lhs.kind, lhs.data * rhs.data)  # type: ignore[operator]


def _div(lhs: NodeValue, rhs: NodeValue) -> NodeValue:
    if rhs.is_zero:
        return NodeValue.error("division by zero")
    a, b = lhs.data, rhs.data
    if lhs.kind in _INT_BITS:
        if a % b == 0:  # type: ignore[operator]
            return NodeValue.integer(lhs.kind, a // b)  # type: ignore[operator]
        try:
            quotient = a / b  # type: ignore[operator]
        except OverflowError:
            return NodeValue.error(f"{a} / {b} is too large for {_FLOAT_OF[lhs.kind].value}")
        return NodeValue.floating(_FLOAT_OF[lhs.kind], quotient)
    return NodeValue.floating(lhs.kind, a / b)  # type: ignore[operator]
