"""Evaluation results and result-level arithmetic.

Every evaluation step returns one of:

- ``NoValue``: the node reduced to nothing (e.g. a statement),
- ``PendingNode``: the node was not reduced to a value,
- ``Value``: a reduced ``NodeValue``,
- ``Failure``: an evaluation error carried as an ordinary result.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from lambdatree.values import NodeValue

if TYPE_CHECKING:
    from lambdatree.ast_nodes import Node


@dataclass(frozen=True)
class NoValue:
    def __str__(self) -> str:
        return "None"


@dataclass(frozen=True)
class PendingNode:
    node: Node

    def __str__(self) -> str:
        return f"<unevaluated: {self.node}>"


@dataclass(frozen=True)
class Value:
    value: NodeValue

    def __str__(self) -> str:
        return self.value.render()


@dataclass(frozen=True)
class Failure:
    message: str

    def __str__(self) -> str:
        return self.message


Result = Union[NoValue, PendingNode, Value, Failure]


def to_node_value(result: Result) -> NodeValue:
    """Unwrap a result for arithmetic; anything but a value is an ERROR."""
    if isinstance(result, Value):
        return result.value
    if isinstance(result, Failure):
        return NodeValue.error(result.message)
    if isinstance(result, PendingNode):
        return NodeValue.error(f"cannot use unevaluated node `{result.node}` as a value")
    return NodeValue.error("cannot use `None` as a value")


def from_node_value(value: NodeValue) -> Result:
    """Wrap a NodeValue, turning ERROR values into failures."""
    if value.is_error:
        return Failure(str(value.data))
    return Value(value)


def _operate(
    lhs: Result,
    rhs: Result,
    op: Callable[[NodeValue, NodeValue], NodeValue],
) -> Result:
    # failures short-circuit, left operand first
    if isinstance(lhs, Failure):
        return lhs
    if isinstance(rhs, Failure):
        return rhs
    return from_node_value(op(to_node_value(lhs), to_node_value(rhs)))


def add(lhs: Result, rhs: Result) -> Result:
    return _operate(lhs, rhs, lambda a, b: a + b)


def sub(lhs: Result, rhs: Result) -> Result:
    return _operate(lhs, rhs, lambda a, b: a - b)


def mul(lhs: Result, rhs: Result) -> Result:
    return _operate(lhs, rhs, lambda a, b: a * b)


def div(lhs: Result, rhs: Result) -> Result:
    return _operate(lhs, rhs, lambda a, b: a / b)


def neg(operand: Result) -> Result:
    if isinstance(operand, Failure):
        return operand
    return from_node_value(-to_node_value(operand))
