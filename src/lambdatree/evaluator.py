"""Tree-walking evaluator and the operation registry.

Each AST node carries an instruction. The evaluator dispatches on it:

- ``NamedOp`` / ``NamedNoArgOp`` call a registered operation with a
  ``Frame`` exposing the referenced children,
- ``Descend`` evaluates one child under a replacement instruction,
- ``LiteralLeaf`` parses the leaf token as a typed literal,
- ``Default`` (and an unresolved ``ChoiceOf``) cannot be reduced.

Evaluation never raises for bad input: problems come back as ``Failure``
results so they can flow through arithmetic like any other value.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from lambdatree.ast_nodes import Node
from lambdatree.instructions import (
    ChoiceOf,
    Default,
    Descend,
    Instruction,
    LiteralLeaf,
    NamedNoArgOp,
    NamedOp,
)
from lambdatree.results import Failure, Result, from_node_value
from lambdatree.tokens import Token
from lambdatree.values import Kind, NodeValue

logger = logging.getLogger(__name__)


class Frame:
    """What an operation sees: its node and the children it may evaluate."""

    def __init__(self, evaluator: Evaluator, node: Node, args: tuple[int, ...] = ()) -> None:
        self.evaluator = evaluator
        self.node = node
        self.args = args

    @property
    def token(self) -> Token | None:
        return self.node.token

    def child(self, position: int) -> Node:
        """The node of argument *position* (0-based into the frame's args)."""
        return self.node.child(self.args[position])

    def evaluate(self) -> tuple[Result, ...]:
        """Evaluate every argument child: ``()``, ``(a,)``, ``(a, b)``, ..."""
        results: list[Result] = []
        for index in self.args:
            child = self.node.child(index)
            results.append(self.evaluator.evaluate_with(child, child.instruction))
        return tuple(results)

    def evaluate_arg(self, position: int) -> Result:
        return self.evaluator.evaluate(self.child(position))

    def literal(self, kind: Kind) -> Result:
        """Parse this frame's leaf token as *kind*."""
        if self.node.token is None:
            return Failure(f"literal of {kind.value} requested on branch `{self.node}`, leaf expected")
        return from_node_value(NodeValue.parse(kind, self.node.token.value))


Operation = Callable[[Frame], Result]


class Operations:
    """Name → operation registry consulted by the evaluator."""

    def __init__(self) -> None:
        self._operations: dict[str, Operation] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._operations

    @property
    def names(self) -> list[str]:
        return list(self._operations)

    def define(self, name: str, callback: Operation | None = None):
        """Register or replace an operation. Without *callback*, returns a decorator."""
        if callback is None:
            def register(fn: Operation) -> Operation:
                self._operations[name] = fn
                return fn
            return register
        self._operations[name] = callback
        return callback

    def get(self, name: str) -> Operation | None:
        return self._operations.get(name)


class Evaluator:
    """Reduces AST nodes to results using *operations*."""

    def __init__(self, operations: Operations) -> None:
        self.operations = operations

    def evaluate(self, node: Node) -> Result:
        return self.evaluate_with(node, node.instruction)

    def evaluate_with(self, node: Node, instruction: Instruction) -> Result:
        """Evaluate *node* following *instruction* instead of its own."""
        logger.debug("eval %s [%s]", node, instruction)

        if isinstance(instruction, NamedOp):
            return self._call(instruction.name, node, instruction.args)
        if isinstance(instruction, NamedNoArgOp):
            return self._call(instruction.name, node, ())
        if isinstance(instruction, Descend):
            return self._descend(node, instruction)
        if isinstance(instruction, LiteralLeaf):
            return Frame(self, node).literal(instruction.kind)
        if isinstance(instruction, ChoiceOf):
            return Failure(f"unresolved choice instruction `{instruction}` on `{node}`")
        if isinstance(instruction, Default):
            if node.is_leaf:
                return Failure(f"no literal rule for token `{node.token}`")
            return Failure(f"no default reduction for branch `{node}`")
        return Failure(f"unknown instruction {instruction!r}")

    def _call(self, name: str, node: Node, args: tuple[int, ...]) -> Result:
        operation = self.operations.get(name)
        if operation is None:
            return Failure(f"no operation named `{name}`")
        for index in args:
            if not 1 <= index <= len(node.children):
                return Failure(
                    f"operation `{name}` refers to child {index} of `{node}`, "
                    f"which has {len(node.children)}"
                )
        return operation(Frame(self, node, args))

    def _descend(self, node: Node, instruction: Descend) -> Result:
        if not 1 <= instruction.index <= len(node.children):
            return Failure(
                f"cannot descend into child {instruction.index} of `{node}`, "
                f"which has {len(node.children)}"
            )
        child = node.child(instruction.index)
        if isinstance(instruction.instruction, Default):
            return self.evaluate(child)
        return self.evaluate_with(child, instruction.instruction)
