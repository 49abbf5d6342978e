"""AST node definitions produced by the parser."""

from __future__ import annotations

from dataclasses import dataclass, field

from lambdatree.instructions import Default, Instruction
from lambdatree.source import Span
from lambdatree.tokens import Token


@dataclass
class Node:
    """A leaf (``token`` set, no children) or a branch (``children``).

    ``rule`` names the innermost grammar rule that produced the node, empty
    for anonymous sequence and token nodes.
    """

    instruction: Instruction = field(default_factory=Default)
    children: list[Node] = field(default_factory=list)
    token: Token | None = None
    rule: str = ""
    span: Span | None = None

    @classmethod
    def leaf(cls, token: Token, instruction: Instruction | None = None) -> Node:
        return cls(instruction=instruction or Default(), token=token, span=token.span)

    @classmethod
    def branch(cls, children: list[Node], instruction: Instruction | None = None) -> Node:
        span = None
        spans = [c.span for c in children if c.span is not None]
        if spans:
            span = spans[0].through(spans[-1])
        return cls(instruction=instruction or Default(), children=children, span=span)

    @property
    def is_leaf(self) -> bool:
        return self.token is not None

    def child(self, index: int) -> Node:
        """Return the child at 1-based *index*. Raises IndexError."""
        if not 1 <= index <= len(self.children):
            raise IndexError(
                f"node `{self}` has {len(self.children)} children, no child {index}"
            )
        return self.children[index - 1]

    def __str__(self) -> str:
        if self.token is not None:
            return self.token.value
        return "( " + " ".join(str(c) for c in self.children) + " )"


@dataclass
class AST:
    """A parsed unit: the root node and the text it was parsed from."""

    root: Node
    source: str = ""

    def __str__(self) -> str:
        return str(self.root)
