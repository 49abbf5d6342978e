"""Evaluation instructions attached to AST nodes.

An instruction tells the evaluator how to reduce the node it is attached to.
Grammar rules carry a default instruction; the parser copies it onto the
nodes the rule produces.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from lambdatree.values import Kind


@dataclass(frozen=True)
class Default:
    """Defer to the node's own instruction.

    Left on a node it has nothing to defer to and evaluation fails; as the
    sub-instruction of ``Descend`` it keeps the child's own instruction.
    """

    def __str__(self) -> str:
        return "default"


@dataclass(frozen=True)
class NamedOp:
    """Call operation *name* with the children at the 1-based *args*."""

    name: str
    args: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        # accept lists for convenience, keep the dataclass hashable
        object.__setattr__(self, "args", tuple(self.args))

    def __str__(self) -> str:
        return f"{self.name}({', '.join(f'${i}' for i in self.args)})"


@dataclass(frozen=True)
class NamedNoArgOp:
    """Call operation *name* without evaluating any child."""

    name: str

    def __str__(self) -> str:
        return f"{self.name}()"


@dataclass(frozen=True)
class Descend:
    """Evaluate child *index* (1-based) with *instruction* instead."""

    index: int
    instruction: Instruction = Default()

    def __str__(self) -> str:
        return f"${self.index}.{self.instruction}"


@dataclass(frozen=True)
class LiteralLeaf:
    """Parse the leaf token's text as a literal of *kind*."""

    kind: Kind

    def __str__(self) -> str:
        return f"literal<{self.kind.value}>"


@dataclass(frozen=True)
class ChoiceOf:
    """One instruction per alternative of the ordered choice it tags."""

    options: tuple[Instruction, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", tuple(self.options))

    def __str__(self) -> str:
        return " | ".join(str(option) for option in self.options)


Instruction = Union[Default, NamedOp, NamedNoArgOp, Descend, LiteralLeaf, ChoiceOf]
