"""Expression tree for fractal formulas."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Tuple, Union

class Slot(enum.Enum):
    WIDTH = "w"
    HEIGHT = "h"
    X = "x"
    Y = "y"
    C = "c"
    Z = "z"

    @classmethod
    def from_letter(cls, letter: str):
        try:
            return cls(letter)
        except ValueError:
            return None

class BinOp(enum.Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"

    @property
    def precedence(self) -> int:
        if self in (BinOp.ADD, BinOp.SUB):
            return 1
        return 2

# position only attributes errors, so it is left out of equality
@dataclass(frozen=True)
class Binary:
    op: BinOp
    left: "Expr"
    right: "Expr"
    position: int = field(default=1, compare=False)

@dataclass(frozen=True)
class Var:
    slot: Slot
    position: int = field(default=1, compare=False)

@dataclass(frozen=True)
class Real:
    value: float
    position: int = field(default=1, compare=False)

@dataclass(frozen=True)
class Imag:
    value: float
    position: int = field(default=1, compare=False)

Expr = Union[Binary, Var, Real, Imag]

def flatten(expr: Expr) -> List[Tuple]:
    """Postfix list of ``(node, None)`` leaves and ``(op, position)`` operators.

    Trees from long formulas are too deep for pickle, so worker processes
    receive this flat form and call ``rebuild``.
    """
    out: List[Tuple] = []
    stack = [(expr, False)]
    while stack:
        node, children_done = stack.pop()
        if not isinstance(node, Binary):
            out.append((node, None))
        elif children_done:
            out.append((node.op, node.position))
        else:
            stack.append((node, True))
            stack.append((node.right, False))
            stack.append((node.left, False))
    return out

def rebuild(items: List[Tuple]) -> Expr:
    stack: List[Expr] = []
    for item, position in items:
        if isinstance(item, BinOp):
            right = stack.pop()
            left = stack.pop()
            stack.append(Binary(item, left, right, position=position))
        else:
            stack.append(item)
    if len(stack) != 1:
        raise ValueError("Malformed flattened expression.")
    return stack[0]
