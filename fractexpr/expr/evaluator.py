"""Dual-number evaluation of formula trees.

Every node evaluates to a ``Dual``: the complex value together with its
derivative with respect to ``c``. The derivative is what the distance
estimate in the renderer is built on.
"""

from __future__ import annotations

from dataclasses import dataclass

from fractexpr.expr.errors import EVAL, ExprError
from fractexpr.expr.nodes import BinOp, Binary, Expr, Imag, Real, Slot, Var

@dataclass(frozen=True)
class Dual:
    value: complex
    derivative: complex = 0j

    def __add__(self, other: "Dual") -> "Dual":
        return Dual(self.value + other.value, self.derivative + other.derivative)

    def __sub__(self, other: "Dual") -> "Dual":
        return Dual(self.value - other.value, self.derivative - other.derivative)

    def __mul__(self, other: "Dual") -> "Dual":
        return Dual(
            self.value * other.value,
            self.value * other.derivative + other.value * self.derivative,
        )

    def __truediv__(self, other: "Dual") -> "Dual":
        # (a/b)' = (a'b - ab') / b^2, rearranged as (a' - (a/b)b') / b
        quotient = self.value / other.value
        return Dual(quotient, (self.derivative - quotient * other.derivative) / other.value)

    @classmethod
    def constant(cls, value) -> "Dual":
        return cls(complex(value), 0j)

class Context:
    """The six bindings a formula can see, rewritten between evaluations."""

    def __init__(self, width: float = 0.0, height: float = 0.0):
        self.width = float(width)
        self.height = float(height)
        self.x = 0.0
        self.y = 0.0
        self.c = Dual(0j)
        self.z = Dual(0j)

    def lookup(self, var: Var) -> Dual:
        slot = var.slot
        if slot is Slot.WIDTH:
            return Dual.constant(self.width)
        if slot is Slot.HEIGHT:
            return Dual.constant(self.height)
        if slot is Slot.X:
            return Dual.constant(self.x)
        if slot is Slot.Y:
            return Dual.constant(self.y)
        if slot is Slot.C:
            return self.c
        if slot is Slot.Z:
            return self.z
        raise ExprError("Undefined variable", var.position, EVAL)

    def combine(self, node: Binary, left: Dual, right: Dual) -> Dual:
        if node.op is BinOp.ADD:
            return left + right
        if node.op is BinOp.SUB:
            return left - right
        if node.op is BinOp.MUL:
            return left * right
        if right.value == 0j:
            raise ExprError("Divide by zero", node.position, EVAL)
        return left / right

    def eval(self, expr: Expr) -> Dual:
        # explicit work stack: long formulas build trees deeper than the
        # interpreter recursion limit. Left operands are evaluated first.
        values = []
        stack = [(expr, False)]
        while stack:
            node, operands_ready = stack.pop()

            if isinstance(node, Binary):
                if operands_ready:
                    right = values.pop()
                    left = values.pop()
                    values.append(self.combine(node, left, right))
                else:
                    stack.append((node, True))
                    stack.append((node.right, False))
                    stack.append((node.left, False))
            elif isinstance(node, Var):
                values.append(self.lookup(node))
            elif isinstance(node, Real):
                values.append(Dual(complex(node.value, 0.0)))
            elif isinstance(node, Imag):
                values.append(Dual(complex(0.0, node.value)))
            else:
                raise TypeError(f"Not an expression node: {node!r}")

        return values[0]
