"""
Library of arithmetic gates, over Python integers or numpy scalars.

Fixed-width numpy integers (e.g. :class:`numpy.uint32`) are checked for overflow:
an overflowing operation raises :class:`ArithmeticOverflowError` instead of
silently wrapping around.
"""

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

from __future__ import annotations
from collections.abc import Callable, Iterable, Mapping
from enum import Enum
import operator
from types import MappingProxyType
from typing import Any, Final, Self, final

import numpy as np

if __debug__:
    from typing_validation import validate

from ..errors import (
    ArithmeticOverflowError,
    DivisionByZeroError,
    UnsupportedOperationError,
)
from ..model import Executable, Memory, Node


class ArithmeticOp(Enum):
    """Binary operations performed by arithmetic gates."""

    ADD = "AAdd"
    DIV = "ADiv"
    EQ = "AEq"
    GEQ = "AGEq"
    GT = "AGt"
    LEQ = "ALEq"
    LT = "ALt"
    MUL = "AMul"
    NEQ = "ANeq"
    SUB = "ASub"
    XOR = "AXor"
    POW = "APow"
    INT_DIV = "AIntDiv"
    MOD = "AMod"
    SHIFT_L = "AShiftL"
    SHIFT_R = "AShiftR"
    BOOL_OR = "ABoolOr"
    BOOL_AND = "ABoolAnd"
    BIT_OR = "ABitOr"
    BIT_AND = "ABitAnd"

    @property
    def is_predicate(self) -> bool:
        """Whether the operation yields 0 or 1, in the type of its operands."""
        return self in _predicates


_predicates: Final[frozenset[ArithmeticOp]] = frozenset(
    {
        ArithmeticOp.EQ,
        ArithmeticOp.GEQ,
        ArithmeticOp.GT,
        ArithmeticOp.LEQ,
        ArithmeticOp.LT,
        ArithmeticOp.NEQ,
        ArithmeticOp.BOOL_OR,
        ArithmeticOp.BOOL_AND,
    }
)

_arithop_funcs: Final[Mapping[ArithmeticOp, Callable[[Any, Any], Any]]] = (
    MappingProxyType(
        {
            ArithmeticOp.ADD: operator.add,
            ArithmeticOp.DIV: operator.truediv,
            ArithmeticOp.EQ: operator.eq,
            ArithmeticOp.GEQ: operator.ge,
            ArithmeticOp.GT: operator.gt,
            ArithmeticOp.LEQ: operator.le,
            ArithmeticOp.LT: operator.lt,
            ArithmeticOp.MUL: operator.mul,
            ArithmeticOp.NEQ: operator.ne,
            ArithmeticOp.SUB: operator.sub,
            ArithmeticOp.XOR: operator.xor,
            ArithmeticOp.POW: operator.pow,
            ArithmeticOp.INT_DIV: operator.floordiv,
            ArithmeticOp.MOD: operator.mod,
            ArithmeticOp.SHIFT_L: operator.lshift,
            ArithmeticOp.SHIFT_R: operator.rshift,
            ArithmeticOp.BOOL_OR: lambda a, b: a != 0 or b != 0,
            ArithmeticOp.BOOL_AND: lambda a, b: a != 0 and b != 0,
            ArithmeticOp.BIT_OR: operator.or_,
            ArithmeticOp.BIT_AND: operator.and_,
        }
    )
)

arithop_labels: Final[Mapping[ArithmeticOp, str]] = MappingProxyType(
    {
        ArithmeticOp.ADD: "+",
        ArithmeticOp.DIV: "/",
        ArithmeticOp.EQ: "==",
        ArithmeticOp.GEQ: ">=",
        ArithmeticOp.GT: ">",
        ArithmeticOp.LEQ: "<=",
        ArithmeticOp.LT: "<",
        ArithmeticOp.MUL: "*",
        ArithmeticOp.NEQ: "!=",
        ArithmeticOp.SUB: "-",
        ArithmeticOp.XOR: "^",
        ArithmeticOp.POW: "**",
        ArithmeticOp.INT_DIV: "//",
        ArithmeticOp.MOD: "%",
        ArithmeticOp.SHIFT_L: "<<",
        ArithmeticOp.SHIFT_R: ">>",
        ArithmeticOp.BOOL_OR: "||",
        ArithmeticOp.BOOL_AND: "&&",
        ArithmeticOp.BIT_OR: "|",
        ArithmeticOp.BIT_AND: "&",
    }
)
"""Labels for arithmetic operations."""


def _is_integral(value: Any) -> bool:
    return isinstance(value, (int, np.integer))


_unchecked_by_numpy: Final[frozenset[ArithmeticOp]] = frozenset(
    {ArithmeticOp.POW, ArithmeticOp.SHIFT_L, ArithmeticOp.SHIFT_R}
)


def _apply_fixed_width(op: ArithmeticOp, lhs: np.integer, rhs: Any) -> np.integer:
    # numpy wraps these silently, so they are computed on Python ints and
    # range-checked against the width of lhs.
    info = np.iinfo(type(lhs))
    a, b = int(lhs), int(rhs)
    if op is ArithmeticOp.POW:
        if b < 0:
            raise UnsupportedOperationError(
                op, "Negative exponents are not supported on integer values."
            )
        if abs(a) >= 2 and b >= info.bits:
            raise ArithmeticOverflowError(
                f"Operation {op.value} overflowed on {lhs!r}, {rhs!r}."
            )
        result = a**b
    else:
        if not 0 <= b < info.bits:
            raise ArithmeticOverflowError(
                f"Operation {op.value} shifts {lhs!r} by {rhs!r},"
                f" out of range for {info.bits} bits."
            )
        result = a << b if op is ArithmeticOp.SHIFT_L else a >> b
    if not info.min <= result <= info.max:
        raise ArithmeticOverflowError(
            f"Operation {op.value} overflowed on {lhs!r}, {rhs!r}."
        )
    return type(lhs)(result)


def apply_op(op: ArithmeticOp, lhs: Any, rhs: Any) -> Any:
    """
    Applies an arithmetic operation to the given operands.
    Results of predicates are 0 or 1, converted to the type of ``lhs``.

    :raises DivisionByZeroError: on integer division or modulus by zero.
    :raises UnsupportedOperationError: on true division of integers,
                                       or on negative powers of fixed-width
                                       integers.
    :raises ArithmeticOverflowError: if a fixed-width integer result overflows.
    """
    if op is ArithmeticOp.DIV and _is_integral(lhs) and _is_integral(rhs):
        raise UnsupportedOperationError(
            op, "True division is not supported on integer values."
        )
    if op in (ArithmeticOp.DIV, ArithmeticOp.INT_DIV, ArithmeticOp.MOD) and rhs == 0:
        raise DivisionByZeroError(f"Operation {op.value} with zero divisor.")
    if op in _unchecked_by_numpy and isinstance(lhs, np.integer):
        return _apply_fixed_width(op, lhs, rhs)
    func = _arithop_funcs[op]
    try:
        with np.errstate(over="raise"):
            result = func(lhs, rhs)
    except FloatingPointError as e:
        raise ArithmeticOverflowError(
            f"Operation {op.value} overflowed on {lhs!r}, {rhs!r}."
        ) from e
    if op.is_predicate:
        return type(lhs)(1 if result else 0)
    return result


@final
class ArithmeticGate(Executable[Any]):
    """An arithmetic gate ``out = lhs <op> rhs``."""

    @classmethod
    def _new(
        cls, op: ArithmeticOp, inputs: tuple[Node, ...], outputs: tuple[Node, ...]
    ) -> Self:
        """Protected constructor."""
        self = super().__new__(cls)
        self.__op = op
        self.__inputs = inputs
        self.__outputs = outputs
        return self

    __op: ArithmeticOp
    __inputs: tuple[Node, ...]
    __outputs: tuple[Node, ...]

    __slots__ = ("__op", "__inputs", "__outputs")

    def __new__(cls, op: ArithmeticOp | str, lhs: Node, rhs: Node, out: Node) -> Self:
        """
        Creates a gate for the given operation, which can also be given by its
        label (e.g. ``"AMul"``).

        :meta public:
        """
        if isinstance(op, str):
            op = ArithmeticOp(op)
        assert validate(op, ArithmeticOp)
        assert validate(lhs, Node)
        assert validate(rhs, Node)
        assert validate(out, Node)
        return cls._new(op, (lhs, rhs), (out,))

    @property
    def op(self) -> ArithmeticOp:
        """The operation performed by the gate."""
        return self.__op

    @property
    def inputs(self) -> tuple[Node, ...]:
        return self.__inputs

    @property
    def outputs(self) -> tuple[Node, ...]:
        return self.__outputs

    def execute(self, memory: Memory[Any]) -> None:
        lhs_node, rhs_node = self.__inputs
        lhs, rhs = memory.read(lhs_node), memory.read(rhs_node)
        memory.write(self.__outputs[0], apply_op(self.__op, lhs, rhs))

    def _rewire(self, inputs: tuple[Node, ...], outputs: tuple[Node, ...]) -> Self:
        return self._new(self.__op, inputs, outputs)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ArithmeticGate):
            return NotImplemented
        return (self.__op, self.__inputs, self.__outputs) == (
            other.__op,
            other.__inputs,
            other.__outputs,
        )

    def __hash__(self) -> int:
        return hash((ArithmeticGate, self.__op, self.__inputs, self.__outputs))

    def __repr__(self) -> str:
        lhs, rhs = self.__inputs
        label = arithop_labels[self.__op]
        return f"ArithmeticGate({lhs} {label} {rhs} -> {self.__outputs[0]})"


def arithmetic_gates(
    gates: Iterable[tuple[Node, Node, Node, ArithmeticOp | str]],
) -> list[ArithmeticGate]:
    """
    Creates arithmetic gates from ``(lhs, rhs, out, op)`` tuples,
    in the order of the original gate lists.
    """
    return [ArithmeticGate(op, lhs, rhs, out) for lhs, rhs, out, op in gates]
