"""Library of gates and circuits for binary circuits over :obj:`bool` values."""

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
from types import MappingProxyType
from typing import Any, Final, Self, final

if __debug__:
    from typing_validation import validate

from ..circuits import Circuit, CircuitBuilder
from ..model import Executable, Memory, Node


class BinaryOp(Enum):
    """Operations performed by binary gates."""

    AND = "AND"
    OR = "OR"
    XOR = "XOR"
    NAND = "NAND"
    NOT = "NOT"

    @property
    def arity(self) -> int:
        """Number of inputs taken by the operation."""
        return 1 if self is BinaryOp.NOT else 2


_binop_funcs: Final[Mapping[BinaryOp, Callable[..., bool]]] = MappingProxyType(
    {
        BinaryOp.AND: lambda a, b: a and b,
        BinaryOp.OR: lambda a, b: a or b,
        BinaryOp.XOR: lambda a, b: a != b,
        BinaryOp.NAND: lambda a, b: not (a and b),
        BinaryOp.NOT: lambda a: not a,
    }
)

binop_labels: Final[Mapping[BinaryOp, str]] = MappingProxyType(
    {
        BinaryOp.AND: "&",
        BinaryOp.OR: "|",
        BinaryOp.XOR: "^",
        BinaryOp.NAND: "~&",
        BinaryOp.NOT: "~",
    }
)
"""Labels for binary operations."""


@final
class BinaryGate(Executable[bool]):
    """A logic gate with one output, reading one (NOT) or two boolean inputs."""

    @classmethod
    def _new(
        cls, op: BinaryOp, inputs: tuple[Node, ...], outputs: tuple[Node, ...]
    ) -> Self:
        """Protected constructor."""
        self = super().__new__(cls)
        self.__op = op
        self.__inputs = inputs
        self.__outputs = outputs
        return self

    __op: BinaryOp
    __inputs: tuple[Node, ...]
    __outputs: tuple[Node, ...]

    __slots__ = ("__op", "__inputs", "__outputs")

    def __new__(
        cls, op: BinaryOp, inputs: Iterable[Node], outputs: Iterable[Node]
    ) -> Self:
        """
        Creates a gate for the given operation, reading from the given inputs
        and writing to the given output.

        :meta public:
        """
        inputs, outputs = tuple(inputs), tuple(outputs)
        assert validate(op, BinaryOp)
        assert validate(inputs, tuple[Node, ...])
        assert validate(outputs, tuple[Node, ...])
        if len(inputs) != op.arity:
            raise ValueError(
                f"Gate {op.name} expects {op.arity} inputs, got {len(inputs)}."
            )
        if len(outputs) != 1:
            raise ValueError(f"Gate {op.name} expects 1 output, got {len(outputs)}.")
        return cls._new(op, inputs, outputs)

    @property
    def op(self) -> BinaryOp:
        """The operation performed by the gate."""
        return self.__op

    @property
    def inputs(self) -> tuple[Node, ...]:
        return self.__inputs

    @property
    def outputs(self) -> tuple[Node, ...]:
        return self.__outputs

    def execute(self, memory: Memory[bool]) -> None:
        args = [memory.read(node) for node in self.__inputs]
        memory.write(self.__outputs[0], bool(_binop_funcs[self.__op](*args)))

    def _rewire(self, inputs: tuple[Node, ...], outputs: tuple[Node, ...]) -> Self:
        return self._new(self.__op, inputs, outputs)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, BinaryGate):
            return NotImplemented
        return (self.__op, self.__inputs, self.__outputs) == (
            other.__op,
            other.__inputs,
            other.__outputs,
        )

    def __hash__(self) -> int:
        return hash((BinaryGate, self.__op, self.__inputs, self.__outputs))

    def __repr__(self) -> str:
        ins = ", ".join(map(str, self.__inputs))
        return f"BinaryGate({self.__op.name}: {ins} -> {self.__outputs[0]})"


def and_(a: Node, b: Node, out: Node) -> BinaryGate:
    """The AND gate ``out = a & b``."""
    return BinaryGate(BinaryOp.AND, (a, b), (out,))


def or_(a: Node, b: Node, out: Node) -> BinaryGate:
    """The OR gate ``out = a | b``."""
    return BinaryGate(BinaryOp.OR, (a, b), (out,))


def xor_(a: Node, b: Node, out: Node) -> BinaryGate:
    """The XOR gate ``out = a ^ b``."""
    return BinaryGate(BinaryOp.XOR, (a, b), (out,))


def nand_(a: Node, b: Node, out: Node) -> BinaryGate:
    """The NAND gate ``out = ~(a & b)``."""
    return BinaryGate(BinaryOp.NAND, (a, b), (out,))


def not_(a: Node, out: Node) -> BinaryGate:
    """The NOT gate ``out = ~a``."""
    return BinaryGate(BinaryOp.NOT, (a,), (out,))


half_adder: Circuit[bool]
"""
Circuit for a half adder, with inputs ``[0, 1]`` and outputs ``[sum, carry]``
on nodes ``[2, 3]``.
See `Half adder <https://en.wikipedia.org/wiki/Adder_(electronics)#Half_adder>`_.
"""


@Circuit.from_recipe  # type: ignore[no-redef]
def half_adder(circ: CircuitBuilder[bool]) -> None:
    circ.add_inputs([0, 1])
    circ.add_component(xor_(0, 1, 2))
    circ.add_component(and_(0, 1, 3))
    circ.add_outputs([2, 3])


full_adder: Circuit[bool]
"""
Circuit for a full adder, with inputs ``[a, b, carry_in]`` on nodes ``[0, 1, 2]``
and outputs ``[sum, carry_out]`` on nodes ``[5, 7]``.
See `Full adder <https://en.wikipedia.org/wiki/Adder_(electronics)#Full_adder>`_.
"""


@Circuit.from_recipe  # type: ignore[no-redef]
def full_adder(circ: CircuitBuilder[bool]) -> None:
    circ.add_inputs([0, 1, 2])
    circ.add_component(xor_(0, 1, 3))
    circ.add_component(and_(0, 1, 4))
    circ.add_component(xor_(3, 2, 5))
    circ.add_component(and_(3, 2, 6))
    circ.add_component(or_(4, 6, 7))
    circ.add_outputs([5, 7])


@Circuit.recipe
def rc_adder(circ: CircuitBuilder[bool], num_bits: int) -> None:
    """
    Recipe to create a ripple-carry adder circuit, given the number ``num_bits`` of
    bits for each summand, by chaining :obj:`full_adder` sub-circuits.

    Inputs are the carry-in on node ``0``, followed by the bits of the summands,
    interleaved and least significant first: ``a_i`` on node ``2*i+1`` and ``b_i``
    on node ``2*i+2``. Outputs are the sum bits, least significant first, followed
    by the carry-out.
    See `Ripple-carry adder <https://en.wikipedia.org/wiki/Adder_(electronics)#Ripple-carry_adder>`_.
    """
    assert validate(num_bits, int)
    if num_bits <= 0:
        raise ValueError("Number of bits must be positive.")
    inputs = range(2 * num_bits + 1)
    circ.add_inputs(inputs)
    next_node = len(inputs)
    outputs: list[Node] = []
    c = inputs[0]
    for i in range(num_bits):
        a, b = inputs[2 * i + 1 : 2 * i + 3]
        s, c_out = next_node, next_node + 1
        next_node += 2
        circ.add_component(full_adder.rewire([a, b, c], [s, c_out]))
        outputs.append(s)
        c = c_out
    outputs.append(c)
    circ.add_outputs(outputs)
