"""
Capabilities for memories, circuit components and executable components.
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
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from typing import Generic, Self, TypeAlias, TypeVar, final

if __debug__:
    from typing_validation import validate

Node: TypeAlias = int
"""
Type alias for a node identifier, naming a wire in some address space.
Identifiers chosen by callers can be sparse; identifiers inside a built circuit
are dense slots.
"""

MemorySlot: TypeAlias = int
"""Type alias for (the index of) a slot in a memory."""


V = TypeVar("V")


class Memory(ABC, Generic[V]):
    """
    Abstract base class for indexed memories of values.

    Writes are unconditional: whether a slot was already written is not checked
    at this level.
    """

    __slots__ = ("__weakref__",)

    @property
    @abstractmethod
    def capacity(self) -> int:
        """Number of addressable slots."""

    @abstractmethod
    def read(self, slot: MemorySlot) -> V:
        """
        Reads the value at the given slot.

        :raises OutOfBoundsError: if the slot is not in ``range(self.capacity)``.
        :raises UninitializedError: if the slot holds no value.
        """

    @abstractmethod
    def write(self, slot: MemorySlot, value: V) -> None:
        """
        Writes a value at the given slot, overwriting any previous value.

        :raises OutOfBoundsError: if the slot is not in ``range(self.capacity)``.
        """


class Component(ABC):
    """
    Abstract base class for circuit components, exposing the ordered node
    identifiers a component reads from and writes to.
    """

    __slots__ = ("__weakref__",)

    @property
    @abstractmethod
    def inputs(self) -> tuple[Node, ...]:
        """Identifiers of the nodes read by the component, in port order."""

    @property
    @abstractmethod
    def outputs(self) -> tuple[Node, ...]:
        """Identifiers of the nodes written by the component, in port order."""

    @final
    @property
    def num_inputs(self) -> int:
        """Number of input nodes."""
        return len(self.inputs)

    @final
    @property
    def num_outputs(self) -> int:
        """Number of output nodes."""
        return len(self.outputs)

    @final
    def rewire(self, inputs: Iterable[Node], outputs: Iterable[Node]) -> Self:
        """
        Returns a copy of this component with the same behaviour, reading from
        and writing to the given nodes instead.

        :raises ValueError: if the number of inputs or outputs differs from
                            that of this component.
        """
        inputs, outputs = tuple(inputs), tuple(outputs)
        assert validate(inputs, tuple[Node, ...])
        assert validate(outputs, tuple[Node, ...])
        if len(inputs) != self.num_inputs:
            raise ValueError(
                f"Expected {self.num_inputs} input nodes, got {len(inputs)}."
            )
        if len(outputs) != self.num_outputs:
            raise ValueError(
                f"Expected {self.num_outputs} output nodes, got {len(outputs)}."
            )
        return self._rewire(inputs, outputs)

    @abstractmethod
    def _rewire(self, inputs: tuple[Node, ...], outputs: tuple[Node, ...]) -> Self:
        """
        Protected version of :meth:`Component.rewire`, to be implemented by
        subclasses. It is guaranteed that the arities match those of this component.
        """


class Executable(Component, Generic[V]):
    """
    Abstract base class for components which can be executed against a memory.

    Implementations must read only from :attr:`inputs` and write only to
    :attr:`outputs`. This is not checked when executing.
    """

    __slots__ = ()

    @abstractmethod
    def execute(self, memory: Memory[V]) -> None:
        """
        Performs the component's computation on the given memory.
        Component-specific failures are raised as exceptions.
        """


def validate_nodes(nodes: Sequence[Node]) -> None:
    """Raises :class:`ValueError` if any of the given identifiers is negative."""
    for node in nodes:
        if node < 0:
            raise ValueError(f"Node identifiers must be non-negative, got {node}.")
