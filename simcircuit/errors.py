"""
Exceptions raised by memories, builders, circuits and executors.
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
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .model import Component


class CircuitError(Exception):
    """Base class for all errors raised by :mod:`simcircuit`."""


class MemoryAccessError(CircuitError):
    """Base class for errors raised when accessing a memory slot."""

    slot: int

    def __init__(self, slot: int, message: str) -> None:
        super().__init__(message)
        self.slot = slot


class OutOfBoundsError(MemoryAccessError, IndexError):
    """Raised when a slot lies outside the capacity of a memory."""

    capacity: int

    def __init__(self, slot: int, capacity: int) -> None:
        super().__init__(
            slot, f"Slot {slot} is out of bounds for memory of capacity {capacity}."
        )
        self.capacity = capacity


class UninitializedError(MemoryAccessError):
    """Raised when reading a slot which holds no value yet."""

    def __init__(self, slot: int) -> None:
        super().__init__(slot, f"Slot {slot} has not been written.")


class BuildError(CircuitError, ValueError):
    """Base class for errors raised while building a circuit."""


class NodeBuildError(BuildError):
    """Base class for build errors concerning a specific node identifier."""

    node: int

    def __init__(self, node: int, message: str) -> None:
        super().__init__(message)
        self.node = node


class UndefinedInputError(NodeBuildError):
    """Raised when a component reads a node which has not been produced yet."""

    def __init__(self, node: int) -> None:
        super().__init__(node, f"Input node {node} has not been produced.")


class DuplicateOutputError(NodeBuildError):
    """Raised when a component writes a node which has already been produced."""

    def __init__(self, node: int) -> None:
        super().__init__(node, f"Output node {node} has already been produced.")


class DuplicateInputError(NodeBuildError):
    """
    Raised when a node which has already been produced is declared again as a
    circuit input or constant.
    """

    def __init__(self, node: int) -> None:
        super().__init__(node, f"Node {node} has already been produced.")


class UnresolvedOutputError(NodeBuildError):
    """Raised when a circuit output is declared for a node not produced yet."""

    def __init__(self, node: int) -> None:
        super().__init__(node, f"Output node {node} has not been produced.")


class BuilderConsumedError(BuildError):
    """Raised when using a builder after its circuit has been built."""

    def __init__(self) -> None:
        super().__init__("Circuit builder has already been consumed by build().")


class MissingInputError(CircuitError, LookupError):
    """Raised when no value is supplied for a declared circuit input."""

    node: int

    def __init__(self, node: int) -> None:
        super().__init__(f"No value supplied for input node {node}.")
        self.node = node


class ExecutionError(CircuitError):
    """
    Raised when a component fails during execution of a circuit.
    The original error is available as :attr:`error` (and as ``__cause__``).
    """

    position: int
    component: Component
    error: BaseException

    def __init__(
        self, position: int, component: Component, error: BaseException
    ) -> None:
        super().__init__(f"Component at position {position} failed: {error}")
        self.position = position
        self.component = component
        self.error = error

    @property
    def path(self) -> tuple[int, ...]:
        """
        Positions of the failing component through nested circuits,
        starting from the outermost circuit.
        """
        error = self.error
        if isinstance(error, ExecutionError):
            return (self.position, *error.path)
        return (self.position,)


class ComponentError(CircuitError):
    """Base class for component-specific errors raised by gate libraries."""


class DivisionByZeroError(ComponentError, ZeroDivisionError):
    """Raised by arithmetic gates on division or modulus by zero."""


class UnsupportedOperationError(ComponentError):
    """Raised by gates asked to perform an operation unsupported for their values."""

    op: Any

    def __init__(self, op: Any, message: str | None = None) -> None:
        super().__init__(message or f"Unsupported operation {op}.")
        self.op = op


class ArithmeticOverflowError(ComponentError, OverflowError):
    """Raised by arithmetic gates when a fixed-width result overflows."""
