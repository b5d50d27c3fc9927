"""
SimCircuit is an engine to describe and execute computation circuits: directed acyclic
networks of components reading and writing values over an indexed memory.
Circuits are validated incrementally as they are built, executed deterministically in
the order their components were added, and can themselves be used as components of
larger circuits.
"""

# SimCircuit - Validated construction and execution of computation circuits

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

from .model import Node, MemorySlot, Memory, Component, Executable
from .memory import CircuitMemory
from .circuits import Circuit, CircuitBuilder, CircuitRecipe
from .execution import CircuitExecutor
from .errors import (
    CircuitError,
    MemoryAccessError,
    OutOfBoundsError,
    UninitializedError,
    BuildError,
    NodeBuildError,
    UndefinedInputError,
    DuplicateOutputError,
    DuplicateInputError,
    UnresolvedOutputError,
    BuilderConsumedError,
    MissingInputError,
    ExecutionError,
    ComponentError,
    DivisionByZeroError,
    UnsupportedOperationError,
    ArithmeticOverflowError,
)

__all__ = (
    "Node",
    "MemorySlot",
    "Memory",
    "Component",
    "Executable",
    "CircuitMemory",
    "Circuit",
    "CircuitBuilder",
    "CircuitRecipe",
    "CircuitExecutor",
    "CircuitError",
    "MemoryAccessError",
    "OutOfBoundsError",
    "UninitializedError",
    "BuildError",
    "NodeBuildError",
    "UndefinedInputError",
    "DuplicateOutputError",
    "DuplicateInputError",
    "UnresolvedOutputError",
    "BuilderConsumedError",
    "MissingInputError",
    "ExecutionError",
    "ComponentError",
    "DivisionByZeroError",
    "UnsupportedOperationError",
    "ArithmeticOverflowError",
)
