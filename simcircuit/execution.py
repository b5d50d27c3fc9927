"""
Execution of circuits on caller-supplied input values.
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
from collections.abc import Mapping
import logging
from typing import Any, Generic, Self, TypeVar, final

if __debug__:
    from typing_validation import validate

from .circuits import Circuit, run_components
from .errors import MissingInputError
from .memory import CircuitMemory
from .model import Node

logger = logging.getLogger(__name__)


V = TypeVar("V")


@final
class CircuitExecutor(Generic[V]):
    """
    Executes a circuit on input values keyed by node identifier, producing output
    values keyed by node identifier.

    The executor owns a scratch memory sized for its circuit, which is cleared at
    the start of every run. The circuit itself is never modified, so the same
    circuit can be shared by any number of executors.
    """

    __circuit: Circuit[V]
    __memory: CircuitMemory[V]

    __slots__ = ("__weakref__", "__circuit", "__memory")

    def __new__(cls, circuit: Circuit[V]) -> Self:
        """
        Creates an executor for the given circuit.

        :meta public:
        """
        assert validate(circuit, Circuit)
        self = super().__new__(cls)
        self.__circuit = circuit
        self.__memory = CircuitMemory(circuit.num_slots)
        return self

    @property
    def circuit(self) -> Circuit[V]:
        """The circuit executed."""
        return self.__circuit

    @property
    def memory(self) -> CircuitMemory[V]:
        """Scratch memory, holding the values of the last run."""
        return self.__memory

    def run(self, input_values: Mapping[Node, V]) -> dict[Node, V]:
        """
        Runs the circuit on the given input values, returning the output values.
        Values supplied for nodes which are not circuit inputs are ignored.

        :raises MissingInputError: if no value is supplied for some circuit input,
                                   in which case no component is executed.
        :raises ExecutionError: if one of the components fails.
        """
        assert validate(input_values, Mapping[Node, Any])
        circuit, memory = self.__circuit, self.__memory
        memory.clear()
        for node in circuit.inputs:
            if node not in input_values:
                raise MissingInputError(node)
        for node, slot in zip(circuit.inputs, circuit.input_slots):
            memory.write(slot, input_values[node])
        circuit.seed(memory)
        logger.debug("Running %r", circuit)
        run_components(circuit.components, memory)
        outputs = {
            node: memory.read(slot)
            for node, slot in zip(circuit.outputs, circuit.output_slots)
        }
        logger.debug("Run completed with %d outputs", len(outputs))
        return outputs

    def __repr__(self) -> str:
        return f"<CircuitExecutor {id(self):#x}: {self.__circuit!r}>"
