"""
Implementation of circuits, their builders and recipes.

A circuit is an ordered list of executable components reading from and writing to
the dense slots of a private memory, together with boundary input and output nodes.
Circuits are built incrementally by a :class:`CircuitBuilder`, which compacts the
node identifiers chosen by the caller into slots and validates that every component
only reads nodes which have already been produced: the order in which components are
added is therefore always a valid evaluation order.

Circuits are themselves executable components, so that a circuit can be added to a
builder as a single block of a larger circuit.
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
import inspect
import logging
from types import MappingProxyType
from typing import (
    Any,
    Concatenate,
    Generic,
    ParamSpec,
    Self,
    TypeVar,
    final,
)
from weakref import WeakValueDictionary

if __debug__:
    from typing_validation import validate

from .errors import (
    BuilderConsumedError,
    DuplicateInputError,
    DuplicateOutputError,
    ExecutionError,
    UndefinedInputError,
    UnresolvedOutputError,
)
from .memory import CircuitMemory
from .model import Executable, Memory, MemorySlot, Node, validate_nodes

logger = logging.getLogger(__name__)

V = TypeVar("V")
"""Invariant type variable for the values carried by wires."""

RecipeParams = ParamSpec("RecipeParams")
"""Parameter specification variable for the parameters of a recipe."""


def run_components(
    components: tuple[Executable[Any], ...], memory: Memory[Any]
) -> None:
    """
    Executes the given components in order on the given memory.

    :raises ExecutionError: wrapping the first failure, with its position.
    """
    for position, component in enumerate(components):
        try:
            component.execute(memory)
        except Exception as e:
            logger.debug("Component %d (%r) failed: %s", position, component, e)
            raise ExecutionError(position, component, e) from e


class CircuitRecipe(Generic[RecipeParams, V]):
    """
    A recipe to produce circuits from given parameters.

    Arguments are bound to the signature of the recipe function, with defaults
    applied, so that calls spelling the same arguments differently (positionally,
    by keyword, or omitting defaults) return the same cached circuit.
    Circuits produced by the recipe remember it, together with the arguments used,
    as :attr:`Circuit.recipe_used` and :attr:`Circuit.recipe_args`.
    """

    __circuits: WeakValueDictionary[tuple[Any, ...], Circuit[V]]
    __recipe: Callable[Concatenate[CircuitBuilder[V], RecipeParams], None]
    __params: tuple[inspect.Parameter, ...]

    __slots__ = ("__weakref__", "__circuits", "__recipe", "__params")

    def __new__(
        cls,
        recipe: Callable[Concatenate[CircuitBuilder[V], RecipeParams], None],
    ) -> Self:
        params = tuple(inspect.signature(recipe).parameters.values())
        if not params:
            raise TypeError(
                "A recipe must take the circuit builder as its first argument."
            )
        self = super().__new__(cls)
        self.__recipe = recipe
        self.__params = params[1:]
        self.__circuits = WeakValueDictionary()
        return self

    @property
    def name(self) -> str:
        """The name of this recipe."""
        return self.__recipe.__name__

    @property
    def num_cached(self) -> int:
        """Number of circuits currently cached by this recipe."""
        return len(self.__circuits)

    def bind(
        self, *args: RecipeParams.args, **kwargs: RecipeParams.kwargs
    ) -> Mapping[str, Any]:
        """
        Binds the given arguments to the parameters of the recipe,
        applying defaults, and returns them as a read-only mapping.

        :raises TypeError: if the arguments do not match the recipe's parameters.
        """
        signature = inspect.Signature(self.__params)
        bound = signature.bind(*args, **kwargs)
        bound.apply_defaults()
        return MappingProxyType(dict(bound.arguments))

    def __call__(
        self, *args: RecipeParams.args, **kwargs: RecipeParams.kwargs
    ) -> Circuit[V]:
        """
        Returns the circuit constructed by the recipe on given arguments.

        :raises TypeError: if the arguments are not hashable.
        :meta public:
        """
        bound = self.bind(*args, **kwargs)
        key = tuple(bound.items())
        try:
            circuit = self.__circuits.get(key)
        except TypeError as e:
            raise TypeError(
                f"Arguments to recipe {self.name!r} must be hashable: {dict(bound)!r}"
            ) from e
        if circuit is not None:
            return circuit
        builder: CircuitBuilder[V] = CircuitBuilder()
        self.__recipe(builder, *args, **kwargs)
        circuit = builder.build()
        circuit._Circuit__recipe_used = (self, bound)  # type: ignore[attr-defined]
        logger.debug("Recipe %s built %r", self.name, circuit)
        self.__circuits[key] = circuit
        return circuit

    def __repr__(self) -> str:
        recipe = self.__recipe
        return f"Circuit.recipe({recipe.__module__}.{recipe.__qualname__})"


@final
class Circuit(Executable[V]):
    """
    An immutable circuit, consisting of executable components over the slots of a
    private memory, together with boundary input and output nodes.

    The :attr:`inputs` and :attr:`outputs` of a circuit are node identifiers in the
    address space of whatever holds the circuit: for a freshly built circuit, these
    are the identifiers passed to its builder; for a circuit added as a component to
    a larger circuit, these are slots in the larger circuit.
    The corresponding slots in the circuit's own memory are :attr:`input_slots` and
    :attr:`output_slots`.
    """

    @staticmethod
    def from_recipe(recipe: Callable[[CircuitBuilder[V]], None]) -> Circuit[V]:
        """
        A function decorator to create a circuit from a circuit-building recipe.

        For example, the snippet below creates the :class:`Circuit` instance
        ``half_adder`` for a half-adder circuit:

        .. code-block:: python

            from simcircuit.lib.bincirc import and_, xor_

            @Circuit.from_recipe
            def half_adder(circ: CircuitBuilder[bool]) -> None:
                circ.add_inputs([0, 1])
                circ.add_component(xor_(0, 1, 2))
                circ.add_component(and_(0, 1, 3))
                circ.add_outputs([2, 3])

        """
        builder: CircuitBuilder[V] = CircuitBuilder()
        recipe(builder)
        return builder.build()

    @staticmethod
    def recipe(
        recipe: Callable[Concatenate[CircuitBuilder[V], RecipeParams], None],
    ) -> CircuitRecipe[RecipeParams, V]:
        """
        A function decorator to create a parametric circuit factory from a
        circuit-building recipe taking additional parameters.

        Note that the results of calls to recipes are automatically cached,
        and that the parameters are expected to be hashable.
        """
        return CircuitRecipe(recipe)

    @classmethod
    def _new(
        cls,
        components: tuple[Executable[V], ...],
        inputs: tuple[Node, ...],
        outputs: tuple[Node, ...],
        input_slots: tuple[MemorySlot, ...],
        output_slots: tuple[MemorySlot, ...],
        constants: MappingProxyType[MemorySlot, V],
        num_slots: int,
    ) -> Self:
        """Protected constructor."""
        self = super().__new__(cls)
        self.__components = components
        self.__inputs = inputs
        self.__outputs = outputs
        self.__input_slots = input_slots
        self.__output_slots = output_slots
        self.__constants = constants
        self.__num_slots = num_slots
        self.__recipe_used = None
        return self

    __components: tuple[Executable[V], ...]
    __inputs: tuple[Node, ...]
    __outputs: tuple[Node, ...]
    __input_slots: tuple[MemorySlot, ...]
    __output_slots: tuple[MemorySlot, ...]
    __constants: MappingProxyType[MemorySlot, V]
    __num_slots: int
    __recipe_used: tuple[CircuitRecipe[Any, V], Mapping[str, Any]] | None
    __hash_cache: int

    __slots__ = (
        "__components",
        "__inputs",
        "__outputs",
        "__input_slots",
        "__output_slots",
        "__constants",
        "__num_slots",
        "__recipe_used",
        "__hash_cache",
    )

    def __new__(cls) -> Self:
        raise TypeError("Circuits must be created with a CircuitBuilder.")

    @property
    def inputs(self) -> tuple[Node, ...]:
        return self.__inputs

    @property
    def outputs(self) -> tuple[Node, ...]:
        return self.__outputs

    @property
    def input_slots(self) -> tuple[MemorySlot, ...]:
        """Slots of the circuit's own memory for its boundary inputs."""
        return self.__input_slots

    @property
    def output_slots(self) -> tuple[MemorySlot, ...]:
        """Slots of the circuit's own memory for its boundary outputs."""
        return self.__output_slots

    @property
    def components(self) -> tuple[Executable[V], ...]:
        """Components of the circuit, in execution order."""
        return self.__components

    @property
    def num_components(self) -> int:
        """Number of components in the circuit."""
        return len(self.__components)

    @property
    def constants(self) -> Mapping[MemorySlot, V]:
        """Constant values, seeded into the given slots before execution."""
        return self.__constants

    @property
    def num_slots(self) -> int:
        """Number of slots in the circuit's own memory."""
        return self.__num_slots

    @property
    def subcircuits(self) -> tuple[Circuit[V], ...]:
        """Components of the circuit which are themselves circuits."""
        return tuple(c for c in self.__components if isinstance(c, Circuit))

    @property
    def is_flat(self) -> bool:
        """Whether the circuit is flat, i.e., it has no sub-circuits."""
        return not any(isinstance(c, Circuit) for c in self.__components)

    @property
    def depth(self) -> int:
        """Nesting depth of the circuit."""
        subcircuits = self.subcircuits
        if not subcircuits:
            return 0
        return 1 + max(circ.depth for circ in subcircuits)

    @property
    def recipe_used(self) -> CircuitRecipe[Any, V] | None:
        """The recipe which produced this circuit, if any."""
        if (used := self.__recipe_used) is None:
            return None
        return used[0]

    @property
    def recipe_args(self) -> Mapping[str, Any] | None:
        """The arguments passed to the recipe which produced this circuit, if any."""
        if (used := self.__recipe_used) is None:
            return None
        return used[1]

    def seed(self, memory: Memory[V]) -> None:
        """Writes the circuit's constants into the given memory."""
        for slot, value in self.__constants.items():
            memory.write(slot, value)

    def execute(self, memory: Memory[V]) -> None:
        """
        Executes the circuit as a component of a larger circuit:

        1. Creates a fresh private memory for the circuit.
        2. Copies the values of :attr:`inputs` from the given memory into
           :attr:`input_slots` of the private memory, then seeds the constants.
        3. Executes the components in order on the private memory.
        4. Copies the values of :attr:`output_slots` from the private memory
           into :attr:`outputs` of the given memory.

        :raises ExecutionError: if one of the components fails.
        """
        private: CircuitMemory[V] = CircuitMemory(self.__num_slots)
        for node, slot in zip(self.__inputs, self.__input_slots):
            private.write(slot, memory.read(node))
        self.seed(private)
        logger.debug("Executing nested %r", self)
        run_components(self.__components, private)
        for node, slot in zip(self.__outputs, self.__output_slots):
            memory.write(node, private.read(slot))

    def _rewire(self, inputs: tuple[Node, ...], outputs: tuple[Node, ...]) -> Self:
        circuit = self._new(
            self.__components,
            inputs,
            outputs,
            self.__input_slots,
            self.__output_slots,
            self.__constants,
            self.__num_slots,
        )
        circuit.__recipe_used = self.__recipe_used
        return circuit

    def __repr__(self) -> str:
        attrs: list[str] = []
        num_slots = self.__num_slots
        num_components = len(self.__components)
        num_constants = len(self.__constants)
        depth = self.depth
        if num_slots > 0:
            attrs.append(f"{num_slots} slot{'s' if num_slots!=1 else ''}")
        if num_components > 0:
            attrs.append(
                f"{num_components} component{'s' if num_components!=1 else ''}"
            )
        if num_constants > 0:
            attrs.append(f"{num_constants} constant{'s' if num_constants!=1 else ''}")
        if depth > 0:
            attrs.append(f"depth {depth}")
        attrs.append(f"{len(self.__inputs)} in")
        attrs.append(f"{len(self.__outputs)} out")
        if (used := self.__recipe_used) is not None:
            recipe, args = used
            call = ", ".join(f"{k}={v!r}" for k, v in args.items())
            attrs.append(f"from {recipe.name}({call})")
        return f"<Circuit {id(self):#x}: {', '.join(attrs)}>"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Circuit):
            return NotImplemented
        if self is other:
            return True
        return (
            self.__inputs == other.__inputs
            and self.__outputs == other.__outputs
            and self.__input_slots == other.__input_slots
            and self.__output_slots == other.__output_slots
            and self.__num_slots == other.__num_slots
            and dict(self.__constants) == dict(other.__constants)
            and self.__components == other.__components
        )

    def __hash__(self) -> int:
        try:
            return self.__hash_cache
        except AttributeError:
            self.__hash_cache = h = hash(
                (
                    Circuit,
                    self.__inputs,
                    self.__outputs,
                    self.__input_slots,
                    self.__output_slots,
                    self.__num_slots,
                    self.__components,
                )
            )
            return h


@final
class CircuitBuilder(Generic[V]):
    """
    Utility class to build circuits.

    Node identifiers passed to the builder can be arbitrary non-negative integers.
    Each identifier is assigned the next free slot the first time it is produced,
    i.e. when it is declared as a circuit input or constant, or as the output of a
    component. A node can only be produced once, and can only be read by components
    (or declared as a circuit output) after it has been produced.
    All methods are atomic: if an error is raised, the builder is left unchanged.
    """

    __slot_map: dict[Node, MemorySlot]
    __inputs: list[Node]
    __outputs: list[Node]
    __constants: dict[MemorySlot, V]
    __components: list[Executable[V]]
    __consumed: bool

    __slots__ = (
        "__weakref__",
        "__slot_map",
        "__inputs",
        "__outputs",
        "__constants",
        "__components",
        "__consumed",
    )

    def __new__(cls) -> Self:
        """
        Creates a blank circuit builder.

        :meta public:
        """
        self = super().__new__(cls)
        self.__slot_map = {}
        self.__inputs = []
        self.__outputs = []
        self.__constants = {}
        self.__components = []
        self.__consumed = False
        return self

    @property
    def slot_map(self) -> Mapping[Node, MemorySlot]:
        """Slots assigned to the nodes produced thus far."""
        return MappingProxyType(self.__slot_map)

    @property
    def inputs(self) -> tuple[Node, ...]:
        """Circuit input nodes declared thus far."""
        return tuple(self.__inputs)

    @property
    def outputs(self) -> tuple[Node, ...]:
        """Circuit output nodes declared thus far."""
        return tuple(self.__outputs)

    @property
    def num_slots(self) -> int:
        """Number of slots assigned thus far."""
        return len(self.__slot_map)

    @property
    def num_components(self) -> int:
        """Number of components added thus far."""
        return len(self.__components)

    @property
    def is_consumed(self) -> bool:
        """Whether :meth:`build` has already been called on this builder."""
        return self.__consumed

    def is_produced(self, node: Node) -> bool:
        """Whether the given node has been produced."""
        return node in self.__slot_map

    def add_inputs(self, nodes: Iterable[Node]) -> tuple[MemorySlot, ...]:
        """
        Declares the given nodes as circuit inputs, in order,
        and returns the slots assigned to them.

        :raises DuplicateInputError: if a node has already been produced.
        """
        nodes = tuple(nodes)
        assert validate(nodes, tuple[Node, ...])
        self._check_not_consumed()
        self._check_fresh(nodes, DuplicateInputError)
        self.__inputs.extend(nodes)
        return self._produce(nodes)

    def add_constants(self, values: Mapping[Node, V]) -> tuple[MemorySlot, ...]:
        """
        Declares the given nodes as constants with the given values, which are
        seeded into memory together with the circuit inputs,
        and returns the slots assigned to them.

        :raises DuplicateInputError: if a node has already been produced.
        """
        assert validate(values, Mapping[Node, Any])
        self._check_not_consumed()
        nodes = tuple(values)
        self._check_fresh(nodes, DuplicateInputError)
        slots = self._produce(nodes)
        self.__constants.update(zip(slots, values.values()))
        return slots

    def add_component(self, component: Executable[V]) -> tuple[MemorySlot, ...]:
        """
        Adds a component to the circuit, after all components added thus far,
        and returns the slots assigned to its outputs.

        Every output of the component must be a distinct node which has not yet
        been produced. A circuit which declares one of its inputs as an output, or
        declares the same output more than once, does not satisfy this as it stands:
        it must be added through :meth:`Circuit.rewire`, with fresh output nodes.

        :raises UndefinedInputError: if an input node has not been produced.
        :raises DuplicateOutputError: if an output node has already been produced,
                                      or appears more than once in the outputs.
        """
        assert validate(component, Executable)
        self._check_not_consumed()
        slot_map = self.__slot_map
        for node in component.inputs:
            if node not in slot_map:
                raise UndefinedInputError(node)
        self._check_fresh(component.outputs, DuplicateOutputError)
        in_slots = tuple(slot_map[node] for node in component.inputs)
        start = len(slot_map)
        out_slots = tuple(range(start, start + len(component.outputs)))
        rewired = component.rewire(in_slots, out_slots)
        self._produce(component.outputs)
        self.__components.append(rewired)
        return out_slots

    def add_outputs(self, nodes: Iterable[Node]) -> tuple[MemorySlot, ...]:
        """
        Declares the given nodes as circuit outputs, in order,
        and returns the slots assigned to them.

        :raises UnresolvedOutputError: if a node has not been produced.
        """
        nodes = tuple(nodes)
        assert validate(nodes, tuple[Node, ...])
        self._check_not_consumed()
        slot_map = self.__slot_map
        for node in nodes:
            if node not in slot_map:
                raise UnresolvedOutputError(node)
        self.__outputs.extend(nodes)
        return tuple(slot_map[node] for node in nodes)

    def build(self) -> Circuit[V]:
        """
        Returns the circuit built, consuming the builder.

        :raises BuilderConsumedError: if the builder has already been consumed.
        """
        self._check_not_consumed()
        self.__consumed = True
        slot_map = self.__slot_map
        inputs, outputs = tuple(self.__inputs), tuple(self.__outputs)
        circuit: Circuit[V] = Circuit._new(
            tuple(self.__components),
            inputs,
            outputs,
            tuple(slot_map[node] for node in inputs),
            tuple(slot_map[node] for node in outputs),
            MappingProxyType(dict(self.__constants)),
            len(slot_map),
        )
        logger.debug("Built %r", circuit)
        return circuit

    def _check_not_consumed(self) -> None:
        if self.__consumed:
            raise BuilderConsumedError()

    def _check_fresh(
        self,
        nodes: tuple[Node, ...],
        error: type[DuplicateInputError] | type[DuplicateOutputError],
    ) -> None:
        validate_nodes(nodes)
        slot_map = self.__slot_map
        seen: set[Node] = set()
        for node in nodes:
            if node in slot_map or node in seen:
                raise error(node)
            seen.add(node)

    def _produce(self, nodes: tuple[Node, ...]) -> tuple[MemorySlot, ...]:
        slot_map = self.__slot_map
        start = len(slot_map)
        slot_map.update(zip(nodes, range(start, start + len(nodes))))
        return tuple(range(start, len(slot_map)))

    def __repr__(self) -> str:
        attrs: list[str] = []
        num_slots = len(self.__slot_map)
        num_components = len(self.__components)
        if num_slots > 0:
            attrs.append(f"{num_slots} slot{'s' if num_slots!=1 else ''}")
        if num_components > 0:
            attrs.append(
                f"{num_components} component{'s' if num_components!=1 else ''}"
            )
        if self.__inputs:
            attrs.append(f"{len(self.__inputs)} in")
        if self.__outputs:
            attrs.append(f"{len(self.__outputs)} out")
        if self.__consumed:
            attrs.append("consumed")
        return f"<CircuitBuilder {id(self):#x}: {', '.join(attrs)}>"
