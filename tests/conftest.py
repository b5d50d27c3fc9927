from collections.abc import Callable, Iterable
from typing import Any

import pytest

from simcircuit import Executable, Memory


class RecordingComponent(Executable[Any]):
    """
    Test component which appends its name to a shared log when executed,
    then writes ``func(*inputs)`` to each of its outputs.
    """

    def __init__(
        self,
        name: str,
        inputs: Iterable[int],
        outputs: Iterable[int],
        log: list[str],
        func: Callable[..., Any] | None = None,
    ) -> None:
        self.name = name
        self._inputs = tuple(inputs)
        self._outputs = tuple(outputs)
        self.log = log
        self.func = func

    @property
    def inputs(self) -> tuple[int, ...]:
        return self._inputs

    @property
    def outputs(self) -> tuple[int, ...]:
        return self._outputs

    def execute(self, memory: Memory[Any]) -> None:
        self.log.append(self.name)
        args = [memory.read(node) for node in self._inputs]
        value = self.func(*args) if self.func is not None else None
        for node in self._outputs:
            memory.write(node, value)

    def _rewire(self, inputs: tuple[int, ...], outputs: tuple[int, ...]) -> Any:
        return type(self)(self.name, inputs, outputs, self.log, self.func)


@pytest.fixture
def call_log() -> list[str]:
    return []


@pytest.fixture
def recorder(call_log: list[str]) -> Callable[..., RecordingComponent]:
    def make(
        name: str,
        inputs: Iterable[int],
        outputs: Iterable[int],
        func: Callable[..., Any] | None = None,
    ) -> RecordingComponent:
        return RecordingComponent(name, inputs, outputs, call_log, func)

    return make


@pytest.fixture
def component_class() -> type[RecordingComponent]:
    return RecordingComponent
