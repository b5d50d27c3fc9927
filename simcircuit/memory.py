"""
Fixed-capacity memory used as scratch storage when executing circuits.
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
from typing import Any, Final, Self, TypeVar, final

if __debug__:
    from typing_validation import validate

from .errors import OutOfBoundsError, UninitializedError
from .model import Memory, MemorySlot

_UNSET: Final[Any] = object()
"""Sentinel marking a slot which holds no value."""


V = TypeVar("V")


@final
class CircuitMemory(Memory[V]):
    """
    A memory of fixed capacity, with each slot either holding a value or empty.
    Any Python object (including :obj:`None`) can be stored as a value.
    """

    __values: list[Any]

    __slots__ = ("__values",)

    def __new__(cls, capacity: int) -> Self:
        """
        Creates an empty memory with the given number of slots.

        :meta public:
        """
        assert validate(capacity, int)
        if capacity < 0:
            raise ValueError("Memory capacity must be non-negative.")
        self = super().__new__(cls)
        self.__values = [_UNSET] * capacity
        return self

    @property
    def capacity(self) -> int:
        return len(self.__values)

    def read(self, slot: MemorySlot) -> V:
        value = self.__values[self._check_slot(slot)]
        if value is _UNSET:
            raise UninitializedError(slot)
        return value  # type: ignore[no-any-return]

    def write(self, slot: MemorySlot, value: V) -> None:
        self.__values[self._check_slot(slot)] = value

    def is_set(self, slot: MemorySlot) -> bool:
        """Whether the given slot holds a value."""
        return self.__values[self._check_slot(slot)] is not _UNSET

    def clear(self) -> None:
        """Empties all slots."""
        values = self.__values
        values[:] = [_UNSET] * len(values)

    def _check_slot(self, slot: MemorySlot) -> MemorySlot:
        if slot not in range(len(self.__values)):
            raise OutOfBoundsError(slot, len(self.__values))
        return slot

    def __len__(self) -> int:
        return len(self.__values)

    def __repr__(self) -> str:
        capacity = len(self.__values)
        num_set = sum(value is not _UNSET for value in self.__values)
        return f"<CircuitMemory {id(self):#x}: {num_set}/{capacity} slots set>"
