# MIT License (see LICENSE)
"""
Dense, slot-indexed component storage.

Each component type gets one ComponentTable: a list of values indexed by
entity slot plus a boolean presence mask. Joining several tables is a
logical AND of their masks (see World.join), which keeps iteration order
stable (ascending slot) and cheap to compute with numpy.
"""
from __future__ import annotations
from typing import Generic, TypeVar

import numpy as np

T = TypeVar("T")


class ComponentTable(Generic[T]):
    """
    Storage for a single component type.

    Attributes:
        component_type: The dataclass stored in this table.
        mask: Presence mask, ``mask[i]`` is True when slot i holds a value.
    """

    def __init__(self, component_type: type[T], capacity: int) -> None:
        self.component_type = component_type
        self._data: list[T | None] = [None] * capacity
        self.mask = np.zeros(capacity, dtype=bool)

    @property
    def capacity(self) -> int:
        return len(self._data)

    def grow(self, capacity: int) -> None:
        """Extend storage to at least ``capacity`` slots."""
        extra = capacity - len(self._data)
        if extra <= 0:
            return
        self._data.extend([None] * extra)
        self.mask = np.concatenate([self.mask, np.zeros(extra, dtype=bool)])

    def insert(self, index: int, value: T) -> None:
        if not isinstance(value, self.component_type):
            raise TypeError(
                f"{type(value).__name__} stored in {self.component_type.__name__} table"
            )
        self._data[index] = value
        self.mask[index] = True

    def remove(self, index: int) -> T | None:
        if index >= len(self._data) or not self.mask[index]:
            return None
        value = self._data[index]
        self._data[index] = None
        self.mask[index] = False
        return value

    def get(self, index: int) -> T | None:
        if index >= len(self._data) or not self.mask[index]:
            return None
        return self._data[index]

    def __contains__(self, index: int) -> bool:
        return index < len(self._data) and bool(self.mask[index])

    def __len__(self) -> int:
        return int(np.count_nonzero(self.mask))
