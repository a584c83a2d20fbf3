# MIT License (see LICENSE)
"""
Entity identifiers.

An entity is a slot index plus the generation of that slot at the time the
entity was allocated. When a slot is freed its generation is bumped, so any
handle still pointing at the old generation becomes stale and is rejected by
the world instead of silently aliasing the slot's next occupant.
"""
from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Entity:
    """
    Opaque, hashable entity handle.

    Attributes:
        index: Slot in the world's component tables.
        generation: Slot generation this handle was issued for.
    """
    index: int
    generation: int = 0

    def __str__(self) -> str:
        return f"{self.index}.{self.generation}"
