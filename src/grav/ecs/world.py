# MIT License (see LICENSE)
"""
The entity world: allocation, component tables and joins.

Slots move through these states:

    free ──create()──────────────────────────▶ live
    free ──build_entity()──▶ reserved ──maintain()──▶ live
    live ──delete()──▶ dying ──maintain()──▶ free (generation + 1)

Reserved entities have an identifier but no visible components until the
next maintain. Dying entities still hold their components but are skipped
by joins and ``get`` unless the caller passes ``include_dying=True``.
"""
from __future__ import annotations
import logging
from collections import deque
from threading import Lock
from typing import Any, Iterator, TypeVar

import numpy as np

from ..exceptions import DeadEntityError
from .commands import (
    CommandBuffer,
    CreateEntity,
    DeleteEntity,
    InsertComponent,
    RemoveComponent,
)
from .entity import Entity
from .storage import ComponentTable

T = TypeVar("T")

logger = logging.getLogger(__name__)


class World:
    """
    Struct-of-arrays entity store.

    Usage:
        world = World()
        e = world.create(Dynamics(), Mass(1.0))
        for entity, (dyn, mass) in world.join(Dynamics, Mass):
            ...
        world.delete(e)      # queued
        world.maintain()     # applied
    """

    def __init__(self, capacity: int = 64) -> None:
        capacity = max(1, capacity)
        self._generations: list[int] = [0] * capacity
        self._live = np.zeros(capacity, dtype=bool)
        self._dying = np.zeros(capacity, dtype=bool)
        self._reserved = np.zeros(capacity, dtype=bool)
        self._free: deque[int] = deque(range(capacity))
        self._tables: dict[type, ComponentTable] = {}
        self._lock = Lock()
        self.commands = CommandBuffer()

    # ------------------------------------------------------------------
    # Allocation
    # ------------------------------------------------------------------

    @property
    def capacity(self) -> int:
        return len(self._generations)

    def _grow(self) -> None:
        old = self.capacity
        new = old * 2
        self._generations.extend([0] * (new - old))
        pad = np.zeros(new - old, dtype=bool)
        self._live = np.concatenate([self._live, pad])
        self._dying = np.concatenate([self._dying, pad])
        self._reserved = np.concatenate([self._reserved, pad])
        self._free.extend(range(old, new))
        for table in self._tables.values():
            table.grow(new)

    def _allocate(self) -> Entity:
        with self._lock:
            if not self._free:
                self._grow()
            index = self._free.popleft()
            return Entity(index, self._generations[index])

    def create(self, *components: Any) -> Entity:
        """
        Create a live entity immediately, with the given components.

        Only call this outside of a running tick (seeding, tests); systems
        use build_entity so joins in progress are not disturbed.
        """
        entity = self._allocate()
        self._live[entity.index] = True
        for component in components:
            self.insert(entity, component)
        return entity

    def build_entity(self, *components: Any) -> Entity:
        """
        Reserve an entity now and attach ``components`` at the next maintain.
        """
        entity = self._allocate()
        self._reserved[entity.index] = True
        self.commands.push(CreateEntity(entity, tuple(components)))
        return entity

    def delete(self, entity: Entity) -> None:
        """
        Queue ``entity`` for deletion at the next maintain.

        The entity stops appearing in joins immediately. Deleting a dead,
        stale or already-dying entity is a no-op.
        """
        if not self._valid(entity) or self._dying[entity.index]:
            return
        if not (self._live[entity.index] or self._reserved[entity.index]):
            return
        self._dying[entity.index] = True
        self.commands.push(DeleteEntity(entity))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _valid(self, entity: Entity) -> bool:
        return (
            0 <= entity.index < self.capacity
            and self._generations[entity.index] == entity.generation
        )

    def is_alive(self, entity: Entity) -> bool:
        """True for live entities that are not queued for deletion."""
        return (
            self._valid(entity)
            and bool(self._live[entity.index])
            and not bool(self._dying[entity.index])
        )

    def is_dying(self, entity: Entity) -> bool:
        return self._valid(entity) and bool(self._dying[entity.index])

    def __len__(self) -> int:
        return int(np.count_nonzero(self._live & ~self._dying))

    def entities(self, include_dying: bool = False) -> list[Entity]:
        """All live entities in slot order."""
        mask = self._live if include_dying else self._live & ~self._dying
        return [Entity(int(i), self._generations[i]) for i in np.flatnonzero(mask)]

    def _table_for_insert(self, component_type: type[T]) -> ComponentTable[T]:
        table = self._tables.get(component_type)
        if table is None:
            with self._lock:
                table = self._tables.get(component_type)
                if table is None:
                    table = ComponentTable(component_type, self.capacity)
                    self._tables[component_type] = table
        return table

    def get(self, entity: Entity, component_type: type[T], include_dying: bool = False) -> T | None:
        """
        Component of ``entity``, or None if absent, dead, stale or dying.
        """
        if not self._valid(entity) or not self._live[entity.index]:
            return None
        if self._dying[entity.index] and not include_dying:
            return None
        table = self._tables.get(component_type)
        if table is None:
            return None
        return table.get(entity.index)

    def has(self, entity: Entity, component_type: type) -> bool:
        return self.get(entity, component_type) is not None

    def join(self, *component_types: type, include_dying: bool = False) -> Iterator[tuple[Entity, tuple[Any, ...]]]:
        """
        Iterate entities holding every requested component type.

        Yields ``(entity, (component, ...))`` in ascending slot order. The
        set of entities is fixed when iteration starts; entities reserved or
        queued for deletion during iteration do not change it.
        """
        tables = []
        with self._lock:
            mask = self._live.copy()
            if not include_dying:
                mask &= ~self._dying
            for component_type in component_types:
                table = self._tables.get(component_type)
                if table is None:
                    return
                mask &= table.mask[: len(mask)]
                tables.append(table)
        for i in np.flatnonzero(mask):
            index = int(i)
            entity = Entity(index, self._generations[index])
            yield entity, tuple(t.get(index) for t in tables)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def insert(self, entity: Entity, component: Any) -> None:
        """
        Attach (or replace) a component on a live entity right away.

        Raises:
            DeadEntityError: The entity is dead, stale or only reserved.
        """
        if not self._valid(entity) or not self._live[entity.index]:
            raise DeadEntityError(f"cannot insert {type(component).__name__} into dead entity {entity}")
        self._table_for_insert(type(component)).insert(entity.index, component)

    def insert_later(self, entity: Entity, component: Any) -> None:
        """Queue a component insert for the next maintain."""
        self.commands.push(InsertComponent(entity, component))

    def remove(self, entity: Entity, component_type: type[T]) -> T | None:
        """Detach and return a component (None if absent)."""
        if not self._valid(entity):
            return None
        table = self._tables.get(component_type)
        if table is None:
            return None
        return table.remove(entity.index)

    def remove_later(self, entity: Entity, component_type: type) -> None:
        self.commands.push(RemoveComponent(entity, component_type))

    def _free_slot(self, entity: Entity) -> None:
        index = entity.index
        for table in self._tables.values():
            table.remove(index)
        self._live[index] = False
        self._dying[index] = False
        self._reserved[index] = False
        self._generations[index] += 1
        self._free.append(index)

    def maintain(self) -> tuple[int, int]:
        """
        Apply every queued command, in order.

        Returns:
            Tuple (created, deleted) with the number of entities made live
            and freed.
        """
        created = deleted = 0
        for command in self.commands.drain():
            entity = command.entity
            if isinstance(command, CreateEntity):
                if not self._valid(entity) or not self._reserved[entity.index]:
                    continue
                self._reserved[entity.index] = False
                self._live[entity.index] = True
                for component in command.components:
                    self.insert(entity, component)
                created += 1
            elif isinstance(command, DeleteEntity):
                if self._valid(entity) and (self._live[entity.index] or self._reserved[entity.index]):
                    self._free_slot(entity)
                    deleted += 1
            elif isinstance(command, InsertComponent):
                if self._valid(entity) and self._live[entity.index]:
                    self.insert(entity, command.component)
            elif isinstance(command, RemoveComponent):
                self.remove(entity, command.component_type)
        if created or deleted:
            logger.debug("Maintain: %d created, %d deleted, %d live.", created, deleted, len(self))
        return created, deleted
