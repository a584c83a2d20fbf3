# MIT License (see LICENSE)
"""
Deferred world mutations.

Systems never create or destroy entities in place while a join is being
iterated. They queue intents on the world's CommandBuffer instead, and the
scheduler applies the whole buffer once per tick (World.maintain).
"""
from __future__ import annotations
from dataclasses import dataclass
from threading import Lock
from typing import Any

from .entity import Entity


@dataclass(frozen=True)
class CreateEntity:
    """Attach ``components`` to a reserved entity and make it live."""
    entity: Entity
    components: tuple[Any, ...]


@dataclass(frozen=True)
class InsertComponent:
    entity: Entity
    component: Any


@dataclass(frozen=True)
class RemoveComponent:
    entity: Entity
    component_type: type


@dataclass(frozen=True)
class DeleteEntity:
    entity: Entity


Command = CreateEntity | InsertComponent | RemoveComponent | DeleteEntity


class CommandBuffer:
    """
    Ordered, thread-safe queue of pending world mutations.

    Commands are applied in the order they were pushed.
    """

    def __init__(self) -> None:
        self._commands: list[Command] = []
        self._lock = Lock()

    def push(self, command: Command) -> None:
        with self._lock:
            self._commands.append(command)

    def drain(self) -> list[Command]:
        """Remove and return every queued command."""
        with self._lock:
            commands, self._commands = self._commands, []
        return commands

    def __len__(self) -> int:
        with self._lock:
            return len(self._commands)
