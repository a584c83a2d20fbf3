# MIT License (see LICENSE)
"""
Entity/component storage.

This subpackage provides:
    - Entity: Generation-checked entity handle.
    - ComponentTable: Dense slot-indexed storage for one component type.
    - World: Allocation, joins and the deferred command buffer.

Typical usage:
    from grav.ecs import World
    from grav.types import Dynamics, Mass

    world = World()
    world.create(Dynamics(position=(1, 0, 0)), Mass(2.0))
    for entity, (dyn, mass) in world.join(Dynamics, Mass):
        ...
"""
from .commands import CommandBuffer
from .entity import Entity
from .storage import ComponentTable
from .world import World

__all__ = [
    "CommandBuffer",
    "ComponentTable",
    "Entity",
    "World",
]
