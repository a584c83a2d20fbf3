# MIT License (see LICENSE)
"""
Collision resolution by merging.

Every entity with pending collisions absorbs its still-present partners into
one new spherical entity:

    charge   = Σ charges
    mass     = Σ masses
    position = iterative midpoint: x ← x + (x_partner - x) / 2 per partner
    velocity = Σ velocities
    radius   = Σ radius / 2

The midpoint is not mass weighted and the velocities are summed rather than
momentum-averaged, so only mass and charge are conserved exactly. Entities
are processed in join order; a partner already absorbed earlier in the same
tick is skipped.

The originals are deleted and the merged entity is built through the
command buffer, so nothing changes for other stages until maintain.
"""
from __future__ import annotations
import logging

from ..context import SimulationContext
from ..ecs import Entity, World
from ..logging_config import TRACE
from ..types import (
    Charge,
    Collisions,
    Dynamics,
    Forces,
    Lifetime,
    Mass,
    Physicality,
    Sphere,
    sphere_radius,
)
from ..util import zeros

logger = logging.getLogger(__name__)


def merge_into(world: World, entity: Entity, partners: list[Entity]) -> Entity:
    """
    Delete ``entity`` and ``partners`` and build their merged replacement.

    Returns:
        The (reserved) merged entity; it becomes live at the next maintain.
    """
    charge = world.get(entity, Charge)
    mass = world.get(entity, Mass)
    dyn = world.get(entity, Dynamics)
    phys = world.get(entity, Physicality)

    new_charge = charge.value if charge else 0.0
    new_mass = mass.value if mass else 0.0
    new_position = dyn.position.copy() if dyn else zeros()
    new_velocity = dyn.velocity.copy() if dyn else zeros()
    new_radius = sphere_radius(phys.shape if phys else None) / 2.0

    for other in partners:
        other_charge = world.get(other, Charge)
        if other_charge is not None:
            new_charge += other_charge.value
        other_dyn = world.get(other, Dynamics)
        if other_dyn is not None:
            new_position += (other_dyn.position - new_position) / 2.0
            new_velocity += other_dyn.velocity
        other_mass = world.get(other, Mass)
        if other_mass is not None:
            new_mass += other_mass.value
        other_phys = world.get(other, Physicality)
        if other_phys is not None:
            new_radius += sphere_radius(other_phys.shape) / 2.0
        world.delete(other)
    world.delete(entity)

    if logger.isEnabledFor(TRACE):
        logger.log(
            TRACE, "Merged %s with %s: charge=%g mass=%g position=%s velocity=%s radius=%g",
            entity, ", ".join(str(p) for p in partners),
            new_charge, new_mass, new_position, new_velocity, new_radius,
        )

    return world.build_entity(
        Charge(new_charge),
        Collisions(),
        Dynamics(position=new_position, velocity=new_velocity),
        Forces(),
        Lifetime(),
        Mass(new_mass),
        Physicality(shape=Sphere(new_radius), collisions_enabled=True),
    )


def resolve_collisions(world: World, ctx: SimulationContext) -> int:
    """
    Merge every group of colliding entities.

    Returns:
        Number of merged entities built.
    """
    logger.debug("Handling collisions...")
    merged = 0
    for entity, (collisions,) in world.join(Collisions):
        if not collisions.entities or not world.is_alive(entity):
            continue
        partners = [p for p in collisions.entities if world.is_alive(p)]
        if not partners:
            continue
        merge_into(world, entity, partners)
        merged += 1
    if merged:
        logger.debug("Built %d merged entities.", merged)
    return merged
