# MIT License (see LICENSE)
"""
Entity aging and lifetime-driven splitting.

Every tick each entity's Lifetime grows by one. Once an entity is older than
``min_lifetime`` it splits into two daughters when it is also older than
``max_lifetime`` or older than its mass-scaled threshold:

    threshold = max_lifetime / floor(|m| / 10)    if |m| >= 10
    threshold = max_lifetime                      otherwise

so heavier entities divide sooner.

Daughters share the parent's mass equally. A whole-number charge is split
with floor/ceil, a fractional one is halved exactly, and an uncharged parent
yields a -1/+1 pair. They are displaced by ±separation_multiplier·radius
on every axis (a scalar offset, not a direction) and move with
±velocity_multiplier times the parent's velocity.
"""
from __future__ import annotations
import logging
import math

from ..constants import SPLIT_MASS_UNIT
from ..context import SimulationContext, SplittingSettings
from ..ecs import Entity, World
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


def advance_lifetimes(world: World, ctx: SimulationContext) -> None:
    """Age every entity by one tick."""
    logger.debug("Updating entity lifetimes...")
    for _, (lifetime,) in world.join(Lifetime):
        lifetime.steps += 1


def split_threshold(mass: float, settings: SplittingSettings) -> float:
    """Lifetime above which an entity of the given mass splits."""
    threshold = float(settings.max_lifetime)
    units = math.floor(abs(mass) / SPLIT_MASS_UNIT)
    if units >= 1:
        threshold /= units
    return threshold


def should_split(lifetime: int, mass: float, settings: SplittingSettings) -> bool:
    if lifetime <= settings.min_lifetime:
        return False
    return lifetime > settings.max_lifetime or lifetime > split_threshold(mass, settings)


def split_entity(world: World, entity: Entity, settings: SplittingSettings) -> tuple[Entity, Entity]:
    """
    Delete ``entity`` and build its two daughters.

    Returns:
        The two (reserved) daughter entities.
    """
    mass_c = world.get(entity, Mass)
    charge_c = world.get(entity, Charge)
    dyn = world.get(entity, Dynamics)
    phys = world.get(entity, Physicality)

    mass = mass_c.value if mass_c else 1.0
    charge = charge_c.value if charge_c else 0.0
    radius = sphere_radius(phys.shape if phys else None, default=1.0)
    position = dyn.position if dyn is not None else zeros()
    velocity = dyn.velocity if dyn is not None else zeros()

    if charge == 0.0:
        charges = (-1.0, 1.0)
    elif not float(charge).is_integer():
        charges = (charge / 2.0, charge / 2.0)
    else:
        charges = (float(math.floor(charge / 2.0)), float(math.ceil(charge / 2.0)))

    offset = settings.separation_multiplier * radius
    daughter_velocity = velocity * settings.velocity_multiplier

    daughters = []
    for sign, daughter_charge in zip((1.0, -1.0), charges):
        daughters.append(world.build_entity(
            Charge(daughter_charge),
            Collisions(),
            Dynamics(
                position=position + sign * offset,
                velocity=sign * daughter_velocity,
            ),
            Forces(),
            Lifetime(),
            Mass(mass / 2.0),
            Physicality(shape=Sphere(radius), collisions_enabled=True),
        ))
    world.delete(entity)
    logger.debug("Split %s into %s and %s.", entity, daughters[0], daughters[1])
    return daughters[0], daughters[1]


def split_entities(world: World, ctx: SimulationContext) -> int:
    """
    Split every entity whose lifetime has run out.

    Returns:
        Number of parents split.
    """
    logger.debug("Handling entity splitting...")
    settings = ctx.splitting
    splits = 0
    for entity, (lifetime,) in world.join(Lifetime):
        mass = world.get(entity, Mass)
        if should_split(lifetime.steps, mass.value if mass else 1.0, settings):
            split_entity(world, entity, settings)
            splits += 1
    return splits
