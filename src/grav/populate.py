# MIT License (see LICENSE)
"""
Initial population seeding.

Each seeded entity gets a random position at a distance in
[min_position, max_position) from the origin, a random velocity with a
speed in [min_speed, max_speed), the configured mass and sphere radius, and
a charge picked cyclically from ``charges`` (0, -1, +1 by default).
"""
from __future__ import annotations
import logging

import numpy as np

from .config import PopulationSettings
from .ecs import Entity, World
from .types import (
    Charge,
    Collisions,
    Dynamics,
    Forces,
    Lifetime,
    Mass,
    Orientation,
    Physicality,
    Sphere,
)
from .util import random_vector, zeros

logger = logging.getLogger(__name__)


def populate(world: World, settings: PopulationSettings, rng: np.random.Generator | None = None) -> list[Entity]:
    """
    Create ``settings.count`` live entities.

    Args:
        world: World to seed.
        settings: Seeding ranges and per-entity values.
        rng: Random generator (default: ``np.random.default_rng(settings.seed)``).

    Returns:
        The created entities, in creation order.
    """
    if rng is None:
        rng = np.random.default_rng(settings.seed)
    logger.info("Creating %d entities...", settings.count)
    charges = settings.charges
    created = []
    for i in range(settings.count):
        components = [
            Charge(charges[i % len(charges)]),
            Collisions(),
            Dynamics(
                acceleration=zeros(),
                position=random_vector(rng, settings.min_position, settings.max_position),
                velocity=random_vector(rng, settings.min_speed, settings.max_speed),
            ),
            Forces(),
            Lifetime(),
            Mass(settings.mass),
            Physicality(shape=Sphere(settings.radius), collisions_enabled=True),
        ]
        if settings.orientation:
            components.append(Orientation(angular_position=random_vector(rng, 1.0, 1.0)))
        created.append(world.create(*components))
    logger.debug("Created %d entities, %d live.", len(created), len(world))
    return created
