# MIT License (see LICENSE)
"""
Pairwise collision detection.

Every unordered pair of collision-enabled entities is tested (O(N²), no
broadphase). The distance between centers is checked against the context's
thresholds first; only pairs in between fall through to a shape test
dispatched on the (ShapeKind, ShapeKind) pair:

    distance >= max_threshold   → SEPARATE (never tested)
    distance <  min_threshold   → COLLIDE  (unconditionally)
    sphere / sphere             → COLLIDE iff distance <= r1 + r2
    sphere / point              → COLLIDE iff distance <= r
    point / point               → SEPARATE
    anything with a cuboid      → UNSUPPORTED (treated as no collision)

Colliding entities record each other in their Collisions components.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum

from ..context import CollisionLimits, SimulationContext
from ..ecs import World
from ..logging_config import TRACE
from ..types import Collisions, Dynamics, Physicality, Shape, ShapeKind
from ..util import norm

logger = logging.getLogger(__name__)


class CollisionOutcome(Enum):
    COLLIDE = "collide"
    SEPARATE = "separate"
    UNSUPPORTED = "unsupported"


@dataclass
class DetectionStats:
    """Counts gathered during one detection pass."""
    pairs_tested: int = 0
    collisions: int = 0
    unsupported: int = 0


def shape_test(a: Shape, b: Shape, distance: float) -> CollisionOutcome:
    """
    Narrow test for two shapes whose centers are ``distance`` apart.
    """
    kinds = (a.kind, b.kind)
    if ShapeKind.CUBOID in kinds:
        # Cuboid narrowphase does not exist yet.
        return CollisionOutcome.UNSUPPORTED
    if kinds == (ShapeKind.SPHERE, ShapeKind.SPHERE):
        hit = distance - (a.radius + b.radius) <= 0.0
    elif kinds == (ShapeKind.SPHERE, ShapeKind.POINT):
        hit = distance - a.radius <= 0.0
    elif kinds == (ShapeKind.POINT, ShapeKind.SPHERE):
        hit = distance - b.radius <= 0.0
    else:
        # Two points only meet below min_threshold.
        hit = False
    return CollisionOutcome.COLLIDE if hit else CollisionOutcome.SEPARATE


def classify_pair(a: Shape, b: Shape, distance: float, limits: CollisionLimits) -> CollisionOutcome:
    """Apply the distance thresholds, then the shape test."""
    if distance >= limits.max_threshold:
        return CollisionOutcome.SEPARATE
    if distance < limits.min_threshold:
        return CollisionOutcome.COLLIDE
    return shape_test(a, b, distance)


def clear_collisions(world: World, ctx: SimulationContext) -> None:
    """Forget the collisions recorded during the previous tick."""
    logger.debug("Clearing collisions...")
    for _, (collisions,) in world.join(Collisions):
        collisions.entities = []


def detect_collisions(world: World, ctx: SimulationContext) -> DetectionStats:
    """
    Record every colliding pair in both entities' Collisions components.

    Requires Dynamics, Physicality and Collisions; entities with
    ``collisions_enabled`` False are ignored.
    """
    logger.debug("Detecting collisions...")
    limits = ctx.collision_limits
    tracing = logger.isEnabledFor(TRACE)
    stats = DetectionStats()

    bodies = [
        (entity, dyn, phys, coll)
        for entity, (dyn, phys, coll) in world.join(Dynamics, Physicality, Collisions)
        if phys.collisions_enabled
    ]
    n = len(bodies)
    for a in range(n):
        ei, di, pi, ci = bodies[a]
        for b in range(a + 1, n):
            ej, dj, pj, cj = bodies[b]
            if ej in ci.entities:
                continue
            stats.pairs_tested += 1
            distance = norm(dj.position - di.position)
            outcome = classify_pair(pi.shape, pj.shape, distance, limits)
            if outcome is CollisionOutcome.COLLIDE:
                if tracing:
                    logger.log(
                        TRACE, "%s-%s collision: %s <-> %s (distance %g)",
                        pi.shape.kind.value, pj.shape.kind.value, ei, ej, distance,
                    )
                ci.entities.append(ej)
                cj.entities.append(ei)
                stats.collisions += 1
            elif outcome is CollisionOutcome.UNSUPPORTED:
                stats.unsupported += 1

    if stats.unsupported:
        logger.debug("%d pair(s) skipped: cuboid collisions are not supported.", stats.unsupported)
    return stats
