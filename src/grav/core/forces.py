# MIT License (see LICENSE)
"""
Pairwise force systems.

Each system walks every unordered pair of entities carrying the components
it needs and stores the pair's force in both entities' force maps:

    Forces[i]["<kind>:<j>"] =  F
    Forces[j]["<kind>:<i>"] = -F      (Newton's third law)

so every pair is evaluated once per interaction per tick. Systems for
different interactions write different keys and may run concurrently.

Key concepts:
- Gravity:        F = G·m_i·m_j / r²   (attractive)
- Electrostatics: F = -k·q_i·q_j / r²  (like charges repel)
- Both are O(N²); there is no spatial acceleration structure.
- Pairs closer than DISTANCE_EPS are skipped instead of producing inf/NaN.
"""
from __future__ import annotations
import logging
from typing import Callable

from ..constants import DISTANCE_EPS, ELECTROSTATICS, GRAVITY
from ..context import SimulationContext
from ..ecs import World
from ..logging_config import TRACE
from ..types import Charge, Dynamics, Forces, Mass, force_key
from ..util import norm, zeros

logger = logging.getLogger(__name__)


def clear_forces(world: World, ctx: SimulationContext) -> None:
    """Drop every force contribution left over from the previous tick."""
    logger.debug("Clearing forces...")
    for _, (forces,) in world.join(Forces):
        forces.contributions = {}


def _apply_pairwise(
    world: World,
    interaction: str,
    value_type: type,
    coupling: Callable[[float, float], float],
) -> int:
    """
    Evaluate an inverse-square interaction over all unordered pairs.

    Args:
        world: Entity world.
        interaction: Name used in force keys.
        value_type: Component (Mass or Charge) whose ``value`` feeds the coupling.
        coupling: Maps the two values to the signed force magnitude along the
                  direction from i to j (positive = attractive).

    Returns:
        Number of pairs for which a force was stored.
    """
    bodies = list(world.join(Dynamics, value_type, Forces))
    tracing = logger.isEnabledFor(TRACE)
    computed = 0
    n = len(bodies)
    for a in range(n):
        ei, (di, vi, fi) = bodies[a]
        for b in range(a + 1, n):
            ej, (dj, vj, fj) = bodies[b]
            key_ij = force_key(interaction, ej)
            if key_ij in fi.contributions:
                continue
            d = dj.position - di.position
            r = norm(d)
            if r < DISTANCE_EPS:
                if tracing:
                    logger.log(TRACE, "Coincident pair %s <-> %s skipped (%s).", ei, ej, interaction)
                continue
            f = d * (coupling(vi.value, vj.value) / (r * r * r))
            if tracing:
                logger.log(TRACE, "%s force %s <-> %s: %s", interaction, ei, ej, f)
            fi.contributions[key_ij] = f
            fj.contributions[force_key(interaction, ei)] = -f
            computed += 1
    return computed


def apply_gravity(world: World, ctx: SimulationContext) -> int:
    """
    Newtonian gravity between every pair of massive entities.

    Implements F = G·m_i·m_j / r², directed from i toward j.
    Requires Dynamics, Mass and Forces.
    """
    logger.debug("Computing newtonian gravitational interactions...")
    g = ctx.gravitational_constant
    return _apply_pairwise(world, GRAVITY, Mass, lambda mi, mj: g * mi * mj)


def apply_electrostatics(world: World, ctx: SimulationContext) -> int:
    """
    Coulomb interaction between every pair of charged entities.

    Implements F = -k·q_i·q_j / r² along the i→j direction, so opposite
    charges attract and like charges repel. Requires Dynamics, Charge and
    Forces.
    """
    logger.debug("Computing electrostatic interactions...")
    k = ctx.electrostatic_constant
    return _apply_pairwise(world, ELECTROSTATICS, Charge, lambda qi, qj: -k * qi * qj)


def aggregate_forces(world: World, ctx: SimulationContext) -> None:
    """
    Turn each entity's force map into its acceleration: a = ΣF / m.

    Acceleration is overwritten, never accumulated. Zero-mass entities get a
    zero acceleration.
    """
    logger.debug("Computing net forces and acceleration...")
    tracing = logger.isEnabledFor(TRACE)
    for entity, (forces, mass, dyn) in world.join(Forces, Mass, Dynamics):
        if mass.value == 0.0:
            logger.debug("Entity %s has zero mass; acceleration left at zero.", entity)
            dyn.acceleration = zeros()
            continue
        net = forces.net()
        dyn.acceleration = net / mass.value
        if tracing:
            logger.log(TRACE, "Entity %s net force %s, acceleration %s", entity, net, dyn.acceleration)
