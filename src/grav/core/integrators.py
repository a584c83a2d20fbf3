# MIT License (see LICENSE)
"""
Time stepping for linear and angular dynamics.

Both integrators are semi-implicit Euler with magnitude clamps:

    a  ← clamp(a, a_min, a_max)
    v  ← clamp(v + a·dt, v_min, v_max)
    x  ← clamp(x + v·dt, x_min, x_max)

The position clamp doubles as the edge of the universe; what happens to the
velocity there is chosen by SimulationContext.boundary_mode.

Reference:
    Semi-implicit Euler: https://en.wikipedia.org/wiki/Semi-implicit_Euler_method
"""
from __future__ import annotations
import logging

from ..context import BoundaryMode, SimulationContext
from ..ecs import World
from ..logging_config import TRACE
from ..types import Dynamics, Orientation
from ..util import clamp_magnitude, direction, norm

logger = logging.getLogger(__name__)


def step_dynamics(dyn: Dynamics, ctx: SimulationContext) -> None:
    """
    Advance one entity's Dynamics by ctx.dt in place.

    Args:
        dyn: Dynamics component (acceleration already computed this tick).
        ctx: Simulation context supplying dt, limits and boundary mode.
    """
    limits = ctx.dynamics_limits
    dt = ctx.dt

    dyn.acceleration = clamp_magnitude(dyn.acceleration, limits.min_acceleration, limits.max_acceleration)
    dyn.velocity = clamp_magnitude(
        dyn.velocity + dyn.acceleration * dt, limits.min_velocity, limits.max_velocity
    )
    position = dyn.position + dyn.velocity * dt
    overshoot = norm(position) > limits.max_position
    dyn.position = clamp_magnitude(position, limits.min_position, limits.max_position)
    if overshoot and ctx.boundary_mode is BoundaryMode.BOUNCE:
        dyn.velocity = -dyn.velocity / 2.0


def integrate_dynamics(world: World, ctx: SimulationContext) -> None:
    """Advance velocity and position of every entity with Dynamics."""
    logger.debug("Updating newtonian dynamics...")
    tracing = logger.isEnabledFor(TRACE)
    for entity, (dyn,) in world.join(Dynamics):
        if tracing:
            logger.log(
                TRACE, "Entity %s old dynamics: a=%s v=%s x=%s",
                entity, dyn.acceleration, dyn.velocity, dyn.position,
            )
        step_dynamics(dyn, ctx)
        if tracing:
            logger.log(
                TRACE, "Entity %s new dynamics: a=%s v=%s x=%s",
                entity, dyn.acceleration, dyn.velocity, dyn.position,
            )


def step_orientation(orient: Orientation, ctx: SimulationContext) -> None:
    """
    Advance one entity's Orientation by ctx.dt in place.

    The angular position is renormalised to a unit vector afterwards (a zero
    angular position stays zero).
    """
    limits = ctx.orientation_limits
    dt = ctx.dt

    orient.angular_acceleration = clamp_magnitude(
        orient.angular_acceleration,
        limits.min_angular_acceleration,
        limits.max_angular_acceleration,
    )
    orient.angular_velocity = clamp_magnitude(
        orient.angular_velocity + orient.angular_acceleration * dt,
        limits.min_angular_velocity,
        limits.max_angular_velocity,
    )
    orient.angular_position = direction(orient.angular_position + orient.angular_velocity * dt)


def integrate_orientation(world: World, ctx: SimulationContext) -> None:
    """Advance angular velocity and angular position of every oriented entity."""
    logger.debug("Updating angular dynamics (orientation)...")
    for _, (orient,) in world.join(Orientation):
        step_orientation(orient, ctx)
