# MIT License (see LICENSE)
"""
Tick-scoped simulation constants.

A SimulationContext is built once from configuration and passed to every
stage. It is frozen: stages read it, nothing writes it during a tick. To
change a constant between ticks, build a new context with
``dataclasses.replace`` and hand it to Simulation.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from . import constants

if TYPE_CHECKING:
    from .io.output import OutputSink

INF = float("inf")


class BoundaryMode(Enum):
    """
    What happens to velocity when a position is clamped to the maximum.

    BOUNCE reverses and halves the velocity (inelastic bounce off the edge
    of the universe). CLAMP leaves the velocity untouched.
    """
    BOUNCE = "bounce"
    CLAMP = "clamp"


@dataclass(frozen=True)
class DynamicsLimits:
    """Minimum and maximum magnitudes for acceleration, velocity and position."""
    min_acceleration: float = 0.0
    max_acceleration: float = INF
    min_velocity: float = 0.0
    max_velocity: float = INF
    min_position: float = 0.0
    max_position: float = INF


@dataclass(frozen=True)
class OrientationLimits:
    """
    Minimum and maximum magnitudes for angular acceleration and velocity.

    Angular position has no limits since it is always a unit vector.
    """
    min_angular_acceleration: float = 0.0
    max_angular_acceleration: float = INF
    min_angular_velocity: float = 0.0
    max_angular_velocity: float = INF


@dataclass(frozen=True)
class CollisionLimits:
    """
    Attributes:
        min_threshold: Pairs closer than this always collide.
        max_threshold: Pairs at least this far apart are never tested.
    """
    min_threshold: float = constants.MIN_DETECTION_THRESHOLD
    max_threshold: float = constants.MAX_DETECTION_THRESHOLD


@dataclass(frozen=True)
class SplittingSettings:
    """
    Attributes:
        min_lifetime: Entities never split at or below this age.
        max_lifetime: Entities always split above this age (once past min).
        separation_multiplier: Daughters are offset by this times the parent radius.
        velocity_multiplier: Daughter velocities are this times the parent's.
    """
    min_lifetime: int = constants.MIN_LIFETIME
    max_lifetime: int = constants.MAX_LIFETIME
    separation_multiplier: float = constants.SEPARATION_MULTIPLIER
    velocity_multiplier: float = constants.VELOCITY_MULTIPLIER


@dataclass(frozen=True)
class SimulationContext:
    """
    Read-only constants shared by all stages of a tick.

    Attributes:
        gravitational_constant: G in F = G·m1·m2/r².
        electrostatic_constant: k in F = k·q1·q2/r².
        dt: Time advanced per tick.
        dynamics_limits: Magnitude clamps for the integrator.
        orientation_limits: Magnitude clamps for angular integration.
        collision_limits: Detection thresholds.
        splitting: Lifetime splitting settings.
        boundary_mode: Velocity behaviour at the position limit.
        output: Sink receiving one snapshot per tick (None disables output).
        tick: 1-based number of the tick being run (0 before the first tick).
    """
    gravitational_constant: float = constants.GRAVITATIONAL_CONSTANT
    electrostatic_constant: float = constants.ELECTROSTATIC_CONSTANT
    dt: float = constants.DELTA_TIME
    dynamics_limits: DynamicsLimits = field(default_factory=DynamicsLimits)
    orientation_limits: OrientationLimits = field(default_factory=OrientationLimits)
    collision_limits: CollisionLimits = field(default_factory=CollisionLimits)
    splitting: SplittingSettings = field(default_factory=SplittingSettings)
    boundary_mode: BoundaryMode = BoundaryMode.BOUNCE
    output: "OutputSink | None" = None
    tick: int = 0
