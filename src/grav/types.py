# MIT License (see LICENSE)
"""
Component and shape definitions for the particle simulation.

Components are plain dataclasses stored in per-type tables by the entity
world (see grav.ecs). They hold data only; all behaviour lives in the
systems under grav.core and grav.collision.

The equations of motion follow standard Newtonian mechanics:
  - F = m·a  →  a = ΣF/m
  - v(t+dt) = v(t) + a·dt
  - x(t+dt) = x(t) + v(t+dt)·dt
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from .util import f64, zeros

if TYPE_CHECKING:
    from .ecs.entity import Entity


# =============================================================================
# Shape Definitions
# =============================================================================

class ShapeKind(Enum):
    """Tag used to dispatch collision tests on a pair of shapes."""
    POINT = "point"
    SPHERE = "sphere"
    CUBOID = "cuboid"


@dataclass(frozen=True)
class Point:
    """A dimensionless point."""

    @property
    def kind(self) -> ShapeKind:
        return ShapeKind.POINT


@dataclass(frozen=True)
class Sphere:
    """
    Sphere shape defined by radius.

    Attributes:
        radius: Distance from center to surface.
    """
    radius: float

    @property
    def kind(self) -> ShapeKind:
        return ShapeKind.SPHERE


@dataclass(frozen=True)
class Cuboid:
    """
    Axis-aligned cuboid defined by half-extents (center to each face).
    """
    hx: float
    hy: float
    hz: float

    @property
    def kind(self) -> ShapeKind:
        return ShapeKind.CUBOID


Shape = Point | Sphere | Cuboid


def sphere_radius(shape: Shape | None, default: float = 0.0) -> float:
    """Radius of a sphere shape, or ``default`` for every other shape."""
    if isinstance(shape, Sphere):
        return shape.radius
    return default


# =============================================================================
# Components
# =============================================================================

@dataclass
class Dynamics:
    """
    Newtonian state of an entity.

    Acceleration is recomputed from the force map every tick; it is never
    accumulated across ticks.
    """
    acceleration: np.ndarray = field(default_factory=zeros)
    position: np.ndarray = field(default_factory=zeros)
    velocity: np.ndarray = field(default_factory=zeros)

    def __post_init__(self) -> None:
        self.acceleration = f64(self.acceleration)
        self.position = f64(self.position)
        self.velocity = f64(self.velocity)


@dataclass
class Orientation:
    """
    Angular state of an entity. The angular position is kept a unit vector.
    """
    angular_acceleration: np.ndarray = field(default_factory=zeros)
    angular_position: np.ndarray = field(default_factory=zeros)
    angular_velocity: np.ndarray = field(default_factory=zeros)

    def __post_init__(self) -> None:
        self.angular_acceleration = f64(self.angular_acceleration)
        self.angular_position = f64(self.angular_position)
        self.angular_velocity = f64(self.angular_velocity)


@dataclass
class Mass:
    value: float


@dataclass
class Charge:
    value: float = 0.0


@dataclass
class Forces:
    """
    Forces acting on an entity this tick.

    Keys are ``"<interaction>:<partner>"`` (see force_key), values are force
    vectors. Cleared at the start of every tick.
    """
    contributions: dict[str, np.ndarray] = field(default_factory=dict)

    def net(self) -> np.ndarray:
        """
        Sum of all contributions (zero vector when empty).

        Contributions are summed in key order, so the result does not depend
        on which force system wrote first.
        """
        total = zeros()
        for key in sorted(self.contributions):
            total += self.contributions[key]
        return total


def force_key(interaction: str, partner: "Entity") -> str:
    """Key under which a pairwise contribution from ``partner`` is stored."""
    return f"{interaction}:{partner}"


@dataclass
class Physicality:
    """
    Collision geometry of an entity.

    Attributes:
        shape: Point, Sphere or Cuboid.
        collisions_enabled: Whether this entity takes part in collision detection.
    """
    shape: Shape = field(default_factory=Point)
    collisions_enabled: bool = True


@dataclass
class Collisions:
    """Entities judged colliding with this one during the current tick."""
    entities: list["Entity"] = field(default_factory=list)


@dataclass
class Lifetime:
    """Number of ticks this entity has existed."""
    steps: int = 0
