# MIT License (see LICENSE)
"""
Run configuration.

A RunConfig bundles everything needed to start a simulation run: the
SimulationContext constants, which systems are enabled, how the initial
population is seeded, and where output goes. Files are read and written by
grav.io.config_io; the CLI overrides individual fields.

Typical usage:
    config = RunConfig(steps=500, population=PopulationSettings(count=200))
    config.validate()
    ctx = config.context
"""
from __future__ import annotations
import math
from dataclasses import dataclass, field

from .context import SimulationContext
from .exceptions import ConfigurationError

OUTPUT_MODES = ("append", "overwrite")


def _check_range(name: str, lo: float, hi: float) -> None:
    """Require 0 <= lo <= hi, rejecting NaN on either end."""
    if math.isnan(lo) or math.isnan(hi) or lo < 0 or hi < lo:
        raise ConfigurationError(f"invalid {name} range [{lo}, {hi}]")


@dataclass
class PopulationSettings:
    """
    How the initial entities are seeded.

    Attributes:
        count: Number of entities to create.
        min_position / max_position: Range of the distance from the origin.
        min_speed / max_speed: Range of the initial speed.
        mass: Mass of every seeded entity.
        charges: Charges assigned cyclically (entity i gets charges[i % len]).
        radius: Sphere radius of every seeded entity.
        orientation: Also seed a random unit Orientation.
        seed: Random seed (None for a fresh one each run).
    """
    count: int = 100
    min_position: float = 1.0
    max_position: float = 100.0
    min_speed: float = 0.0
    max_speed: float = 10.0
    mass: float = 1.0
    charges: tuple[float, ...] = (0.0, -1.0, 1.0)
    radius: float = 1.0
    orientation: bool = False
    seed: int | None = None

    def validate(self) -> None:
        if self.count < 0:
            raise ConfigurationError(f"population count must be >= 0, got {self.count}")
        _check_range("position", self.min_position, self.max_position)
        _check_range("speed", self.min_speed, self.max_speed)
        if math.isnan(self.mass) or any(math.isnan(q) for q in self.charges):
            raise ConfigurationError("mass and charges must be numbers, got NaN")
        if math.isnan(self.radius) or self.radius < 0:
            raise ConfigurationError(f"radius must be >= 0, got {self.radius}")
        if not self.charges:
            raise ConfigurationError("charges must contain at least one value")


@dataclass
class SystemToggles:
    """Which optional systems take part in the schedule."""
    gravity: bool = True
    electrostatics: bool = True
    collisions: bool = True
    splitting: bool = True
    orientation: bool = True


@dataclass
class RunConfig:
    """
    Attributes:
        context: Simulation constants (its ``output`` is set when the run starts).
        toggles: Enabled systems.
        population: Initial seeding.
        steps: Number of ticks to run.
        output_path: YAML snapshot file (None disables output).
        output_mode: ``append`` or ``overwrite``.
        workers: Thread pool size for concurrent stages (1 runs serially).
    """
    context: SimulationContext = field(default_factory=SimulationContext)
    toggles: SystemToggles = field(default_factory=SystemToggles)
    population: PopulationSettings = field(default_factory=PopulationSettings)
    steps: int = 100
    output_path: str | None = "output.yaml"
    output_mode: str = "append"
    workers: int = 4

    def validate(self) -> None:
        """
        Check value ranges.

        Raises:
            ConfigurationError: On the first invalid value found.
        """
        ctx = self.context
        if math.isnan(ctx.dt) or ctx.dt <= 0:
            raise ConfigurationError(f"dt must be positive, got {ctx.dt}")
        limits = ctx.dynamics_limits
        for name in ("acceleration", "velocity", "position"):
            lo = getattr(limits, f"min_{name}")
            hi = getattr(limits, f"max_{name}")
            _check_range(f"{name} limit", lo, hi)
        olimits = ctx.orientation_limits
        for name in ("angular_acceleration", "angular_velocity"):
            lo = getattr(olimits, f"min_{name}")
            hi = getattr(olimits, f"max_{name}")
            _check_range(f"{name} limit", lo, hi)
        climits = ctx.collision_limits
        _check_range("collision threshold", climits.min_threshold, climits.max_threshold)
        for name in ("gravitational_constant", "electrostatic_constant"):
            if math.isnan(getattr(ctx, name)):
                raise ConfigurationError(f"{name} must be a number, got NaN")
        split = ctx.splitting
        if split.min_lifetime < 0 or split.max_lifetime < split.min_lifetime:
            raise ConfigurationError(
                f"invalid lifetime range [{split.min_lifetime}, {split.max_lifetime}]"
            )
        if self.steps < 0:
            raise ConfigurationError(f"steps must be >= 0, got {self.steps}")
        if self.output_mode not in OUTPUT_MODES:
            raise ConfigurationError(
                f"output mode must be one of {', '.join(OUTPUT_MODES)}, got {self.output_mode!r}"
            )
        if self.workers < 1:
            raise ConfigurationError(f"workers must be >= 1, got {self.workers}")
        self.population.validate()
