# MIT License (see LICENSE)
"""
grav - A 3D newtonian and electrostatic particle simulation.

Particles are entities in a component store. Every tick a scheduled graph of
systems accumulates pairwise gravity and electrostatic forces, integrates
motion with magnitude clamps, merges colliding particles and splits old
ones.

Main entry points:
    - Simulation: Owns the world, context and scheduler; runs ticks.
    - World: Entity/component store with deferred creation and deletion.
    - SimulationContext: Read-only constants shared by all stages.
    - RunConfig: Everything needed to seed and run a simulation.

Submodules:
    - ecs: Entities, component tables, command buffer.
    - core: Force systems, integrators, splitting, invariants.
    - collision: Detection and merge resolution.
    - io: Config files and snapshot output.
    - scheduler: Stage graph and concurrent execution.

Example:
    from grav import Simulation, SimulationContext, World
    from grav.types import Dynamics, Forces, Mass

    world = World()
    world.create(Dynamics(position=(0, 0, 0)), Mass(1.0), Forces())
    world.create(Dynamics(position=(10, 0, 0)), Mass(1.0), Forces())
    sim = Simulation(world, SimulationContext())
    sim.run(100)
"""
from .config import PopulationSettings, RunConfig, SystemToggles
from .context import (
    BoundaryMode,
    CollisionLimits,
    DynamicsLimits,
    OrientationLimits,
    SimulationContext,
    SplittingSettings,
)
from .ecs import Entity, World
from .exceptions import (
    ConfigurationError,
    DeadEntityError,
    GravError,
    OutputError,
    SchedulerError,
)
from .scheduler import Scheduler, Stage, build_default_scheduler
from .simulation import Simulation

__version__ = "0.1.0"

__all__ = [
    # Simulation
    "Simulation",
    "Scheduler",
    "Stage",
    "build_default_scheduler",
    # Entity store
    "World",
    "Entity",
    # Context
    "SimulationContext",
    "BoundaryMode",
    "DynamicsLimits",
    "OrientationLimits",
    "CollisionLimits",
    "SplittingSettings",
    # Configuration
    "RunConfig",
    "PopulationSettings",
    "SystemToggles",
    # Errors
    "GravError",
    "ConfigurationError",
    "DeadEntityError",
    "SchedulerError",
    "OutputError",
]
