# MIT License (see LICENSE)
"""
The simulation driver.

A Simulation owns the world, the context and the scheduler. Each call to
``step`` runs one tick: every stage of the schedule, then World.maintain.
Ticks are numbered from 1; the current number is handed to the stages as
``ctx.tick`` (the output stage stamps it on the snapshot).

Structure:
    - Build a Simulation directly, or from a RunConfig with from_config().
    - Call run(n) (optionally with a tqdm progress bar) or step() in a loop.
    - Call close() to stop worker threads and release the output sink.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from typing import Any

from tqdm import tqdm

from .config import RunConfig
from .context import SimulationContext
from .core import kinetic_energy, linear_momentum, total_charge, total_mass
from .ecs import World
from .io.output import YamlSnapshotWriter
from .populate import populate
from .profiler import Profiler
from .scheduler import Scheduler, build_default_scheduler
from .util import to_list

logger = logging.getLogger(__name__)


@dataclass
class Simulation:
    """
    Attributes:
        world: Entity store.
        ctx: Simulation constants (``tick`` is filled in per tick).
        scheduler: Stage schedule (default: every system, run serially).
        tick: Number of ticks completed.
    """
    world: World = field(default_factory=World)
    ctx: SimulationContext = field(default_factory=SimulationContext)
    scheduler: Scheduler | None = None
    tick: int = 0

    def __post_init__(self) -> None:
        if self.scheduler is None:
            self.scheduler = build_default_scheduler()

    @classmethod
    def from_config(cls, config: RunConfig, profiler: Profiler | None = None) -> "Simulation":
        """
        Build a seeded simulation from a validated RunConfig.

        Raises:
            OutputError: The output file cannot be opened.
        """
        ctx = config.context
        if config.output_path is not None:
            sink = YamlSnapshotWriter(config.output_path, mode=config.output_mode)
            ctx = replace(ctx, output=sink)
        world = World(capacity=max(64, config.population.count))
        populate(world, config.population)
        scheduler = build_default_scheduler(config.toggles, config.workers, profiler)
        return cls(world=world, ctx=ctx, scheduler=scheduler)

    def step(self) -> dict[str, Any]:
        """
        Run one tick.

        Returns:
            Per-stage results of this tick (see Scheduler.run_tick).
        """
        self.tick += 1
        ctx = replace(self.ctx, tick=self.tick)
        results = self.scheduler.run_tick(self.world, ctx)
        stats = results.get("collision-detect")
        if stats is not None and stats.unsupported:
            logger.debug("Tick %d: %d unsupported shape pairs", self.tick, stats.unsupported)
        logger.debug(
            "Tick %d done: %d entities, merged %s, split %s",
            self.tick,
            len(self.world),
            results.get("collision-resolve", 0),
            results.get("split", 0),
        )
        return results

    def run(self, steps: int, progress: bool = False) -> None:
        """
        Run ``steps`` ticks.

        Args:
            steps: Number of ticks.
            progress: Show a tqdm progress bar on stderr.
        """
        logger.info("Running simulation for %d steps...", steps)
        self.log_invariants()
        for _ in tqdm(range(steps), desc="Simulating", unit="tick", disable=not progress):
            self.step()
        self.log_invariants()
        logger.info("Simulation finished after %d steps.", self.tick)

    def invariants(self) -> dict[str, Any]:
        """System totals: entity count, mass, charge, momentum and kinetic energy."""
        return {
            "entities": len(self.world),
            "total_mass": total_mass(self.world),
            "total_charge": total_charge(self.world),
            "momentum": to_list(linear_momentum(self.world)),
            "kinetic_energy": kinetic_energy(self.world),
        }

    def log_invariants(self) -> None:
        inv = self.invariants()
        logger.info(
            "Tick %d: %d entities, mass %.6g, charge %.6g, momentum %s, kinetic energy %.6g",
            self.tick,
            inv["entities"],
            inv["total_mass"],
            inv["total_charge"],
            inv["momentum"],
            inv["kinetic_energy"],
        )

    def close(self) -> None:
        """Shut down scheduler workers and close the output sink."""
        self.scheduler.close()
        if self.ctx.output is not None:
            self.ctx.output.close()
