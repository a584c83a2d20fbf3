# MIT License (see LICENSE)
"""
Stage scheduling.

A tick is a directed acyclic graph of named stages. Each stage is a system
``run(world, ctx)`` plus the names of the stages it must run after and the
resources it reads and writes. The scheduler builds the graph with networkx,
validates it, and runs it one topological generation at a time: stages in
the same generation have no ordering between them and run concurrently on a
thread pool (or serially when ``workers == 1``). World.maintain runs once
after the last generation.

Key concepts:
- Resources: Plain names such as ``dynamics`` or ``forces``. A name with a
  ``:`` qualifier is a child of its prefix, so ``forces:gravity`` overlaps
  ``forces`` but not ``forces:electrostatics``.
- Conflicts: Two stages with no path between them must not write a
  resource the other reads or writes.
- Removal: Removing a stage re-routes its dependents onto its own
  dependencies, so disabling a system never breaks the ordering of the rest.

Default tick (each line reads "these stages, then that one"):

    clear-forces                          -> gravity, electrostatics
    gravity, electrostatics               -> force-aggregation -> integrate
    integrate, clear-collisions           -> collision-detect -> collision-resolve
    collision-resolve, lifetime-advance   -> split
    integrate                             -> output
    orientation                           (independent)
"""
from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

import networkx as nx

from .collision import clear_collisions, detect_collisions, resolve_collisions
from .config import SystemToggles
from .context import SimulationContext
from .core import (
    advance_lifetimes,
    aggregate_forces,
    apply_electrostatics,
    apply_gravity,
    clear_forces,
    integrate_dynamics,
    integrate_orientation,
    split_entities,
)
from .ecs import World
from .exceptions import SchedulerError
from .io.output import write_output
from .profiler import Profiler

logger = logging.getLogger(__name__)

System = Callable[[World, SimulationContext], Any]


@dataclass(frozen=True)
class Stage:
    """
    A named system with its ordering and resource declarations.

    Attributes:
        name: Unique stage name.
        run: The system, called as ``run(world, ctx)``.
        after: Stages that must finish before this one starts.
        reads: Resources read.
        writes: Resources written.
    """
    name: str
    run: System
    after: tuple[str, ...] = ()
    reads: frozenset[str] = field(default_factory=frozenset)
    writes: frozenset[str] = field(default_factory=frozenset)


def resources_overlap(a: str, b: str) -> bool:
    """True when ``a`` and ``b`` name the same resource or one contains the other."""
    return a == b or a.startswith(b + ":") or b.startswith(a + ":")


def _conflicts(a: Stage, b: Stage) -> list[str]:
    found = []
    for w in a.writes:
        for r in b.reads | b.writes:
            if resources_overlap(w, r):
                found.append(f"{a.name} writes {w}, {b.name} uses {r}")
    for w in b.writes:
        for r in a.reads:
            if resources_overlap(w, r):
                found.append(f"{b.name} writes {w}, {a.name} uses {r}")
    return found


class Scheduler:
    """
    Dependency-ordered, generation-parallel stage runner.

    Usage:
        scheduler = Scheduler(workers=4)
        scheduler.add_stage(Stage("gravity", apply_gravity, writes=frozenset({"forces:gravity"})))
        ...
        scheduler.build()
        scheduler.run_tick(world, ctx)
        scheduler.close()
    """

    def __init__(self, workers: int = 1, profiler: Profiler | None = None) -> None:
        if workers < 1:
            raise SchedulerError(f"workers must be >= 1, got {workers}")
        self.workers = workers
        self.profiler = profiler
        self._stages: dict[str, Stage] = {}
        self._generations: list[list[Stage]] | None = None
        self._executor: ThreadPoolExecutor | None = None

    # ------------------------------------------------------------------
    # Graph construction
    # ------------------------------------------------------------------

    def add_stage(self, stage: Stage) -> None:
        """
        Raises:
            SchedulerError: A stage with the same name already exists.
        """
        if stage.name in self._stages:
            raise SchedulerError(f"duplicate stage '{stage.name}'")
        self._stages[stage.name] = stage
        self._generations = None

    def add(self, stages: Iterable[Stage]) -> None:
        for stage in stages:
            self.add_stage(stage)

    def remove_stage(self, name: str) -> None:
        """
        Remove a stage, making its dependents depend on its own dependencies.

        Raises:
            SchedulerError: No stage has that name.
        """
        removed = self._stages.pop(name, None)
        if removed is None:
            raise SchedulerError(f"unknown stage '{name}'")
        for other_name, other in list(self._stages.items()):
            if name not in other.after:
                continue
            after: list[str] = []
            for dep in other.after:
                replacements = removed.after if dep == name else (dep,)
                for r in replacements:
                    if r not in after:
                        after.append(r)
            self._stages[other_name] = Stage(
                other.name, other.run, tuple(after), other.reads, other.writes
            )
        self._generations = None
        logger.debug("Removed stage '%s'", name)

    @property
    def stage_names(self) -> list[str]:
        return list(self._stages)

    def graph(self) -> nx.DiGraph:
        """
        Dependency graph with an edge ``dep -> stage`` for every ``after`` entry.

        Raises:
            SchedulerError: A stage depends on an unknown stage.
        """
        g = nx.DiGraph()
        g.add_nodes_from(self._stages)
        for stage in self._stages.values():
            for dep in stage.after:
                if dep not in self._stages:
                    raise SchedulerError(f"stage '{stage.name}' depends on unknown stage '{dep}'")
                g.add_edge(dep, stage.name)
        return g

    def build(self) -> list[list[str]]:
        """
        Validate the graph and compute the execution generations.

        Returns:
            Stage names per generation, in execution order.

        Raises:
            SchedulerError: Unknown dependency, cycle, or write conflict
            between unordered stages.
        """
        g = self.graph()
        if not nx.is_directed_acyclic_graph(g):
            cycle = nx.find_cycle(g)
            path = " -> ".join(u for u, _ in cycle)
            raise SchedulerError(f"stage graph has a cycle: {path} -> {cycle[0][0]}")

        closure = nx.transitive_closure_dag(g)
        names = list(self._stages)
        problems = []
        for i, a in enumerate(names):
            for b in names[i + 1:]:
                if closure.has_edge(a, b) or closure.has_edge(b, a):
                    continue
                problems.extend(_conflicts(self._stages[a], self._stages[b]))
        if problems:
            raise SchedulerError("conflicting unordered stages: " + "; ".join(problems))

        self._generations = [
            [self._stages[name] for name in sorted(generation)]
            for generation in nx.topological_generations(g)
        ]
        layout = [[s.name for s in gen] for gen in self._generations]
        logger.debug("Schedule built: %s", layout)
        return layout

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _run_stage(self, stage: Stage, world: World, ctx: SimulationContext) -> Any:
        if self.profiler is None:
            return stage.run(world, ctx)
        with self.profiler.section(stage.name):
            return stage.run(world, ctx)

    def _pool(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.workers, thread_name_prefix="grav-stage"
            )
        return self._executor

    def run_tick(self, world: World, ctx: SimulationContext) -> dict[str, Any]:
        """
        Run every stage once, then maintain the world.

        Returns:
            Mapping of stage name to whatever the stage returned.

        Raises:
            Any exception raised by a stage. The rest of its generation is
            allowed to finish first; later generations and maintain are skipped.
        """
        if self._generations is None:
            self.build()
        results: dict[str, Any] = {}
        for generation in self._generations:
            if self.workers == 1 or len(generation) == 1:
                for stage in generation:
                    results[stage.name] = self._run_stage(stage, world, ctx)
                continue
            pool = self._pool()
            futures = [(stage, pool.submit(self._run_stage, stage, world, ctx)) for stage in generation]
            wait([f for _, f in futures])
            for stage, future in futures:
                results[stage.name] = future.result()
        if self.profiler is None:
            world.maintain()
        else:
            with self.profiler.section("maintain"):
                world.maintain()
        return results

    def close(self) -> None:
        """Shut down the worker pool (if one was started)."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "Scheduler":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# =============================================================================
# Default schedule
# =============================================================================

def default_stages() -> list[Stage]:
    """Every stage of a full tick, with its ordering and resources."""
    return [
        Stage("clear-collisions", clear_collisions, writes=frozenset({"collisions"})),
        Stage("clear-forces", clear_forces, writes=frozenset({"forces"})),
        Stage(
            "gravity", apply_gravity,
            after=("clear-forces",),
            reads=frozenset({"dynamics", "mass"}),
            writes=frozenset({"forces:gravity"}),
        ),
        Stage(
            "electrostatics", apply_electrostatics,
            after=("clear-forces",),
            reads=frozenset({"dynamics", "charge"}),
            writes=frozenset({"forces:electrostatics"}),
        ),
        Stage(
            "force-aggregation", aggregate_forces,
            after=("gravity", "electrostatics"),
            reads=frozenset({"forces", "mass"}),
            writes=frozenset({"dynamics"}),
        ),
        Stage(
            "integrate", integrate_dynamics,
            after=("force-aggregation",),
            reads=frozenset({"dynamics"}),
            writes=frozenset({"dynamics"}),
        ),
        Stage("orientation", integrate_orientation, writes=frozenset({"orientation"})),
        Stage(
            "collision-detect", detect_collisions,
            after=("clear-collisions", "integrate"),
            reads=frozenset({"dynamics", "physicality"}),
            writes=frozenset({"collisions"}),
        ),
        Stage(
            "collision-resolve", resolve_collisions,
            after=("collision-detect",),
            reads=frozenset({"collisions", "dynamics", "mass", "charge", "physicality"}),
            writes=frozenset({"entities"}),
        ),
        Stage("lifetime-advance", advance_lifetimes, writes=frozenset({"lifetime"})),
        Stage(
            "split", split_entities,
            after=("collision-resolve", "lifetime-advance"),
            reads=frozenset({"lifetime", "mass", "charge", "dynamics", "physicality"}),
            writes=frozenset({"entities"}),
        ),
        Stage(
            "output", write_output,
            after=("integrate",),
            reads=frozenset({"dynamics", "mass", "charge"}),
        ),
    ]


DISABLED_STAGES = {
    "gravity": ("gravity",),
    "electrostatics": ("electrostatics",),
    "collisions": ("collision-detect", "collision-resolve", "clear-collisions"),
    "splitting": ("split", "lifetime-advance"),
    "orientation": ("orientation",),
}


def build_default_scheduler(
    toggles: SystemToggles | None = None,
    workers: int = 1,
    profiler: Profiler | None = None,
) -> Scheduler:
    """
    Scheduler with the default stages, minus the disabled systems.

    Args:
        toggles: Enabled systems (default: all).
        workers: Thread pool size for concurrent generations.
        profiler: Optional per-stage timing.

    Returns:
        A built (validated) scheduler.
    """
    toggles = toggles or SystemToggles()
    scheduler = Scheduler(workers=workers, profiler=profiler)
    scheduler.add(default_stages())
    for toggle, stage_names in DISABLED_STAGES.items():
        if getattr(toggles, toggle):
            continue
        logger.info("System '%s' disabled", toggle)
        for name in stage_names:
            scheduler.remove_stage(name)
    scheduler.build()
    return scheduler
