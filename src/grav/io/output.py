# MIT License (see LICENSE)
"""
Per-tick snapshot output.

Once per tick the output stage captures every entity carrying Dynamics and
Mass and hands the snapshot to the context's OutputSink. The YAML writer
appends each snapshot as its own document, so the file grows by one record
per tick and is never rewritten:

    ---
    step: 1
    entities:
    - acceleration: [0.0, 0.0, 0.0]
      mass: 1.0
      charge: -1.0          # only for entities with a Charge
      position: [12.5, -3.0, 40.1]
      velocity: [0.5, 0.0, -1.2]
    ---
    step: 2
    ...

Read it back with ``read_snapshots`` (yaml.safe_load_all).
"""
from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..context import SimulationContext
from ..ecs import World
from ..exceptions import OutputError
from ..logging_config import TRACE
from ..types import Charge, Dynamics, Mass
from ..util import to_list

logger = logging.getLogger(__name__)


@dataclass
class EntitySnapshot:
    acceleration: list[float]
    mass: float
    position: list[float]
    velocity: list[float]
    charge: float | None = None

    def to_dict(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "acceleration": self.acceleration,
            "mass": self.mass,
        }
        if self.charge is not None:
            record["charge"] = self.charge
        record["position"] = self.position
        record["velocity"] = self.velocity
        return record


@dataclass
class Snapshot:
    """State of the world at the end of one tick."""
    step: int
    entities: list[EntitySnapshot] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "step": self.step,
            "entities": [e.to_dict() for e in self.entities],
        }


def take_snapshot(world: World, step: int) -> Snapshot:
    """
    Capture every entity with Dynamics and Mass.

    Entities queued for deletion this tick are included: the snapshot
    describes the integrated state of everything alive when the tick began,
    whatever order the merge/split stages ran in.
    """
    snapshot = Snapshot(step=step)
    for entity, (dyn, mass) in world.join(Dynamics, Mass, include_dying=True):
        charge = world.get(entity, Charge, include_dying=True)
        snapshot.entities.append(EntitySnapshot(
            acceleration=to_list(dyn.acceleration),
            mass=float(mass.value),
            position=to_list(dyn.position),
            velocity=to_list(dyn.velocity),
            charge=float(charge.value) if charge is not None else None,
        ))
    return snapshot


class OutputSink(ABC):
    """
    Destination for per-tick snapshots.

    Subclasses decide where snapshots go (file, memory, network...).
    """

    @abstractmethod
    def write(self, snapshot: Snapshot) -> None:
        """
        Append one snapshot.

        Raises:
            OutputError: The snapshot could not be written.
        """
        ...

    def close(self) -> None:
        """Release any resources held by the sink."""


class YamlSnapshotWriter(OutputSink):
    """
    Appends each snapshot to a file as a separate YAML document.

    Example:
        writer = YamlSnapshotWriter("output.yaml", mode="overwrite")
        writer.write(take_snapshot(world, step=1))
    """

    def __init__(self, path: str | Path, mode: str = "append") -> None:
        """
        Open (create) the output file.

        Args:
            path: Output file path.
            mode: ``append`` keeps existing records, ``overwrite`` truncates.

        Raises:
            OutputError: The file cannot be created or opened.
        """
        self.path = Path(path)
        file_mode = "w" if mode == "overwrite" else "a"
        try:
            with open(self.path, file_mode, encoding="utf-8"):
                pass
        except OSError as e:
            raise OutputError(f"Unable to open output file {self.path}: {e}") from e

    def write(self, snapshot: Snapshot) -> None:
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                yaml.safe_dump(
                    snapshot.to_dict(),
                    f,
                    explicit_start=True,
                    sort_keys=False,
                    default_flow_style=None,
                )
        except OSError as e:
            raise OutputError(f"Unable to write to output file {self.path}: {e}") from e


class MemorySink(OutputSink):
    """
    Keeps snapshots in a list, for tests and embedding.

    Example:
        sink = MemorySink()
        sim = Simulation(world, SimulationContext(output=sink))
        sim.run(10)
        assert [s.step for s in sink.snapshots] == list(range(1, 11))
    """

    def __init__(self) -> None:
        self.snapshots: list[Snapshot] = []

    def write(self, snapshot: Snapshot) -> None:
        self.snapshots.append(snapshot)

    def clear(self) -> None:
        self.snapshots.clear()


def write_output(world: World, ctx: SimulationContext) -> None:
    """Send this tick's snapshot to the context's sink, if any."""
    if ctx.output is None:
        return
    logger.debug("Writing output...")
    snapshot = take_snapshot(world, ctx.tick)
    if logger.isEnabledFor(TRACE):
        for record in snapshot.entities:
            logger.log(TRACE, "Output entity: %s", record)
    ctx.output.write(snapshot)


def read_snapshots(path: str | Path) -> list[dict[str, Any]]:
    """Load every snapshot document from a YAML output file."""
    with open(path, "r", encoding="utf-8") as f:
        return [doc for doc in yaml.safe_load_all(f) if doc is not None]
