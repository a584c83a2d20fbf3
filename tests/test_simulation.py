import numpy as np
import pytest

from grav.config import PopulationSettings, RunConfig, SystemToggles
from grav.context import SimulationContext
from grav.core import total_charge, total_mass
from grav.ecs import World
from grav.exceptions import OutputError
from grav.io import MemorySink, YamlSnapshotWriter, read_snapshots
from grav.populate import populate
from grav.scheduler import build_default_scheduler
from grav.simulation import Simulation
from grav.types import Charge, Collisions, Dynamics, Forces, Lifetime, Mass, Physicality, Sphere


def test_two_body_gravity_one_tick():
    """
    G = m = 1, r = 10: a = 0.01 toward the partner.
    After one tick (dt = 1): v = 0.01, x moves by 0.01.
    """
    world = World()
    a = world.create(Dynamics(position=(0, 0, 0)), Mass(1.0), Forces())
    b = world.create(Dynamics(position=(10, 0, 0)), Mass(1.0), Forces())
    sim = Simulation(world, SimulationContext())
    sim.step()

    da, db = world.get(a, Dynamics), world.get(b, Dynamics)
    print("a", da, "b", db)
    assert np.allclose(da.acceleration, [0.01, 0, 0])
    assert np.allclose(da.velocity, [0.01, 0, 0])
    assert np.allclose(da.position, [0.01, 0, 0])
    assert np.allclose(db.position, [9.99, 0, 0])


def test_disabled_systems_leave_mass_and_charge_unchanged():
    world = World()
    populate(world, PopulationSettings(count=20, seed=5))
    before = {e: (m.value, q.value) for e, (m, q) in world.join(Mass, Charge)}

    toggles = SystemToggles(gravity=False, electrostatics=False, collisions=False, splitting=False)
    sim = Simulation(world, SimulationContext(), build_default_scheduler(toggles))
    sim.run(10)

    after = {e: (m.value, q.value) for e, (m, q) in world.join(Mass, Charge)}
    assert after == before


def test_full_run_conserves_mass_and_charge():
    world = World()
    populate(world, PopulationSettings(count=30, seed=2, max_position=15.0, max_speed=0.0))
    mass0, charge0 = total_mass(world), total_charge(world)

    sim = Simulation(world, SimulationContext(), build_default_scheduler(workers=2))
    sim.run(20)
    sim.close()

    inv = sim.invariants()
    print("invariants", inv)
    assert inv["total_mass"] == pytest.approx(mass0)
    assert inv["total_charge"] == pytest.approx(charge0)


def test_snapshot_step_is_one_based_tick():
    world = World()
    world.create(Dynamics(velocity=(1, 0, 0)), Mass(1.0))
    sink = MemorySink()
    sim = Simulation(world, SimulationContext(output=sink))
    sim.run(4)

    assert [s.step for s in sink.snapshots] == [1, 2, 3, 4]
    # Snapshots report the post-integration state of the tick.
    assert sink.snapshots[0].entities[0].position == [1.0, 0.0, 0.0]
    assert sink.snapshots[3].entities[0].position == [4.0, 0.0, 0.0]

    sink.clear()
    sim.run(1)
    assert [s.step for s in sink.snapshots] == [5]


def test_snapshot_includes_entities_merged_this_tick():
    """Two touching spheres merge during tick 1; step 1 still lists both."""
    world = World()
    for x in (0.0, 1.5):
        world.create(
            Charge(1.0), Collisions(), Dynamics(position=(x, 0, 0)), Forces(),
            Lifetime(), Mass(1.0), Physicality(shape=Sphere(1.0)),
        )
    sink = MemorySink()
    ctx = SimulationContext(gravitational_constant=0.0, electrostatic_constant=0.0, output=sink)
    sim = Simulation(world, ctx)
    sim.run(2)

    assert len(sink.snapshots[0].entities) == 2
    assert len(sink.snapshots[1].entities) == 1
    merged = sink.snapshots[1].entities[0]
    assert merged.mass == 2.0
    assert merged.charge == 2.0
    assert merged.position == [0.75, 0.0, 0.0]


def test_yaml_output_documents(tmp_path):
    path = tmp_path / "out.yaml"
    world = World()
    world.create(Dynamics(position=(1, 2, 3)), Mass(2.0), Charge(-1.0))
    world.create(Dynamics(position=(4, 5, 6)), Mass(3.0))
    sim = Simulation(world, SimulationContext(output=YamlSnapshotWriter(path, mode="overwrite")))
    sim.run(3)
    sim.close()

    docs = read_snapshots(path)
    print(path.read_text()[:300])
    assert path.read_text().startswith("---")
    assert [d["step"] for d in docs] == [1, 2, 3]
    first = docs[0]["entities"]
    assert list(first[0]) == ["acceleration", "mass", "charge", "position", "velocity"]
    assert list(first[1]) == ["acceleration", "mass", "position", "velocity"]
    assert first[0]["mass"] == 2.0
    assert first[0]["charge"] == -1.0
    assert len(first[0]["position"]) == 3


def test_yaml_output_modes(tmp_path):
    path = tmp_path / "out.yaml"
    world = World()
    world.create(Dynamics(), Mass(1.0))

    for _ in range(2):
        sim = Simulation(world, SimulationContext(output=YamlSnapshotWriter(path, mode="append")))
        sim.run(2)
    assert [d["step"] for d in read_snapshots(path)] == [1, 2, 1, 2]

    sim = Simulation(world, SimulationContext(output=YamlSnapshotWriter(path, mode="overwrite")))
    sim.run(1)
    assert [d["step"] for d in read_snapshots(path)] == [1]


def test_unwritable_output_raises(tmp_path):
    with pytest.raises(OutputError):
        YamlSnapshotWriter(tmp_path)
    with pytest.raises(OutputError):
        YamlSnapshotWriter(tmp_path / "missing" / "out.yaml")


def test_from_config_seeds_and_writes(tmp_path):
    out = tmp_path / "run.yaml"
    config = RunConfig(
        steps=3,
        population=PopulationSettings(count=10, seed=1),
        output_path=str(out),
        output_mode="overwrite",
        workers=2,
    )
    sim = Simulation.from_config(config)
    sim.run(config.steps)
    sim.close()

    docs = read_snapshots(out)
    assert [d["step"] for d in docs] == [1, 2, 3]
    assert len(docs[0]["entities"]) == 10
    assert sorted({e["charge"] for e in docs[0]["entities"]}) == [-1.0, 0.0, 1.0]
