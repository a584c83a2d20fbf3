import numpy as np
import pytest

from grav.config import PopulationSettings
from grav.ecs import World
from grav.populate import populate
from grav.profiler import Profiler
from grav.types import Charge, Dynamics, Mass, Orientation, Physicality, Sphere


def test_population_ranges_and_charge_cycle():
    world = World()
    settings = PopulationSettings(count=9, seed=123, orientation=True)
    entities = populate(world, settings)
    assert len(entities) == 9
    assert len(world) == 9

    charges = [world.get(e, Charge).value for e in entities]
    assert charges == [0.0, -1.0, 1.0] * 3
    for e in entities:
        dyn = world.get(e, Dynamics)
        r = np.linalg.norm(dyn.position)
        speed = np.linalg.norm(dyn.velocity)
        assert 1.0 <= r <= 100.0
        assert 0.0 <= speed <= 10.0
        assert np.array_equal(dyn.acceleration, np.zeros(3))
        assert world.get(e, Mass).value == 1.0
        assert world.get(e, Physicality).shape == Sphere(1.0)
        assert np.isclose(np.linalg.norm(world.get(e, Orientation).angular_position), 1.0)


def test_same_seed_same_population():
    def positions(seed):
        world = World()
        populate(world, PopulationSettings(count=5, seed=seed))
        return [world.get(e, Dynamics).position for e, _ in world.join(Dynamics)]

    assert all(np.array_equal(a, b) for a, b in zip(positions(8), positions(8)))
    assert not all(np.array_equal(a, b) for a, b in zip(positions(8), positions(9)))


def test_profiler_summary():
    prof = Profiler()
    for _ in range(3):
        with prof.section("gravity"):
            pass
    summary = prof.stats.summary()
    assert summary["gravity"]["n"] == 3
    assert summary["gravity"]["total_ms"] >= summary["gravity"]["max_ms"]
    assert "gravity" in prof.stats.format()


def test_profiler_records_failing_section():
    prof = Profiler()
    with pytest.raises(RuntimeError):
        with prof.section("split"):
            raise RuntimeError("boom")
    prof.stats.add("split", 0.004)
    summary = prof.stats.summary()["split"]
    assert summary["n"] == 2
    assert summary["max_ms"] >= 4.0
    assert summary["total_ms"] >= summary["max_ms"]
