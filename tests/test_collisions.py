import numpy as np

from grav.collision import (
    CollisionOutcome,
    classify_pair,
    detect_collisions,
    resolve_collisions,
)
from grav.context import CollisionLimits, SimulationContext
from grav.core import total_charge, total_mass
from grav.ecs import World
from grav.types import (
    Charge,
    Collisions,
    Cuboid,
    Dynamics,
    Forces,
    Lifetime,
    Mass,
    Physicality,
    Point,
    Sphere,
)


def _body(world, x, mass=1.0, charge=0.0, shape=None, velocity=(0, 0, 0), enabled=True):
    return world.create(
        Charge(charge),
        Collisions(),
        Dynamics(position=(x, 0, 0), velocity=velocity),
        Forces(),
        Lifetime(7),
        Mass(mass),
        Physicality(shape=shape if shape is not None else Sphere(1.0), collisions_enabled=enabled),
    )


def test_classify_pair_table():
    limits = CollisionLimits(min_threshold=1.0, max_threshold=100.0)
    cases = [
        (Sphere(1.0), Sphere(1.0), 1.5, CollisionOutcome.COLLIDE),
        (Sphere(1.0), Sphere(1.0), 2.0, CollisionOutcome.COLLIDE),
        (Sphere(1.0), Sphere(1.0), 2.5, CollisionOutcome.SEPARATE),
        (Sphere(2.0), Point(), 1.5, CollisionOutcome.COLLIDE),
        (Point(), Sphere(2.0), 2.5, CollisionOutcome.SEPARATE),
        (Point(), Point(), 1.5, CollisionOutcome.SEPARATE),
        (Point(), Point(), 0.5, CollisionOutcome.COLLIDE),
        (Cuboid(1, 1, 1), Sphere(1.0), 1.5, CollisionOutcome.UNSUPPORTED),
        (Sphere(500.0), Sphere(500.0), 100.0, CollisionOutcome.SEPARATE),
    ]
    for a, b, distance, expected in cases:
        got = classify_pair(a, b, distance, limits)
        print(a, b, distance, got)
        assert got is expected


def test_detection_is_symmetric_without_duplicates():
    world = World()
    a = _body(world, 0.0)
    b = _body(world, 1.5)
    c = _body(world, 50.0)
    d = _body(world, 0.5, enabled=False)
    ctx = SimulationContext()

    stats = detect_collisions(world, ctx)
    detect_collisions(world, ctx)
    assert stats.collisions == 1
    assert world.get(a, Collisions).entities == [b]
    assert world.get(b, Collisions).entities == [a]
    assert world.get(c, Collisions).entities == []
    assert world.get(d, Collisions).entities == []


def test_cuboid_pairs_are_counted_as_unsupported():
    world = World()
    _body(world, 0.0, shape=Cuboid(1, 1, 1))
    _body(world, 1.5)
    stats = detect_collisions(world, SimulationContext())
    assert stats.unsupported == 1
    assert stats.collisions == 0


def test_two_spheres_merge():
    """
    Unit spheres 1.5 apart merge into one entity with:
      mass = 1 + 3, charge = 1 - 2, position = midpoint,
      velocity = sum, radius = 1/2 + 1/2, lifetime 0.
    """
    world = World()
    _body(world, 0.0, mass=1.0, charge=1.0, velocity=(1, 0, 0))
    _body(world, 1.5, mass=3.0, charge=-2.0, velocity=(0, 1, 0))
    ctx = SimulationContext()

    detect_collisions(world, ctx)
    assert resolve_collisions(world, ctx) == 1
    assert len(world) == 0
    world.maintain()

    survivors = list(world.join(Mass, Charge, Dynamics, Physicality, Lifetime, Collisions))
    assert len(survivors) == 1
    _, (mass, charge, dyn, phys, lifetime, collisions) = survivors[0]
    print("merged", mass, charge, dyn, phys)
    assert mass.value == 4.0
    assert charge.value == -1.0
    assert np.allclose(dyn.position, [0.75, 0, 0])
    assert np.allclose(dyn.velocity, [1, 1, 0])
    assert np.array_equal(dyn.acceleration, np.zeros(3))
    assert phys.shape == Sphere(1.0)
    assert phys.collisions_enabled
    assert lifetime.steps == 0
    assert collisions.entities == []


def test_chain_consumes_each_entity_once():
    """
    A-B and B-C touch, A-C do not. A absorbs B first; C's only partner is
    then gone, so C is left untouched.
    """
    world = World()
    _body(world, 0.0, charge=1.0)
    _body(world, 1.5, charge=1.0)
    c = _body(world, 3.0, charge=-1.0)
    ctx = SimulationContext()
    mass0, charge0 = total_mass(world), total_charge(world)

    detect_collisions(world, ctx)
    assert resolve_collisions(world, ctx) == 1
    world.maintain()

    assert len(world) == 2
    assert world.is_alive(c)
    assert total_mass(world) == mass0
    assert total_charge(world) == charge0
