import numpy as np

from grav.context import SimulationContext
from grav.core import aggregate_forces, apply_electrostatics, apply_gravity, clear_forces
from grav.ecs import World
from grav.populate import populate
from grav.config import PopulationSettings
from grav.types import Charge, Dynamics, Forces, Mass, force_key


def test_gravity_two_equal_masses():
    """
    Analytic: |F| = G m^2 / r^2, directed toward the other body.
      G = 1, m = 2, r = 4  ->  |F| = 0.25
    """
    world = World()
    a = world.create(Dynamics(position=(0, 0, 0)), Mass(2.0), Forces())
    b = world.create(Dynamics(position=(4, 0, 0)), Mass(2.0), Forces())

    computed = apply_gravity(world, SimulationContext())
    fa = world.get(a, Forces).contributions[force_key("gravity", b)]
    fb = world.get(b, Forces).contributions[force_key("gravity", a)]
    print("fa", fa, "fb", fb)

    assert computed == 1
    assert np.allclose(fa, [0.25, 0.0, 0.0])
    assert np.allclose(fb, [-0.25, 0.0, 0.0])


def test_force_map_is_antisymmetric():
    world = World()
    populate(world, PopulationSettings(count=8, seed=3))
    ctx = SimulationContext()
    apply_gravity(world, ctx)
    apply_electrostatics(world, ctx)

    entities = [e for e, _ in world.join(Forces)]
    for i in entities:
        for j in entities:
            if i == j:
                continue
            fi = world.get(i, Forces).contributions
            fj = world.get(j, Forces).contributions
            for kind in ("gravity", "electrostatics"):
                key_ij = force_key(kind, j)
                key_ji = force_key(kind, i)
                assert (key_ij in fi) == (key_ji in fj)
                if key_ij in fi:
                    assert np.array_equal(fi[key_ij], -fj[key_ji])


def test_like_charges_repel_opposite_attract():
    """
    F_i = -k q_i q_j d / r^3 with d = x_j - x_i.
      k = 1, r = 2, q = +1/+1  ->  F on i = (-0.25, 0, 0)   (away from j)
      q = +1/-1                ->  F on i = (+0.25, 0, 0)   (toward j)
    """
    ctx = SimulationContext()

    world = World()
    a = world.create(Dynamics(position=(0, 0, 0)), Charge(1.0), Forces())
    b = world.create(Dynamics(position=(2, 0, 0)), Charge(1.0), Forces())
    apply_electrostatics(world, ctx)
    assert np.allclose(world.get(a, Forces).contributions[force_key("electrostatics", b)], [-0.25, 0, 0])

    world = World()
    a = world.create(Dynamics(position=(0, 0, 0)), Charge(1.0), Forces())
    b = world.create(Dynamics(position=(2, 0, 0)), Charge(-1.0), Forces())
    apply_electrostatics(world, ctx)
    assert np.allclose(world.get(a, Forces).contributions[force_key("electrostatics", b)], [0.25, 0, 0])


def test_coincident_pair_exerts_no_force():
    world = World()
    a = world.create(Dynamics(position=(1, 1, 1)), Mass(1.0), Forces())
    world.create(Dynamics(position=(1, 1, 1)), Mass(1.0), Forces())

    assert apply_gravity(world, SimulationContext()) == 0
    assert world.get(a, Forces).contributions == {}
    aggregate_forces(world, SimulationContext())
    assert not np.isnan(world.get(a, Dynamics).acceleration).any()


def test_existing_pair_is_not_recomputed():
    world = World()
    world.create(Dynamics(position=(0, 0, 0)), Mass(1.0), Forces())
    world.create(Dynamics(position=(3, 0, 0)), Mass(1.0), Forces())
    ctx = SimulationContext()
    assert apply_gravity(world, ctx) == 1
    assert apply_gravity(world, ctx) == 0


def test_aggregate_forces_divides_by_mass():
    """a = sum(F) / m: ((2,0,0) + (0,4,0)) / 2 = (1,2,0)."""
    world = World()
    e = world.create(
        Dynamics(acceleration=(9, 9, 9)),
        Mass(2.0),
        Forces({"gravity:1.0": np.array([2.0, 0, 0]), "electrostatics:1.0": np.array([0, 4.0, 0])}),
    )
    aggregate_forces(world, SimulationContext())
    assert np.allclose(world.get(e, Dynamics).acceleration, [1, 2, 0])


def test_zero_mass_gets_zero_acceleration():
    world = World()
    e = world.create(Dynamics(acceleration=(1, 1, 1)), Mass(0.0), Forces({"gravity:1.0": np.ones(3)}))
    aggregate_forces(world, SimulationContext())
    assert np.array_equal(world.get(e, Dynamics).acceleration, np.zeros(3))


def test_clear_forces():
    world = World()
    e = world.create(Forces({"gravity:1.0": np.ones(3)}))
    clear_forces(world, SimulationContext())
    assert world.get(e, Forces).contributions == {}
