# examples/merge_and_split.py
from grav import Simulation, SimulationContext, SplittingSettings, World
from grav.io import MemorySink
from grav.types import Charge, Collisions, Dynamics, Forces, Lifetime, Mass, Physicality, Sphere


def particle(x: float, charge: float) -> tuple:
    return (
        Charge(charge),
        Collisions(),
        Dynamics(position=(x, 0.0, 0.0)),
        Forces(),
        Lifetime(),
        Mass(1.0),
        Physicality(shape=Sphere(1.0)),
    )


world = World()
world.create(*particle(0.0, 1.0))
world.create(*particle(1.5, 1.0))

sink = MemorySink()
ctx = SimulationContext(
    gravitational_constant=0.0,
    electrostatic_constant=0.0,
    splitting=SplittingSettings(min_lifetime=2, max_lifetime=3),
    output=sink,
)
sim = Simulation(world, ctx)

for _ in range(6):
    sim.step()
    print(f"step {sim.tick}: {len(world)} entities, mass {sim.invariants()['total_mass']}")

for snapshot in sink.snapshots:
    print(snapshot.step, [e.charge for e in snapshot.entities])
