# examples/two_body_gravity.py
from grav import Simulation, SimulationContext, SystemToggles, World, build_default_scheduler
from grav.types import Dynamics, Forces, Mass

world = World()
a = world.create(Dynamics(position=(-10.0, 0.0, 0.0), velocity=(0.0, -0.15, 0.0)), Mass(1.0), Forces())
b = world.create(Dynamics(position=(10.0, 0.0, 0.0), velocity=(0.0, 0.15, 0.0)), Mass(1.0), Forces())

ctx = SimulationContext(dt=0.1)
scheduler = build_default_scheduler(SystemToggles(collisions=False, splitting=False))
sim = Simulation(world, ctx, scheduler)
sim.run(2000)

print("a pos:", world.get(a, Dynamics).position)
print("b pos:", world.get(b, Dynamics).position)
print("invariants:", sim.invariants())
