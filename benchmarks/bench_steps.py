"""
Microbenchmark: time per tick vs number of entities, serial vs threaded.
Run:
  python benchmarks/bench_steps.py
"""
import time

from grav import PopulationSettings, Simulation, SimulationContext, World, build_default_scheduler
from grav.populate import populate
from grav.profiler import Profiler


def run(n: int, workers: int, steps: int = 20):
    prof = Profiler()
    world = World(capacity=n)
    populate(world, PopulationSettings(count=n, seed=12345))  # determinism
    sim = Simulation(world, SimulationContext(), build_default_scheduler(workers=workers, profiler=prof))

    # warmup
    for _ in range(2):
        sim.step()

    t0 = time.perf_counter()
    for _ in range(steps):
        sim.step()
    t1 = time.perf_counter()
    sim.close()

    per_step = (t1 - t0) / steps
    return per_step, prof.stats.summary()


if __name__ == "__main__":
    for n in [10, 50, 100, 200]:
        for workers in (1, 4):
            per_step, summary = run(n, workers)
            print(f"N={n:4d} workers={workers}  step={1e3*per_step:8.3f} ms  steps/s={1/per_step:8.1f}")
            # print top sections
            for k in ["gravity", "electrostatics", "collision-detect", "integrate"]:
                if k in summary:
                    print(" ", k, summary[k])
        print()
