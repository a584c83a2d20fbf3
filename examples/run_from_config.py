# examples/run_from_config.py
import sys

from grav import PopulationSettings, RunConfig, Simulation
from grav.io import load_config, read_snapshots
from grav.logging_config import setup_logging

setup_logging("example.log", "debug", "overwrite")

if len(sys.argv) > 1:
    config = load_config(sys.argv[1])
else:
    config = RunConfig(steps=50, population=PopulationSettings(count=30, seed=7), output_mode="overwrite")

sim = Simulation.from_config(config)
try:
    sim.run(config.steps, progress=True)
finally:
    sim.close()

if config.output_path:
    snapshots = read_snapshots(config.output_path)
    print("snapshots:", len(snapshots), "last step:", snapshots[-1]["step"])
print("final:", sim.invariants())
