# MIT License (see LICENSE)
"""
Command-line interface.

    grav [-f FILE] [-l LEVEL] [-M MODE] run [--config FILE] [--entities N] ...
    grav write-config FILE

Logging options default from the GRAV_LOG_FILE, GRAV_LOG_LEVEL and
GRAV_LOG_MODE environment variables. Options given to ``run`` override the
values loaded from ``--config``.
"""
from __future__ import annotations
import argparse
import logging
import os
import sys
from dataclasses import replace

from .config import OUTPUT_MODES, RunConfig
from .exceptions import GravError
from .io.config_io import load_config, save_config
from .logging_config import LOG_LEVELS, LOG_MODES, setup_logging
from .profiler import Profiler
from .simulation import Simulation

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grav",
        description="Newtonian and electrostatic particle simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 200 entities for 1000 steps, snapshots to output.yaml
  grav run --entities 200 --steps 1000

  # Reproducible run from a config file, debug logging
  grav -l debug run --config run.yaml --seed 42 --output-mode overwrite

  # Write the default configuration to edit
  grav write-config run.yaml
        """,
    )
    parser.add_argument(
        "-f", "--log-file",
        default=os.environ.get("GRAV_LOG_FILE", "grav.log"),
        help="Log file path (env GRAV_LOG_FILE, default: grav.log)",
    )
    parser.add_argument(
        "-l", "--log-level",
        choices=list(LOG_LEVELS),
        default=os.environ.get("GRAV_LOG_LEVEL", "info").lower(),
        help="Log level (env GRAV_LOG_LEVEL, default: info)",
    )
    parser.add_argument(
        "-M", "--log-mode",
        choices=list(LOG_MODES),
        default=os.environ.get("GRAV_LOG_MODE", "append").lower(),
        help="Append to or overwrite the log file (env GRAV_LOG_MODE, default: append)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Seed a population and run the simulation")
    run.add_argument("--config", metavar="FILE", help="JSON or YAML run configuration")
    run.add_argument("--entities", type=int, help="Number of entities to seed")
    run.add_argument("--steps", type=int, help="Number of steps to simulate")
    run.add_argument("--output", metavar="FILE", help="YAML snapshot file")
    run.add_argument("--no-output", action="store_true", help="Do not write snapshots")
    run.add_argument("--output-mode", choices=OUTPUT_MODES, help="Append to or overwrite the output file")
    run.add_argument("--seed", type=int, help="Random seed for the initial population")
    run.add_argument("--workers", type=int, help="Threads for concurrent stages (1 = serial)")
    run.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    run.add_argument("--profile", action="store_true", help="Log per-stage timings at the end")

    write = sub.add_parser("write-config", help="Write the default configuration to a file")
    write.add_argument("path", help="Destination (.json, .yaml or .yml)")

    return parser


def config_from_args(args: argparse.Namespace) -> RunConfig:
    """
    Load ``--config`` (or the defaults) and apply command-line overrides.

    Raises:
        ConfigurationError: Invalid file or resulting values.
    """
    config = load_config(args.config) if args.config else RunConfig()
    population = config.population
    if args.entities is not None:
        population = replace(population, count=args.entities)
    if args.seed is not None:
        population = replace(population, seed=args.seed)
    config.population = population
    if args.steps is not None:
        config.steps = args.steps
    if args.output is not None:
        config.output_path = args.output
    if args.no_output:
        config.output_path = None
    if args.output_mode is not None:
        config.output_mode = args.output_mode
    if args.workers is not None:
        config.workers = args.workers
    config.validate()
    return config


def run_command(args: argparse.Namespace) -> int:
    config = config_from_args(args)
    logger.info(
        "Configuration: %d entities, %d steps, output %s (%s), %d workers",
        config.population.count,
        config.steps,
        config.output_path,
        config.output_mode,
        config.workers,
    )
    profiler = Profiler() if args.profile else None
    sim = Simulation.from_config(config, profiler=profiler)
    try:
        sim.run(config.steps, progress=not args.no_progress)
    finally:
        sim.close()
    if profiler is not None:
        logger.info("Stage timings:\n%s", profiler.stats.format())
    return 0


def write_config_command(args: argparse.Namespace) -> int:
    save_config(RunConfig(), args.path)
    logger.info("Wrote default configuration to %s", args.path)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse command-line arguments and run the selected command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        setup_logging(args.log_file, args.log_level, args.log_mode)
    except OSError as e:
        print(f"grav: error: cannot open log file {args.log_file}: {e}", file=sys.stderr)
        return 1

    try:
        if args.command == "run":
            return run_command(args)
        return write_config_command(args)
    except (GravError, OSError) as e:
        logger.error("%s", e)
        print(f"grav: error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
