# MIT License (see LICENSE)
"""
Input/Output utilities for grav.

This subpackage provides:
    - Config files: Load and save run configuration as JSON or YAML.
    - Snapshot output: Per-tick YAML documents or in-memory snapshots.

Typical usage:
    from grav.io import load_config, YamlSnapshotWriter

    config = load_config("run.yaml")
    sink = YamlSnapshotWriter(config.output_path, mode=config.output_mode)
"""
from .config_io import (
    config_from_dict,
    config_to_dict,
    context_from_dict,
    load_config,
    load_config_raw,
    save_config,
)
from .output import (
    EntitySnapshot,
    MemorySink,
    OutputSink,
    Snapshot,
    YamlSnapshotWriter,
    read_snapshots,
    take_snapshot,
    write_output,
)

__all__ = [
    # Config
    "load_config",
    "load_config_raw",
    "save_config",
    "config_from_dict",
    "config_to_dict",
    "context_from_dict",
    # Output
    "OutputSink",
    "YamlSnapshotWriter",
    "MemorySink",
    "Snapshot",
    "EntitySnapshot",
    "take_snapshot",
    "write_output",
    "read_snapshots",
]
