# MIT License (see LICENSE)
"""
Loading and saving run configuration files.

JSON is the default format; files ending in ``.yaml`` or ``.yml`` are read
and written as YAML. Every key is optional and falls back to the package
defaults.

Schema Overview:
----------------
{
  "steps": int,                    # Default: 100
  "output": string | null,         # Snapshot file, default: "output.yaml"
  "output_mode": string,           # "append" | "overwrite"
  "workers": int,                  # Default: 4
  "context": {
    "gravitational_constant": float,
    "electrostatic_constant": float,
    "dt": float,
    "boundary_mode": string,       # "bounce" | "clamp"
    "dynamics_limits": {"min_acceleration": float, "max_acceleration": float,
                        "min_velocity": float, "max_velocity": float,
                        "min_position": float, "max_position": float},
    "orientation_limits": {"min_angular_acceleration": float, ...},
    "collision_limits": {"min_threshold": float, "max_threshold": float},
    "splitting": {"min_lifetime": int, "max_lifetime": int,
                  "separation_multiplier": float,
                  "velocity_multiplier": float}
  },
  "systems": {"gravity": bool, "electrostatics": bool, "collisions": bool,
              "splitting": bool, "orientation": bool},
  "population": {"count": int, "min_position": float, "max_position": float,
                 "min_speed": float, "max_speed": float, "mass": float,
                 "charges": [float, ...], "radius": float,
                 "orientation": bool, "seed": int | null}
}

Infinite limits are written as the string "inf".
"""
from __future__ import annotations
import json
import logging
from dataclasses import asdict, fields, replace
from pathlib import Path
from typing import Any

import yaml

from ..config import PopulationSettings, RunConfig, SystemToggles
from ..context import (
    BoundaryMode,
    CollisionLimits,
    DynamicsLimits,
    OrientationLimits,
    SimulationContext,
    SplittingSettings,
)
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


def _is_yaml(path: str | Path) -> bool:
    return Path(path).suffix.lower() in YAML_SUFFIXES


def load_config_raw(path: str | Path) -> dict[str, Any]:
    """
    Load raw data from a config file without object construction.

    Raises:
        ConfigurationError: The file is missing, unparsable or not a mapping.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            if _is_yaml(path):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Unable to read config file {path}: {e}") from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Invalid config file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"'{key}' must be a mapping")
    return value


def _build(cls: type, data: dict[str, Any], convert: dict[str, Any] | None = None) -> Any:
    """
    Construct dataclass ``cls`` from the keys of ``data`` it knows about.

    Unknown keys are ignored with a warning. Each known value is passed
    through its converter (float by default).
    """
    convert = convert or {}
    names = {f.name for f in fields(cls)}
    for key in data:
        if key not in names:
            logger.warning("Ignoring unknown config key '%s' for %s", key, cls.__name__)
    kwargs = {}
    for name in names:
        if name not in data:
            continue
        conv = convert.get(name, float)
        try:
            kwargs[name] = conv(data[name])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid value for '{name}': {data[name]!r}") from e
    return cls(**kwargs)


def _boundary_mode(value: Any) -> BoundaryMode:
    try:
        return BoundaryMode(str(value).lower())
    except ValueError as e:
        modes = ", ".join(m.value for m in BoundaryMode)
        raise ConfigurationError(f"boundary_mode must be one of {modes}, got {value!r}") from e


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)


def _strict_bool(value: Any) -> bool:
    """Accept real booleans and the strings true/false (any case)."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise ValueError(f"expected true or false, got {value!r}")


def context_from_dict(d: dict[str, Any]) -> SimulationContext:
    """Parse the ``context`` section into a SimulationContext."""
    scalars = {
        k: d[k] for k in ("gravitational_constant", "electrostatic_constant", "dt") if k in d
    }
    ctx = _build(SimulationContext, scalars)
    kwargs: dict[str, Any] = {}
    if "boundary_mode" in d:
        kwargs["boundary_mode"] = _boundary_mode(d["boundary_mode"])
    kwargs["dynamics_limits"] = _build(DynamicsLimits, _section(d, "dynamics_limits"))
    kwargs["orientation_limits"] = _build(OrientationLimits, _section(d, "orientation_limits"))
    kwargs["collision_limits"] = _build(CollisionLimits, _section(d, "collision_limits"))
    kwargs["splitting"] = _build(
        SplittingSettings,
        _section(d, "splitting"),
        convert={"min_lifetime": int, "max_lifetime": int},
    )
    for key in d:
        if key not in scalars and key not in kwargs and key != "boundary_mode":
            logger.warning("Ignoring unknown config key '%s' for SimulationContext", key)
    return replace(ctx, **kwargs)


def config_from_dict(data: dict[str, Any]) -> RunConfig:
    """
    Build and validate a RunConfig from parsed file data.

    Raises:
        ConfigurationError: A value has the wrong type or is out of range.
    """
    population = _build(
        PopulationSettings,
        _section(data, "population"),
        convert={
            "count": int,
            "charges": lambda v: tuple(float(x) for x in v),
            "orientation": _strict_bool,
            "seed": _optional_int,
        },
    )
    toggles = _build(
        SystemToggles,
        _section(data, "systems"),
        convert={f.name: _strict_bool for f in fields(SystemToggles)},
    )
    config = RunConfig(
        context=context_from_dict(_section(data, "context")),
        toggles=toggles,
        population=population,
    )
    try:
        if "steps" in data:
            config.steps = int(data["steps"])
        if "workers" in data:
            config.workers = int(data["workers"])
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid integer in config: {e}") from e
    if "output" in data:
        config.output_path = None if data["output"] is None else str(data["output"])
    if "output_mode" in data:
        config.output_mode = str(data["output_mode"]).lower()
    config.validate()
    return config


def load_config(path: str | Path) -> RunConfig:
    """
    Load and validate a RunConfig from a JSON or YAML file.

    Raises:
        ConfigurationError: The file cannot be read or holds invalid values.
    """
    config = config_from_dict(load_config_raw(path))
    logger.info("Loaded configuration from %s", path)
    return config


def config_to_dict(config: RunConfig) -> dict[str, Any]:
    """Serialize a RunConfig to a file-ready dictionary."""
    ctx = config.context
    context = {
        "gravitational_constant": ctx.gravitational_constant,
        "electrostatic_constant": ctx.electrostatic_constant,
        "dt": ctx.dt,
        "boundary_mode": ctx.boundary_mode.value,
        "dynamics_limits": _finite(asdict(ctx.dynamics_limits)),
        "orientation_limits": _finite(asdict(ctx.orientation_limits)),
        "collision_limits": _finite(asdict(ctx.collision_limits)),
        "splitting": asdict(ctx.splitting),
    }
    population = asdict(config.population)
    population["charges"] = list(config.population.charges)
    return {
        "steps": config.steps,
        "output": config.output_path,
        "output_mode": config.output_mode,
        "workers": config.workers,
        "context": context,
        "systems": asdict(config.toggles),
        "population": population,
    }


def save_config(config: RunConfig, path: str | Path, indent: int = 2) -> None:
    """Save a RunConfig as JSON, or YAML for .yaml/.yml paths."""
    data = config_to_dict(config)
    with open(path, "w", encoding="utf-8") as f:
        if _is_yaml(path):
            yaml.safe_dump(data, f, sort_keys=False)
        else:
            json.dump(data, f, indent=indent)


def _finite(d: dict[str, float]) -> dict[str, float | str]:
    """Helper: replace infinities with "inf" so JSON stays standard."""
    return {k: ("inf" if v == float("inf") else v) for k, v in d.items()}
