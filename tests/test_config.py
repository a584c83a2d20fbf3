import json

import pytest

from grav.config import PopulationSettings, RunConfig, SystemToggles
from grav.context import BoundaryMode, DynamicsLimits, SimulationContext, SplittingSettings
from grav.exceptions import ConfigurationError
from grav.io import config_from_dict, load_config, save_config


def _custom_config() -> RunConfig:
    return RunConfig(
        context=SimulationContext(
            gravitational_constant=0.5,
            dt=0.1,
            dynamics_limits=DynamicsLimits(max_velocity=20.0),
            splitting=SplittingSettings(min_lifetime=10, max_lifetime=50),
            boundary_mode=BoundaryMode.CLAMP,
        ),
        toggles=SystemToggles(electrostatics=False),
        population=PopulationSettings(count=12, charges=(1.0, -1.0), seed=9),
        steps=42,
        output_path="snaps.yaml",
        output_mode="overwrite",
        workers=2,
    )


def test_defaults_are_valid():
    config = RunConfig()
    config.validate()
    assert config.context.collision_limits.min_threshold == 1.0
    assert config.context.collision_limits.max_threshold == 100.0
    assert config.context.splitting.max_lifetime == 1000
    assert config.population.charges == (0.0, -1.0, 1.0)


@pytest.mark.parametrize("name", ["run.json", "run.yaml", "run.yml"])
def test_save_and_load(tmp_path, name):
    path = tmp_path / name
    config = _custom_config()
    save_config(config, path)
    loaded = load_config(path)
    print(path.read_text())
    assert loaded == config
    assert loaded.context.dynamics_limits.max_position == float("inf")


def test_json_file_is_standard_json(tmp_path):
    path = tmp_path / "run.json"
    save_config(RunConfig(), path)
    data = json.loads(path.read_text())
    assert data["context"]["dynamics_limits"]["max_velocity"] == "inf"


def test_partial_file_uses_defaults(tmp_path):
    path = tmp_path / "partial.yaml"
    path.write_text("steps: 7\ncontext:\n  dt: 0.25\n  boundary_mode: clamp\n")
    config = load_config(path)
    assert config.steps == 7
    assert config.context.dt == 0.25
    assert config.context.boundary_mode is BoundaryMode.CLAMP
    assert config.context.gravitational_constant == 1.0
    assert config.population == PopulationSettings()
    assert config.toggles == SystemToggles()


@pytest.mark.parametrize("data", [
    {"context": {"dt": 0}},
    {"context": {"dt": "fast"}},
    {"context": {"boundary_mode": "wrap"}},
    {"context": {"dynamics_limits": {"min_velocity": 5, "max_velocity": 1}}},
    {"context": {"collision_limits": {"min_threshold": -1}}},
    {"context": {"splitting": {"min_lifetime": 10, "max_lifetime": 5}}},
    {"output_mode": "truncate"},
    {"workers": 0},
    {"steps": -1},
    {"population": {"count": -3}},
    {"population": {"charges": []}},
    {"population": "many"},
    {"context": {"dt": "nan"}},
    {"context": {"dynamics_limits": {"max_velocity": "nan"}}},
    {"context": {"orientation_limits": {"min_angular_velocity": "nan"}}},
    {"context": {"collision_limits": {"max_threshold": "nan"}}},
    {"context": {"gravitational_constant": "nan"}},
    {"population": {"max_speed": "nan"}},
    {"population": {"charges": [1, "nan"]}},
    {"systems": {"gravity": "no"}},
    {"systems": {"collisions": 1}},
    {"population": {"orientation": "yes"}},
])
def test_invalid_values_raise(data):
    with pytest.raises(ConfigurationError):
        config_from_dict(data)


def test_bad_files_raise(tmp_path):
    with pytest.raises(ConfigurationError):
        load_config(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(ConfigurationError):
        load_config(broken)

    listing = tmp_path / "list.yaml"
    listing.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigurationError):
        load_config(listing)


def test_null_output_disables_snapshots():
    config = config_from_dict({"output": None})
    assert config.output_path is None


def test_boolean_strings_are_parsed_strictly(tmp_path):
    """A quoted "false" disables a system; it must not read as a truthy string."""
    config = config_from_dict({"systems": {"gravity": "false", "splitting": "TRUE"}})
    assert config.toggles.gravity is False
    assert config.toggles.splitting is True

    path = tmp_path / "run.yaml"
    path.write_text('systems:\n  electrostatics: "false"\n  collisions: false\n'
                    'population:\n  orientation: "true"\n')
    loaded = load_config(path)
    assert loaded.toggles.electrostatics is False
    assert loaded.toggles.collisions is False
    assert loaded.population.orientation is True
