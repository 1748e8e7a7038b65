"""
Unit tests for configuration loading.
"""

import dataclasses
import json

import pytest
from hyprgrid.config import (
    DEFAULT_CONFIG,
    AdvancedConfig,
    ConfigError,
    GridConfig,
    config_search_paths,
    load_config,
    parse_config,
    parse_position,
)
from hyprgrid.geometry import GridSpec, PositionSpec


@pytest.fixture
def home(tmp_path, monkeypatch):
    """Isolated home directory with no config files."""
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


@pytest.fixture
def write_config(tmp_path):
    def factory(data, name="config.json"):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(data if isinstance(data, str) else json.dumps(data))
        return path

    return factory


@pytest.mark.unit
class TestDefaults:
    def test_default_values(self):
        assert DEFAULT_CONFIG.grid == GridSpec(rows=3, columns=3, gap=5)
        assert DEFAULT_CONFIG.appearance.show_notifications is True
        assert DEFAULT_CONFIG.appearance.notification_duration == 2000
        assert DEFAULT_CONFIG.advanced == AdvancedConfig()

    def test_default_preset(self):
        default = DEFAULT_CONFIG.presets["default"]

        assert len(default) == 12
        assert default["full"] == PositionSpec(0, 0, 3, 3)
        assert default["medium"] == PositionSpec(0, 0, 3, 3, centered=True, scale=0.65)
        assert default["bottom-right"] == PositionSpec(2, 2, 1, 1)

    def test_snapshot_is_read_only(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_CONFIG.grid = GridSpec(2, 2, 0)
        with pytest.raises(TypeError):
            DEFAULT_CONFIG.presets["extra"] = {}
        with pytest.raises(TypeError):
            DEFAULT_CONFIG.presets["default"]["full"] = PositionSpec()


@pytest.mark.unit
class TestLoadConfig:
    def test_no_file_uses_defaults(self, home):
        assert load_config() is DEFAULT_CONFIG

    def test_search_paths_in_order(self, home):
        paths = config_search_paths()

        assert paths == [
            home / ".config" / "hypr" / "hyprgrid" / "config.json",
            home / ".config" / "hypr" / "grid-config.json",
            home / ".config" / "hypr" / "grid" / "config.json",
        ]

    def test_found_in_search_path(self, home, write_config):
        write_config({"grid": {"rows": 2}}, name=".config/hypr/grid-config.json")

        assert load_config().grid.rows == 2

    def test_first_search_path_wins(self, home, write_config):
        write_config({"grid": {"rows": 4}}, name=".config/hypr/hyprgrid/config.json")
        write_config({"grid": {"rows": 2}}, name=".config/hypr/grid/config.json")

        assert load_config().grid.rows == 4

    def test_overrides(self, write_config):
        path = write_config(
            {
                "grid": {"rows": 2, "columns": 4, "gaps": 10},
                "appearance": {"showNotifications": False, "notificationDuration": 500},
                "advanced": {
                    "logLevel": "DEBUG",
                    "useTiling": True,
                    "retryOnFailure": False,
                    "retryCount": 5,
                    "retryDelay": 50,
                },
            }
        )

        config = load_config(path)

        assert config.grid == GridSpec(rows=2, columns=4, gap=10)
        assert config.appearance.show_notifications is False
        assert config.appearance.notification_duration == 500
        assert config.advanced == AdvancedConfig(
            log_level="debug",
            use_tiling=True,
            retry_on_failure=False,
            retry_count=5,
            retry_delay=50,
        )
        # Presets not given in the file keep the defaults
        assert config.presets == DEFAULT_CONFIG.presets

    def test_invalid_values_defaulted(self, write_config):
        path = write_config(
            {
                "grid": {"rows": 0, "columns": "three", "gaps": -1},
                "appearance": {"showNotifications": "yes", "notificationDuration": float("nan")},
                "advanced": {"logLevel": "loud", "retryCount": -2, "retryDelay": -100},
                "presets": {
                    "p": {
                        "a": {"x": 0, "y": 0, "width": 1, "height": 1, "scale": 0},
                        "b": {"x": 0, "y": 0, "width": 1, "height": 1, "scale": float("inf")},
                    }
                },
            }
        )

        config = load_config(path)

        assert config.grid == GridSpec(rows=3, columns=3, gap=5)
        assert config.appearance.show_notifications is True
        assert config.advanced.log_level == "info"
        assert config.advanced.retry_count == 0
        assert config.advanced.retry_delay == 200
        assert config.presets["p"]["a"].scale == 1.0
        assert config.presets["p"]["b"].scale == 1.0
        assert config.appearance.notification_duration == 2000

    def test_non_finite_numbers_defaulted(self, write_config):
        path = write_config('{"grid": {"rows": Infinity, "columns": -Infinity, "gaps": NaN}}')

        assert load_config(path).grid == GridSpec(rows=3, columns=3, gap=5)

    def test_presets_replace_defaults(self, write_config):
        path = write_config(
            {
                "presets": {
                    "halves": {
                        "left": {"x": 0, "y": 0, "width": 1, "height": 2},
                        "center": {"centered": True, "scale": 0.5},
                        "broken": "not an object",
                    },
                    "ignored": [],
                }
            }
        )

        config = load_config(path)

        assert list(config.presets) == ["halves"]
        assert config.presets["halves"]["left"] == PositionSpec(0, 0, 1, 2)
        assert config.presets["halves"]["center"] == PositionSpec(
            0, 0, 0, 0, centered=True, scale=0.5
        )
        assert "broken" not in config.presets["halves"]

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "missing.json")

    def test_invalid_json(self, write_config):
        with pytest.raises(ConfigError):
            load_config(write_config("{not json"))

    def test_non_object_json(self, write_config):
        with pytest.raises(ConfigError):
            load_config(write_config([1, 2, 3]))


@pytest.mark.unit
class TestParsing:
    def test_missing_size_is_zero(self):
        assert parse_position({"x": 1, "y": 2}) == PositionSpec(1, 2, 0, 0)

    def test_parse_onto_base(self):
        base = GridConfig(grid=GridSpec(4, 4, 2))

        config = parse_config({"grid": {"gaps": 8}}, base=base)

        assert config.grid == GridSpec(4, 4, 8)


@pytest.mark.unit
class TestPolicy:
    def test_policy_from_config(self):
        policy = DEFAULT_CONFIG.policy()

        assert policy.use_tiling_heuristic is False
        assert policy.retry_count == 3
        assert policy.retry_delay_ms == 200
        assert policy.state_retry_count == 3
        assert policy.notify is True
        assert policy.notification_timeout_ms == 2000

    def test_retry_disabled(self):
        config = GridConfig(advanced=AdvancedConfig(retry_on_failure=False, retry_count=5))

        assert config.policy().retry_count == 0
        assert config.policy().state_retry_count == 5

    def test_to_dict_round_trips_through_parser(self):
        data = json.loads(json.dumps(DEFAULT_CONFIG.to_dict()))

        assert parse_config(data, base=GridConfig()) == DEFAULT_CONFIG
