"""
Configuration

Immutable configuration snapshot, built-in defaults and JSON loading.
"""

from __future__ import annotations
import json
import logging
import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from .geometry import GridSpec, PositionSpec, normalize_scale
from .orchestrator import PositionPolicy

logger = logging.getLogger(__name__)

LOG_LEVELS = ("debug", "info", "warn", "error")


class ConfigError(ValueError):
    """Raised when a configuration file cannot be used."""


def default_config_dir() -> Path:
    return Path.home() / ".config" / "hypr" / "hyprgrid"


def config_search_paths() -> List[Path]:
    """Config file locations, in lookup order."""
    hypr = Path.home() / ".config" / "hypr"
    return [
        default_config_dir() / "config.json",
        hypr / "grid-config.json",
        hypr / "grid" / "config.json",
    ]


@dataclass(frozen=True)
class AppearanceConfig:
    """Notification settings."""

    show_notifications: bool = True
    notification_duration: int = 2000


@dataclass(frozen=True)
class AdvancedConfig:
    """Positioning policy and diagnostics settings."""

    log_level: str = "info"
    use_tiling: bool = False
    retry_on_failure: bool = True
    retry_count: int = 3
    retry_delay: int = 200


Presets = Mapping[str, Mapping[str, PositionSpec]]


def _freeze_presets(presets: Mapping[str, Mapping[str, PositionSpec]]) -> Presets:
    return MappingProxyType(
        {name: MappingProxyType(dict(codes)) for name, codes in presets.items()}
    )


@dataclass(frozen=True)
class GridConfig:
    """A read-only configuration snapshot."""

    grid: GridSpec = GridSpec()
    appearance: AppearanceConfig = AppearanceConfig()
    advanced: AdvancedConfig = AdvancedConfig()
    presets: Presets = field(default_factory=lambda: _freeze_presets({}))

    def __post_init__(self):
        """Freeze presets so a snapshot cannot be changed after creation."""
        if not isinstance(self.presets, MappingProxyType):
            object.__setattr__(self, "presets", _freeze_presets(self.presets))

    def policy(self) -> PositionPolicy:
        """Build the positioning policy from this snapshot."""
        return PositionPolicy(
            use_tiling_heuristic=self.advanced.use_tiling,
            retry_count=self.advanced.retry_count if self.advanced.retry_on_failure else 0,
            retry_delay_ms=self.advanced.retry_delay,
            state_retry_count=self.advanced.retry_count,
            notify=self.appearance.show_notifications,
            notification_timeout_ms=self.appearance.notification_duration,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Render the snapshot in the config file's JSON shape."""
        return {
            "grid": {
                "rows": self.grid.rows,
                "columns": self.grid.columns,
                "gaps": self.grid.gap,
            },
            "appearance": {
                "showNotifications": self.appearance.show_notifications,
                "notificationDuration": self.appearance.notification_duration,
            },
            "advanced": {
                "logLevel": self.advanced.log_level,
                "useTiling": self.advanced.use_tiling,
                "retryOnFailure": self.advanced.retry_on_failure,
                "retryCount": self.advanced.retry_count,
                "retryDelay": self.advanced.retry_delay,
            },
            "presets": {
                name: {code: position_to_dict(spec) for code, spec in codes.items()}
                for name, codes in self.presets.items()
            },
        }


def position_to_dict(spec: PositionSpec) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "x": spec.x,
        "y": spec.y,
        "width": spec.width,
        "height": spec.height,
    }
    if spec.centered:
        data["centered"] = True
        data["scale"] = spec.scale
    return data


def _full(**kwargs) -> PositionSpec:
    return PositionSpec(0, 0, 3, 3, **kwargs)


DEFAULT_CONFIG = GridConfig(
    presets={
        "default": {
            "full": _full(),
            "large": _full(centered=True, scale=0.85),
            "medium": _full(centered=True, scale=0.65),
            "small": _full(centered=True, scale=0.4),
            "left": PositionSpec(0, 0, 1, 3),
            "right": PositionSpec(2, 0, 1, 3),
            "top": PositionSpec(0, 0, 3, 1),
            "bottom": PositionSpec(0, 2, 3, 1),
            "top-left": PositionSpec(0, 0, 1, 1),
            "top-right": PositionSpec(2, 0, 1, 1),
            "bottom-left": PositionSpec(0, 2, 1, 1),
            "bottom-right": PositionSpec(2, 2, 1, 1),
        }
    }
)


# Parsing helpers: invalid values fall back to the default


def _finite(value) -> bool:
    return not isinstance(value, float) or math.isfinite(value)


def _int(data: Mapping, key: str, default: int, minimum: Optional[int] = None) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not _finite(value):
        if key in data:
            logger.debug(f"Invalid value for {key!r}: {value!r}, using {default}")
        return default
    value = int(value)
    if minimum is not None and value < minimum:
        logger.debug(f"Value for {key!r} below {minimum}: {value}, using {default}")
        return default
    return value


def _bool(data: Mapping, key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        logger.debug(f"Invalid value for {key!r}: {value!r}, using {default}")
        return default
    return value


def _section(data: Mapping, key: str) -> Mapping:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def parse_position(data: Mapping) -> PositionSpec:
    """Build a PositionSpec from a preset entry; missing fields become zero."""
    scale = data.get("scale", 1.0)
    if isinstance(scale, bool) or not isinstance(scale, (int, float)) or not _finite(scale):
        logger.debug(f"Invalid scale {scale!r}, using 1.0")
        scale = 1.0
    return PositionSpec(
        x=_int(data, "x", 0),
        y=_int(data, "y", 0),
        width=_int(data, "width", 0),
        height=_int(data, "height", 0),
        centered=_bool(data, "centered", False),
        scale=normalize_scale(float(scale)),
    )


def parse_config(data: Mapping, base: GridConfig = DEFAULT_CONFIG) -> GridConfig:
    """Overlay a parsed JSON object onto ``base``.

    Sections missing from ``data`` keep the values of ``base``.
    """
    grid_data = _section(data, "grid")
    grid = GridSpec(
        rows=_int(grid_data, "rows", base.grid.rows, minimum=1),
        columns=_int(grid_data, "columns", base.grid.columns, minimum=1),
        gap=_int(grid_data, "gaps", base.grid.gap, minimum=0),
    )

    appearance_data = _section(data, "appearance")
    appearance = AppearanceConfig(
        show_notifications=_bool(
            appearance_data, "showNotifications", base.appearance.show_notifications
        ),
        notification_duration=_int(
            appearance_data,
            "notificationDuration",
            base.appearance.notification_duration,
            minimum=0,
        ),
    )

    advanced_data = _section(data, "advanced")
    log_level = str(advanced_data.get("logLevel", base.advanced.log_level)).lower()
    if log_level not in LOG_LEVELS:
        logger.debug(f"Unknown log level {log_level!r}, using {base.advanced.log_level}")
        log_level = base.advanced.log_level
    retry_count = _int(advanced_data, "retryCount", base.advanced.retry_count)
    advanced = AdvancedConfig(
        log_level=log_level,
        use_tiling=_bool(advanced_data, "useTiling", base.advanced.use_tiling),
        retry_on_failure=_bool(
            advanced_data, "retryOnFailure", base.advanced.retry_on_failure
        ),
        retry_count=max(0, retry_count),
        retry_delay=_int(advanced_data, "retryDelay", base.advanced.retry_delay, minimum=0),
    )

    presets: Mapping[str, Mapping[str, PositionSpec]] = base.presets
    presets_data = data.get("presets")
    if isinstance(presets_data, dict):
        presets = {
            name: {
                code: parse_position(position)
                for code, position in codes.items()
                if isinstance(position, dict)
            }
            for name, codes in presets_data.items()
            if isinstance(codes, dict)
        }

    return replace(
        base, grid=grid, appearance=appearance, advanced=advanced, presets=presets
    )


def find_config_file() -> Optional[Path]:
    for path in config_search_paths():
        if path.is_file():
            return path
    return None


def load_config(path: Optional[Path] = None) -> GridConfig:
    """Load configuration from ``path`` or the first standard location.

    Args:
        path: Explicit config file; searched for when None

    Returns:
        GridConfig snapshot; DEFAULT_CONFIG when no file exists

    Raises:
        ConfigError: If the file cannot be read or is not a JSON object
    """
    if path is None:
        path = find_config_file()
        if path is None:
            logger.debug("No config file found, using defaults")
            return DEFAULT_CONFIG

    logger.debug(f"Loading config from {path}")
    try:
        data = json.loads(Path(path).read_text())
    except OSError as e:
        raise ConfigError(f"Cannot open config file {path}: {e}") from e
    except ValueError as e:
        raise ConfigError(f"Invalid JSON in config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Invalid JSON in config file {path}: expected an object")
    return parse_config(data)
