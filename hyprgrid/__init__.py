"""
Hypr Grid Manager (hyprgrid)

Snap the focused window into cells of a virtual grid overlaid on the screen.
Window movement is delegated to the Hyprland compositor through ``hyprctl``.

This package provides:
- Grid geometry: resolving grid positions to pixel rectangles
- A compositor client for hyprctl queries and dispatch commands
- A window state controller that makes windows floating before placement
- A positioning orchestrator with retries and geometry verification
- Presets, configuration loading and a command line interface

Example usage:
    from pubsub import pub
    from hyprgrid import GridManager, HyprctlClient, load_config

    manager = GridManager(bus=pub, client=HyprctlClient(), config=load_config())
    manager.apply_position_by_code("default", "left")

Or run directly:
    python -m hyprgrid default left
"""

__version__ = "0.1.0"
__author__ = "hyprgrid contributors"

from .geometry import (
    GridSpec,
    PositionSpec,
    ScreenGeometry,
    PixelRect,
    resolve,
    clamp_to_grid,
)

from .compositor import (
    CompositorClient,
    HyprctlClient,
    WindowHandle,
    WindowInfo,
    WindowMode,
    interpret_command_result,
)

from .state import WindowStateController

from .orchestrator import (
    PositioningOrchestrator,
    PositionPolicy,
    PositionResult,
    ErrorKind,
    Strategy,
)

from .config import (
    GridConfig,
    AppearanceConfig,
    AdvancedConfig,
    ConfigError,
    DEFAULT_CONFIG,
    load_config,
)

from .notifier import Notifier
from .manager import GridManager

from . import topics
