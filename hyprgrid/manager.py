"""
Grid Manager

Caller-facing operations: apply a preset position, apply an explicit grid
position, reset the focused window and smoke-test a preset.
"""

from __future__ import annotations
import json
import logging
import time
from typing import TYPE_CHECKING, Callable, List, Optional

from .config import DEFAULT_CONFIG, GridConfig
from .geometry import PositionSpec, clamp_to_grid
from .notifier import Notifier
from .orchestrator import PositioningOrchestrator, PositionResult
from .state import WindowStateController

if TYPE_CHECKING:
    from .compositor import CompositorClient

logger = logging.getLogger(__name__)

TEST_STEP_DELAY = 2.0


class GridManager:
    """Entry point for positioning operations.

    Each operation reads the configuration snapshot, builds its components for
    that call and reports success as a boolean; diagnostics go to the log and
    the event bus.
    """

    def __init__(
        self,
        bus,
        client: "CompositorClient",
        config: GridConfig = DEFAULT_CONFIG,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize grid manager.

        Args:
            bus: Event bus instance (Pypubsub)
            client: Compositor channel
            config: Configuration snapshot
            sleep: Sleep function for settle and retry delays
        """
        self.bus = bus
        self.client = client
        self.config = config
        self._sleep = sleep
        self.notifier = Notifier(bus=bus, client=client)
        self.last_result: Optional[PositionResult] = None

    def initialize(self) -> bool:
        """Check that the compositor is running."""
        if not self.client.is_running():
            logger.error("Hyprland is not running")
            return False
        logger.info("Grid Manager initialized successfully")
        return True

    # Presets

    def preset_names(self) -> List[str]:
        return list(self.config.presets)

    def position_codes(self, preset: str) -> List[str]:
        return list(self.config.presets.get(preset, {}))

    def get_position(self, preset: str, code: str) -> Optional[PositionSpec]:
        """Look up a position; None if unknown or empty."""
        position = self.config.presets.get(preset, {}).get(code)
        if position is None or position.width <= 0 or position.height <= 0:
            return None
        return position

    # Operations

    def apply_position_by_code(self, preset: str, code: str) -> bool:
        """Apply the position ``code`` from ``preset`` to the focused window."""
        logger.info(f"Applying position {code} from preset {preset}")
        logger.debug(f"Available presets: {', '.join(self.preset_names())}")

        position = self.get_position(preset, code)
        if position is None:
            available = self.position_codes(preset)
            if available:
                logger.debug(f"Available positions in {preset}: {', '.join(available)}")
            logger.error(f"Position '{code}' not found in preset '{preset}'")
            return False

        logger.debug(f"Found position: {position}")
        return self.apply_grid_position(clamp_to_grid(position, self.config.grid))

    def apply_grid_position(self, spec: PositionSpec) -> bool:
        """Apply an explicit grid position to the focused window."""
        orchestrator = PositioningOrchestrator(
            self.bus, self.client, self.config.grid, sleep=self._sleep
        )
        result = orchestrator.apply_position(spec, self.config.policy())
        self.last_result = result
        for warning in result.warnings:
            logger.debug(f"Positioning warning: {warning.name}")
        return result.ok

    def reset_window_state(self) -> bool:
        """Toggle floating twice on the focused window and clear window rules."""
        logger.info("Resetting window state")
        window = self.client.query_focused_window()
        if window is None:
            logger.error("No focused window")
            return False

        controller = WindowStateController(self.bus, self.client, sleep=self._sleep)
        if not controller.reset(window.handle):
            logger.warning(f"Toggling floating state of {window.handle} reported failure")
        if not self.client.clear_window_rules():
            logger.warning("Failed to clear window rules")
        return True

    def test_all_positions(self, step_delay: float = TEST_STEP_DELAY) -> bool:
        """Apply every position of the first preset in turn.

        Args:
            step_delay: Seconds to wait between positions

        Returns:
            True if every position applied successfully
        """
        logger.info("Starting grid position test - cycling through all available positions")

        presets = self.preset_names()
        if not presets:
            logger.error("No presets available for testing")
            return False

        preset = presets[0]
        codes = self.position_codes(preset)
        if not codes:
            logger.error(f"No positions available in preset '{preset}'")
            return False

        logger.info(f"Testing {len(codes)} positions from preset '{preset}'")
        all_success = True
        for index, code in enumerate(codes):
            if index > 0:
                self._sleep(step_delay)
            logger.info(f"Testing position: {preset}:{code}")
            if self.apply_position_by_code(preset, code):
                logger.info(f"Successfully applied position: {preset}:{code}")
            else:
                logger.error(f"Failed to apply position: {preset}:{code}")
                all_success = False

        logger.info(f"Grid position test completed. Success: {'Yes' if all_success else 'No'}")
        return all_success

    def config_json(self) -> str:
        """Current configuration as indented JSON."""
        return json.dumps(self.config.to_dict(), indent=4)
