"""
Positioning Orchestrator

Composes geometry resolution, window state control and the compositor
channel into one positioning operation with verification and retries.
"""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable, List, Optional

from . import topics
from .geometry import GridSpec, PixelRect, PositionSpec, resolve
from .state import WindowStateController

if TYPE_CHECKING:
    from .compositor import CompositorClient

logger = logging.getLogger(__name__)

POSITION_TOLERANCE = 5
SIZE_TOLERANCE = 10


class ErrorKind(Enum):
    """Kinds of positioning errors and warnings."""

    SCREEN_UNAVAILABLE = auto()
    NO_FOCUSED_WINDOW = auto()
    STATE_TRANSITION_FAILED = auto()
    COMMAND_FAILED = auto()
    VERIFICATION_MISMATCH = auto()
    CONFIGURATION_DEFAULTED = auto()
    POSITION_NOT_FOUND = auto()


class Strategy(Enum):
    """How the window is placed."""

    FLOATING = "floating"
    TILED_WORKSPACE = "tiled-workspace"


@dataclass(frozen=True)
class PositionPolicy:
    """Per-call positioning policy."""

    use_tiling_heuristic: bool = False
    retry_count: int = 3
    retry_delay_ms: int = 200
    state_retry_count: int = 3
    notify: bool = True
    notification_timeout_ms: int = 2000
    verify: bool = True


@dataclass
class PositionResult:
    """Outcome of one positioning operation."""

    ok: bool
    rect: Optional[PixelRect] = None
    strategy: Optional[Strategy] = None
    error: Optional[ErrorKind] = None
    message: str = ""
    warnings: List[ErrorKind] = field(default_factory=list)
    attempts: int = 0
    verified: Optional[bool] = None

    def __bool__(self) -> bool:
        return self.ok


class PositioningOrchestrator:
    """Applies a grid position to the focused window.

    Steps: read the focused screen, resolve the pixel rectangle, pick a
    strategy, make the window floating, move/resize it (retrying per policy),
    verify the result and optionally notify.
    """

    def __init__(
        self,
        bus,
        client: "CompositorClient",
        grid: GridSpec,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the orchestrator.

        Args:
            bus: Event bus instance (Pypubsub)
            client: Compositor channel
            grid: Grid overlay used to resolve positions
            sleep: Sleep function used between retries
        """
        self.bus = bus
        self.client = client
        self.grid = grid
        self._sleep = sleep

    def choose_strategy(self, policy: PositionPolicy) -> Strategy:
        """Tiled-workspace strategy only applies with more than one window."""
        if not policy.use_tiling_heuristic:
            return Strategy.FLOATING
        count = self.client.count_windows_in_current_workspace()
        if count > 1:
            return Strategy.TILED_WORKSPACE
        logger.debug("Single window detected, using floating mode for precise positioning")
        return Strategy.FLOATING

    def apply_position(
        self, spec: PositionSpec, policy: PositionPolicy = PositionPolicy()
    ) -> PositionResult:
        """Apply ``spec`` to the focused window.

        Args:
            spec: Grid-relative position
            policy: Retry, strategy and notification policy

        Returns:
            PositionResult; ``ok`` reflects the move/resize command outcome
        """
        result = PositionResult(ok=False)

        screen = self.client.query_focused_screen()
        if screen is None or not screen.is_usable:
            return self._fail(result, spec, ErrorKind.SCREEN_UNAVAILABLE,
                              f"Invalid screen dimensions: {screen}")
        logger.debug(f"Screen dimensions: {screen.width}x{screen.height}")

        if spec.scale <= 0.0:
            result.warnings.append(ErrorKind.CONFIGURATION_DEFAULTED)
        rect = resolve(spec, self.grid, screen)
        result.rect = rect
        logger.info(
            f"Applying grid position: x={rect.x}, y={rect.y}, "
            f"width={rect.width}, height={rect.height}"
        )

        window = self.client.query_focused_window()
        if window is None:
            return self._fail(result, spec, ErrorKind.NO_FOCUSED_WINDOW, "No focused window")

        strategy = self.choose_strategy(policy)
        result.strategy = strategy
        logger.debug(f"Using {strategy.value} strategy")

        controller = WindowStateController(
            self.bus, self.client, retry_count=policy.state_retry_count, sleep=self._sleep
        )
        if strategy == Strategy.TILED_WORKSPACE:
            floating = controller.ensure_tiled(window.handle)
        else:
            floating = controller.ensure_floating(window.handle)
        if not floating:
            logger.warning("Failed to ensure window is floating, positioning anyway")
            result.warnings.append(ErrorKind.STATE_TRANSITION_FAILED)

        handle = window.handle
        result.attempts = 1
        success = self.client.move_and_resize(handle, rect)
        retries_left = max(0, policy.retry_count)
        while not success and retries_left > 0:
            logger.warning(
                f"Move/resize failed, retrying in {policy.retry_delay_ms}ms "
                f"({retries_left} attempts left)"
            )
            self._sleep(policy.retry_delay_ms / 1000.0)
            retries_left -= 1
            result.attempts += 1

            # Focus may have changed since the last attempt
            window = self.client.query_focused_window()
            if window is None:
                logger.warning("No focused window on retry")
                continue
            handle = window.handle
            success = self.client.move_and_resize(handle, rect)

        if not success:
            return self._fail(result, spec, ErrorKind.COMMAND_FAILED,
                              f"Failed to move and resize window after {result.attempts} attempts")

        if policy.verify:
            result.verified = self._verify(handle, rect)
            if result.verified is False:
                result.warnings.append(ErrorKind.VERIFICATION_MISMATCH)

        result.ok = True
        self.bus.sendMessage(topics.POSITION_APPLIED, spec=spec, rect=rect, strategy=strategy)

        if policy.notify:
            self.bus.sendMessage(
                topics.CMD_NOTIFY,
                title="Grid Manager",
                body=f"Applying {spec.width}×{spec.height} position",
                timeout_ms=policy.notification_timeout_ms,
            )
        return result

    def _verify(self, handle, expected: PixelRect) -> Optional[bool]:
        """Compare the window's final geometry with ``expected``.

        Returns:
            True/False for a match/mismatch, None if the geometry could not be read
        """
        actual = self.client.query_window_geometry(handle)
        if actual is None:
            logger.debug("Could not read final window geometry")
            return None
        if expected.within(actual, POSITION_TOLERANCE, SIZE_TOLERANCE):
            logger.debug("Window positioning verified")
            return True

        logger.warning(f"Window positioning may have issues: got {actual}, expected {expected}")
        self.bus.sendMessage(topics.VERIFICATION_MISMATCH, expected=expected, actual=actual)
        return False

    def _fail(self, result: PositionResult, spec: PositionSpec, error: ErrorKind, message: str):
        logger.error(message)
        result.ok = False
        result.error = error
        result.message = message
        self.bus.sendMessage(topics.POSITION_FAILED, spec=spec, error=error, message=message)
        return result
