"""
Window State Controller

Gets a window into floating mode before it is positioned. Pixel-exact
placement is only reliable for floating windows, so both the floating and the
tiled-workspace strategies end up here.
"""

from __future__ import annotations
import logging
import time
from typing import TYPE_CHECKING, Callable

from . import topics
from .compositor import WindowMode

if TYPE_CHECKING:
    from .compositor import CompositorClient, WindowHandle

logger = logging.getLogger(__name__)

SETTLE_DELAY = 0.1
RESET_DELAY = 0.2


class WindowStateController:
    """Drives a window to floating mode with bounded retries.

    Each attempt issues a command, waits for the compositor to settle and then
    re-reads the mode; the mode is never assumed from a command's
    acknowledgement. At most ``retry_count + 1`` toggle attempts are made.
    """

    def __init__(
        self,
        bus,
        client: "CompositorClient",
        retry_count: int = 3,
        sleep: Callable[[float], None] = time.sleep,
        settle_delay: float = SETTLE_DELAY,
        reset_delay: float = RESET_DELAY,
    ):
        """Initialize the controller.

        Args:
            bus: Event bus instance (Pypubsub)
            client: Compositor channel
            retry_count: Number of toggle-twice reset sequences after the first toggle
            sleep: Sleep function used for settle intervals
            settle_delay: Seconds to wait after the first toggle
            reset_delay: Seconds to wait after each toggle of a reset sequence
        """
        self.bus = bus
        self.client = client
        self.retry_count = max(0, retry_count)
        self._sleep = sleep
        self.settle_delay = settle_delay
        self.reset_delay = reset_delay

    def _read_mode(self, handle: "WindowHandle") -> WindowMode:
        mode = self.client.query_window_mode(handle)
        if mode == WindowMode.UNKNOWN:
            # One more read after a settle interval before giving up on it
            self._sleep(self.settle_delay)
            mode = self.client.query_window_mode(handle)
        return mode

    def ensure_floating(self, handle: "WindowHandle") -> bool:
        """Make sure the window is floating.

        Args:
            handle: Window to act on

        Returns:
            True once the window is observed floating, False if retries ran out
        """
        mode = self._read_mode(handle)
        if mode == WindowMode.FLOATING:
            return True
        if mode == WindowMode.UNKNOWN:
            logger.warning(f"Cannot read mode of window {handle}, not toggling")
            self._publish_failure(handle, 0)
            return False

        logger.debug(f"Window {handle} is tiled, toggling to floating")
        attempts = 1
        if not self.client.toggle_floating_mode(handle):
            logger.error(f"Failed to toggle floating state of window {handle}")
            self._publish_failure(handle, attempts)
            return False

        self._sleep(self.settle_delay)
        floating = self.client.query_window_mode(handle) == WindowMode.FLOATING

        retries_left = self.retry_count
        while not floating and retries_left > 0:
            logger.warning(
                f"Window still not floating, retrying (attempts left: {retries_left})"
            )
            # Toggle twice to reset state
            self.client.toggle_floating_mode(handle)
            self._sleep(self.reset_delay)
            self.client.toggle_floating_mode(handle)
            self._sleep(self.reset_delay)

            attempts += 1
            retries_left -= 1
            floating = self.client.query_window_mode(handle) == WindowMode.FLOATING

        if not floating:
            self._publish_failure(handle, attempts)
        return floating

    def ensure_tiled(self, handle: "WindowHandle") -> bool:
        """Prepare a window for placement in a workspace with other windows.

        Native tiling cannot place a window at exact pixels, so a "tiled"
        window is a floating one positioned on the grid.
        """
        logger.debug(f"Placing window {handle} as grid-tiled (floating)")
        return self.ensure_floating(handle)

    def reset(self, handle: "WindowHandle") -> bool:
        """Toggle floating twice to reset the window's state.

        Returns:
            True if both toggles were accepted
        """
        first = self.client.toggle_floating_mode(handle)
        self._sleep(self.settle_delay)
        second = self.client.toggle_floating_mode(handle)
        return first and second

    def _publish_failure(self, handle: "WindowHandle", attempts: int):
        self.bus.sendMessage(
            topics.STATE_TRANSITION_FAILED, handle=handle, attempts=attempts
        )
