"""
Notifier

Shows desktop notifications in response to command events.
"""

from __future__ import annotations
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .compositor import CompositorClient

logger = logging.getLogger(__name__)


class Notifier:
    """Sends CMD_NOTIFY events to the compositor's notification sink.

    Notifications are best-effort: a failure is logged and never reaches the
    component that published the command.
    """

    def __init__(self, bus, client: "CompositorClient"):
        """Initialize notifier.

        Args:
            bus: Event bus instance (Pypubsub)
            client: Compositor channel that delivers notifications
        """
        self.bus = bus
        self.client = client
        self._setup_subscriptions()

    def _setup_subscriptions(self):
        """Subscribe to notification command events."""
        from . import topics

        self.bus.subscribe(self._on_notify, topics.CMD_NOTIFY)

    def _on_notify(self, title, body, timeout_ms):
        """Handle CMD_NOTIFY command."""
        try:
            if not self.client.notify(title, body, timeout_ms):
                logger.debug(f"Notification not delivered: {title}: {body}")
        except Exception as e:
            logger.warning(f"Failed to send notification: {e}")
