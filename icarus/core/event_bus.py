# icarus/core/event_bus.py
"""
Event bus for decoupled communication between pollers and views.
Uses Qt signals, so subscribers on the GUI thread receive events
published from worker threads through queued connections.
"""

import logging
from PyQt6.QtCore import QObject, pyqtSignal, pyqtBoundSignal

logger = logging.getLogger(__name__)


class EventBus(QObject):
    """
    A simple event bus with one named signal per event type.
    """

    snapshot_updated = pyqtSignal(str, object)      # integration, PollResult
    service_status_changed = pyqtSignal(str, str)   # integration, status (up/down/unconfigured)
    settings_changed = pyqtSignal(str)              # integration (or "all")
    refresh_interval_changed = pyqtSignal(int)      # seconds

    def __init__(self):
        super().__init__()
        logger.debug("EventBus initialized")

    def _signal(self, event_name: str):
        signal = getattr(self, event_name, None)
        if isinstance(signal, pyqtBoundSignal):
            return signal
        return None

    def publish(self, event_name: str, *args):
        """
        Publishes an event to the corresponding signal.
        """
        signal = self._signal(event_name)
        if signal is None:
            logger.warning(f"Attempted to publish unknown event: {event_name}")
            return
        signal.emit(*args)
        logger.debug(f"Event published: {event_name}")

    def subscribe(self, event_name: str, slot: callable):
        """
        Subscribes a slot (callback function) to an event signal.
        """
        signal = self._signal(event_name)
        if signal is None:
            logger.warning(f"Attempted to subscribe to unknown event: {event_name}")
            return
        signal.connect(slot)
        logger.debug(f"Subscribed to event: {event_name}")

    def unsubscribe(self, event_name: str, slot: callable):
        """
        Unsubscribes a slot from an event signal.
        """
        signal = self._signal(event_name)
        if signal is None:
            logger.warning(f"Attempted to unsubscribe from unknown event: {event_name}")
            return
        try:
            signal.disconnect(slot)
            logger.debug(f"Unsubscribed from event: {event_name}")
        except TypeError as e:
            logger.error(f"Error unsubscribing from event {event_name}: {e}")
