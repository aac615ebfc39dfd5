"""
Measure notifications.

Every successful flush emits a notification carrying the flushed measure, so
other parts of the host can observe measures in near real time without
reading them back from storage.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

MEASURE_EVENT = "probe:measure"

Listener = Callable[[Dict[str, Any]], None]


class NotificationSink(ABC):
    """Fire-and-forget event sink."""

    @abstractmethod
    def trigger(self, event: str, payload: Dict[str, Any]) -> None:
        """Emit ``event`` with ``payload``. Must not raise."""
        pass


class CallbackNotifier(NotificationSink):
    """
    Dispatches notifications to registered callbacks.

    A failing listener is logged and does not prevent the other listeners
    from being called.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}

    def subscribe(self, event: str, listener: Listener) -> None:
        self._listeners.setdefault(event, []).append(listener)

    def unsubscribe(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)

    def trigger(self, event: str, payload: Dict[str, Any]) -> None:
        for listener in list(self._listeners.get(event, [])):
            try:
                listener(payload)
            except Exception as e:
                logger.error(f"Listener {listener!r} failed on {event}: {e}", exc_info=True)
