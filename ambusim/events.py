"""Named-event subscription for engine observers.

Components emit events such as ``unit_updated`` or ``live_reading``; the
presentation layer subscribes instead of polling. Handlers run synchronously
on the emitting thread and receive ``(event_name, data)``. A failing handler
is logged and does not affect the emitter or other handlers.
"""

from collections.abc import Callable
import threading
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

EventHandler = Callable[[str, Any], None]

UNIT_UPDATED = "unit_updated"
UNIT_DISPATCHED = "unit_dispatched"
STAGE_CHANGED = "stage_changed"
TRANSITION_DROPPED = "transition_dropped"
LIVE_READING = "live_reading"


class EventBus:
    """Thread-safe registry of event handlers."""

    def __init__(self):
        self._handlers: dict[str, list[EventHandler]] = {}
        self._lock = threading.Lock()

    def register_event_handler(self, event_name: str, handler: EventHandler) -> Callable[[], None]:
        """Register ``handler`` for ``event_name``.

        Returns:
            A function that unregisters the handler when called.
        """
        with self._lock:
            self._handlers.setdefault(event_name, []).append(handler)

        def unregister() -> None:
            with self._lock:
                handlers = self._handlers.get(event_name, [])
                if handler in handlers:
                    handlers.remove(handler)

        return unregister

    def emit_event(self, event_name: str, data: Any) -> None:
        """Call every handler registered for ``event_name`` with ``data``."""
        with self._lock:
            handlers = list(self._handlers.get(event_name, ()))

        for handler in handlers:
            try:
                handler(event_name, data)
            except Exception:
                logger.exception("Event handler failed", event_name=event_name)
