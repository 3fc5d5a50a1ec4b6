"""Event system for pitch-scorer components."""

from typing import Dict, List, Callable, Any
from enum import Enum, auto

from ..logging_config import get_logger

logger = get_logger(__name__)


class ScorerEventType(Enum):
    """Outward notifications from the scoring engine and session gate."""

    LIVE_UPDATED = auto()
    SCORE_CHANGED = auto()
    RESULTS_CHANGED = auto()
    VALIDITY_CHANGED = auto()
    SESSION_RESET = auto()
    SONG_FINISHED = auto()
    SCORE_READY_TO_SAVE = auto()
    SAVE_ERROR = auto()


class EventEmitter:
    """Event emitter for pitch-scorer components."""

    def __init__(self):
        self._listeners: Dict[Any, List[Callable]] = {}

    def on(self, event_type: Any, callback: Callable) -> None:
        """Register a callback for an event type.

        Args:
            event_type: Event type to listen for
            callback: Function to call when the event occurs
        """
        if event_type not in self._listeners:
            self._listeners[event_type] = []

        if callback not in self._listeners[event_type]:
            self._listeners[event_type].append(callback)
            logger.debug(f"Added listener for event {event_type}")

    def off(self, event_type: Any, callback: Callable) -> None:
        """Remove a previously registered callback."""
        listeners = self._listeners.get(event_type, [])
        if callback in listeners:
            listeners.remove(callback)
            logger.debug(f"Removed listener for event {event_type}")

    def emit(self, event_type: Any, *args, **kwargs) -> None:
        """Emit an event.

        A failing listener is logged and does not stop the others.
        """
        if event_type not in self._listeners:
            return

        for callback in list(self._listeners[event_type]):
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in event listener for {event_type}: {e}")

    def clear(self) -> None:
        """Remove all event listeners."""
        self._listeners = {}
        logger.debug("Cleared all event listeners")
