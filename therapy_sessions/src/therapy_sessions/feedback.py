"""
Session Events

Named, fire-and-forget notifications emitted by the session controller.
Haptic or sound cues and UI refreshes subscribe here; nothing a listener
does can change session state.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class SessionEvent(Enum):
    """Events a feedback or UI layer can react to."""
    SESSION_STARTED = "session_started"
    SESSION_ENDED = "session_ended"
    TRIAL_LOGGED_SUCCESS = "trial_logged_success"
    TRIAL_LOGGED_FAILURE = "trial_logged_failure"
    ASSISTANCE_LEVEL_SELECTED = "assistance_level_selected"
    UNDO_PERFORMED = "undo_performed"
    GOAL_NAVIGATION = "goal_navigation"
    SESSION_SAVE_FAILED = "session_save_failed"
    STATE_CHANGED = "state_changed"


Listener = Callable[[SessionEvent, Dict[str, Any]], None]


class EventEmitter:
    """
    Observer list for session events.

    Listeners are called synchronously in subscription order with
    (event, payload). A listener that raises is logged and skipped so the
    remaining listeners still run.
    """

    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a callable that unsubscribes it."""
        if listener not in self._listeners:
            self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: Listener) -> bool:
        if listener in self._listeners:
            self._listeners.remove(listener)
            return True
        return False

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def emit(self, event: SessionEvent, payload: Optional[Dict[str, Any]] = None):
        payload = payload or {}
        for listener in list(self._listeners):
            try:
                listener(event, payload)
            except Exception as e:
                logger.warning(f"⚠️ [EventEmitter] Listener failed on {event.value}: {e}")
