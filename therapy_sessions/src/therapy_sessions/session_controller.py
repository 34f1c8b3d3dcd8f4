"""
Session Controller

Drives one therapy session on the wrist device: start and end, goal
navigation, two-step trial logging (outcome first, assistance level
second), undo, and the end-of-session summary.

Lifecycle:
    Idle --start_session()--> Active --end_session()--> Idle

Trial logging while Active:
    AWAITING_OUTCOME --log_success()/log_failure()--> AWAITING_ASSISTANCE_LEVEL
    AWAITING_ASSISTANCE_LEVEL --commit_assistance_level()--> AWAITING_OUTCOME

Requests that make no sense in the current state (no session, no goal,
no pending outcome, out-of-range goal index) are ignored rather than
raised. Saving at session end happens in the background; a failed save
is reported but the session is ended regardless.
"""

import asyncio
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set

from therapy_sessions.active_session import ActiveSession
from therapy_sessions.errors import GoalDirectoryError
from therapy_sessions.feedback import EventEmitter, Listener, SessionEvent
from therapy_sessions.goal_directory import GoalDirectory
from therapy_sessions.logger import get_logger
from therapy_sessions.models import (
    AssistanceLevel,
    Client,
    Goal,
    SuccessIndicator,
    Trial,
)
from therapy_sessions.session_record import DEFAULT_DEVICE_TAG, SessionRecord
from therapy_sessions.session_store import SessionStore
from therapy_sessions.session_summary import SessionSummary, build_session_summary

logger = get_logger(__name__)

SaveFailedCallback = Callable[[SessionRecord, Exception], None]


class LoggingPhase(Enum):
    """Where the two-step trial entry currently stands."""
    AWAITING_OUTCOME = "awaiting_outcome"
    AWAITING_ASSISTANCE_LEVEL = "awaiting_assistance_level"


class SessionController:
    """
    Owns the active session and everything that happens to it.

    Collaborators are injected: the session store receives the finished
    record, the optional goal directory supplies seed clients and goals.

    Example:
        >>> controller = SessionController(SessionStore())
        >>> controller.start_session(client, goals)
        >>> controller.log_success()
        >>> controller.commit_assistance_level(AssistanceLevel.MINIMAL)
        >>> summary = controller.build_summary()
        >>> task = controller.end_session()
    """

    def __init__(
        self,
        session_store: SessionStore,
        goal_directory: Optional[GoalDirectory] = None,
        device_tag: str = DEFAULT_DEVICE_TAG,
        max_session_goals: int = 4,
        on_save_failed: Optional[SaveFailedCallback] = None,
        emitter: Optional[EventEmitter] = None,
    ):
        """
        Initialize the session controller.

        Args:
            session_store: Receives the session record at session end
            goal_directory: Source of seed clients and goals (optional)
            device_tag: Stored as the record's "created on" value
            max_session_goals: Cap on goals picked by load_seed_data()
            on_save_failed: Called with (record, error) when a save fails
            emitter: Event emitter to publish on (a new one by default)
        """
        self.session_store = session_store
        self.goal_directory = goal_directory
        self.device_tag = device_tag
        self.max_session_goals = max_session_goals
        self.emitter = emitter or EventEmitter()
        self._on_save_failed = on_save_failed

        self.selected_client: Optional[Client] = None
        self.available_goals: List[Goal] = []

        self._active_session: Optional[ActiveSession] = None
        self._logging_phase = LoggingPhase.AWAITING_OUTCOME
        self._pending_outcome: Optional[bool] = None
        self._pending_saves: Set[asyncio.Task] = set()

    # Observers

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.emitter.subscribe(listener)

    def unsubscribe(self, listener: Listener) -> bool:
        return self.emitter.unsubscribe(listener)

    def _emit(self, event: SessionEvent, payload: Optional[Dict[str, Any]] = None):
        self.emitter.emit(event, payload)
        self.emitter.emit(SessionEvent.STATE_CHANGED, {"cause": event.value})

    # Session lifecycle

    def start_session(self, client: Client, goals: List[Goal]) -> bool:
        """
        Start a session for a client.

        Refused when goals is empty. Starting while another session is
        active replaces it; the replaced session is not saved.

        Returns:
            True if a session was started
        """
        if not goals:
            logger.debug("[SessionController] Ignoring start_session with no goals")
            return False

        if self._active_session is not None:
            logger.warning(
                f"⚠️ [SessionController] Replacing unsaved session {self._active_session.id}"
            )

        self.selected_client = client
        self.available_goals = list(goals)
        self._active_session = ActiveSession.create(
            client_id=client.id,
            client_name=client.display_name,
            goals=goals,
        )
        self._reset_logging_phase()

        logger.info(
            f"⌚ [SessionController] Session {self._active_session.id} started",
            data={"client_id": client.id, "goals": len(goals)},
        )
        self._emit(SessionEvent.SESSION_STARTED, {
            "session_id": self._active_session.id,
            "client_id": client.id,
        })
        return True

    def end_session(self) -> Optional[asyncio.Task]:
        """
        End the active session and save it.

        In-memory state is cleared before the save starts, so a new
        session can begin straight away. Inside a running event loop the
        save is scheduled as a task and returned; otherwise it runs to
        completion before this returns.

        Returns:
            The background save task, or None
        """
        session = self._active_session
        if session is None:
            return None

        record = SessionRecord.from_active_session(session, created_on=self.device_tag)

        self._active_session = None
        self._reset_logging_phase()

        logger.info(
            f"⌚ [SessionController] Session {session.id} ended",
            data={"trials": record.total_trials, "duration": session.formatted_duration()},
        )
        self._emit(SessionEvent.SESSION_ENDED, {
            "session_id": session.id,
            "total_trials": record.total_trials,
        })

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self._save_record(record))
            return None

        task = loop.create_task(self._save_record(record))
        self._pending_saves.add(task)
        task.add_done_callback(self._pending_saves.discard)
        return task

    async def _save_record(self, record: SessionRecord) -> bool:
        try:
            await self.session_store.persist(record)
        except Exception as e:
            # The session is already gone from memory; report and move on
            logger.error(
                f"[SessionController] Failed to save session {record.id}",
                error=e,
                data={"client_id": record.client_id, "trials": record.total_trials},
            )
            self.emitter.emit(SessionEvent.SESSION_SAVE_FAILED, {
                "session_id": record.id,
                "error": str(e),
            })
            if self._on_save_failed:
                try:
                    self._on_save_failed(record, e)
                except Exception as callback_error:
                    logger.warning(
                        f"⚠️ [SessionController] on_save_failed callback failed: {callback_error}"
                    )
            return False

        logger.success(f"[SessionController] Session {record.id} saved")
        return True

    async def wait_for_pending_saves(self):
        """Wait for background saves started by end_session()."""
        if self._pending_saves:
            await asyncio.gather(*list(self._pending_saves), return_exceptions=True)

    @property
    def pending_save_count(self) -> int:
        return len(self._pending_saves)

    # Goal navigation

    def move_to_next_goal(self) -> bool:
        if self._active_session is None:
            return False
        return self._navigated(self._active_session.move_to_next_goal())

    def move_to_previous_goal(self) -> bool:
        if self._active_session is None:
            return False
        return self._navigated(self._active_session.move_to_previous_goal())

    def set_current_goal(self, index: int) -> bool:
        if self._active_session is None:
            return False
        return self._navigated(self._active_session.set_goal_index(index))

    def _navigated(self, moved: bool) -> bool:
        if moved:
            self._emit(SessionEvent.GOAL_NAVIGATION, {
                "goal_index": self._active_session.current_goal_index,
            })
        return moved

    # Trial logging

    def log_success(self) -> bool:
        return self._capture_outcome(True)

    def log_failure(self) -> bool:
        return self._capture_outcome(False)

    def _capture_outcome(self, was_successful: bool) -> bool:
        """First step of trial entry: remember the outcome and wait for a level."""
        if self._active_session is None or self._active_session.current_goal is None:
            return False

        self._pending_outcome = was_successful
        self._logging_phase = LoggingPhase.AWAITING_ASSISTANCE_LEVEL

        event = SessionEvent.TRIAL_LOGGED_SUCCESS if was_successful else SessionEvent.TRIAL_LOGGED_FAILURE
        self._emit(event, {"goal_id": self._active_session.current_goal.id})
        return True

    def commit_assistance_level(self, level: AssistanceLevel) -> Optional[Trial]:
        """
        Second step of trial entry: record the trial with the pending outcome.

        Ignored unless an outcome is waiting for its assistance level.
        """
        if self._logging_phase != LoggingPhase.AWAITING_ASSISTANCE_LEVEL or self._active_session is None:
            return None

        trial = self._active_session.add_trial(self._pending_outcome, level)
        self._reset_logging_phase()

        if trial is None:
            return None

        logger.debug(
            f"[SessionController] Trial recorded on goal {trial.goal_id} "
            f"({'success' if trial.was_successful else 'failure'}, {level.value})"
        )
        self._emit(SessionEvent.ASSISTANCE_LEVEL_SELECTED, {
            "trial_id": trial.id,
            "assistance_level": level.value,
        })
        return trial

    def cancel_pending_outcome(self) -> bool:
        """Drop a captured outcome without recording a trial."""
        if self._logging_phase != LoggingPhase.AWAITING_ASSISTANCE_LEVEL:
            return False
        self._reset_logging_phase()
        self.emitter.emit(SessionEvent.STATE_CHANGED, {"cause": "outcome_cancelled"})
        return True

    def undo_last_trial(self) -> Optional[Trial]:
        if self._active_session is None:
            return None

        removed = self._active_session.remove_last_trial()
        if removed is not None:
            self._emit(SessionEvent.UNDO_PERFORMED, {"trial_id": removed.id})
        return removed

    def _reset_logging_phase(self):
        self._logging_phase = LoggingPhase.AWAITING_OUTCOME
        self._pending_outcome = None

    # Summary

    def build_summary(self, now: Optional[datetime] = None) -> Optional[SessionSummary]:
        if self._active_session is None:
            return None
        return build_session_summary(self._active_session, now)

    # Read-only state for the UI

    @property
    def active_session(self) -> Optional[ActiveSession]:
        return self._active_session

    @property
    def is_session_active(self) -> bool:
        return self._active_session is not None

    @property
    def logging_phase(self) -> LoggingPhase:
        return self._logging_phase

    @property
    def pending_outcome(self) -> Optional[bool]:
        return self._pending_outcome

    @property
    def is_awaiting_assistance_level(self) -> bool:
        return self._logging_phase == LoggingPhase.AWAITING_ASSISTANCE_LEVEL

    @property
    def can_undo(self) -> bool:
        return self._active_session is not None and self._active_session.total_trials > 0

    @property
    def current_goal(self) -> Optional[Goal]:
        return self._active_session.current_goal if self._active_session else None

    @property
    def current_goal_index(self) -> int:
        return self._active_session.current_goal_index if self._active_session else 0

    @property
    def total_goals(self) -> int:
        return self._active_session.total_goals if self._active_session else 0

    @property
    def session_duration(self) -> str:
        return self._active_session.formatted_duration() if self._active_session else "00:00"

    @property
    def success_rate_text(self) -> str:
        return self._active_session.formatted_success_rate if self._active_session else "0% (0/0)"

    @property
    def success_indicator(self) -> SuccessIndicator:
        if self._active_session is None:
            return SuccessIndicator.NONE
        return SuccessIndicator.from_percentage(self._active_session.success_percentage)

    @property
    def navigation_dots(self) -> List[bool]:
        return self._active_session.navigation_dots if self._active_session else []

    # Seed data

    async def load_seed_data(self) -> bool:
        """
        Pick a default client and goals from the goal directory.

        Selects the first client and up to max_session_goals of its active
        goals. A directory failure, or a directory with no clients, is
        logged and leaves the current selection as it was.

        Returns:
            True if seed data was loaded
        """
        if self.goal_directory is None:
            return False

        try:
            clients = await self.goal_directory.get_all_clients()
            if not clients:
                logger.warning("⚠️ [SessionController] Goal directory has no clients")
                return False
            client = clients[0]
            goals = await self.goal_directory.get_goals(client.id)
        except GoalDirectoryError as e:
            logger.warning(f"⚠️ [SessionController] Could not load seed data: {e}")
            return False

        self.selected_client = client
        self.available_goals = goals[:self.max_session_goals]

        logger.info(
            "🎯 [SessionController] Seed data loaded",
            data={"client_id": client.id, "goals": len(self.available_goals)},
        )
        self.emitter.emit(SessionEvent.STATE_CHANGED, {"cause": "seed_data_loaded"})
        return True
