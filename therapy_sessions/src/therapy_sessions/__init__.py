"""In-session trial logging for therapy sessions"""
from .models import (
    AssistanceLevel,
    AssistanceLevelStats,
    Client,
    Goal,
    GoalStats,
    PerformanceTier,
    SuccessIndicator,
    Trial,
)
from .active_session import ActiveSession
from .session_record import GoalLog, SessionRecord
from .session_summary import GoalPerformance, SessionSummary, build_session_summary
from .feedback import EventEmitter, SessionEvent
from .session_store import SessionStore
from .goal_directory import GoalDirectory
from .session_controller import LoggingPhase, SessionController

__all__ = [
    "AssistanceLevel",
    "AssistanceLevelStats",
    "Client",
    "Goal",
    "GoalStats",
    "PerformanceTier",
    "SuccessIndicator",
    "Trial",
    "ActiveSession",
    "GoalLog",
    "SessionRecord",
    "GoalPerformance",
    "SessionSummary",
    "build_session_summary",
    "EventEmitter",
    "SessionEvent",
    "SessionStore",
    "GoalDirectory",
    "LoggingPhase",
    "SessionController",
]
