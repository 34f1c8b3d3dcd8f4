"""
Persisted Session Record

The immutable shape handed to the session store when a session ends:
a session header plus a flat, ordered list of goal-log entries, one per
trial.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Dict, Any

from therapy_sessions.active_session import ActiveSession
from therapy_sessions.models import AssistanceLevel

DEFAULT_DEVICE_TAG = "Watch"


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


@dataclass(frozen=True)
class GoalLog:
    """One persisted trial."""
    goal_id: Optional[str]
    goal_description: str
    assistance_level: AssistanceLevel
    was_successful: bool
    session_id: str
    timestamp: datetime = field(default_factory=datetime.now)
    notes: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "goal_id": self.goal_id,
            "goal_description": self.goal_description,
            "assistance_level": self.assistance_level.value,
            "was_successful": self.was_successful,
            "session_id": self.session_id,
            "timestamp": self.timestamp.isoformat(),
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GoalLog":
        return cls(
            id=data["id"],
            goal_id=data.get("goal_id"),
            goal_description=data.get("goal_description") or "",
            assistance_level=AssistanceLevel(data["assistance_level"]),
            was_successful=bool(data["was_successful"]),
            session_id=data["session_id"],
            timestamp=_parse_datetime(data.get("timestamp")) or datetime.now(),
            notes=data.get("notes"),
        )


@dataclass(frozen=True)
class SessionRecord:
    """A finished session ready for storage."""
    id: str
    client_id: str
    start_time: datetime
    date: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    created_on: str = DEFAULT_DEVICE_TAG
    notes: Optional[str] = None
    goal_logs: List[GoalLog] = field(default_factory=list)
    last_modified: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_active_session(
        cls,
        session: ActiveSession,
        created_on: str = DEFAULT_DEVICE_TAG
    ) -> "SessionRecord":
        """Snapshot an active session. The end time is left for the store to stamp."""
        goal_logs = [
            GoalLog(
                id=trial.id,
                goal_id=trial.goal_id,
                goal_description=trial.goal_description,
                assistance_level=trial.assistance_level,
                was_successful=trial.was_successful,
                session_id=session.id,
                timestamp=trial.timestamp,
            )
            for trial in session.trials
        ]
        return cls(
            id=session.id,
            client_id=session.client_id,
            date=session.start_time,
            start_time=session.start_time,
            created_on=created_on,
            goal_logs=goal_logs,
        )

    @property
    def is_active(self) -> bool:
        return self.end_time is None

    @property
    def duration(self) -> Optional[float]:
        if self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds()

    @property
    def total_trials(self) -> int:
        return len(self.goal_logs)

    @property
    def success_count(self) -> int:
        return sum(1 for log in self.goal_logs if log.was_successful)

    @property
    def failure_count(self) -> int:
        return self.total_trials - self.success_count

    @property
    def success_rate(self) -> float:
        if not self.goal_logs:
            return 0.0
        return self.success_count / self.total_trials

    def to_dict(self) -> Dict[str, Any]:
        """Session header for the sessions table. Goal logs are stored separately."""
        return {
            "id": self.id,
            "client_id": self.client_id,
            "date": self.date.isoformat(),
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "location": self.location,
            "created_on": self.created_on,
            "notes": self.notes,
            "last_modified": self.last_modified.isoformat(),
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        goal_logs: Optional[List[Dict[str, Any]]] = None
    ) -> "SessionRecord":
        start_time = _parse_datetime(data.get("start_time")) or datetime.now()
        return cls(
            id=data["id"],
            client_id=data["client_id"],
            date=_parse_datetime(data.get("date")) or start_time,
            start_time=start_time,
            end_time=_parse_datetime(data.get("end_time")),
            location=data.get("location"),
            created_on=data.get("created_on") or DEFAULT_DEVICE_TAG,
            notes=data.get("notes"),
            goal_logs=[GoalLog.from_dict(row) for row in (goal_logs or [])],
            last_modified=_parse_datetime(data.get("last_modified")) or datetime.now(),
        )
