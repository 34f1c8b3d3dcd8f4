"""
Session Summary

Read-only end-of-session report built from an active session: overall
counts and percentage, the assistance-level breakdown and a per-goal
performance list tagged with a performance tier.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Dict, Any

from therapy_sessions.active_session import ActiveSession
from therapy_sessions.models import (
    AssistanceLevelStats,
    Goal,
    PerformanceTier,
    success_percentage,
)

UNKNOWN_GOAL_NAME = "Unknown Goal"


@dataclass(frozen=True)
class GoalPerformance:
    """Summary line for one goal."""
    goal_id: str
    goal_name: str
    success_count: int
    total_count: int

    @property
    def success_rate(self) -> int:
        return success_percentage(self.success_count, self.total_count)

    @property
    def performance_tier(self) -> PerformanceTier:
        return PerformanceTier.from_percentage(self.success_rate)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "goal_id": self.goal_id,
            "goal_name": self.goal_name,
            "success_count": self.success_count,
            "total_count": self.total_count,
            "success_rate": self.success_rate,
            "performance_tier": self.performance_tier.value,
        }


@dataclass(frozen=True)
class SessionSummary:
    """Report handed to whatever displays the end-of-session screen."""
    session_id: str
    client_id: str
    client_name: str
    start_time: datetime
    end_time: datetime
    duration: float
    total_trials: int
    success_trials: int
    failure_trials: int
    assistance_level_breakdown: AssistanceLevelStats
    goal_breakdown: List[GoalPerformance] = field(default_factory=list)

    @property
    def success_rate(self) -> int:
        """Integer percent, rounded down. Matches the live indicator exactly."""
        return success_percentage(self.success_trials, self.total_trials)

    @property
    def formatted_duration(self) -> str:
        minutes, seconds = divmod(int(self.duration), 60)
        return f"{minutes}:{seconds:02d}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "client_id": self.client_id,
            "client_name": self.client_name,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "duration": self.duration,
            "formatted_duration": self.formatted_duration,
            "total_trials": self.total_trials,
            "success_trials": self.success_trials,
            "failure_trials": self.failure_trials,
            "success_rate": self.success_rate,
            "assistance_level_breakdown": self.assistance_level_breakdown.to_dict(),
            "goal_breakdown": [goal.to_dict() for goal in self.goal_breakdown],
        }


def _goal_name(goal: Goal) -> str:
    return goal.description or goal.title or UNKNOWN_GOAL_NAME


def build_session_summary(
    session: ActiveSession,
    now: Optional[datetime] = None
) -> SessionSummary:
    """
    Build the summary for a session as it stands right now.

    Args:
        session: The session to summarise
        now: End time to report (defaults to the current time)

    Returns:
        SessionSummary with one GoalPerformance per session goal
    """
    end_time = now or datetime.now()
    goals_by_id = {goal.id: goal for goal in session.goals}

    goal_breakdown = []
    for stats in session.all_goal_stats():
        goal = goals_by_id.get(stats.goal_id)
        if goal is None:
            continue
        goal_breakdown.append(GoalPerformance(
            goal_id=stats.goal_id,
            goal_name=_goal_name(goal),
            success_count=stats.success_count,
            total_count=stats.total_count,
        ))

    return SessionSummary(
        session_id=session.id,
        client_id=session.client_id,
        client_name=session.client_name,
        start_time=session.start_time,
        end_time=end_time,
        duration=session.elapsed_duration(end_time),
        total_trials=session.total_trials,
        success_trials=session.success_count,
        failure_trials=session.failure_count,
        assistance_level_breakdown=session.assistance_level_breakdown(),
        goal_breakdown=goal_breakdown,
    )
