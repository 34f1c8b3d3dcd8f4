"""
Active Session State

In-memory state of one running therapy session on the wrist device:
the goals chosen for the session, a cursor over them, and the trials
recorded so far. Every statistic is recomputed from the trial list on
read, so there is no cached counter to drift out of sync.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from therapy_sessions.models import (
    AssistanceLevel,
    AssistanceLevelStats,
    Goal,
    GoalStats,
    Trial,
    success_percentage,
)


@dataclass
class ActiveSession:
    """
    One in-progress session.

    The goal list is fixed for the lifetime of the session. Trials behave
    as a stack: they are only appended by add_trial() and only removed by
    remove_last_trial().
    """
    client_id: str
    client_name: str
    goals: List[Goal] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    start_time: datetime = field(default_factory=datetime.now)
    current_goal_index: int = 0
    trials: List[Trial] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        client_id: str,
        client_name: str,
        goals: List[Goal],
        now: Optional[datetime] = None
    ) -> "ActiveSession":
        """
        Start a fresh session.

        An empty goal list is accepted; every goal-dependent operation
        then does nothing. Whether such a session may start is the
        caller's decision.
        """
        return cls(
            client_id=client_id,
            client_name=client_name,
            goals=list(goals),
            start_time=now or datetime.now(),
        )

    # Current goal management

    @property
    def current_goal(self) -> Optional[Goal]:
        if not 0 <= self.current_goal_index < len(self.goals):
            return None
        return self.goals[self.current_goal_index]

    @property
    def total_goals(self) -> int:
        return len(self.goals)

    @property
    def navigation_dots(self) -> List[bool]:
        return [i == self.current_goal_index for i in range(len(self.goals))]

    def move_to_next_goal(self) -> bool:
        """Advance the cursor, stopping at the last goal. Returns True if it moved."""
        if self.current_goal_index >= len(self.goals) - 1:
            return False
        self.current_goal_index += 1
        return True

    def move_to_previous_goal(self) -> bool:
        """Step the cursor back, stopping at the first goal. Returns True if it moved."""
        if self.current_goal_index <= 0:
            return False
        self.current_goal_index -= 1
        return True

    def set_goal_index(self, index: int) -> bool:
        """
        Jump to a goal by position.

        Out-of-range indexes are ignored and leave the cursor where it is.
        """
        if not 0 <= index < len(self.goals):
            return False
        self.current_goal_index = index
        return True

    # Trial management

    def add_trial(
        self,
        was_successful: bool,
        assistance_level: AssistanceLevel,
        timestamp: Optional[datetime] = None
    ) -> Optional[Trial]:
        """Record a trial against the current goal. Does nothing without one."""
        goal = self.current_goal
        if goal is None:
            return None

        trial = Trial(
            goal_id=goal.id,
            goal_description=goal.display_description,
            was_successful=was_successful,
            assistance_level=assistance_level,
            timestamp=timestamp or datetime.now(),
        )
        self.trials.append(trial)
        return trial

    def remove_last_trial(self) -> Optional[Trial]:
        if not self.trials:
            return None
        return self.trials.pop()

    # Session statistics

    def elapsed_duration(self, now: Optional[datetime] = None) -> float:
        """Seconds since the session started, measured at call time."""
        now = now or datetime.now()
        return max((now - self.start_time).total_seconds(), 0.0)

    @property
    def session_duration(self) -> float:
        return self.elapsed_duration()

    def formatted_duration(self, now: Optional[datetime] = None) -> str:
        duration = int(self.elapsed_duration(now))
        minutes, seconds = divmod(duration, 60)
        return f"{minutes:02d}:{seconds:02d}"

    @property
    def total_trials(self) -> int:
        return len(self.trials)

    @property
    def success_count(self) -> int:
        return sum(1 for trial in self.trials if trial.was_successful)

    @property
    def failure_count(self) -> int:
        return sum(1 for trial in self.trials if not trial.was_successful)

    @property
    def success_rate(self) -> float:
        if not self.trials:
            return 0.0
        return self.success_count / self.total_trials

    @property
    def success_percentage(self) -> int:
        return success_percentage(self.success_count, self.total_trials)

    @property
    def formatted_success_rate(self) -> str:
        if not self.trials:
            return "0% (0/0)"
        return f"{self.success_percentage}% ({self.success_count}/{self.total_trials})"

    # Goal-specific statistics

    def trials_for_goal(self, goal_id: str) -> List[Trial]:
        return [trial for trial in self.trials if trial.goal_id == goal_id]

    def stats_for_goal(self, goal_id: str) -> GoalStats:
        goal_trials = self.trials_for_goal(goal_id)
        return GoalStats(
            goal_id=goal_id,
            success_count=sum(1 for trial in goal_trials if trial.was_successful),
            total_count=len(goal_trials),
        )

    def all_goal_stats(self) -> List[GoalStats]:
        """One entry per session goal, in goal order, including goals with no trials."""
        return [self.stats_for_goal(goal.id) for goal in self.goals]

    # Assistance level statistics

    def assistance_level_breakdown(self) -> AssistanceLevelStats:
        counts = {level.value: 0 for level in AssistanceLevel}
        for trial in self.trials:
            counts[trial.assistance_level.value] += 1
        return AssistanceLevelStats(**counts)
