"""
Session Data Models

Value types shared by the active session, the controller and the
collaborators: clients, goals, assistance levels, trials and the
statistics derived from trials.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional


def success_percentage(success_count: int, total_count: int) -> int:
    """Integer success percentage, rounded down. 0 when nothing was recorded."""
    if total_count <= 0:
        return 0
    return (success_count * 100) // total_count


class AssistanceLevel(Enum):
    """How much help the client needed on a trial, least to most."""
    INDEPENDENT = "independent"
    MINIMAL = "minimal"
    MODERATE = "moderate"
    MAXIMAL = "maximal"

    @property
    def rank(self) -> int:
        return _ASSISTANCE_ORDER.index(self)

    @property
    def display_name(self) -> str:
        return {
            AssistanceLevel.INDEPENDENT: "Independent",
            AssistanceLevel.MINIMAL: "Min",
            AssistanceLevel.MODERATE: "Mod",
            AssistanceLevel.MAXIMAL: "Max",
        }[self]

    @property
    def full_display_name(self) -> str:
        return self.value.capitalize()

    def __lt__(self, other):
        if not isinstance(other, AssistanceLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, AssistanceLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, AssistanceLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, AssistanceLevel):
            return NotImplemented
        return self.rank >= other.rank


_ASSISTANCE_ORDER = [
    AssistanceLevel.INDEPENDENT,
    AssistanceLevel.MINIMAL,
    AssistanceLevel.MODERATE,
    AssistanceLevel.MAXIMAL,
]


class PerformanceTier(Enum):
    """Qualitative bucket for a goal's success percentage."""
    EXCELLENT = "excellent"
    GOOD = "good"
    NEEDS_WORK = "needsWork"

    @classmethod
    def from_percentage(cls, percentage: int) -> "PerformanceTier":
        if percentage >= 85:
            return cls.EXCELLENT
        if percentage >= 70:
            return cls.GOOD
        return cls.NEEDS_WORK

    @property
    def description(self) -> str:
        return {
            PerformanceTier.EXCELLENT: "Excellent",
            PerformanceTier.GOOD: "Good",
            PerformanceTier.NEEDS_WORK: "Needs Work",
        }[self]


class SuccessIndicator(Enum):
    """Band used by the live success-rate indicator on the wrist display."""
    HIGH = "high"        # 70-100
    MEDIUM = "medium"    # 40-69
    LOW = "low"          # 1-39
    NONE = "none"        # 0 or no session

    @classmethod
    def from_percentage(cls, percentage: Optional[int]) -> "SuccessIndicator":
        if percentage is None or percentage <= 0:
            return cls.NONE
        if percentage >= 70:
            return cls.HIGH
        if percentage >= 40:
            return cls.MEDIUM
        return cls.LOW


@dataclass(frozen=True)
class Client:
    """A therapy client as supplied by the goal directory."""
    id: str
    name: str
    date_of_birth: Optional[date] = None
    notes: Optional[str] = None
    created_date: datetime = field(default_factory=datetime.now)
    last_modified: datetime = field(default_factory=datetime.now)

    @property
    def display_name(self) -> str:
        return self.name

    @property
    def privacy_name(self) -> str:
        """First name plus last initial, e.g. "Jane D." """
        parts = self.name.split()
        if len(parts) < 2:
            return self.name
        return f"{parts[0]} {parts[-1][0]}."

    @property
    def age(self) -> Optional[int]:
        if self.date_of_birth is None:
            return None
        today = date.today()
        years = today.year - self.date_of_birth.year
        if (today.month, today.day) < (self.date_of_birth.month, self.date_of_birth.day):
            years -= 1
        return years


@dataclass(frozen=True)
class Goal:
    """A goal template selected for a session. Read-only to the session core."""
    id: str
    title: str
    category: str
    default_assistance_level: AssistanceLevel
    client_id: str
    description: Optional[str] = None
    is_active: bool = True
    created_date: datetime = field(default_factory=datetime.now)

    @property
    def display_description(self) -> str:
        return self.description or self.title


@dataclass(frozen=True)
class Trial:
    """One recorded observation. Never mutated; undo removes it instead."""
    goal_id: str
    goal_description: str
    was_successful: bool
    assistance_level: AssistanceLevel
    timestamp: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass(frozen=True)
class GoalStats:
    """Success figures for one goal, derived from the trial list."""
    goal_id: str
    success_count: int
    total_count: int

    @property
    def success_rate(self) -> float:
        if self.total_count == 0:
            return 0.0
        return self.success_count / self.total_count

    @property
    def success_percentage(self) -> int:
        return success_percentage(self.success_count, self.total_count)

    @property
    def performance_tier(self) -> PerformanceTier:
        return PerformanceTier.from_percentage(self.success_percentage)


@dataclass(frozen=True)
class AssistanceLevelStats:
    """Trial counts per assistance level."""
    independent: int = 0
    minimal: int = 0
    moderate: int = 0
    maximal: int = 0

    @property
    def total(self) -> int:
        return self.independent + self.minimal + self.moderate + self.maximal

    def count_for(self, level: AssistanceLevel) -> int:
        return getattr(self, level.value)

    def to_dict(self) -> dict:
        return {
            "independent": self.independent,
            "minimal": self.minimal,
            "moderate": self.moderate,
            "maximal": self.maximal,
            "total": self.total,
        }
