"""
Unit Tests for ActiveSession

Tests goal navigation, trial recording, undo and the derived statistics.
"""

import pytest
import sys
import os
from datetime import datetime, timedelta

# Add project root to path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
sys.path.insert(0, os.path.join(project_root, "therapy_sessions", "src"))

from therapy_sessions.active_session import ActiveSession
from therapy_sessions.models import AssistanceLevel, Goal, PerformanceTier


def make_goal(goal_id: str, description: str = None) -> Goal:
    return Goal(
        id=goal_id,
        title=f"Goal {goal_id}",
        description=description,
        category="Articulation",
        default_assistance_level=AssistanceLevel.MINIMAL,
        client_id="client-1",
    )


class TestActiveSession:
    """Test suite for ActiveSession."""

    @pytest.fixture
    def goals(self):
        return [make_goal("A", "Produce /s/ in initial position"), make_goal("B"), make_goal("C")]

    @pytest.fixture
    def session(self, goals):
        return ActiveSession.create("client-1", "Jane Doe", goals)

    def test_create_starts_empty_at_first_goal(self, session, goals):
        """A new session has no trials and points at the first goal."""
        assert session.current_goal_index == 0
        assert session.current_goal == goals[0]
        assert session.trials == []
        assert session.total_goals == 3
        assert session.client_name == "Jane Doe"

    def test_move_to_next_goal_clamps_at_end(self, session):
        """Stepping past the last goal leaves the cursor on the last goal."""
        assert session.move_to_next_goal() is True
        assert session.move_to_next_goal() is True
        assert session.current_goal_index == 2

        assert session.move_to_next_goal() is False
        assert session.current_goal_index == 2

    def test_move_to_previous_goal_clamps_at_start(self, session):
        """Stepping back from the first goal leaves the cursor at 0."""
        assert session.move_to_previous_goal() is False
        assert session.current_goal_index == 0

        session.move_to_next_goal()
        assert session.move_to_previous_goal() is True
        assert session.current_goal_index == 0

    @pytest.mark.parametrize("index", [-1, 3, 10])
    def test_set_goal_index_ignores_out_of_range(self, session, index):
        """Out-of-range indexes do not move the cursor."""
        session.set_goal_index(1)

        assert session.set_goal_index(index) is False
        assert session.current_goal_index == 1

    def test_set_goal_index_in_range(self, session, goals):
        assert session.set_goal_index(2) is True
        assert session.current_goal == goals[2]

    def test_add_trial_snapshots_current_goal(self, session):
        """Trials carry the goal id and its description at record time."""
        trial = session.add_trial(True, AssistanceLevel.INDEPENDENT)

        assert trial is not None
        assert trial.goal_id == "A"
        assert trial.goal_description == "Produce /s/ in initial position"
        assert trial.was_successful is True
        assert trial.assistance_level == AssistanceLevel.INDEPENDENT
        assert session.trials == [trial]

    def test_add_trial_uses_title_when_no_description(self, session):
        session.move_to_next_goal()
        trial = session.add_trial(False, AssistanceLevel.MODERATE)

        assert trial.goal_description == "Goal B"

    def test_remove_last_trial_pops_most_recent(self, session):
        first = session.add_trial(True, AssistanceLevel.INDEPENDENT)
        second = session.add_trial(False, AssistanceLevel.MAXIMAL)

        assert session.remove_last_trial() == second
        assert session.trials == [first]
        assert session.remove_last_trial() == first
        assert session.remove_last_trial() is None

    def test_counts_always_add_up(self, session):
        """total_trials == success_count + failure_count after any sequence."""
        outcomes = [True, False, True, True, False, False, True]
        for i, outcome in enumerate(outcomes):
            session.set_goal_index(i % 3)
            session.add_trial(outcome, AssistanceLevel.MINIMAL)
            assert session.total_trials == session.success_count + session.failure_count

        assert session.total_trials == 7
        assert session.success_count == 4

    def test_add_then_remove_restores_stats(self, session):
        """Undoing the last trial restores every derived statistic."""
        session.add_trial(True, AssistanceLevel.INDEPENDENT)
        session.move_to_next_goal()
        session.add_trial(False, AssistanceLevel.MODERATE)

        before = (
            session.total_trials,
            session.success_rate,
            session.all_goal_stats(),
            session.assistance_level_breakdown(),
        )

        session.add_trial(True, AssistanceLevel.MAXIMAL)
        session.remove_last_trial()

        after = (
            session.total_trials,
            session.success_rate,
            session.all_goal_stats(),
            session.assistance_level_breakdown(),
        )
        assert before == after

    def test_success_rate_zero_without_trials(self, session):
        assert session.success_rate == 0.0
        assert session.success_percentage == 0
        assert session.formatted_success_rate == "0% (0/0)"

    def test_success_rate_within_bounds(self, session):
        session.add_trial(True, AssistanceLevel.INDEPENDENT)
        session.add_trial(True, AssistanceLevel.INDEPENDENT)
        session.add_trial(False, AssistanceLevel.INDEPENDENT)

        assert 0.0 <= session.success_rate <= 1.0
        assert session.success_percentage == 66
        assert session.formatted_success_rate == "66% (2/3)"

    def test_all_goal_stats_one_entry_per_goal(self, session, goals):
        """Goals without trials still report 0/0."""
        session.add_trial(True, AssistanceLevel.INDEPENDENT)

        stats = session.all_goal_stats()

        assert [s.goal_id for s in stats] == [g.id for g in goals]
        assert (stats[0].success_count, stats[0].total_count) == (1, 1)
        assert (stats[1].success_count, stats[1].total_count) == (0, 0)
        assert stats[1].success_rate == 0.0
        assert stats[1].performance_tier == PerformanceTier.NEEDS_WORK

    def test_assistance_level_breakdown(self, session):
        session.add_trial(True, AssistanceLevel.INDEPENDENT)
        session.add_trial(True, AssistanceLevel.INDEPENDENT)
        session.add_trial(False, AssistanceLevel.MAXIMAL)

        breakdown = session.assistance_level_breakdown()

        assert breakdown.independent == 2
        assert breakdown.minimal == 0
        assert breakdown.moderate == 0
        assert breakdown.maximal == 1
        assert breakdown.total == 3
        assert breakdown.count_for(AssistanceLevel.MAXIMAL) == 1

    def test_elapsed_duration_recomputed_at_read(self):
        start = datetime(2024, 3, 1, 9, 0, 0)
        session = ActiveSession.create("client-1", "Jane", [make_goal("A")], now=start)

        assert session.elapsed_duration(start + timedelta(seconds=30)) == 30.0
        assert session.elapsed_duration(start + timedelta(minutes=2, seconds=5)) == 125.0
        assert session.formatted_duration(start + timedelta(minutes=2, seconds=5)) == "02:05"

    def test_navigation_dots_mark_current_goal(self, session):
        session.move_to_next_goal()

        assert session.navigation_dots == [False, True, False]


class TestActiveSessionWithoutGoals:
    """An empty goal list is tolerated but every goal operation does nothing."""

    @pytest.fixture
    def session(self):
        return ActiveSession.create("client-1", "Jane Doe", [])

    def test_no_current_goal(self, session):
        assert session.current_goal is None

    def test_add_trial_is_noop(self, session):
        assert session.add_trial(True, AssistanceLevel.INDEPENDENT) is None
        assert session.total_trials == 0

    def test_navigation_is_noop(self, session):
        assert session.move_to_next_goal() is False
        assert session.move_to_previous_goal() is False
        assert session.set_goal_index(0) is False
        assert session.current_goal_index == 0

    def test_stats_are_empty(self, session):
        assert session.all_goal_stats() == []
        assert session.navigation_dots == []
