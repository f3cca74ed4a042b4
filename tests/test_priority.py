"""Tests for focus goal selection."""

from datetime import date, datetime, timedelta, timezone

import pytest

from dreampath.analytics.aggregation import task_counts_by_goal
from dreampath.analytics.priority import score_goal, score_goals, select_focus_goal
from dreampath.models.analytics import GoalTaskCounts
from tests.conftest import completed_task, make_goal, make_task

T = date(2025, 1, 1)
UTC = timezone.utc


def _at(day: date, hour: int = 12) -> datetime:
    return datetime(day.year, day.month, day.day, hour, tzinfo=UTC)


def _counts(goal_id, total, completed):
    return GoalTaskCounts(goal_id=goal_id, total_tasks=total, completed_tasks=completed)


def test_behind_schedule_example():
    goal = make_goal(id="g", start_date=T, target_date=T + timedelta(days=90))
    result = score_goal(goal, _counts("g", 10, 2), _at(T + timedelta(days=60)))

    assert result.expected_progress == pytest.approx(66.67, abs=0.01)
    assert result.progress_percent == 20
    assert result.priority_score == 80
    assert result.urgency_level == "critical"
    assert result.reason == "47% behind schedule"
    assert result.days_remaining == 30
    assert result.tasks_remaining == 8


def test_overdue_example():
    goal = make_goal(id="g", start_date=T, target_date=T + timedelta(days=30))
    now = _at(T + timedelta(days=33))
    result = score_goal(goal, _counts("g", 4, 0), now)

    assert result.priority_score == 100
    assert result.urgency_level == "critical"
    assert "Overdue by 3 days" in result.reason
    assert result.reason == "Overdue by 3 days, 4 tasks left"


def test_overdue_beats_not_started():
    goal = make_goal(id="g", start_date=T, target_date=T + timedelta(days=5))
    result = score_goal(goal, _counts("g", 3, 0), _at(T + timedelta(days=10)))
    assert result.priority_score == 100


def test_deadline_week_high_and_critical():
    goal = make_goal(id="g", start_date=T, target_date=T + timedelta(days=30))
    now = _at(T + timedelta(days=26))

    relaxed = score_goal(goal, _counts("g", 10, 8), now)
    assert relaxed.priority_score == 86
    assert relaxed.urgency_level == "high"
    assert relaxed.reason == "4 days remaining, 2 tasks to complete"

    rushed = score_goal(goal, _counts("g", 20, 5), now)
    assert rushed.urgency_level == "critical"
    assert rushed.reason == "Only 4 days left, need 3.8 tasks/day"


def test_deadline_today_counts_as_one_day_of_capacity():
    goal = make_goal(id="g", start_date=T, target_date=T + timedelta(days=10))
    result = score_goal(goal, _counts("g", 5, 2), _at(T + timedelta(days=10)))
    assert result.days_remaining == 0
    assert result.priority_score == 94
    assert result.urgency_level == "critical"
    assert result.reason == "Only 0 days left, need 3.0 tasks/day"


def test_deadline_today_with_light_load_reason():
    goal = make_goal(id="g", start_date=T, target_date=T + timedelta(days=10))
    result = score_goal(goal, _counts("g", 5, 4), _at(T + timedelta(days=10)))
    assert result.urgency_level == "high"
    assert result.reason == "0 days remaining, 1 tasks to complete"


def test_one_day_is_singular():
    goal = make_goal(id="g", start_date=T, target_date=T + timedelta(days=10))
    overdue = score_goal(goal, _counts("g", 5, 4), _at(T + timedelta(days=11)))
    assert overdue.reason == "Overdue by 1 day, 1 tasks left"


def test_slightly_behind_and_falling_behind():
    goal = make_goal(id="g", start_date=T, target_date=T + timedelta(days=100))
    now = _at(T + timedelta(days=50))

    slight = score_goal(goal, _counts("g", 100, 45), now)
    assert slight.urgency_level == "medium"
    assert slight.reason == "Slightly behind schedule"

    falling = score_goal(goal, _counts("g", 100, 35), now)
    assert falling.urgency_level == "high"
    assert falling.reason == "Falling behind, 15% below expected"


def test_not_started_before_window_opens():
    goal = make_goal(id="g", start_date=T + timedelta(days=10), target_date=T + timedelta(days=40))
    result = score_goal(goal, _counts("g", 6, 0), _at(T))
    assert result.expected_progress == 0
    assert result.priority_score == 35
    assert result.reason == "Not started yet, 6 tasks waiting"


def test_on_track_scores_by_remaining_share():
    goal = make_goal(id="g", start_date=T, target_date=T + timedelta(days=100))
    result = score_goal(goal, _counts("g", 10, 6), _at(T + timedelta(days=20)))
    assert result.urgency_level == "low"
    assert result.priority_score == pytest.approx(12)
    assert result.reason == "4 tasks remaining"


def test_goals_without_remaining_tasks_are_excluded():
    done = make_goal(id="done", start_date=T, target_date=T + timedelta(days=3))
    empty = make_goal(id="empty", start_date=T, target_date=T + timedelta(days=3))
    now = _at(T + timedelta(days=30))
    counts = {"done": _counts("done", 3, 3), "empty": _counts("empty", 0, 0)}

    assert score_goals([done, empty], counts, now) == []
    assert select_focus_goal([done, empty], counts, now) is None


def test_focus_is_highest_score_first_listed_on_tie():
    a = make_goal(id="a", start_date=T, target_date=T + timedelta(days=5))
    b = make_goal(id="b", start_date=T, target_date=T + timedelta(days=5))
    c = make_goal(id="c", start_date=T, target_date=T + timedelta(days=200))
    tasks = [make_task("a"), make_task("b"), make_task("c"), completed_task("c", _at(T))]
    counts = task_counts_by_goal([c, a, b], tasks)
    now = _at(T + timedelta(days=20))

    ranked = score_goals([c, a, b], counts, now)
    assert [item.goal_id for item in ranked] == ["a", "b", "c"]
    assert select_focus_goal([c, a, b], counts, now).goal_id == "a"
