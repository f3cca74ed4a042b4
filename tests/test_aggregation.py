"""Tests for dashboard statistics."""

from datetime import datetime, timedelta, timezone

from dreampath.analytics.aggregation import (
    compute_stats,
    count_completed_between,
    overall_progress,
    task_counts_by_goal,
    time_distribution,
    weekly_activity,
    weekly_change,
)
from dreampath.analytics.temporal import week_start
from dreampath.models.goal import GoalCategory
from dreampath.models.task import TaskStatus
from tests.conftest import NOW, completed_task, make_goal, make_task

MONDAY = datetime(2025, 1, 13, 9, 0, tzinfo=timezone.utc)
LAST_MONDAY = MONDAY - timedelta(days=7)


def _week_of(goal_id, per_day, monday):
    tasks = []
    for offset, count in enumerate(per_day):
        for _ in range(count):
            tasks.append(completed_task(goal_id, monday + timedelta(days=offset)))
    return tasks


def test_overall_progress_is_zero_without_tasks():
    assert overall_progress([]) == 0


def test_overall_progress_rounds_half_up():
    tasks = [completed_task("g", NOW)] + [make_task("g")]
    assert overall_progress(tasks) == 50
    tasks = [completed_task("g", NOW)] * 5 + [make_task("g")] * 3
    assert overall_progress(tasks) == 63


def test_overall_progress_stays_in_range():
    tasks = [completed_task("g", NOW) for _ in range(4)]
    assert overall_progress(tasks) == 100


def test_weekly_change_example_week():
    goal = make_goal(id="g1")
    tasks = _week_of("g1", [2, 0, 1, 0, 0, 3, 0], MONDAY) + _week_of(
        "g1", [1, 1, 1, 1, 1, 1, 1], LAST_MONDAY
    )
    stats = compute_stats([goal], tasks, NOW)
    assert stats.this_week_completed == 6
    assert stats.last_week_completed == 7
    assert stats.weekly_change == -14


def test_weekly_change_without_last_week():
    assert weekly_change(3, 0) == 100
    assert weekly_change(0, 0) == 0
    assert weekly_change(0, 4) == -100


def test_count_completed_between_uses_half_open_window():
    this_week = week_start(NOW)
    tasks = [
        completed_task("g", this_week),
        completed_task("g", this_week - timedelta(microseconds=1)),
    ]
    assert count_completed_between(tasks, this_week) == 1
    assert count_completed_between(tasks, this_week - timedelta(days=7), this_week) == 1


def test_task_counts_recomputed_from_tasks():
    goal = make_goal(id="g1", metrics={"totalTasks": 99, "completedTasks": 42})
    tasks = [completed_task("g1", NOW), make_task("g1"), make_task("other")]
    counts = task_counts_by_goal([goal], tasks)
    assert counts["g1"].total_tasks == 2
    assert counts["g1"].completed_tasks == 1
    assert "other" not in counts


def test_time_distribution_prefers_actual_minutes():
    career = make_goal(id="c", title="Promotion", category="CAREER")
    health = make_goal(id="h", title="Run", category="HEALTH")
    tasks = [
        completed_task("c", MONDAY, estimated_minutes=30, actual_minutes=90),
        completed_task("h", MONDAY, estimated_minutes=30),
        completed_task("h", MONDAY, estimated_minutes=45, actual_minutes=0),
        completed_task("h", LAST_MONDAY, estimated_minutes=500),
        make_task("h", estimated_minutes=500),
    ]
    shares = {share.goal_id: share for share in time_distribution([career, health], tasks, NOW)}

    assert shares["c"].weekly_minutes == 90
    assert shares["h"].weekly_minutes == 30
    assert shares["c"].share_percent == 75
    assert shares["h"].share_percent == 25
    assert shares["c"].weekly_time_label == "1h 30m"
    assert shares["c"].color == "#667eea"
    assert shares["h"].icon == "fitness"
    assert shares["h"].completion_percent == 75


def test_time_distribution_without_minutes_has_zero_shares():
    goal = make_goal(id="g")
    shares = time_distribution([goal], [make_task("g")], NOW)
    assert shares[0].share_percent == 0
    assert shares[0].weekly_minutes == 0


def test_unknown_category_uses_other_style():
    goal = make_goal(id="g", category="HOBBIES")
    assert goal.category == GoalCategory.OTHER
    share = time_distribution([goal], [], NOW)[0]
    assert share.icon == "flag"


def test_weekly_activity_matrix():
    goal = make_goal(id="g1", title="A very long goal title")
    tasks = _week_of("g1", [2, 0, 1, 0, 0, 3, 0], MONDAY) + _week_of(
        "g1", [5, 0, 0, 0, 0, 0, 0], LAST_MONDAY
    )
    matrix = weekly_activity([goal], tasks, NOW)

    assert matrix.goals[0].data == [2, 0, 1, 0, 0, 3, 0]
    assert matrix.goals[0].goal_name == "A very long ..."
    assert matrix.max_daily_value == 3
    assert matrix.day_labels[0] == "Mon"


def test_weekly_activity_max_is_at_least_one():
    matrix = weekly_activity([make_goal(id="g")], [], NOW)
    assert matrix.max_daily_value == 1
    assert matrix.goals[0].data == [0] * 7


def test_compute_stats_counts_and_minutes():
    goal = make_goal(id="g1")
    tasks = [
        completed_task("g1", NOW - timedelta(hours=1), estimated_minutes=20),
        completed_task("g1", NOW - timedelta(days=1), actual_minutes=40),
        completed_task("archived", NOW - timedelta(hours=2), estimated_minutes=60),
        make_task("g1", status=TaskStatus.IN_PROGRESS),
    ]
    stats = compute_stats([goal], tasks, NOW)

    assert stats.total_goals == 1
    assert stats.total_tasks == 4
    assert stats.completed_tasks == 3
    assert stats.overall_progress == 75
    assert stats.streak == 2
    assert stats.total_weekly_minutes == 60
    assert stats.total_weekly_time_label == "1h"
    assert stats.week_label == "Jan 13 - Jan 19"


def test_bar_widths_are_floored_but_shares_stay_exact():
    big = make_goal(id="big", title="Marathon training")
    small = make_goal(id="small", title="Stretch")
    tasks = [
        completed_task("big", MONDAY, actual_minutes=990),
        completed_task("small", MONDAY, actual_minutes=10),
        make_task("small"),
    ] + [make_task("big") for _ in range(300)]
    shares = {share.goal_id: share for share in time_distribution([big, small], tasks, NOW)}

    assert shares["small"].share_percent == 1
    assert shares["small"].time_bar_width == 2
    assert shares["big"].time_bar_width == 99
    assert shares["big"].completion_percent == 0
    assert shares["big"].progress_bar_width == 1
    assert shares["small"].progress_bar_width == 50
    assert shares["big"].short_name == "Marathon t..."
    assert shares["small"].short_name == "Stretch"
