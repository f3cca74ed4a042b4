"""
Aggregate statistics for the analytics dashboard.

Inputs are the goal list (already narrowed to ACTIVE and COMPLETED goals) and
the full task list. Per-goal counts always come from the task records; the
metrics snapshot stored on each goal is ignored.
"""

from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from dreampath.analytics.display import (
    BAR_NAME_LENGTH,
    category_style,
    progress_bar_width,
    time_bar_width,
    truncate_name,
)
from dreampath.analytics.streak import calculate_longest_streak, calculate_streak
from dreampath.analytics.temporal import (
    align_to,
    bucket_by_day_of_week,
    format_minutes,
    previous_week_start,
    round_half_up,
    week_range_label,
    week_start,
)
from dreampath.models.analytics import (
    AnalyticsStats,
    GoalTaskCounts,
    GoalTimeShare,
    GoalWeeklyActivity,
    WeeklyActivityMatrix,
)
from dreampath.models.goal import Goal
from dreampath.models.task import Task, TaskStatus


def completion_percent(completed: int, total: int) -> int:
    """Rounded completion percentage, 0 when there is nothing to complete."""
    if total <= 0:
        return 0
    return round_half_up(completed / total * 100)


def overall_progress(tasks: Sequence[Task]) -> int:
    completed = sum(1 for task in tasks if task.status == TaskStatus.COMPLETED)
    return completion_percent(completed, len(tasks))


def task_counts_by_goal(
    goals: Iterable[Goal], tasks: Iterable[Task]
) -> Dict[str, GoalTaskCounts]:
    counts = {goal.id: GoalTaskCounts(goal_id=goal.id) for goal in goals}
    for task in tasks:
        entry = counts.get(task.goal_id)
        if entry is None:
            continue
        entry.total_tasks += 1
        if task.status == TaskStatus.COMPLETED:
            entry.completed_tasks += 1
    return counts


def count_completed_between(
    tasks: Iterable[Task], start: datetime, end: Optional[datetime] = None
) -> int:
    """Tasks completed at or after ``start`` and, if given, before ``end``."""
    total = 0
    for task in tasks:
        if not task.is_completed:
            continue
        moment = align_to(task.completed_at, start)
        if moment >= start and (end is None or moment < end):
            total += 1
    return total


def weekly_change(this_week: int, last_week: int) -> int:
    """Percent change in completions against last week.

    100 when last week had none and this week has some, 0 when both are empty.
    """
    if last_week > 0:
        return round_half_up((this_week - last_week) / last_week * 100)
    return 100 if this_week > 0 else 0


def _completed_since(tasks: Iterable[Task], since: datetime) -> List[Task]:
    return [
        task
        for task in tasks
        if task.is_completed and align_to(task.completed_at, since) >= since
    ]


def time_distribution(
    goals: Sequence[Goal], tasks: Sequence[Task], now: datetime
) -> List[GoalTimeShare]:
    """Minutes spent per goal this week and each goal's share of the total."""
    this_week = week_start(now)
    counts = task_counts_by_goal(goals, tasks)

    minutes_by_goal: Dict[str, int] = defaultdict(int)
    for task in _completed_since(tasks, this_week):
        minutes_by_goal[task.goal_id] += task.tracked_minutes

    grand_total = sum(minutes_by_goal[goal.id] for goal in goals)

    shares: List[GoalTimeShare] = []
    for goal in goals:
        style = category_style(goal.category)
        minutes = minutes_by_goal[goal.id]
        goal_counts = counts[goal.id]
        share = completion_percent(minutes, grand_total)
        progress = completion_percent(goal_counts.completed_tasks, goal_counts.total_tasks)
        shares.append(
            GoalTimeShare(
                goal_id=goal.id,
                name=goal.title,
                category=goal.category,
                color=style.color,
                icon=style.icon,
                gradient=style.gradient,
                weekly_minutes=minutes,
                weekly_time_label=format_minutes(minutes),
                share_percent=share,
                total_tasks=goal_counts.total_tasks,
                completed_tasks=goal_counts.completed_tasks,
                completion_percent=progress,
                time_bar_width=time_bar_width(share),
                progress_bar_width=progress_bar_width(progress),
                short_name=truncate_name(goal.title, BAR_NAME_LENGTH),
            )
        )
    return shares


def weekly_activity(
    goals: Sequence[Goal], tasks: Sequence[Task], now: datetime
) -> WeeklyActivityMatrix:
    """Completions per goal per weekday for the current week."""
    this_week = week_start(now)
    completed_by_goal: Dict[str, List[datetime]] = defaultdict(list)
    for task in tasks:
        if task.is_completed:
            completed_by_goal[task.goal_id].append(task.completed_at)

    rows = [
        GoalWeeklyActivity(
            goal_id=goal.id,
            goal_name=truncate_name(goal.title),
            color=category_style(goal.category).color,
            data=bucket_by_day_of_week(completed_by_goal[goal.id], this_week),
        )
        for goal in goals
    ]
    max_value = max([1] + [value for row in rows for value in row.data])
    return WeeklyActivityMatrix(goals=rows, max_daily_value=max_value)


def compute_stats(
    goals: Sequence[Goal],
    tasks: Sequence[Task],
    now: datetime,
    require_recent_streak: bool = False,
) -> AnalyticsStats:
    this_week = week_start(now)
    last_week = previous_week_start(now)

    completed = sum(1 for task in tasks if task.status == TaskStatus.COMPLETED)
    this_week_completed = count_completed_between(tasks, this_week)
    last_week_completed = count_completed_between(tasks, last_week, this_week)

    goal_ids = {goal.id for goal in goals}
    weekly_minutes = sum(
        task.tracked_minutes
        for task in _completed_since(tasks, this_week)
        if task.goal_id in goal_ids
    )

    return AnalyticsStats(
        total_goals=len(goals),
        total_tasks=len(tasks),
        completed_tasks=completed,
        overall_progress=completion_percent(completed, len(tasks)),
        streak=calculate_streak(tasks, now, require_recent=require_recent_streak),
        longest_streak=calculate_longest_streak(tasks, now),
        this_week_completed=this_week_completed,
        last_week_completed=last_week_completed,
        weekly_change=weekly_change(this_week_completed, last_week_completed),
        total_weekly_minutes=weekly_minutes,
        total_weekly_time_label=format_minutes(weekly_minutes),
        week_start=this_week,
        week_label=week_range_label(this_week),
    )
