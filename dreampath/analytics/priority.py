"""
Smart focus: pick the one goal that most needs attention right now.

Each goal with work left is scored by the first tier it matches:

1. overdue                           100
2. deadline within a week            80-94
3. behind the expected pace          40-80
4. has tasks but none done yet       35
5. on track                          0-30

The highest score wins; on ties the goal listed first wins.
"""

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from dreampath.analytics.temporal import (
    days_elapsed,
    days_remaining,
    round_half_up,
    start_of_day,
    total_planned_days,
)
from dreampath.models.analytics import GoalPriorityResult, GoalTaskCounts
from dreampath.models.goal import Goal

OVERDUE_SCORE = 100
DEADLINE_WINDOW_DAYS = 7
DEADLINE_BASE_SCORE = 80
DEADLINE_SCORE_PER_DAY = 2
CRITICAL_TASKS_PER_DAY = 2
BEHIND_BASE_SCORE = 40
BEHIND_MAX_GAP_BONUS = 40
BEHIND_CRITICAL_GAP = 25
BEHIND_HIGH_GAP = 10
NOT_STARTED_SCORE = 35
ON_TRACK_MAX_SCORE = 30


def _days(count: int) -> str:
    return f"{count} day" if count == 1 else f"{count} days"


def expected_progress(goal: Goal, today: datetime) -> float:
    """Share of the goal window already elapsed, as a 0-100 percentage."""
    elapsed = days_elapsed(goal.start_date, today)
    if elapsed <= 0:
        return 0.0
    total = total_planned_days(goal.start_date, goal.target_date)
    return min(100.0, elapsed / total * 100)


def score_goal(
    goal: Goal, counts: GoalTaskCounts, now: datetime
) -> Optional[GoalPriorityResult]:
    """Score one goal, or None when it has no remaining tasks."""
    today = start_of_day(now)
    total = counts.total_tasks
    completed = counts.completed_tasks
    remaining = counts.tasks_remaining

    progress = completed / total * 100 if total > 0 else 0.0
    if remaining == 0 or progress >= 100:
        return None

    expected = expected_progress(goal, today)
    remaining_days = days_remaining(goal.target_date, today)

    if remaining_days < 0:
        score = OVERDUE_SCORE
        urgency = "critical"
        reason = f"Overdue by {_days(abs(remaining_days))}, {remaining} tasks left"

    elif remaining_days <= DEADLINE_WINDOW_DAYS:
        score = DEADLINE_BASE_SCORE + (DEADLINE_WINDOW_DAYS - remaining_days) * DEADLINE_SCORE_PER_DAY
        tasks_per_day = remaining / max(remaining_days, 1)
        if tasks_per_day > CRITICAL_TASKS_PER_DAY:
            urgency = "critical"
            reason = f"Only {_days(remaining_days)} left, need {tasks_per_day:.1f} tasks/day"
        else:
            urgency = "high"
            reason = f"{_days(remaining_days)} remaining, {remaining} tasks to complete"

    elif expected > progress:
        gap = expected - progress
        score = BEHIND_BASE_SCORE + min(gap, BEHIND_MAX_GAP_BONUS)
        if gap >= BEHIND_CRITICAL_GAP:
            urgency = "critical"
            reason = f"{round_half_up(gap)}% behind schedule"
        elif gap >= BEHIND_HIGH_GAP:
            urgency = "high"
            reason = f"Falling behind, {round_half_up(gap)}% below expected"
        else:
            urgency = "medium"
            reason = "Slightly behind schedule"

    elif progress == 0 and total > 0:
        score = NOT_STARTED_SCORE
        urgency = "medium"
        reason = f"Not started yet, {total} tasks waiting"

    else:
        score = (100 - progress) / 100 * ON_TRACK_MAX_SCORE
        urgency = "low"
        reason = f"{remaining} tasks remaining"

    return GoalPriorityResult(
        goal_id=goal.id,
        goal_name=goal.title,
        category=goal.category,
        total_tasks=total,
        completed_tasks=completed,
        priority_score=score,
        progress_percent=progress,
        expected_progress=expected,
        days_remaining=remaining_days,
        tasks_remaining=remaining,
        urgency_level=urgency,
        reason=reason,
    )


def score_goals(
    goals: Sequence[Goal], counts: Dict[str, GoalTaskCounts], now: datetime
) -> List[GoalPriorityResult]:
    """Every goal with remaining work, highest priority first (stable on ties)."""
    results = []
    for goal in goals:
        result = score_goal(goal, counts.get(goal.id, GoalTaskCounts(goal_id=goal.id)), now)
        if result is not None:
            results.append(result)
    return sorted(results, key=lambda item: item.priority_score, reverse=True)


def select_focus_goal(
    goals: Sequence[Goal], counts: Dict[str, GoalTaskCounts], now: datetime
) -> Optional[GoalPriorityResult]:
    ranked = score_goals(goals, counts, now)
    return ranked[0] if ranked else None
