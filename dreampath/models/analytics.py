"""
Derived analytics models.

Everything here is recomputed on each analytics pass from the goal/task
snapshot and is never persisted.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

from dreampath.models.goal import GoalCategory
from dreampath.models.insights import InsightsResult

UrgencyLevel = Literal["critical", "high", "medium", "low"]


class GoalTaskCounts(BaseModel):
    goal_id: str
    total_tasks: int = 0
    completed_tasks: int = 0

    @property
    def tasks_remaining(self) -> int:
        return max(0, self.total_tasks - self.completed_tasks)


class AnalyticsStats(BaseModel):
    total_goals: int
    total_tasks: int
    completed_tasks: int
    overall_progress: int = Field(..., ge=0, le=100)
    streak: int
    longest_streak: int
    this_week_completed: int
    last_week_completed: int
    weekly_change: int
    total_weekly_minutes: int
    total_weekly_time_label: str
    week_start: datetime
    week_label: str


class GoalTimeShare(BaseModel):
    goal_id: str
    name: str
    category: GoalCategory
    color: str
    icon: str
    gradient: Tuple[str, str]
    weekly_minutes: int
    weekly_time_label: str
    share_percent: int
    total_tasks: int
    completed_tasks: int
    completion_percent: int
    # Rendering values: floored bar widths and the bar-chart label
    time_bar_width: int
    progress_bar_width: int
    short_name: str


class GoalWeeklyActivity(BaseModel):
    goal_id: str
    goal_name: str
    color: str
    # Completions per day, index 0 = Monday
    data: List[int]


class WeeklyActivityMatrix(BaseModel):
    goals: List[GoalWeeklyActivity]
    max_daily_value: int = 1
    day_labels: List[str] = Field(
        default_factory=lambda: ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    )


class GoalPriorityResult(BaseModel):
    goal_id: str
    goal_name: str
    category: GoalCategory
    total_tasks: int
    completed_tasks: int
    priority_score: float
    progress_percent: float = Field(..., ge=0, le=100)
    expected_progress: float = Field(..., ge=0, le=100)
    days_remaining: int
    tasks_remaining: int = Field(..., ge=0)
    urgency_level: UrgencyLevel
    reason: str


class FocusGoalView(GoalPriorityResult):
    urgency_label: str
    urgency_colors: Tuple[str, str]


class AnalyticsDashboard(BaseModel):
    generated_at: datetime
    stats: AnalyticsStats
    time_distribution: List[GoalTimeShare]
    weekly_activity: WeeklyActivityMatrix
    focus_goal: Optional[FocusGoalView] = None
    insights: InsightsResult
    data_error: Optional[str] = None
