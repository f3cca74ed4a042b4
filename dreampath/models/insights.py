from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

InsightColor = Literal["success", "primary", "warning", "error"]
CacheState = Literal["no-cache", "cache-fresh", "cache-stale"]
InsightsSource = Literal["cache", "remote", "stale_cache", "fallback"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AIInsight(CamelModel):
    icon: str
    title: str
    description: str
    color: InsightColor = "primary"


class AITip(CamelModel):
    tip: str


class AIFocusRecommendation(CamelModel):
    title: str
    description: str
    action_items: List[str] = Field(default_factory=list)


class AIInsightsPayload(CamelModel):
    weekly_summary: str
    insights: List[AIInsight]
    tips: List[AITip]
    focus_recommendation: AIFocusRecommendation
    motivational_message: str


class InsightsEnvelope(BaseModel):
    """Response body of the remote insights endpoint."""

    success: bool = False
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class InsightsCacheRecord(BaseModel):
    """Payload and timestamp stored together as one serialized value."""

    payload: AIInsightsPayload
    timestamp: datetime


# Context sent to the remote service


class GoalContext(CamelModel):
    id: str
    title: str
    category: str
    priority: str
    status: str
    start_date: str
    target_date: str
    total_tasks: int
    completed_tasks: int
    completion_percentage: int


class TaskContext(CamelModel):
    id: str
    goal_id: str
    status: str
    scheduled_date: Optional[str] = None
    completed_at: Optional[str] = None
    estimated_minutes: int
    actual_minutes: Optional[int] = None


class StatsContext(CamelModel):
    total_goals: int
    total_tasks: int
    completed_tasks: int
    overall_progress: int
    streak: int
    weekly_change: int
    total_weekly_minutes: int
    this_week_completed: int


class FocusGoalContext(CamelModel):
    goal_name: str
    progress_percent: float
    expected_progress: float
    days_remaining: int
    tasks_remaining: int
    urgency_level: str
    reason: str


class InsightsRequest(CamelModel):
    goals: List[GoalContext]
    tasks: List[TaskContext]
    stats: StatsContext
    focus_goal: Optional[FocusGoalContext] = None

    def to_body(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# Static defaults shown when no AI insights are available

FALLBACK_INSIGHTS: List[AIInsight] = [
    AIInsight(
        icon="trending-up",
        title="Keep it up!",
        description="You are making progress on your goals. Continue with your momentum!",
        color="success",
    ),
    AIInsight(
        icon="time-outline",
        title="Time management",
        description="Schedule your most important tasks during your peak productivity hours.",
        color="primary",
    ),
    AIInsight(
        icon="bulb-outline",
        title="Stay focused",
        description="Break down large tasks into smaller steps to make progress easier.",
        color="warning",
    ),
]

FALLBACK_TIPS: List[AITip] = [
    AITip(tip="Start your day with the most challenging task"),
    AITip(tip="Take 5-minute breaks every 25 minutes"),
    AITip(tip="Review your goals every Sunday evening"),
    AITip(tip="Celebrate small wins to stay motivated"),
]


class InsightsResult(BaseModel):
    """What the cache manager hands back to the caller on every trigger."""

    payload: Optional[AIInsightsPayload] = None
    insights: List[AIInsight]
    tips: List[AITip]
    source: InsightsSource
    cache_state: CacheState
    cached_at: Optional[datetime] = None
    days_until_refresh: Optional[int] = None
    error: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.payload is None
