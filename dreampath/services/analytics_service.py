"""
DreamPath - Analytics dashboard service

Builds the analytics dashboard for the current goal/task snapshot.

Flow:
1. Load goals and tasks from the configured storage backend
2. Keep ACTIVE and COMPLETED goals for statistics, ACTIVE ones for focus
3. Compute stats, time distribution, weekly activity and the focus goal
4. Ask the insights cache manager for AI insights using that context

Everything in steps 1-3 is deterministic and local; a failing insights
service only changes the ``insights`` block of the result.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from dreampath.analytics import aggregation, priority
from dreampath.analytics.display import urgency_colors, urgency_label
from dreampath.core.config import settings
from dreampath.models.analytics import (
    AnalyticsDashboard,
    AnalyticsStats,
    FocusGoalView,
    GoalPriorityResult,
    GoalTaskCounts,
)
from dreampath.models.goal import Goal, GoalStatus
from dreampath.models.insights import (
    FocusGoalContext,
    GoalContext,
    InsightsRequest,
    InsightsResult,
    StatsContext,
    TaskContext,
)
from dreampath.models.task import Task
from dreampath.services.data_service import DataService, DataServiceError, get_data_service
from dreampath.services.insights_cache import (
    InsightsCacheManager,
    get_insights_cache_manager,
)
from dreampath.services.logger import logger

ANALYTICS_GOAL_STATUSES = (GoalStatus.ACTIVE, GoalStatus.COMPLETED)


def analytics_goals(goals: Sequence[Goal]) -> List[Goal]:
    return [goal for goal in goals if goal.status in ANALYTICS_GOAL_STATUSES]


def active_goals(goals: Sequence[Goal]) -> List[Goal]:
    return [goal for goal in goals if goal.status == GoalStatus.ACTIVE]


def to_focus_view(result: GoalPriorityResult) -> FocusGoalView:
    return FocusGoalView(
        **result.model_dump(),
        urgency_label=urgency_label(result.urgency_level),
        urgency_colors=urgency_colors(result.urgency_level),
    )


def build_insights_request(
    goals: Sequence[Goal],
    tasks: Sequence[Task],
    counts: Dict[str, GoalTaskCounts],
    stats: AnalyticsStats,
    focus: Optional[GoalPriorityResult],
) -> InsightsRequest:
    """Serialize the analytics context sent to the remote insights service."""
    goal_context = []
    for goal in goals:
        goal_counts = counts.get(goal.id) or GoalTaskCounts(goal_id=goal.id)
        goal_context.append(
            GoalContext(
                id=goal.id,
                title=goal.title,
                category=goal.category.value,
                priority=goal.priority.value,
                status=goal.status.value,
                start_date=goal.start_date.isoformat(),
                target_date=goal.target_date.isoformat(),
                total_tasks=goal_counts.total_tasks,
                completed_tasks=goal_counts.completed_tasks,
                completion_percentage=aggregation.completion_percent(
                    goal_counts.completed_tasks, goal_counts.total_tasks
                ),
            )
        )

    task_context = [
        TaskContext(
            id=task.id,
            goal_id=task.goal_id,
            status=task.status.value,
            scheduled_date=task.scheduled_date.isoformat() if task.scheduled_date else None,
            completed_at=task.completed_at.isoformat() if task.completed_at else None,
            estimated_minutes=task.estimated_minutes,
            actual_minutes=task.actual_minutes,
        )
        for task in tasks
    ]

    focus_context = None
    if focus is not None:
        focus_context = FocusGoalContext(
            goal_name=focus.goal_name,
            progress_percent=focus.progress_percent,
            expected_progress=focus.expected_progress,
            days_remaining=focus.days_remaining,
            tasks_remaining=focus.tasks_remaining,
            urgency_level=focus.urgency_level,
            reason=focus.reason,
        )

    return InsightsRequest(
        goals=goal_context,
        tasks=task_context,
        stats=StatsContext(
            total_goals=stats.total_goals,
            total_tasks=stats.total_tasks,
            completed_tasks=stats.completed_tasks,
            overall_progress=stats.overall_progress,
            streak=stats.streak,
            weekly_change=stats.weekly_change,
            total_weekly_minutes=stats.total_weekly_minutes,
            this_week_completed=stats.this_week_completed,
        ),
        focus_goal=focus_context,
    )


class AnalyticsService:
    """Service for computing the analytics dashboard."""

    def __init__(
        self,
        data_service: Optional[DataService] = None,
        insights_manager: Optional[InsightsCacheManager] = None,
        require_recent_streak: Optional[bool] = None,
    ):
        self.data_service = data_service or get_data_service()
        self.insights_manager = insights_manager or get_insights_cache_manager()
        self.require_recent_streak = (
            settings.STREAK_REQUIRE_RECENT
            if require_recent_streak is None
            else require_recent_streak
        )

    def load_snapshot(self) -> Tuple[List[Goal], List[Task], Optional[str]]:
        """Read goals and tasks. A storage failure yields an empty snapshot and the error."""
        try:
            return self.data_service.list_goals(), self.data_service.list_tasks(), None
        except DataServiceError as e:
            logger.error(f"Error loading analytics data: {e}")
            return [], [], str(e)

    def focus_goal(self, now: datetime) -> Optional[FocusGoalView]:
        goals, tasks, _ = self.load_snapshot()
        active = active_goals(goals)
        counts = aggregation.task_counts_by_goal(active, tasks)
        result = priority.select_focus_goal(active, counts, now)
        return to_focus_view(result) if result else None

    async def build_dashboard(
        self, now: Optional[datetime] = None, force_refresh: bool = False
    ) -> AnalyticsDashboard:
        now = now or datetime.now(timezone.utc)
        all_goals, tasks, data_error = self.load_snapshot()

        goals = analytics_goals(all_goals)
        stats = aggregation.compute_stats(
            goals, tasks, now, require_recent_streak=self.require_recent_streak
        )
        counts = aggregation.task_counts_by_goal(goals, tasks)

        active = active_goals(goals)
        focus = priority.select_focus_goal(active, counts, now)

        request = build_insights_request(goals, tasks, counts, stats, focus)
        insights = await self._insights(request, now, force_refresh)

        return AnalyticsDashboard(
            generated_at=now,
            stats=stats,
            time_distribution=aggregation.time_distribution(goals, tasks, now),
            weekly_activity=aggregation.weekly_activity(goals, tasks, now),
            focus_goal=to_focus_view(focus) if focus else None,
            insights=insights,
            data_error=data_error,
        )

    async def refresh_insights(self, now: Optional[datetime] = None) -> InsightsResult:
        dashboard = await self.build_dashboard(now, force_refresh=True)
        return dashboard.insights

    async def _insights(
        self, request: InsightsRequest, now: datetime, force_refresh: bool
    ) -> InsightsResult:
        if force_refresh:
            return await self.insights_manager.force_refresh(request, now)
        return await self.insights_manager.load(request, now)


def get_analytics_service() -> AnalyticsService:
    """Build an AnalyticsService wired to the configured backends."""
    return AnalyticsService()
