from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, HTTPException, Query, status

from dreampath.core.config import settings
from dreampath.models.analytics import AnalyticsDashboard, FocusGoalView
from dreampath.models.insights import InsightsResult
from dreampath.services.analytics_service import AnalyticsService, get_analytics_service

router = APIRouter(redirect_slashes=False)


def resolve_now(
    timezone: Optional[str] = Query(
        None, description="IANA timezone used for day and week boundaries"
    ),
) -> datetime:
    """Current time in the caller's timezone (or DEFAULT_TIMEZONE)."""
    name = timezone or settings.DEFAULT_TIMEZONE
    try:
        zone = ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown timezone: {name}",
        )
    return datetime.now(zone)


@router.get("/dashboard", response_model=AnalyticsDashboard)
async def get_dashboard(
    now: datetime = Depends(resolve_now),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Stats, time distribution, weekly activity, focus goal and AI insights"""
    return await service.build_dashboard(now)


@router.get("/focus", response_model=Optional[FocusGoalView])
async def get_focus_goal(
    now: datetime = Depends(resolve_now),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """The goal that most needs attention right now, or null"""
    return service.focus_goal(now)


@router.post("/insights/refresh", response_model=InsightsResult)
async def refresh_insights(
    now: datetime = Depends(resolve_now),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Fetch new AI insights regardless of cache freshness"""
    return await service.refresh_insights(now)
