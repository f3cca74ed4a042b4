"""
Pytest configuration and fixtures for the DreamPath analytics tests.

Every test runs against a fresh in-memory key-value store, so no Redis or
Supabase instance is needed.
"""

import itertools
from datetime import date, datetime, timezone
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from dreampath.core.cache import InMemoryRedis, set_redis_client
from dreampath.models.goal import Goal
from dreampath.models.task import Task, TaskStatus
from dreampath.services import insights_cache, local_data_service

# Sunday evening; the current week runs Mon 2025-01-13 .. Sun 2025-01-19
NOW = datetime(2025, 1, 19, 20, 0, tzinfo=timezone.utc)

_ids = itertools.count(1)


@pytest.fixture(autouse=True)
def store() -> Generator[InMemoryRedis, None, None]:
    """Fresh in-memory store wired in as the shared key-value client."""
    memory = InMemoryRedis()
    set_redis_client(memory)
    local_data_service.reset_local_data_service()
    insights_cache.reset_insights_cache_manager()
    yield memory
    set_redis_client(None)
    local_data_service.reset_local_data_service()
    insights_cache.reset_insights_cache_manager()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Test client for the FastAPI app."""
    from main import app

    with TestClient(app, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def api_base() -> str:
    """Base path for API v1 endpoints."""
    return "/api/v1"


def make_goal(**overrides) -> Goal:
    fields = {
        "id": f"goal-{next(_ids)}",
        "title": "Learn Spanish",
        "category": "EDUCATION",
        "start_date": date(2024, 12, 1),
        "target_date": date(2025, 6, 1),
    }
    fields.update(overrides)
    return Goal(**fields)


def make_task(goal_id: str, **overrides) -> Task:
    fields = {
        "id": f"task-{next(_ids)}",
        "goal_id": goal_id,
        "title": "Practice",
    }
    fields.update(overrides)
    return Task(**fields)


def completed_task(goal_id: str, completed_at: datetime, **overrides) -> Task:
    return make_task(
        goal_id, status=TaskStatus.COMPLETED, completed_at=completed_at, **overrides
    )
