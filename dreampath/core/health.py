"""
Health check utilities for the DreamPath analytics API.

Reports the state of the goal/task storage backend and the key-value store
that holds local data and the insights cache.
"""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from dreampath.core.cache import InMemoryRedis, get_redis_client
from dreampath.core.config import settings
from dreampath.core.database import get_supabase_client


class HealthStatus(str, Enum):
    OK = "ok"
    DEGRADED = "degraded"
    CRITICAL = "critical"
    NOT_CONFIGURED = "not_configured"


class HealthCheckResult(BaseModel):
    component: str
    status: HealthStatus
    details: str = ""
    latency_ms: Optional[float] = Field(default=None, ge=0)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class HealthReport(BaseModel):
    status: HealthStatus
    version: str
    environment: str
    timestamp: datetime
    checks: List[HealthCheckResult]


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


async def _check_key_value_store() -> HealthCheckResult:
    component = "key_value_store"
    start = time.perf_counter()

    client = get_redis_client()
    in_memory = isinstance(client, InMemoryRedis)

    try:
        await asyncio.to_thread(client.ping)
    except Exception as exc:  # pragma: no cover - network failures
        return HealthCheckResult(
            component=component,
            status=HealthStatus.CRITICAL,
            details=f"Redis unreachable: {exc}",
            latency_ms=_elapsed_ms(start),
        )

    if in_memory and settings.REDIS_URL:
        return HealthCheckResult(
            component=component,
            status=HealthStatus.DEGRADED,
            details="Redis unavailable, using in-memory store",
            latency_ms=_elapsed_ms(start),
            metadata={"backend": "memory"},
        )

    return HealthCheckResult(
        component=component,
        status=HealthStatus.OK,
        details="In-memory store" if in_memory else "Redis reachable",
        latency_ms=_elapsed_ms(start),
        metadata={"backend": "memory" if in_memory else "redis"},
    )


async def _check_supabase() -> HealthCheckResult:
    component = "supabase"
    start = time.perf_counter()

    if settings.USE_LOCAL_DATA:
        return HealthCheckResult(
            component=component,
            status=HealthStatus.NOT_CONFIGURED,
            details="Local data store in use",
        )

    try:
        supabase = get_supabase_client()
        response = await asyncio.to_thread(
            lambda: supabase.table("goals").select("id").limit(1).execute()
        )
        return HealthCheckResult(
            component=component,
            status=HealthStatus.OK,
            details="Supabase reachable",
            latency_ms=_elapsed_ms(start),
            metadata={"rows_sampled": len(getattr(response, "data", []) or [])},
        )
    except Exception as exc:  # pragma: no cover - network failures
        return HealthCheckResult(
            component=component,
            status=HealthStatus.CRITICAL,
            details=f"Supabase request failed: {exc}",
            latency_ms=_elapsed_ms(start),
        )


async def _check_environment() -> HealthCheckResult:
    return HealthCheckResult(
        component="environment",
        status=HealthStatus.OK,
        details="Environment variables loaded",
        metadata={
            "environment": settings.ENVIRONMENT,
            "debug": settings.DEBUG,
            "use_local_data": settings.USE_LOCAL_DATA,
            "insights_endpoint": settings.insights_endpoint_url,
        },
    )


async def gather_health_checks() -> List[HealthCheckResult]:
    checks = await asyncio.gather(
        _check_environment(),
        _check_key_value_store(),
        _check_supabase(),
    )
    return list(checks)


def _aggregate_status(checks: List[HealthCheckResult]) -> HealthStatus:
    if any(check.status == HealthStatus.CRITICAL for check in checks):
        return HealthStatus.CRITICAL

    if any(check.status == HealthStatus.DEGRADED for check in checks):
        return HealthStatus.DEGRADED

    return HealthStatus.OK


async def build_health_report(api_version: str) -> HealthReport:
    checks = await gather_health_checks()
    return HealthReport(
        status=_aggregate_status(checks),
        version=api_version,
        environment=settings.ENVIRONMENT,
        timestamp=datetime.now(timezone.utc),
        checks=checks,
    )
