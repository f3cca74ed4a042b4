"""
DreamPath - AI insights cache

Keeps the last successful AI insights payload in the key-value store and
decides when the remote service has to be asked again.

Flow:
1. Read the cached record (payload + timestamp)
2. Fresh (younger than the TTL) and not forced: serve it, no network call
3. Otherwise fetch from the remote service
4. Success: overwrite the record and serve the new payload
5. Failure: serve the previous payload even if stale, else the static
   defaults, and report the error

Only one fetch runs at a time per manager. Loads and forced refreshes that
arrive while a fetch is running wait for it and share its result.
"""

from __future__ import annotations

import asyncio
import json
import math
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Tuple

from pydantic import ValidationError

from dreampath.core.cache import KeyValueClient, get_redis_client
from dreampath.core.config import settings
from dreampath.models.insights import (
    FALLBACK_INSIGHTS,
    FALLBACK_TIPS,
    AIInsightsPayload,
    CacheState,
    InsightsCacheRecord,
    InsightsRequest,
    InsightsResult,
)
from dreampath.services.insights_client import InsightsClient, InsightsServiceError
from dreampath.services.logger import logger

LEGACY_PAYLOAD_KEY = "@dreampath_ai_insights"
LEGACY_TIMESTAMP_KEY = "@dreampath_ai_insights_timestamp"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _parse_timestamp(raw: str) -> datetime:
    return _as_utc(datetime.fromisoformat(raw.strip().replace("Z", "+00:00")))


class InsightsCacheManager:
    """Cache-or-fetch state machine for the AI insights payload."""

    def __init__(
        self,
        store: Optional[KeyValueClient] = None,
        client: Optional[InsightsClient] = None,
        ttl: Optional[timedelta] = None,
        cache_key: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store if store is not None else get_redis_client()
        self.client = client or InsightsClient()
        self.ttl = ttl or timedelta(days=settings.INSIGHTS_CACHE_TTL_DAYS)
        self.cache_key = cache_key or settings.INSIGHTS_CACHE_KEY
        self.clock = clock or _utc_now
        self._inflight: Optional[asyncio.Task] = None

    async def load(
        self, request: InsightsRequest, now: Optional[datetime] = None
    ) -> InsightsResult:
        """Serve fresh cached insights, or fetch when missing or stale."""
        return await self._run(request, now, force=False)

    async def force_refresh(
        self, request: InsightsRequest, now: Optional[datetime] = None
    ) -> InsightsResult:
        """Fetch regardless of freshness; failures still fall back to the cache."""
        return await self._run(request, now, force=True)

    def is_fresh(self, timestamp: Optional[datetime], now: datetime) -> bool:
        if timestamp is None:
            return False
        return _as_utc(now) - _as_utc(timestamp) < self.ttl

    def cache_state(self, timestamp: Optional[datetime], now: datetime) -> CacheState:
        if timestamp is None:
            return "no-cache"
        return "cache-fresh" if self.is_fresh(timestamp, now) else "cache-stale"

    def days_until_refresh(self, timestamp: datetime, now: datetime) -> int:
        remaining = _as_utc(timestamp) + self.ttl - _as_utc(now)
        return max(0, math.ceil(remaining / timedelta(days=1)))

    # Storage

    def read_cached(self) -> Tuple[Optional[AIInsightsPayload], Optional[datetime]]:
        try:
            raw = self.store.get(self.cache_key)
            if raw:
                record = InsightsCacheRecord.model_validate_json(raw)
                return record.payload, _as_utc(record.timestamp)
            return self._read_legacy()
        except (ValidationError, ValueError) as e:
            logger.warning(f"Discarding unreadable insights cache: {e}")
        except Exception as e:
            logger.error(f"Error reading cached insights: {e}")
        return None, None

    def _read_legacy(self) -> Tuple[Optional[AIInsightsPayload], Optional[datetime]]:
        raw_payload = self.store.get(LEGACY_PAYLOAD_KEY)
        raw_timestamp = self.store.get(LEGACY_TIMESTAMP_KEY)
        if not raw_payload or not raw_timestamp:
            return None, None
        payload = AIInsightsPayload.model_validate(json.loads(raw_payload))
        return payload, _parse_timestamp(raw_timestamp)

    def write_cached(self, payload: AIInsightsPayload, timestamp: datetime) -> bool:
        record = InsightsCacheRecord(payload=payload, timestamp=_as_utc(timestamp))
        try:
            self.store.set(self.cache_key, record.model_dump_json(by_alias=True))
            return True
        except Exception as e:
            logger.error(f"Error saving cached insights: {e}")
            return False

    # State machine

    async def _run(
        self, request: InsightsRequest, now: Optional[datetime], force: bool
    ) -> InsightsResult:
        now = now or self.clock()
        cached, cached_at = self.read_cached()

        if not request.goals:
            return self._fallback(cached_at, now)

        if not force and cached is not None and self.is_fresh(cached_at, now):
            logger.info(f"Using cached AI insights from {cached_at.date().isoformat()}")
            return self._result(cached, "cache", cached_at, now)

        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.ensure_future(
                self._fetch(request, cached, cached_at, now)
            )
        return await asyncio.shield(self._inflight)

    async def _fetch(
        self,
        request: InsightsRequest,
        cached: Optional[AIInsightsPayload],
        cached_at: Optional[datetime],
        now: datetime,
    ) -> InsightsResult:
        try:
            payload = await self.client.fetch_insights(request)
        except InsightsServiceError as e:
            logger.error(f"Error fetching AI insights: {e}")
            if cached is not None:
                # A forced refresh can fail while the previous payload is still fresh
                source = "cache" if self.is_fresh(cached_at, now) else "stale_cache"
                return self._result(cached, source, cached_at, now, error=str(e))
            return self._fallback(cached_at, now, error=str(e))

        if self.write_cached(payload, now):
            return self._result(payload, "remote", now, now)
        return self._result(payload, "remote", cached_at, now)

    def _result(
        self,
        payload: AIInsightsPayload,
        source: str,
        cached_at: Optional[datetime],
        now: datetime,
        error: Optional[str] = None,
    ) -> InsightsResult:
        return InsightsResult(
            payload=payload,
            insights=payload.insights,
            tips=payload.tips,
            source=source,
            cache_state=self.cache_state(cached_at, now),
            cached_at=cached_at,
            days_until_refresh=(
                self.days_until_refresh(cached_at, now) if cached_at else None
            ),
            error=error,
        )

    def _fallback(
        self, cached_at: Optional[datetime], now: datetime, error: Optional[str] = None
    ) -> InsightsResult:
        return InsightsResult(
            insights=list(FALLBACK_INSIGHTS),
            tips=list(FALLBACK_TIPS),
            source="fallback",
            cache_state=self.cache_state(cached_at, now),
            cached_at=cached_at,
            days_until_refresh=(
                self.days_until_refresh(cached_at, now) if cached_at else None
            ),
            error=error,
        )


# Singleton instance
_cache_manager: Optional[InsightsCacheManager] = None


def get_insights_cache_manager() -> InsightsCacheManager:
    """Get singleton instance of InsightsCacheManager."""
    global _cache_manager
    if _cache_manager is None:
        _cache_manager = InsightsCacheManager()
    return _cache_manager


def reset_insights_cache_manager() -> None:
    global _cache_manager
    _cache_manager = None
