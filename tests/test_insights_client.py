"""Tests for the remote insights client (no network, httpx mock transport)."""

import json

import httpx
import pytest

from dreampath.models.insights import InsightsRequest, StatsContext
from dreampath.services.insights_client import InsightsClient, InsightsServiceError

ENDPOINT = "https://insights.test/api/analytics-insights"

PAYLOAD = {
    "weeklySummary": "Solid week.",
    "insights": [
        {"icon": "trending-up", "title": "Momentum", "description": "Keep going", "color": "success"}
    ],
    "tips": [{"tip": "Plan tomorrow tonight"}],
    "focusRecommendation": {
        "title": "Spanish",
        "description": "Do two lessons",
        "actionItems": ["Lesson 4", "Lesson 5"],
    },
    "motivationalMessage": "You got this",
}


def _request() -> InsightsRequest:
    return InsightsRequest(
        goals=[],
        tasks=[],
        stats=StatsContext(
            total_goals=1,
            total_tasks=4,
            completed_tasks=2,
            overall_progress=50,
            streak=3,
            weekly_change=-14,
            total_weekly_minutes=90,
            this_week_completed=2,
        ),
    )


def _client(handler, max_retries=1) -> InsightsClient:
    return InsightsClient(
        endpoint_url=ENDPOINT,
        timeout_seconds=1,
        max_retries=max_retries,
        retry_delay_seconds=0,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_fetch_insights_parses_payload_and_sends_camel_case_body():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "data": PAYLOAD})

    payload = await _client(handler).fetch_insights(_request())

    assert payload.weekly_summary == "Solid week."
    assert payload.focus_recommendation.action_items == ["Lesson 4", "Lesson 5"]
    assert seen["body"]["stats"]["weeklyChange"] == -14
    assert "focusGoal" not in seen["body"]


@pytest.mark.asyncio
async def test_unsuccessful_envelope_raises_with_service_message():
    def handler(request):
        return httpx.Response(200, json={"success": False, "error": "quota exceeded"})

    with pytest.raises(InsightsServiceError, match="quota exceeded"):
        await _client(handler).fetch_insights(_request())


@pytest.mark.asyncio
async def test_malformed_payload_raises():
    broken = dict(PAYLOAD)
    del broken["tips"]

    def handler(request):
        return httpx.Response(200, json={"success": True, "data": broken})

    with pytest.raises(InsightsServiceError):
        await _client(handler).fetch_insights(_request())


@pytest.mark.asyncio
async def test_non_json_body_raises():
    def handler(request):
        return httpx.Response(200, text="<html>oops</html>")

    with pytest.raises(InsightsServiceError):
        await _client(handler).fetch_insights(_request())


@pytest.mark.asyncio
async def test_client_errors_are_not_retried():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(404)

    with pytest.raises(InsightsServiceError) as exc_info:
        await _client(handler, max_retries=3).fetch_insights(_request())
    assert exc_info.value.status_code == 404
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_transient_failure_is_retried_once():
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json={"success": True, "data": PAYLOAD})

    payload = await _client(handler).fetch_insights(_request())
    assert payload.motivational_message == "You got this"
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_gives_up_after_retries():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(503)

    with pytest.raises(InsightsServiceError) as exc_info:
        await _client(handler, max_retries=2).fetch_insights(_request())
    assert exc_info.value.status_code == 503
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_undecodable_body_raises_without_retry():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(
            200, headers={"Content-Encoding": "gzip"}, content=b"not gzip at all"
        )

    with pytest.raises(InsightsServiceError):
        await _client(handler, max_retries=3).fetch_insights(_request())
    assert len(calls) == 1
