"""
Client for the remote AI insights endpoint.

The endpoint takes ``{goals, tasks, stats, focusGoal?}`` and answers with
``{success, data?, error?}``. Any problem with the call (network failure,
timeout, non-2xx status, non-JSON body, ``success: false`` or a ``data`` block
that does not match the insights schema) surfaces as InsightsServiceError.

Transport errors and 5xx responses are retried with exponential backoff;
other httpx failures (decoding, redirects, invalid URL) are not.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import httpx
from pydantic import ValidationError

from dreampath.core.config import settings
from dreampath.models.insights import AIInsightsPayload, InsightsEnvelope, InsightsRequest
from dreampath.services.logger import logger


class InsightsServiceError(Exception):
    """The remote insights service could not produce a usable payload."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class _RetryableError(InsightsServiceError):
    pass


class InsightsClient:
    def __init__(
        self,
        endpoint_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_delay_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.endpoint_url = endpoint_url or settings.insights_endpoint_url
        self.timeout_seconds = (
            timeout_seconds
            if timeout_seconds is not None
            else settings.INSIGHTS_REQUEST_TIMEOUT_SECONDS
        )
        self.max_retries = (
            max_retries if max_retries is not None else settings.INSIGHTS_MAX_RETRIES
        )
        self.retry_delay_seconds = (
            retry_delay_seconds
            if retry_delay_seconds is not None
            else settings.INSIGHTS_RETRY_DELAY_SECONDS
        )
        self._transport = transport

    async def fetch_insights(self, request: InsightsRequest) -> AIInsightsPayload:
        body = request.to_body()
        attempt = 0
        while True:
            try:
                return await self._post(body)
            except _RetryableError as e:
                if attempt >= self.max_retries:
                    raise InsightsServiceError(str(e), e.status_code) from e
                delay = self.retry_delay_seconds * (2**attempt)
                attempt += 1
                logger.warning(
                    f"Insights request failed ({e}), retry {attempt}/{self.max_retries} in {delay}s"
                )
                await asyncio.sleep(delay)

    async def _post(self, body: dict) -> AIInsightsPayload:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(self.endpoint_url, json=body)
        except httpx.TimeoutException as e:
            raise _RetryableError(f"Insights request timed out: {e}") from e
        except httpx.TransportError as e:
            raise _RetryableError(f"Insights request failed: {e}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            # Undecodable body, redirect loop, bad endpoint URL
            raise InsightsServiceError(f"Insights request failed: {e}") from e

        if response.status_code >= 500:
            raise _RetryableError(
                f"Insights service returned {response.status_code}",
                response.status_code,
            )
        if not response.is_success:
            raise InsightsServiceError(
                f"Insights service returned {response.status_code}",
                response.status_code,
            )

        return self._parse(response)

    @staticmethod
    def _parse(response: httpx.Response) -> AIInsightsPayload:
        try:
            envelope = InsightsEnvelope.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise InsightsServiceError(f"Invalid insights response body: {e}") from e

        if not envelope.success or envelope.data is None:
            raise InsightsServiceError(envelope.error or "Failed to get insights")

        try:
            return AIInsightsPayload.model_validate(envelope.data)
        except ValidationError as e:
            raise InsightsServiceError(f"Malformed insights payload: {e}") from e
