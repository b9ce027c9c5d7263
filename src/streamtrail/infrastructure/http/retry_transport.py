"""httpx transport with per-host rate limiting and 429/503 backoff."""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable

import httpx
import structlog

from .rate_limiter import HostRateLimiter

log = structlog.get_logger(__name__)

_DEFAULT_RETRYABLE = frozenset({429, 503})


def _parse_retry_after(headers: httpx.Headers) -> float | None:
    """Parse ``Retry-After`` (seconds form only)."""
    raw = headers.get("retry-after")
    if raw is None:
        return None
    try:
        return max(0.0, float(raw))
    except (ValueError, TypeError):
        return None


class RetryTransport(httpx.AsyncBaseTransport):
    """Wraps an httpx transport with rate limiting and throttle retries.

    Every request first waits on the host's token bucket. Responses with a
    retryable status (429, 503) are retried with exponential backoff plus
    jitter, honouring ``Retry-After``, up to *max_retries* times. Network
    errors are not retried here; the hop resolver owns that policy.
    """

    def __init__(
        self,
        wrapped: httpx.AsyncBaseTransport,
        rate_limiter: HostRateLimiter,
        *,
        max_retries: int = 2,
        backoff_base: float = 1.0,
        max_backoff: float = 10.0,
        retryable_status_codes: frozenset[int] = _DEFAULT_RETRYABLE,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._wrapped = wrapped
        self._rate_limiter = rate_limiter
        self._max_retries = max_retries
        self._backoff_base = backoff_base
        self._max_backoff = max_backoff
        self._retryable = retryable_status_codes
        self._sleep = sleep

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        attempt = 0
        while True:
            await self._rate_limiter.acquire(url)
            response = await self._wrapped.handle_async_request(request)

            if response.status_code not in self._retryable:
                self._rate_limiter.record_success(url)
                return response

            self._rate_limiter.record_throttle(url)
            if attempt >= self._max_retries:
                return response

            await response.aread()
            await response.aclose()

            delay = self._compute_delay(response, attempt)
            log.info(
                "http_retry",
                url=url,
                status=response.status_code,
                attempt=attempt + 1,
                delay=round(delay, 2),
            )
            await self._sleep(delay)
            attempt += 1

    def _compute_delay(self, response: httpx.Response, attempt: int) -> float:
        retry_after = _parse_retry_after(response.headers)
        if retry_after is not None:
            return min(retry_after, self._max_backoff)
        delay = self._backoff_base * (2**attempt)
        jitter = random.uniform(0, self._backoff_base)  # noqa: S311
        return min(delay + jitter, self._max_backoff)

    async def aclose(self) -> None:
        await self._wrapped.aclose()
