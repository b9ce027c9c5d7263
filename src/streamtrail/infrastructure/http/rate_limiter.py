"""Per-host token-bucket rate limiter for outgoing hop requests.

Supports adaptive AIMD (Additive Increase / Multiplicative Decrease) rate
adjustment based on upstream feedback (429/503 → halve, success → grow).
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from urllib.parse import urlparse

import structlog

log = structlog.get_logger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


class TokenBucket:
    """Token bucket with optional AIMD adaptive rate.

    Args:
        rate: Tokens replenished per second (initial rate). 0 = unlimited.
        burst: Maximum bucket size.
        adaptive: Enable AIMD rate adaptation.
        min_rate: Lower bound for adaptive rate (rps).
        max_rate: Upper bound for adaptive rate (rps).
        clock: Monotonic time source.
        sleep: Awaitable used while waiting for tokens.
    """

    def __init__(
        self,
        rate: float,
        burst: int = 10,
        *,
        adaptive: bool = False,
        min_rate: float = 0.5,
        max_rate: float = 50.0,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._rate = rate
        self._burst = burst
        self._tokens = float(burst)
        self._clock = clock
        self._sleep = sleep
        self._last_refill = clock()
        self._lock = asyncio.Lock()
        self._adaptive = adaptive
        self._min_rate = min_rate
        self._max_rate = max_rate

    @property
    def rate(self) -> float:
        return self._rate

    @property
    def tokens(self) -> float:
        return self._tokens

    async def acquire(self) -> None:
        """Wait until a token is available, then consume it."""
        if self._rate <= 0:
            return

        async with self._lock:
            self._refill()
            while self._tokens < 1.0:
                wait = (1.0 - self._tokens) / self._rate
                await self._sleep(wait)
                self._refill()
            self._tokens -= 1.0

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self._last_refill
        self._tokens = min(self._burst, self._tokens + elapsed * self._rate)
        self._last_refill = now

    # -- AIMD feedback ----------------------------------------------------

    def record_success(self) -> None:
        if not self._adaptive:
            return
        self._rate = min(self._max_rate, self._rate * 1.1)

    def record_throttle(self) -> None:
        if not self._adaptive:
            return
        old = self._rate
        self._rate = max(self._min_rate, self._rate * 0.5)
        log.debug(
            "rate_limit_throttle", old_rps=round(old, 2), new_rps=round(self._rate, 2)
        )


class HostRateLimiter:
    """Keeps one :class:`TokenBucket` per upstream host.

    Args:
        default_rps: Requests per second per host. 0 = unlimited.
        burst: Maximum burst size per host.
        adaptive: Enable AIMD rate adaptation per host.
        clock: Shared time source handed to every bucket.
        sleep: Shared sleep handed to every bucket.
    """

    def __init__(
        self,
        default_rps: float = 5.0,
        burst: int = 10,
        *,
        adaptive: bool = False,
        min_rate: float = 0.5,
        max_rate: float = 50.0,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._default_rps = default_rps
        self._burst = burst
        self._adaptive = adaptive
        self._min_rate = min_rate
        self._max_rate = max_rate
        self._clock = clock
        self._sleep = sleep
        self._buckets: dict[str, TokenBucket] = {}

    @staticmethod
    def host_of(url: str) -> str:
        try:
            return (urlparse(url).hostname or "").lower()
        except ValueError:
            return ""

    def bucket(self, host: str) -> TokenBucket:
        """Get or create the bucket for *host*."""
        if host not in self._buckets:
            self._buckets[host] = TokenBucket(
                rate=self._default_rps,
                burst=self._burst,
                adaptive=self._adaptive,
                min_rate=self._min_rate,
                max_rate=self._max_rate,
                clock=self._clock,
                sleep=self._sleep,
            )
        return self._buckets[host]

    async def acquire(self, url: str) -> None:
        """Wait for rate limit clearance for the URL's host."""
        if self._default_rps <= 0:
            return
        host = self.host_of(url)
        if not host:
            return
        await self.bucket(host).acquire()

    def record_success(self, url: str) -> None:
        host = self.host_of(url)
        if host in self._buckets:
            self._buckets[host].record_success()

    def record_throttle(self, url: str) -> None:
        host = self.host_of(url)
        if host in self._buckets:
            self._buckets[host].record_throttle()
