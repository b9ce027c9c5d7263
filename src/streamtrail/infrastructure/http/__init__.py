from .hop_resolver import BROWSER_HEADERS, HttpxHopResolver, origin_of
from .rate_limiter import HostRateLimiter, TokenBucket
from .retry_transport import RetryTransport

__all__ = [
    "BROWSER_HEADERS",
    "HostRateLimiter",
    "HttpxHopResolver",
    "RetryTransport",
    "TokenBucket",
    "origin_of",
]
