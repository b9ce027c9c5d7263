"""Composition root: wires config into a ready-to-use StreamResolver."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import httpx
import structlog

from streamtrail.application.use_cases.resolve_stream import (
    ResolveStreamUseCase,
    StreamResolver,
)
from streamtrail.infrastructure.cache.ttl_cache import TtlCache
from streamtrail.infrastructure.config.load import load_config
from streamtrail.infrastructure.config.schema import AppConfig
from streamtrail.infrastructure.http.hop_resolver import HttpxHopResolver
from streamtrail.infrastructure.http.rate_limiter import HostRateLimiter
from streamtrail.infrastructure.http.retry_transport import RetryTransport
from streamtrail.infrastructure.logging.setup import configure_logging
from streamtrail.infrastructure.providers.catalog import build_provider_catalog

log = structlog.get_logger(__name__)


def build_http_client(config: AppConfig) -> httpx.AsyncClient:
    """Shared client with per-host rate limiting and 429/503 retry."""
    rate_limiter = HostRateLimiter(
        default_rps=config.rate_limit_rps,
        burst=config.rate_limit_burst,
        adaptive=config.rate_limit_adaptive,
    )
    transport = RetryTransport(
        wrapped=httpx.AsyncHTTPTransport(
            limits=httpx.Limits(
                max_connections=config.http_max_connections,
                max_keepalive_connections=config.http_max_keepalive_connections,
            )
        ),
        rate_limiter=rate_limiter,
        max_retries=config.http_max_retries,
        backoff_base=config.http_backoff_base,
    )
    client = httpx.AsyncClient(
        transport=transport,
        timeout=httpx.Timeout(config.http_timeout_seconds),
    )
    log.info(
        "http_client_initialized",
        rate_limit_rps=config.rate_limit_rps,
        max_retries=config.http_max_retries,
    )
    return client


def build_stream_resolver(
    config: AppConfig,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> StreamResolver:
    """Build the full pipeline from *config*.

    When *http_client* is omitted the resolver creates and owns one and
    closes it in :meth:`StreamResolver.aclose`.
    """
    owns_client = http_client is None
    client = http_client if http_client is not None else build_http_client(config)

    cache = TtlCache(
        ttl_seconds=float(config.cache_ttl_seconds),
        max_size=config.cache_max_size,
    )
    catalog = build_provider_catalog(config, http_client=client, cache=cache)
    fetcher = HttpxHopResolver(
        client,
        timeout_seconds=config.http_timeout_seconds,
        user_agent=config.http_user_agent,
    )
    use_case = ResolveStreamUseCase(
        fetcher=fetcher,
        catalog=catalog,
        decoder=catalog.registry,
        default_provider=config.resolver.default_provider,
        deadline_seconds=config.resolver.deadline_seconds,
        max_hops=config.resolver.max_hops,
    )
    log.info(
        "stream_resolver_initialized",
        providers=catalog.names(),
        deadline_seconds=config.resolver.deadline_seconds,
    )
    return StreamResolver(
        use_case,
        max_concurrent=config.resolver.max_concurrent_requests,
        on_close=client.aclose if owns_client else None,
    )


def create_resolver(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> StreamResolver:
    """Load layered config, configure logging and build the resolver.

    Entry point for embedding applications; tests usually call
    :func:`build_stream_resolver` with an explicit :class:`AppConfig`.
    """
    config = load_config(
        config_path=config_path, dotenv_path=dotenv_path, overrides=overrides
    )
    configure_logging(config)
    return build_stream_resolver(config, http_client=http_client)
