"""Fetches hop pages with browser-like headers and a chained referer."""

from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import urlparse

import httpx
import structlog

from streamtrail.domain.entities.resolution import HopResult
from streamtrail.domain.errors import NetworkError

log = structlog.get_logger(__name__)

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/131.0.0.0 Safari/537.36"
    ),
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.5",
}

# Failures worth exactly one more try.
_TRANSIENT_ERRORS = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


def origin_of(url: str) -> str:
    """``scheme://host[:port]`` of *url*, or ``""``."""
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return ""
    return f"{parsed.scheme}://{parsed.netloc}"


class HttpxHopResolver:
    """``HopFetcherPort`` implementation over a shared ``httpx.AsyncClient``.

    Args:
        http_client: Shared client (carries the rate-limited transport).
        timeout_seconds: Per-hop timeout.
        user_agent: Overrides the default browser User-Agent when set.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        timeout_seconds: float = 15.0,
        user_agent: str | None = None,
    ) -> None:
        self._http = http_client
        self._timeout = timeout_seconds
        self._base_headers = dict(BROWSER_HEADERS)
        if user_agent:
            self._base_headers["User-Agent"] = user_agent

    def build_headers(
        self,
        *,
        referer: str | None = None,
        origin: str | None = None,
        extra: Mapping[str, str] | None = None,
    ) -> dict[str, str]:
        headers = dict(self._base_headers)
        if referer:
            headers["Referer"] = referer
            headers["Origin"] = origin or origin_of(referer)
            headers["Sec-Fetch-Site"] = "cross-site"
        elif origin:
            headers["Origin"] = origin
        headers["Sec-Fetch-Dest"] = "iframe" if referer else "document"
        headers["Sec-Fetch-Mode"] = "navigate"
        if extra:
            headers.update(extra)
        return headers

    async def fetch(
        self,
        url: str,
        *,
        hop: int,
        referer: str | None = None,
        origin: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> HopResult:
        """GET *url* and return its body.

        Transient failures are retried exactly once. Non-2xx/3xx statuses,
        repeated transient failures, other transport errors and malformed
        URLs raise :class:`NetworkError`.
        """
        request_headers = self.build_headers(referer=referer, origin=origin, extra=headers)

        try:
            resp = await self._get(url, request_headers, hop=hop)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            log.warning(
                "hop_fetch_failed", hop=hop, url=url, error=type(exc).__name__
            )
            raise NetworkError(hop, type(exc).__name__) from exc

        if resp.status_code >= 400:
            log.warning("hop_http_error", hop=hop, status=resp.status_code, url=url)
            raise NetworkError(hop, f"HTTP {resp.status_code}")

        log.debug(
            "hop_fetched",
            hop=hop,
            url=str(resp.url),
            status=resp.status_code,
            size=len(resp.content),
        )
        return HopResult(
            index=hop,
            url=str(resp.url),
            body=resp.text,
            status_code=resp.status_code,
            headers=dict(resp.headers),
            referer=referer,
        )

    async def _get(
        self, url: str, headers: dict[str, str], *, hop: int
    ) -> httpx.Response:
        """GET with one retry on transient transport failures."""
        try:
            return await self._send(url, headers)
        except _TRANSIENT_ERRORS as exc:
            log.info("hop_fetch_retry", hop=hop, url=url, error=type(exc).__name__)
        return await self._send(url, headers)

    async def _send(self, url: str, headers: dict[str, str]) -> httpx.Response:
        return await self._http.get(
            url,
            headers=headers,
            follow_redirects=True,
            timeout=self._timeout,
        )
