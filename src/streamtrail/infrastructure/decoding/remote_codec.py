"""Codec that delegates decryption to an external HTTP service.

The service accepts ``POST {"text": <token>, "id": <context>}`` and answers
``{"result": ...}``. Results are cached by token so repeated resolutions of
the same content do not hit the service twice.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

import httpx
import structlog

from streamtrail.domain.entities.resolution import TokenContext
from streamtrail.domain.errors import DecodeError
from streamtrail.domain.ports.cache import CachePort

log = structlog.get_logger(__name__)

_URL_KEYS = ("url", "file", "source", "stream")


def _pick_url(result: Any) -> str | None:
    """Pull a URL out of a structured ``result`` payload."""
    if isinstance(result, str):
        return result or None
    if isinstance(result, dict):
        for key in _URL_KEYS:
            value = result.get(key)
            if isinstance(value, str) and value:
                return value
        sources = result.get("sources")
        if isinstance(sources, list):
            return _pick_url(sources[0]) if sources else None
    if isinstance(result, list) and result:
        return _pick_url(result[0])
    return None


class RemoteDecryptCodec:
    """Decode a token through a remote decryption endpoint.

    Args:
        codec_id: Registry identifier.
        endpoint: Absolute URL of the decrypt service.
        http_client: Shared ``httpx.AsyncClient``.
        context_field: Token context field sent as ``id`` (optional).
        timeout_seconds: Per-request timeout.
        cache: Optional cache for decoded results.
        cache_ttl: Lifetime of cached results.
    """

    def __init__(
        self,
        codec_id: str,
        endpoint: str,
        http_client: httpx.AsyncClient,
        *,
        context_field: str | None = "content_id",
        timeout_seconds: float = 10.0,
        cache: CachePort | None = None,
        cache_ttl: float = 600.0,
    ) -> None:
        self._id = codec_id
        self._endpoint = endpoint
        self._http = http_client
        self._context_field = context_field
        self._timeout = timeout_seconds
        self._cache = cache
        self._cache_ttl = cache_ttl

    @property
    def id(self) -> str:
        return self._id

    def _cache_key(self, payload: dict[str, str]) -> str:
        raw = json.dumps(payload, sort_keys=True).encode("utf-8")
        return f"remote:{self._id}:{hashlib.sha256(raw).hexdigest()}"

    async def decode(self, token: str, context: TokenContext) -> str:
        if not token:
            raise DecodeError(self._id, "empty token")

        payload = {"text": token}
        if self._context_field:
            payload["id"] = context.value_of(self._context_field)

        cache_key = self._cache_key(payload)
        if self._cache is not None:
            cached = self._cache.get(cache_key)
            if cached is not None:
                log.debug("remote_decrypt_cache_hit", codec=self._id)
                return cached

        try:
            resp = await self._http.post(
                self._endpoint, json=payload, timeout=self._timeout
            )
        except httpx.HTTPError as exc:
            log.warning(
                "remote_decrypt_request_failed",
                codec=self._id,
                error=type(exc).__name__,
            )
            raise DecodeError(self._id, f"request failed: {type(exc).__name__}") from exc

        if resp.status_code != 200:
            log.warning(
                "remote_decrypt_http_error", codec=self._id, status=resp.status_code
            )
            raise DecodeError(self._id, f"HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise DecodeError(self._id, "response is not JSON") from exc

        result = _pick_url(data.get("result") if isinstance(data, dict) else None)
        if result is None:
            raise DecodeError(self._id, "response has no result")

        if self._cache is not None:
            self._cache.set(cache_key, result, ttl=self._cache_ttl)
        return result
