"""Port for fetching one hop of an embed → player chain."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from streamtrail.domain.entities.resolution import HopResult


@runtime_checkable
class HopFetcherPort(Protocol):
    """Fetches a single page with the previous hop as Referer/Origin.

    Implementations follow redirects, apply a per-hop timeout, retry a
    transient failure once and raise ``NetworkError`` afterwards.
    """

    async def fetch(
        self,
        url: str,
        *,
        hop: int,
        referer: str | None = None,
        origin: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> HopResult:
        """Fetch *url* and return the hop result."""
        ...
