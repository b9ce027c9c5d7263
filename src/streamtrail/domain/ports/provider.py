"""Ports the orchestrator uses to walk a provider's hop chain."""

from __future__ import annotations

from collections.abc import Collection, Mapping
from typing import Protocol

from streamtrail.domain.entities.resolution import (
    DecodeOutcome,
    HopLink,
    HopResult,
    ResolutionRequest,
    Subtitle,
    Token,
)


class HopPagePort(Protocol):
    """One fetched page, parsed once and queried several times."""

    def find_token(self) -> Token | None:
        """Terminal token on this page, if any."""
        ...

    def find_next_hop(
        self, *, exclude: Collection[str] = (), alternate: bool = False
    ) -> HopLink | None:
        """Next-hop link from the primary (or alternate) pattern set."""
        ...

    def subtitles(self) -> tuple[Subtitle, ...]: ...


class ProviderPort(Protocol):
    name: str
    unsupported_reason: str
    placeholders: Mapping[str, str]

    @property
    def has_alternate(self) -> bool: ...

    def embed_url(self, request: ResolutionRequest) -> str: ...

    def inspect(self, hop: HopResult) -> HopPagePort: ...


class ProviderCatalogPort(Protocol):
    def get(self, name: str) -> ProviderPort | None: ...


class TokenDecoderPort(Protocol):
    """Runs a provider's codecs until one yields a validated URL."""

    async def try_all(
        self,
        provider: str,
        token: Token,
        *,
        placeholders: Mapping[str, str] | None = None,
    ) -> DecodeOutcome: ...
