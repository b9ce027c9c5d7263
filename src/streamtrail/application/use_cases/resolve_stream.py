"""Stream resolution use case: walks the hop chain and decodes the token."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import replace
from urllib.parse import urlparse

import structlog

from streamtrail.domain.entities.resolution import (
    DecodeAttempt,
    HopResult,
    ResolutionRequest,
    ResolutionResult,
    ResolutionState,
    ResolvedStream,
    Token,
    stream_kind_of,
)
from streamtrail.domain.errors import (
    Cancelled,
    DecodeExhausted,
    ExtractionError,
    InternalError,
    ResolutionError,
    UnsupportedProvider,
)
from streamtrail.domain.ports.hop_fetcher import HopFetcherPort
from streamtrail.domain.ports.provider import (
    HopPagePort,
    ProviderCatalogPort,
    ProviderPort,
    TokenDecoderPort,
)

log = structlog.get_logger(__name__)


def _playback_headers(page_url: str) -> dict[str, str]:
    """Headers the external proxy must send when fetching the stream."""
    parsed = urlparse(page_url)
    if not parsed.scheme or not parsed.netloc:
        return {}
    origin = f"{parsed.scheme}://{parsed.netloc}"
    return {"Referer": f"{origin}/", "Origin": origin}


class _ResolutionRun:
    """State of one resolution. Owned by a single pipeline task."""

    def __init__(
        self,
        request: ResolutionRequest,
        provider: ProviderPort,
        fetcher: HopFetcherPort,
        decoder: TokenDecoderPort,
        *,
        max_hops: int,
    ) -> None:
        self._request = request
        self._provider = provider
        self._fetcher = fetcher
        self._decoder = decoder
        self._max_hops = max_hops
        self.state = ResolutionState.INIT
        self.hops: list[HopResult] = []
        self.attempts: list[DecodeAttempt] = []
        self._log = log.bind(provider=provider.name, content_id=request.content_id)

    def _transition(self, state: ResolutionState, **details: object) -> None:
        if self.state.is_terminal:
            raise RuntimeError(f"resolution already {self.state.value}")
        self.state = state
        self._log.debug("resolution_state", state=state.value, **details)

    def result(
        self,
        *,
        stream: ResolvedStream | None = None,
        error: ResolutionError | None = None,
    ) -> ResolutionResult:
        return ResolutionResult(
            request=self._request,
            state=self.state,
            stream=stream,
            error=error,
            hop_urls=tuple(h.url for h in self.hops),
            attempts=tuple(self.attempts),
        )

    async def execute(self) -> ResolutionResult:
        try:
            stream = await self._walk()
        except ResolutionError as exc:
            self._transition(ResolutionState.FAILED, reason=exc.reason)
            self._log.warning(
                "resolution_failed",
                reason=exc.reason,
                error=str(exc),
                hops=len(self.hops),
            )
            return self.result(error=exc)
        except Exception as exc:  # noqa: BLE001
            hop = max(len(self.hops) - 1, 0)
            error = InternalError(hop, f"{type(exc).__name__}: {exc}")
            self._transition(ResolutionState.FAILED, reason=error.reason)
            self._log.exception("resolution_crashed", hops=len(self.hops))
            return self.result(error=error)

        self._transition(ResolutionState.VALIDATED)
        self._log.info(
            "resolution_succeeded",
            hops=len(self.hops),
            codec=stream.codec_id,
            kind=stream.kind,
        )
        return self.result(stream=stream)

    async def _fetch(self, url: str, *, referer: str | None) -> HopResult:
        index = len(self.hops)
        if index >= self._max_hops:
            raise ExtractionError(
                index - 1, "next_hop", f"hop limit of {self._max_hops} reached"
            )
        self._transition(ResolutionState.FETCHING_HOP, hop=index, url=url)
        hop = await self._fetcher.fetch(url, hop=index, referer=referer)
        self.hops.append(hop)
        self._transition(ResolutionState.EXTRACTING_TOKEN, hop=index)
        return hop

    async def _walk(self) -> ResolvedStream:
        embed_url = self._provider.embed_url(self._request)
        hop = await self._fetch(embed_url, referer=None)
        visited = {embed_url, hop.url}
        page = self._provider.inspect(hop)
        parent: tuple[HopResult, HopPagePort] | None = None

        while True:
            token = page.find_token()
            if token is not None:
                break

            link = page.find_next_hop(exclude=visited)
            if link is None and self._provider.has_alternate:
                link = page.find_next_hop(exclude=visited, alternate=True)
                if link is not None:
                    self._log.info("alternate_pattern_used", hop=hop.index)
            if link is None:
                raise ExtractionError(hop.index, "next_hop", "no token and no link")

            parent = (hop, page)
            visited.add(link.url)
            hop = await self._fetch(link.url, referer=hop.url)
            visited.add(hop.url)
            page = self._provider.inspect(hop)

        try:
            return await self._decode(token, hop, page)
        except DecodeExhausted:
            if parent is None or not self._provider.has_alternate:
                raise
            retry = await self._alternate_token(parent, visited)
            if retry is None:
                raise
            self._log.info("alternate_pattern_used", hop=parent[0].index)
            return await self._decode(*retry)

    async def _alternate_token(
        self, parent: tuple[HopResult, HopPagePort], visited: set[str]
    ) -> tuple[Token, HopResult, HopPagePort] | None:
        """Follow the alternate link from the page that led to the terminal page."""
        parent_hop, parent_page = parent
        link = parent_page.find_next_hop(exclude=visited, alternate=True)
        if link is None:
            return None
        visited.add(link.url)
        hop = await self._fetch(link.url, referer=parent_hop.url)
        page = self._provider.inspect(hop)
        token = page.find_token()
        if token is None:
            return None
        return token, hop, page

    async def _decode(
        self, token: Token, hop: HopResult, page: HopPagePort
    ) -> ResolvedStream:
        token = replace(
            token, context=replace(token.context, content_id=self._request.content_id)
        )
        self._transition(
            ResolutionState.DECODING,
            hop=token.hop_index,
            source=token.source,
            token_length=len(token.value),
        )
        outcome = await self._decoder.try_all(
            self._provider.name, token, placeholders=self._provider.placeholders
        )
        self.attempts.extend(outcome.attempts)
        if outcome.value is None:
            raise DecodeExhausted(self.attempts)

        return ResolvedStream(
            url=outcome.value,
            kind=stream_kind_of(outcome.value),
            subtitles=page.subtitles(),
            headers=_playback_headers(hop.url),
            provider=self._provider.name,
            codec_id=outcome.codec_id or "",
            alternates=outcome.alternates,
        )


class ResolveStreamUseCase:
    """Resolves one request into a playable stream URL.

    Failures never raise: every fatal condition comes back inside the
    :class:`ResolutionResult`. Only cancellation of the calling task itself
    propagates (after the in-flight pipeline has been cancelled).

    Args:
        fetcher: Hop page fetcher.
        catalog: Provider lookup.
        decoder: Codec registry.
        default_provider: Used when a request has no ``provider_hint``.
        deadline_seconds: Wall-clock limit for one resolution.
        max_hops: Upper bound on fetched pages.
    """

    def __init__(
        self,
        *,
        fetcher: HopFetcherPort,
        catalog: ProviderCatalogPort,
        decoder: TokenDecoderPort,
        default_provider: str = "vidsrc",
        deadline_seconds: float = 45.0,
        max_hops: int = 6,
    ) -> None:
        self._fetcher = fetcher
        self._catalog = catalog
        self._decoder = decoder
        self._default_provider = default_provider
        self._deadline = deadline_seconds
        self._max_hops = max_hops

    @staticmethod
    def _failed(request: ResolutionRequest, error: ResolutionError) -> ResolutionResult:
        return ResolutionResult(
            request=request, state=ResolutionState.FAILED, error=error
        )

    async def execute(
        self,
        request: ResolutionRequest,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> ResolutionResult:
        name = request.provider_hint or self._default_provider
        provider = self._catalog.get(name)
        if provider is None:
            log.warning("provider_unknown", provider=name)
            return self._failed(request, UnsupportedProvider(name, "unknown provider"))
        if provider.unsupported_reason:
            log.info("provider_unsupported", provider=name)
            return self._failed(
                request, UnsupportedProvider(name, provider.unsupported_reason)
            )

        run = _ResolutionRun(
            request,
            provider,
            self._fetcher,
            self._decoder,
            max_hops=self._max_hops,
        )
        pipeline = asyncio.ensure_future(run.execute())
        waiters: set[asyncio.Future[object]] = {pipeline}
        cancel_waiter: asyncio.Future[object] | None = None
        if cancel_event is not None:
            cancel_waiter = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_waiter)

        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=self._deadline,
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            pipeline.cancel()
            raise
        finally:
            if cancel_waiter is not None:
                cancel_waiter.cancel()

        if pipeline in done:
            return pipeline.result()

        cause = (
            "cancelled by caller"
            if cancel_waiter is not None and cancel_waiter in done
            else f"deadline of {self._deadline}s exceeded"
        )
        pipeline.cancel()
        await asyncio.gather(pipeline, return_exceptions=True)
        log.warning(
            "resolution_cancelled",
            provider=name,
            content_id=request.content_id,
            cause=cause,
        )
        return self._failed(request, Cancelled(cause))


class StreamResolver:
    """Library entry point: bounded-concurrency front for the use case.

    Use as an async context manager so the owned HTTP client is closed.
    """

    def __init__(
        self,
        use_case: ResolveStreamUseCase,
        *,
        max_concurrent: int = 4,
        on_close: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        self._use_case = use_case
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._on_close = on_close

    async def resolve(
        self,
        request: ResolutionRequest,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> ResolutionResult:
        async with self._semaphore:
            return await self._use_case.execute(request, cancel_event=cancel_event)

    async def resolve_many(
        self,
        requests: Iterable[ResolutionRequest],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> list[ResolutionResult]:
        """Resolve independent requests in parallel; order is preserved."""
        return list(
            await asyncio.gather(
                *(self.resolve(r, cancel_event=cancel_event) for r in requests)
            )
        )

    async def aclose(self) -> None:
        if self._on_close is not None:
            await self._on_close()

    async def __aenter__(self) -> StreamResolver:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
