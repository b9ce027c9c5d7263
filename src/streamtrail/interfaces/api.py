"""Request/response shapes for exposing the resolver to a web layer.

``handle_resolve`` is framework-agnostic: it takes the decoded JSON body
and returns a JSON-ready dict.
"""

from __future__ import annotations

from typing import Any, Literal, Optional, Protocol

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from streamtrail.domain.entities.resolution import (
    ResolutionRequest,
    ResolutionResult,
    stream_kind_of,
)

log = structlog.get_logger(__name__)


class _Resolver(Protocol):
    async def resolve(self, request: ResolutionRequest) -> ResolutionResult: ...


class ResolveRequestBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    content_id: str = Field(alias="contentId", min_length=1)
    media_type: Literal["movie", "tv"] = Field(default="movie", alias="mediaType")
    season: Optional[int] = Field(default=None, ge=0)
    episode: Optional[int] = Field(default=None, ge=0)
    provider_hint: Optional[str] = Field(default=None, alias="providerHint")

    def to_request(self) -> ResolutionRequest:
        return ResolutionRequest(
            content_id=self.content_id.strip(),
            media_type=self.media_type,
            season=self.season,
            episode=self.episode,
            provider_hint=self.provider_hint or None,
        )


class StreamSourceBody(BaseModel):
    url: str
    type: Literal["hls", "mp4"]
    quality: Optional[str] = None


class SubtitleBody(BaseModel):
    url: str
    label: str = ""
    lang: str = ""


class ResolveResponseBody(BaseModel):
    success: bool
    sources: list[StreamSourceBody] = Field(default_factory=list)
    subtitles: list[SubtitleBody] = Field(default_factory=list)
    headers: dict[str, str] = Field(default_factory=dict)
    error: Optional[str] = None


def present_result(result: ResolutionResult) -> dict[str, Any]:
    """Map a :class:`ResolutionResult` onto the response body."""
    if result.success and result.stream is not None:
        stream = result.stream
        body = ResolveResponseBody(
            success=True,
            sources=[
                StreamSourceBody(url=url, type=stream_kind_of(url), quality="auto")
                for url in stream.urls
            ],
            subtitles=[
                SubtitleBody(url=s.url, label=s.label, lang=s.language)
                for s in stream.subtitles
            ],
            headers=dict(stream.headers),
        )
    else:
        reason = result.error.reason if result.error is not None else "error"
        detail = str(result.error) if result.error is not None else "resolution failed"
        body = ResolveResponseBody(success=False, error=f"{reason}: {detail}")
    return body.model_dump(exclude_none=True)


async def handle_resolve(payload: Any, resolver: _Resolver) -> dict[str, Any]:
    """Validate *payload*, resolve it and return the response body."""
    try:
        request = ResolveRequestBody.model_validate(payload).to_request()
    except (ValidationError, ValueError) as exc:
        log.info("resolve_request_invalid", error=str(exc).splitlines()[0])
        return ResolveResponseBody(
            success=False, error=f"invalid_request: {exc}"
        ).model_dump(exclude_none=True)

    result = await resolver.resolve(request)
    return present_result(result)
