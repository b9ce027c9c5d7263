"""Domain entities for stream resolution.

Pure value objects with no framework dependencies and no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Literal
from urllib.parse import urlparse

if TYPE_CHECKING:
    from streamtrail.domain.errors import ResolutionError

MediaType = Literal["movie", "tv"]
StreamKind = Literal["hls", "mp4"]


def stream_kind_of(url: str) -> StreamKind:
    """``"mp4"`` for progressive MP4 URLs, ``"hls"`` otherwise."""
    path = urlparse(url).path.lower()
    if ".mp4" in path and ".m3u8" not in path:
        return "mp4"
    return "hls"


class ResolutionState(Enum):
    """States of a single resolution run."""

    INIT = "init"
    FETCHING_HOP = "fetching_hop"
    EXTRACTING_TOKEN = "extracting_token"
    DECODING = "decoding"
    VALIDATED = "validated"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ResolutionState.VALIDATED, ResolutionState.FAILED)


@dataclass(frozen=True)
class ResolutionRequest:
    """What the caller wants resolved.

    ``tv`` requests carry both ``season`` and ``episode`` or neither;
    ``movie`` requests carry neither.
    """

    content_id: str
    media_type: MediaType = "movie"
    season: int | None = None
    episode: int | None = None
    provider_hint: str | None = None

    def __post_init__(self) -> None:
        if not self.content_id or not self.content_id.strip():
            raise ValueError("content_id must not be empty")
        if self.media_type not in ("movie", "tv"):
            raise ValueError(f"unknown media_type: {self.media_type!r}")
        if self.media_type == "movie" and (
            self.season is not None or self.episode is not None
        ):
            raise ValueError("movie requests cannot carry season/episode")
        if (self.season is None) != (self.episode is None):
            raise ValueError("season and episode must be given together")
        for value in (self.season, self.episode):
            if value is not None and value < 0:
                raise ValueError("season/episode must be >= 0")

    @property
    def is_episode(self) -> bool:
        return self.media_type == "tv" and self.season is not None


@dataclass(frozen=True)
class HopResult:
    """One fetched page in the embed → player chain."""

    index: int
    url: str  # Final URL after redirects
    body: str
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    referer: str | None = None  # URL of the previous hop (None for hop 0)


@dataclass(frozen=True)
class TokenContext:
    """Page-derived values a key strategy may read."""

    div_id: str = ""
    embed_path: str = ""
    embed_id: str = ""
    page_url: str = ""
    content_id: str = ""

    def value_of(self, name: str) -> str:
        """Return the named context field, or ``""`` for unknown names."""
        value = getattr(self, name, "")
        return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class Token:
    """Opaque encoded string located on a hop page."""

    value: str
    hop_index: int
    context: TokenContext = field(default_factory=TokenContext)
    source: str = ""  # Matcher name that located it

    def __repr__(self) -> str:
        # Tokens double as upstream secrets; keep them out of reprs.
        return (
            f"Token(len={len(self.value)}, hop_index={self.hop_index}, "
            f"source={self.source!r})"
        )


@dataclass(frozen=True)
class HopLink:
    """Link to the next hop located on a page."""

    url: str
    marker: str = ""  # e.g. "/prorcp/"
    source: str = ""


@dataclass(frozen=True)
class DecodeAttempt:
    """Outcome of running one codec against one token."""

    codec_id: str
    output: str | None = None
    success: bool = False
    error: str | None = None


@dataclass(frozen=True)
class DecodeOutcome:
    """Result of trying every codec registered for a provider."""

    value: str | None
    codec_id: str | None = None
    attempts: tuple[DecodeAttempt, ...] = ()
    alternates: tuple[str, ...] = ()  # Further plausible URLs, same codec

    @property
    def success(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class Subtitle:
    """External subtitle track offered by the player page."""

    url: str
    label: str = ""
    language: str = ""


@dataclass(frozen=True)
class ResolvedStream:
    """Terminal artifact of a successful resolution."""

    url: str
    kind: StreamKind = "hls"
    subtitles: tuple[Subtitle, ...] = ()
    headers: dict[str, str] = field(default_factory=dict)  # Playback headers
    provider: str = ""
    codec_id: str = ""
    alternates: tuple[str, ...] = ()

    @property
    def urls(self) -> tuple[str, ...]:
        """Primary URL followed by the alternates."""
        return (self.url, *self.alternates)

    @property
    def is_hls(self) -> bool:
        return self.kind == "hls"


@dataclass(frozen=True)
class ResolutionResult:
    """Typed outcome handed back across the orchestrator boundary."""

    request: ResolutionRequest
    state: ResolutionState
    stream: ResolvedStream | None = None
    error: ResolutionError | None = None
    hop_urls: tuple[str, ...] = ()
    attempts: tuple[DecodeAttempt, ...] = ()

    @property
    def success(self) -> bool:
        return self.state == ResolutionState.VALIDATED and self.stream is not None
