"""Resolution pipeline exceptions.

Every fatal condition is a :class:`ResolutionError` subclass with a short
``reason`` slug; the orchestrator returns these inside a
``ResolutionResult`` instead of raising them to the caller.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from streamtrail.domain.entities.resolution import DecodeAttempt


class ResolutionError(Exception):
    """Base class for all resolution errors."""

    reason: str = "error"


class NetworkError(ResolutionError):
    """A hop could not be fetched (after the single transient retry)."""

    reason = "network"

    def __init__(self, hop: int, cause: str) -> None:
        super().__init__(f"hop {hop}: {cause}")
        self.hop = hop
        self.cause = cause


class ExtractionError(ResolutionError):
    """No pattern matched on a hop page."""

    reason = "extraction"

    def __init__(self, hop: int, pattern_set: str = "", detail: str = "") -> None:
        message = f"hop {hop}: no match for pattern set {pattern_set!r}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.hop = hop
        self.pattern_set = pattern_set
        self.detail = detail


class DecodeError(ResolutionError):
    """A single codec failed. Non-fatal: the registry moves on."""

    reason = "decode"

    def __init__(self, codec: str, reason: str) -> None:
        super().__init__(f"codec {codec}: {reason}")
        self.codec = codec
        self.detail = reason


class DecodeExhausted(ResolutionError):
    """Every registered codec failed for the extracted token."""

    reason = "decode_exhausted"

    def __init__(self, attempts: Sequence[DecodeAttempt] = ()) -> None:
        tried = ", ".join(a.codec_id for a in attempts) or "none"
        super().__init__(f"all codecs failed (tried: {tried})")
        self.attempts = tuple(attempts)


class Cancelled(ResolutionError):
    """Resolution aborted by the caller or by the overall deadline."""

    reason = "cancelled"

    def __init__(self, cause: str = "cancelled") -> None:
        super().__init__(cause)
        self.cause = cause


class UnsupportedProvider(ResolutionError):
    """Provider unknown, disabled, or without a confirmed algorithm."""

    reason = "unsupported_provider"

    def __init__(self, provider: str, detail: str = "") -> None:
        message = f"provider {provider!r} is not supported"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.provider = provider
        self.detail = detail


class InternalError(ResolutionError):
    """Unexpected failure inside the pipeline (a bug, not an upstream issue)."""

    reason = "internal"

    def __init__(self, hop: int, cause: str) -> None:
        super().__init__(f"hop {hop}: {cause}")
        self.hop = hop
        self.cause = cause
