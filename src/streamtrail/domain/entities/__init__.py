from .resolution import (
    DecodeAttempt,
    DecodeOutcome,
    HopLink,
    HopResult,
    MediaType,
    ResolutionRequest,
    ResolutionResult,
    ResolutionState,
    ResolvedStream,
    StreamKind,
    Subtitle,
    Token,
    TokenContext,
    stream_kind_of,
)

__all__ = [
    "DecodeAttempt",
    "DecodeOutcome",
    "HopLink",
    "HopResult",
    "MediaType",
    "ResolutionRequest",
    "ResolutionResult",
    "ResolutionState",
    "ResolvedStream",
    "StreamKind",
    "Subtitle",
    "Token",
    "TokenContext",
    "stream_kind_of",
]
