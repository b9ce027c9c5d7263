"""Token decoding: primitives, key derivation, codecs and the registry."""

from .codecs import ChainCodec
from .key_derivation import (
    CompositeFingerprintKey,
    DerivedHashKey,
    KeyDerivationError,
    KeyStrategy,
    LiteralKey,
    NoKey,
    StaticContextKey,
)
from .registry import CodecRegistry
from .remote_codec import RemoteDecryptCodec
from .validator import ResultValidator

__all__ = [
    "ChainCodec",
    "CodecRegistry",
    "CompositeFingerprintKey",
    "DerivedHashKey",
    "KeyDerivationError",
    "KeyStrategy",
    "LiteralKey",
    "NoKey",
    "RemoteDecryptCodec",
    "ResultValidator",
    "StaticContextKey",
]
