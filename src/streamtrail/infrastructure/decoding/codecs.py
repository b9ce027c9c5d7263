"""Keyed transform-chain codecs."""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from streamtrail.domain.entities.resolution import TokenContext
from streamtrail.domain.errors import DecodeError

from .key_derivation import KeyStrategy, NoKey
from .transforms import Transform

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ChainCodec:
    """A decode hypothesis: key strategy plus an ordered transform chain.

    The key is derived once per decode, then the token bytes are pushed
    through every step in order. The final bytes are read as UTF-8 with
    replacement so that garbage output still reaches the validator.
    """

    id: str
    chain: tuple[Transform, ...]
    key_strategy: KeyStrategy = field(default_factory=NoKey)
    description: str = ""

    async def decode(self, token: str, context: TokenContext) -> str:
        return self.decode_sync(token, context)

    def decode_sync(self, token: str, context: TokenContext) -> str:
        if not token:
            raise DecodeError(self.id, "empty token")
        try:
            key = self.key_strategy.derive(context)
        except ValueError as exc:
            raise DecodeError(self.id, f"key derivation: {exc}") from exc

        try:
            data = token.strip().encode("ascii")
        except UnicodeEncodeError as exc:
            raise DecodeError(self.id, "token is not ASCII") from exc

        for step in self.chain:
            try:
                data = step.apply(data, key)
            except (ValueError, TypeError) as exc:
                raise DecodeError(self.id, f"{step.name}: {exc}") from exc

        text = data.decode("utf-8", errors="replace")
        log.debug(
            "codec_output",
            codec=self.id,
            key=key.hex(),
            output_preview=text[:80],
        )
        return text
