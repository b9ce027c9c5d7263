"""Port for token decoding strategies."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from streamtrail.domain.entities.resolution import TokenContext


@runtime_checkable
class CodecPort(Protocol):
    """Decodes an opaque token into plaintext.

    Implementations raise ``DecodeError`` on any failed step; they never
    judge whether the plaintext is a plausible stream URL (that is the
    validator's job).
    """

    @property
    def id(self) -> str:
        """Stable codec identifier (e.g. ``"vidsrc.xor_div_id"``)."""
        ...

    async def decode(self, token: str, context: TokenContext) -> str:
        """Return the decoded text for *token*."""
        ...
