"""Per-provider ordered codec registry."""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from streamtrail.domain.entities.resolution import (
    DecodeAttempt,
    DecodeOutcome,
    Token,
)
from streamtrail.domain.errors import DecodeError
from streamtrail.domain.ports.codec import CodecPort

from .validator import ResultValidator

log = structlog.get_logger(__name__)

_PREVIEW_CHARS = 120


class CodecRegistry:
    """Holds codec hypotheses per provider, tried in registration order.

    Registration happens at startup; :meth:`freeze` makes the registry
    read-only so concurrent resolutions can share it.
    """

    def __init__(self, validator: ResultValidator | None = None) -> None:
        self._validator = validator or ResultValidator()
        self._codecs: dict[str, list[CodecPort]] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def providers(self) -> list[str]:
        return sorted(self._codecs)

    def register(
        self, provider: str, codec: CodecPort, *, position: int | None = None
    ) -> None:
        """Add *codec* for *provider*; ``position`` inserts instead of appending."""
        if self._frozen:
            raise RuntimeError("codec registry is frozen")
        codecs = self._codecs.setdefault(provider, [])
        if any(existing.id == codec.id for existing in codecs):
            raise ValueError(f"codec {codec.id!r} already registered for {provider!r}")
        if position is None:
            codecs.append(codec)
        else:
            codecs.insert(position, codec)
        log.debug("codec_registered", provider=provider, codec=codec.id)

    def freeze(self) -> None:
        self._frozen = True

    def codecs_for(self, provider: str) -> tuple[CodecPort, ...]:
        return tuple(self._codecs.get(provider, ()))

    async def try_all(
        self,
        provider: str,
        token: Token,
        *,
        placeholders: Mapping[str, str] | None = None,
    ) -> DecodeOutcome:
        """Run codecs in order; the first validated output wins.

        Later codecs are never invoked once one succeeds.
        """
        attempts: list[DecodeAttempt] = []
        for codec in self.codecs_for(provider):
            try:
                output = await codec.decode(token.value, token.context)
            except DecodeError as exc:
                attempts.append(DecodeAttempt(codec.id, error=exc.detail))
                log.debug("codec_failed", codec=codec.id, reason=exc.detail)
                continue
            except Exception as exc:  # noqa: BLE001
                log.exception("codec_crashed", codec=codec.id)
                attempts.append(
                    DecodeAttempt(codec.id, error=f"unexpected: {type(exc).__name__}")
                )
                continue

            selected = self._validator.select_all(output, placeholders=placeholders)
            if not selected:
                attempts.append(
                    DecodeAttempt(
                        codec.id,
                        output=output[:_PREVIEW_CHARS],
                        error="validation_failed",
                    )
                )
                log.debug("codec_output_rejected", codec=codec.id)
                continue

            attempts.append(DecodeAttempt(codec.id, output=selected[0], success=True))
            log.info(
                "codec_matched",
                provider=provider,
                codec=codec.id,
                tried=len(attempts),
                urls=len(selected),
            )
            return DecodeOutcome(
                selected[0], codec.id, tuple(attempts), alternates=tuple(selected[1:])
            )

        log.warning("codecs_exhausted", provider=provider, tried=len(attempts))
        return DecodeOutcome(None, None, tuple(attempts))
