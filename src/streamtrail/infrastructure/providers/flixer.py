"""flixer: key comes from a client fingerprint computed in WASM.

No portable derivation is known, so the provider is registered as
unsupported and fails fast.
"""

from __future__ import annotations

from streamtrail.domain.entities.resolution import ResolutionRequest
from streamtrail.infrastructure.config.schema import ProviderSettings

from .base import ProviderProfile

NAME = "flixer"

UNSUPPORTED_REASON = (
    "key depends on a browser fingerprint (canvas hash, screen, timezone) "
    "computed inside WASM"
)


def embed_url(base_url: str, request: ResolutionRequest) -> str:
    if request.is_episode:
        return (
            f"{base_url}/watch/tv/{request.content_id}"
            f"/{request.season}/{request.episode}"
        )
    return f"{base_url}/watch/{request.media_type}/{request.content_id}"


def build_flixer_profile(settings: ProviderSettings) -> ProviderProfile:
    base_url = settings.embed_base_url
    return ProviderProfile(
        name=NAME,
        build_embed_url=lambda request: embed_url(base_url, request),
        unsupported_reason=UNSUPPORTED_REASON,
    )
