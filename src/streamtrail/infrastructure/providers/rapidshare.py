"""rapidshare: single embed page carrying ``window.__PAGE_DATA``.

The XOR key is not confirmed; every candidate derived from the embed
path/id is registered and tried in turn.
"""

from __future__ import annotations

from streamtrail.domain.entities.resolution import ResolutionRequest
from streamtrail.infrastructure.config.schema import ProviderSettings
from streamtrail.infrastructure.decoding.codecs import ChainCodec
from streamtrail.infrastructure.decoding.key_derivation import (
    DerivedHashKey,
    StaticContextKey,
)
from streamtrail.infrastructure.decoding.transforms import (
    UrlSafeB64Decode,
    XorFeedback,
    XorRepeat,
)
from streamtrail.infrastructure.extraction.matchers import PageDataMatcher
from streamtrail.infrastructure.extraction.token_extractor import PatternSet

from .base import ProviderProfile

NAME = "rapidshare"

KEY_LENGTH = 32


def embed_url(base_url: str, request: ResolutionRequest) -> str:
    return f"{base_url}/e/{request.content_id}"


def rapidshare_codecs() -> list[ChainCodec]:
    xor = (UrlSafeB64Decode(), XorRepeat())
    return [
        ChainCodec(
            "rapidshare.xor_clean_path",
            xor,
            StaticContextKey("embed_path", normalize=True, length=KEY_LENGTH),
        ),
        ChainCodec(
            "rapidshare.xor_clean_path_tail",
            xor,
            StaticContextKey("embed_path", normalize=True, last=30, length=KEY_LENGTH),
        ),
        ChainCodec(
            "rapidshare.xor_embed_id",
            xor,
            StaticContextKey("embed_id", length=KEY_LENGTH),
        ),
        ChainCodec("rapidshare.xor_md5_embed_id", xor, DerivedHashKey("embed_id")),
        ChainCodec(
            "rapidshare.xor_md5_clean_path",
            xor,
            DerivedHashKey("embed_path", normalize=True),
        ),
        ChainCodec(
            "rapidshare.feedback_clean_path",
            (UrlSafeB64Decode(), XorFeedback()),
            StaticContextKey("embed_path", normalize=True, last=30),
        ),
    ]


def build_rapidshare_profile(settings: ProviderSettings) -> ProviderProfile:
    base_url = settings.embed_base_url
    return ProviderProfile(
        name=NAME,
        build_embed_url=lambda request: embed_url(base_url, request),
        terminal_patterns=PatternSet(
            "page_data", (PageDataMatcher(min_length=settings.min_token_length),)
        ),
        placeholders=dict(settings.placeholder_domains),
    )
