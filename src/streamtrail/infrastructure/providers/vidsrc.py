"""vidsrc: embed page → /rcp/ → /prorcp/ (or /srcrcp/) → hidden div token.

The token on the final page is keyed with the hidden div's id. Several
competing decode hypotheses are kept; the first validated one wins.
"""

from __future__ import annotations

from streamtrail.domain.entities.resolution import ResolutionRequest
from streamtrail.infrastructure.config.schema import ProviderSettings
from streamtrail.infrastructure.decoding.codecs import ChainCodec
from streamtrail.infrastructure.decoding.key_derivation import StaticContextKey
from streamtrail.infrastructure.decoding.transforms import (
    CustomAlphabetB64Decode,
    HexPairDecode,
    ModShift,
    Replace,
    Reverse,
    RotateLetters,
    StripPrefix,
    UrlSafeB64Decode,
    XorRepeat,
)
from streamtrail.infrastructure.extraction.matchers import (
    DataHashMatcher,
    HiddenDivMatcher,
    PathMarkerMatcher,
)
from streamtrail.infrastructure.extraction.token_extractor import PatternSet

from .base import ProviderProfile

NAME = "vidsrc"

# Order in which the reversed-base64 variant tries byte shifts.
REVERSED_B64_SHIFTS = (3, 5, 7, 1, 2, 4, 6)


def embed_url(base_url: str, request: ResolutionRequest) -> str:
    if request.media_type == "tv":
        if request.is_episode:
            return (
                f"{base_url}/embed/tv/{request.content_id}"
                f"/{request.season}/{request.episode}"
            )
        return f"{base_url}/embed/tv/{request.content_id}"
    return f"{base_url}/embed/movie/{request.content_id}"


def vidsrc_codecs() -> list[ChainCodec]:
    """Decode hypotheses, most likely first."""
    codecs = [
        ChainCodec(
            "vidsrc.xor_div_id",
            (Reverse(), UrlSafeB64Decode(), XorRepeat()),
            StaticContextKey("div_id"),
            description="reverse, url-safe base64, XOR with the div id",
        ),
        ChainCodec(
            "vidsrc.xor_div_id_reversed",
            (Reverse(), UrlSafeB64Decode(), XorRepeat()),
            StaticContextKey("div_id", reverse=True),
            description="as xor_div_id, keyed with the reversed div id",
        ),
        ChainCodec(
            "vidsrc.hex_shift",
            (Reverse(), ModShift(-1), HexPairDecode()),
            description="reverse, shift each char by -1, hex pairs",
        ),
    ]
    codecs.extend(
        ChainCodec(
            f"vidsrc.reversed_b64_shift{shift}",
            (StripPrefix(b"="), Reverse(), UrlSafeB64Decode(), ModShift(-shift)),
            description=f"reversed base64, bytes shifted by -{shift}",
        )
        for shift in REVERSED_B64_SHIFTS
    )
    codecs.extend(
        [
            ChainCodec(
                "vidsrc.rot3",
                (RotateLetters(3),),
                description="letters rotated by 3 (eqqmp → https)",
            ),
            ChainCodec(
                "vidsrc.playerjs0",
                (StripPrefix(b"#0", required=True), CustomAlphabetB64Decode()),
            ),
            ChainCodec(
                "vidsrc.playerjs1",
                (
                    StripPrefix(b"#1", required=True),
                    Replace(b"#", b"+"),
                    CustomAlphabetB64Decode(),
                ),
            ),
            ChainCodec("vidsrc.plain_b64", (UrlSafeB64Decode(),)),
        ]
    )
    return codecs


def build_vidsrc_profile(settings: ProviderSettings) -> ProviderProfile:
    base_url = settings.embed_base_url
    player_host = settings.player_host or "cloudnestra.com"
    return ProviderProfile(
        name=NAME,
        build_embed_url=lambda request: embed_url(base_url, request),
        terminal_patterns=PatternSet(
            "hidden_div",
            (HiddenDivMatcher(min_length=settings.min_token_length),),
        ),
        next_hop_patterns=PatternSet(
            "prorcp",
            (
                PathMarkerMatcher(("/prorcp/",)),
                PathMarkerMatcher(("/rcp/",), host=player_host),
                DataHashMatcher(f"https://{player_host}/rcp/{{hash}}"),
            ),
        ),
        alternate_patterns=PatternSet("srcrcp", (PathMarkerMatcher(("/srcrcp/",)),)),
        placeholders=dict(settings.placeholder_domains),
    )
