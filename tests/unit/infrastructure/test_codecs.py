"""Tests for chain codecs and the provider decode hypotheses."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from streamtrail.domain.entities.resolution import TokenContext
from streamtrail.domain.errors import DecodeError
from streamtrail.infrastructure.decoding.codecs import ChainCodec
from streamtrail.infrastructure.decoding.key_derivation import (
    NoKey,
    StaticContextKey,
    static_context,
)
from streamtrail.infrastructure.decoding.primitives import (
    custom_alphabet_b64_encode,
    hex_pair_encode,
    mod_shift,
    reverse,
    rotate_letters,
    url_safe_b64_encode,
    xor_feedback_encode,
    xor_repeat,
)
from streamtrail.infrastructure.decoding.transforms import (
    Reverse,
    UrlSafeB64Decode,
    XorRepeat,
)
from streamtrail.infrastructure.providers.rapidshare import rapidshare_codecs
from streamtrail.infrastructure.providers.vidsrc import vidsrc_codecs

URL = "https://example.cdn/a/b/list.m3u8"


def _by_id(codecs: list[ChainCodec], codec_id: str) -> ChainCodec:
    return next(c for c in codecs if c.id == codec_id)


class TestChainCodec:
    def _codec(self) -> ChainCodec:
        return ChainCodec(
            "test.xor", (Reverse(), UrlSafeB64Decode(), XorRepeat()), StaticContextKey()
        )

    def test_decodes_div_token(
        self, token_context: TokenContext, div_token: Callable[..., str]
    ) -> None:
        assert self._codec().decode_sync(div_token(URL), token_context) == URL

    @pytest.mark.asyncio()
    async def test_async_decode(
        self, token_context: TokenContext, div_token: Callable[..., str]
    ) -> None:
        assert await self._codec().decode(div_token(URL), token_context) == URL

    def test_empty_token(self, token_context: TokenContext) -> None:
        with pytest.raises(DecodeError, match="empty token"):
            self._codec().decode_sync("", token_context)

    def test_missing_key_context(self, div_token: Callable[..., str]) -> None:
        with pytest.raises(DecodeError) as exc_info:
            self._codec().decode_sync(div_token(URL), TokenContext())
        assert exc_info.value.detail.startswith("key derivation")
        assert exc_info.value.codec == "test.xor"

    def test_non_ascii_token(self, token_context: TokenContext) -> None:
        with pytest.raises(DecodeError, match="ASCII"):
            self._codec().decode_sync("äöü", token_context)

    def test_step_failure_names_step(self, token_context: TokenContext) -> None:
        with pytest.raises(DecodeError) as exc_info:
            self._codec().decode_sync("abcde", token_context)
        assert exc_info.value.detail.startswith("url_safe_b64_decode")

    def test_garbage_output_is_returned(self, token_context: TokenContext) -> None:
        codec = ChainCodec("test.b64", (UrlSafeB64Decode(),), NoKey())
        out = codec.decode_sync(url_safe_b64_encode(b"\xff\xfe"), token_context)
        assert "�" in out

    def test_wrong_key_gives_wrong_output(
        self, token_context: TokenContext, div_token: Callable[..., str]
    ) -> None:
        token = div_token(URL, "SomeOtherId")
        assert self._codec().decode_sync(token, token_context) != URL


class TestVidsrcCodecs:
    def test_order(self) -> None:
        ids = [c.id for c in vidsrc_codecs()]
        assert ids[:3] == [
            "vidsrc.xor_div_id",
            "vidsrc.xor_div_id_reversed",
            "vidsrc.hex_shift",
        ]
        assert ids[3] == "vidsrc.reversed_b64_shift3"
        assert ids[-1] == "vidsrc.plain_b64"
        assert len(ids) == len(set(ids))

    def test_xor_div_id_reversed(self, token_context: TokenContext) -> None:
        key = token_context.div_id[::-1].encode()
        token = reverse(url_safe_b64_encode(xor_repeat(URL.encode(), key)))
        codec = _by_id(vidsrc_codecs(), "vidsrc.xor_div_id_reversed")
        assert codec.decode_sync(token, token_context) == URL

    def test_hex_shift(self, token_context: TokenContext) -> None:
        shifted = mod_shift(hex_pair_encode(URL.encode()).encode("ascii"), 1)
        token = reverse(shifted.decode("ascii"))
        codec = _by_id(vidsrc_codecs(), "vidsrc.hex_shift")
        assert codec.decode_sync(token, token_context) == URL

    def test_reversed_b64_shift(self, token_context: TokenContext) -> None:
        token = reverse(url_safe_b64_encode(mod_shift(URL.encode(), 3)))
        codec = _by_id(vidsrc_codecs(), "vidsrc.reversed_b64_shift3")
        assert codec.decode_sync(token, token_context) == URL

    def test_rot3(self, token_context: TokenContext) -> None:
        token = rotate_letters(URL.encode(), -3).decode("ascii")
        codec = _by_id(vidsrc_codecs(), "vidsrc.rot3")
        assert codec.decode_sync(token, token_context) == URL

    def test_playerjs0(self, token_context: TokenContext) -> None:
        token = "#0" + custom_alphabet_b64_encode(URL.encode())
        codec = _by_id(vidsrc_codecs(), "vidsrc.playerjs0")
        assert codec.decode_sync(token, token_context) == URL

    def test_playerjs_requires_prefix(self, token_context: TokenContext) -> None:
        codec = _by_id(vidsrc_codecs(), "vidsrc.playerjs0")
        with pytest.raises(DecodeError, match="strip_prefix"):
            codec.decode_sync(custom_alphabet_b64_encode(URL.encode()), token_context)

    def test_plain_b64(self, token_context: TokenContext) -> None:
        codec = _by_id(vidsrc_codecs(), "vidsrc.plain_b64")
        token = url_safe_b64_encode(URL.encode())
        assert codec.decode_sync(token, token_context) == URL


class TestRapidshareCodecs:
    def test_xor_clean_path(self, token_context: TokenContext) -> None:
        key = static_context(token_context.embed_path, normalize=True, length=32)
        token = url_safe_b64_encode(xor_repeat(URL.encode(), key))
        codec = _by_id(rapidshare_codecs(), "rapidshare.xor_clean_path")
        assert codec.decode_sync(token, token_context) == URL

    def test_feedback_clean_path(self, token_context: TokenContext) -> None:
        key = static_context(token_context.embed_path, normalize=True, last=30)
        token = url_safe_b64_encode(xor_feedback_encode(URL.encode(), key))
        codec = _by_id(rapidshare_codecs(), "rapidshare.feedback_clean_path")
        assert codec.decode_sync(token, token_context) == URL

    def test_plain_xor_does_not_decode_feedback(
        self, token_context: TokenContext
    ) -> None:
        key = static_context(token_context.embed_path, normalize=True, last=30)
        token = url_safe_b64_encode(xor_feedback_encode(URL.encode(), key))
        codec = _by_id(rapidshare_codecs(), "rapidshare.xor_clean_path")
        assert codec.decode_sync(token, token_context) != URL
