"""Tests for the resolve request/response shapes."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from streamtrail.domain.entities.resolution import (
    ResolutionRequest,
    ResolutionResult,
    ResolutionState,
    ResolvedStream,
    Subtitle,
)
from streamtrail.domain.errors import DecodeExhausted
from streamtrail.interfaces.api import (
    ResolveRequestBody,
    handle_resolve,
    present_result,
)

_URL = "https://example.cdn/a/b/list.m3u8"


def _success(request: ResolutionRequest) -> ResolutionResult:
    return ResolutionResult(
        request=request,
        state=ResolutionState.VALIDATED,
        stream=ResolvedStream(
            url=_URL,
            kind="hls",
            subtitles=(Subtitle("https://c.example.com/en.vtt", "English", "en"),),
            headers={"Referer": "https://cloudnestra.com/"},
            provider="vidsrc",
            codec_id="vidsrc.xor_div_id",
        ),
    )


class TestResolveRequestBody:
    def test_camel_case(self) -> None:
        body = ResolveRequestBody.model_validate(
            {"contentId": "tt1", "mediaType": "tv", "season": 1, "episode": 2}
        )
        request = body.to_request()
        assert request == ResolutionRequest("tt1", "tv", 1, 2)

    def test_snake_case(self) -> None:
        body = ResolveRequestBody.model_validate(
            {"content_id": " tt1 ", "provider_hint": "rapidshare"}
        )
        request = body.to_request()
        assert request.content_id == "tt1"
        assert request.provider_hint == "rapidshare"
        assert request.media_type == "movie"


class TestPresentResult:
    def test_success(self) -> None:
        body = present_result(_success(ResolutionRequest("tt1")))
        assert body == {
            "success": True,
            "sources": [{"url": _URL, "type": "hls", "quality": "auto"}],
            "subtitles": [
                {"url": "https://c.example.com/en.vtt", "label": "English", "lang": "en"}
            ],
            "headers": {"Referer": "https://cloudnestra.com/"},
        }

    def test_alternates_become_sources(self) -> None:
        request = ResolutionRequest("tt1")
        result = ResolutionResult(
            request=request,
            state=ResolutionState.VALIDATED,
            stream=ResolvedStream(
                url=_URL,
                alternates=("https://backup.example.cdn/v/file.mp4",),
            ),
        )

        body = present_result(result)

        assert body["sources"] == [
            {"url": _URL, "type": "hls", "quality": "auto"},
            {
                "url": "https://backup.example.cdn/v/file.mp4",
                "type": "mp4",
                "quality": "auto",
            },
        ]

    def test_failure(self) -> None:
        result = ResolutionResult(
            request=ResolutionRequest("tt1"),
            state=ResolutionState.FAILED,
            error=DecodeExhausted(),
        )
        body = present_result(result)
        assert body["success"] is False
        assert body["sources"] == []
        assert body["error"].startswith("decode_exhausted: all codecs failed")


class TestHandleResolve:
    @pytest.mark.asyncio()
    async def test_resolves(self) -> None:
        resolver = AsyncMock()
        resolver.resolve.side_effect = _success

        body = await handle_resolve({"contentId": "tt1"}, resolver)

        assert body["success"] is True
        resolver.resolve.assert_awaited_once_with(ResolutionRequest("tt1"))

    @pytest.mark.asyncio()
    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"contentId": ""},
            {"contentId": "tt1", "mediaType": "anime"},
            {"contentId": "tt1", "season": 1, "episode": 1},
            {"contentId": "tt1", "mediaType": "tv", "season": 1},
            "not an object",
        ],
    )
    async def test_invalid_request(self, payload: object) -> None:
        resolver = AsyncMock()

        body = await handle_resolve(payload, resolver)

        assert body["success"] is False
        assert body["error"].startswith("invalid_request")
        resolver.resolve.assert_not_awaited()
