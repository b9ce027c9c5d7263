"""End-to-end resolution through the composed pipeline.

Real config, provider catalog, codec registry, hop resolver and httpx
client; only the network is mocked (respx).
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest
import respx

from streamtrail.domain.entities.resolution import ResolutionRequest
from streamtrail.domain.errors import DecodeExhausted, NetworkError
from streamtrail.infrastructure.config.load import load_config
from streamtrail.interfaces.api import handle_resolve
from streamtrail.interfaces.composition import build_stream_resolver, create_resolver

pytestmark = pytest.mark.integration

STREAM_URL = "https://example.cdn/a/b/list.m3u8"
EMBED = "https://vidsrc-embed.ru/embed/movie/tt0000001"
RCP = "https://cloudnestra.com/rcp/MzE0MTU5MjY1MzU4OTc5MzIzODQ2"
PRORCP = "https://cloudnestra.com/prorcp/Mjk3OTI0NThfcHJvcmNwX2hhc2g"
DECRYPT = "https://decrypt.example.com/api"


def _read(fixtures_dir: Path, name: str) -> str:
    return (fixtures_dir / name).read_text(encoding="utf-8")


@pytest.fixture()
def mock_chain(
    respx_mock: respx.MockRouter,
    fixtures_dir: Path,
) -> Callable[[str], dict[str, respx.Route]]:
    """Register the embed → rcp → prorcp chain with *token* on the last page."""

    def _register(token: str) -> dict[str, respx.Route]:
        prorcp = _read(fixtures_dir, "vidsrc_prorcp.html").replace("__TOKEN__", token)
        return {
            "embed": respx_mock.get(EMBED).respond(
                200, text=_read(fixtures_dir, "vidsrc_embed.html")
            ),
            "rcp": respx_mock.get(RCP).respond(
                200, text=_read(fixtures_dir, "vidsrc_rcp.html")
            ),
            "prorcp": respx_mock.get(PRORCP).respond(200, text=prorcp),
        }

    return _register


def _config(**overrides):
    return load_config(overrides={"rate_limit": {"rps": 0}, **overrides})


class TestVidsrcPipeline:
    @pytest.mark.asyncio()
    async def test_resolves_stream(
        self,
        mock_chain: Callable[[str], dict[str, respx.Route]],
        div_token: Callable[..., str],
        movie_request: ResolutionRequest,
    ) -> None:
        routes = mock_chain(div_token(STREAM_URL, "TsA2KGDGux"))

        async with build_stream_resolver(_config()) as resolver:
            result = await resolver.resolve(movie_request)

        assert result.success, result.error
        stream = result.stream
        assert stream.url == STREAM_URL
        assert stream.kind == "hls"
        assert stream.codec_id == "vidsrc.xor_div_id"
        assert stream.headers["Referer"] == "https://cloudnestra.com/"
        assert [(s.language, s.label) for s in stream.subtitles] == [("en", "English")]
        assert result.hop_urls == (EMBED, RCP, PRORCP)

        rcp_request = routes["rcp"].calls.last.request
        assert rcp_request.headers["Referer"] == EMBED
        assert rcp_request.headers["Origin"] == "https://vidsrc-embed.ru"
        prorcp_request = routes["prorcp"].calls.last.request
        assert prorcp_request.headers["Referer"] == RCP

    @pytest.mark.asyncio()
    async def test_handle_resolve_response_shape(
        self,
        mock_chain: Callable[[str], dict[str, respx.Route]],
        div_token: Callable[..., str],
    ) -> None:
        mock_chain(div_token(STREAM_URL, "TsA2KGDGux"))

        async with build_stream_resolver(_config()) as resolver:
            body = await handle_resolve({"contentId": "tt0000001"}, resolver)

        assert body["success"] is True
        assert body["sources"] == [{"url": STREAM_URL, "type": "hls", "quality": "auto"}]
        assert body["subtitles"][0]["lang"] == "en"

    @pytest.mark.asyncio()
    async def test_upstream_404(
        self,
        respx_mock: respx.MockRouter,
        fixtures_dir: Path,
        movie_request: ResolutionRequest,
    ) -> None:
        respx_mock.get(EMBED).respond(200, text=_read(fixtures_dir, "vidsrc_embed.html"))
        respx_mock.get(RCP).respond(404)

        async with build_stream_resolver(_config()) as resolver:
            result = await resolver.resolve(movie_request)

        assert isinstance(result.error, NetworkError)
        assert result.error.hop == 1

    @pytest.mark.asyncio()
    async def test_malformed_hop_link(
        self,
        respx_mock: respx.MockRouter,
        movie_request: ResolutionRequest,
    ) -> None:
        respx_mock.get(EMBED).respond(
            200, text="<script>var a = {src: '//host:abc/prorcp/abcdef'};</script>"
        )

        async with build_stream_resolver(_config()) as resolver:
            result = await resolver.resolve(movie_request)

        assert not result.success
        assert isinstance(result.error, NetworkError)
        assert result.error.hop == 1
        assert result.error.cause == "InvalidURL"

    @pytest.mark.asyncio()
    async def test_undecodable_token(
        self,
        mock_chain: Callable[[str], dict[str, respx.Route]],
        movie_request: ResolutionRequest,
    ) -> None:
        mock_chain("Z" * 48)

        async with build_stream_resolver(_config()) as resolver:
            result = await resolver.resolve(movie_request)

        assert isinstance(result.error, DecodeExhausted)
        assert result.attempts

    @pytest.mark.asyncio()
    async def test_remote_decrypt_fallback(
        self,
        respx_mock: respx.MockRouter,
        mock_chain: Callable[[str], dict[str, respx.Route]],
        movie_request: ResolutionRequest,
    ) -> None:
        mock_chain("Z" * 48)
        decrypt = respx_mock.post(DECRYPT).respond(200, json={"result": STREAM_URL})
        config = _config(providers={"vidsrc": {"decrypt_service_url": DECRYPT}})

        async with build_stream_resolver(config) as resolver:
            result = await resolver.resolve(movie_request)

        assert result.success, result.error
        assert result.stream.codec_id == "vidsrc.remote"
        payload = json.loads(decrypt.calls.last.request.content)
        assert payload == {"text": "Z" * 48, "id": "tt0000001"}

    @pytest.mark.asyncio()
    async def test_injected_client_is_not_closed(
        self,
        mock_chain: Callable[[str], dict[str, respx.Route]],
        div_token: Callable[..., str],
        movie_request: ResolutionRequest,
    ) -> None:
        mock_chain(div_token(STREAM_URL, "TsA2KGDGux"))

        async with httpx.AsyncClient() as client:
            async with build_stream_resolver(_config(), http_client=client) as resolver:
                result = await resolver.resolve(movie_request)
            assert not client.is_closed

        assert result.success


class TestCreateResolver:
    @pytest.mark.asyncio()
    async def test_from_yaml_file(
        self,
        tmp_path: Path,
        mock_chain: Callable[[str], dict[str, respx.Route]],
        div_token: Callable[..., str],
        movie_request: ResolutionRequest,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        configure = MagicMock()
        monkeypatch.setattr(
            "streamtrail.interfaces.composition.configure_logging", configure
        )
        config_file = tmp_path / "streamtrail.yaml"
        config_file.write_text(
            "rate_limit:\n  rps: 0\nlogging:\n  level: WARNING\n", encoding="utf-8"
        )
        mock_chain(div_token(STREAM_URL, "TsA2KGDGux"))

        async with create_resolver(config_path=config_file) as resolver:
            result = await resolver.resolve(movie_request)

        assert result.success, result.error
        assert result.stream.url == STREAM_URL
        configure.assert_called_once()
        assert configure.call_args.args[0].log_level == "WARNING"
