"""Shared test fixtures for the streamtrail test suite."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
import structlog
from structlog.testing import LogCapture

from streamtrail.domain.entities.resolution import (
    HopResult,
    ResolutionRequest,
    TokenContext,
)
from streamtrail.infrastructure.decoding.primitives import (
    reverse,
    url_safe_b64_encode,
    xor_repeat,
)
from streamtrail.infrastructure.logging.redaction import redact_secrets
from streamtrail.infrastructure.logging.setup import _stop_async_listener

STREAM_URL = "https://example.cdn/a/b/list.m3u8"
DIV_ID = "TsA2KGDGux"


class FakeClock:
    """Manually advanced monotonic clock with a matching async sleep."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def encode_div_token(plaintext: str, div_id: str = DIV_ID) -> str:
    """Build a hidden-div token: XOR with the div id, base64, reversed."""
    raw = xor_repeat(plaintext.encode("utf-8"), div_id.encode("ascii"))
    return reverse(url_safe_b64_encode(raw))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock(start=100.0)


@pytest.fixture()
def div_token() -> Callable[..., str]:
    """Encoder for hidden-div tokens (see :func:`encode_div_token`)."""
    return encode_div_token


@pytest.fixture()
def movie_request() -> ResolutionRequest:
    return ResolutionRequest(content_id="tt0000001", media_type="movie")


@pytest.fixture()
def token_context() -> TokenContext:
    return TokenContext(
        div_id=DIV_ID,
        embed_path="/e/AbC-123_xyz",
        embed_id="AbC-123_xyz",
        page_url="https://cloudnestra.com/prorcp/abc",
        content_id="tt0000001",
    )


@pytest.fixture()
def make_hop() -> Callable[..., HopResult]:
    def _make(
        body: str,
        *,
        url: str = "https://player.test/page",
        index: int = 0,
        referer: str | None = None,
    ) -> HopResult:
        return HopResult(
            index=index, url=url, body=body, status_code=200, referer=referer
        )

    return _make


@pytest.fixture()
def fixtures_dir() -> Path:
    """Path to HTML fixtures directory."""
    return Path(__file__).parent / "fixtures" / "html"


@pytest.fixture()
def restore_logging() -> Iterator[None]:
    """Undo :func:`configure_logging` side effects after the test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    _stop_async_listener()
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture()
def log_events() -> Iterator[list[dict[str, Any]]]:
    """structlog events as emitted in production, redaction included."""
    capture = LogCapture()
    structlog.configure(processors=[redact_secrets, capture])
    yield capture.entries
    structlog.reset_defaults()
