"""Tests for the stream URL plausibility checks."""

from __future__ import annotations

import pytest

from streamtrail.infrastructure.decoding.validator import (
    ResultValidator,
    expand_placeholders,
)


@pytest.fixture()
def validator() -> ResultValidator:
    return ResultValidator()


class TestIsPlausibleStreamUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "https://example.cdn/a/b/list.m3u8",
            "http://cdn.example.com/video/file.mp4",
            "https://edge.example.com/hls/abc/index",
            "https://edge.example.com/ABC/Master.M3U8?token=1",
            "https://edge.example.com/x/manifest.mpd",
        ],
    )
    def test_accepts(self, validator: ResultValidator, url: str) -> None:
        assert validator.is_plausible_stream_url(url)

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "https://a.b/x.m3u8",  # too short
            "ftp://example.cdn/a/b/list.m3u8",
            "https://localhost/a/b/c/list.m3u8",
            "https://example.cdn/a/b/list.m3u8 extra",
            "https://example.cdn/a/b/page.html",
            "https://{v1}/a/b/c/list.m3u8",
            "not a url at all, definitely not",
        ],
    )
    def test_rejects(self, validator: ResultValidator, value: str) -> None:
        assert not validator.is_plausible_stream_url(value)

    def test_rejects_mostly_unprintable(self, validator: ResultValidator) -> None:
        value = "https://example.cdn/" + "\x01" * 10 + "/list.m3u8"
        assert not validator.is_plausible_stream_url(value)

    def test_custom_markers(self) -> None:
        validator = ResultValidator(markers=("/play/",))
        assert validator.is_plausible_stream_url("https://example.cdn/play/abc123")
        assert not validator.is_plausible_stream_url(
            "https://example.cdn/a/b/list.m3u8"
        )

    def test_min_length(self) -> None:
        validator = ResultValidator(min_length=100)
        assert not validator.is_plausible_stream_url(
            "https://example.cdn/a/b/list.m3u8"
        )


class TestExpandPlaceholders:
    def test_known(self) -> None:
        out = expand_placeholders("https://{v1}/x", {"v1": "cdn.example.com"})
        assert out == "https://cdn.example.com/x"

    def test_unknown_left_alone(self) -> None:
        assert expand_placeholders("https://{v9}/x", {"v1": "a"}) == "https://{v9}/x"

    def test_no_placeholders(self) -> None:
        assert expand_placeholders("https://{v1}/x", {}) == "https://{v1}/x"


class TestSelect:
    def test_first_plausible_candidate(self, validator: ResultValidator) -> None:
        output = "garbage or https://example.cdn/a/b/list.m3u8 or https://b.cdn/c.mp4x"
        assert validator.select(output) == "https://example.cdn/a/b/list.m3u8"

    def test_placeholders_expanded(self, validator: ResultValidator) -> None:
        output = "https://tmstr.{v1}/pl/abc/master.m3u8"
        selected = validator.select(output, placeholders={"v1": "example.com"})
        assert selected == "https://tmstr.example.com/pl/abc/master.m3u8"

    def test_unexpanded_placeholder_rejected(self, validator: ResultValidator) -> None:
        assert validator.select("https://tmstr.{v1}/pl/abc/master.m3u8") is None

    def test_strips_whitespace(self, validator: ResultValidator) -> None:
        assert validator.select("  https://example.cdn/a/b/list.m3u8\n") is not None

    def test_nothing_plausible(self, validator: ResultValidator) -> None:
        assert validator.select("\x00\x01garbage") is None


class TestSelectAll:
    def test_every_candidate_in_order(self, validator: ResultValidator) -> None:
        output = (
            "https://tmstr.{v1}/pl/abc/master.m3u8 or "
            "https://tmstr.{v2}/pl/abc/master.m3u8 or "
            "https://tmstr.{v1}/pl/abc/master.m3u8"
        )
        found = validator.select_all(
            output, placeholders={"v1": "one.example", "v2": "two.example"}
        )
        assert found == [
            "https://tmstr.one.example/pl/abc/master.m3u8",
            "https://tmstr.two.example/pl/abc/master.m3u8",
        ]

    def test_excluded_hosts_dropped(self) -> None:
        validator = ResultValidator(excluded_host_prefixes=("app2.", "app3."))
        output = (
            "https://app2.example.com/pl/master.m3u8 or "
            "https://app3.example.com/pl/master.m3u8 or "
            "https://cdn.example.com/pl/master.m3u8"
        )
        assert validator.select_all(output) == ["https://cdn.example.com/pl/master.m3u8"]
        assert validator.select(output) == "https://cdn.example.com/pl/master.m3u8"

    def test_empty_when_nothing_plausible(self, validator: ResultValidator) -> None:
        assert validator.select_all("nope or also nope") == []
