"""Plausibility checks for decoded stream URLs."""

from __future__ import annotations

import re
from collections.abc import Mapping
from urllib.parse import urlparse

_PLACEHOLDER_RE = re.compile(r"\{(v\d+)\}")
_CANDIDATE_SPLIT_RE = re.compile(r"\s+or\s+")

STREAM_MARKERS: tuple[str, ...] = (
    ".m3u8",
    ".mp4",
    "/hls/",
    "/stream/",
    "/playlist/",
    "/manifest",
)


def expand_placeholders(text: str, placeholders: Mapping[str, str]) -> str:
    """Replace ``{v1}``-style tokens with configured domains.

    Unknown placeholders are left as-is; the URL check rejects them later.
    """
    if not placeholders:
        return text
    return _PLACEHOLDER_RE.sub(
        lambda m: placeholders.get(m.group(1), m.group(0)), text
    )


class ResultValidator:
    """Decides whether a codec output is a usable stream URL.

    Args:
        min_length: Shortest accepted URL.
        min_printable_ratio: Share of characters that must be visible ASCII.
        markers: Path fragments of which at least one must be present.
        excluded_host_prefixes: Hosts starting with one of these never
            resolve and are dropped.
    """

    def __init__(
        self,
        *,
        min_length: int = 20,
        min_printable_ratio: float = 0.95,
        markers: tuple[str, ...] = STREAM_MARKERS,
        excluded_host_prefixes: tuple[str, ...] = (),
    ) -> None:
        self._min_length = min_length
        self._min_printable_ratio = min_printable_ratio
        self._markers = tuple(m.lower() for m in markers)
        self._excluded_hosts = tuple(p.lower() for p in excluded_host_prefixes)

    def is_plausible_stream_url(self, value: str) -> bool:
        if not isinstance(value, str) or len(value) < self._min_length:
            return False
        if any(ch.isspace() for ch in value) or _PLACEHOLDER_RE.search(value):
            return False

        printable = sum(1 for ch in value if 0x21 <= ord(ch) <= 0x7E)
        if printable / len(value) < self._min_printable_ratio:
            return False

        try:
            parsed = urlparse(value)
        except ValueError:
            return False
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            return False
        if "." not in parsed.hostname:
            return False
        if parsed.hostname.startswith(self._excluded_hosts):
            return False

        path = parsed.path.lower()
        return any(marker in path for marker in self._markers)

    def select_all(
        self,
        output: str,
        *,
        placeholders: Mapping[str, str] | None = None,
    ) -> list[str]:
        """Every plausible URL in *output*, deduplicated, in output order.

        Outputs may hold several URLs separated by `` or `` and may use
        ``{vN}`` domain placeholders.
        """
        text = expand_placeholders(output.strip(), placeholders or {})
        found: list[str] = []
        for candidate in _CANDIDATE_SPLIT_RE.split(text):
            candidate = candidate.strip()
            if candidate in found or not self.is_plausible_stream_url(candidate):
                continue
            found.append(candidate)
        return found

    def select(
        self,
        output: str,
        *,
        placeholders: Mapping[str, str] | None = None,
    ) -> str | None:
        """Return the first plausible URL in *output*, or ``None``."""
        found = self.select_all(output, placeholders=placeholders)
        return found[0] if found else None
