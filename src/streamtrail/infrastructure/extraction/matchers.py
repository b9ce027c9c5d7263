"""Matchers that locate tokens and next-hop links on a page.

Each matcher yields candidates in document order. DOM lookups run first;
regexes over the raw HTML catch links that only exist in inline scripts.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from typing import Protocol, Union
from urllib.parse import urlparse

from streamtrail.domain.entities.resolution import (
    HopLink,
    Subtitle,
    Token,
    TokenContext,
)

from .page import HtmlPage

Match = Union[Token, HopLink]

TOKEN_RE = re.compile(r"[A-Za-z0-9_:+/=\-]+")
_DIV_ID_RE = re.compile(r"[A-Za-z0-9]+")
_HIDDEN_DIV_RE = re.compile(
    r"""<div\s+id=["']([A-Za-z0-9]+)["']\s+style=["']display:\s*none;?["']\s*>"""
    r"""([^<]+)</div>""",
    re.IGNORECASE,
)
_DATA_HASH_RE = re.compile(r"""data-hash=["']([^"']+)["']""")
_PAGE_DATA_RE = re.compile(r"""window\.__PAGE_DATA\s*=\s*["']([^"']+)["']""")
_LINK_ATTRS = ("src", "data-src", "href")


class Matcher(Protocol):
    name: str

    def find_all(self, page: HtmlPage) -> Iterator[Match]: ...


def _is_hidden(style: str) -> bool:
    return "display:none" in re.sub(r"\s+", "", style).lower()


def _context_for(page: HtmlPage, *, div_id: str = "") -> TokenContext:
    return TokenContext(
        div_id=div_id,
        embed_path=page.path,
        embed_id=page.last_segment,
        page_url=page.url,
    )


class HiddenDivMatcher:
    """Terminal token inside ``<div id="..." style="display:none;">``.

    The text must be longer than ``min_length``. The div id is carried into
    the token context; several codecs key on it.
    """

    name = "hidden_div"

    def __init__(self, *, min_length: int = 16) -> None:
        self._min_length = min_length

    def _accept(self, div_id: str, text: str) -> bool:
        return (
            bool(_DIV_ID_RE.fullmatch(div_id))
            and len(text) > self._min_length
            and bool(TOKEN_RE.fullmatch(text))
        )

    def find_all(self, page: HtmlPage) -> Iterator[Match]:
        seen: set[str] = set()
        for div in page.soup.find_all("div", id=True, style=True):
            div_id = str(div.get("id", ""))
            if not _is_hidden(str(div.get("style", ""))):
                continue
            text = div.get_text(strip=True)
            if self._accept(div_id, text):
                seen.add(div_id)
                yield Token(
                    value=text,
                    hop_index=page.hop,
                    context=_context_for(page, div_id=div_id),
                    source=self.name,
                )
        for m in _HIDDEN_DIV_RE.finditer(page.html):
            div_id, text = m.group(1), m.group(2).strip()
            if div_id not in seen and self._accept(div_id, text):
                yield Token(
                    value=text,
                    hop_index=page.hop,
                    context=_context_for(page, div_id=div_id),
                    source=self.name,
                )


class PageDataMatcher:
    """Token assigned to ``window.__PAGE_DATA`` in an inline script."""

    name = "page_data"

    def __init__(self, *, min_length: int = 16) -> None:
        self._min_length = min_length

    def find_all(self, page: HtmlPage) -> Iterator[Match]:
        for m in _PAGE_DATA_RE.finditer(page.html):
            value = m.group(1).strip()
            if len(value) >= self._min_length and TOKEN_RE.fullmatch(value):
                yield Token(
                    value=value,
                    hop_index=page.hop,
                    context=_context_for(page),
                    source=self.name,
                )


class PathMarkerMatcher:
    """Next-hop link whose URL contains a path marker such as ``/prorcp/``.

    Looks at ``src``/``data-src``/``href`` attributes first, then at quoted
    string literals in scripts (``src: '/prorcp/...'``, ``loadIframe(...)``).

    Args:
        markers: Path fragments, tried in order.
        host: When set, only links on this host (or a subdomain) count.
    """

    def __init__(self, markers: tuple[str, ...], *, host: str | None = None) -> None:
        if not markers:
            raise ValueError("at least one marker is required")
        self._markers = markers
        self._host = host.lower() if host else None
        self.name = "path_marker:" + ",".join(markers)
        self._literal_res = {
            marker: re.compile(
                r"""["']((?:https?:)?(?://[^"'\s/]+)?[^"'\s]*?"""
                + re.escape(marker)
                + r"""[^"'\s]+)["']"""
            )
            for marker in markers
        }

    def _host_ok(self, url: str) -> bool:
        if self._host is None:
            return True
        hostname = (urlparse(url).hostname or "").lower()
        return hostname == self._host or hostname.endswith("." + self._host)

    def _link(self, page: HtmlPage, raw: str, marker: str) -> HopLink | None:
        tail = raw.split(marker, 1)[1] if marker in raw else ""
        if not tail.strip("/"):
            return None
        url = page.absolute(raw)
        if not self._host_ok(url):
            return None
        return HopLink(url=url, marker=marker, source=self.name)

    def find_all(self, page: HtmlPage) -> Iterator[Match]:
        for marker in self._markers:
            for tag in page.soup.find_all(["iframe", "script", "a", "source"]):
                for attr in _LINK_ATTRS:
                    value = tag.get(attr)
                    if isinstance(value, str) and marker in value:
                        link = self._link(page, value, marker)
                        if link is not None:
                            yield link
            for m in self._literal_res[marker].finditer(page.html):
                link = self._link(page, m.group(1), marker)
                if link is not None:
                    yield link


class DataHashMatcher:
    """Builds the next hop from a ``data-hash`` attribute.

    Args:
        url_template: Format string with a ``{hash}`` field.
    """

    name = "data_hash"

    def __init__(self, url_template: str) -> None:
        if "{hash}" not in url_template:
            raise ValueError("url_template must contain {hash}")
        self._template = url_template

    def find_all(self, page: HtmlPage) -> Iterator[Match]:
        for tag in page.soup.select("[data-hash]"):
            value = str(tag.get("data-hash", "")).strip()
            if value:
                yield HopLink(
                    url=self._template.format(hash=value),
                    marker="data-hash",
                    source=self.name,
                )
        for m in _DATA_HASH_RE.finditer(page.html):
            yield HopLink(
                url=self._template.format(hash=m.group(1).strip()),
                marker="data-hash",
                source=self.name,
            )


def extract_subtitles(page: HtmlPage) -> tuple[Subtitle, ...]:
    """Caption/subtitle ``<track>`` elements, resolved to absolute URLs."""
    found: list[Subtitle] = []
    seen: set[str] = set()
    for track in page.soup.find_all("track"):
        kind = str(track.get("kind", "")).lower()
        src = track.get("src")
        if kind not in ("captions", "subtitles") or not isinstance(src, str):
            continue
        url = page.absolute(src)
        if not src.strip() or url in seen:
            continue
        seen.add(url)
        found.append(
            Subtitle(
                url=url,
                label=str(track.get("label", "")),
                language=str(track.get("srclang", "")),
            )
        )
    return tuple(found)
