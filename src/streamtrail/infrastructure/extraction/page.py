"""Parsed view of one hop page shared by all matchers."""

from __future__ import annotations

from functools import cached_property
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup


class HtmlPage:
    """Raw HTML plus a lazily built ``lxml`` tree.

    Several pattern sets run against the same page; the tree is parsed once.
    """

    def __init__(self, html: str, *, url: str = "", hop: int = 0) -> None:
        self.html = html
        self.url = url
        self.hop = hop

    @cached_property
    def soup(self) -> BeautifulSoup:
        return BeautifulSoup(self.html, "lxml")

    @property
    def path(self) -> str:
        return urlparse(self.url).path if self.url else ""

    @property
    def last_segment(self) -> str:
        segments = [s for s in self.path.split("/") if s]
        return segments[-1] if segments else ""

    def absolute(self, link: str) -> str:
        """Resolve *link* (relative or protocol-relative) against the page URL."""
        link = link.strip()
        if link.startswith("//"):
            scheme = urlparse(self.url).scheme or "https"
            return f"{scheme}:{link}"
        return urljoin(self.url, link) if self.url else link
