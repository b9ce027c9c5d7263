"""Pattern sets and the extractor that runs them."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass

import structlog

from streamtrail.domain.entities.resolution import HopLink
from streamtrail.domain.errors import ExtractionError

from .matchers import Match, Matcher
from .page import HtmlPage

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PatternSet:
    """Named, ordered matchers; the first match wins."""

    name: str
    matchers: tuple[Matcher, ...] = ()


class TokenExtractor:
    """Runs one :class:`PatternSet` against a page."""

    def __init__(self, pattern_set: PatternSet) -> None:
        self._patterns = pattern_set

    @property
    def pattern_set(self) -> PatternSet:
        return self._patterns

    def search(
        self,
        page: HtmlPage | str,
        *,
        exclude: Collection[str] = (),
    ) -> Match | None:
        """First match, skipping links whose URL is in *exclude*."""
        if isinstance(page, str):
            page = HtmlPage(page)
        for matcher in self._patterns.matchers:
            for found in matcher.find_all(page):
                if isinstance(found, HopLink) and found.url in exclude:
                    continue
                log.debug(
                    "pattern_matched",
                    pattern_set=self._patterns.name,
                    matcher=matcher.name,
                    hop=page.hop,
                )
                return found
        return None

    def extract(
        self,
        page: HtmlPage | str,
        *,
        exclude: Collection[str] = (),
    ) -> Match:
        """Like :meth:`search`, but raises :class:`ExtractionError` on a miss."""
        if isinstance(page, str):
            page = HtmlPage(page)
        found = self.search(page, exclude=exclude)
        if found is None:
            raise ExtractionError(page.hop, self._patterns.name)
        return found
