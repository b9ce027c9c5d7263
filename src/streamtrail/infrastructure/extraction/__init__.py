"""Token and next-hop extraction from hop pages."""

from .matchers import (
    DataHashMatcher,
    HiddenDivMatcher,
    Matcher,
    PageDataMatcher,
    PathMarkerMatcher,
    extract_subtitles,
)
from .page import HtmlPage
from .token_extractor import PatternSet, TokenExtractor

__all__ = [
    "DataHashMatcher",
    "HiddenDivMatcher",
    "HtmlPage",
    "Matcher",
    "PageDataMatcher",
    "PathMarkerMatcher",
    "PatternSet",
    "TokenExtractor",
    "extract_subtitles",
]
