"""Provider profiles and the catalog that holds them."""

from __future__ import annotations

from collections.abc import Callable, Collection, Iterable, Mapping
from dataclasses import dataclass, field

from streamtrail.domain.entities.resolution import (
    HopLink,
    HopResult,
    ResolutionRequest,
    Subtitle,
    Token,
)
from streamtrail.infrastructure.decoding.registry import CodecRegistry
from streamtrail.infrastructure.extraction.matchers import extract_subtitles
from streamtrail.infrastructure.extraction.page import HtmlPage
from streamtrail.infrastructure.extraction.token_extractor import (
    PatternSet,
    TokenExtractor,
)

_EMPTY = PatternSet("none")


@dataclass(frozen=True)
class ProviderProfile:
    """Everything the orchestrator needs to walk one provider's hop chain.

    Attributes:
        name: Catalog key, also the codec registry key.
        build_embed_url: Builds hop 0 from a request.
        terminal_patterns: Locate the encoded token on a page.
        next_hop_patterns: Locate the link to the next hop.
        alternate_patterns: Tried once when the primary link set misses
            or the token found through it cannot be decoded.
        placeholders: ``{vN}`` substitutions for decoded URLs.
        unsupported_reason: Non-empty marks the provider as unsupported.
    """

    name: str
    build_embed_url: Callable[[ResolutionRequest], str]
    terminal_patterns: PatternSet = _EMPTY
    next_hop_patterns: PatternSet = _EMPTY
    alternate_patterns: PatternSet | None = None
    placeholders: Mapping[str, str] = field(default_factory=dict)
    unsupported_reason: str = ""

    @property
    def supported(self) -> bool:
        return not self.unsupported_reason

    @property
    def has_alternate(self) -> bool:
        return self.alternate_patterns is not None

    def embed_url(self, request: ResolutionRequest) -> str:
        return self.build_embed_url(request)

    def inspect(self, hop: HopResult) -> ProviderPage:
        return ProviderPage(self, HtmlPage(hop.body, url=hop.url, hop=hop.index))


class ProviderPage:
    """A hop page seen through one provider's pattern sets."""

    def __init__(self, profile: ProviderProfile, page: HtmlPage) -> None:
        self._profile = profile
        self.page = page

    def find_token(self) -> Token | None:
        found = TokenExtractor(self._profile.terminal_patterns).search(self.page)
        return found if isinstance(found, Token) else None

    def find_next_hop(
        self, *, exclude: Collection[str] = (), alternate: bool = False
    ) -> HopLink | None:
        patterns = (
            self._profile.alternate_patterns
            if alternate
            else self._profile.next_hop_patterns
        )
        if patterns is None:
            return None
        found = TokenExtractor(patterns).search(self.page, exclude=exclude)
        return found if isinstance(found, HopLink) else None

    def subtitles(self) -> tuple[Subtitle, ...]:
        return extract_subtitles(self.page)


class ProviderCatalog:
    """Read-only lookup of provider profiles plus their codec registry."""

    def __init__(
        self, profiles: Iterable[ProviderProfile], registry: CodecRegistry
    ) -> None:
        self._profiles: dict[str, ProviderProfile] = {}
        for profile in profiles:
            if profile.name in self._profiles:
                raise ValueError(f"duplicate provider: {profile.name!r}")
            self._profiles[profile.name] = profile
        self.registry = registry

    def get(self, name: str) -> ProviderProfile | None:
        return self._profiles.get(name)

    def names(self) -> list[str]:
        return sorted(self._profiles)

    def __contains__(self, name: object) -> bool:
        return name in self._profiles

    def __len__(self) -> int:
        return len(self._profiles)
