from .cache import CachePort
from .codec import CodecPort
from .hop_fetcher import HopFetcherPort
from .provider import (
    HopPagePort,
    ProviderCatalogPort,
    ProviderPort,
    TokenDecoderPort,
)

__all__ = [
    "CachePort",
    "CodecPort",
    "HopFetcherPort",
    "HopPagePort",
    "ProviderCatalogPort",
    "ProviderPort",
    "TokenDecoderPort",
]
