"""Explicit startup registration of providers and their codecs."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import structlog

from streamtrail.domain.ports.cache import CachePort
from streamtrail.infrastructure.config.schema import AppConfig, ProviderSettings
from streamtrail.infrastructure.decoding.codecs import ChainCodec
from streamtrail.infrastructure.decoding.registry import CodecRegistry
from streamtrail.infrastructure.decoding.remote_codec import RemoteDecryptCodec
from streamtrail.infrastructure.decoding.validator import ResultValidator

from . import flixer, rapidshare, vidsrc
from .base import ProviderCatalog, ProviderProfile

log = structlog.get_logger(__name__)

_ProfileBuilder = Callable[[ProviderSettings], ProviderProfile]

# name -> (profile builder, local codecs)
_BUILTIN: dict[str, tuple[_ProfileBuilder, Callable[[], list[ChainCodec]]]] = {
    vidsrc.NAME: (vidsrc.build_vidsrc_profile, vidsrc.vidsrc_codecs),
    rapidshare.NAME: (rapidshare.build_rapidshare_profile, rapidshare.rapidshare_codecs),
    flixer.NAME: (flixer.build_flixer_profile, list),
}


def build_provider_catalog(
    config: AppConfig,
    *,
    http_client: httpx.AsyncClient | None = None,
    cache: CachePort | None = None,
) -> ProviderCatalog:
    """Build every enabled provider and a frozen codec registry.

    A remote decrypt codec is appended after the local ones for providers
    that configure ``decrypt_service_url`` (requires *http_client*).
    """
    registry = CodecRegistry(
        ResultValidator(
            min_length=config.validator.min_length,
            min_printable_ratio=config.validator.min_printable_ratio,
            excluded_host_prefixes=tuple(config.validator.excluded_host_prefixes),
        )
    )
    profiles: list[ProviderProfile] = []

    for name, (build_profile, build_codecs) in _BUILTIN.items():
        settings = config.provider(name)
        if not settings.enabled:
            log.info("provider_disabled", provider=name)
            continue

        profile = build_profile(settings)
        profiles.append(profile)
        if not profile.supported:
            log.info("provider_unsupported", provider=name)
            continue

        for codec in build_codecs():
            registry.register(name, codec)

        if settings.decrypt_service_url:
            if http_client is None:
                raise ValueError(
                    f"provider {name!r} configures decrypt_service_url "
                    "but no http_client was given"
                )
            registry.register(
                name,
                RemoteDecryptCodec(
                    f"{name}.remote",
                    settings.decrypt_service_url,
                    http_client,
                    timeout_seconds=config.http_timeout_seconds,
                    cache=cache,
                    cache_ttl=float(config.cache_ttl_seconds),
                ),
            )

    registry.freeze()
    log.info(
        "provider_catalog_built",
        providers=[p.name for p in profiles],
        codecs={n: len(registry.codecs_for(n)) for n in registry.providers},
    )
    return ProviderCatalog(profiles, registry)
