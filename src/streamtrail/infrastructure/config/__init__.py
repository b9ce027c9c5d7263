from __future__ import annotations

from .load import load_config
from .schema import (
    AppConfig,
    EnvOverrides,
    ProviderSettings,
    ResolverConfig,
    ValidatorConfig,
)

__all__ = [
    "AppConfig",
    "EnvOverrides",
    "ProviderSettings",
    "ResolverConfig",
    "ValidatorConfig",
    "load_config",
]
