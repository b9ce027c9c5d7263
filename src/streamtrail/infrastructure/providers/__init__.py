"""Built-in provider profiles."""

from .base import ProviderCatalog, ProviderProfile
from .catalog import build_provider_catalog

__all__ = ["ProviderCatalog", "ProviderProfile", "build_provider_catalog"]
