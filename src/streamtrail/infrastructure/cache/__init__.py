from .ttl_cache import TtlCache

__all__ = ["TtlCache"]
