"""Analysis result cache."""
from ecoscore.services.cache.store import (
    CACHE_TTL_SECONDS,
    ResultCache,
    RedisResultCache,
    build_cache_key,
)

__all__ = [
    "CACHE_TTL_SECONDS",
    "ResultCache",
    "RedisResultCache",
    "build_cache_key",
]
