"""
Analysis Result Cache

Redis-based storage of full analysis payloads, keyed by normalized product
name and user locale. The engine itself is cache-agnostic; only the
analysis orchestrator reads and writes through this module.
"""

import json
from typing import Any, Dict, Optional, Protocol, runtime_checkable

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

from ecoscore.services.classification.normalizer import normalize

logger = structlog.get_logger(__name__)

# =============================================================================
# Redis Key Constants
# =============================================================================

CACHE_KEY_PREFIX = "analysis:"
CACHE_TTL_SECONDS = 24 * 60 * 60  # 24 hours
DEFAULT_LOCALE = "en-us"


def build_cache_key(product_name: str, locale: Optional[str] = None) -> str:
    """Cache key from normalized product name and lowercased locale."""
    locale_part = (locale or DEFAULT_LOCALE).strip().lower() or DEFAULT_LOCALE
    return f"{CACHE_KEY_PREFIX}{normalize(product_name)}:{locale_part}"


@runtime_checkable
class ResultCache(Protocol):
    """Key/value store with TTL for analysis payloads."""

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        ...

    async def set(self, key: str, value: Dict[str, Any], ttl_seconds: Optional[int] = None) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...


class RedisResultCache:
    """ResultCache backed by Redis string keys with expiry.

    Cache failures are logged and treated as misses so an unavailable
    Redis never fails an analysis.
    """

    def __init__(self, redis: Redis, ttl_seconds: int = CACHE_TTL_SECONDS):
        self.redis = redis
        self.ttl_seconds = ttl_seconds
        self._log = logger.bind(component="RedisResultCache")

    @classmethod
    def from_url(cls, url: str, ttl_seconds: int = CACHE_TTL_SECONDS) -> "RedisResultCache":
        return cls(Redis.from_url(url, decode_responses=True), ttl_seconds)

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            raw = await self.redis.get(key)
        except RedisError as e:
            self._log.warning("cache_read_failed", key=key, error=str(e))
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            self._log.warning("cache_entry_corrupt", key=key)
            return None

    async def set(self, key: str, value: Dict[str, Any], ttl_seconds: Optional[int] = None) -> None:
        try:
            await self.redis.set(
                key,
                json.dumps(value, ensure_ascii=False),
                ex=ttl_seconds or self.ttl_seconds,
            )
        except RedisError as e:
            self._log.warning("cache_write_failed", key=key, error=str(e))

    async def delete(self, key: str) -> None:
        try:
            await self.redis.delete(key)
        except RedisError as e:
            self._log.warning("cache_delete_failed", key=key, error=str(e))

    async def close(self) -> None:
        await self.redis.aclose()
