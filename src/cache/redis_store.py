# src/cache/redis_store.py — v3
"""Redis-based cache store (CACHE_BACKEND=redis).

Requires 'redis' package: pip install redis.
Each scope is one Redis hash (HGET/HSET); every write refreshes the hash
TTL with EXPIRE, so a site's summaries expire together.
Suitable for distributed/multi-instance deployments.
"""

from __future__ import annotations

import logging
from typing import Any

from sitedigest.cache.base_cache_store import BaseCacheStore

logger = logging.getLogger(__name__)

_KEY_PREFIX = "sitedigest:"


class RedisCacheStore(BaseCacheStore):
    """Redis-backed cache store for distributed deployments."""

    def __init__(
        self,
        redis_url: str = "",
        ttl_seconds: int | None = None,
        client: Any = None,
    ) -> None:
        if client is None:
            try:
                import redis.asyncio as aioredis
            except ImportError as e:
                raise ImportError(
                    "redis package required: pip install redis"
                ) from e
            client = aioredis.Redis.from_url(redis_url, decode_responses=True)

        self._client = client
        self._ttl = ttl_seconds

    async def get(self, scope: str, field: str) -> str | None:
        """Read one field of the scope hash."""
        value = await self._client.hget(self._key(scope), field)
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    async def set(self, scope: str, field: str, value: str) -> None:
        """Write one field and refresh the scope TTL."""
        key = self._key(scope)
        await self._client.hset(key, field, value)
        if self._ttl:
            await self._client.expire(key, self._ttl)

    async def close(self) -> None:
        """Close the Redis connection."""
        await self._client.aclose()

    @staticmethod
    def _key(scope: str) -> str:
        return f"{_KEY_PREFIX}{scope}"
