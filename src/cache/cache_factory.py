# src/cache/cache_factory.py — v3
"""Factory for cache store instantiation."""

from __future__ import annotations

from sitedigest.cache.base_cache_store import BaseCacheStore
from sitedigest.config.settings import Settings


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to the in-memory backend.

    Returns:
        Configured BaseCacheStore implementation.
    """
    if settings is None:
        from sitedigest.cache.memory_store import MemoryCacheStore
        return MemoryCacheStore()

    backend = settings.cache_backend
    ttl = settings.cache_ttl_seconds

    if backend == "memory":
        from sitedigest.cache.memory_store import MemoryCacheStore
        return MemoryCacheStore(ttl_seconds=ttl)

    if backend == "json":
        from sitedigest.cache.json_store import JsonCacheStore
        return JsonCacheStore(cache_root=settings.cache_root, ttl_seconds=ttl)

    if backend == "redis":
        from sitedigest.cache.redis_store import RedisCacheStore
        if not settings.cache_redis_url:
            raise ValueError(
                "CACHE_REDIS_URL must be set when CACHE_BACKEND=redis"
            )
        return RedisCacheStore(redis_url=settings.cache_redis_url, ttl_seconds=ttl)

    raise ValueError(f"Unsupported cache backend: {backend!r}")
