# src/cache/gateway.py — v1
"""Read-through cache gateway used by the page processor.

The cache is an optimisation, never a correctness dependency: store read
errors are logged and treated as misses, write errors are logged and
dropped. Only errors raised by the caller's own ``compute`` propagate.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable
from urllib.parse import urlsplit

from sitedigest.cache.base_cache_store import BaseCacheStore

logger = logging.getLogger(__name__)

DESCRIPTION_FIELD = "__description__"


class _Missing:
    """Sentinel type for a cache miss without compute."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def build_scope(model_id: str, hostname: str) -> str:
    """Cache scope shared by every page of one site under one model."""
    return f"summary:{model_id}:{hostname}"


def split_url(url: str) -> tuple[str, str]:
    """Return ``(hostname, path)`` where path keeps the query string."""
    parts = urlsplit(url)
    path = parts.path or "/"
    if parts.query:
        path = f"{path}?{parts.query}"
    return (parts.hostname or "", path)


class CacheGateway:
    """Read-through access to a BaseCacheStore that never raises on store errors."""

    def __init__(self, store: BaseCacheStore) -> None:
        self.store = store

    async def get(
        self,
        scope: str,
        field: str,
        compute: Callable[[], Awaitable[str]] | None = None,
    ) -> Any:
        """Return the cached value, computing and storing it on a miss.

        Returns:
            The cached or computed value, or MISSING on a miss without
            *compute*.
        """
        try:
            value = await self.store.get(scope, field)
        except Exception as e:
            logger.warning("Cache read failed for %s/%s: %s", scope, field, e)
            value = None

        if value is not None:
            logger.debug("Cache hit: %s/%s", scope, field)
            return value

        if compute is None:
            return MISSING

        value = await compute()
        await self.set(scope, field, value)
        return value

    async def set(self, scope: str, field: str, value: str) -> None:
        """Overwrite the entry; failures are logged and ignored."""
        try:
            await self.store.set(scope, field, value)
        except Exception as e:
            logger.warning("Cache write failed for %s/%s: %s", scope, field, e)

    async def close(self) -> None:
        try:
            await self.store.close()
        except Exception as e:
            logger.warning("Cache close failed: %s", e)
