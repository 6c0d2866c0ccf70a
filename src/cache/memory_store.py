# src/cache/memory_store.py — v2
"""In-process cache store (CACHE_BACKEND=memory).

Lives as long as the process; mostly useful for one-shot CLI runs and
tests.
"""

from __future__ import annotations

import time
from typing import Callable

from sitedigest.cache.base_cache_store import BaseCacheStore


class MemoryCacheStore(BaseCacheStore):
    """Dict-backed cache store with optional per-scope TTL."""

    def __init__(
        self, ttl_seconds: int | None = None, clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._scopes: dict[str, dict[str, str]] = {}
        self._expires_at: dict[str, float] = {}

    async def get(self, scope: str, field: str) -> str | None:
        if self._expired(scope):
            self._drop(scope)
            return None
        return self._scopes.get(scope, {}).get(field)

    async def set(self, scope: str, field: str, value: str) -> None:
        if self._expired(scope):
            self._drop(scope)
        self._scopes.setdefault(scope, {})[field] = value
        if self._ttl:
            self._expires_at[scope] = self._clock() + self._ttl

    def _expired(self, scope: str) -> bool:
        deadline = self._expires_at.get(scope)
        return deadline is not None and self._clock() >= deadline

    def _drop(self, scope: str) -> None:
        self._scopes.pop(scope, None)
        self._expires_at.pop(scope, None)
