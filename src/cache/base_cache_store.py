# src/cache/base_cache_store.py — v3
"""Abstract cache store interface.

Entries are opaque strings addressed by ``(scope, field)``; a scope groups
the fields of one site/model pair so a backend can expire them together.
Backends raise on I/O errors; CacheGateway is the layer that absorbs them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseCacheStore(ABC):
    """Unified interface for cache storage backends."""

    @abstractmethod
    async def get(self, scope: str, field: str) -> str | None:
        """Return the stored value, or None when absent or expired."""

    @abstractmethod
    async def set(self, scope: str, field: str, value: str) -> None:
        """Store *value*, overwriting any previous one."""

    async def close(self) -> None:
        """Release backend resources."""
