# src/sources/base_source.py — v1
"""Abstract URL source interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AsyncIterator


class BaseUrlSource(ABC):
    """Lazily yields the page URLs of a site."""

    @abstractmethod
    def list_urls(self, site: str) -> AsyncIterator[str]:
        """Yield page URLs for *site*, possibly unbounded, without duplicates."""

    async def close(self) -> None:
        """Release network resources."""
