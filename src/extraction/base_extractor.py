# src/extraction/base_extractor.py — v2
"""Abstract content extractor interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from sitedigest.core.models import ExtractedContent


class BaseContentExtractor(ABC):
    """Turns a page URL into its title and readable text."""

    @abstractmethod
    async def extract(self, url: str) -> ExtractedContent:
        """Fetch *url* and extract its readable content.

        Raises:
            ResourceUnavailableError: If the page cannot be fetched or read.
        """

    async def close(self) -> None:
        """Release network resources."""
