# src/sources/sitemap.py — v2
"""Sitemap URL source.

Discovery follows robots.txt: every ``Sitemap:`` line is a sitemap to read;
without any (or without a readable robots.txt) ``/sitemap.xml`` is used.
``<sitemapindex>`` documents are followed recursively. URLs are yielded
lazily and deduplicated across all sitemaps of the run.
"""

from __future__ import annotations

import logging
import urllib.robotparser
import xml.etree.ElementTree as ET
from typing import AsyncIterator

import httpx

from sitedigest.core.urls import normalize_site
from sitedigest.extraction.content_extractor import DEFAULT_USER_AGENT
from sitedigest.sources.base_source import BaseUrlSource

logger = logging.getLogger(__name__)

MAX_INDEX_DEPTH = 5


def _local(tag: str) -> str:
    """Strip the XML namespace from a tag name."""
    return tag.rsplit("}", 1)[-1]


def parse_robots_sitemaps(robots_txt: str) -> list[str]:
    """Return the ``Sitemap:`` URLs declared in a robots.txt body, deduplicated."""
    parser = urllib.robotparser.RobotFileParser()
    parser.parse(robots_txt.splitlines())
    return list(dict.fromkeys(parser.site_maps() or []))


def parse_sitemap(xml_text: str) -> tuple[str, list[str]]:
    """Parse a sitemap document.

    Returns:
        ``(kind, locs)`` where kind is ``"urlset"`` or ``"sitemapindex"``.

    Raises:
        ET.ParseError: If the document is not well-formed XML.
    """
    root = ET.fromstring(xml_text)
    kind = _local(root.tag)
    locs = [
        el.text.strip()
        for el in root.iter()
        if _local(el.tag) == "loc" and el.text and el.text.strip()
    ]
    return kind, locs


class SitemapUrlSource(BaseUrlSource):
    """Streams page URLs from a site's sitemaps."""

    def __init__(
        self,
        timeout_s: float = 15.0,
        user_agent: str = DEFAULT_USER_AGENT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._timeout = timeout_s
        self._user_agent = user_agent
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"User-Agent": self._user_agent},
                timeout=self._timeout,
                follow_redirects=True,
            )
        return self._client

    async def discover_sitemaps(self, site: str) -> list[str]:
        """Sitemap URLs from robots.txt, or the conventional /sitemap.xml."""
        root = normalize_site(site)
        default = [f"{root}/sitemap.xml"]
        try:
            response = await self._get_client().get(f"{root}/robots.txt")
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Error fetching robots.txt from %s: %s", root, e)
            return default

        sitemaps = parse_robots_sitemaps(response.text)
        if not sitemaps:
            logger.warning("No sitemaps found in robots.txt for %s, using default", root)
            return default
        logger.info("Found %d sitemaps for %s", len(sitemaps), root)
        return sitemaps

    async def list_urls(self, site: str) -> AsyncIterator[str]:
        seen: set[str] = set()
        visited: set[str] = set()
        for sitemap_url in await self.discover_sitemaps(site):
            async for url in self._walk(sitemap_url, visited, depth=0):
                if url not in seen:
                    seen.add(url)
                    yield url

    async def _walk(self, sitemap_url: str, visited: set[str], depth: int) -> AsyncIterator[str]:
        if sitemap_url in visited:
            return
        visited.add(sitemap_url)
        if depth > MAX_INDEX_DEPTH:
            logger.warning("Sitemap index nesting too deep, skipping %s", sitemap_url)
            return

        logger.info("Fetching sitemap: %s", sitemap_url)
        try:
            response = await self._get_client().get(sitemap_url)
            response.raise_for_status()
            kind, locs = parse_sitemap(response.text)
        except (httpx.HTTPError, ET.ParseError) as e:
            logger.error("Error fetching sitemap %s: %s", sitemap_url, e)
            return

        if kind == "sitemapindex":
            for child in locs:
                async for url in self._walk(child, visited, depth + 1):
                    yield url
        else:
            for url in locs:
                yield url

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
