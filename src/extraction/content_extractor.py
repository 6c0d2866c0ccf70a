# src/extraction/content_extractor.py — v1
"""HTTP content extractor: fetch a page and reduce it to readable text.

trafilatura does the readability pass; a BeautifulSoup heuristic over
<main>/<article> takes over when it returns nothing. Text is whitespace
collapsed and truncated to the first MAX_CONTENT_WORDS words.
"""

from __future__ import annotations

import logging
import re

import httpx
import trafilatura
from bs4 import BeautifulSoup

from sitedigest.core.errors import ResourceUnavailableError
from sitedigest.core.models import ExtractedContent
from sitedigest.core.urls import same_host
from sitedigest.extraction.base_extractor import BaseContentExtractor

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "LLMs.txt Generator Bot/1.0"
DEFAULT_TIMEOUT_S = 15.0
DEFAULT_MAX_WORDS = 3000
UNTITLED = "Untitled"

_WS_RE = re.compile(r"\s+")


def clean_text(text: str, max_words: int = DEFAULT_MAX_WORDS) -> str:
    """Collapse whitespace and keep at most *max_words* words."""
    words = _WS_RE.sub(" ", text).strip().split(" ")
    if len(words) > max_words:
        words = words[:max_words]
    return " ".join(w for w in words if w)


def _extract_title(soup: BeautifulSoup) -> str:
    if soup.title and soup.title.string:
        return soup.title.string.strip()
    h1 = soup.find("h1")
    if h1 is not None:
        return h1.get_text(" ", strip=True)
    return ""


def _bs4_fallback(soup: BeautifulSoup) -> str:
    """Readable text from structural containers, minus page chrome."""
    for tag in soup(["script", "style", "noscript", "nav", "footer", "header"]):
        tag.decompose()
    container = soup.find("main") or soup.find("article") or soup.body or soup
    return container.get_text(separator=" ", strip=True)


def extract_from_html(html: str, url: str, max_words: int = DEFAULT_MAX_WORDS) -> ExtractedContent:
    """Extract title and readable text from an HTML document.

    Raises:
        ResourceUnavailableError: If no readable text remains.
    """
    soup = BeautifulSoup(html, "html.parser")
    title = _extract_title(soup)

    text = trafilatura.extract(
        html,
        url=url,
        include_links=False,
        include_images=False,
        include_tables=True,
        no_fallback=False,
    )
    if not text:
        text = _bs4_fallback(soup)

    content = clean_text(text or "", max_words)
    if not content:
        raise ResourceUnavailableError(url, "No readable content extracted")
    return ExtractedContent(title=title or UNTITLED, content=content)


class HttpContentExtractor(BaseContentExtractor):
    """Fetches pages with httpx.AsyncClient and extracts readable text."""

    def __init__(
        self,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        user_agent: str = DEFAULT_USER_AGENT,
        max_words: int = DEFAULT_MAX_WORDS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._timeout = timeout_s
        self._user_agent = user_agent
        self._max_words = max_words
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

    async def fetch_html(self, url: str) -> str:
        """GET *url* and return its body.

        Raises:
            ResourceUnavailableError: On network errors, non-2xx statuses, empty
                bodies or a redirect that lands on another host.
        """
        client = self._get_client()
        try:
            response = await client.get(url)
        except httpx.TimeoutException as e:
            raise ResourceUnavailableError(url, f"Request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise ResourceUnavailableError(url, f"Request failed: {e}") from e

        final_url = str(response.url)
        if not same_host(url, final_url):
            raise ResourceUnavailableError(
                url, f"Domain mismatch after redirect to {final_url}",
            )
        if not response.is_success:
            raise ResourceUnavailableError(url, f"HTTP {response.status_code}")
        if not response.text:
            raise ResourceUnavailableError(url, "Empty response body")
        return response.text

    async def extract(self, url: str) -> ExtractedContent:
        html = await self.fetch_html(url)
        content = extract_from_html(html, url, self._max_words)
        logger.debug("Extracted %d chars from %s", len(content.content), url)
        return content

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
