# tests/unit/extraction/test_content_extractor.py — v1
"""Tests for extraction/content_extractor.py.

``respx`` patches ``httpx`` at the transport layer so no real network calls
are made.
"""

from __future__ import annotations

from unittest.mock import patch

import httpx
import pytest
import respx

from sitedigest.core.errors import ResourceUnavailableError
from sitedigest.extraction.base_extractor import BaseContentExtractor
from sitedigest.extraction.content_extractor import (
    UNTITLED,
    HttpContentExtractor,
    clean_text,
    extract_from_html,
)

ARTICLE_HTML = """
<html>
  <head><title>Getting Started</title></head>
  <body>
    <nav>Home | Docs | Blog</nav>
    <main>
      <h1>Getting Started</h1>
      <p>This guide explains how to install the toolkit and run your first
      project. It covers configuration files, environment variables and the
      command line interface in detail.</p>
      <p>After installation you can generate a project skeleton, add modules
      and deploy the result to any server that runs a recent interpreter.</p>
    </main>
    <footer>Copyright 2024</footer>
  </body>
</html>
"""


class TestCleanText:
    def test_collapses_whitespace(self):
        assert clean_text("  a \n\n b\t c  ") == "a b c"

    def test_truncates_words(self):
        assert clean_text("one two three four", max_words=2) == "one two"

    def test_empty(self):
        assert clean_text("   ") == ""


class TestExtractFromHtml:
    def test_title_and_content(self):
        result = extract_from_html(ARTICLE_HTML, "https://example.com/start")
        assert result.title == "Getting Started"
        assert "install the toolkit" in result.content

    def test_h1_when_no_title(self):
        html = "<html><body><h1>Heading</h1><p>Some body text here.</p></body></html>"
        assert extract_from_html(html, "https://example.com/").title == "Heading"

    def test_untitled(self):
        html = "<html><body><p>Some body text here.</p></body></html>"
        assert extract_from_html(html, "https://example.com/").title == UNTITLED

    def test_bs4_fallback_drops_chrome(self):
        with patch("sitedigest.extraction.content_extractor.trafilatura.extract", return_value=None):
            result = extract_from_html(ARTICLE_HTML, "https://example.com/start")
        assert "install the toolkit" in result.content
        assert "Copyright" not in result.content
        assert "Home | Docs" not in result.content

    def test_word_limit(self):
        result = extract_from_html(ARTICLE_HTML, "https://example.com/start", max_words=5)
        assert len(result.content.split(" ")) <= 5

    def test_no_text_raises(self):
        with pytest.raises(ResourceUnavailableError, match="No readable content"):
            extract_from_html("<html><body></body></html>", "https://example.com/")


class TestHttpContentExtractor:
    def test_is_extractor(self):
        assert issubclass(HttpContentExtractor, BaseContentExtractor)

    @pytest.mark.asyncio
    async def test_success(self):
        extractor = HttpContentExtractor()
        with respx.mock:
            respx.get("https://example.com/start").mock(
                return_value=httpx.Response(200, text=ARTICLE_HTML),
            )
            result = await extractor.extract("https://example.com/start")
        await extractor.close()
        assert result.title == "Getting Started"

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        extractor = HttpContentExtractor()
        with respx.mock:
            respx.get("https://example.com/missing").mock(return_value=httpx.Response(404))
            with pytest.raises(ResourceUnavailableError, match="HTTP 404") as exc_info:
                await extractor.extract("https://example.com/missing")
        await extractor.close()
        assert exc_info.value.url == "https://example.com/missing"

    @pytest.mark.asyncio
    async def test_empty_body(self):
        extractor = HttpContentExtractor()
        with respx.mock:
            respx.get("https://example.com/blank").mock(return_value=httpx.Response(200, text=""))
            with pytest.raises(ResourceUnavailableError, match="Empty response body"):
                await extractor.extract("https://example.com/blank")
        await extractor.close()

    @pytest.mark.asyncio
    async def test_timeout(self):
        extractor = HttpContentExtractor()
        with respx.mock:
            respx.get("https://slow.example.com/").mock(side_effect=httpx.ConnectTimeout("slow"))
            with pytest.raises(ResourceUnavailableError, match="timed out"):
                await extractor.extract("https://slow.example.com/")
        await extractor.close()

    @pytest.mark.asyncio
    async def test_redirect_to_other_host_rejected(self):
        extractor = HttpContentExtractor()
        with respx.mock:
            respx.get("https://example.com/out").mock(
                return_value=httpx.Response(301, headers={"Location": "https://other.org/landing"}),
            )
            respx.get("https://other.org/landing").mock(
                return_value=httpx.Response(200, text=ARTICLE_HTML),
            )
            with pytest.raises(ResourceUnavailableError, match="Domain mismatch"):
                await extractor.extract("https://example.com/out")
        await extractor.close()

    @pytest.mark.asyncio
    async def test_redirect_to_www_allowed(self):
        extractor = HttpContentExtractor()
        with respx.mock:
            respx.get("https://example.com/start").mock(
                return_value=httpx.Response(301, headers={"Location": "https://www.example.com/start"}),
            )
            respx.get("https://www.example.com/start").mock(
                return_value=httpx.Response(200, text=ARTICLE_HTML),
            )
            result = await extractor.extract("https://example.com/start")
        await extractor.close()
        assert result.title == "Getting Started"

    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self):
        client = httpx.AsyncClient()
        extractor = HttpContentExtractor(client=client)
        await extractor.close()
        assert not client.is_closed
        await client.aclose()
