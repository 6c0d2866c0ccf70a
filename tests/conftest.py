# tests/conftest.py — v2
"""Shared test fixtures for all unit tests.

Provides fake URL sources, extractors and summary providers, a mock LLM
client, a controllable clock and temp directories.
No external dependencies — all I/O is mocked.
"""

from __future__ import annotations

from pathlib import Path
from typing import AsyncIterator
from unittest.mock import AsyncMock

import pytest

from sitedigest.cache.gateway import CacheGateway
from sitedigest.cache.memory_store import MemoryCacheStore
from sitedigest.core.errors import ResourceUnavailableError
from sitedigest.core.models import ExtractedContent, PageRecord, PageSummary
from sitedigest.extraction.base_extractor import BaseContentExtractor
from sitedigest.llm.base_provider import BaseSummaryProvider
from sitedigest.llm.models import LLMResponse
from sitedigest.llm.retry import NO_DELAY
from sitedigest.sources.base_source import BaseUrlSource


# === FAKES ===


class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUrlSource(BaseUrlSource):
    """Yields a fixed URL list and counts how many were pulled."""

    def __init__(self, urls: list[str]) -> None:
        self.urls = urls
        self.pulled = 0

    async def list_urls(self, site: str) -> AsyncIterator[str]:
        for url in self.urls:
            self.pulled += 1
            yield url


class FakeExtractor(BaseContentExtractor):
    """Returns canned content; URLs listed in *failing* raise."""

    def __init__(self, failing: set[str] | None = None) -> None:
        self.failing = failing or set()
        self.calls: list[str] = []

    async def extract(self, url: str) -> ExtractedContent:
        self.calls.append(url)
        if url in self.failing:
            raise ResourceUnavailableError(url, "HTTP 404")
        return ExtractedContent(title=f"Title {url.rsplit('/', 1)[-1]}", content=f"Content of {url}")


class FakeProvider(BaseSummaryProvider):
    """Deterministic provider recording every batch it receives."""

    def __init__(self, name: str = "fake", **kwargs) -> None:
        super().__init__(name, retry_config=NO_DELAY, **kwargs)
        self.batches: list[list[str]] = []
        self.description_calls: list[list[PageSummary]] = []
        self.error: Exception | None = None
        self.drop_last = False

    async def generate_batch_summaries(self, pages: list[PageRecord]) -> list[str]:
        self.batches.append([p.url for p in pages])
        if self.error is not None:
            raise self.error
        summaries = [f"{p.title} summary" for p in pages]
        return summaries[:-1] if self.drop_last else summaries

    async def generate_description(self, pages: list[PageSummary]) -> str:
        self.description_calls.append(pages)
        return f"A site with {len(pages)} pages."


def site_urls(count: int, host: str = "example.com") -> list[str]:
    return [f"https://{host}/page{i}" for i in range(count)]


# === FIXTURES: Fakes ===


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_url_source():
    """Factory: FakeUrlSource over *count* example.com URLs."""
    def _make(count: int = 0, urls: list[str] | None = None) -> FakeUrlSource:
        return FakeUrlSource(urls if urls is not None else site_urls(count))
    return _make


@pytest.fixture
def fake_extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def memory_store() -> MemoryCacheStore:
    return MemoryCacheStore()


@pytest.fixture
def cache_gateway(memory_store: MemoryCacheStore) -> CacheGateway:
    return CacheGateway(memory_store)


# === FIXTURES: Mock LLM ===


@pytest.fixture
def mock_llm_response() -> LLMResponse:
    """Standard mock LLM response."""
    return LLMResponse(
        content='{"description": "Test description"}',
        input_tokens=100,
        output_tokens=50,
        model="llama3.1",
        provider="ollama",
        latency_ms=500,
    )


@pytest.fixture
def mock_llm_client(mock_llm_response: LLMResponse) -> AsyncMock:
    """Mock BaseLLMClient with default response."""
    client = AsyncMock()
    client.complete = AsyncMock(return_value=mock_llm_response)
    client.provider_name = "mock"
    client.model = "mock-model"
    return client


def llm_reply(content: str) -> LLMResponse:
    return LLMResponse(content=content, model="mock-model", provider="mock")


@pytest.fixture
def reply():
    """Factory: wrap raw text into an LLMResponse."""
    return llm_reply


# === FIXTURES: Temp dirs ===


@pytest.fixture
def tmp_output_dir(tmp_path: Path) -> Path:
    """Temporary output directory."""
    out = tmp_path / "output"
    out.mkdir()
    return out


@pytest.fixture
def tmp_cache_dir(tmp_path: Path) -> Path:
    """Temporary cache directory."""
    cache = tmp_path / "cache"
    cache.mkdir()
    return cache
