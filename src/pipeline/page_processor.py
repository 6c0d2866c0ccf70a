# src/pipeline/page_processor.py — v1
"""Page processor: the only component that knows the whole pipeline.

Per batch, strictly one after another:
  1. fetch page contents with bounded concurrency (failures become
     failure records and never reach the provider);
  2. look each successful page up in the cache;
  3. send the remaining pages to the provider in one batch call;
  4. write freshly generated summaries back to the cache;
  5. report progress.

Provider errors (breaker open, validation exhausted, backend failure)
propagate and abort the run; fetch and cache errors are absorbed.
"""

from __future__ import annotations

import inspect
import logging
from typing import Awaitable, Callable, Union

from pydantic import ValidationError

from sitedigest.cache.gateway import (
    DESCRIPTION_FIELD,
    MISSING,
    CacheGateway,
    build_scope,
    split_url,
)
from sitedigest.core.errors import ResourceUnavailableError, SiteDigestError
from sitedigest.core.models import CachedSummary, PageRecord
from sitedigest.core.urls import hostname_of
from sitedigest.extraction.base_extractor import BaseContentExtractor
from sitedigest.llm.base_provider import BaseSummaryProvider
from sitedigest.llm.validators import count_mismatch
from sitedigest.logging.context import set_batch_context
from sitedigest.pipeline.batcher import batched, take
from sitedigest.pipeline.limiter import map_concurrent
from sitedigest.sources.base_source import BaseUrlSource

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], Union[None, Awaitable[None]]]

DEFAULT_CONCURRENCY = 10


class PageProcessor:
    """Streams a site's URLs through fetch, cache and batch generation."""

    def __init__(
        self,
        url_source: BaseUrlSource,
        extractor: BaseContentExtractor,
        cache: CacheGateway,
    ) -> None:
        self.url_source = url_source
        self.extractor = extractor
        self.cache = cache

    async def process_pages(
        self,
        site: str,
        model_id: str,
        provider: BaseSummaryProvider,
        batch_size: int,
        limit: int | None = None,
        concurrency: int = DEFAULT_CONCURRENCY,
        on_progress: ProgressCallback | None = None,
    ) -> list[PageRecord]:
        """Process up to *limit* URLs of *site* in batches of *batch_size*.

        Returns:
            One PageRecord per processed URL, in source order.

        Raises:
            CircuitBreakerOpen, LLMValidationError, LLMClientError: From the
                provider; the run stops at the failing batch.
        """
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")

        records: list[PageRecord] = []
        urls = take(self.url_source.list_urls(site), limit)
        batch_index = 0

        try:
            async for batch in batched(urls, batch_size):
                batch_index += 1
                set_batch_context(batch_index)
                batch_records = await self._process_batch(
                    batch, model_id, provider, concurrency,
                )
                records.extend(batch_records)
                await _report(on_progress, len(records), limit or len(records))
        finally:
            set_batch_context(None)

        failed = sum(1 for r in records if r.is_failure)
        logger.info(
            "Processed %d pages in %d batches (%d failed)", len(records), batch_index, failed,
        )
        return records

    async def process_description(
        self,
        model_id: str,
        site: str,
        provider: BaseSummaryProvider,
        records: list[PageRecord],
    ) -> str:
        """Return the site description, generating and caching it on a miss.

        Raises:
            SiteDigestError: If no record carries a summary.
        """
        pages = [r.to_summary() for r in records if r.is_success and r.summary is not None]
        if not pages:
            raise SiteDigestError(f"No summarized pages for {site}; cannot describe the site")

        scope = build_scope(model_id, hostname_of(site))

        async def generate() -> str:
            return await provider.generate_description(pages)

        return await self.cache.get(scope, DESCRIPTION_FIELD, compute=generate)

    # --- batch steps ---

    async def _process_batch(
        self,
        urls: list[str],
        model_id: str,
        provider: BaseSummaryProvider,
        concurrency: int,
    ) -> list[PageRecord]:
        logger.debug("Processing batch of %d URLs", len(urls))
        fetched = await map_concurrent(urls, self._fetch, concurrency)
        records = [
            record if record is not None else PageRecord.failure(url, "Content extraction failed")
            for url, record in zip(urls, fetched)
        ]

        for record in records:
            if record.is_success:
                await self._apply_cached(record, model_id)

        pending = [r for r in records if r.needs_summary]
        if pending:
            await self._generate(pending, model_id, provider)
        else:
            logger.debug("Batch fully served from cache or failed; provider not called")
        return records

    async def _fetch(self, url: str) -> PageRecord:
        try:
            content = await self.extractor.extract(url)
        except ResourceUnavailableError as e:
            logger.warning("Failed to extract content for %s: %s", url, e.reason)
            return PageRecord.failure(url, str(e))
        return PageRecord.success(url, content.title, content.content)

    async def _apply_cached(self, record: PageRecord, model_id: str) -> None:
        scope, path = _cache_key(record.url, model_id)
        raw = await self.cache.get(scope, path)
        if raw is MISSING:
            return
        try:
            cached = CachedSummary.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Ignoring corrupt cache entry for %s: %s", record.url, e)
            return
        record.attach_summary(cached.summary, title=cached.title)
        logger.debug("Cache hit for %s", record.url)

    async def _generate(
        self, pending: list[PageRecord], model_id: str, provider: BaseSummaryProvider,
    ) -> None:
        logger.debug("Generating %d summaries in batch (cache miss)", len(pending))
        summaries = await provider.generate_batch_summaries(pending)
        if len(summaries) != len(pending):
            raise count_mismatch(len(pending), len(summaries), summaries, attempt=1).to_error()

        for record, summary in zip(pending, summaries):
            record.attach_summary(summary)
            scope, path = _cache_key(record.url, model_id)
            entry = CachedSummary(title=record.title, summary=summary)
            await self.cache.set(scope, path, entry.model_dump_json())


def _cache_key(url: str, model_id: str) -> tuple[str, str]:
    hostname, path = split_url(url)
    return build_scope(model_id, hostname), path


async def _report(on_progress: ProgressCallback | None, processed: int, total: int) -> None:
    if on_progress is None:
        return
    result = on_progress(processed, total)
    if inspect.isawaitable(result):
        await result


