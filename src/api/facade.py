# src/api/facade.py — v3
"""Public API facade — single entry point for site digestion.

Usage:
    from sitedigest.api.facade import generate_site_digest
    digest = await generate_site_digest("example.com")
    print(digest.output)
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sitedigest.api.models import DigestOptions
from sitedigest.cache.gateway import CacheGateway
from sitedigest.config.settings import Settings
from sitedigest.core.errors import SiteDigestError
from sitedigest.core.models import SiteDigest
from sitedigest.core.urls import hostname_of, normalize_site
from sitedigest.logging.context import clear_context, set_run_context
from sitedigest.output.llms_txt import format_llms_txt, write_llms_txt
from sitedigest.pipeline.page_processor import PageProcessor, ProgressCallback

if TYPE_CHECKING:
    from sitedigest.cache.base_cache_store import BaseCacheStore
    from sitedigest.extraction.base_extractor import BaseContentExtractor
    from sitedigest.llm.base_provider import BaseSummaryProvider
    from sitedigest.sources.base_source import BaseUrlSource

logger = logging.getLogger(__name__)


async def generate_site_digest(
    site: str,
    options: DigestOptions | None = None,
    settings: Settings | None = None,
    cache_store: BaseCacheStore | None = None,
    url_source: BaseUrlSource | None = None,
    extractor: BaseContentExtractor | None = None,
    provider: BaseSummaryProvider | None = None,
    on_progress: ProgressCallback | None = None,
) -> SiteDigest:
    """Summarize a site end-to-end and render its llms.txt.

    This is the main public API. It wires the pipeline:
      1. Resolve settings and per-run options
      2. Build cache, sitemap source, extractor and provider (unless injected)
      3. Process pages batch by batch
      4. Generate (or reuse) the site description
      5. Render llms.txt and optionally write it to disk

    Args:
        site: Hostname or any URL of the site.
        options: Per-run overrides (provider, model, limit, batch size...).
        settings: Global settings. Loaded from .env if None.
        cache_store: Cache backend. Built from settings if None.
        url_source: URL source. SitemapUrlSource if None.
        extractor: Content extractor. HttpContentExtractor if None.
        provider: Summary provider. Built from settings/options if None.
        on_progress: Called as ``(processed, total)`` after each batch.

    Returns:
        SiteDigest with page summaries, failures and the llms.txt text.

    Raises:
        SiteDigestError: If no page could be summarized.
        CircuitBreakerOpen, LLMValidationError, LLMClientError: From the
            provider; the run is aborted.
    """
    settings = settings or Settings()
    options = options or DigestOptions()

    root = normalize_site(site)
    hostname = hostname_of(root)
    provider_name = options.provider or settings.llm_default_provider
    model = options.model or settings.llm_default_model
    model_id = f"{provider_name}:{model}"
    run_id = _generate_run_id(hostname)

    set_run_context(hostname, run_id)
    logger.info("Starting digest: site=%s, model=%s, run_id=%s", hostname, model_id, run_id)

    owned: list[object] = []
    try:
        if cache_store is None:
            gateway = CacheGateway(_build_cache_store(settings))
            owned.append(gateway)
        else:
            gateway = CacheGateway(cache_store)
        if url_source is None:
            from sitedigest.sources.sitemap import SitemapUrlSource

            url_source = SitemapUrlSource(
                timeout_s=settings.fetch_timeout_s, user_agent=settings.user_agent,
            )
            owned.append(url_source)
        if extractor is None:
            from sitedigest.extraction.content_extractor import HttpContentExtractor

            extractor = HttpContentExtractor(
                timeout_s=settings.fetch_timeout_s,
                user_agent=settings.user_agent,
                max_words=settings.max_content_words,
            )
            owned.append(extractor)
        if provider is None:
            from sitedigest.llm.client_factory import create_summary_provider

            provider = create_summary_provider(provider_name, model, settings)

        processor = PageProcessor(url_source, extractor, gateway)
        records = await processor.process_pages(
            root,
            model_id,
            provider,
            batch_size=options.batch_size or settings.batch_size,
            limit=options.limit or settings.page_limit,
            concurrency=options.concurrency or settings.fetch_concurrency,
            on_progress=on_progress,
        )

        summarized = [r for r in records if r.is_success and r.summary is not None]
        failures = [r for r in records if r.is_failure]
        if not summarized:
            raise SiteDigestError(
                f"No pages of {hostname} could be summarized "
                f"({len(failures)} failed, {len(records)} processed)"
            )

        description = await processor.process_description(model_id, root, provider, records)
        pages = [r.to_summary() for r in summarized]
        output = format_llms_txt(hostname, description, pages)

        if options.output_path is not None:
            path = write_llms_txt(options.output_path, output)
            logger.info("Wrote llms.txt to %s", path)

        logger.info(
            "Digest complete: site=%s, pages=%d, failures=%d",
            hostname, len(pages), len(failures),
        )
        return SiteDigest(
            hostname=hostname,
            description=description,
            pages=pages,
            failures=failures,
            output=output,
        )
    finally:
        for resource in owned:
            await _close_quietly(resource)
        clear_context()


async def _close_quietly(resource: object) -> None:
    """Close an owned resource; a failing close never masks the run outcome."""
    try:
        await resource.close()  # type: ignore[attr-defined]
    except Exception as e:
        logger.warning("Failed to close %s: %s", type(resource).__name__, e)


def _build_cache_store(settings: Settings) -> BaseCacheStore:
    """Configured backend, or a run-local memory store when caching is off."""
    if not settings.cache_enabled:
        from sitedigest.cache.memory_store import MemoryCacheStore

        return MemoryCacheStore()
    from sitedigest.cache.cache_factory import create_cache_store

    return create_cache_store(settings)


def _generate_run_id(hostname: str) -> str:
    """Generate a run ID: yyyymmdd_hhmmss_{uuid5}."""
    ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    run_uuid = uuid.uuid5(uuid.NAMESPACE_DNS, f"{hostname}_{ts}_{uuid.uuid4().hex}")
    return f"{ts}_{run_uuid.hex[:12]}"
