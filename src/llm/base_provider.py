# src/llm/base_provider.py — v1
"""Abstract summary provider: the generation capability the pipeline consumes.

Every provider instance owns exactly one CircuitBreaker and one
ResilientInvoker, so breaker state is per provider instance and never
shared between providers or processes.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from sitedigest.core.models import PageRecord, PageSummary
from sitedigest.llm.circuit_breaker import (
    DEFAULT_FAILURE_THRESHOLD,
    DEFAULT_TIMEOUT_SECONDS,
    CircuitBreaker,
)
from sitedigest.llm.resilience import ResilientInvoker
from sitedigest.llm.retry import RetryConfig

logger = logging.getLogger(__name__)


class BaseSummaryProvider(ABC):
    """Produces batch page summaries and a site-level description."""

    def __init__(
        self,
        name: str,
        retry_config: RetryConfig | None = None,
        failure_threshold: int = DEFAULT_FAILURE_THRESHOLD,
        breaker_timeout_s: float = DEFAULT_TIMEOUT_SECONDS,
        breaker: CircuitBreaker | None = None,
    ) -> None:
        self.name = name
        self.breaker = breaker or CircuitBreaker(
            name, failure_threshold=failure_threshold, timeout_seconds=breaker_timeout_s,
        )
        self.invoker = ResilientInvoker(self.breaker, retry_config)

    @abstractmethod
    async def generate_batch_summaries(self, pages: list[PageRecord]) -> list[str]:
        """Return one summary per page, in the same order as *pages*.

        Raises:
            LLMValidationError: Output still invalid after max attempts.
            CircuitBreakerOpen: Provider considered down.
            LLMClientError: Backend failure.
        """

    @abstractmethod
    async def generate_description(self, pages: list[PageSummary]) -> str:
        """Return a short description of the whole site from page summaries."""
