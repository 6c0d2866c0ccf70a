# src/llm/client_factory.py — v3
"""Factories: LLM client from provider name, summary provider from settings.

Adapters are registered by class path and imported lazily, so a missing
vendor SDK only matters when that provider is actually selected.
"""

from __future__ import annotations

import importlib
import logging

from sitedigest.config.settings import Settings
from sitedigest.llm.base_client import BaseLLMClient
from sitedigest.llm.providers.llm_provider import LLMSummaryProvider
from sitedigest.llm.retry import RetryConfig

logger = logging.getLogger(__name__)

# Registry of provider name → adapter class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "ollama": "sitedigest.llm.adapters.ollama_adapter.OllamaAdapter",
    "openai": "sitedigest.llm.adapters.openai_adapter.OpenAIAdapter",
    "google": "sitedigest.llm.adapters.google_adapter.GoogleAdapter",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def create_llm_client(
    provider: str,
    model: str,
    settings: Settings | None = None,
    **kwargs: object,
) -> BaseLLMClient:
    """Instantiate the correct adapter from provider name.

    Args:
        provider: Provider identifier (ollama, openai, google).
        model: Model name (e.g. llama3.1, gpt-4o-mini).
        settings: Application settings (for API keys / base URL).
        **kwargs: Additional provider-specific arguments.

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    if provider not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported LLM provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    adapter_cls = _import_class(_PROVIDER_REGISTRY[provider])

    init_kwargs = dict(kwargs)
    init_kwargs["model"] = model

    if settings is not None:
        if provider == "openai":
            init_kwargs.setdefault("api_key", settings.openai_api_key)
        elif provider == "google":
            init_kwargs.setdefault("api_key", settings.google_api_key)
        elif provider == "ollama":
            init_kwargs.setdefault("base_url", settings.ollama_base_url)

    logger.debug("Creating LLM client: provider=%s, model=%s", provider, model)
    return adapter_cls(**init_kwargs)


def create_summary_provider(
    provider: str | None = None,
    model: str | None = None,
    settings: Settings | None = None,
    client: BaseLLMClient | None = None,
) -> LLMSummaryProvider:
    """Build a summary provider with its own breaker and retry policy.

    Provider and model fall back to LLM_DEFAULT_PROVIDER / LLM_DEFAULT_MODEL.
    A prebuilt *client* skips adapter lookup.
    """
    settings = settings or Settings()
    provider = provider or settings.llm_default_provider
    model = model or settings.llm_default_model
    if client is None:
        client = create_llm_client(provider, model, settings)

    retry_config = RetryConfig(
        max_attempts=settings.retry_max_attempts,
        base_delay_s=settings.retry_base_delay_s,
        backoff_factor=settings.retry_backoff_factor,
        max_delay_s=settings.retry_max_delay_s,
    )
    return LLMSummaryProvider(
        client,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        retry_config=retry_config,
        failure_threshold=settings.breaker_failure_threshold,
        breaker_timeout_s=settings.breaker_timeout_s,
    )


def register_provider(name: str, class_path: str) -> None:
    """Register a custom provider adapter.

    Args:
        name: Provider identifier.
        class_path: Fully qualified class path implementing BaseLLMClient.
    """
    _PROVIDER_REGISTRY[name] = class_path
    logger.info("Registered LLM provider: %s → %s", name, class_path)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
