# src/llm/base_client.py — v2
"""Abstract LLM client interface.

Adapters wrap one vendor SDK each and translate any SDK/transport failure
into LLMClientError, which the circuit breaker counts as an
infrastructural failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from sitedigest.core.errors import SiteDigestError
from sitedigest.llm.models import LLMResponse, Message


class LLMClientError(SiteDigestError):
    """Raised when a call to an LLM backend fails at the API/network level."""

    def __init__(self, message: str, provider: str) -> None:
        self.provider = provider
        super().__init__(message)


class BaseLLMClient(ABC):
    """Unified interface for all LLM providers."""

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.2,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Text completion."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (ollama, openai, google)."""

    @property
    @abstractmethod
    def model(self) -> str:
        """Model name the adapter sends requests to."""
