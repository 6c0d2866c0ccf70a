# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings: LLM backend,
pipeline sizing, resilience policy, cache backend and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sitedigest.core.errors import SiteDigestError


class ConfigurationError(SiteDigestError):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === LLM PROVIDERS ===
    llm_default_provider: str = "ollama"
    llm_default_model: str = "llama3.1"
    llm_temperature: float = 0.2
    llm_max_tokens: int = 4096

    # Provider API keys
    openai_api_key: str = ""
    google_api_key: str = ""
    ollama_base_url: str = "http://localhost:11434"

    # === Pipeline ===
    batch_size: int = 5
    fetch_concurrency: int = 10
    page_limit: int | None = None
    max_content_words: int = 3000
    fetch_timeout_s: float = 15.0
    user_agent: str = "LLMs.txt Generator Bot/1.0"

    # === Resilience ===
    breaker_failure_threshold: int = 5
    breaker_timeout_s: float = 30.0
    retry_max_attempts: int = 3
    retry_base_delay_s: float = 1.0
    retry_backoff_factor: float = 2.0
    retry_max_delay_s: float = 8.0

    # === Cache ===
    cache_enabled: bool = True
    cache_backend: Literal["memory", "json", "redis"] = "json"
    cache_root: Path = Path("~/.sitedigest/cache")
    cache_redis_url: str = ""
    cache_ttl_seconds: int = 86_400

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator(
        "batch_size",
        "fetch_concurrency",
        "max_content_words",
        "breaker_failure_threshold",
        "retry_max_attempts",
    )
    @classmethod
    def validate_positive(cls, v: int, info) -> int:  # noqa: N805
        if v < 1:
            raise ValueError(f"{info.field_name} must be >= 1")
        return v

    @field_validator("page_limit")
    @classmethod
    def validate_page_limit(cls, v: int | None) -> int | None:  # noqa: N805
        if v is not None and v < 1:
            raise ValueError("page_limit must be >= 1 when set")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.cache_enabled and self.cache_backend == "redis" and not self.cache_redis_url:
            errors.append("CACHE_BACKEND=redis requires CACHE_REDIS_URL")

        if self.retry_max_delay_s < self.retry_base_delay_s:
            errors.append("RETRY_MAX_DELAY_S must be >= RETRY_BASE_DELAY_S")

        if self.breaker_timeout_s <= 0:
            errors.append("BREAKER_TIMEOUT_S must be > 0")

        if self.fetch_timeout_s <= 0:
            errors.append("FETCH_TIMEOUT_S must be > 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-run config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
