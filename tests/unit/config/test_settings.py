# tests/unit/config/test_settings.py — v2
"""Tests for config/settings.py — typed Settings and validation rules."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from sitedigest.config.settings import ConfigurationError, Settings, load_settings


class TestSettingsDefaults:
    def test_default_provider(self):
        s = Settings(_env_file=None)
        assert s.llm_default_provider == "ollama"
        assert s.llm_default_model == "llama3.1"

    def test_default_pipeline(self):
        s = Settings(_env_file=None)
        assert s.batch_size == 5
        assert s.fetch_concurrency == 10
        assert s.page_limit is None
        assert s.max_content_words == 3000

    def test_default_cache(self):
        s = Settings(_env_file=None)
        assert s.cache_enabled is True
        assert s.cache_backend == "json"
        assert s.cache_ttl_seconds == 86_400

    def test_default_resilience(self):
        s = Settings(_env_file=None)
        assert s.breaker_failure_threshold == 5
        assert s.breaker_timeout_s == 30.0
        assert s.retry_max_attempts == 3


class TestSettingsEnvironment:
    def test_reads_env(self, monkeypatch):
        monkeypatch.setenv("BATCH_SIZE", "8")
        monkeypatch.setenv("CACHE_BACKEND", "memory")
        s = Settings(_env_file=None)
        assert s.batch_size == 8
        assert s.cache_backend == "memory"

    def test_reads_env_file(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("LLM_DEFAULT_PROVIDER=openai\nCACHE_ROOT=/tmp/sd\n")
        s = Settings(_env_file=env)
        assert s.llm_default_provider == "openai"
        assert s.cache_root == Path("/tmp/sd")


class TestSettingsValidation:
    def test_redis_without_url(self):
        with pytest.raises(ConfigurationError, match="CACHE_REDIS_URL"):
            Settings(_env_file=None, cache_backend="redis")

    def test_redis_without_url_ok_when_cache_disabled(self):
        s = Settings(_env_file=None, cache_backend="redis", cache_enabled=False)
        assert s.cache_enabled is False

    def test_max_delay_below_base(self):
        with pytest.raises(ConfigurationError, match="RETRY_MAX_DELAY_S"):
            Settings(_env_file=None, retry_base_delay_s=5.0, retry_max_delay_s=1.0)

    def test_breaker_timeout(self):
        with pytest.raises(ConfigurationError, match="BREAKER_TIMEOUT_S"):
            Settings(_env_file=None, breaker_timeout_s=0)

    def test_fetch_timeout(self):
        with pytest.raises(ConfigurationError, match="FETCH_TIMEOUT_S"):
            Settings(_env_file=None, fetch_timeout_s=-1)

    def test_errors_joined(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(_env_file=None, breaker_timeout_s=0, fetch_timeout_s=0)
        assert "; " in str(exc_info.value)

    @pytest.mark.parametrize("field", ["batch_size", "fetch_concurrency", "retry_max_attempts"])
    def test_positive_fields(self, field):
        with pytest.raises(ValidationError, match=field):
            Settings(_env_file=None, **{field: 0})

    def test_page_limit(self):
        with pytest.raises(ValidationError, match="page_limit"):
            Settings(_env_file=None, page_limit=0)

    def test_unknown_backend(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, cache_backend="sqlite")


class TestLoadSettings:
    def test_with_overrides(self):
        s = load_settings(_env_file=None, log_level="DEBUG", batch_size=2)
        assert s.log_level == "DEBUG"
        assert s.batch_size == 2
