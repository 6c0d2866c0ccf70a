# tests/unit/llm/test_adapters.py — v1
"""Tests for llm/adapters — SDK calls are mocked on the cached client."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from sitedigest.llm.adapters.google_adapter import GoogleAdapter
from sitedigest.llm.adapters.ollama_adapter import OllamaAdapter
from sitedigest.llm.adapters.openai_adapter import OpenAIAdapter
from sitedigest.llm.base_client import BaseLLMClient, LLMClientError
from sitedigest.llm.models import Message

MESSAGES = [Message(role="user", content="hello")]


class TestBaseLLMClient:
    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            BaseLLMClient()  # type: ignore[abstract]


class TestOllamaAdapter:
    @pytest.mark.asyncio
    async def test_complete_json_mode(self):
        adapter = OllamaAdapter(model="llama3.1")
        adapter._client = MagicMock()
        adapter._client.chat = AsyncMock(return_value={
            "message": {"content": '{"a": 1}'},
            "prompt_eval_count": 12,
            "eval_count": 3,
        })

        resp = await adapter.complete(MESSAGES, system="sys", json_mode=True)

        assert resp.content == '{"a": 1}'
        assert resp.input_tokens == 12 and resp.output_tokens == 3
        assert resp.provider == "ollama"
        kwargs = adapter._client.chat.await_args.kwargs
        assert kwargs["format"] == "json"
        assert kwargs["messages"][0] == {"role": "system", "content": "sys"}
        assert kwargs["options"]["num_predict"] == 4096

    @pytest.mark.asyncio
    async def test_sdk_error_wrapped(self):
        adapter = OllamaAdapter()
        adapter._client = MagicMock()
        adapter._client.chat = AsyncMock(side_effect=ConnectionError("refused"))
        with pytest.raises(LLMClientError, match="refused") as exc_info:
            await adapter.complete(MESSAGES)
        assert exc_info.value.provider == "ollama"

    def test_identity(self):
        adapter = OllamaAdapter(model="mistral")
        assert (adapter.provider_name, adapter.model) == ("ollama", "mistral")


class TestOpenAIAdapter:
    @pytest.mark.asyncio
    async def test_complete(self):
        adapter = OpenAIAdapter(model="gpt-4o-mini", api_key="sk-test")
        completion = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="[]"))],
            usage=SimpleNamespace(prompt_tokens=5, completion_tokens=2),
        )
        adapter._client = MagicMock()
        adapter._client.chat.completions.create = AsyncMock(return_value=completion)

        resp = await adapter.complete(MESSAGES, json_mode=True)

        assert resp.content == "[]"
        assert resp.input_tokens == 5
        kwargs = adapter._client.chat.completions.create.await_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["model"] == "gpt-4o-mini"

    @pytest.mark.asyncio
    async def test_sdk_error_wrapped(self):
        adapter = OpenAIAdapter()
        adapter._client = MagicMock()
        adapter._client.chat.completions.create = AsyncMock(side_effect=RuntimeError("429"))
        with pytest.raises(LLMClientError):
            await adapter.complete(MESSAGES)


class TestGoogleAdapter:
    @pytest.mark.asyncio
    async def test_complete(self):
        adapter = GoogleAdapter(model="gemini-2.0-flash", api_key="k")
        response = SimpleNamespace(
            text='{"description": "d"}',
            usage_metadata=SimpleNamespace(prompt_token_count=7, candidates_token_count=4),
        )
        adapter._client = MagicMock()
        adapter._client.aio.models.generate_content = AsyncMock(return_value=response)

        resp = await adapter.complete(MESSAGES, json_mode=True)

        assert resp.content == '{"description": "d"}'
        assert (resp.input_tokens, resp.output_tokens) == (7, 4)
        kwargs = adapter._client.aio.models.generate_content.await_args.kwargs
        assert kwargs["config"]["response_mime_type"] == "application/json"
        assert kwargs["contents"][0]["parts"][0]["text"] == "hello"

    @pytest.mark.asyncio
    async def test_sdk_error_wrapped(self):
        adapter = GoogleAdapter()
        adapter._client = MagicMock()
        adapter._client.aio.models.generate_content = AsyncMock(side_effect=ValueError("quota"))
        with pytest.raises(LLMClientError) as exc_info:
            await adapter.complete(MESSAGES)
        assert exc_info.value.provider == "google"
