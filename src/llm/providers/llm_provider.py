# src/llm/providers/llm_provider.py — v1
"""Summary provider backed by any BaseLLMClient adapter.

Builds the batch and description prompts, hands raw completions to the
resilient invoker together with the validator chain, and maps validated
JSON back to plain strings.
"""

from __future__ import annotations

import logging
from typing import Any

from sitedigest.core.models import PageRecord, PageSummary
from sitedigest.llm.base_client import BaseLLMClient
from sitedigest.llm.base_provider import BaseSummaryProvider
from sitedigest.llm.models import Message
from sitedigest.llm.validators import (
    ValidationFailure,
    make_count_validator,
    parse_json_response,
    validate_description_field,
    validate_is_list,
    validate_summary_fields,
)

logger = logging.getLogger(__name__)

_BATCH_PROMPT = """You are a technical documentation summarizer. Your task is to create concise summaries for multiple web pages.

{pages}

Instructions:
- Create a summary for EACH page in 2-3 sentences
- Focus on the main purpose and key information
- Use clear, professional language
- Do not include meta information like "this page describes"
- Write in present tense
- Return ONLY a valid JSON array with exactly {count} objects
- Each object must have a "summary" field with the summary text
- Maintain the SAME ORDER as the pages above

Example format:
[{{"summary": "First page summary here"}}, {{"summary": "Second page summary here"}}]

JSON Response:"""

_DESCRIPTION_PROMPT = """You are analyzing a website based on summaries of its pages. Create a brief, comprehensive description of what this website offers.

Page summaries:
{summaries}

Instructions:
- Write a single paragraph (2-4 sentences)
- Describe the overall purpose and main topics of the website
- Be concise and informative
- Use professional language
- Do not mention "this website" or similar phrases, write directly about the content
- Return ONLY a valid JSON object of the form {{"description": "..."}}

JSON Response:"""


def build_batch_prompt(pages: list[PageRecord]) -> str:
    pages_text = "\n\n".join(
        f"Page {idx}:\nTitle: {page.title}\nURL: {page.url}\nContent:\n{page.content}\n"
        for idx, page in enumerate(pages, start=1)
    )
    return _BATCH_PROMPT.format(pages=pages_text, count=len(pages))


def build_description_prompt(pages: list[PageSummary]) -> str:
    summaries = "\n".join(
        f"{idx}. {page.title}: {page.summary}" for idx, page in enumerate(pages, start=1)
    )
    return _DESCRIPTION_PROMPT.format(summaries=summaries)


def parse_batch_response(text: str, attempt: int) -> Any:
    """Parse a batch response, unwrapping ``{"summaries": [...]}`` objects.

    JSON-mode backends may only emit top-level objects, so a single-key
    wrapper around the array is accepted.
    """
    parsed = parse_json_response(text, attempt)
    if isinstance(parsed, ValidationFailure):
        return parsed
    if isinstance(parsed, dict) and len(parsed) == 1:
        (inner,) = parsed.values()
        if isinstance(inner, list):
            return inner
    return parsed


class LLMSummaryProvider(BaseSummaryProvider):
    """BaseSummaryProvider over a chat-completion client."""

    def __init__(
        self,
        client: BaseLLMClient,
        temperature: float = 0.2,
        max_tokens: int = 4096,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("name", f"{client.provider_name}:{client.model}")
        super().__init__(**kwargs)
        self.client = client
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def generate_batch_summaries(self, pages: list[PageRecord]) -> list[str]:
        if not pages:
            return []
        prompt = build_batch_prompt(pages)

        summaries = await self.invoker.invoke(
            self._completion(json_mode=False),
            prompt,
            validators=[
                validate_is_list,
                make_count_validator(len(pages)),
                validate_summary_fields,
            ],
            operation=f"batch summaries ({len(pages)} pages)",
            parse=parse_batch_response,
            transform=lambda items: [item["summary"].strip() for item in items],
        )
        logger.debug("Generated %d summaries in batch", len(summaries))
        return summaries

    async def generate_description(self, pages: list[PageSummary]) -> str:
        prompt = build_description_prompt(pages)

        description = await self.invoker.invoke(
            self._completion(json_mode=True),
            prompt,
            validators=[validate_description_field],
            operation="site description",
            transform=lambda result: result["description"].strip(),
        )
        logger.info("Generated website description from %d page summaries", len(pages))
        return description

    def _completion(self, json_mode: bool):
        async def call(prompt: str, attempt: int) -> str:
            logger.debug(
                "LLM call via %s (attempt %d, %d chars)", self.name, attempt, len(prompt),
            )
            response = await self.client.complete(
                [Message(role="user", content=prompt)],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                json_mode=json_mode,
            )
            return response.content

        return call
