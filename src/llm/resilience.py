# src/llm/resilience.py — v2
"""Resilient invoker: breaker gating + validate-and-repair retry loop.

Two tiers of failure handling:
  - validation failures are self-inflicted (the model ignored the format),
    so the prompt is repaired and the call retried up to max_attempts;
  - infrastructural failures come from the backend itself, so they go
    straight up: the breaker counts them and the caller decides what to do.

Each attempt yields either a parsed value or a ValidationFailure value; the
loop matches on that. A failure crosses the breaker boundary as an
LLMValidationError so the breaker ignores it, and is turned back into a
value right there.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable

from sitedigest.llm.circuit_breaker import CircuitBreaker
from sitedigest.llm.retry import RetryConfig, compute_delay
from sitedigest.llm.validators import (
    LLMValidationError,
    ValidationFailure,
    Validator,
    parse_json_response,
    run_validators,
)

logger = logging.getLogger(__name__)

RawCall = Callable[[str, int], Awaitable[str]]


def build_repair_prompt(original_prompt: str, failure: ValidationFailure) -> str:
    """Derive the next attempt's prompt from the previous failure."""
    if failure.kind == "invalid_field" and failure.index is not None:
        return (
            f"{original_prompt}\n\nIMPORTANT: Each item in the array MUST have a "
            f'"{failure.field or "summary"}" field with a string value. Invalid item at '
            f"index {failure.index} in previous attempt."
        )
    if failure.kind == "count_mismatch":
        hint = (
            f"Return EXACTLY {failure.expected} items, one per page, in the same order "
            f"(previous attempt returned {failure.received})."
        )
    else:
        hint = "Ensure all required fields are present and have correct types."

    invalid = _render_response(failure.response)
    return (
        f"**CRITICAL ERROR - Attempt {failure.attempt}**:\n"
        "Your previous response did not match the required format.\n\n"
        f"Invalid response received:\n{invalid}\n\n"
        "Requirements:\n"
        "1. Return ONLY valid JSON matching the exact structure specified in the original request\n"
        "2. NO markdown code blocks (no ```json)\n"
        "3. NO additional text or explanations outside the JSON\n"
        f"4. {hint}\n\n"
        f"Original request:\n{original_prompt}"
    )


def _render_response(response: Any) -> str:
    if isinstance(response, str):
        return response
    try:
        return json.dumps(response, indent=2, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(response)


class ResilientInvoker:
    """Runs one logical LLM operation with breaker gating and prompt repair."""

    def __init__(self, breaker: CircuitBreaker, retry_config: RetryConfig | None = None) -> None:
        self.breaker = breaker
        self.retry_config = retry_config or RetryConfig()

    async def invoke(
        self,
        call: RawCall,
        prompt: str,
        validators: list[Validator] | None = None,
        operation: str = "LLM operation",
        parse: Callable[[str, int], Any] = parse_json_response,
        transform: Callable[[Any], Any] | None = None,
    ) -> Any:
        """Call *call* until its output passes *validators*.

        Args:
            call: Raw operation ``(prompt, attempt) -> str``.
            prompt: Initial prompt.
            validators: Ordered validator chain run on the parsed value.
            operation: Label used in log messages.
            parse: Turns the raw string into a value or a ValidationFailure.
            transform: Optional mapping applied to the validated value.

        Returns:
            The validated (and transformed) result.

        Raises:
            LLMValidationError: Last failure once max_attempts is reached.
            CircuitBreakerOpen: If the breaker rejects an attempt.
            Exception: Any infrastructural error from *call*, unretried.
        """
        validators = validators or []
        max_attempts = self.retry_config.max_attempts
        current_prompt = prompt
        attempt = 0

        while True:
            attempt += 1
            outcome = await self._attempt(call, current_prompt, attempt, validators, parse)

            if not isinstance(outcome, ValidationFailure):
                if attempt > 1:
                    logger.info("%s succeeded on attempt %d", operation, attempt)
                return transform(outcome) if transform else outcome

            if attempt >= max_attempts:
                logger.error(
                    "%s failed validation after %d attempts: %s",
                    operation, attempt, outcome.message,
                )
                raise outcome.to_error()

            logger.warning(
                "Validation failed for %s (%s, attempt %d/%d): %s",
                operation, outcome.kind, attempt, max_attempts, outcome.message,
            )
            current_prompt = build_repair_prompt(prompt, outcome)

            delay = compute_delay(self.retry_config, attempt)
            if delay > 0:
                logger.debug("Retrying %s in %.1fs", operation, delay)
                await asyncio.sleep(delay)

    async def _attempt(
        self,
        call: RawCall,
        prompt: str,
        attempt: int,
        validators: list[Validator],
        parse: Callable[[str, int], Any],
    ) -> Any:
        """One gated call; returns the parsed value or a ValidationFailure.

        Parsing and validation run inside the breaker so a defective
        response is reported as ignored, never as a success.
        """

        async def gated() -> Any:
            raw = await call(prompt, attempt)
            parsed = parse(raw, attempt)
            if isinstance(parsed, ValidationFailure):
                raise parsed.to_error()
            failure = run_validators(parsed, validators, attempt)
            if failure is not None:
                raise failure.to_error()
            return parsed

        try:
            return await self.breaker.call(gated)
        except LLMValidationError as e:
            return e.failure.model_copy(update={"attempt": attempt})
