# src/llm/validators.py — v1
"""Validator chain for LLM responses.

Validators are plain functions ``(result, attempt) -> ValidationFailure | None``.
They never raise: a defect in an otherwise successful response is returned
as a tagged ValidationFailure value so the resilient invoker can decide how
to repair the prompt. LLMValidationError is only raised once the invoker
gives up, carrying the last failure.

Failure kinds:
  count_mismatch → array has the wrong number of items
  invalid_field  → an item lacks a required non-empty string field
  malformed      → not JSON, or JSON of the wrong shape
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Literal

from pydantic import BaseModel

from sitedigest.core.errors import SiteDigestError

FailureKind = Literal["count_mismatch", "invalid_field", "malformed"]

_FENCE_RE = re.compile(r"```(?:json)?\s*\n([\s\S]*?)\n?```")


class ValidationFailure(BaseModel):
    """A semantic defect found in an LLM response."""

    kind: FailureKind
    message: str
    attempt: int
    expected: int | None = None
    received: int | None = None
    index: int | None = None
    field: str | None = None
    item: Any = None
    response: Any = None

    def to_error(self) -> LLMValidationError:
        """Build the exception raised when retries are exhausted."""
        error_cls = _ERRORS_BY_KIND.get(self.kind, LLMValidationError)
        return error_cls(self)


class LLMValidationError(SiteDigestError):
    """LLM output failed validation. Not an infrastructure failure."""

    def __init__(self, failure: ValidationFailure) -> None:
        self.failure = failure
        self.attempt = failure.attempt
        super().__init__(failure.message)


class LLMResponseCountMismatch(LLMValidationError):
    """Wrong number of items in a batch response."""

    @property
    def expected(self) -> int | None:
        return self.failure.expected

    @property
    def received(self) -> int | None:
        return self.failure.received


class LLMInvalidSummaryField(LLMValidationError):
    """An item is missing its required field or has the wrong type."""

    @property
    def index(self) -> int | None:
        return self.failure.index


class LLMMalformedResponse(LLMValidationError):
    """Response is not parseable JSON or has the wrong overall shape."""


_ERRORS_BY_KIND: dict[str, type[LLMValidationError]] = {
    "count_mismatch": LLMResponseCountMismatch,
    "invalid_field": LLMInvalidSummaryField,
    "malformed": LLMMalformedResponse,
}

Validator = Callable[[Any, int], "ValidationFailure | None"]


def count_mismatch(expected: int, received: int, response: Any, attempt: int) -> ValidationFailure:
    return ValidationFailure(
        kind="count_mismatch",
        message=f"Expected {expected} summaries, got {received}",
        attempt=attempt,
        expected=expected,
        received=received,
        response=response,
    )


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def extract_json_from_markdown(text: str) -> str:
    """Return the body of the first ```json fenced block, or the stripped text."""
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def parse_json_response(text: str, attempt: int) -> Any:
    """Parse raw LLM output as JSON, tolerating markdown code fences.

    Returns:
        The parsed value, or a ``malformed`` ValidationFailure.
    """
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        pass
    try:
        return json.loads(extract_json_from_markdown(text or ""))
    except json.JSONDecodeError as e:
        preview = (text or "")[:200]
        return ValidationFailure(
            kind="malformed",
            message=f"Failed to parse LLM response as JSON: {e}. Response: {preview}...",
            attempt=attempt,
            response=text,
        )


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------


def validate_is_list(result: Any, attempt: int) -> ValidationFailure | None:
    """Response must be a JSON array."""
    if not isinstance(result, list):
        return ValidationFailure(
            kind="malformed",
            message=f"Expected a JSON array, got {type(result).__name__}",
            attempt=attempt,
            response=result,
        )
    return None


def make_count_validator(expected: int) -> Validator:
    """Build a validator checking the array holds exactly *expected* items."""

    def validate_count(result: Any, attempt: int) -> ValidationFailure | None:
        if not isinstance(result, list):
            return validate_is_list(result, attempt)
        if len(result) != expected:
            return count_mismatch(expected, len(result), result, attempt)
        return None

    return validate_count


def validate_summary_fields(result: Any, attempt: int) -> ValidationFailure | None:
    """Every item must be an object with a non-empty string ``summary``."""
    if not isinstance(result, list):
        return None  # shape is validate_is_list's job
    for idx, item in enumerate(result):
        if not isinstance(item, dict):
            return ValidationFailure(
                kind="invalid_field",
                message=f"Invalid item at index {idx}: not an object",
                attempt=attempt,
                index=idx,
                field="summary",
                item=item,
                response=result,
            )
        summary = item.get("summary")
        if not isinstance(summary, str) or not summary.strip():
            return ValidationFailure(
                kind="invalid_field",
                message=f'Invalid summary at index {idx}: missing or invalid "summary" field',
                attempt=attempt,
                index=idx,
                field="summary",
                item=item,
                response=result,
            )
    return None


def validate_description_field(result: Any, attempt: int) -> ValidationFailure | None:
    """Response must be an object with a non-empty string ``description``."""
    if not isinstance(result, dict):
        return ValidationFailure(
            kind="malformed",
            message=f"Expected object with description field, got {type(result).__name__}",
            attempt=attempt,
            response=result,
        )
    description = result.get("description")
    if not isinstance(description, str) or not description.strip():
        return ValidationFailure(
            kind="invalid_field",
            message='Missing or invalid "description" field in response',
            attempt=attempt,
            field="description",
            item=result,
            response=result,
        )
    return None


def validate_string_list(result: Any, attempt: int) -> ValidationFailure | None:
    """Response must be an array of non-empty strings."""
    if not isinstance(result, list):
        return validate_is_list(result, attempt)
    for idx, item in enumerate(result):
        if not isinstance(item, str) or not item:
            return ValidationFailure(
                kind="invalid_field",
                message=f"Invalid string at index {idx}",
                attempt=attempt,
                index=idx,
                item=item,
                response=result,
            )
    return None


def run_validators(
    result: Any, validators: list[Validator], attempt: int,
) -> ValidationFailure | None:
    """Run *validators* in order and return the first failure, if any."""
    for validator in validators:
        failure = validator(result, attempt)
        if failure is not None:
            return failure
    return None
