# src/llm/retry.py — v2
"""Retry policy for validation-driven prompt repair.

Only validation failures are retried with this policy; infrastructural
errors are left to the circuit breaker and the caller.
"""

from __future__ import annotations

import random
from dataclasses import dataclass


@dataclass(frozen=True)
class RetryConfig:
    """Attempt cap and backoff between repaired attempts."""

    max_attempts: int = 3
    base_delay_s: float = 1.0
    backoff_factor: float = 2.0
    max_delay_s: float = 8.0
    jitter: bool = False

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay_s < 0:
            raise ValueError("base_delay_s must be >= 0")


NO_DELAY = RetryConfig(base_delay_s=0.0)


def compute_delay(config: RetryConfig, attempt: int) -> float:
    """Delay before the retry that follows *attempt* (1-based)."""
    delay = config.base_delay_s * (config.backoff_factor ** (attempt - 1))
    delay = min(delay, config.max_delay_s)
    if config.jitter:
        delay *= 0.5 + random.random()  # noqa: S311
    return delay
