# src/llm/circuit_breaker.py — v2
"""Circuit breaker guarding calls to one generation provider.

Prevents cascading failures when an LLM backend is down by tracking
consecutive infrastructural failures and short-circuiting calls during
outages.

States:
  CLOSED    -- normal operation, calls pass through
  OPEN      -- backend considered down, calls fail immediately
  HALF_OPEN -- cooldown expired, a single trial call is allowed

Validation failures (LLMValidationError) are malformed-output problems
handled by prompt repair; they never change the breaker's state or count.
The OPEN → HALF_OPEN transition is lazy: it happens on the next call
attempt after the cooldown, not on a timer.
"""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Awaitable, Callable, TypeVar

from sitedigest.core.errors import SiteDigestError
from sitedigest.llm.validators import LLMValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_FAILURE_THRESHOLD = 5
DEFAULT_TIMEOUT_SECONDS = 30.0


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreakerOpen(SiteDigestError):
    """Raised when the circuit rejects a call without invoking it."""

    def __init__(self, name: str, retry_after: float):
        self.name = name
        self.retry_after = retry_after
        super().__init__(
            f"Circuit breaker OPEN for '{name}' - LLM service unavailable. "
            f"Retry after {retry_after:.0f}s."
        )


class CircuitBreaker:
    """Three-state breaker owned by a single provider instance.

    State changes go through a Lock so "check OPEN" and "move to HALF_OPEN"
    cannot interleave if the breaker is ever driven from several threads.
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = DEFAULT_FAILURE_THRESHOLD,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        ignore: tuple[type[BaseException], ...] = (LLMValidationError,),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be >= 1")
        self.name = name
        self._failure_threshold = failure_threshold
        self._timeout_seconds = timeout_seconds
        self._ignore = ignore
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._next_attempt_time = 0.0
        self._trial_in_flight = False
        self._lock = threading.Lock()

    @property
    def state(self) -> CircuitState:
        with self._lock:
            return self._state

    @property
    def failure_count(self) -> int:
        with self._lock:
            return self._failure_count

    @property
    def next_attempt_time(self) -> float:
        with self._lock:
            return self._next_attempt_time

    def check(self) -> None:
        """Reserve permission for one call. Raises CircuitBreakerOpen if denied."""
        with self._lock:
            if self._state == CircuitState.CLOSED:
                return
            if self._state == CircuitState.OPEN:
                now = self._clock()
                if now < self._next_attempt_time:
                    raise CircuitBreakerOpen(self.name, self._next_attempt_time - now)
                self._state = CircuitState.HALF_OPEN
                self._trial_in_flight = True
                logger.warning("Circuit %s: OPEN -> HALF_OPEN (cooldown expired)", self.name)
                return
            # HALF_OPEN: only one trial at a time
            if self._trial_in_flight:
                raise CircuitBreakerOpen(self.name, 0.0)
            self._trial_in_flight = True

    def record_success(self) -> None:
        """Record a successful call."""
        with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                logger.info("Circuit %s: HALF_OPEN -> CLOSED (trial succeeded)", self.name)
            self._state = CircuitState.CLOSED
            self._failure_count = 0
            self._trial_in_flight = False

    def record_failure(self) -> None:
        """Record an infrastructural failure."""
        with self._lock:
            self._failure_count += 1
            self._trial_in_flight = False
            if self._state == CircuitState.HALF_OPEN:
                self._open()
                logger.warning("Circuit %s: HALF_OPEN -> OPEN (trial failed)", self.name)
            elif self._failure_count >= self._failure_threshold:
                self._open()
                logger.error(
                    "Circuit %s: CLOSED -> OPEN after %d consecutive failures, retry in %.1fs",
                    self.name, self._failure_count, self._timeout_seconds,
                )

    def record_ignored(self) -> None:
        """Release the trial slot without touching state or count."""
        with self._lock:
            self._trial_in_flight = False

    def is_ignored(self, error: BaseException) -> bool:
        return isinstance(error, self._ignore)

    def _open(self) -> None:
        # caller holds the lock
        self._state = CircuitState.OPEN
        self._next_attempt_time = self._clock() + self._timeout_seconds

    async def call(self, fn: Callable[[], Awaitable[T]]) -> T:
        """Run *fn* through the breaker.

        Raises:
            CircuitBreakerOpen: If the circuit rejects the call.
            Exception: Whatever *fn* raised, after bookkeeping.
        """
        self.check()
        try:
            result = await fn()
        except BaseException as e:
            if self.is_ignored(e) or not isinstance(e, Exception):
                self.record_ignored()
            else:
                self.record_failure()
            raise
        self.record_success()
        return result
