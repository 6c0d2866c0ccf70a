# src/logging/context.py — v2
"""Contextual logging support: attach site, run_id and batch to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per site run.
_site: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "site", default=None
)
_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_batch: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "batch", default=None
)


@dataclass
class LogContext:
    """Snapshot of current logging context."""

    site: str | None = None
    run_id: str | None = None
    batch: int | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(site=_site.get(), run_id=_run_id.get(), batch=_batch.get())


def set_run_context(site: str, run_id: str) -> None:
    """Set run-level context (called once per site run)."""
    _site.set(site)
    _run_id.set(run_id)
    _batch.set(None)


def set_batch_context(batch: int | None) -> None:
    """Set the index of the batch currently being processed."""
    _batch.set(batch)


def clear_context() -> None:
    """Reset all context variables."""
    _site.set(None)
    _run_id.set(None)
    _batch.set(None)
