# src/core/errors.py — v1
"""Base exception hierarchy shared by every sitedigest module.

Error philosophy:
  - ResourceUnavailableError → absorbed per page: becomes a failure PageRecord.
  - LLM validation errors    → repaired and retried by the resilient invoker.
  - CircuitBreakerOpen        → surfaces to whoever drives the run.
  - Cache errors              → logged and treated as a miss, never raised.
"""

from __future__ import annotations


class SiteDigestError(Exception):
    """Base exception for all sitedigest errors."""


class ResourceUnavailableError(SiteDigestError):
    """An external resource could not be fetched.

    Covers DNS failures, timeouts, refused connections, non-2xx statuses and
    redirects that land on a different host (ISP hijack pages).
    """

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"{reason} ({url})")
