# src/api/models.py — v2
"""Public API input models.

The run result type, SiteDigest, lives in core.models with the other
domain types.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class DigestOptions(BaseModel):
    """Per-run overrides on top of Settings. None = use the setting."""

    provider: str | None = None
    model: str | None = None
    limit: int | None = Field(default=None, ge=1)
    batch_size: int | None = Field(default=None, ge=1)
    concurrency: int | None = Field(default=None, ge=1)
    output_path: Path | None = None
