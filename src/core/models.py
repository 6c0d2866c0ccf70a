# src/core/models.py — v2
"""Shared Pydantic domain models used across modules.

No module redefines these types — all imports come from core.models.

PageRecord is the unit that flows through the whole pipeline: it is created
when a fetch attempt completes, gets a summary attached once (from cache or
generation) and is returned to the caller at the end of the run.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


# === EXTRACTION ===


class ExtractedContent(BaseModel):
    """Readable content pulled out of a single web page."""

    title: str
    content: str


# === PAGE RECORD ===


class PageRecord(BaseModel):
    """Processing outcome for one URL.

    Exactly two variants exist and each has its own constructor:

    - ``PageRecord.success(url, title, content)`` — no error, summary
      initially absent;
    - ``PageRecord.failure(url, error)`` — error set, empty title/content,
      summary never set.

    Inconsistent combinations are rejected at construction and on
    assignment.
    """

    model_config = ConfigDict(validate_assignment=True)

    url: str = Field(frozen=True)
    status: Literal["success", "failure"] = Field(frozen=True)
    title: str = ""
    content: str = Field(default="", frozen=True)
    summary: str | None = None
    error: str | None = Field(default=None, frozen=True)

    @model_validator(mode="after")
    def _check_variant(self) -> PageRecord:
        if self.status == "success":
            if self.error is not None:
                raise ValueError("success record cannot carry an error")
        else:
            if not self.error:
                raise ValueError("failure record requires an error message")
            if self.title or self.content or self.summary is not None:
                raise ValueError("failure record cannot carry title, content or summary")
        return self

    @classmethod
    def success(
        cls, url: str, title: str, content: str, summary: str | None = None,
    ) -> PageRecord:
        return cls(url=url, status="success", title=title, content=content, summary=summary)

    @classmethod
    def failure(cls, url: str, error: str) -> PageRecord:
        return cls(url=url, status="failure", error=error)

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    @property
    def is_failure(self) -> bool:
        return self.status == "failure"

    @property
    def needs_summary(self) -> bool:
        """Successful and still waiting for a summary."""
        return self.is_success and self.summary is None

    def attach_summary(self, summary: str, title: str | None = None) -> None:
        """Set the summary exactly once, optionally replacing the title.

        Raises:
            ValueError: On a failure record or if a summary is already set.
        """
        if self.is_failure:
            raise ValueError(f"cannot attach a summary to failed page {self.url}")
        if self.summary is not None:
            raise ValueError(f"summary already set for {self.url}")
        if title:
            self.title = title
        self.summary = summary

    def to_summary(self) -> PageSummary:
        """Project a summarized success record into a PageSummary."""
        if self.summary is None:
            raise ValueError(f"page {self.url} has no summary")
        return PageSummary(url=self.url, title=self.title, summary=self.summary)


class PageSummary(BaseModel):
    """url/title/summary triple consumed by the description and llms.txt steps."""

    url: str
    title: str
    summary: str


class CachedSummary(BaseModel):
    """Serialized form of a page summary stored in the cache."""

    title: str
    summary: str


# === RUN RESULT ===


class SiteDigest(BaseModel):
    """Final product of a site run."""

    hostname: str
    description: str
    pages: list[PageSummary] = Field(default_factory=list)
    failures: list[PageRecord] = Field(default_factory=list)
    output: str = ""

    @property
    def page_count(self) -> int:
        return len(self.pages)
