# src/output/llms_txt.py — v1
"""Render a site digest in the llms.txt format.

    # example.com

    > Site description.

    ## Pages

    ### Page title
    URL: https://example.com/page

    Page summary.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from sitedigest.core.models import PageSummary


def format_llms_txt(hostname: str, description: str, pages: Iterable[PageSummary]) -> str:
    """Return the llms.txt document for *hostname*."""
    lines = [f"# {hostname}", "", f"> {description}", "", "## Pages", ""]
    for page in pages:
        lines.extend([f"### {page.title}", f"URL: {page.url}", "", page.summary, ""])
    return "\n".join(lines)


def write_llms_txt(path: str | Path, content: str) -> Path:
    """Write *content* to *path*, creating parent directories."""
    target = Path(path).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    return target
