# tests/unit/test_main.py — v2
"""Tests for main.py — CLI entry point."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from sitedigest.core.errors import SiteDigestError
from sitedigest.core.models import PageRecord, SiteDigest
from sitedigest.main import _build_parser, main


def _digest() -> SiteDigest:
    return SiteDigest(
        hostname="example.com",
        description="Docs.",
        pages=[],
        failures=[PageRecord.failure("https://example.com/x", "HTTP 404")],
        output="# example.com\n\n> Docs.\n",
    )


# ---------------------------------------------------------------------------
# Parser tests
# ---------------------------------------------------------------------------

class TestBuildParser:
    def test_version_flag(self):
        with pytest.raises(SystemExit) as exc_info:
            _build_parser().parse_args(["--version"])
        assert exc_info.value.code == 0

    def test_generate_defaults(self):
        args = _build_parser().parse_args(["generate", "example.com"])
        assert args.command == "generate"
        assert args.site == "example.com"
        assert args.provider is None
        assert args.limit is None
        assert args.output is None

    def test_generate_options(self):
        args = _build_parser().parse_args([
            "generate", "example.com", "--provider", "openai", "--model", "gpt-4o-mini",
            "--limit", "20", "--batch-size", "4", "--concurrency", "8", "-o", "out/llms.txt",
        ])
        assert args.provider == "openai"
        assert args.model == "gpt-4o-mini"
        assert (args.limit, args.batch_size, args.concurrency) == (20, 4, 8)
        assert args.output == Path("out/llms.txt")

    def test_rejects_non_positive(self):
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["generate", "example.com", "--limit", "0"])


# ---------------------------------------------------------------------------
# main() tests
# ---------------------------------------------------------------------------

@patch("sitedigest.main._setup_logging")
class TestMain:
    def test_no_command(self, _logging):
        assert main([]) == 1

    def test_generate_prints_to_stdout(self, _logging, capsys):
        run = AsyncMock(return_value=_digest())
        with patch("sitedigest.api.facade.generate_site_digest", run):
            assert main(["generate", "example.com", "--limit", "5"]) == 0

        captured = capsys.readouterr()
        assert captured.out.startswith("# example.com")
        assert "Failures:  1" in captured.err
        options = run.await_args.args[1]
        assert options.limit == 5

    def test_generate_with_output_keeps_stdout_clean(self, _logging, capsys, tmp_output_dir):
        target = tmp_output_dir / "llms.txt"
        run = AsyncMock(return_value=_digest())
        with patch("sitedigest.api.facade.generate_site_digest", run):
            assert main(["generate", "example.com", "-o", str(target)]) == 0

        captured = capsys.readouterr()
        assert captured.out == ""
        assert str(target) in captured.err
        assert run.await_args.args[1].output_path == target

    def test_failure_exit_code(self, _logging):
        run = AsyncMock(side_effect=SiteDigestError("nothing summarized"))
        with patch("sitedigest.api.facade.generate_site_digest", run):
            assert main(["generate", "example.com"]) == 1
