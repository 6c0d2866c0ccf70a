# src/main.py — v2
"""CLI entry point — generate command.

Usage:
    sitedigest generate <site> [options]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from sitedigest.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        _setup_logging(args.verbose)
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="sitedigest",
        description=f"sitedigest v{__version__} — llms.txt generator for websites",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- generate ---
    p_generate = subparsers.add_parser(
        "generate", help="Summarize a site and produce its llms.txt",
    )
    p_generate.add_argument("site", help="Hostname or URL of the site")
    p_generate.add_argument(
        "--provider", default=None,
        help="LLM provider: ollama, openai, google (default: LLM_DEFAULT_PROVIDER)",
    )
    p_generate.add_argument(
        "--model", default=None,
        help="Model name (default: LLM_DEFAULT_MODEL)",
    )
    p_generate.add_argument(
        "--limit", type=_positive_int, default=None,
        help="Maximum number of pages to process",
    )
    p_generate.add_argument(
        "--batch-size", type=_positive_int, default=None,
        help="Pages per LLM call (default: BATCH_SIZE)",
    )
    p_generate.add_argument(
        "--concurrency", type=_positive_int, default=None,
        help="Concurrent page fetches (default: FETCH_CONCURRENCY)",
    )
    p_generate.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Write llms.txt to this file (default: stdout)",
    )
    p_generate.set_defaults(func=_cmd_generate)

    return parser


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return number


async def _cmd_generate(args: argparse.Namespace) -> int:
    """Execute one site digest."""
    from sitedigest.api.facade import generate_site_digest
    from sitedigest.api.models import DigestOptions

    options = DigestOptions(
        provider=args.provider,
        model=args.model,
        limit=args.limit,
        batch_size=args.batch_size,
        concurrency=args.concurrency,
        output_path=args.output,
    )

    def on_progress(processed: int, total: int) -> None:
        print(f"  processed {processed}/{total} pages", file=sys.stderr)

    logger.info("Generating llms.txt for %s", args.site)
    digest = await generate_site_digest(args.site, options, on_progress=on_progress)

    if args.output is None:
        print(digest.output)
    _print_result_summary(digest, args.output)
    return 0


def _print_result_summary(digest: object, output: Path | None) -> None:
    """Print a human-readable summary of a SiteDigest to stderr."""
    print("\nDigest complete:", file=sys.stderr)
    print(f"  Site:      {digest.hostname}", file=sys.stderr)
    print(f"  Pages:     {digest.page_count}", file=sys.stderr)
    print(f"  Failures:  {len(digest.failures)}", file=sys.stderr)
    if output is not None:
        print(f"  Output:    {output}", file=sys.stderr)


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage from settings."""
    from sitedigest.config.settings import Settings
    from sitedigest.logging.logger import setup_logging

    settings = Settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format="text",
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
