# src/__init__.py — v1
"""sitedigest: turn a website's sitemap into page summaries and an llms.txt."""

from sitedigest.version import __version__

__all__ = ["__version__"]
