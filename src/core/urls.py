# src/core/urls.py — v1
"""Site URL helpers shared by sources, extraction and the processor."""

from __future__ import annotations

from urllib.parse import urlsplit


def normalize_site(site: str) -> str:
    """Return ``scheme://host`` for a bare hostname or any URL on the site.

    Raises:
        ValueError: If no hostname can be derived.
    """
    site = site.strip()
    if "://" not in site:
        site = f"https://{site}"
    parts = urlsplit(site)
    if not parts.hostname:
        raise ValueError(f"Invalid site: {site!r}")
    return f"{parts.scheme}://{parts.netloc}"


def hostname_of(url: str) -> str:
    """Lower-cased hostname of *url* (bare hostnames accepted)."""
    return urlsplit(normalize_site(url)).hostname or ""


def same_host(a: str, b: str) -> bool:
    """True when both URLs point at the same host, ignoring a leading 'www.'."""
    def strip(host: str) -> str:
        return host[4:] if host.startswith("www.") else host

    return strip(hostname_of(a)) == strip(hostname_of(b))
