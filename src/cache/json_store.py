# src/cache/json_store.py — v3
"""JSON file-based cache store (default CACHE_BACKEND=json).

One JSON file per scope under CACHE_ROOT, mapping field → {value,
stored_at}. Entries older than the TTL are ignored on read and pruned on
the next write to that scope.
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
import time
from pathlib import Path
from typing import Any, Callable

from sitedigest.cache.base_cache_store import BaseCacheStore

logger = logging.getLogger(__name__)

_UNSAFE_RE = re.compile(r"[^A-Za-z0-9._-]+")


class JsonCacheStore(BaseCacheStore):
    """File-based cache store using JSON files."""

    def __init__(
        self,
        cache_root: Path | str,
        ttl_seconds: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._root = Path(cache_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)
        self._ttl = ttl_seconds
        self._clock = clock

    async def get(self, scope: str, field: str) -> str | None:
        """Retrieve a value, ignoring expired entries."""
        entry = self._read(scope).get(field)
        if not isinstance(entry, dict) or self._is_stale(entry):
            return None
        value = entry.get("value")
        return value if isinstance(value, str) else None

    async def set(self, scope: str, field: str, value: str) -> None:
        """Store a value and prune stale entries of the scope."""
        data = {k: v for k, v in self._read(scope).items() if isinstance(v, dict) and not self._is_stale(v)}
        data[field] = {"value": value, "stored_at": self._clock()}
        self._write(scope, data)

    def _is_stale(self, entry: dict[str, Any]) -> bool:
        if not self._ttl:
            return False
        stored_at = entry.get("stored_at", 0)
        return self._clock() - float(stored_at) >= self._ttl

    def _read(self, scope: str) -> dict[str, Any]:
        path = self._scope_path(scope)
        if not path.exists():
            return {}
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Cache file {path} does not hold a JSON object")
        return data

    def _write(self, scope: str, data: dict[str, Any]) -> None:
        path = self._scope_path(scope)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(path)

    def _scope_path(self, scope: str) -> Path:
        """Readable, filesystem-safe file name; the digest keeps it unique."""
        readable = _UNSAFE_RE.sub("_", scope)[:80]
        digest = hashlib.sha256(scope.encode("utf-8")).hexdigest()[:12]
        return self._root / f"{readable}-{digest}.json"
