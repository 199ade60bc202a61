"""On-disk response cache for Figma API calls.

One JSON file per request path (query string included), named by a short
sha256 digest of the path. Each file stores the write timestamp alongside
the payload, so freshness never depends on filesystem mtime.

Usage:
    cache = FigmaResponseCache()
    cache.write("/v1/files/abc", data)
    entry = cache.read("/v1/files/abc")
    if entry and entry.fresh: ...
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from ..config import FIGMA_CACHE_DIR
from ..settings import FIGMA_CACHE_TTL

logger = logging.getLogger("designspec.integrations.figma")


@dataclass
class CacheEntry:
    data: Any
    written_at: float
    fresh: bool


def cache_key(path: str) -> str:
    return hashlib.sha256(path.encode("utf-8")).hexdigest()[:16] + ".json"


class FigmaResponseCache:
    """JSON file cache keyed by request path.

    Args:
        directory: Cache directory. Defaults to FIGMA_CACHE_DIR.
        ttl: Freshness window in seconds.
        clock: Time source returning epoch seconds (injectable for tests).
    """

    def __init__(
        self,
        directory: Optional[Path] = None,
        ttl: float = FIGMA_CACHE_TTL,
        clock: Callable[[], float] = time.time,
    ):
        self.directory = Path(directory) if directory is not None else FIGMA_CACHE_DIR
        self.ttl = ttl
        self._clock = clock

    def path_for(self, path: str) -> Path:
        return self.directory / cache_key(path)

    def read(self, path: str) -> Optional[CacheEntry]:
        """Return the cached entry for *path*, or None if absent or unreadable."""
        file_path = self.path_for(path)
        if not file_path.exists():
            return None
        try:
            payload = json.loads(file_path.read_text(encoding="utf-8"))
            written_at = float(payload["written_at"])
            data = payload["data"]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.debug(f"cache.read: ignoring unreadable entry for {path}: {e}")
            return None
        fresh = self._clock() - written_at < self.ttl
        return CacheEntry(data=data, written_at=written_at, fresh=fresh)

    def write(self, path: str, data: Any) -> None:
        """Atomically store *data* for *path*. Failures are logged, never raised."""
        payload = {"written_at": self._clock(), "path": path, "data": data}
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f)
                os.replace(tmp_name, self.path_for(path))
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"cache.write: failed for {path}: {e}")
