"""designspec configuration constants — single source of truth for infrastructure env vars."""

import os
from pathlib import Path

# Figma REST API: Personal Access Token for design file access
FIGMA_TOKEN = os.getenv("FIGMA_TOKEN", "")

# Figma REST API base URL (override for proxies / recorded fixtures)
FIGMA_API_BASE = os.getenv("FIGMA_API_BASE", "https://api.figma.com")

# On-disk response cache: one JSON file per hashed request path
FIGMA_CACHE_DIR = Path(
    os.getenv("FIGMA_CACHE_DIR", str(Path.home() / ".designspec" / "figma-cache"))
)

# Log directory: configurable via LOG_DIR env var for containers
LOG_DIR = Path(os.getenv("LOG_DIR", str(Path(__file__).parent.parent / "logs")))

# Verbose request tracing (cache hits, headers, retry decisions)
DESIGNSPEC_DEBUG = os.getenv("DESIGNSPEC_DEBUG", "").lower() in ("true", "1", "yes")
