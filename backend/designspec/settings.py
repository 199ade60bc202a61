"""designspec runtime settings — tunable parameters for fetching and compiling.

All values read from environment variables with defaults matching the
empirically chosen constants. Import from here instead of hardcoding.

Infrastructure config (token, API base, cache dir, log dir) stays
in designspec/config.py.
"""

from __future__ import annotations

import os


def _int(key: str, default: int) -> int:
    return int(os.getenv(key, str(default)))


def _float(key: str, default: float) -> float:
    return float(os.getenv(key, str(default)))


def _str(key: str, default: str) -> str:
    return os.getenv(key, default)


# =====================================================================
# HTTP Client (Figma API)
# =====================================================================

FIGMA_HTTP_TIMEOUT = _float("FIGMA_HTTP_TIMEOUT", 30.0)
FIGMA_HTTP_MAX_CONNECTIONS = _int("FIGMA_HTTP_MAX_CONNECTIONS", 5)
FIGMA_HTTP_MAX_KEEPALIVE = _int("FIGMA_HTTP_MAX_KEEPALIVE", 3)

# Response cache freshness window (seconds)
FIGMA_CACHE_TTL = _float("FIGMA_CACHE_TTL", 3600.0)

# Total attempts for essential requests on 429 (non-essential always 1)
FIGMA_ESSENTIAL_MAX_ATTEMPTS = _int("FIGMA_ESSENTIAL_MAX_ATTEMPTS", 2)

# Wait used when a 429 carries no Retry-After header (seconds)
FIGMA_RATE_LIMIT_DEFAULT_WAIT = _float("FIGMA_RATE_LIMIT_DEFAULT_WAIT", 30.0)

# Upper bound on any 429 wait (seconds)
FIGMA_RATE_LIMIT_MAX_WAIT = _float("FIGMA_RATE_LIMIT_MAX_WAIT", 60.0)

# Retry-After above this is a CDN-level block, never retried (seconds)
FIGMA_CDN_BLOCK_THRESHOLD = _int("FIGMA_CDN_BLOCK_THRESHOLD", 3600)

# Delay before the first non-essential render call / between render calls
FIGMA_NONESSENTIAL_DELAY = _float("FIGMA_NONESSENTIAL_DELAY", 1.0)
FIGMA_SCREENSHOT_DELAY = _float("FIGMA_SCREENSHOT_DELAY", 1.5)

# Render scale for screenshots and composite bitmaps
FIGMA_RENDER_SCALE = _int("FIGMA_RENDER_SCALE", 2)


# =====================================================================
# Tree Analysis (composites, layout inference)
# =====================================================================

# Pairwise overlap (fraction of the smaller box) that makes a composite
COMPOSITE_OVERLAP_THRESHOLD = _float("COMPOSITE_OVERLAP_THRESHOLD", 0.3)

# Minimum composite container size (px, both dimensions)
COMPOSITE_MIN_SIZE = _float("COMPOSITE_MIN_SIZE", 200.0)

# Row/column edge tolerance: min(PX, RATIO * parent dimension)
LAYOUT_ALIGN_TOLERANCE_PX = _float("LAYOUT_ALIGN_TOLERANCE_PX", 20.0)
LAYOUT_ALIGN_TOLERANCE_RATIO = _float("LAYOUT_ALIGN_TOLERANCE_RATIO", 0.05)


# =====================================================================
# Asset Collection
# =====================================================================

ICON_EXPORT_LIMIT = _int("ICON_EXPORT_LIMIT", 30)
ICON_MIN_SIZE = _float("ICON_MIN_SIZE", 8.0)
ICON_MAX_SIZE = _float("ICON_MAX_SIZE", 64.0)

# Max primary frames rendered as reference screenshots
SCREENSHOT_FRAME_LIMIT = _int("SCREENSHOT_FRAME_LIMIT", 3)


# =====================================================================
# Output Policies
# =====================================================================

# Max notable components listed per plan section
PLAN_MAX_NOTABLE_COMPONENTS = _int("PLAN_MAX_NOTABLE_COMPONENTS", 8)

# Token format used when spec mode embeds tokens: css | scss | json | tailwind
SPEC_EMBEDDED_TOKEN_FORMAT = _str("SPEC_EMBEDDED_TOKEN_FORMAT", "css")
