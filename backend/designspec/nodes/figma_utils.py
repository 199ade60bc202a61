"""Figma utility functions — tree predicates, geometry, and CSS conversion.

Shared by the composite detector, layout inference, classifiers and every
formatter. All helpers take typed DesignNode / Paint models.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Union

from .models import (
    RGBA,
    CONTAINER_TYPES,
    SHAPE_TYPES,
    DesignNode,
    EmojiPaint,
    GradientPaint,
    ImageFilters,
    ImagePaint,
    NodeType,
    Rect,
    SolidPaint,
    VideoPaint,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Number formatting
# ---------------------------------------------------------------------------


def format_number(value: Union[int, float]) -> str:
    """Render a number the way CSS wants it: ``16`` not ``16.0``, at most 2 decimals."""
    if float(value).is_integer():
        return str(int(value))
    return f"{round(value, 2):g}"


# ---------------------------------------------------------------------------
# Tree predicates
# ---------------------------------------------------------------------------

_FIGMA_AUTO_NAME_RE = re.compile(
    r"^(Frame|Group|Rectangle|Ellipse|Line|Vector|Component|Instance|Image|"
    r"Union|Subtract|Intersect|Exclude|Mask\s*Group)"
    r"\s*\d{2,}$",
    re.IGNORECASE,
)


def is_auto_name(name: str) -> bool:
    """True for Figma auto-generated layer names like "Frame 1321317615"."""
    return bool(_FIGMA_AUTO_NAME_RE.match(name.strip()))


def has_auto_layout(node: DesignNode) -> bool:
    return bool(node.layout_mode) and node.layout_mode != "NONE"


def contains_text(node: DesignNode) -> bool:
    """True if the node is TEXT or has a visible TEXT descendant."""
    if node.type == NodeType.TEXT:
        return True
    return any(contains_text(c) for c in node.children if c.visible)


def has_image_fill(node: DesignNode) -> bool:
    return any(isinstance(f, ImagePaint) and f.visible for f in node.fills)


def has_visual_content(node: DesignNode) -> bool:
    """True for image / solid / gradient fills, drawn shapes, or visual descendants."""
    for fill in node.fills:
        if fill.visible and isinstance(fill, (ImagePaint, SolidPaint, GradientPaint)):
            return True
    if node.type in SHAPE_TYPES:
        return True
    return any(has_visual_content(c) for c in node.children if c.visible)


def is_container(node: DesignNode) -> bool:
    return node.type in CONTAINER_TYPES


def find_first_text(node: DesignNode, max_depth: int = 3, _depth: int = 0) -> Optional[str]:
    """First visible TEXT ``characters`` found depth-first, within *max_depth*."""
    if _depth > max_depth:
        return None
    if node.type == NodeType.TEXT and node.characters:
        return node.characters
    for child in node.children:
        if not child.visible:
            continue
        text = find_first_text(child, max_depth, _depth + 1)
        if text:
            return text
    return None


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


def bounds_overlap_area(a: Rect, b: Rect) -> float:
    overlap_x = max(0.0, min(a.right, b.right) - max(a.x, b.x))
    overlap_y = max(0.0, min(a.bottom, b.bottom) - max(a.y, b.y))
    return overlap_x * overlap_y


def bounds_overlap_ratio(a: Rect, b: Rect) -> float:
    """Overlap area as a fraction of the smaller box (0 when either is empty)."""
    smaller_area = min(a.area, b.area)
    if smaller_area <= 0:
        return 0.0
    return bounds_overlap_area(a, b) / smaller_area


def has_significant_overlap(boxes: List[Rect], threshold: float) -> bool:
    for i in range(len(boxes)):
        for j in range(i + 1, len(boxes)):
            if bounds_overlap_ratio(boxes[i], boxes[j]) > threshold:
                return True
    return False


def format_dimensions(box: Optional[Rect], default: str = "") -> str:
    if box is None:
        return default
    return f"{round(box.width)}x{round(box.height)}"


# ---------------------------------------------------------------------------
# Color / paint → CSS
# ---------------------------------------------------------------------------


def rgba_to_hex(color: RGBA) -> str:
    r = round(color.r * 255)
    g = round(color.g * 255)
    b = round(color.b * 255)
    return f"#{r:02x}{g:02x}{b:02x}"


def rgba_to_css(color: RGBA, paint_opacity: float = 1.0) -> str:
    """``rgba(r, g, b, a)`` when translucent, lowercase hex otherwise."""
    alpha = color.a * paint_opacity
    if alpha < 1:
        r = round(color.r * 255)
        g = round(color.g * 255)
        b = round(color.b * 255)
        return f"rgba({r}, {g}, {b}, {alpha:.2f})"
    return rgba_to_hex(color)


_GRADIENT_FUNCTIONS = {
    "GRADIENT_LINEAR": "linear-gradient",
    "GRADIENT_RADIAL": "radial-gradient",
    "GRADIENT_ANGULAR": "conic-gradient",
    # CSS has no diamond gradient
    "GRADIENT_DIAMOND": "radial-gradient",
}


def format_gradient(paint: GradientPaint) -> str:
    stops = ", ".join(
        f"{rgba_to_css(stop.color)} {round(stop.position * 100)}%"
        for stop in paint.gradient_stops
    )
    return f"{_GRADIENT_FUNCTIONS[paint.type]}({stops})"


def paint_to_css(paint) -> Optional[str]:
    """CSS background value for a color-like paint; None for media paints.

    Raises:
        TypeError: for anything outside the Paint union.
    """
    if isinstance(paint, SolidPaint):
        return rgba_to_css(paint.color, paint.opacity)
    if isinstance(paint, GradientPaint):
        return format_gradient(paint)
    if isinstance(paint, (ImagePaint, EmojiPaint, VideoPaint)):
        return None
    raise TypeError(f"Unsupported paint: {type(paint).__name__}")


# ---------------------------------------------------------------------------
# Image paint → CSS hints
# ---------------------------------------------------------------------------


def scale_mode_to_css(scale_mode: str, is_background: bool = False) -> str:
    if is_background:
        return {
            "FILL": "`background-size: cover; background-position: center`",
            "FIT": "`background-size: contain; background-repeat: no-repeat; background-position: center`",
            "TILE": "`background-repeat: repeat; background-size: auto`",
            "STRETCH": "`background-size: 100% 100%`",
        }.get(scale_mode, "`background-size: cover`")
    return {
        "FILL": "`object-fit: cover`",
        "FIT": "`object-fit: contain`",
        "STRETCH": "`object-fit: fill`",
        "TILE": "`background-repeat: repeat` (use as CSS background)",
    }.get(scale_mode, "`object-fit: cover`")


def _clamp_pct(value: int) -> int:
    return max(0, min(100, value))


def image_transform_to_position(transform: Optional[List[List[float]]]) -> Optional[str]:
    """Decode a 2x3 imageTransform crop into a CSS ``object-position`` value.

    ``[[a, b, tx], [c, d, ty]]``: a/d are the visible fraction, tx/ty the
    offset. Position is ``tx / (1 - a)`` per axis; None when uncropped or
    centered.
    """
    if not transform or len(transform) < 2 or len(transform[0]) < 3 or len(transform[1]) < 3:
        return None
    a, tx = transform[0][0], transform[0][2]
    d, ty = transform[1][1], transform[1][2]
    if a > 0.99 and d > 0.99:
        return None

    x_pct = round(tx / (1 - a) * 100) if a < 0.99 else 50
    y_pct = round(ty / (1 - d) * 100) if d < 0.99 else 50
    if x_pct == 50 and y_pct == 50:
        return None
    return f"{_clamp_pct(x_pct)}% {_clamp_pct(y_pct)}%"


def image_filters_to_css(filters: Optional[ImageFilters]) -> Optional[str]:
    if filters is None:
        return None
    parts = []
    if filters.exposure:
        parts.append(f"brightness({1 + filters.exposure / 100:.2f})")
    if filters.contrast:
        parts.append(f"contrast({1 + filters.contrast / 100:.2f})")
    if filters.saturation:
        parts.append(f"saturate({1 + filters.saturation / 100:.2f})")
    if filters.temperature:
        # No CSS equivalent; hue-rotate approximates it
        parts.append(f"hue-rotate({round(filters.temperature * 0.3)}deg)")
    return " ".join(parts) if parts else None


# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------


def safe_slug(name: str, fallback: str = "", max_length: Optional[int] = None) -> str:
    """Lowercase, ``[^a-z0-9]+`` runs collapsed to "-", edges stripped."""
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    if max_length is not None:
        slug = slug[:max_length]
    return slug or fallback
