"""Layout inference for containers without auto-layout.

Community files often position everything absolutely. When siblings share a
top edge (row) or left edge (column) within tolerance, an equivalent flex
layout is derived from raw coordinates so the spec can state a layout rule.
Anything else is reported as ``absolute`` with relative coordinates.

Heuristic, not exact: ambiguous justification is omitted rather than guessed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..settings import LAYOUT_ALIGN_TOLERANCE_PX, LAYOUT_ALIGN_TOLERANCE_RATIO
from .figma_utils import has_auto_layout
from .models import DesignNode

ROW = "row"
COLUMN = "column"
ABSOLUTE = "absolute"


@dataclass
class ChildPosition:
    node_id: str
    name: str
    x: float
    y: float
    width: float
    height: float


@dataclass
class InferredLayout:
    kind: str
    gap: Optional[int] = None
    padding: Optional[Dict[str, int]] = None
    justify: Optional[str] = None
    # Relative child coordinates, populated for ``absolute`` only
    positions: List[ChildPosition] = field(default_factory=list)

    @property
    def is_flex(self) -> bool:
        return self.kind in (ROW, COLUMN)


def detect_justification(starts: List[float], sizes: List[float], parent_size: float) -> Optional[str]:
    """Infer ``justify-content`` from positions sorted along the main axis."""
    if len(starts) < 2:
        return None

    leading = starts[0]
    trailing = parent_size - (starts[-1] + sizes[-1])

    if abs(leading - trailing) < 20 and leading > 20:
        return "center"
    if leading < 20 and trailing > 40:
        return "flex-start"
    if trailing < 20 and leading > 40:
        return "flex-end"

    gaps = [starts[i] - (starts[i - 1] + sizes[i - 1]) for i in range(1, len(starts))]
    if len(starts) >= 3:
        if max(gaps) - min(gaps) < 10 and leading < gaps[0] * 0.5:
            return "space-between"
    elif leading < 20 and trailing < 20 and gaps[0] > 40:
        return "space-between"
    return None


def infer_layout(
    parent: DesignNode,
    children: List[DesignNode],
    tolerance_px: float = LAYOUT_ALIGN_TOLERANCE_PX,
    tolerance_ratio: float = LAYOUT_ALIGN_TOLERANCE_RATIO,
) -> Optional[InferredLayout]:
    """Infer a flex row/column (or absolute) layout from child coordinates.

    Returns None when the parent already has auto-layout, lacks a bounding
    box, or fewer than two children carry one.
    """
    if has_auto_layout(parent):
        return None
    parent_box = parent.absolute_bounding_box
    if parent_box is None:
        return None

    boxes = [
        ChildPosition(
            node_id=c.id,
            name=c.name,
            x=c.absolute_bounding_box.x - parent_box.x,
            y=c.absolute_bounding_box.y - parent_box.y,
            width=c.absolute_bounding_box.width,
            height=c.absolute_bounding_box.height,
        )
        for c in children
        if c.absolute_bounding_box is not None
    ]
    if len(boxes) < 2:
        return None

    ys = [b.y for b in boxes]
    xs = [b.x for b in boxes]
    y_tolerance = min(tolerance_px, parent_box.height * tolerance_ratio)
    x_tolerance = min(tolerance_px, parent_box.width * tolerance_ratio)

    if max(ys) - min(ys) < y_tolerance:
        ordered = sorted(boxes, key=lambda b: b.x)
        starts = [b.x for b in ordered]
        sizes = [b.width for b in ordered]
        cross = min(ys)
        lead, trail, cross_pad = _edge_padding(starts, sizes, parent_box.width, cross)
        return _flex_layout(
            ROW, starts, sizes, parent_box.width,
            {"top": cross_pad, "right": trail, "bottom": 0, "left": lead},
        )

    if max(xs) - min(xs) < x_tolerance:
        ordered = sorted(boxes, key=lambda b: b.y)
        starts = [b.y for b in ordered]
        sizes = [b.height for b in ordered]
        cross = min(xs)
        lead, trail, cross_pad = _edge_padding(starts, sizes, parent_box.height, cross)
        return _flex_layout(
            COLUMN, starts, sizes, parent_box.height,
            {"top": lead, "right": 0, "bottom": trail, "left": cross_pad},
        )

    return InferredLayout(kind=ABSOLUTE, positions=boxes)


def _edge_padding(
    starts: List[float], sizes: List[float], parent_size: float, cross_offset: float,
) -> tuple:
    lead = round(max(0.0, starts[0]))
    trail = round(max(0.0, parent_size - (starts[-1] + sizes[-1])))
    cross = round(max(0.0, cross_offset))
    return lead, trail, cross


def _flex_layout(
    kind: str,
    starts: List[float],
    sizes: List[float],
    parent_size: float,
    padding: Dict[str, int],
) -> InferredLayout:
    gaps = [round(starts[i] - (starts[i - 1] + sizes[i - 1])) for i in range(1, len(starts))]
    avg_gap = round(sum(gaps) / len(gaps)) if gaps else 0

    return InferredLayout(
        kind=kind,
        gap=avg_gap if avg_gap > 0 else None,
        padding=padding if any(v > 0 for v in padding.values()) else None,
        justify=detect_justification(starts, sizes, parent_size),
    )
