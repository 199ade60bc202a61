"""Composite visual group detection and primary-frame selection.

A composite is a container whose visual children (images, gradients,
shapes) overlap enough that they only make sense rendered as one bitmap,
e.g. a hero background built from stacked layers. Text never goes into the
bitmap: containers that also hold text record their visual children
separately so only those are rendered, and the text stays in the spec.

Page sections (direct children of a CANVAS) are never composites.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Set

from ..settings import COMPOSITE_MIN_SIZE, COMPOSITE_OVERLAP_THRESHOLD
from .figma_utils import (
    contains_text,
    has_auto_layout,
    has_significant_overlap,
    has_visual_content,
)
from .models import DesignNode, NodeType

logger = logging.getLogger(__name__)


@dataclass
class CompositeGroup:
    node_id: str
    name: str
    width: int
    height: int
    # Visual-only children to render; set only when text overlays exist
    visual_child_ids: Optional[List[str]] = None
    has_text_overlays: bool = False

    @property
    def render_ids(self) -> List[str]:
        """Node ids to send to the render endpoint."""
        if self.has_text_overlays and self.visual_child_ids:
            return list(self.visual_child_ids)
        return [self.node_id]

    @property
    def safe_name(self) -> str:
        return re.sub(r"[^a-z0-9]+", "-", self.name.lower()).strip("-")

    def image_path(self) -> str:
        return f"/images/composite-{self.safe_name}.png"

    def layer_path(self, index: int) -> str:
        return f"/images/composite-{self.safe_name}-layer-{index}.png"


def collect_composite_nodes(
    nodes: List[DesignNode],
    overlap_threshold: float = COMPOSITE_OVERLAP_THRESHOLD,
    min_size: float = COMPOSITE_MIN_SIZE,
) -> List[CompositeGroup]:
    """Find composite visual groups anywhere under *nodes* (depth-first order)."""
    results: List[CompositeGroup] = []

    section_ids: Set[str] = set()
    for node in nodes:
        if node.type == NodeType.CANVAS:
            section_ids.update(child.id for child in node.children)

    def recurse(children: List[DesignNode]) -> None:
        for child in children:
            walk(child)

    def walk(node: DesignNode) -> None:
        if not node.visible:
            return
        if len(node.children) < 2 or node.id in section_ids:
            recurse(node.children)
            return

        bbox = node.absolute_bounding_box
        if bbox is None or bbox.width < min_size or bbox.height < min_size:
            recurse(node.children)
            return
        if has_auto_layout(node):
            recurse(node.children)
            return

        visible = [c for c in node.children if c.visible]
        if len(visible) < 2:
            recurse(node.children)
            return

        visual: List[DesignNode] = []
        text: List[DesignNode] = []
        for child in visible:
            if contains_text(child):
                text.append(child)
            elif has_visual_content(child):
                visual.append(child)

        if len(visual) < 2:
            recurse(node.children)
            return

        boxes = [c.absolute_bounding_box for c in visual if c.absolute_bounding_box is not None]
        if len(boxes) < 2 or not has_significant_overlap(boxes, overlap_threshold):
            recurse(node.children)
            return

        group = CompositeGroup(
            node_id=node.id,
            name=node.name,
            width=round(bbox.width),
            height=round(bbox.height),
        )
        if text:
            group.visual_child_ids = [c.id for c in visual]
            group.has_text_overlays = True
            results.append(group)
            recurse(text)
        else:
            results.append(group)

    for node in nodes:
        walk(node)

    logger.debug(f"collect_composite_nodes: found {len(results)} composite(s)")
    return results


def composite_render_paths(group: CompositeGroup, rendered: dict) -> List[str]:
    """Image paths for the parts of *group* that the render call returned.

    *rendered* maps node id -> download URL (None when Figma could not render).
    Text-overlay composites produce one layer path per rendered visual child.
    """
    if group.has_text_overlays and group.visual_child_ids:
        return [
            group.layer_path(index)
            for index, child_id in enumerate(group.visual_child_ids, start=1)
            if rendered.get(child_id)
        ]
    return [group.image_path()] if rendered.get(group.node_id) else []


def select_primary_frames(children: List[DesignNode]) -> List[DesignNode]:
    """Pick the largest visible FRAME of a page, or all visible children.

    Pages often carry Desktop/Mobile copies and component sheets; only the
    main artboard should reach the spec. Ties keep the first frame.
    """
    frames = [
        c for c in children
        if c.visible and c.type == NodeType.FRAME and c.absolute_bounding_box is not None
    ]
    if len(frames) <= 1:
        return [c for c in children if c.visible]

    largest = frames[0]
    largest_area = 0.0
    for frame in frames:
        area = frame.absolute_bounding_box.area
        if area > largest_area:
            largest_area = area
            largest = frame
    return [largest]
