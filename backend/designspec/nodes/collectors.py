"""Tree collectors: icon nodes for SVG export, image-fill refs, font families."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ..settings import ICON_EXPORT_LIMIT, ICON_MAX_SIZE, ICON_MIN_SIZE
from .figma_utils import safe_slug
from .models import DesignNode, ImagePaint, NodeType

ICON_NAME_KEYWORDS = (
    "icon", "logo", "arrow", "chevron", "close", "menu", "search", "cart",
    "account", "user", "check", "star", "heart", "social",
)

_VECTOR_TYPES = (NodeType.VECTOR, NodeType.BOOLEAN_OPERATION)


@dataclass
class IconInfo:
    node_id: str
    node_name: str
    width: int
    height: int
    filename: str


@dataclass
class ImageRefInfo:
    image_ref: str
    node_id: str
    node_name: str
    width: int
    height: int


def _is_icon_node(node: DesignNode) -> bool:
    box = node.absolute_bounding_box
    if box is None:
        return False
    if box.width < ICON_MIN_SIZE or box.height < ICON_MIN_SIZE:
        return False
    if box.width > ICON_MAX_SIZE or box.height > ICON_MAX_SIZE:
        return False

    if node.type in _VECTOR_TYPES or node.type == NodeType.INSTANCE:
        return True
    if node.type in (NodeType.FRAME, NodeType.GROUP):
        lower = node.name.lower()
        if any(k in lower for k in ICON_NAME_KEYWORDS):
            return True
        return any(c.type in _VECTOR_TYPES for c in node.children)
    return False


def collect_icon_nodes(nodes: List[DesignNode], limit: int = ICON_EXPORT_LIMIT) -> List[IconInfo]:
    """Small icon-like nodes to export as SVG, one per sanitized name."""
    results: List[IconInfo] = []
    seen = set()

    def walk(node: DesignNode) -> None:
        if not node.visible or len(results) >= limit:
            return
        if _is_icon_node(node):
            name = safe_slug(node.name, fallback="icon", max_length=60)
            if name not in seen:
                seen.add(name)
                box = node.absolute_bounding_box
                results.append(IconInfo(
                    node_id=node.id,
                    node_name=node.name,
                    width=round(box.width),
                    height=round(box.height),
                    filename=f"{name}.svg",
                ))
        for child in node.children:
            if len(results) >= limit:
                return
            walk(child)

    for node in nodes:
        walk(node)
    return results


def collect_image_refs(nodes: List[DesignNode]) -> List[ImageRefInfo]:
    """Visible IMAGE fills, deduplicated by imageRef (first occurrence wins)."""
    results: List[ImageRefInfo] = []
    seen = set()

    def walk(node: DesignNode) -> None:
        if not node.visible:
            return
        for fill in node.fills:
            if isinstance(fill, ImagePaint) and fill.visible and fill.image_ref \
                    and fill.image_ref not in seen:
                seen.add(fill.image_ref)
                box = node.absolute_bounding_box
                results.append(ImageRefInfo(
                    image_ref=fill.image_ref,
                    node_id=node.id,
                    node_name=node.name,
                    width=round(box.width) if box else 0,
                    height=round(box.height) if box else 0,
                ))
        for child in node.children:
            walk(child)

    for node in nodes:
        walk(node)
    return results


def collect_font_families(nodes: List[DesignNode]) -> List[str]:
    """Unique font families from TEXT styles and override tables, in first-seen order."""
    families: List[str] = []

    def add(family: str) -> None:
        if family and family not in families:
            families.append(family)

    def walk(node: DesignNode) -> None:
        if not node.visible:
            return
        if node.type == NodeType.TEXT and node.style is not None:
            add(node.style.font_family)
        for override in node.style_override_table.values():
            add(override.font_family)
        for child in node.children:
            walk(child)

    for node in nodes:
        walk(node)
    return families
