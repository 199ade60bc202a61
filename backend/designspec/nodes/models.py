"""Figma node tree model — typed view over REST API payloads.

Every other module walks these models. Node, paint and effect kinds are
closed tagged variants: ``NodeType`` is an Enum, paints and effects are
pydantic discriminated unions on ``type``. Children, paints and effects of
a kind outside those sets are dropped at validation, so newer API node
types never fail a whole file. Attributes are snake_case and
accept the API's camelCase keys through aliases.

The model never prunes invisible nodes; callers filter on ``visible``.

Usage:
    file = FigmaFile.model_validate(payload)
    for page in file.document.children: ...
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class _FigmaModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# =====================================================================
# Variants
# =====================================================================


class NodeType(str, Enum):
    DOCUMENT = "DOCUMENT"
    CANVAS = "CANVAS"
    FRAME = "FRAME"
    GROUP = "GROUP"
    SECTION = "SECTION"
    COMPONENT = "COMPONENT"
    COMPONENT_SET = "COMPONENT_SET"
    INSTANCE = "INSTANCE"
    TEXT = "TEXT"
    RECTANGLE = "RECTANGLE"
    ELLIPSE = "ELLIPSE"
    VECTOR = "VECTOR"
    BOOLEAN_OPERATION = "BOOLEAN_OPERATION"
    LINE = "LINE"
    STAR = "STAR"
    REGULAR_POLYGON = "REGULAR_POLYGON"
    SLICE = "SLICE"
    TABLE = "TABLE"
    TABLE_CELL = "TABLE_CELL"
    STICKY = "STICKY"
    SHAPE_WITH_TEXT = "SHAPE_WITH_TEXT"
    CONNECTOR = "CONNECTOR"
    WASHI_TAPE = "WASHI_TAPE"


NODE_TYPES = frozenset(t.value for t in NodeType)


# Containers whose children are laid out / walked as content
CONTAINER_TYPES = frozenset({
    NodeType.FRAME, NodeType.GROUP, NodeType.SECTION,
    NodeType.COMPONENT, NodeType.COMPONENT_SET, NodeType.INSTANCE,
})

# Drawn shapes that count as visual content on their own
SHAPE_TYPES = frozenset({
    NodeType.VECTOR, NodeType.BOOLEAN_OPERATION,
    NodeType.RECTANGLE, NodeType.ELLIPSE,
})

PAINT_TYPES = frozenset({
    "SOLID", "GRADIENT_LINEAR", "GRADIENT_RADIAL", "GRADIENT_ANGULAR",
    "GRADIENT_DIAMOND", "IMAGE", "EMOJI", "VIDEO",
})

EFFECT_TYPES = frozenset({
    "DROP_SHADOW", "INNER_SHADOW", "LAYER_BLUR", "BACKGROUND_BLUR",
})


# =====================================================================
# Primitives
# =====================================================================


class RGBA(_FigmaModel):
    r: float = 0.0
    g: float = 0.0
    b: float = 0.0
    a: float = 1.0


class Vector(_FigmaModel):
    x: float = 0.0
    y: float = 0.0


class Rect(_FigmaModel):
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


# =====================================================================
# Paints
# =====================================================================


class GradientStop(_FigmaModel):
    position: float = 0.0
    color: RGBA = Field(default_factory=RGBA)


class ImageFilters(_FigmaModel):
    exposure: float = 0.0
    contrast: float = 0.0
    saturation: float = 0.0
    temperature: float = 0.0
    tint: float = 0.0
    highlights: float = 0.0
    shadows: float = 0.0


class SolidPaint(_FigmaModel):
    type: Literal["SOLID"]
    visible: bool = True
    opacity: float = 1.0
    color: RGBA = Field(default_factory=RGBA)


class GradientPaint(_FigmaModel):
    type: Literal[
        "GRADIENT_LINEAR", "GRADIENT_RADIAL", "GRADIENT_ANGULAR", "GRADIENT_DIAMOND",
    ]
    visible: bool = True
    opacity: float = 1.0
    gradient_stops: List[GradientStop] = Field(default_factory=list)
    gradient_handle_positions: List[Vector] = Field(default_factory=list)


class ImagePaint(_FigmaModel):
    type: Literal["IMAGE"]
    visible: bool = True
    opacity: float = 1.0
    image_ref: Optional[str] = None
    scale_mode: Optional[str] = None
    # 2x3 affine matrix [[a, b, tx], [c, d, ty]]
    image_transform: Optional[List[List[float]]] = None
    filters: Optional[ImageFilters] = None


class EmojiPaint(_FigmaModel):
    type: Literal["EMOJI"]
    visible: bool = True
    opacity: float = 1.0


class VideoPaint(_FigmaModel):
    type: Literal["VIDEO"]
    visible: bool = True
    opacity: float = 1.0
    video_ref: Optional[str] = None


Paint = Annotated[
    Union[SolidPaint, GradientPaint, ImagePaint, EmojiPaint, VideoPaint],
    Field(discriminator="type"),
]


# =====================================================================
# Effects
# =====================================================================


class ShadowEffect(_FigmaModel):
    type: Literal["DROP_SHADOW", "INNER_SHADOW"]
    visible: bool = True
    radius: float = 0.0
    color: Optional[RGBA] = None
    offset: Vector = Field(default_factory=Vector)
    spread: float = 0.0


class LayerBlurEffect(_FigmaModel):
    type: Literal["LAYER_BLUR"]
    visible: bool = True
    radius: float = 0.0
    blur_type: Optional[str] = None


class BackgroundBlurEffect(_FigmaModel):
    type: Literal["BACKGROUND_BLUR"]
    visible: bool = True
    radius: float = 0.0


Effect = Annotated[
    Union[ShadowEffect, LayerBlurEffect, BackgroundBlurEffect],
    Field(discriminator="type"),
]


def _drop_unknown(items: Any, known: frozenset, kind: str) -> Any:
    """Drop node/paint/effect entries whose type is outside the closed variant set."""
    if not isinstance(items, list):
        return items
    kept = []
    for item in items:
        item_type = item.get("type") if isinstance(item, dict) else None
        if isinstance(item, dict) and item_type not in known:
            logger.debug(f"models: dropping unsupported {kind} type {item_type!r}")
            continue
        kept.append(item)
    return kept


# =====================================================================
# Text
# =====================================================================


class Hyperlink(_FigmaModel):
    type: Optional[str] = None
    url: Optional[str] = None
    node_id: Optional[str] = None


class TypeStyle(_FigmaModel):
    font_family: str = ""
    font_post_script_name: Optional[str] = None
    font_weight: float = 0.0
    font_size: float = 0.0
    italic: bool = False
    font_style: Optional[str] = None
    line_height_px: Optional[float] = None
    letter_spacing: float = 0.0
    text_align_horizontal: Optional[str] = None
    text_case: Optional[str] = None
    text_decoration: Optional[str] = None
    text_auto_resize: Optional[str] = None
    text_truncation: Optional[str] = None
    max_lines: Optional[int] = None
    hyperlink: Optional[Hyperlink] = None
    fills: List[Paint] = Field(default_factory=list)

    @field_validator("fills", mode="before")
    @classmethod
    def _known_fills(cls, value: Any) -> Any:
        return _drop_unknown(value, PAINT_TYPES, "paint")


# =====================================================================
# Node
# =====================================================================


class StrokeWeights(_FigmaModel):
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0


class LayoutConstraint(_FigmaModel):
    vertical: str = "TOP"
    horizontal: str = "LEFT"


class ComponentPropertyDefinition(_FigmaModel):
    type: str
    default_value: Any = None
    variant_options: Optional[List[str]] = None


class DesignNode(_FigmaModel):
    id: str
    name: str = ""
    type: NodeType
    visible: bool = True
    children: List["DesignNode"] = Field(default_factory=list)
    description: Optional[str] = None

    absolute_bounding_box: Optional[Rect] = None
    constraints: Optional[LayoutConstraint] = None

    fills: List[Paint] = Field(default_factory=list)
    strokes: List[Paint] = Field(default_factory=list)
    stroke_weight: Optional[float] = None
    stroke_align: Optional[str] = None
    stroke_dashes: Optional[List[float]] = None
    individual_stroke_weights: Optional[StrokeWeights] = None
    effects: List[Effect] = Field(default_factory=list)

    # Auto-layout
    layout_mode: Optional[str] = None
    item_spacing: float = 0.0
    counter_axis_spacing: Optional[float] = None
    padding_top: float = 0.0
    padding_right: float = 0.0
    padding_bottom: float = 0.0
    padding_left: float = 0.0
    primary_axis_align_items: Optional[str] = None
    counter_axis_align_items: Optional[str] = None
    layout_wrap: Optional[str] = None
    layout_sizing_horizontal: Optional[str] = None
    layout_sizing_vertical: Optional[str] = None
    layout_align: Optional[str] = None
    layout_positioning: Optional[str] = None
    layout_grow: float = 0.0

    clips_content: bool = False
    scroll_behavior: Optional[str] = None
    overflow_direction: Optional[str] = None
    min_width: Optional[float] = None
    max_width: Optional[float] = None
    min_height: Optional[float] = None
    max_height: Optional[float] = None

    corner_radius: float = 0.0
    rectangle_corner_radii: Optional[List[float]] = None
    opacity: float = 1.0
    rotation: float = 0.0
    is_mask: bool = False

    # TEXT nodes
    characters: Optional[str] = None
    style: Optional[TypeStyle] = None
    style_override_table: Dict[str, TypeStyle] = Field(default_factory=dict)

    component_property_definitions: Optional[Dict[str, ComponentPropertyDefinition]] = None

    # Style slot ("fill", "text", "effect", ...) -> style id
    styles: Dict[str, str] = Field(default_factory=dict)

    @field_validator("children", mode="before")
    @classmethod
    def _known_children(cls, value: Any) -> Any:
        return _drop_unknown(value, NODE_TYPES, "node")

    @field_validator("fills", "strokes", mode="before")
    @classmethod
    def _known_paints(cls, value: Any) -> Any:
        return _drop_unknown(value, PAINT_TYPES, "paint")

    @field_validator("effects", mode="before")
    @classmethod
    def _known_effects(cls, value: Any) -> Any:
        return _drop_unknown(value, EFFECT_TYPES, "effect")


# =====================================================================
# API responses
# =====================================================================


class StyleMeta(_FigmaModel):
    name: str = ""
    style_type: str = ""
    description: Optional[str] = None


class FigmaFile(_FigmaModel):
    """GET /v1/files/:key"""

    name: str = ""
    document: DesignNode
    styles: Dict[str, StyleMeta] = Field(default_factory=dict)
    version: Optional[str] = None


class NodeEntry(_FigmaModel):
    document: DesignNode
    styles: Dict[str, StyleMeta] = Field(default_factory=dict)


class FigmaNodesResponse(_FigmaModel):
    """GET /v1/files/:key/nodes?ids=..."""

    name: str = ""
    nodes: Dict[str, Optional[NodeEntry]] = Field(default_factory=dict)

    @field_validator("nodes", mode="before")
    @classmethod
    def _known_documents(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        known = {}
        for node_id, entry in value.items():
            document = entry.get("document") if isinstance(entry, dict) else None
            node_type = document.get("type") if isinstance(document, dict) else None
            if isinstance(document, dict) and node_type not in NODE_TYPES:
                logger.debug(f"models: dropping unsupported node type {node_type!r} for {node_id}")
                entry = None
            known[node_id] = entry
        return known

    def documents(self) -> List[DesignNode]:
        """Requested node documents in response order (missing ids skipped)."""
        return [entry.document for entry in self.nodes.values() if entry is not None]
