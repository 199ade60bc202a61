"""Tests for designspec.spec.design_spec — markdown spec rendering.

Covers:
- nodes_to_spec (header, page sections, primary frame selection)
- node_to_markdown (layout, inferred layout, text, images, icons, composites,
  sequential patterns, z-index hints)
- small formatters (effects, typography, corner radius)
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from designspec.nodes.models import DesignNode, LayerBlurEffect, NodeType, ShadowEffect, TypeStyle
from designspec.spec.design_spec import (
    NODE_TYPE_LABELS,
    SpecOptions,
    format_corner_radius,
    format_effect,
    format_node_type,
    format_typography,
    node_to_markdown,
    nodes_to_spec,
)
from designspec.spec.google_fonts import check_fonts


# ─── Fixtures ─────────────────────────────────────────────────────────


def _make_node(
    node_id: str,
    name: str,
    node_type: str = "FRAME",
    box: Optional[tuple] = None,
    children: Optional[List[Dict[str, Any]]] = None,
    **extra,
) -> Dict[str, Any]:
    """Build a minimal Figma node dict."""
    data: Dict[str, Any] = {"id": node_id, "name": name, "type": node_type}
    if box is not None:
        x, y, w, h = box
        data["absoluteBoundingBox"] = {"x": x, "y": y, "width": w, "height": h}
    if children is not None:
        data["children"] = children
    data.update(extra)
    return data


def _render(data: Dict[str, Any], options: Optional[SpecOptions] = None, depth: int = 1) -> str:
    return node_to_markdown(DesignNode.model_validate(data), depth, options or SpecOptions())


def _image_fill(ref: str = "ref-a", **extra) -> Dict[str, Any]:
    fill = {"type": "IMAGE", "imageRef": ref, "scaleMode": "FILL"}
    fill.update(extra)
    return fill


# ─── nodes_to_spec ────────────────────────────────────────────────────


class TestNodesToSpec:
    def _canvas(self) -> DesignNode:
        return DesignNode.model_validate(_make_node("0:1", "Home", "CANVAS", children=[
            _make_node("1:1", "Desktop", box=(0, 0, 1440, 900)),
            _make_node("1:2", "Mobile", box=(1500, 0, 375, 812)),
        ]))

    def test_header_and_page_section(self):
        md = nodes_to_spec([self._canvas()], "Landing")

        assert md.startswith("# Design Specification: Landing\n")
        assert "## Page: Home\n" in md
        assert "### Desktop" in md
        assert "Mobile" not in md

    def test_font_substitutions_block(self):
        options = SpecOptions(font_checks=check_fonts(["SF Pro", "Inter"]))

        md = nodes_to_spec([self._canvas()], "Landing", options)

        assert "## Font Substitutions" in md
        assert "| SF Pro | Inter |" in md

    def test_standalone_frames_render_at_depth_one(self):
        frame = DesignNode.model_validate(_make_node("1:1", "Card", box=(0, 0, 300, 200)))

        md = nodes_to_spec([frame], "Landing")

        assert "\n## Card\n" in md

    def test_invisible_nodes_skipped(self):
        hidden = DesignNode.model_validate(_make_node("1:1", "Draft", visible=False))

        assert "Draft" not in nodes_to_spec([hidden], "Landing")

    def test_output_is_deterministic(self):
        canvas = self._canvas()

        assert nodes_to_spec([canvas], "Landing") == nodes_to_spec([canvas], "Landing")


# ─── node_to_markdown ─────────────────────────────────────────────────


class TestNodeToMarkdown:
    def test_type_and_dimensions(self):
        md = _render(_make_node("1:1", "Card", box=(10.4, 20, 300, 200)))

        assert md.startswith("## Card\n")
        assert "*Type: Frame*" in md
        assert "*Dimensions: 300 x 200 px — Position: (10, 20)*" in md

    def test_heading_depth_is_capped(self):
        md = _render(_make_node("1:1", "Deep"), depth=9)

        assert md.startswith("###### Deep")

    def test_invisible_node_renders_nothing(self):
        assert _render(_make_node("1:1", "Hidden", visible=False)) == ""

    def test_auto_layout_block(self):
        md = _render(_make_node(
            "1:1", "Row", box=(0, 0, 800, 100),
            layoutMode="HORIZONTAL", itemSpacing=16,
            paddingTop=24, paddingRight=24, paddingBottom=24, paddingLeft=24,
            primaryAxisAlignItems="SPACE_BETWEEN", counterAxisAlignItems="CENTER",
            layoutSizingHorizontal="FILL",
        ))

        assert "**Layout:** horizontal" in md
        assert "- Width sizing: 100% (fill container)" in md
        assert "- Gap: 16px" in md
        assert "- Padding: 24px 24px 24px 24px" in md
        assert "- Main axis: space-between" in md
        assert "- Cross axis: center" in md

    def test_inferred_row_layout(self):
        md = _render(_make_node("1:1", "Bar", box=(0, 0, 400, 100), children=[
            _make_node("2:1", "Left", box=(0, 0, 100, 50)),
            _make_node("2:2", "Right", box=(300, 0, 100, 50)),
        ]))

        assert "**Inferred Layout** (no auto-layout in Figma" in md
        assert "- CSS: `display: flex; flex-direction: row`" in md
        assert "- Gap: 200px" in md
        assert "- Justify: space-between" in md

    def test_inferred_absolute_layout_lists_offsets(self):
        md = _render(_make_node("1:1", "Scatter", box=(0, 0, 1000, 1000), children=[
            _make_node("2:1", "Badge", box=(0, 0, 100, 100)),
            _make_node("2:2", "Blob", box=(500, 600, 100, 100)),
        ]))

        assert "**Inferred Layout:** absolute" in md
        assert "- Blob: `left: 500px; top: 600px; width: 100px; height: 100px`" in md

    def test_fills_strokes_and_radius(self):
        md = _render(_make_node(
            "1:1", "Button", box=(0, 0, 120, 40),
            fills=[{"type": "SOLID", "color": {"r": 1, "g": 0, "b": 0, "a": 1}}],
            strokes=[{"type": "SOLID", "color": {"r": 0, "g": 0, "b": 0, "a": 1}}],
            strokeWeight=2, strokeAlign="INSIDE",
            cornerRadius=8,
        ))

        assert "**Fills:**\n- Background: #ff0000" in md
        assert "- Border: 2px solid #000000 (inside)" in md
        assert "**Border radius:** 8px" in md

    def test_text_content_and_typography(self):
        options = SpecOptions(font_substitutions={"SF Pro": "Inter"})

        md = _render(_make_node(
            "1:1", "Title", "TEXT", box=(0, 0, 300, 40),
            characters="Hello\nWorld",
            style={"fontFamily": "SF Pro", "fontSize": 32, "fontWeight": 700, "lineHeightPx": 38.4},
        ), options)

        assert "**Text content:**\n> Hello\n> World" in md
        assert "- Font: Inter (original: SF Pro)" in md
        assert "- Size: 32px" in md
        assert "- Line height: 38px" in md

    def test_image_without_downloaded_fill_uses_placeholder(self):
        md = _render(_make_node("1:1", "Blob", "RECTANGLE", box=(0, 0, 300, 200),
                                fills=[_image_fill()]))

        assert "**Image:**" in md
        assert "- Source: `placehold.co/300x200` (300x200)" in md
        assert "- Scale mode: FILL → CSS: `object-fit: cover`" in md

    def test_image_with_fill_url_uses_local_path(self):
        options = SpecOptions(image_fill_urls={"ref-a": "https://cdn/a.png"})

        md = _render(_make_node("1:1", "Blob", "RECTANGLE", box=(0, 0, 300, 200),
                                fills=[_image_fill()]), options)

        assert "- Source: `/images/ref-a.png` (300x200)" in md

    def test_person_image_gets_critical_priority(self):
        md = _render(_make_node("1:1", "Team Photo — Jane", "RECTANGLE", box=(0, 0, 100, 100),
                                fills=[_image_fill()]))

        assert "**Responsive Priority: CRITICAL**" in md
        assert "object-position: top center" in md

    def test_hero_background_image(self):
        md = _render(_make_node(
            "1:1", "Hero", box=(0, 0, 1440, 700), fills=[_image_fill()],
            children=[_make_node("2:1", "Headline", "TEXT", box=(100, 100, 600, 80), characters="Hi")],
        ))

        assert "**Image (Hero Background):**" in md
        assert "min-height: 700px" in md

    def test_exported_icon(self):
        options = SpecOptions(exported_icons={"1:1": "arrow-right.svg"})

        md = _render(_make_node("1:1", "Arrow Right", "VECTOR", box=(0, 0, 24, 24)), options)

        assert "**Icon (SVG):**" in md
        assert "- Source: `/images/icons/arrow-right.svg`" in md

    def test_effects_block(self):
        md = _render(_make_node("1:1", "Card", box=(0, 0, 300, 200), effects=[
            {"type": "DROP_SHADOW", "radius": 8, "offset": {"x": 0, "y": 4}},
            {"type": "BACKGROUND_BLUR", "radius": 10, "visible": False},
        ]))

        assert "**Effects:**\n- Drop shadow: 0px 4px 8px" in md
        assert "Background blur" not in md


class TestComposites:
    def _hero(self) -> Dict[str, Any]:
        return _make_node("1:1", "Hero", box=(0, 0, 1440, 600), children=[
            _make_node("2:1", "Mountains", "RECTANGLE", box=(0, 0, 1440, 600), fills=[_image_fill()]),
            _make_node("2:2", "Fog", "RECTANGLE", box=(0, 200, 1440, 400),
                       fills=[{"type": "SOLID", "color": {"r": 1, "g": 1, "b": 1, "a": 0.5}}]),
            _make_node("2:3", "Headline", "TEXT", box=(100, 100, 600, 80), characters="Explore"),
        ])

    def test_pure_composite_replaces_children(self):
        options = SpecOptions(composite_images={"1:1": ["/images/composite-hero.png"]})

        md = _render(self._hero(), options)

        assert "**Composite Background (rendered as single image):**" in md
        assert "- Source: `/images/composite-hero.png` (1440x600)" in md
        assert "### Mountains" not in md
        assert "### Headline" not in md

    def test_text_overlay_composite_keeps_text(self):
        options = SpecOptions(
            composite_images={"1:1": [
                "/images/composite-hero-layer-1.png",
                "/images/composite-hero-layer-2.png",
            ]},
            composite_text_overlays={"1:1"},
        )

        md = _render(self._hero(), options)

        assert "(visual layers only — text NOT included in this image)" in md
        assert "  * `/images/composite-hero-layer-1.png` (z-index: 0)" in md
        assert "  * `/images/composite-hero-layer-2.png` (z-index: 1)" in md
        assert "### Headline" in md
        assert "> Explore" in md
        assert "### Mountains" not in md


class TestChildren:
    def test_z_index_hints_without_auto_layout(self):
        md = _render(_make_node("1:1", "Card", box=(0, 0, 400, 300), children=[
            _make_node("2:1", "Photo", "RECTANGLE", box=(0, 0, 400, 300), fills=[_image_fill()]),
            _make_node("2:2", "Caption", "TEXT", box=(20, 250, 200, 30), characters="Hello"),
        ]))

        assert "<!-- z-index: 0 (image layer: back — behind text content) -->" in md
        assert "<!-- z-index: 10 (text/content layer" in md
        assert md.index("z-index: 0") < md.index("### Photo") < md.index("z-index: 10")

    def test_no_z_index_hints_with_auto_layout(self):
        md = _render(_make_node("1:1", "Stack", box=(0, 0, 400, 300), layoutMode="VERTICAL", children=[
            _make_node("2:1", "A", box=(0, 0, 400, 100)),
            _make_node("2:2", "B", box=(0, 100, 400, 100)),
        ]))

        assert "z-index" not in md

    def test_tiny_decorations_are_filtered(self):
        md = _render(_make_node("1:1", "Card", box=(0, 0, 400, 300), children=[
            _make_node("2:1", "Dot", "ELLIPSE", box=(0, 0, 4, 4),
                       fills=[{"type": "SOLID"}]),
            _make_node("2:2", "Body", "FRAME", box=(0, 50, 400, 200)),
        ]))

        assert "### Body" in md
        assert "Dot" not in md

    def test_sequential_pattern(self):
        md = _render(_make_node("1:1", "How it works", box=(0, 0, 1200, 400), layoutMode="HORIZONTAL",
                                children=[
                                    _make_node("2:1", "Step 1", box=(0, 0, 300, 300)),
                                    _make_node("2:2", "Step 2", box=(400, 0, 300, 300)),
                                    _make_node("2:3", "Step 3", box=(800, 0, 300, 300)),
                                ]))

        assert "**Sequential Pattern Detected (numbered-steps):**" in md
        assert "- Items: Step 1 → Step 2 → Step 3" in md


# ─── Formatters ───────────────────────────────────────────────────────


def test_every_node_type_has_a_label():
    assert set(NODE_TYPE_LABELS) == set(NodeType)
    assert format_node_type(NodeType.REGULAR_POLYGON) == "Polygon"


class TestFormatEffect:
    def test_drop_shadow_with_spread_and_color(self):
        effect = ShadowEffect.model_validate({
            "type": "DROP_SHADOW", "radius": 8, "spread": 2,
            "offset": {"x": 0, "y": 4}, "color": {"r": 0, "g": 0, "b": 0, "a": 0.25},
        })

        assert format_effect(effect) == "Drop shadow: 0px 4px 8px spread 2px rgba(0, 0, 0, 0.25)"

    def test_inner_shadow(self):
        effect = ShadowEffect.model_validate({"type": "INNER_SHADOW", "radius": 4})

        assert format_effect(effect) == "Inner shadow: 0px 0px 4px"

    def test_progressive_blur(self):
        effect = LayerBlurEffect.model_validate({"type": "LAYER_BLUR", "radius": 6, "blurType": "PROGRESSIVE"})

        assert format_effect(effect).startswith("Progressive blur: 6px")

    def test_unknown_effect(self):
        with pytest.raises(TypeError):
            format_effect(object())


def test_format_typography_truncation_and_spacing():
    style = TypeStyle.model_validate({
        "fontFamily": "Inter", "fontSize": 14, "letterSpacing": 0.5,
        "textCase": "UPPER", "textTruncation": "ENDING", "maxLines": 2,
    })

    text = format_typography(style)

    assert "- Font: Inter" in text
    assert "- Letter spacing: 0.50px" in text
    assert "- Text transform: uppercase" in text
    assert "-webkit-line-clamp: 2" in text


def test_format_corner_radius_per_corner():
    node = DesignNode.model_validate({
        "id": "1:1", "type": "RECTANGLE", "rectangleCornerRadii": [8, 8, 0, 0],
    })

    assert format_corner_radius(node) == "8px 8px 0px 0px"
