"""Semantic classifiers over the Figma node tree.

Pure functions, no HTTP calls. They operate on already-parsed DesignNode
models and are shared by the spec, content and plan formatters:

- Text role classification (priority chain: name → parent → path →
  typography → content → length)
- Image responsive importance (people first, then size, then keywords)
- Sequential pattern detection among siblings
- Notable component categories for section summaries
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..nodes.figma_utils import find_first_text, is_auto_name
from ..nodes.models import DesignNode, Rect

logger = logging.getLogger("designspec.integrations.figma")

# =====================================================================
# Constants
# =====================================================================


class SemanticRole(str, Enum):
    HEADING = "heading"
    SUBHEADING = "subheading"
    BODY = "body"
    BUTTON = "button"
    LABEL = "label"
    LINK = "link"
    CAPTION = "caption"
    PLACEHOLDER = "placeholder"
    NAVIGATION = "navigation"
    FOOTER = "footer"
    CTA = "cta"
    TITLE = "title"
    DESCRIPTION = "description"
    UNKNOWN = "unknown"


# Node-name keyword sets, checked in this order (subheading before heading
# so "subtitle" / "sub-heading" never classify as heading)
SUBHEADING_NAMES = ("subheading", "subtitle", "tagline", "sub-heading")
HEADING_NAMES = ("heading", "title", "headline", "h1", "h2", "h3")
BUTTON_NAMES = ("button", "btn", "cta")
LABEL_NAMES = ("label", "field-label", "input-label", "form-label")
LINK_NAMES = ("link", "anchor", "href")
CAPTION_NAMES = ("caption", "hint", "helper")
PLACEHOLDER_NAMES = ("placeholder", "input-placeholder")
NAV_NAMES = ("nav", "navigation", "menu-item", "nav-item", "nav-link")
FOOTER_NAMES = ("footer", "footer-link", "footer-text")
BODY_NAMES = ("description", "desc", "body", "paragraph", "text", "content")

NAV_CONTEXT = ("nav", "navigation", "menu", "header")

# Whole-word call-to-action phrases in text content
_BUTTON_CTA_TEXT_RE = re.compile(r"\b(get started|sign up|try|start)\b")
_CTA_TEXT_RE = re.compile(r"\b(get started|sign up|learn more|try|start|subscribe)\b")

_PERSON_IMAGE_RE = re.compile(
    r"\b(person|people|portrait|photo|avatar|team|founder|headshot|profile|model|"
    r"woman|man|face|selfie|human|client|testimonial)\b"
)
_HERO_IMAGE_RE = re.compile(r"\bhero.*(image|photo|pic|img)\b")
_KEY_IMAGE_RE = re.compile(
    r"\b(product|feature|showcase|main|key|primary|highlight|mockup|screenshot|demo)\b"
)

CRITICAL_IMAGE_HINT = (
    "Contains a person/people — this is the KEY visual element. MUST remain visible "
    "at ALL viewport sizes. Use `object-position: top center` to keep the face/upper "
    "body visible when cropping. NEVER use `display: none` or `visibility: hidden` on "
    "this image at any breakpoint."
)
LARGE_IMAGE_HINT = (
    "Large primary image — keep visible at all breakpoints. On smaller screens, scale "
    "proportionally rather than hiding."
)
KEY_IMAGE_HINT = "Key content image — must remain visible and prominent at all breakpoints."

# Area ratio (image / section) above which an image is the primary visual
LARGE_IMAGE_AREA_RATIO = 0.3

# Notable component categories (matched against a normalized name)
COMPONENT_CATEGORY_PATTERNS = (
    ("indicator", re.compile(r"\b(indicator|dots?|pagination|pager|progress|stepper|scroll)")),
    ("sidebar", re.compile(r"\b(sidebar|side bar|drawer|aside|rail)")),
    ("nav", re.compile(r"\b(nav|menu|header|tab ?bar|breadcrumb)")),
    ("footer", re.compile(r"\b(footer|bottom ?bar)")),
    ("decorative", re.compile(
        r"\b(decor|ornament|blob|pattern|glow|sparkle|illustration|background|bg\b)"
    )),
)


def _has_any(value: str, patterns) -> bool:
    return any(p in value for p in patterns)


# =====================================================================
# Text Role Classification
# =====================================================================


def classify_text_role(
    node: DesignNode,
    frame_path: List[str],
    parent: Optional[DesignNode] = None,
) -> SemanticRole:
    """Classify a TEXT node's semantic role.

    Priority chain: node name, parent name, ancestor path, typography,
    text content, then text length.
    """
    name = node.name.lower()
    text = (node.characters or "").lower()
    parent_name = parent.name.lower() if parent is not None else ""
    path = "/".join(frame_path).lower()
    font_size = node.style.font_size if node.style is not None else 0.0
    font_weight = node.style.font_weight if node.style is not None else 0.0

    # 1. Node name (most reliable)
    if _has_any(name, SUBHEADING_NAMES):
        return SemanticRole.SUBHEADING
    if _has_any(name, HEADING_NAMES):
        return SemanticRole.HEADING
    if _has_any(name, BUTTON_NAMES):
        if "cta" in name or _BUTTON_CTA_TEXT_RE.search(text):
            return SemanticRole.CTA
        return SemanticRole.BUTTON
    if _has_any(name, LABEL_NAMES):
        return SemanticRole.LABEL
    if _has_any(name, LINK_NAMES):
        return SemanticRole.LINK
    if _has_any(name, CAPTION_NAMES):
        return SemanticRole.CAPTION
    if _has_any(name, PLACEHOLDER_NAMES):
        return SemanticRole.PLACEHOLDER
    if _has_any(name, NAV_NAMES):
        return SemanticRole.NAVIGATION
    if _has_any(name, FOOTER_NAMES):
        return SemanticRole.FOOTER
    if _has_any(name, BODY_NAMES):
        return SemanticRole.BODY if font_size >= 18 else SemanticRole.DESCRIPTION

    # 2. Parent name
    if _has_any(parent_name, NAV_CONTEXT):
        return SemanticRole.NAVIGATION
    if "footer" in parent_name:
        return SemanticRole.FOOTER
    if _has_any(parent_name, BUTTON_NAMES):
        return SemanticRole.BUTTON
    if "hero" in parent_name:
        if font_size >= 32:
            return SemanticRole.HEADING
        if font_size >= 20:
            return SemanticRole.SUBHEADING

    # 3. Ancestor path
    if _has_any(path, NAV_CONTEXT):
        return SemanticRole.NAVIGATION
    if "footer" in path:
        return SemanticRole.FOOTER

    # 4. Typography
    if font_size:
        if font_size >= 32 and font_weight >= 600:
            return SemanticRole.HEADING
        if font_size >= 24 and font_weight >= 500:
            return SemanticRole.SUBHEADING
        if font_size <= 12:
            return SemanticRole.CAPTION

    # 5. Short call-to-action copy
    if len(text) < 30 and _CTA_TEXT_RE.search(text):
        return SemanticRole.CTA

    # 6. Length
    if len(text) > 100:
        return SemanticRole.BODY
    if len(text) < 50:
        return SemanticRole.LABEL
    return SemanticRole.BODY


# =====================================================================
# Image Importance
# =====================================================================


@dataclass
class ImageImportance:
    priority: str  # critical | high
    hint: str


def is_person_image(name: str) -> bool:
    lower = name.lower()
    return bool(_PERSON_IMAGE_RE.search(lower) or _HERO_IMAGE_RE.search(lower))


def classify_image_importance(
    name: str,
    box: Optional[Rect],
    section_box: Optional[Rect],
) -> Optional[ImageImportance]:
    """Responsive priority of an image, measured against its enclosing section.

    People first (never hidden), then images covering a large share of the
    section, then product / key-content keywords.
    """
    if is_person_image(name):
        return ImageImportance("critical", CRITICAL_IMAGE_HINT)

    if box is not None and section_box is not None and section_box.area > 0:
        if box.area / section_box.area > LARGE_IMAGE_AREA_RATIO:
            return ImageImportance("high", LARGE_IMAGE_HINT)

    if _KEY_IMAGE_RE.search(name.lower()):
        return ImageImportance("high", KEY_IMAGE_HINT)

    return None


# =====================================================================
# Sequential Patterns
# =====================================================================


@dataclass
class SequentialPattern:
    type: str  # numbered-steps | numbered-content
    description: str
    labels: List[str] = field(default_factory=list)


_FIRST_INT_RE = re.compile(r"(\d+)")
_LEADING_INT_RE = re.compile(r"^[0\s]*(\d+)")


def _is_consecutive(numbers: List[int]) -> bool:
    return all(numbers[i] == numbers[i - 1] + 1 for i in range(1, len(numbers)))


def detect_sequential_pattern(children: List[DesignNode]) -> Optional[SequentialPattern]:
    """Detect numbered siblings ("Step 1", "Step 2" or text "01 …", "02 …").

    Figma auto-generated names ("Frame 1321317615") never count.
    """
    if len(children) < 2:
        return None

    # Strategy 1: first integer in the layer name
    named = []
    for child in children:
        if is_auto_name(child.name):
            continue
        m = _FIRST_INT_RE.search(child.name)
        if m:
            named.append((int(m.group(1)), child.name))
    if len(named) >= 2:
        named.sort(key=lambda item: item[0])
        numbers = [num for num, _ in named]
        if _is_consecutive(numbers):
            return SequentialPattern(
                type="numbered-steps",
                description=f"{len(named)} ordered items ({numbers[0]}–{numbers[-1]})",
                labels=[label for _, label in named],
            )

    # Strategy 2: leading integer in the first nested text
    texts = []
    for child in children:
        first = find_first_text(child)
        if not first:
            continue
        m = _LEADING_INT_RE.match(first)
        if m:
            texts.append((int(m.group(1)), first[:40].replace("\n", " ")))
    if len(texts) >= 2:
        texts.sort(key=lambda item: item[0])
        if _is_consecutive([num for num, _ in texts]):
            return SequentialPattern(
                type="numbered-content",
                description=f"{len(texts)} sequentially numbered content blocks",
                labels=[label for _, label in texts],
            )

    return None


# =====================================================================
# Component Categories
# =====================================================================


def classify_component_category(name: str) -> Optional[str]:
    """Notable-component category from a layer name, or None."""
    normalized = re.sub(r"[_\-]+", " ", name.lower())
    for category, pattern in COMPONENT_CATEGORY_PATTERNS:
        if pattern.search(normalized):
            return category
    return None
