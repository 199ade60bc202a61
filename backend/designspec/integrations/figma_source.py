"""Figma integration entry point — identifier + mode in, text artifact out.

Modes:
    spec     markdown design specification (plus summaries / tokens / content
             digest in metadata)
    tokens   design tokens in css | scss | json | tailwind
    content  text content and information architecture
    plan     numbered implementation plan

Only the tree fetch and the image-fill URL resolution are essential; icon
SVGs, frame screenshots and composite renders are best-effort and recorded
as EnrichmentOutcome entries in the result metadata.

Usage:
    async with FigmaClient() as client:
        result = await FigmaIntegration(client).fetch(url, mode="spec")
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

from ..nodes.collectors import collect_font_families, collect_icon_nodes, collect_image_refs
from ..nodes.composite import (
    CompositeGroup,
    collect_composite_nodes,
    composite_render_paths,
    select_primary_frames,
)
from ..nodes.models import DesignNode, FigmaFile, FigmaNodesResponse, NodeType
from ..settings import (
    FIGMA_NONESSENTIAL_DELAY,
    FIGMA_RENDER_SCALE,
    FIGMA_SCREENSHOT_DELAY,
    SCREENSHOT_FRAME_LIMIT,
    SPEC_EMBEDDED_TOKEN_FORMAT,
)
from ..spec.content_extractor import extract_content, format_content_as_markdown
from ..spec.design_spec import SpecOptions, nodes_to_spec
from ..spec.design_tokens import TOKEN_FORMATS, extract_tokens_from_file, format_tokens
from ..spec.google_fonts import check_fonts, font_substitution_map
from ..spec.plan_generator import PlanOptions, extract_figma_plan, extract_section_summaries
from .figma_client import EnrichmentOutcome, EnrichmentStatus, FigmaClient
from .figma_url import parse_figma_url

logger = logging.getLogger("designspec.integrations.figma")

# Page ids ("0:1") address whole canvases; spec/plan fetch the file instead
_PAGE_ID_RE = re.compile(r"^0:\d+$")

# Sections kept in the compact content digest
_CONTENT_DIGEST_HEADINGS = ("## Navigation", "## Summary")


class FetchMode(str, Enum):
    SPEC = "spec"
    TOKENS = "tokens"
    CONTENT = "content"
    PLAN = "plan"


@dataclass
class IntegrationResult:
    content: str
    source: str
    title: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class _Tree:
    file_name: str
    nodes: List[DesignNode]
    # Set only when the whole file was fetched
    file: Optional[FigmaFile] = None


def _merge_ids(*groups: Optional[List[str]]) -> List[str]:
    merged: List[str] = []
    for group in groups:
        for node_id in group or []:
            if node_id not in merged:
                merged.append(node_id)
    return merged


def collect_top_level_frame_ids(nodes: List[DesignNode], limit: int) -> List[str]:
    """Primary FRAME ids of each page (or requested FRAME nodes), up to *limit*."""
    frame_ids: List[str] = []
    for node in nodes:
        if not node.visible:
            continue
        if node.type == NodeType.CANVAS:
            candidates = [c for c in select_primary_frames(node.children) if c.type == NodeType.FRAME]
        elif node.type == NodeType.FRAME:
            candidates = [node]
        else:
            candidates = []
        for frame in candidates:
            frame_ids.append(frame.id)
            if len(frame_ids) >= limit:
                return frame_ids
    return frame_ids


def content_digest(content_markdown: str) -> Optional[str]:
    """Navigation and summary sections of a content report, or None."""
    kept: List[str] = []
    in_section = False
    for line in content_markdown.split("\n"):
        if line.startswith(_CONTENT_DIGEST_HEADINGS):
            in_section = True
            kept.append(line)
        elif line.startswith("## ") and in_section:
            in_section = False
        elif in_section:
            kept.append(line)
    return "\n".join(kept) if kept else None


class FigmaIntegration:
    """Compile a Figma file (or some of its nodes) into a text artifact."""

    def __init__(self, client: FigmaClient):
        self.client = client

    async def fetch(
        self,
        identifier: str,
        mode: str = FetchMode.SPEC.value,
        node_ids: Optional[List[str]] = None,
        token_format: str = "css",
        project_stack: Optional[str] = None,
    ) -> IntegrationResult:
        """Fetch and compile *identifier* (file key or Figma URL).

        Raises:
            ValueError: for an unknown mode or token format.
            MalformedIdentifierError: when no file key can be parsed.
            FigmaClientError: when an essential request fails.
        """
        fetch_mode = FetchMode(mode)
        if fetch_mode == FetchMode.TOKENS and token_format not in TOKEN_FORMATS:
            raise ValueError(
                f"Unknown token format {token_format!r}; expected one of {', '.join(TOKEN_FORMATS)}"
            )
        parts = parse_figma_url(identifier)
        ids = _merge_ids(parts.node_ids, node_ids)
        logger.info(f"fetch: file={parts.file_key}, mode={fetch_mode.value}, node_ids={ids}")

        if fetch_mode == FetchMode.TOKENS:
            return await self._fetch_tokens(parts.file_key, token_format)
        if fetch_mode == FetchMode.CONTENT:
            return await self._fetch_content(parts.file_key, ids)

        specific = [node_id for node_id in ids if not _PAGE_ID_RE.match(node_id)]
        if fetch_mode == FetchMode.PLAN:
            return await self._fetch_plan(parts.file_key, specific, project_stack)
        return await self._fetch_spec(parts.file_key, specific)

    # ------------------------------------------------------------------
    # Tree fetch
    # ------------------------------------------------------------------

    async def _fetch_tree(self, file_key: str, node_ids: List[str]) -> _Tree:
        if node_ids:
            data = await self.client.get_file_nodes(file_key, node_ids)
            response = FigmaNodesResponse.model_validate(data)
            return _Tree(file_name=response.name, nodes=response.documents())
        data = await self.client.get_file(file_key)
        file = FigmaFile.model_validate(data)
        return _Tree(file_name=file.name, nodes=list(file.document.children), file=file)

    async def _resolve_assets(self, file_key: str, nodes: List[DesignNode]) -> Dict[str, Any]:
        """Essential, render-free analysis shared by spec and plan modes."""
        checks = check_fonts(collect_font_families(nodes))
        image_refs = collect_image_refs(nodes)
        image_fill_urls: Dict[str, str] = {}
        if image_refs:
            image_fill_urls = await self.client.get_image_fills(file_key)
        return {
            "font_checks": checks,
            "font_substitutions": font_substitution_map(checks),
            "image_refs": image_refs,
            "image_fill_urls": image_fill_urls,
            "icon_nodes": collect_icon_nodes(nodes),
            "composites": collect_composite_nodes(nodes),
        }

    # ------------------------------------------------------------------
    # Best-effort renders
    # ------------------------------------------------------------------

    async def _render_enrichments(
        self,
        file_key: str,
        nodes: List[DesignNode],
        assets: Dict[str, Any],
    ) -> Tuple[Dict[str, str], Dict[str, Optional[str]], Dict[str, List[str]], Set[str], Dict[str, Any]]:
        exported_icons: Dict[str, str] = {}
        screenshots: Dict[str, Optional[str]] = {}
        composite_images: Dict[str, List[str]] = {}
        text_overlays: Set[str] = set()
        outcomes: Dict[str, Any] = {}

        icons = assets["icon_nodes"]
        composites: List[CompositeGroup] = assets["composites"]

        if self.client.low_budget:
            skipped = EnrichmentOutcome(EnrichmentStatus.SKIPPED, reason="low-budget plan detected")
            for name in ("icons", "screenshots", "composites"):
                outcomes[name] = skipped.describe()
            logger.info("fetch: low-budget plan, skipping icon / screenshot / composite renders")
            return exported_icons, screenshots, composite_images, text_overlays, outcomes

        composite_ids = {group.node_id for group in composites}
        frame_ids = [
            frame_id
            for frame_id in collect_top_level_frame_ids(nodes, SCREENSHOT_FRAME_LIMIT)
            if frame_id not in composite_ids
        ]

        if icons or frame_ids:
            await asyncio.sleep(FIGMA_NONESSENTIAL_DELAY)

        if icons:
            outcome = await self.client.render_images(
                file_key, [icon.node_id for icon in icons], fmt="svg",
            )
            outcomes["icons"] = outcome.describe()
            if outcome.ok:
                for icon in icons:
                    if outcome.data.get(icon.node_id):
                        exported_icons[icon.node_id] = icon.filename

        if frame_ids:
            if icons:
                await asyncio.sleep(FIGMA_SCREENSHOT_DELAY)
            outcome = await self.client.render_images(
                file_key, frame_ids, fmt="png", scale=FIGMA_RENDER_SCALE,
            )
            outcomes["screenshots"] = outcome.describe()
            if outcome.ok:
                screenshots = dict(outcome.data)

        if composites:
            await asyncio.sleep(FIGMA_NONESSENTIAL_DELAY)
            render_ids: List[str] = []
            for group in composites:
                for node_id in group.render_ids:
                    if node_id not in render_ids:
                        render_ids.append(node_id)
            outcome = await self.client.render_images(
                file_key, render_ids, fmt="png", scale=FIGMA_RENDER_SCALE,
            )
            outcomes["composites"] = outcome.describe()
            if outcome.ok:
                for group in composites:
                    paths = composite_render_paths(group, outcome.data)
                    if not paths:
                        continue
                    composite_images[group.node_id] = paths
                    if group.has_text_overlays:
                        text_overlays.add(group.node_id)

        logger.info(
            f"fetch: enrichments for {file_key}: icons={len(exported_icons)}, "
            f"screenshots={sum(1 for v in screenshots.values() if v)}, "
            f"composites={len(composite_images)}"
        )
        return exported_icons, screenshots, composite_images, text_overlays, outcomes

    # ------------------------------------------------------------------
    # Modes
    # ------------------------------------------------------------------

    async def _fetch_spec(self, file_key: str, node_ids: List[str]) -> IntegrationResult:
        tree = await self._fetch_tree(file_key, node_ids)
        assets = await self._resolve_assets(file_key, tree.nodes)
        exported_icons, screenshots, composite_images, text_overlays, outcomes = (
            await self._render_enrichments(file_key, tree.nodes, assets)
        )

        options = SpecOptions(
            font_substitutions=assets["font_substitutions"],
            font_checks=assets["font_checks"],
            image_fill_urls=assets["image_fill_urls"],
            exported_icons=exported_icons,
            composite_images=composite_images,
            composite_text_overlays=text_overlays,
        )
        content = nodes_to_spec(tree.nodes, tree.file_name, options)
        summaries = extract_section_summaries(tree.nodes, options)

        tokens_content = None
        if tree.file is not None:
            tokens = extract_tokens_from_file(tree.file)
            if tokens.total > 0:
                formatted = format_tokens(tokens, SPEC_EMBEDDED_TOKEN_FORMAT)
                tokens_content = (
                    f"# Design Tokens: {tree.file_name}\n\n"
                    f"```{SPEC_EMBEDDED_TOKEN_FORMAT}\n{formatted}\n```\n"
                )

        extracted = extract_content(tree.nodes, tree.file_name)
        digest = content_digest(format_content_as_markdown(extracted))

        composites: List[CompositeGroup] = assets["composites"]
        return IntegrationResult(
            content=content,
            source=f"figma:{file_key}",
            title=tree.file_name,
            metadata={
                "type": "figma",
                "mode": FetchMode.SPEC.value,
                "file_key": file_key,
                "node_count": len(tree.nodes),
                "font_checks": [asdict(c) for c in assets["font_checks"]],
                "image_refs": [asdict(r) for r in assets["image_refs"]],
                "image_fill_urls": assets["image_fill_urls"],
                "frame_screenshots": screenshots,
                "icon_nodes": [asdict(i) for i in assets["icon_nodes"]],
                "exported_icons": exported_icons,
                "tokens_content": tokens_content,
                "content_structure": digest,
                "composite_nodes": [asdict(g) for g in composites],
                "composite_images": composite_images,
                "composite_text_overlays": sorted(text_overlays),
                "section_summaries": [asdict(s) for s in summaries],
                "enrichments": outcomes,
            },
        )

    async def _fetch_plan(
        self, file_key: str, node_ids: List[str], project_stack: Optional[str],
    ) -> IntegrationResult:
        tree = await self._fetch_tree(file_key, node_ids)
        assets = await self._resolve_assets(file_key, tree.nodes)

        options = SpecOptions(
            font_substitutions=assets["font_substitutions"],
            font_checks=assets["font_checks"],
            image_fill_urls=assets["image_fill_urls"],
        )
        summaries = extract_section_summaries(tree.nodes, options)

        font_names: List[str] = []
        for check in assets["font_checks"]:
            name = check.font_family if check.is_google_font else check.suggested_alternative
            if name and name not in font_names:
                font_names.append(name)

        has_tokens = tree.file is not None and extract_tokens_from_file(tree.file).total > 0
        plan = extract_figma_plan(summaries, PlanOptions(
            file_name=tree.file_name,
            project_stack=project_stack,
            has_design_tokens=has_tokens,
            icon_filenames=[icon.filename for icon in assets["icon_nodes"]],
            font_names=font_names,
        ))
        return IntegrationResult(
            content=plan,
            source=f"figma:{file_key}:plan",
            title=f"{tree.file_name} - Implementation Plan",
            metadata={
                "type": "figma",
                "mode": FetchMode.PLAN.value,
                "file_key": file_key,
                "section_count": len(summaries),
                "section_summaries": [asdict(s) for s in summaries],
            },
        )

    async def _fetch_tokens(self, file_key: str, token_format: str) -> IntegrationResult:
        data = await self.client.get_file(file_key)
        file = FigmaFile.model_validate(data)
        tokens = extract_tokens_from_file(file)
        formatted = format_tokens(tokens, token_format)
        counts = tokens.counts()
        ext = "js" if token_format == "tailwind" else token_format

        content = (
            f"# Design Tokens: {file.name}\n\n"
            f"Extracted {tokens.total} tokens from Figma.\n\n"
            f"- Colors: {counts['colors']}\n"
            f"- Typography: {counts['typography']}\n"
            f"- Shadows: {counts['shadows']}\n"
            f"- Border Radii: {counts['radii']}\n"
            f"- Spacing: {counts['spacing']}\n\n"
            f"```{ext}\n{formatted}\n```\n"
        )
        return IntegrationResult(
            content=content,
            source=f"figma:{file_key}:tokens",
            title=f"{file.name} - Design Tokens",
            metadata={
                "type": "figma",
                "mode": FetchMode.TOKENS.value,
                "format": token_format,
                "file_key": file_key,
                "token_counts": counts,
            },
        )

    async def _fetch_content(self, file_key: str, node_ids: List[str]) -> IntegrationResult:
        tree = await self._fetch_tree(file_key, node_ids)
        extracted = extract_content(tree.nodes, tree.file_name)
        return IntegrationResult(
            content=format_content_as_markdown(extracted),
            source=f"figma:{file_key}:content",
            title=f"{tree.file_name} - Content Extraction",
            metadata={
                "type": "figma",
                "mode": FetchMode.CONTENT.value,
                "file_key": file_key,
                "stats": asdict(extracted.stats),
                "navigation": asdict(extracted.navigation),
                "extracted_content": extracted,
            },
        )
