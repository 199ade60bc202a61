#!/usr/bin/env python3
"""Compile a Figma file into a spec / tokens / content / plan artifact.

Usage:
    # Design spec for a whole file
    python scripts/compile_figma.py 6kGd851qaAX4TiL44vpIrO

    # Specific frame from a URL, written to disk
    python scripts/compile_figma.py "https://www.figma.com/design/xxx/yyy?node-id=123-456" \
        --output output/spec.md

    # Tailwind tokens
    python scripts/compile_figma.py 6kGd851qaAX4TiL44vpIrO --mode tokens --format tailwind

Requires:
    - FIGMA_TOKEN env var set (or --token)
"""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from designspec.integrations.figma_client import FigmaClient
from designspec.integrations.figma_errors import FigmaClientError
from designspec.integrations.figma_source import FetchMode, FigmaIntegration
from designspec.logging_config import get_compiler_logger, get_figma_logger

logger = get_figma_logger()
get_compiler_logger()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compile a Figma design into text artifacts")
    parser.add_argument("identifier", help="Figma file key or URL")
    parser.add_argument(
        "--mode", default=FetchMode.SPEC.value,
        choices=[m.value for m in FetchMode],
        help="Artifact to produce (default: spec)",
    )
    parser.add_argument(
        "--node-id", action="append", default=[],
        help="Node id to compile (repeatable; merged with ids in the URL)",
    )
    parser.add_argument(
        "--format", default="css", choices=["css", "scss", "json", "tailwind"],
        help="Token format for --mode tokens (default: css)",
    )
    parser.add_argument("--stack", default=None, help="Project stack named in the plan setup task")
    parser.add_argument("--token", default=None, help="Figma PAT (default: FIGMA_TOKEN)")
    parser.add_argument("--output", default=None, help="Write the artifact here instead of stdout")
    parser.add_argument(
        "--metadata", default=None,
        help="Also write the result metadata as JSON to this path",
    )
    return parser.parse_args()


async def run(args: argparse.Namespace) -> int:
    async with FigmaClient(token=args.token) as client:
        result = await FigmaIntegration(client).fetch(
            args.identifier,
            mode=args.mode,
            node_ids=args.node_id,
            token_format=args.format,
            project_stack=args.stack,
        )

    if args.output:
        out = Path(args.output)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(result.content, encoding="utf-8")
        logger.info(f"compile_figma: wrote {result.title} ({len(result.content)} chars) to {out}")
    else:
        print(result.content)

    if args.metadata:
        meta_path = Path(args.metadata)
        meta_path.parent.mkdir(parents=True, exist_ok=True)
        meta_path.write_text(
            json.dumps(result.metadata, indent=2, ensure_ascii=False, default=str),
            encoding="utf-8",
        )
    return 0


def main() -> int:
    args = parse_args()
    try:
        return asyncio.run(run(args))
    except FigmaClientError as e:
        logger.error(f"compile_figma: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
