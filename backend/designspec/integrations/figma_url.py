"""Figma identifier parsing: bare file keys and file/design/proto/board URLs."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import quote, unquote

from .figma_errors import MalformedIdentifierError

_FILE_KEY_RE = re.compile(r"^[a-zA-Z0-9]{22}$")
_FIGMA_URL_RE = re.compile(
    r"figma\.com/(?:file|design|proto|board)/([a-zA-Z0-9]+)"
    r"(?:/([^?#]+))?"
    r"(?:\?[^#]*node-id=([^&#]+))?",
    re.IGNORECASE,
)
_EMBEDDED_KEY_RE = re.compile(r"([a-zA-Z0-9]{22})")
# URL node ids use dashes ("12-34"); the REST API wants colons
_DASH_NODE_ID_RE = re.compile(r"^\d+-\d+$")


@dataclass
class FigmaUrlParts:
    file_key: str
    node_ids: List[str] = field(default_factory=list)
    file_name: Optional[str] = None


def parse_figma_url(identifier: str) -> FigmaUrlParts:
    """Parse a Figma URL or bare file key.

    Raises:
        MalformedIdentifierError: when no file key can be found.
    """
    trimmed = identifier.strip()

    if _FILE_KEY_RE.match(trimmed):
        return FigmaUrlParts(file_key=trimmed)

    m = _FIGMA_URL_RE.search(trimmed)
    if m:
        parts = FigmaUrlParts(file_key=m.group(1))
        if m.group(2):
            parts.file_name = unquote(m.group(2).replace("-", " "))
        if m.group(3):
            for raw in unquote(m.group(3)).split(","):
                node_id = raw.strip()
                if _DASH_NODE_ID_RE.match(node_id):
                    node_id = node_id.replace("-", ":", 1)
                parts.node_ids.append(node_id)
        return parts

    m = _EMBEDDED_KEY_RE.search(trimmed)
    if m:
        return FigmaUrlParts(file_key=m.group(1))

    raise MalformedIdentifierError(
        f'Invalid Figma identifier: "{identifier}". Provide a file key (22 characters) '
        "or Figma URL (e.g., https://figma.com/file/XXXXX/Name or "
        "https://figma.com/design/XXXXX/Name)"
    )


def format_node_ids(node_ids: List[str]) -> str:
    """Comma-joined, individually URL-encoded ids for the ``ids=`` query param."""
    return ",".join(quote(node_id, safe="") for node_id in node_ids)
