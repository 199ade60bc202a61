"""Figma REST API client with response caching and rate-limit survival.

Essential calls (file tree, image fills) retry once on 429 and fall back to
stale cache on timeout or rate limit. Non-essential calls (renders) go
through ``try_request`` and return an explicit EnrichmentOutcome instead of
raising.

Environment:
    FIGMA_TOKEN — Figma Personal Access Token (required)

Usage:
    async with FigmaClient() as client:
        data = await client.get_file("6kGd851qaAX4TiL44vpIrO")
        outcome = await client.render_images(key, ["1:2"], fmt="png", scale=2)
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import httpx

from ..config import FIGMA_API_BASE, FIGMA_TOKEN
from ..settings import (
    FIGMA_CDN_BLOCK_THRESHOLD,
    FIGMA_ESSENTIAL_MAX_ATTEMPTS,
    FIGMA_HTTP_MAX_CONNECTIONS,
    FIGMA_HTTP_MAX_KEEPALIVE,
    FIGMA_HTTP_TIMEOUT,
    FIGMA_RATE_LIMIT_DEFAULT_WAIT,
    FIGMA_RATE_LIMIT_MAX_WAIT,
)
from .figma_cache import FigmaResponseCache
from .figma_errors import (
    FigmaAccessError,
    FigmaAuthError,
    FigmaCdnBlockError,
    FigmaClientError,
    FigmaNotFoundError,
    FigmaRateLimitError,
    FigmaResponseError,
    FigmaTimeoutError,
)
from .figma_url import format_node_ids

logger = logging.getLogger("designspec.integrations.figma")


class EnrichmentStatus(str, Enum):
    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class EnrichmentOutcome:
    """Result of a best-effort request."""

    status: EnrichmentStatus
    data: Any = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == EnrichmentStatus.OK

    def describe(self) -> Dict[str, Any]:
        return {"status": self.status.value, "reason": self.reason}


def _parse_retry_after(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def _strip_query(path: str) -> str:
    return path.split("?", 1)[0]


class FigmaClient:
    """Async Figma REST API client.

    Args:
        token: Figma PAT. Falls back to FIGMA_TOKEN env var.
        cache: Response cache. Defaults to the on-disk cache under FIGMA_CACHE_DIR.
        timeout: HTTP request timeout in seconds.
        base_url: API base URL.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        cache: Optional[FigmaResponseCache] = None,
        timeout: float = FIGMA_HTTP_TIMEOUT,
        base_url: str = FIGMA_API_BASE,
    ):
        self._token = token or FIGMA_TOKEN
        if not self._token:
            raise FigmaAuthError(
                "Figma token not configured. Set FIGMA_TOKEN environment variable "
                "or pass token= to FigmaClient()."
            )
        self._client: Optional[httpx.AsyncClient] = None
        self._timeout = timeout
        self._base_url = base_url
        self.cache = cache if cache is not None else FigmaResponseCache()
        # Sticky for the client's lifetime once a starter / low-limit plan is seen
        self.low_budget = False

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers={"X-FIGMA-TOKEN": self._token},
                timeout=self._timeout,
                limits=httpx.Limits(
                    max_connections=FIGMA_HTTP_MAX_CONNECTIONS,
                    max_keepalive_connections=FIGMA_HTTP_MAX_KEEPALIVE,
                ),
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "FigmaClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Request core
    # ------------------------------------------------------------------

    def _note_plan_headers(self, resp: httpx.Response) -> tuple:
        plan_tier = resp.headers.get("x-figma-plan-tier")
        limit_type = resp.headers.get("x-figma-rate-limit-type")
        if (limit_type == "low" or plan_tier == "starter") and not self.low_budget:
            logger.info(
                f"request: low-budget plan detected (plan={plan_tier}, "
                f"limit-type={limit_type}), skipping non-essential calls"
            )
            self.low_budget = True
        return plan_tier, limit_type

    async def request(self, path: str, essential: bool = True) -> Any:
        """GET *path* (query string included) with caching and 429 handling.

        Raises:
            FigmaClientError (or a subclass) when no response or cache entry
            can satisfy the request.
        """
        cached = self.cache.read(path)
        if cached is not None and cached.fresh:
            logger.debug(f"request: cache hit (fresh) for {_strip_query(path)}")
            return cached.data

        max_attempts = FIGMA_ESSENTIAL_MAX_ATTEMPTS if essential else 1
        client = await self._get_client()

        for attempt in range(max_attempts):
            logger.debug(
                f"request: {'essential' if essential else 'optional'} GET {path} "
                f"(attempt {attempt + 1}/{max_attempts})"
            )
            try:
                resp = await client.get(path)
            except httpx.TimeoutException as e:
                if cached is not None:
                    logger.info(f"request: timeout on {_strip_query(path)}, using stale cache")
                    return cached.data
                raise FigmaTimeoutError(
                    f"Figma API request timed out after {self._timeout:g}s. The file may be "
                    "too large; try fetching specific frames by node id."
                ) from e
            except httpx.HTTPError as e:
                if cached is not None:
                    logger.info(f"request: {type(e).__name__} on {_strip_query(path)}, using stale cache")
                    return cached.data
                raise FigmaClientError(
                    f"Figma API connection error on {_strip_query(path)}: {type(e).__name__}. "
                    "Check your network and try again."
                ) from e

            plan_tier, limit_type = self._note_plan_headers(resp)
            status = resp.status_code

            if status == 429:
                if cached is not None:
                    logger.info(f"request: 429 on {_strip_query(path)}, using stale cache")
                    return cached.data

                retry_after = _parse_retry_after(resp.headers.get("retry-after"))
                logger.debug(
                    f"request: 429 plan={plan_tier} limit-type={limit_type} "
                    f"retry-after={retry_after}"
                )

                if retry_after and retry_after > FIGMA_CDN_BLOCK_THRESHOLD:
                    days = math.ceil(retry_after / 86400)
                    lines = [f"Figma API blocked for ~{days} day(s) (CDN-level throttle)."]
                    if plan_tier:
                        lines.append(
                            f"  Plan tier: {plan_tier} | Limit type: {limit_type or 'unknown'}"
                        )
                    lines += [
                        "  This often happens with community files: the file owner's plan "
                        "sets your rate limits.",
                        "  Workarounds:",
                        "    1. Duplicate the file to your own Figma workspace",
                        "    2. Rotate network egress (e.g. a VPN) to get a fresh IP",
                        "    3. Upgrade to a Figma paid plan with a Dev seat",
                    ]
                    raise FigmaCdnBlockError(
                        "\n".join(lines),
                        retry_after=retry_after,
                        plan_tier=plan_tier,
                        limit_type=limit_type,
                    )

                if attempt + 1 < max_attempts:
                    wait = min(
                        retry_after if retry_after else FIGMA_RATE_LIMIT_DEFAULT_WAIT,
                        FIGMA_RATE_LIMIT_MAX_WAIT,
                    )
                    logger.warning(
                        f"request: rate limit hit, waiting {math.ceil(wait)}s before retry"
                    )
                    await asyncio.sleep(wait)
                    continue

                raise FigmaRateLimitError(
                    f"Figma API rate limit hit on {_strip_query(path)}. "
                    "Wait 1-2 minutes before trying again.",
                    retry_after=retry_after,
                    plan_tier=plan_tier,
                    limit_type=limit_type,
                )

            if status == 401:
                raise FigmaAuthError(
                    "Invalid Figma token. Create a Personal Access Token in Figma settings "
                    "and set FIGMA_TOKEN (or pass token= to FigmaClient())."
                )
            if status == 403:
                raise FigmaAccessError(
                    "Access denied. Make sure your token has access to this file."
                )
            if status == 404:
                raise FigmaNotFoundError(
                    "File not found. Check the file key or URL is correct."
                )
            if status != 200:
                try:
                    message = resp.json().get("message")
                except ValueError:
                    message = None
                raise FigmaClientError(
                    f"Figma API error {status}: {message or resp.reason_phrase}"
                )

            try:
                data = resp.json()
            except ValueError as e:
                raise FigmaResponseError(
                    f"Figma API returned a non-JSON body for {_strip_query(path)}. "
                    "Retry later; the API may be degraded."
                ) from e
            self.cache.write(path, data)
            return data

        raise FigmaClientError("Figma API request failed after retries")

    async def try_request(self, path: str) -> EnrichmentOutcome:
        """Best-effort GET: never raises, single attempt."""
        if self.low_budget:
            return EnrichmentOutcome(
                EnrichmentStatus.SKIPPED, reason="low-budget plan detected"
            )
        try:
            data = await self.request(path, essential=False)
        except FigmaClientError as e:
            logger.warning(f"try_request: {_strip_query(path)} failed: {e}")
            return EnrichmentOutcome(EnrichmentStatus.FAILED, reason=str(e))
        return EnrichmentOutcome(EnrichmentStatus.OK, data=data)

    # ------------------------------------------------------------------
    # Typed helpers
    # ------------------------------------------------------------------

    async def get_file(self, file_key: str) -> Dict[str, Any]:
        """GET /v1/files/:key"""
        data = await self.request(f"/v1/files/{file_key}")
        logger.info(f"get_file: file={file_key}, name={data.get('name')!r}")
        return data

    async def get_file_nodes(self, file_key: str, node_ids: List[str]) -> Dict[str, Any]:
        """GET /v1/files/:key/nodes?ids=..."""
        data = await self.request(
            f"/v1/files/{file_key}/nodes?ids={format_node_ids(node_ids)}"
        )
        logger.info(
            f"get_file_nodes: file={file_key}, requested={len(node_ids)}, "
            f"returned={len(data.get('nodes', {}))}"
        )
        return data

    async def get_image_fills(self, file_key: str) -> Dict[str, str]:
        """GET /v1/files/:key/images — imageRef -> download URL."""
        data = await self.request(f"/v1/files/{file_key}/images")
        images = (data.get("meta") or {}).get("images") or {}
        logger.info(f"get_image_fills: file={file_key}, refs={len(images)}")
        return images

    async def render_images(
        self,
        file_key: str,
        node_ids: List[str],
        fmt: str = "png",
        scale: Optional[int] = None,
    ) -> EnrichmentOutcome:
        """GET /v1/images/:key — non-essential; data is node id -> URL."""
        params = f"ids={format_node_ids(node_ids)}&{urlencode({'format': fmt})}"
        if scale is not None:
            params += f"&scale={scale}"
        outcome = await self.try_request(f"/v1/images/{file_key}?{params}")
        if not outcome.ok:
            return outcome

        data = outcome.data or {}
        if data.get("err"):
            logger.warning(f"render_images: file={file_key}, render error: {data['err']}")
            return EnrichmentOutcome(
                EnrichmentStatus.FAILED, reason=f"Figma image render error: {data['err']}"
            )
        images = data.get("images") or {}
        logger.info(
            f"render_images: file={file_key}, format={fmt}, requested={len(node_ids)}, "
            f"rendered={sum(1 for v in images.values() if v)}"
        )
        return EnrichmentOutcome(EnrichmentStatus.OK, data=images)
