"""Error taxonomy for the Figma integration.

Every error carries remediation text rather than raw HTTP bodies.
"""

from __future__ import annotations

from typing import Optional


class FigmaClientError(Exception):
    """Raised when a Figma API call fails."""


class FigmaAuthError(FigmaClientError):
    """Token missing or rejected (401)."""


class FigmaAccessError(FigmaClientError):
    """Token valid but lacks access to the file (403)."""


class FigmaNotFoundError(FigmaClientError):
    """File or node does not exist (404)."""


class FigmaRateLimitError(FigmaClientError):
    """Rate limit hit (429) with no cached fallback."""

    def __init__(
        self,
        message: str,
        retry_after: Optional[float] = None,
        plan_tier: Optional[str] = None,
        limit_type: Optional[str] = None,
    ):
        super().__init__(message)
        self.retry_after = retry_after
        self.plan_tier = plan_tier
        self.limit_type = limit_type


class FigmaCdnBlockError(FigmaRateLimitError):
    """Retry-After so long that the block is effectively per-IP / per-plan."""


class FigmaTimeoutError(FigmaClientError, TimeoutError):
    """Request timed out and no cached response was available."""


class MalformedIdentifierError(FigmaClientError, ValueError):
    """Input is neither a Figma URL nor a bare file key."""


class FigmaResponseError(FigmaClientError):
    """200 response whose body is not valid JSON."""
