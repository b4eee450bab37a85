"""Public interface for the Talis Aspire adapter."""

from __future__ import annotations

from .client import AspireAPIError, AspireAuthenticationError, AspireClient, RateLimitStatus
from .schema import ListDetailsPayload, TokenResponse, UserProfilePayload

__all__ = [
    "AspireAPIError",
    "AspireAuthenticationError",
    "AspireClient",
    "ListDetailsPayload",
    "RateLimitStatus",
    "TokenResponse",
    "UserProfilePayload",
]
