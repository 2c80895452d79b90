"""
Rate Limit Models
=================
Data models for limiter responses and gate decisions.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

HEADER_LIMIT = "X-RateLimit-Limit"
HEADER_REMAINING = "X-RateLimit-Remaining"
HEADER_RESET = "X-RateLimit-Reset"
HEADER_RETRY_AFTER = "Retry-After"


@dataclass
class RateLimitInfo:
    """Answer from a sliding window backend for one key."""
    allowed: bool
    remaining: int
    limit: int
    reset_at: int  # Unix timestamp


class SlidingWindow(Protocol):
    """Sliding window limiter configured with a rate and a window."""

    async def limit(self, key: str) -> RateLimitInfo:
        ...


@dataclass
class RateLimitDecision:
    """Gate decision with quota information."""
    allowed: bool
    limit: int
    remaining: int
    reset_at: int  # Unix timestamp
    retry_after: Optional[int] = None  # Seconds until retry allowed

    @property
    def headers(self) -> Dict[str, str]:
        headers = {
            HEADER_LIMIT: str(self.limit),
            HEADER_REMAINING: str(self.remaining),
            HEADER_RESET: str(self.reset_at),
        }
        if self.retry_after is not None:
            headers[HEADER_RETRY_AFTER] = str(self.retry_after)
        return headers


@dataclass
class RateLimitResult:
    """Successful outcome handed back to request handlers."""
    success: bool
    headers: Dict[str, str] = field(default_factory=dict)
