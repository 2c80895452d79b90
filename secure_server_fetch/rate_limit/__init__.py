"""
Rate Limiting Module
====================
Sliding window rate limit gate with Redis and in-memory backends.
"""

from .models import (
    RateLimitInfo,
    RateLimitDecision,
    RateLimitResult,
    SlidingWindow,
    HEADER_LIMIT,
    HEADER_REMAINING,
    HEADER_RESET,
    HEADER_RETRY_AFTER,
)
from .in_memory import InMemorySlidingWindow
from .redis_window import RedisSlidingWindow, SLIDING_WINDOW_SCRIPT
from .gate import (
    RateLimitGate,
    rate_limit,
    sanitize_identifier,
    DEFAULT_PREFIX,
    MAX_IDENTIFIER_LENGTH,
)
from .middleware import RateLimitMiddleware, client_ip

__all__ = [
    # Models
    "RateLimitInfo",
    "RateLimitDecision",
    "RateLimitResult",
    "SlidingWindow",
    "HEADER_LIMIT",
    "HEADER_REMAINING",
    "HEADER_RESET",
    "HEADER_RETRY_AFTER",
    # Limiters
    "InMemorySlidingWindow",
    "RedisSlidingWindow",
    # Scripts
    "SLIDING_WINDOW_SCRIPT",
    # Gate
    "RateLimitGate",
    "rate_limit",
    "sanitize_identifier",
    "DEFAULT_PREFIX",
    "MAX_IDENTIFIER_LENGTH",
    # Middleware
    "RateLimitMiddleware",
    "client_ip",
]
