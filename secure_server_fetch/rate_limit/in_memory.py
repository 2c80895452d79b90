"""
In-Memory Sliding Window
========================
Simple in-memory sliding window limiter for development and testing.
"""

import math
import time
from collections import deque
from typing import Deque, Dict

from .models import RateLimitInfo


class InMemorySlidingWindow:
    """
    Simple in-memory sliding window limiter.

    For development and testing only.
    Use RedisSlidingWindow in production.
    """

    def __init__(self, rate: int = 100, window: int = 60):
        """
        Args:
            rate: Number of requests allowed per window
            window: Window size in seconds
        """
        self.rate = rate
        self.window = window
        self._hits: Dict[str, Deque[float]] = {}

    async def limit(self, key: str) -> RateLimitInfo:
        """
        Check if request is allowed.

        Args:
            key: Scoped rate limit key

        Returns:
            RateLimitInfo with decision and quota
        """
        now = time.time()
        hits = self._hits.setdefault(key, deque())

        # Drop hits that slid out of the window
        while hits and hits[0] <= now - self.window:
            hits.popleft()

        if len(hits) >= self.rate:
            return RateLimitInfo(
                allowed=False,
                remaining=0,
                limit=self.rate,
                reset_at=math.ceil(hits[0] + self.window),
            )

        hits.append(now)
        return RateLimitInfo(
            allowed=True,
            remaining=self.rate - len(hits),
            limit=self.rate,
            reset_at=math.ceil(now + self.window),
        )
