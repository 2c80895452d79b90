"""
Redis Sliding Window
====================
Redis-backed sliding window limiter using a Lua script over a sorted set.
"""

import math
import time
import uuid
from typing import Optional

import structlog
from redis.exceptions import NoScriptError

from .models import RateLimitInfo

logger = structlog.get_logger(__name__)

# Lua script for an atomic sliding window in Redis.
# Scores are milliseconds; members are unique per request.
SLIDING_WINDOW_SCRIPT = """
local key = KEYS[1]
local rate = tonumber(ARGV[1])
local window_ms = tonumber(ARGV[2])
local now_ms = tonumber(ARGV[3])
local member = ARGV[4]

redis.call('ZREMRANGEBYSCORE', key, 0, now_ms - window_ms)
local count = redis.call('ZCARD', key)

if count >= rate then
    local reset_ms = now_ms + window_ms
    local oldest = redis.call('ZRANGE', key, 0, 0, 'WITHSCORES')
    if #oldest > 0 then
        reset_ms = tonumber(oldest[2]) + window_ms
    end
    return {0, 0, rate, reset_ms}
end

redis.call('ZADD', key, now_ms, member)
redis.call('PEXPIRE', key, window_ms * 2)

return {1, rate - count - 1, rate, now_ms + window_ms}
"""


class RedisSlidingWindow:
    """
    Redis-backed sliding window limiter.

    Counts requests inside a continuously moving window. Backend errors
    propagate to the caller; this class never fails open.
    """

    def __init__(self, redis_client, rate: int = 100, window: int = 60):
        """
        Args:
            redis_client: Async Redis client
            rate: Requests per window
            window: Window size in seconds
        """
        self.redis = redis_client
        self.rate = rate
        self.window = window
        self._script_sha: Optional[str] = None

    async def _ensure_script(self, reload: bool = False) -> str:
        """Load Lua script into Redis if needed."""
        if self._script_sha is None or reload:
            self._script_sha = await self.redis.script_load(SLIDING_WINDOW_SCRIPT)
        return self._script_sha

    async def _run(self, key: str, now_ms: int, member: str, reload: bool = False):
        script_sha = await self._ensure_script(reload=reload)
        return await self.redis.evalsha(
            script_sha,
            1,
            key,
            self.rate,
            self.window * 1000,
            now_ms,
            member,
        )

    async def limit(self, key: str) -> RateLimitInfo:
        """
        Record one request for ``key`` and report whether it is allowed.

        Args:
            key: Scoped rate limit key

        Returns:
            RateLimitInfo with the decision and remaining quota
        """
        now_ms = int(time.time() * 1000)
        member = f"{now_ms}-{uuid.uuid4().hex}"

        try:
            result = await self._run(key, now_ms, member)
        except NoScriptError:
            # Script cache was flushed (restart or failover)
            logger.info("sliding_window_script_reload", key=key)
            result = await self._run(key, now_ms, member, reload=True)

        allowed, remaining, limit, reset_ms = result

        return RateLimitInfo(
            allowed=bool(int(allowed)),
            remaining=int(remaining),
            limit=int(limit),
            reset_at=math.ceil(int(reset_ms) / 1000),
        )
