"""
Rate Limit Gate
===============
Validates rate limit parameters, namespaces identifiers and turns sliding
window answers into allow decisions or typed errors.

Usage:
    gate = RateLimitGate.from_redis(redis_client)

    try:
        result = await rate_limit(
            request, user_id, gate=gate, max_requests=10, timeframe_ms=60000
        )
    except RateLimitExceededError as e:
        # back off until e.reset_at
        ...
"""

import re
from typing import Callable, Dict, Optional, Tuple

import structlog
from starlette.requests import Request

from ..errors import (
    RateLimitError,
    RateLimitExceededError,
    RateLimitUnavailableError,
    RateLimitValidationError,
)
from ..settings import is_production
from .in_memory import InMemorySlidingWindow
from .models import RateLimitDecision, RateLimitResult, SlidingWindow
from .redis_window import RedisSlidingWindow

logger = structlog.get_logger(__name__)

DEFAULT_PREFIX = "ratelimit"
MAX_IDENTIFIER_LENGTH = 100

# Characters with meaning in key-store command syntax
_UNSAFE_CHARACTERS = re.compile(r"[@{}()\[\]/\\\"'`~,.;:<>*&^%$#!?=+|]")
_WHITESPACE = re.compile(r"\s+")

LimiterFactory = Callable[[int, int], SlidingWindow]


def sanitize_identifier(identifier: str) -> str:
    """
    Make an identifier safe for use inside a store key.

    Unsafe symbols become ``_``, each whitespace run becomes a single ``_``
    and the result is cut to 100 characters.

    Raises:
        RateLimitValidationError: If nothing is left after sanitisation
    """
    sanitized = _UNSAFE_CHARACTERS.sub("_", identifier)
    sanitized = _WHITESPACE.sub("_", sanitized)
    sanitized = sanitized[:MAX_IDENTIFIER_LENGTH]

    if not sanitized:
        raise RateLimitValidationError("Identifier becomes empty after sanitization")

    return sanitized


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class RateLimitGate:
    """
    Front door to a sliding window limiter.

    ``limiter_factory(max_requests, window_seconds)`` builds a configured
    SlidingWindow. Limiters are reused per (max_requests, window) pair.
    """

    def __init__(self, limiter_factory: LimiterFactory, environment: Optional[str] = None):
        self._limiter_factory = limiter_factory
        self._limiters: Dict[Tuple[int, int], SlidingWindow] = {}
        self.environment = environment

    @classmethod
    def from_redis(cls, redis_client, environment: Optional[str] = None) -> "RateLimitGate":
        """Gate backed by RedisSlidingWindow on an initialised client."""
        return cls(
            lambda rate, window: RedisSlidingWindow(redis_client, rate=rate, window=window),
            environment=environment,
        )

    @classmethod
    def in_memory(cls, environment: Optional[str] = None) -> "RateLimitGate":
        """Process-local gate for development and tests."""
        return cls(
            lambda rate, window: InMemorySlidingWindow(rate=rate, window=window),
            environment=environment,
        )

    def _get_limiter(self, max_requests: int, window_seconds: int) -> SlidingWindow:
        config = (max_requests, window_seconds)
        if config not in self._limiters:
            self._limiters[config] = self._limiter_factory(max_requests, window_seconds)
        return self._limiters[config]

    async def consume(
        self,
        identifier: str,
        max_requests: int,
        timeframe_ms: int,
        prefix: str = DEFAULT_PREFIX,
    ) -> RateLimitDecision:
        """
        Count one request against ``identifier``.

        Args:
            identifier: Caller identity (IP address, user ID, ...)
            max_requests: Requests allowed per window
            timeframe_ms: Window length in milliseconds, rounded to seconds
            prefix: Namespace for store keys

        Returns:
            RateLimitDecision for an allowed request

        Raises:
            RateLimitValidationError: Bad identifier or parameters (400)
            RateLimitExceededError: Quota exhausted (429)
            RateLimitUnavailableError: Limiter backend failed (500)
        """
        if not identifier or not isinstance(identifier, str):
            raise RateLimitValidationError("Invalid identifier parameter")

        sanitized = sanitize_identifier(identifier)

        if not _is_positive_int(max_requests):
            raise RateLimitValidationError("maxRequests must be a positive integer")
        if not _is_positive_int(timeframe_ms):
            raise RateLimitValidationError("timeframeMs must be a positive integer")

        window_seconds = round(timeframe_ms / 1000)
        if window_seconds < 1:
            raise RateLimitValidationError(
                "timeframeMs must round to a window of at least one second"
            )

        scoped_key = f"{prefix}:{sanitized}" if prefix else sanitized

        try:
            info = await self._get_limiter(max_requests, window_seconds).limit(scoped_key)
        except RateLimitError:
            raise
        except Exception as e:
            logger.error("rate_limit_backend_failed", key=scoped_key, error=str(e))
            message = "Internal Server Error" if is_production(self.environment) else str(e)
            raise RateLimitUnavailableError(message or "Internal Server Error") from e

        if not info.allowed:
            decision = RateLimitDecision(
                allowed=False,
                limit=info.limit,
                remaining=0,
                reset_at=info.reset_at,
                retry_after=window_seconds,
            )
            logger.info("rate_limit_exceeded", key=scoped_key, reset_at=info.reset_at)
            raise RateLimitExceededError(
                "Rate limit exceeded",
                remaining=0,
                reset_at=info.reset_at,
                headers=decision.headers,
            )

        return RateLimitDecision(
            allowed=True,
            limit=info.limit,
            remaining=info.remaining,
            reset_at=info.reset_at,
        )


async def rate_limit(
    request: Request,
    identifier: str,
    *,
    gate: RateLimitGate,
    max_requests: int,
    timeframe_ms: int,
    prefix: str = DEFAULT_PREFIX,
) -> RateLimitResult:
    """
    Apply the gate to an incoming request before business logic runs.

    Returns:
        RateLimitResult with success=True and the rate limit headers

    Raises:
        RateLimitError subclasses, see RateLimitGate.consume
    """
    decision = await gate.consume(identifier, max_requests, timeframe_ms, prefix)
    logger.debug(
        "rate_limit_passed",
        path=request.url.path,
        remaining=decision.remaining,
    )
    return RateLimitResult(success=True, headers=decision.headers)
