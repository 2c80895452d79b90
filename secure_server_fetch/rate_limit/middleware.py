"""
Rate Limit Middleware for Starlette/FastAPI applications

Usage:
    from secure_server_fetch.rate_limit import RateLimitGate, RateLimitMiddleware

    app.add_middleware(
        RateLimitMiddleware,
        gate=RateLimitGate.from_redis(redis_client),
        max_requests=100,
        timeframe_ms=60000,
    )
"""

from typing import Callable, Optional, Set

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from ..errors import (
    RateLimitExceededError,
    RateLimitUnavailableError,
    RateLimitValidationError,
)
from .gate import DEFAULT_PREFIX, RateLimitGate

logger = structlog.get_logger(__name__)


def client_ip(request: Request) -> str:
    """Extract real client IP from headers."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Middleware that applies a RateLimitGate to every non-public request.

    When the limiter backend is down the request is rejected with 503,
    unless ``fail_open`` is set, in which case it proceeds without headers.
    """

    DEFAULT_PUBLIC_PATHS: Set[str] = {"/health", "/ready", "/live"}

    def __init__(
        self,
        app,
        gate: RateLimitGate,
        max_requests: int,
        timeframe_ms: int,
        prefix: str = DEFAULT_PREFIX,
        identifier_func: Optional[Callable[[Request], str]] = None,
        public_paths: Optional[Set[str]] = None,
        fail_open: bool = False,
    ):
        super().__init__(app)
        self.gate = gate
        self.max_requests = max_requests
        self.timeframe_ms = timeframe_ms
        self.prefix = prefix
        self.identifier_func = identifier_func or client_ip
        self.public_paths = (
            public_paths if public_paths is not None else self.DEFAULT_PUBLIC_PATHS
        )
        self.fail_open = fail_open

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.public_paths:
            return await call_next(request)

        try:
            decision = await self.gate.consume(
                self.identifier_func(request),
                self.max_requests,
                self.timeframe_ms,
                self.prefix,
            )
        except RateLimitExceededError as e:
            return JSONResponse(
                status_code=e.status_code,
                content={
                    "error": "rate_limited",
                    "message": e.message,
                    "reset_at": e.reset_at,
                },
                headers=e.headers,
            )
        except RateLimitValidationError as e:
            return JSONResponse(
                status_code=e.status_code,
                content={"error": "invalid_request", "message": e.message},
            )
        except RateLimitUnavailableError as e:
            if self.fail_open:
                logger.warning("rate_limit_fail_open", path=request.url.path)
                return await call_next(request)
            return JSONResponse(
                status_code=503,
                content={"error": "service_unavailable", "message": e.message},
            )

        response = await call_next(request)
        response.headers.update(decision.headers)
        return response
