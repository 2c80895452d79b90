"""
API Key Middleware for Starlette/FastAPI applications

Rejects every non-public request that does not present the expected API key.

Usage:
    from secure_server_fetch.api_keys import ApiKeyMiddleware

    app.add_middleware(
        ApiKeyMiddleware,
        expected_key=settings.API_KEY,
    )
"""

from typing import Optional, Set

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .guard import API_KEY_HEADER, KeyGuard

logger = structlog.get_logger(__name__)


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """
    Middleware wrapping KeyGuard.

    The guard is built when the middleware is constructed, so a missing or
    weak expected key stops the application from starting.
    """

    # Paths that bypass the key check (health checks, etc.)
    DEFAULT_PUBLIC_PATHS: Set[str] = {
        "/health",
        "/ready",
        "/live",
    }

    def __init__(
        self,
        app,
        expected_key: str,
        header_name: str = API_KEY_HEADER,
        public_paths: Optional[Set[str]] = None,
    ):
        super().__init__(app)
        self.guard = KeyGuard(expected_key, header_name=header_name)
        self.public_paths = (
            public_paths if public_paths is not None else self.DEFAULT_PUBLIC_PATHS
        )

    def _is_public_path(self, path: str) -> bool:
        path_normalized = path.rstrip("/") or "/"
        return path_normalized in self.public_paths or path in self.public_paths

    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        if self._is_public_path(path):
            return await call_next(request)

        # Allow OPTIONS for CORS
        if request.method == "OPTIONS":
            return await call_next(request)

        decision = self.guard.check(request.headers.get(self.guard.header_name))
        if not decision.passed:
            logger.info(
                "api_key_middleware_blocked",
                path=path,
                method=request.method,
                outcome=decision.outcome.value,
            )
            return decision.to_response()

        return await call_next(request)
