"""
API Key Guard
=============
Inbound API key check for request handlers.

Usage:
    from secure_server_fetch.api_keys import require_api_key

    async def endpoint(request):
        denied = require_api_key(request, settings.API_KEY)
        if denied is not None:
            return denied
        ...
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import structlog
from starlette.requests import Request
from starlette.responses import JSONResponse

from ..errors import ConfigurationError
from .compare import constant_time_equal
from .policy import KEY_REQUIREMENTS, sanitize_api_key, validate_api_key

logger = structlog.get_logger(__name__)

API_KEY_HEADER = "x-api-key"


class GuardOutcome(str, Enum):
    """Result of an inbound API key check."""
    PASS = "pass"
    MISSING_KEY = "missing_key"
    EMPTY_KEY = "empty_key"
    MALFORMED_KEY = "malformed_key"
    MISMATCH = "mismatch"


@dataclass(frozen=True)
class GuardDecision:
    """Decision for one inbound request. ``body`` is None when passing."""
    outcome: GuardOutcome
    status_code: Optional[int] = None
    body: Optional[Dict[str, Any]] = None

    @property
    def passed(self) -> bool:
        return self.outcome is GuardOutcome.PASS

    def to_response(self) -> Optional[JSONResponse]:
        """Render as a 401 JSON response, or None to continue."""
        if self.passed:
            return None
        return JSONResponse(status_code=self.status_code, content=self.body)


_PASS = GuardDecision(outcome=GuardOutcome.PASS)


def _deny(
    outcome: GuardOutcome,
    error: str,
    message: str,
    with_requirements: bool,
) -> GuardDecision:
    body: Dict[str, Any] = {"error": error, "message": message}
    if with_requirements:
        body["requirements"] = dict(KEY_REQUIREMENTS)
    return GuardDecision(outcome=outcome, status_code=401, body=body)


class KeyGuard:
    """
    Compares the key presented by a client with the key the host expects.

    The expected key is validated once, at construction. A blank or weak
    expected key is a host misconfiguration and raises ConfigurationError.
    """

    def __init__(self, expected_key: str, header_name: str = API_KEY_HEADER):
        if not expected_key or not expected_key.strip():
            raise ConfigurationError("Expected API key cannot be empty")

        sanitized = sanitize_api_key(expected_key)
        if not validate_api_key(sanitized).is_valid:
            raise ConfigurationError(
                "Expected API key does not meet security requirements"
            )

        self.header_name = header_name
        self._expected_key = sanitized

    def check(self, provided_key: Optional[str]) -> GuardDecision:
        """
        Check a raw header value.

        Args:
            provided_key: Header value, or None when the header is absent

        Returns:
            GuardDecision; anything but PASS carries a 401 body
        """
        if provided_key is None:
            logger.warning("api_key_rejected", reason=GuardOutcome.MISSING_KEY.value)
            return _deny(
                GuardOutcome.MISSING_KEY,
                "API key is missing",
                f"Please provide the '{self.header_name}' header",
                with_requirements=True,
            )

        sanitized = sanitize_api_key(provided_key)
        if sanitized == "":
            logger.warning("api_key_rejected", reason=GuardOutcome.EMPTY_KEY.value)
            return _deny(
                GuardOutcome.EMPTY_KEY,
                "API key cannot be empty",
                f"The '{self.header_name}' header must not be blank",
                with_requirements=True,
            )

        validation = validate_api_key(sanitized)
        if not validation.is_valid:
            logger.warning(
                "api_key_rejected",
                reason=GuardOutcome.MALFORMED_KEY.value,
                detail=validation.error,
            )
            return _deny(
                GuardOutcome.MALFORMED_KEY,
                "Invalid API key format",
                validation.error,
                with_requirements=True,
            )

        if not constant_time_equal(self._expected_key, sanitized):
            logger.warning("api_key_rejected", reason=GuardOutcome.MISMATCH.value)
            # No requirements here: a well-formed wrong key gets no hints
            return _deny(
                GuardOutcome.MISMATCH,
                "Invalid API key",
                "The provided API key is not valid",
                with_requirements=False,
            )

        return _PASS


def check_api_key(provided_key: Optional[str], expected_key: str) -> GuardDecision:
    """Functional form of ``KeyGuard(expected_key).check(provided_key)``."""
    return KeyGuard(expected_key).check(provided_key)


def require_api_key(request: Request, expected_key: str) -> Optional[JSONResponse]:
    """
    Gate a Starlette request on its ``x-api-key`` header.

    Returns:
        None if the request may continue, otherwise a 401 JSONResponse
    """
    guard = KeyGuard(expected_key)
    decision = guard.check(request.headers.get(guard.header_name))
    return decision.to_response()
