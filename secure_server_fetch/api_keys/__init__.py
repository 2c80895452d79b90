"""
API Key Module
==============
Key strength policy, constant-time comparison and the inbound key guard.
"""

from .policy import (
    KeyValidationResult,
    sanitize_api_key,
    validate_api_key,
    is_strong_api_key,
    KEY_REQUIREMENTS,
    MIN_KEY_LENGTH,
    ERROR_TOO_SHORT,
    ERROR_INVALID_CHARACTERS,
    ERROR_WEAK_COMPLEXITY,
)
from .compare import constant_time_equal
from .guard import (
    API_KEY_HEADER,
    GuardDecision,
    GuardOutcome,
    KeyGuard,
    check_api_key,
    require_api_key,
)
from .middleware import ApiKeyMiddleware

__all__ = [
    # Policy
    "KeyValidationResult",
    "sanitize_api_key",
    "validate_api_key",
    "is_strong_api_key",
    "KEY_REQUIREMENTS",
    "MIN_KEY_LENGTH",
    "ERROR_TOO_SHORT",
    "ERROR_INVALID_CHARACTERS",
    "ERROR_WEAK_COMPLEXITY",
    # Comparison
    "constant_time_equal",
    # Guard
    "API_KEY_HEADER",
    "GuardDecision",
    "GuardOutcome",
    "KeyGuard",
    "check_api_key",
    "require_api_key",
    # Middleware
    "ApiKeyMiddleware",
]
