"""
Secure Server Fetch
===================
Guard-rails for server-side request handling: outbound fetch with HTTPS and
timeout enforcement, inbound API key validation, and sliding window rate
limiting.
"""

__version__ = "1.0.3"

# Errors
from secure_server_fetch.errors import (
    SecureFetchError,
    ServerSideError,
    ValidationError,
    NetworkError,
    RateLimitError,
    RateLimitValidationError,
    RateLimitExceededError,
    RateLimitUnavailableError,
    ConfigurationError,
    StoreConfigurationError,
    StoreConnectionError,
)

# API Keys
from secure_server_fetch.api_keys import (
    KeyValidationResult,
    sanitize_api_key,
    validate_api_key,
    constant_time_equal,
    GuardDecision,
    GuardOutcome,
    KeyGuard,
    check_api_key,
    require_api_key,
    ApiKeyMiddleware,
)

# Rate Limiting
from secure_server_fetch.rate_limit import (
    RateLimitGate,
    RateLimitDecision,
    RateLimitResult,
    RateLimitInfo,
    RedisSlidingWindow,
    InMemorySlidingWindow,
    RateLimitMiddleware,
    rate_limit,
    sanitize_identifier,
)

# Store
from secure_server_fetch.store import (
    StoreConfig,
    init_store,
    close_store,
)

# Outbound HTTP
from secure_server_fetch.http import (
    SecureFetchClient,
    secure_fetch,
    is_server_side,
    HttpxTransport,
)

# Logging
from secure_server_fetch.log import setup_logging

__all__ = [
    # Errors
    "SecureFetchError",
    "ServerSideError",
    "ValidationError",
    "NetworkError",
    "RateLimitError",
    "RateLimitValidationError",
    "RateLimitExceededError",
    "RateLimitUnavailableError",
    "ConfigurationError",
    "StoreConfigurationError",
    "StoreConnectionError",
    # API Keys
    "KeyValidationResult",
    "sanitize_api_key",
    "validate_api_key",
    "constant_time_equal",
    "GuardDecision",
    "GuardOutcome",
    "KeyGuard",
    "check_api_key",
    "require_api_key",
    "ApiKeyMiddleware",
    # Rate Limiting
    "RateLimitGate",
    "RateLimitDecision",
    "RateLimitResult",
    "RateLimitInfo",
    "RedisSlidingWindow",
    "InMemorySlidingWindow",
    "RateLimitMiddleware",
    "rate_limit",
    "sanitize_identifier",
    # Store
    "StoreConfig",
    "init_store",
    "close_store",
    # Outbound HTTP
    "SecureFetchClient",
    "secure_fetch",
    "is_server_side",
    "HttpxTransport",
    # Logging
    "setup_logging",
]
