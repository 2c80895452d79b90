"""
Error Taxonomy
==============
Exception classes raised by the fetch wrapper, the rate limit gate and the
store initialisation. Inbound API key failures are not exceptions; see
``api_keys.guard.GuardDecision``.
"""

from typing import Any, Dict, Optional


class SecureFetchError(Exception):
    """Base exception for all errors raised by this library."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ServerSideError(SecureFetchError):
    """Raised when an outbound call is attempted outside a server runtime."""
    pass


class ValidationError(SecureFetchError):
    """Raised for caller-correctable input problems (bad URL, scheme, params)."""
    pass


class NetworkError(SecureFetchError):
    """
    Raised for transport failures, timeouts, non-2xx statuses and
    undecodable payloads.

    ``timed_out`` distinguishes a timeout from every other network failure.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        status_text: Optional[str] = None,
        body: Any = None,
        timed_out: bool = False,
    ):
        self.status_code = status_code
        self.status_text = status_text
        self.body = body
        self.timed_out = timed_out
        super().__init__(message)


class RateLimitError(SecureFetchError):
    """Base exception for rate limit gate failures."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        remaining: int = 0,
        reset_at: int = 0,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.remaining = remaining
        self.reset_at = reset_at
        self.headers = headers or {}
        super().__init__(message)


class RateLimitValidationError(RateLimitError, ValidationError):
    """Raised when the identifier or limit parameters are invalid (400)."""

    status_code = 400


class RateLimitExceededError(RateLimitError):
    """Raised when the quota for an identifier is exhausted (429)."""

    status_code = 429


class RateLimitUnavailableError(RateLimitError):
    """Raised when the limiter backend fails (500)."""

    status_code = 500


class ConfigurationError(SecureFetchError):
    """
    Raised when the host integrated the library incorrectly.

    ``message`` is safe to show; ``details`` carries the internal cause and
    is only populated when the public message was redacted.
    """

    def __init__(self, message: str, details: Optional[str] = None):
        self.details = details
        super().__init__(message)


class StoreConfigurationError(ConfigurationError):
    """Raised when the rate limit store settings are missing or invalid."""
    pass


class StoreConnectionError(ConfigurationError):
    """Raised when the rate limit store does not answer the liveness check."""
    pass
