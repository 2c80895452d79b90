"""
Secure Server Fetch
===================
Outbound HTTP calls with HTTPS enforcement, server-only execution,
bounded run time and classified failures.

Usage:
    from secure_server_fetch import secure_fetch, NetworkError

    data = await secure_fetch(
        "https://api.example.com/v1/items",
        api_key=settings.UPSTREAM_KEY,
        timeout=5000,
    )
"""

import asyncio
from typing import Any, Callable, Mapping, Optional, Type, TypeVar, Union

import httpx
import structlog
from pydantic import BaseModel
from pydantic import ValidationError as ModelValidationError

from ..errors import NetworkError, ServerSideError, ValidationError
from .context import is_server_side
from .transport import HttpxTransport, Transport

# Generic type for Pydantic models
T = TypeVar("T", bound=BaseModel)

logger = structlog.get_logger(__name__)

API_KEY_HEADER = "x-api-key"
DEFAULT_TIMEOUT_MS = 30000


def _parse_url(url: str, require_https: bool) -> httpx.URL:
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError):
        raise ValidationError(f"Invalid URL provided: {url}")

    if not parsed.scheme or not parsed.host:
        raise ValidationError(f"Invalid URL provided: {url}")

    if require_https and parsed.scheme != "https":
        raise ValidationError("HTTPS is required. Use require_https=False to override.")

    return parsed


def _read_error_body(response: httpx.Response) -> Any:
    """Decode an error body as JSON, falling back to text."""
    try:
        return response.json()
    except ValueError:
        return response.text


class SecureFetchClient:
    """
    Server-side HTTP client for calls that carry secrets.

    Features:
    - HTTPS enforced unless explicitly disabled per call.
    - Refuses to run outside a server process.
    - Every call bounded by a timeout that cancels the transport.
    - Failures mapped to ValidationError, ServerSideError or NetworkError.

    Nothing is retried; retry policy belongs to the caller.
    """

    def __init__(
        self,
        transport: Optional[Transport] = None,
        context_check: Callable[[], bool] = is_server_side,
    ):
        self._owns_transport = transport is None
        self.transport = transport or HttpxTransport()
        self.context_check = context_check

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()

    async def aclose(self):
        """Close the transport if this client created it."""
        if self._owns_transport:
            await self.transport.aclose()

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Optional[Mapping[str, str]] = None,
        content: Optional[bytes] = None,
        json: Any = None,
        api_key: Optional[str] = None,
        require_https: bool = True,
        timeout: int = DEFAULT_TIMEOUT_MS,
        response_model: Optional[Type[T]] = None,
    ) -> Union[T, Any]:
        """
        Perform one outbound request.

        Args:
            url: Absolute target URL
            method: HTTP method
            headers: Extra request headers
            content: Raw request body
            json: JSON request body
            api_key: Sent as ``x-api-key``, overriding any header of that name
            require_https: Reject non-https URLs
            timeout: Time limit in milliseconds
            response_model: Pydantic model to validate the payload into

        Returns:
            Decoded JSON payload, or ``response_model`` instance

        Raises:
            ValidationError: Bad URL, scheme or timeout
            ServerSideError: Called outside a server process
            NetworkError: Timeout, transport failure, non-2xx or bad payload
        """
        parsed = _parse_url(url, require_https)

        if not self.context_check():
            raise ServerSideError("secure_fetch can only run on the server.")

        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ValidationError("timeout must be a positive number of milliseconds")

        request_headers = httpx.Headers(headers or {})
        if api_key:
            request_headers[API_KEY_HEADER] = api_key

        log = logger.bind(method=method, host=parsed.host, path=parsed.path)

        try:
            try:
                response = await asyncio.wait_for(
                    self.transport.send(
                        method,
                        url,
                        request_headers,
                        content=content,
                        json=json,
                    ),
                    timeout=timeout / 1000,
                )
            except (asyncio.TimeoutError, httpx.TimeoutException):
                log.warning("secure_fetch_timeout", timeout_ms=timeout)
                raise NetworkError(
                    f"Request timeout after {timeout}ms",
                    status_text="timeout",
                    timed_out=True,
                )

            if not response.is_success:
                body = _read_error_body(response)
                log.warning("secure_fetch_failed", status=response.status_code)
                raise NetworkError(
                    f"Request failed with status {response.status_code}",
                    response.status_code,
                    response.reason_phrase,
                    body,
                )

            try:
                payload = response.json()
                if response_model is not None:
                    return response_model.model_validate(payload)
                return payload
            except (ValueError, ModelValidationError) as e:
                log.warning("secure_fetch_bad_payload", status=response.status_code)
                raise NetworkError(
                    "Failed to parse JSON response",
                    response.status_code,
                    response.reason_phrase,
                    response.text,
                ) from e

        except NetworkError:
            raise
        except Exception as e:
            log.error("secure_fetch_error", error=str(e))
            raise NetworkError(f"Network request failed: {e}", body=e) from e


async def secure_fetch(
    url: str,
    *,
    transport: Optional[Transport] = None,
    **options: Any,
) -> Any:
    """
    One-shot form of ``SecureFetchClient.fetch``.

    Opens a client for the call and closes it afterwards. Reuse a
    SecureFetchClient when making many calls.
    """
    async with SecureFetchClient(transport=transport) as client:
        return await client.fetch(url, **options)
