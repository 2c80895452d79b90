"""
HTTP Transport
==============
The network seam used by SecureFetchClient.
"""

from typing import Any, Optional, Protocol

import httpx


class Transport(Protocol):
    """
    Sends one HTTP request.

    Cancelling the awaiting task must abort the in-flight request.
    """

    async def send(
        self,
        method: str,
        url: str,
        headers: httpx.Headers,
        content: Optional[bytes] = None,
        json: Any = None,
    ) -> httpx.Response:
        ...


class HttpxTransport:
    """
    Transport over ``httpx.AsyncClient``.

    The client is created without its own timeout (the caller bounds every
    call) and does not follow redirects.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, verify: bool = True):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=None,
            verify=verify,
            follow_redirects=False,
        )

    async def send(
        self,
        method: str,
        url: str,
        headers: httpx.Headers,
        content: Optional[bytes] = None,
        json: Any = None,
    ) -> httpx.Response:
        return await self.client.request(
            method,
            url,
            headers=headers,
            content=content,
            json=json,
        )

    async def aclose(self):
        """Close the underlying HTTP client if this transport created it."""
        if self._owns_client:
            await self.client.aclose()
