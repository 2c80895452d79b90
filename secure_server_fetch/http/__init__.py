"""
Outbound HTTP Module
====================
Server-only fetch client with HTTPS enforcement, bounded run time and
classified failures, plus the execution-context check it relies on.
"""

from .client import SecureFetchClient, secure_fetch, API_KEY_HEADER, DEFAULT_TIMEOUT_MS
from .context import is_server_side
from .transport import Transport, HttpxTransport

__all__ = [
    "SecureFetchClient",
    "secure_fetch",
    "API_KEY_HEADER",
    "DEFAULT_TIMEOUT_MS",
    "is_server_side",
    "Transport",
    "HttpxTransport",
]
