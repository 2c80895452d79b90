"""
Store Module
============
Rate limit store configuration and initialisation.
"""

from .config import (
    StoreConfig,
    URL_VAR,
    TOKEN_VAR,
    PASSWORD_VAR,
    PORT_VAR,
    UPSTASH_HOST_SUFFIX,
    MIN_TOKEN_LENGTH,
)
from .client import init_store, close_store, create_client

__all__ = [
    "StoreConfig",
    "URL_VAR",
    "TOKEN_VAR",
    "PASSWORD_VAR",
    "PORT_VAR",
    "UPSTASH_HOST_SUFFIX",
    "MIN_TOKEN_LENGTH",
    "init_store",
    "close_store",
    "create_client",
]
