"""
Store Configuration
===================
Connection settings for the rate limit store (Upstash Redis).

The REST URL and REST token identify the database; the Redis protocol
password is a separate credential and is read from its own variable.
"""

import os
import re
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Union

import httpx

from ..settings import ENVIRONMENT_VAR, is_production

URL_VAR = "UPSTASH_REDIS_REST_URL"
TOKEN_VAR = "UPSTASH_REDIS_REST_TOKEN"
PASSWORD_VAR = "UPSTASH_REDIS_PASSWORD"
PORT_VAR = "UPSTASH_REDIS_PORT"

UPSTASH_HOST_SUFFIX = ".upstash.io"
MIN_TOKEN_LENGTH = 32
DEFAULT_PORT = 6379

_TOKEN_CHARACTERS = re.compile(r"[A-Za-z0-9=_\-]+")


def _parse_port(value: Union[int, str]) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        port = int(value)
    except (TypeError, ValueError):
        return None
    if not 0 < port < 65536:
        return None
    return port


@dataclass
class StoreConfig:
    """Configuration for the rate limit store connection."""
    url: str = ""
    token: str = field(default="", repr=False)
    password: str = field(default="", repr=False)
    port: Union[int, str] = DEFAULT_PORT
    socket_timeout: float = 5.0
    environment: str = ""

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "StoreConfig":
        env = os.environ if environ is None else environ
        # Port stays raw here; validate() reports a bad value
        return cls(
            url=env.get(URL_VAR, ""),
            token=env.get(TOKEN_VAR, ""),
            password=env.get(PASSWORD_VAR, ""),
            port=env.get(PORT_VAR, DEFAULT_PORT),
            environment=env.get(ENVIRONMENT_VAR, ""),
        )

    @property
    def is_production(self) -> bool:
        return is_production(self.environment)

    @property
    def host(self) -> str:
        return httpx.URL(self.url).host

    @property
    def port_number(self) -> int:
        port = _parse_port(self.port)
        if port is None:
            raise ValueError(f"{PORT_VAR} must be an integer")
        return port

    def validate(self) -> List[str]:
        """
        Collect every configuration problem.

        Returns:
            List of human-readable problems; empty when the config is usable
        """
        errors: List[str] = []

        if not self.url:
            errors.append(f"{URL_VAR} is not set")
        else:
            try:
                url = httpx.URL(self.url)
            except httpx.InvalidURL:
                url = None
            if url is None or not url.scheme or not url.host:
                errors.append(f"{URL_VAR} must be a valid URL")
            else:
                if url.scheme != "https":
                    errors.append(f"{URL_VAR} must use HTTPS protocol")
                if not url.host.endswith(UPSTASH_HOST_SUFFIX):
                    errors.append(f"{URL_VAR} must be an Upstash Redis URL")

        if not self.token:
            errors.append(f"{TOKEN_VAR} is not set")
        elif not _TOKEN_CHARACTERS.fullmatch(self.token):
            errors.append(f"{TOKEN_VAR} contains invalid characters")
        elif len(self.token) < MIN_TOKEN_LENGTH:
            errors.append(f"{TOKEN_VAR} is too short")

        if not self.password:
            errors.append(f"{PASSWORD_VAR} is not set")

        if _parse_port(self.port) is None:
            errors.append(f"{PORT_VAR} must be an integer")

        return errors
