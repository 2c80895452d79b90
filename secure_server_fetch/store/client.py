"""
Store Client
============
Explicit start-up initialisation of the rate limit store.

Usage:
    from secure_server_fetch.store import StoreConfig, init_store, close_store

    @app.on_event("startup")
    async def startup():
        app.state.redis = await init_store(StoreConfig.from_env())

    @app.on_event("shutdown")
    async def shutdown():
        await close_store(app.state.redis)
"""

from typing import Callable, Optional

import structlog
from redis.asyncio import Redis

from ..errors import StoreConfigurationError, StoreConnectionError
from .config import StoreConfig

logger = structlog.get_logger(__name__)

ClientFactory = Callable[[StoreConfig], Redis]


def create_client(config: StoreConfig) -> Redis:
    """
    Build a TLS Redis client for the configured Upstash database.

    Authenticates with the Redis password, not the REST token.
    """
    return Redis(
        host=config.host,
        port=config.port_number,
        password=config.password,
        ssl=True,
        socket_timeout=config.socket_timeout,
        socket_connect_timeout=config.socket_timeout,
        decode_responses=True,
    )


def _check_config(config: StoreConfig) -> None:
    errors = config.validate()
    if not errors:
        return

    joined = ", ".join(errors)
    if config.is_production:
        logger.error("store_configuration_invalid", details=joined)
        raise StoreConfigurationError("Invalid Redis configuration", details=joined)
    raise StoreConfigurationError(f"Redis configuration error: {joined}")


async def _ping(client: Redis, config: StoreConfig) -> None:
    try:
        await client.ping()
    except Exception as e:
        logger.error("store_connection_failed", error=str(e))
        if config.is_production:
            raise StoreConnectionError("Failed to connect to Redis", details=str(e)) from e
        raise StoreConnectionError(f"Failed to connect to Redis: {e}") from e


async def init_store(
    config: StoreConfig,
    ping: bool = True,
    client_factory: Optional[ClientFactory] = None,
) -> Redis:
    """
    Validate the configuration, create the client and optionally ping it.

    Call once during host start-up. The host decides whether a failure
    ends the process.

    Args:
        config: Store settings
        ping: Send PING before returning
        client_factory: Override client construction

    Returns:
        Connected async Redis client

    Raises:
        StoreConfigurationError: Settings are missing or invalid
        StoreConnectionError: The liveness check failed
    """
    _check_config(config)

    client = (client_factory or create_client)(config)

    if ping:
        try:
            await _ping(client, config)
        except StoreConnectionError:
            await close_store(client)
            raise

    logger.info("store_initialized", host=config.host, pinged=ping)
    return client


async def close_store(client: Optional[Redis]) -> None:
    """Release the store connection pool."""
    if client is not None:
        await client.aclose()
