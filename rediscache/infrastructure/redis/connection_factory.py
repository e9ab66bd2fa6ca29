"""
Redis Connection Factory

Connection management for the Redis-backed distributed cache.
Provides one shared connection pool per process with a startup health check.
"""

import asyncio
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import structlog
from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import (
    AuthenticationError as RedisAuthError,
    ConnectionError as RedisConnectionError,
    TimeoutError as RedisTimeoutError,
)

from ...core.config import Settings, get_settings
from .exceptions import (
    RedisConfigurationException,
    RedisConnectionException,
    RedisOperationTimeoutException,
)

logger = structlog.get_logger(__name__)


class RedisConnectionFactory:
    """
    Factory for the shared Redis client used by the distributed cache.

    The pool is created lazily on first use and verified with PING.
    Safe to call initialize() concurrently; only one pool is ever built.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or get_settings()
        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[Redis] = None
        self._initialized = False
        self._lock = asyncio.Lock()

        if self._settings.REDIS_OTEL_INSTRUMENTATION:
            self._instrument()

    @staticmethod
    def _instrument() -> None:
        """Enable OpenTelemetry instrumentation of redis-py commands."""
        from opentelemetry.instrumentation.redis import RedisInstrumentor

        instrumentor = RedisInstrumentor()
        if not instrumentor.is_instrumented_by_opentelemetry:
            instrumentor.instrument()
            logger.info("redis_otel_instrumentation_enabled")

    def _connection_kwargs(self) -> Dict[str, Any]:
        return {
            "encoding": "utf-8",
            "decode_responses": True,
            "socket_connect_timeout": self._settings.REDIS_CONNECTION_TIMEOUT,
            "socket_timeout": self._settings.REDIS_OPERATION_TIMEOUT,
            "health_check_interval": self._settings.REDIS_HEALTH_CHECK_INTERVAL,
            "max_connections": self._settings.REDIS_MAX_CONNECTIONS,
        }

    async def initialize(self) -> None:
        """Create the connection pool and verify connectivity."""
        if self._initialized:
            return

        async with self._lock:
            if self._initialized:
                return

            redis_url = self._settings.REDIS_URL
            parsed_url = urlparse(redis_url)

            try:
                pool = ConnectionPool.from_url(redis_url, **self._connection_kwargs())
            except ValueError as e:
                raise RedisConfigurationException(
                    message=f"Invalid Redis configuration: {e}",
                    config_key="REDIS_URL",
                    original_error=e,
                ) from e

            client = Redis(connection_pool=pool)
            await self._test_connection(client, parsed_url.hostname, parsed_url.port)

            self._pool = pool
            self._client = client
            self._initialized = True
            logger.info(
                "redis_connection_factory_initialized",
                host=parsed_url.hostname,
                port=parsed_url.port,
                max_connections=self._settings.REDIS_MAX_CONNECTIONS,
            )

    async def _test_connection(
        self, client: Redis, host: Optional[str], port: Optional[int]
    ) -> None:
        """Ping Redis once, translating failures to cache exceptions."""
        try:
            await client.ping()
        except RedisAuthError as e:
            await client.connection_pool.disconnect()
            raise RedisConnectionException(
                message="Redis authentication failed during initialization",
                host=host,
                port=port,
                original_error=e,
            ) from e
        except RedisTimeoutError as e:
            await client.connection_pool.disconnect()
            raise RedisOperationTimeoutException(
                operation="ping",
                timeout_seconds=self._settings.REDIS_CONNECTION_TIMEOUT,
                original_error=e,
            ) from e
        except (RedisConnectionError, OSError) as e:
            await client.connection_pool.disconnect()
            raise RedisConnectionException(
                message="Redis connection test failed",
                host=host,
                port=port,
                original_error=e,
            ) from e
        logger.debug("redis_connection_test_successful")

    async def get_client(self) -> Redis:
        """Return the shared Redis client, initializing it if needed."""
        await self.initialize()
        return self._client

    async def close(self) -> None:
        """Close the shared client and its connection pool."""
        async with self._lock:
            if self._client is not None:
                await self._client.aclose()
            if self._pool is not None:
                await self._pool.disconnect()

            self._client = None
            self._pool = None
            self._initialized = False

            logger.info("redis_connection_factory_closed")

    def get_metrics(self) -> Dict[str, Any]:
        """Get connection factory metrics."""
        return {
            "initialized": self._initialized,
            "max_connections": self._settings.REDIS_MAX_CONNECTIONS,
            "created_connections": getattr(self._pool, "_created_connections", 0),
        }
