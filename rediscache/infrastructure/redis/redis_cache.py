"""
Redis Distributed Cache

Redis implementation of the DistributedCache contract.

Each entry is a Redis hash with three fields:

- ``data``: the cached text
- ``sldexp``: sliding window in seconds, or -1
- ``absexp``: absolute expiry as unix seconds, or -1

The key's Redis TTL always holds the time left before eviction. Reads and
refreshes re-arm it with the sliding window, capped by the absolute expiry.
"""

import math
import time
from contextlib import asynccontextmanager
from typing import Callable, List, Optional

import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from redis.exceptions import (
    ConnectionError as RedisConnectionError,
    RedisError,
    TimeoutError as RedisTimeoutError,
)

from ...domain.cache.interfaces import DistributedCache
from ...domain.cache.value_objects import CacheEntryOptions
from .connection_factory import RedisConnectionFactory
from .exceptions import (
    CacheBackendException,
    RedisConnectionException,
    RedisOperationTimeoutException,
)

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

DATA_FIELD = "data"
SLIDING_FIELD = "sldexp"
ABSOLUTE_FIELD = "absexp"
NOT_PRESENT = -1


def _as_int(raw: Optional[str]) -> int:
    return NOT_PRESENT if raw is None else int(raw)


class RedisDistributedCache(DistributedCache):
    """Distributed cache stored in Redis hashes with sliding expiration."""

    def __init__(
        self,
        connection_factory: RedisConnectionFactory,
        key_prefix: str = "",
        clock: Callable[[], float] = time.time,
    ):
        self._connection_factory = connection_factory
        self._key_prefix = key_prefix
        self._clock = clock

    def _redis_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    @asynccontextmanager
    async def _operation(self, operation: str, key: str):
        """Trace a store operation and translate redis-py failures."""
        with tracer.start_as_current_span(f"rediscache.{operation}") as span:
            span.set_attribute("cache.operation", operation)
            span.set_attribute("cache.key", key)
            try:
                yield span
            except RedisTimeoutError as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                logger.warning("redis_operation_timeout", operation=operation, key=key)
                raise RedisOperationTimeoutException(
                    operation=operation, key=key, original_error=e
                ) from e
            except RedisConnectionError as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                logger.warning("redis_connection_lost", operation=operation, key=key)
                raise RedisConnectionException(
                    message=f"Redis connection failed during {operation}",
                    original_error=e,
                ) from e
            except RedisError as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                logger.error(
                    "redis_operation_failed",
                    operation=operation,
                    key=key,
                    error=str(e),
                )
                raise CacheBackendException(
                    message=f"Redis {operation} failed: {e}",
                    details={"operation": operation, "key": key},
                    original_error=e,
                ) from e

    def _expiration_seconds(
        self, now: float, sliding: int, absolute: int
    ) -> Optional[int]:
        """Seconds until eviction, or None when the entry never expires."""
        if absolute != NOT_PRESENT:
            remaining = max(1, int(absolute - now))
            return min(remaining, sliding) if sliding != NOT_PRESENT else remaining
        if sliding != NOT_PRESENT:
            return sliding
        return None

    async def get(self, key: str) -> Optional[str]:
        async with self._operation("get", key) as span:
            data = await self._get_and_refresh(key, fetch_data=True)
            span.set_attribute("cache.hit", data is not None)
            return data

    async def refresh(self, key: str) -> None:
        async with self._operation("refresh", key):
            await self._get_and_refresh(key, fetch_data=False)

    async def _get_and_refresh(self, key: str, fetch_data: bool) -> Optional[str]:
        client = await self._connection_factory.get_client()
        redis_key = self._redis_key(key)

        fields: List[str] = [ABSOLUTE_FIELD, SLIDING_FIELD]
        if fetch_data:
            fields.append(DATA_FIELD)
        values = await client.hmget(redis_key, fields)

        absolute, sliding = _as_int(values[0]), _as_int(values[1])
        if sliding != NOT_PRESENT:
            expiration = self._expiration_seconds(self._clock(), sliding, absolute)
            await client.expire(redis_key, expiration)

        return values[2] if fetch_data else None

    async def set(self, key: str, value: str, options: CacheEntryOptions) -> None:
        async with self._operation("set", key) as span:
            now = self._clock()
            sliding = options.sliding_seconds
            sliding = NOT_PRESENT if sliding is None else sliding
            absolute = NOT_PRESENT
            if options.absolute_expiration_relative_to_now is not None:
                absolute = math.ceil(
                    now + options.absolute_expiration_relative_to_now.total_seconds()
                )

            expiration = self._expiration_seconds(now, sliding, absolute)
            span.set_attribute("cache.ttl_seconds", expiration or 0)

            client = await self._connection_factory.get_client()
            redis_key = self._redis_key(key)
            async with client.pipeline(transaction=True) as pipe:
                pipe.delete(redis_key)
                pipe.hset(
                    redis_key,
                    mapping={
                        ABSOLUTE_FIELD: absolute,
                        SLIDING_FIELD: sliding,
                        DATA_FIELD: value,
                    },
                )
                if expiration is not None:
                    pipe.expire(redis_key, expiration)
                await pipe.execute()

            logger.debug("redis_cache_entry_written", key=key, ttl_seconds=expiration)

    async def remove(self, key: str) -> None:
        async with self._operation("remove", key):
            client = await self._connection_factory.get_client()
            await client.delete(self._redis_key(key))
