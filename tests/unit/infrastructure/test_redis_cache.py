"""
Unit tests for the Redis distributed cache.

The redis client is mocked; tests assert on the commands issued.
"""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import (
    ConnectionError as RedisConnectionError,
    ResponseError,
    TimeoutError as RedisTimeoutError,
)

from rediscache.domain.cache.value_objects import CacheEntryOptions
from rediscache.infrastructure.redis.exceptions import (
    CacheBackendException,
    RedisConnectionException,
    RedisOperationTimeoutException,
)
from rediscache.infrastructure.redis.redis_cache import RedisDistributedCache


@pytest.fixture
def pipeline():
    """Create a mocked transaction pipeline."""
    pipe = MagicMock()
    pipe.__aenter__ = AsyncMock(return_value=pipe)
    pipe.__aexit__ = AsyncMock(return_value=False)
    pipe.execute = AsyncMock(return_value=[0, 3, True])
    return pipe


@pytest.fixture
def redis_client(pipeline):
    """Create a mocked redis.asyncio client."""
    client = MagicMock()
    client.hmget = AsyncMock(return_value=[None, None, None])
    client.expire = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=1)
    client.pipeline = MagicMock(return_value=pipeline)
    return client


@pytest.fixture
def connection_factory(redis_client):
    """Create a connection factory handing out the mocked client."""
    factory = MagicMock()
    factory.get_client = AsyncMock(return_value=redis_client)
    return factory


@pytest.fixture
def redis_cache(connection_factory, clock):
    """Create the Redis cache under test."""
    return RedisDistributedCache(connection_factory, clock=clock)


class TestRedisSet:
    """Test writes."""

    @pytest.mark.asyncio
    async def test_sliding_entry(self, redis_cache, redis_client, pipeline):
        """Sliding entries store their window and expire after it."""
        await redis_cache.set("user:1", '{"id":1}', CacheEntryOptions.sliding_minutes(10))

        redis_client.pipeline.assert_called_once_with(transaction=True)
        pipeline.delete.assert_called_once_with("user:1")
        pipeline.hset.assert_called_once_with(
            "user:1",
            mapping={"absexp": -1, "sldexp": 600, "data": '{"id":1}'},
        )
        pipeline.expire.assert_called_once_with("user:1", 600)
        pipeline.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_absolute_caps_expiry(self, redis_cache, pipeline):
        """The key TTL is the smaller of both windows."""
        options = CacheEntryOptions(
            sliding_expiration=timedelta(minutes=10),
            absolute_expiration_relative_to_now=timedelta(seconds=120),
        )
        await redis_cache.set("user:1", "{}", options)

        pipeline.hset.assert_called_once_with(
            "user:1", mapping={"absexp": 1120, "sldexp": 600, "data": "{}"}
        )
        pipeline.expire.assert_called_once_with("user:1", 120)

    @pytest.mark.asyncio
    async def test_no_expiration(self, redis_cache, pipeline):
        """Entries without windows get no TTL."""
        await redis_cache.set("user:1", "{}", CacheEntryOptions())

        pipeline.expire.assert_not_called()

    @pytest.mark.asyncio
    async def test_key_prefix(self, connection_factory, clock, pipeline):
        """The configured prefix namespaces stored keys."""
        cache = RedisDistributedCache(connection_factory, key_prefix="app:", clock=clock)
        await cache.set("user:1", "{}", CacheEntryOptions.sliding_minutes(1))

        pipeline.delete.assert_called_once_with("app:user:1")
        pipeline.expire.assert_called_once_with("app:user:1", 60)


class TestRedisGet:
    """Test reads and refreshes."""

    @pytest.mark.asyncio
    async def test_hit_refreshes_sliding_window(self, redis_cache, redis_client):
        """A hit returns the text and re-arms the TTL."""
        redis_client.hmget.return_value = ["-1", "600", '{"id":1}']

        assert await redis_cache.get("user:1") == '{"id":1}'

        redis_client.hmget.assert_awaited_once_with(
            "user:1", ["absexp", "sldexp", "data"]
        )
        redis_client.expire.assert_awaited_once_with("user:1", 600)

    @pytest.mark.asyncio
    async def test_refresh_capped_by_absolute(self, redis_cache, redis_client):
        """Refreshed TTL never outlives the absolute expiry."""
        redis_client.hmget.return_value = ["1100", "600", "x"]

        await redis_cache.get("user:1")

        redis_client.expire.assert_awaited_once_with("user:1", 100)

    @pytest.mark.asyncio
    async def test_miss(self, redis_cache, redis_client):
        """A missing key returns None without touching TTLs."""
        assert await redis_cache.get("user:1") is None
        redis_client.expire.assert_not_called()

    @pytest.mark.asyncio
    async def test_refresh_skips_data(self, redis_cache, redis_client):
        """refresh only reads expiry metadata."""
        redis_client.hmget.return_value = ["-1", "60"]

        await redis_cache.refresh("user:1")

        redis_client.hmget.assert_awaited_once_with("user:1", ["absexp", "sldexp"])
        redis_client.expire.assert_awaited_once_with("user:1", 60)

    @pytest.mark.asyncio
    async def test_remove(self, redis_cache, redis_client):
        """remove deletes the key."""
        await redis_cache.remove("user:1")
        redis_client.delete.assert_awaited_once_with("user:1")


class TestRedisErrors:
    """Test translation of redis-py failures."""

    @pytest.mark.asyncio
    async def test_timeout(self, redis_cache, redis_client):
        """Timeouts become RedisOperationTimeoutException."""
        original = RedisTimeoutError("slow")
        redis_client.hmget.side_effect = original

        with pytest.raises(RedisOperationTimeoutException) as exc_info:
            await redis_cache.get("user:1")

        assert exc_info.value.__cause__ is original
        assert exc_info.value.details["operation"] == "get"

    @pytest.mark.asyncio
    async def test_connection_error(self, redis_cache, redis_client):
        """Connection failures become RedisConnectionException."""
        redis_client.delete.side_effect = RedisConnectionError("refused")

        with pytest.raises(RedisConnectionException):
            await redis_cache.remove("user:1")

    @pytest.mark.asyncio
    async def test_other_redis_error(self, redis_cache, pipeline):
        """Any other redis error becomes CacheBackendException."""
        pipeline.execute.side_effect = ResponseError("WRONGTYPE")

        with pytest.raises(CacheBackendException) as exc_info:
            await redis_cache.set("user:1", "{}", CacheEntryOptions.sliding_minutes(1))

        assert exc_info.value.error_code == "CACHE_BACKEND_ERROR"
        assert exc_info.value.details["key"] == "user:1"
