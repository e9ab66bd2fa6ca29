"""
Cache Service

Typed caching on top of an injected distributed cache. Values are stored as
JSON text with a sliding expiration; a read of a missing, empty or
whitespace-only entry is a cache miss.

The service holds no mutable state and is meant to be built once per process
and shared. Every failure is surfaced to the caller unchanged: there is no
retry, no fallback value and no coalescing of concurrent misses, so two
callers missing the same key in get_or_create may both run the factory and
both write.
"""

import inspect
from typing import Awaitable, Callable, Optional, Type, TypeVar, Union

import structlog

from ...core.config import get_settings
from ...domain.cache.interfaces import DistributedCache
from ...domain.cache.value_objects import CacheEntryOptions, CacheKey
from ...infrastructure.redis.exceptions import InvalidCacheArgumentException
from .codec import JsonCodec

logger = structlog.get_logger(__name__)

T = TypeVar("T")

ValueFactory = Callable[[], Union[Optional[T], Awaitable[Optional[T]]]]


def _validate_key(key: Optional[str]) -> str:
    if key is None:
        raise InvalidCacheArgumentException("key", "Cache key cannot be None")
    try:
        return CacheKey(key).value
    except ValueError as e:
        raise InvalidCacheArgumentException("key", str(e)) from e


class CacheService:
    """
    Get, set, remove and get-or-create typed values in a distributed cache.

    Args:
        cache: Backing store holding the serialized text
        codec: JSON codec; defaults to one built from settings
        default_ttl_minutes: Sliding expiration used when a call passes none
    """

    def __init__(
        self,
        cache: DistributedCache,
        codec: Optional[JsonCodec] = None,
        default_ttl_minutes: Optional[int] = None,
    ):
        self.cache = cache
        self.codec = codec or JsonCodec()
        self.default_ttl_minutes = (
            default_ttl_minutes
            if default_ttl_minutes is not None
            else get_settings().CACHE_DEFAULT_TTL_MINUTES
        )

    def _entry_options(self, ttl_minutes: Optional[int]) -> CacheEntryOptions:
        minutes = self.default_ttl_minutes if ttl_minutes is None else ttl_minutes
        if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
            raise InvalidCacheArgumentException(
                "ttl_minutes", f"TTL must be a positive number of minutes: {minutes!r}"
            )
        return CacheEntryOptions.sliding_minutes(minutes)

    async def get(self, key: str, model: Type[T]) -> Optional[T]:
        """
        Read and decode the value cached under ``key``.

        Returns:
            The decoded value, or None on a cache miss

        Raises:
            InvalidCacheArgumentException: If key is None or blank
            CacheSerializationException: If the cached text does not decode
            CacheBackendException: If the backing store fails
        """
        key = _validate_key(key)

        cached = await self.cache.get(key)
        if cached is None or not cached.strip():
            logger.debug("cache_miss", key=key)
            return None

        logger.debug("cache_hit", key=key)
        return self.codec.decode(cached, model, key=key)

    async def set(self, key: str, value: T, ttl_minutes: Optional[int] = None) -> T:
        """
        Encode ``value`` and store it under ``key`` with a sliding expiration.

        Returns:
            ``value`` unchanged

        Raises:
            InvalidCacheArgumentException: If key is blank, value is None or
                the TTL is not a positive integer
            CacheSerializationException: If the value cannot be encoded
            CacheBackendException: If the backing store fails
        """
        key = _validate_key(key)
        if value is None:
            raise InvalidCacheArgumentException("value", "Cannot cache a None value")
        options = self._entry_options(ttl_minutes)

        payload = self.codec.encode(value, key=key)
        await self.cache.set(key, payload, options)

        logger.debug(
            "cache_set",
            key=key,
            sliding_seconds=options.sliding_seconds,
            size_bytes=len(payload),
        )
        return value

    async def remove(self, key: str) -> None:
        """Delete the entry for ``key``. Removing a missing key is a no-op."""
        key = _validate_key(key)
        await self.cache.remove(key)
        logger.debug("cache_removed", key=key)

    async def refresh(self, key: str) -> None:
        """Reset the sliding expiration of ``key`` without reading it."""
        key = _validate_key(key)
        await self.cache.refresh(key)

    async def get_or_create(
        self,
        key: str,
        factory: ValueFactory,
        model: Type[T],
        ttl_minutes: Optional[int] = None,
    ) -> Optional[T]:
        """
        Return the cached value for ``key``, creating it on a miss.

        On a hit the factory is not called. On a miss the factory is called
        once (sync or async); a None result is returned without writing,
        anything else is stored via set() and returned. Factory errors
        propagate unchanged.
        """
        key = _validate_key(key)
        if factory is None:
            raise InvalidCacheArgumentException("factory", "Value factory cannot be None")
        # fail on a bad TTL before the factory runs
        self._entry_options(ttl_minutes)

        cached = await self.get(key, model)
        if cached is not None:
            return cached

        value = factory()
        if inspect.isawaitable(value):
            value = await value

        if value is None:
            logger.debug("cache_factory_returned_none", key=key)
            return None

        return await self.set(key, value, ttl_minutes)
