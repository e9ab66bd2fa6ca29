"""
Cache Service Module

Process-wide wiring of the typed cache service over the configured backend.
"""

from typing import Optional

import structlog

from ...core.config import Settings, get_settings
from ...domain.cache.interfaces import DistributedCache
from ...infrastructure.memory import MemoryDistributedCache
from ...infrastructure.redis import RedisConnectionFactory, RedisDistributedCache
from .cache_service import CacheService
from .codec import JsonCodec

logger = structlog.get_logger(__name__)

_cache_service: Optional[CacheService] = None
_connection_factory: Optional[RedisConnectionFactory] = None


def build_distributed_cache(
    settings: Optional[Settings] = None,
    connection_factory: Optional[RedisConnectionFactory] = None,
) -> DistributedCache:
    """Build the backing store selected by CACHE_BACKEND."""
    settings = settings or get_settings()
    if settings.CACHE_BACKEND == "memory":
        return MemoryDistributedCache()

    return RedisDistributedCache(
        connection_factory or RedisConnectionFactory(settings),
        key_prefix=settings.CACHE_KEY_PREFIX,
    )


def build_cache_service(
    settings: Optional[Settings] = None,
    cache: Optional[DistributedCache] = None,
) -> CacheService:
    """Build a cache service from settings, optionally over a given store."""
    settings = settings or get_settings()
    service = CacheService(
        cache or build_distributed_cache(settings),
        codec=JsonCodec(omit_null_fields=settings.CACHE_OMIT_NULL_FIELDS),
        default_ttl_minutes=settings.CACHE_DEFAULT_TTL_MINUTES,
    )
    logger.info(
        "cache_service_built",
        backend=type(service.cache).__name__,
        default_ttl_minutes=service.default_ttl_minutes,
    )
    return service


def get_cache_service() -> CacheService:
    """Return the process-wide cache service, building it on first use."""
    global _cache_service, _connection_factory
    if _cache_service is None:
        settings = get_settings()
        if settings.CACHE_BACKEND == "redis":
            _connection_factory = RedisConnectionFactory(settings)
        _cache_service = build_cache_service(
            settings, build_distributed_cache(settings, _connection_factory)
        )
    return _cache_service


async def close_cache_service() -> None:
    """Drop the process-wide service and close its Redis connections."""
    global _cache_service, _connection_factory
    if _connection_factory is not None:
        await _connection_factory.close()
    _cache_service = None
    _connection_factory = None


__all__ = [
    "CacheService",
    "JsonCodec",
    "build_distributed_cache",
    "build_cache_service",
    "get_cache_service",
    "close_cache_service",
]
