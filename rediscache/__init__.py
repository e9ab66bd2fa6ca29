"""
rediscache

Typed JSON caching over a Redis-backed distributed cache with sliding
expiration.
"""

from .domain.cache import CacheEntryOptions, CacheKey, DistributedCache
from .infrastructure.memory import MemoryDistributedCache
from .infrastructure.redis import (
    CacheBackendException,
    CacheException,
    CacheSerializationException,
    InvalidCacheArgumentException,
    RedisConnectionFactory,
    RedisDistributedCache,
)
from .services.cache import (
    CacheService,
    JsonCodec,
    build_cache_service,
    close_cache_service,
    get_cache_service,
)

__version__ = "0.1.0"

__all__ = [
    "CacheEntryOptions",
    "CacheKey",
    "DistributedCache",
    "MemoryDistributedCache",
    "RedisConnectionFactory",
    "RedisDistributedCache",
    "CacheException",
    "CacheBackendException",
    "CacheSerializationException",
    "InvalidCacheArgumentException",
    "CacheService",
    "JsonCodec",
    "build_cache_service",
    "close_cache_service",
    "get_cache_service",
]
