"""
Redis Infrastructure Module

Redis-backed distributed cache with a shared connection pool.

This module provides:
- RedisConnectionFactory: Shared client and pool management
- RedisDistributedCache: Hash-based entries with sliding expiration
- Exception hierarchy for cache and backing store failures
"""

from .connection_factory import RedisConnectionFactory
from .redis_cache import RedisDistributedCache
from .exceptions import (
    CacheException,
    InvalidCacheArgumentException,
    CacheSerializationException,
    CacheBackendException,
    RedisConnectionException,
    RedisOperationTimeoutException,
    RedisConfigurationException,
)

__all__ = [
    # Connection management
    "RedisConnectionFactory",
    # Backing store
    "RedisDistributedCache",
    # Exceptions
    "CacheException",
    "InvalidCacheArgumentException",
    "CacheSerializationException",
    "CacheBackendException",
    "RedisConnectionException",
    "RedisOperationTimeoutException",
    "RedisConfigurationException",
]
