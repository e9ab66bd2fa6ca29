"""
Cache Domain Module

Value objects and backing store contracts for the cache.
"""

from .interfaces import DistributedCache
from .value_objects import CacheEntryOptions, CacheKey

__all__ = ["DistributedCache", "CacheEntryOptions", "CacheKey"]
