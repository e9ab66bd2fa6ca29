"""
Main pytest configuration for rediscache tests.

Fixtures shared by unit tests: a controllable clock, an in-memory backing
store and a cache service wired over it.
"""

import os

import pytest

# Set test environment variables before importing package modules
os.environ["CACHE_BACKEND"] = "memory"
os.environ["LOG_LEVEL"] = "DEBUG"

from rediscache.infrastructure.memory import MemoryDistributedCache
from rediscache.services.cache import CacheService, JsonCodec


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Provide a controllable clock."""
    return FakeClock()


@pytest.fixture
def memory_cache(clock):
    """Provide an empty in-memory distributed cache."""
    return MemoryDistributedCache(clock=clock)


@pytest.fixture
def cache_service(memory_cache):
    """Provide a cache service over the in-memory store."""
    return CacheService(
        memory_cache,
        codec=JsonCodec(omit_null_fields=True),
        default_ttl_minutes=10,
    )
