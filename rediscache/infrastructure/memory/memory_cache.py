"""
In-Memory Distributed Cache

Process-local implementation of the DistributedCache contract with the same
sliding and absolute expiration semantics as the Redis store. Entries are not
shared between processes; intended for tests and single-process development.
"""

import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Dict, Optional

import structlog

from ...domain.cache.interfaces import DistributedCache
from ...domain.cache.value_objects import CacheEntryOptions

logger = structlog.get_logger(__name__)


@dataclass
class _MemoryEntry:
    value: str
    last_accessed_at: float
    sliding_seconds: Optional[float] = None
    absolute_expires_at: Optional[float] = None

    def is_expired(self, now: float) -> bool:
        if self.absolute_expires_at is not None and now >= self.absolute_expires_at:
            return True
        if (
            self.sliding_seconds is not None
            and now - self.last_accessed_at >= self.sliding_seconds
        ):
            return True
        return False


class MemoryDistributedCache(DistributedCache):
    """Dictionary-backed cache with lazy expiry and periodic expired-entry scans."""

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        expiration_scan_frequency: timedelta = timedelta(minutes=1),
    ):
        self._entries: Dict[str, _MemoryEntry] = {}
        self._clock = clock
        self._scan_frequency = expiration_scan_frequency.total_seconds()
        self._last_scan = clock()

    def _live_entry(self, key: str, now: float) -> Optional[_MemoryEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(now):
            del self._entries[key]
            return None
        return entry

    def _scan_for_expired(self, now: float) -> None:
        if now - self._last_scan < self._scan_frequency:
            return
        self._last_scan = now
        expired = [k for k, entry in self._entries.items() if entry.is_expired(now)]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.debug("memory_cache_expired_entries_removed", count=len(expired))

    async def get(self, key: str) -> Optional[str]:
        now = self._clock()
        self._scan_for_expired(now)
        entry = self._live_entry(key, now)
        if entry is None:
            return None
        entry.last_accessed_at = now
        return entry.value

    async def set(self, key: str, value: str, options: CacheEntryOptions) -> None:
        now = self._clock()
        absolute_expires_at = None
        if options.absolute_expiration_relative_to_now is not None:
            absolute_expires_at = (
                now + options.absolute_expiration_relative_to_now.total_seconds()
            )

        self._entries[key] = _MemoryEntry(
            value=value,
            last_accessed_at=now,
            sliding_seconds=(
                options.sliding_expiration.total_seconds()
                if options.sliding_expiration is not None
                else None
            ),
            absolute_expires_at=absolute_expires_at,
        )
        self._scan_for_expired(now)

    async def refresh(self, key: str) -> None:
        now = self._clock()
        entry = self._live_entry(key, now)
        if entry is not None:
            entry.last_accessed_at = now

    async def remove(self, key: str) -> None:
        self._entries.pop(key, None)
