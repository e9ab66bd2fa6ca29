"""
Cache Interfaces

Abstract contracts for the distributed cache backing store.
Implementations store opaque text under a key with an expiration policy.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .value_objects import CacheEntryOptions


class DistributedCache(ABC):
    """
    Abstract distributed key/value cache holding text entries.

    Implementations are shared process-wide and must be safe for concurrent
    use. Failures of the backing store raise CacheBackendException.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored text or None, refreshing any sliding expiration."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str, options: CacheEntryOptions) -> None:
        """Create or overwrite an entry."""
        pass

    @abstractmethod
    async def refresh(self, key: str) -> None:
        """Reset the sliding expiration of an entry without reading it."""
        pass

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete an entry; a missing key is not an error."""
        pass
