"""
Cache Value Objects

Immutable value objects for the cache domain.
Provides type safety and validation for keys and expiration policies.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional


@dataclass(frozen=True)
class CacheKey:
    """
    Immutable cache key value object.

    Any non-blank text is accepted; the format of the key is left to the
    calling application.
    """

    value: str

    def __post_init__(self) -> None:
        """Validate cache key."""
        if not isinstance(self.value, str):
            raise ValueError("Cache key must be a string")

        if not self.value or self.value.isspace():
            raise ValueError("Cache key cannot be empty")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class CacheEntryOptions:
    """
    Expiration policy attached to a cache entry at write time.

    A sliding expiration evicts the entry once it has gone untouched for the
    given window; every successful read resets the countdown. An absolute
    expiration caps the lifetime regardless of reads.
    """

    sliding_expiration: Optional[timedelta] = None
    absolute_expiration_relative_to_now: Optional[timedelta] = None

    def __post_init__(self) -> None:
        """Validate expiration windows."""
        if (
            self.sliding_expiration is not None
            and self.sliding_expiration <= timedelta(0)
        ):
            raise ValueError("Sliding expiration must be positive")
        if (
            self.absolute_expiration_relative_to_now is not None
            and self.absolute_expiration_relative_to_now <= timedelta(0)
        ):
            raise ValueError("Absolute expiration must be positive")

    @classmethod
    def sliding_minutes(cls, minutes: int) -> "CacheEntryOptions":
        """Create options with a sliding window of whole minutes."""
        return cls(sliding_expiration=timedelta(minutes=minutes))

    @property
    def sliding_seconds(self) -> Optional[int]:
        """Sliding window in whole seconds (at least one)."""
        if self.sliding_expiration is None:
            return None
        return max(1, int(self.sliding_expiration.total_seconds()))
