"""In-process distributed cache backend."""

from .memory_cache import MemoryDistributedCache

__all__ = ["MemoryDistributedCache"]
