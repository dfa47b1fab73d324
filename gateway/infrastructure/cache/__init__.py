"""In-process caches."""

from gateway.infrastructure.cache.code_cache import CacheEntry, CodeCache

__all__ = ["CacheEntry", "CodeCache"]
