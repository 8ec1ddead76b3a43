"""
Caching module: per-category TTL response cache, request coalescing and
freshness-window metadata caches.
"""
from .core import CacheEntry, CacheMeta, CacheSource, DataCategory, utcnow
from .ttl_policies import TTL_CONFIG, get_ttl_for_category
from .coalescer import RequestCoalescer
from .manager import CacheManager, get_cache_manager
from .metadata import MetadataCache

__all__ = [
    # Core types
    "CacheEntry",
    "CacheMeta",
    "CacheSource",
    "DataCategory",
    "utcnow",
    # TTL policies
    "TTL_CONFIG",
    "get_ttl_for_category",
    # Coalescing
    "RequestCoalescer",
    # Managers
    "CacheManager",
    "get_cache_manager",
    "MetadataCache",
]
