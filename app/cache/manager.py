"""
Response cache for game summaries and player stats.
"""
import threading
import logging
from typing import Dict, Optional, Callable, Any, Tuple
from concurrent.futures import ThreadPoolExecutor

from .core import CacheEntry, CacheMeta, CacheSource, Clock, DataCategory, utcnow
from .coalescer import RequestCoalescer
from .ttl_policies import get_ttl_for_category

logger = logging.getLogger("cache.manager")


class CacheManager:
    """
    Key/value response cache with:
    - per-category TTLs
    - request coalescing for concurrent duplicate requests
    - stale-while-revalidate for categories that allow it
    """

    def __init__(
        self,
        max_revalidation_workers: int = 2,
        coalesce_timeout: float = 30.0,
        clock: Clock = utcnow,
    ):
        """
        Args:
            max_revalidation_workers: Thread pool size for background revalidation
            coalesce_timeout: Timeout for waiting on coalesced requests
            clock: Returns the current UTC datetime
        """
        self._cache: Dict[str, CacheEntry] = {}
        self._cache_lock = threading.RLock()
        self._coalescer = RequestCoalescer(timeout=coalesce_timeout)
        self._clock = clock

        self._revalidation_pool = ThreadPoolExecutor(
            max_workers=max_revalidation_workers,
            thread_name_prefix="cache-revalidate",
        )
        self._revalidating: set = set()
        self._revalidating_lock = threading.Lock()

        self._stats = {
            "hits_fresh": 0,
            "hits_stale": 0,
            "misses": 0,
            "revalidations": 0,
        }

    def get(
        self,
        cache_key: str,
        fetch_fn: Callable[[], Any],
        category: DataCategory,
        force_refresh: bool = False,
    ) -> Tuple[Any, CacheMeta]:
        """
        Get data from cache or fetch it from upstream.

        Returns:
            (data, cache_meta) tuple
        """
        fresh_ttl, stale_ttl, allow_swr = get_ttl_for_category(category)

        with self._cache_lock:
            entry = None if force_refresh else self._cache.get(cache_key)

        now = self._clock()
        if entry is not None:
            age = entry.age_seconds(now)
            if entry.is_fresh(now):
                logger.debug(f"CACHE HIT (fresh): {cache_key} [age={age:.1f}s]")
                self._stats["hits_fresh"] += 1
                return entry.data, self._make_meta(CacheSource.FRESH, category, fresh_ttl, age)

            if allow_swr and entry.is_usable_stale(now):
                logger.info(f"CACHE HIT (stale, revalidating): {cache_key} [age={age:.1f}s]")
                self._trigger_background_revalidate(
                    cache_key, fetch_fn, fresh_ttl, stale_ttl, category
                )
                self._stats["hits_stale"] += 1
                return entry.data, self._make_meta(CacheSource.STALE, category, fresh_ttl, age)

            logger.info(f"CACHE EXPIRED: {cache_key} [age={age:.1f}s]")
        elif force_refresh:
            logger.info(f"FORCE REFRESH: {cache_key}")
        else:
            logger.info(f"CACHE MISS: {cache_key}")

        data = self._coalescer.get_or_fetch(cache_key, fetch_fn)
        self._store(cache_key, data, fresh_ttl, stale_ttl, category)
        self._stats["misses"] += 1
        return data, self._make_meta(CacheSource.UPSTREAM, category, fresh_ttl, 0)

    def _store(
        self,
        cache_key: str,
        data: Any,
        fresh_ttl: int,
        stale_ttl: int,
        category: DataCategory,
    ) -> None:
        entry = CacheEntry(
            data=data,
            fetched_at=self._clock(),
            ttl_seconds=fresh_ttl,
            stale_ttl_seconds=stale_ttl,
            category=category,
        )
        with self._cache_lock:
            self._cache[cache_key] = entry

    def _trigger_background_revalidate(
        self,
        cache_key: str,
        fetch_fn: Callable[[], Any],
        fresh_ttl: int,
        stale_ttl: int,
        category: DataCategory,
    ) -> None:
        """Refresh an entry on the revalidation pool without blocking the caller."""
        with self._revalidating_lock:
            if cache_key in self._revalidating:
                logger.debug(f"Already revalidating: {cache_key}")
                return
            self._revalidating.add(cache_key)

        def do_revalidate():
            try:
                data = self._coalescer.get_or_fetch(f"{cache_key}:revalidate", fetch_fn)
                self._store(cache_key, data, fresh_ttl, stale_ttl, category)
                self._stats["revalidations"] += 1
                logger.debug(f"Background revalidation complete: {cache_key}")
            except Exception as e:
                logger.warning(f"Background revalidation failed: {cache_key} - {e}")
            finally:
                with self._revalidating_lock:
                    self._revalidating.discard(cache_key)

        self._revalidation_pool.submit(do_revalidate)

    def _make_meta(
        self,
        source: CacheSource,
        category: DataCategory,
        ttl: int,
        age: float,
    ) -> CacheMeta:
        return CacheMeta(
            last_updated=self._clock().isoformat(),
            cache_source=source.value,
            category=category.value,
            ttl_seconds=ttl,
            age_seconds=age,
        )

    def get_stats(self) -> Dict[str, Any]:
        with self._cache_lock:
            total_hits = self._stats["hits_fresh"] + self._stats["hits_stale"]
            total_requests = total_hits + self._stats["misses"]
            hit_rate = (total_hits / total_requests * 100) if total_requests > 0 else 0

            return {
                "entries": len(self._cache),
                **self._stats,
                "hit_rate_percent": round(hit_rate, 1),
                "coalescer": self._coalescer.get_stats(),
                "revalidating_count": len(self._revalidating),
            }


# Global cache manager instance
_cache_manager: Optional[CacheManager] = None


def get_cache_manager() -> CacheManager:
    """Get or create the global cache manager."""
    global _cache_manager
    if _cache_manager is None:
        _cache_manager = CacheManager()
    return _cache_manager
