"""
Freshness-window cache for Dota league and team metadata.

Entries never expire on their own: age only decides whether a lookup
should be refreshed. A stale entry stays readable until a refresh
overwrites it, which is what lets the hydrator fall back to the last
known league or team name when Steam is unavailable.
"""
import threading
import logging
from collections import OrderedDict
from typing import Any, Dict, Generic, Hashable, Iterable, List, Optional, Tuple, TypeVar

from .core import CacheEntry, Clock, DataCategory, utcnow
from .ttl_policies import get_ttl_for_category

logger = logging.getLogger("cache.metadata")

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class MetadataCache(Generic[K, V]):
    """
    Thread-safe ``id -> value`` store with a freshness window.

    ``max_entries`` bounds the cache in least-recently-used order; pass
    None to let it grow for the life of the process.
    """

    def __init__(
        self,
        category: DataCategory,
        freshness_seconds: Optional[int] = None,
        max_entries: Optional[int] = None,
        clock: Clock = utcnow,
    ):
        if freshness_seconds is None:
            freshness_seconds = get_ttl_for_category(category)[0]
        self.category = category
        self.freshness_seconds = freshness_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[K, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self._evictions = 0

    def lookup(self, key: K) -> Optional[V]:
        """Return the stored value regardless of age, or None."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            self._entries.move_to_end(key)
            return entry.data

    def is_fresh(self, key: K) -> bool:
        with self._lock:
            entry = self._entries.get(key)
        return entry is not None and entry.is_fresh(self._clock())

    def partition(self, keys: Iterable[K]) -> Tuple[List[K], List[K]]:
        """
        Split keys into (fresh, missing). Stale entries count as missing.
        Order of first appearance is kept and duplicates are dropped.
        """
        now = self._clock()
        fresh: List[K] = []
        missing: List[K] = []
        seen = set()
        with self._lock:
            for key in keys:
                if key in seen:
                    continue
                seen.add(key)
                entry = self._entries.get(key)
                if entry is not None and entry.is_fresh(now):
                    fresh.append(key)
                else:
                    missing.append(key)
        return fresh, missing

    def put(self, key: K, value: V) -> None:
        """Store ``value`` with a new timestamp, replacing any previous entry."""
        entry = CacheEntry(
            data=value,
            fetched_at=self._clock(),
            ttl_seconds=self.freshness_seconds,
            category=self.category,
        )
        with self._lock:
            self._entries[key] = entry
            self._entries.move_to_end(key)
            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    evicted, _ = self._entries.popitem(last=False)
                    self._evictions += 1
                    logger.debug(f"Evicted {self.category.value} entry {evicted}")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_stats(self) -> Dict[str, Any]:
        now = self._clock()
        with self._lock:
            fresh = sum(1 for e in self._entries.values() if e.is_fresh(now))
            return {
                "entries": len(self._entries),
                "fresh": fresh,
                "max_entries": self.max_entries,
                "evictions": self._evictions,
            }
