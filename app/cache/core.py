"""
Core cache data structures.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional
from enum import Enum


def utcnow() -> datetime:
    """Current time as an aware UTC datetime (the default cache clock)."""
    return datetime.now(timezone.utc)


Clock = Callable[[], datetime]


class DataCategory(Enum):
    """Categories of data with different caching behaviors."""
    GAME_SUMMARY = "game_summary"        # 1 hour, SWR
    PLAYER_STATS = "player_stats"        # 5 minutes, no SWR
    LEAGUE_METADATA = "league_metadata"  # 5 minute freshness window
    TEAM_METADATA = "team_metadata"      # 5 minute freshness window


class CacheSource(Enum):
    """Source of cached data."""
    FRESH = "fresh"       # Within TTL
    STALE = "stale"       # Past TTL but within stale window, revalidating
    UPSTREAM = "upstream" # Fetched from Steam


@dataclass
class CacheEntry:
    """
    A cached item with the metadata needed for TTL and staleness checks.

    Age is always measured against the clock that is passed in, so the
    owner of the entry decides what "now" means.
    """
    data: Any
    fetched_at: datetime
    ttl_seconds: int
    stale_ttl_seconds: int = 0
    category: DataCategory = DataCategory.GAME_SUMMARY

    def age_seconds(self, now: datetime) -> float:
        return (now - self.fetched_at).total_seconds()

    def is_fresh(self, now: datetime) -> bool:
        return self.age_seconds(now) < self.ttl_seconds

    def is_usable_stale(self, now: datetime) -> bool:
        age = self.age_seconds(now)
        return self.ttl_seconds <= age < (self.ttl_seconds + self.stale_ttl_seconds)


@dataclass
class CacheMeta:
    """
    Metadata about a cache access, included in API responses.
    """
    last_updated: str  # ISO timestamp
    cache_source: str  # "fresh", "stale", or "upstream"
    category: Optional[str] = None
    ttl_seconds: Optional[int] = None
    age_seconds: Optional[float] = None

    def to_dict(self) -> dict:
        result = {
            "lastUpdated": self.last_updated,
            "cacheSource": self.cache_source,
        }
        if self.category:
            result["_debug"] = {
                "category": self.category,
                "ttl": self.ttl_seconds,
                "age": round(self.age_seconds, 1) if self.age_seconds else None,
            }
        return result
