"""
TTL configuration per data category.
"""
from typing import Any, Dict, Tuple

from config.settings import settings

from .core import DataCategory


def build_ttl_config() -> Dict[DataCategory, Dict[str, Any]]:
    """TTL configuration by category (in seconds), read from settings."""
    return {
        DataCategory.GAME_SUMMARY: {
            "fresh_ttl": settings.cache_ttl_seconds,
            "stale_ttl": settings.cache_ttl_seconds // 2,  # Serve stale while refreshing
            "allow_swr": True,
        },
        DataCategory.PLAYER_STATS: {
            "fresh_ttl": settings.player_stats_ttl_seconds,
            "stale_ttl": 0,
            "allow_swr": False,
        },
        # League/team lookups only use the freshness window; stale entries
        # remain readable until they are overwritten.
        DataCategory.LEAGUE_METADATA: {
            "fresh_ttl": settings.metadata_freshness_seconds,
            "stale_ttl": 0,
            "allow_swr": False,
        },
        DataCategory.TEAM_METADATA: {
            "fresh_ttl": settings.metadata_freshness_seconds,
            "stale_ttl": 0,
            "allow_swr": False,
        },
    }


TTL_CONFIG = build_ttl_config()


def get_ttl_for_category(category: DataCategory) -> Tuple[int, int, bool]:
    """
    Get TTL configuration for a data category.

    Returns:
        (fresh_ttl, stale_ttl, allow_swr)
    """
    config = TTL_CONFIG.get(category, TTL_CONFIG[DataCategory.PLAYER_STATS])
    return (
        config["fresh_ttl"],
        config.get("stale_ttl", 0),
        config.get("allow_swr", False),
    )
