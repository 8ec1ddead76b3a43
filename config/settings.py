"""Configuration management using pydantic-settings."""
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Steam Web API configuration
    steam_api_key: Optional[str] = None
    steam_api_base_url: str = "https://api.steampowered.com"
    steam_store_base_url: str = "https://store.steampowered.com"

    # GetTopLiveGame partner id (0 = featured/league games)
    dota_live_partner: int = 0

    # Upstream HTTP behaviour
    http_timeout_seconds: float = 15.0
    http_retries: int = 2
    http_backoff_ms: int = 300

    # League/team lookup caches
    metadata_freshness_seconds: int = 300
    # None keeps the caches unbounded
    metadata_cache_max_entries: Optional[int] = 5000
    team_fetch_workers: int = 8

    # Response cache settings
    cache_ttl_seconds: int = 3600
    player_stats_ttl_seconds: int = 300

    # Snapshot persistence
    database_url: str = "sqlite:///./steam_stats.db"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
