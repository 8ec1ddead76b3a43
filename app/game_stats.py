"""
Game summaries and player stats built from Steam data.

Both are cached through the CacheManager and persisted as snapshots.
Persistence is best effort: a database failure is logged and the
freshly computed payload is still returned.
"""
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app import crud
from app.cache import CacheManager, CacheMeta, DataCategory, get_cache_manager
from app.errors import MissingApiKeyError, NotFoundError
from app.steam_client import SteamClient, get_steam_client
from app.utils.helpers import minutes_to_hours, safe_int

logger = logging.getLogger("game_stats")

TOP_GAMES_LIMIT = 5


def _descriptions(items: Optional[List[Dict[str, Any]]]) -> List[str]:
    return [i.get("description") for i in items or [] if i.get("description")]


def build_game_summary(
    app_id: str,
    data: Dict[str, Any],
    current_players: Optional[int],
) -> Dict[str, Any]:
    """Shape a store ``appdetails`` data block into the summary payload."""
    return {
        "appId": app_id,
        "name": data.get("name"),
        "type": data.get("type"),
        "isFree": bool(data.get("is_free")),
        "headerImage": data.get("header_image"),
        "shortDescription": data.get("short_description"),
        "genres": _descriptions(data.get("genres")),
        "platforms": data.get("platforms"),
        "price": data.get("price_overview") or None,
        "publishers": data.get("publishers") or [],
        "developers": data.get("developers") or [],
        "categories": _descriptions(data.get("categories")),
        "currentPlayers": current_players,
    }


def build_player_stats(
    profile: Optional[Dict[str, Any]],
    owned: List[Dict[str, Any]],
    recent: List[Dict[str, Any]],
) -> Dict[str, Any]:
    """Aggregate owned and recently played games into the player stats payload."""
    total_minutes = sum(safe_int(g.get("playtime_forever")) for g in owned)
    top_games = sorted(
        owned, key=lambda g: safe_int(g.get("playtime_forever")), reverse=True
    )[:TOP_GAMES_LIMIT]

    return {
        "profile": profile,
        "totals": {
            "ownedGames": len(owned),
            "recentGames": len(recent),
            "totalPlaytimeHours": minutes_to_hours(total_minutes),
        },
        "topGames": [
            {
                "appId": g.get("appid"),
                "name": g.get("name"),
                "playtimeHours": minutes_to_hours(g.get("playtime_forever")),
                "icon": g.get("img_icon_url"),
            }
            for g in top_games
        ],
        "recentGames": [
            {
                "appId": g.get("appid"),
                "name": g.get("name"),
                "playtime2WeeksHours": minutes_to_hours(g.get("playtime_2weeks")),
                "playtimeForeverHours": minutes_to_hours(g.get("playtime_forever")),
            }
            for g in recent
        ],
    }


class GameStatsService:
    """Cache-or-fetch access to game summaries and player stats."""

    def __init__(
        self,
        client: Optional[SteamClient] = None,
        cache: Optional[CacheManager] = None,
        session_factory: Optional[Callable[[], Session]] = None,
    ):
        self._client = client or get_steam_client()
        self._cache = cache or get_cache_manager()
        if session_factory is None:
            from app.db import SessionLocal
            session_factory = SessionLocal
        self._session_factory = session_factory

    # ===== GAMES =====

    def get_game_summary(self, app_id: str) -> Tuple[Dict[str, Any], CacheMeta]:
        """
        Store summary for an app, with its current player count.

        Returns:
            (summary, cache_meta) tuple

        Raises:
            NotFoundError: Steam has no such app
            UpstreamError: The store call failed
        """
        return self._cache.get(
            f"game:summary:{app_id}",
            lambda: self._fetch_game_summary(app_id),
            DataCategory.GAME_SUMMARY,
        )

    def _fetch_game_summary(self, app_id: str) -> Dict[str, Any]:
        data = self._client.get_app_details(app_id)
        if data is None:
            raise NotFoundError("App not found")

        summary = build_game_summary(app_id, data, self._current_players(app_id))
        self._persist(lambda db: crud.upsert_game_metadata(db, app_id, summary), "game metadata")
        return summary

    def _current_players(self, app_id: str) -> Optional[int]:
        if not self._client.has_api_key:
            return None
        try:
            return self._client.get_current_players(app_id)
        except Exception as e:
            logger.warning(f"Failed to fetch current players for {app_id}: {e}")
            return None

    # ===== PLAYERS =====

    def get_player_stats(self, steam_id: str) -> Tuple[Dict[str, Any], CacheMeta]:
        """
        Profile, playtime totals, top and recent games for a player.

        Returns:
            (stats, cache_meta) tuple

        Raises:
            MissingApiKeyError: No Steam API key is configured
            UpstreamError: A Steam call failed
        """
        if not self._client.has_api_key:
            raise MissingApiKeyError("Set STEAM_API_KEY to query player stats.")

        return self._cache.get(
            f"player:stats:{steam_id}",
            lambda: self._fetch_player_stats(steam_id),
            DataCategory.PLAYER_STATS,
        )

    def _fetch_player_stats(self, steam_id: str) -> Dict[str, Any]:
        payload = build_player_stats(
            self._client.get_player_summary(steam_id),
            self._client.get_owned_games(steam_id),
            self._client.get_recently_played(steam_id),
        )
        self._persist(lambda db: crud.add_player_snapshot(db, steam_id, payload), "player snapshot")
        return payload

    def list_player_snapshots(self, steam_id: str, limit: int = 20) -> list:
        db = self._session_factory()
        try:
            return crud.get_player_snapshots(db, steam_id, limit=limit)
        finally:
            db.close()

    def _persist(self, write: Callable[[Session], Any], what: str) -> None:
        db = self._session_factory()
        try:
            write(db)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to persist {what}: {e}")
        finally:
            db.close()


# Singleton factory
_service: Optional[GameStatsService] = None


def get_game_stats_service() -> GameStatsService:
    global _service
    if _service is None:
        _service = GameStatsService()
    return _service
