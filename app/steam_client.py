"""
Client for the Steam Web API and Steam Store API.

Each method performs one upstream call through ``fetch_with_retry`` and
returns the relevant slice of the JSON body. Callers decide which
failures are fatal.
"""
import logging
from typing import Any, Dict, List, Optional

import requests
from dotenv import load_dotenv

from app.errors import UpstreamError
from app.http import fetch_with_retry
from config.settings import Settings, settings as default_settings

load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("steam_client")


class SteamClient:
    """Thin wrapper around the Steam endpoints this service consumes."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ):
        self._settings = settings or default_settings
        self._session = session or requests.Session()

    @property
    def has_api_key(self) -> bool:
        return bool(self._settings.steam_api_key)

    def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        keyed: bool = True,
    ) -> Any:
        params = dict(params or {})
        if keyed and self._settings.steam_api_key:
            params["key"] = self._settings.steam_api_key
        response = fetch_with_retry(
            url,
            params=params,
            retries=self._settings.http_retries,
            backoff_ms=self._settings.http_backoff_ms,
            session=self._session,
            timeout=self._settings.http_timeout_seconds,
        )
        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(f"Invalid JSON from {url}: {e}")
        if data is not None and not isinstance(data, dict):
            raise UpstreamError(f"Expected a JSON object from {url}, got {type(data).__name__}")
        return data

    def _api_url(self, path: str) -> str:
        return f"{self._settings.steam_api_base_url}/{path}"

    # ===== DOTA 2 =====

    def get_top_live_games(self) -> List[Dict[str, Any]]:
        """
        Fetch the featured live Dota matches.

        Returns:
            Raw ``game_list`` entries (empty if the feed has none)

        Raises:
            UpstreamError: Feed unavailable; a 404 keeps ``upstream_status``
                so callers can treat it as "nothing live"
        """
        data = self._get_json(
            self._api_url("IDOTA2Match_570/GetTopLiveGame/v1/"),
            {"partner": self._settings.dota_live_partner},
        )
        games = (data or {}).get("game_list") or []
        if not isinstance(games, list):
            raise UpstreamError(f"Unexpected game_list type: {type(games).__name__}")
        return games

    def get_league_listing(self) -> List[Dict[str, Any]]:
        """Fetch the whole league catalog; the endpoint has no id filter."""
        data = self._get_json(self._api_url("IDOTA2Match_570/GetLeagueListing/v1/"))
        return ((data or {}).get("result") or {}).get("leagues") or []

    def get_team_info(self, team_id: int) -> Optional[Dict[str, Any]]:
        """Fetch a single team record, or None if Steam returns no team."""
        data = self._get_json(
            self._api_url("IDOTA2Teams_570/GetTeamInfo/v1/"),
            {"team_id": team_id},
        )
        teams = ((data or {}).get("result") or {}).get("teams") or []
        return teams[0] if teams else None

    # ===== STORE / PLAYERS =====

    def get_app_details(self, app_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch store details for an app.

        Returns:
            The ``data`` block, or None when Steam reports no such app
        """
        data = self._get_json(
            f"{self._settings.steam_store_base_url}/api/appdetails",
            {"appids": app_id},
            keyed=False,
        )
        entry = (data or {}).get(str(app_id)) or {}
        if not entry.get("success") or not entry.get("data"):
            return None
        return entry["data"]

    def get_current_players(self, app_id: str) -> Optional[int]:
        data = self._get_json(
            self._api_url("ISteamUserStats/GetNumberOfCurrentPlayers/v1/"),
            {"appid": app_id},
        )
        return ((data or {}).get("response") or {}).get("player_count")

    def get_player_summary(self, steam_id: str) -> Optional[Dict[str, Any]]:
        data = self._get_json(
            self._api_url("ISteamUser/GetPlayerSummaries/v2/"),
            {"steamids": steam_id},
        )
        players = ((data or {}).get("response") or {}).get("players") or []
        return players[0] if players else None

    def get_owned_games(self, steam_id: str) -> List[Dict[str, Any]]:
        data = self._get_json(
            self._api_url("IPlayerService/GetOwnedGames/v1/"),
            {
                "steamid": steam_id,
                "include_appinfo": 1,
                "include_played_free_games": 1,
            },
        )
        return ((data or {}).get("response") or {}).get("games") or []

    def get_recently_played(self, steam_id: str) -> List[Dict[str, Any]]:
        data = self._get_json(
            self._api_url("IPlayerService/GetRecentlyPlayedGames/v1/"),
            {"steamid": steam_id},
        )
        return ((data or {}).get("response") or {}).get("games") or []


# Singleton factory
_client: Optional[SteamClient] = None


def get_steam_client() -> SteamClient:
    """Get or create the shared Steam client."""
    global _client
    if _client is None:
        _client = SteamClient()
    return _client
