"""
Shared fixtures: a controllable clock, a fake Steam client and an
in-memory database.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.errors import UpstreamError
from app.models import Base


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeSteamClient:
    """Stands in for SteamClient, recording every call."""

    def __init__(self):
        self.has_api_key = True
        self.live_games: List[Any] = []
        self.live_error: Optional[Exception] = None
        self.leagues: List[Dict[str, Any]] = []
        self.league_error: Optional[Exception] = None
        self.teams: Dict[int, Dict[str, Any]] = {}
        self.failing_teams: set = set()
        self.app_details: Dict[str, Dict[str, Any]] = {}
        self.current_players: Optional[int] = 1234
        self.current_players_error: Optional[Exception] = None
        self.profile: Optional[Dict[str, Any]] = {"personaname": "gaben"}
        self.owned: List[Dict[str, Any]] = []
        self.recent: List[Dict[str, Any]] = []
        self.calls: List[tuple] = []

    def get_top_live_games(self):
        self.calls.append(("live",))
        if self.live_error:
            raise self.live_error
        return self.live_games

    def get_league_listing(self):
        self.calls.append(("leagues",))
        if self.league_error:
            raise self.league_error
        return self.leagues

    def get_team_info(self, team_id):
        self.calls.append(("team", team_id))
        if team_id in self.failing_teams:
            raise UpstreamError("Request failed (503)", upstream_status=503)
        return self.teams.get(team_id)

    def get_app_details(self, app_id):
        self.calls.append(("app", app_id))
        return self.app_details.get(app_id)

    def get_current_players(self, app_id):
        self.calls.append(("players_now", app_id))
        if self.current_players_error:
            raise self.current_players_error
        return self.current_players

    def get_player_summary(self, steam_id):
        self.calls.append(("profile", steam_id))
        return self.profile

    def get_owned_games(self, steam_id):
        self.calls.append(("owned", steam_id))
        return self.owned

    def get_recently_played(self, steam_id):
        self.calls.append(("recent", steam_id))
        return self.recent

    def count(self, name: str) -> int:
        return sum(1 for c in self.calls if c[0] == name)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def steam():
    return FakeSteamClient()


@pytest.fixture
def session_factory():
    """Sessions bound to a fresh in-memory SQLite database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()
