"""
Tests for game summaries, player stats and snapshot persistence.
"""
import pytest
from fastapi.testclient import TestClient

from app import crud
from app.cache import CacheManager
from app.errors import MissingApiKeyError, NotFoundError, UpstreamError
from app.game_stats import GameStatsService, build_player_stats, get_game_stats_service
from app.main import app


DOTA_DETAILS = {
    "name": "Dota 2",
    "type": "game",
    "is_free": True,
    "header_image": "https://cdn/570.jpg",
    "short_description": "Every day, millions of players...",
    "genres": [{"id": "1", "description": "Action"}, {"id": "2", "description": "Strategy"}],
    "platforms": {"windows": True, "mac": True, "linux": True},
    "developers": ["Valve"],
    "publishers": ["Valve"],
    "categories": [{"id": 1, "description": "Multi-player"}],
}


@pytest.fixture
def service(steam, clock, session_factory):
    return GameStatsService(
        client=steam,
        cache=CacheManager(clock=clock),
        session_factory=session_factory,
    )


@pytest.fixture
def client(service):
    app.dependency_overrides[get_game_stats_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


# =============================================================================
# Game summary
# =============================================================================

def test_game_summary_shape(service, steam):
    steam.app_details = {"570": DOTA_DETAILS}

    summary, meta = service.get_game_summary("570")

    assert summary["appId"] == "570"
    assert summary["isFree"] is True
    assert summary["genres"] == ["Action", "Strategy"]
    assert summary["categories"] == ["Multi-player"]
    assert summary["price"] is None
    assert summary["currentPlayers"] == 1234
    assert meta.cache_source == "upstream"


def test_game_summary_is_cached(service, steam, clock):
    steam.app_details = {"570": DOTA_DETAILS}

    service.get_game_summary("570")
    clock.advance(60)
    _, meta = service.get_game_summary("570")

    assert steam.count("app") == 1
    assert meta.cache_source == "fresh"
    assert meta.age_seconds == 60


def test_game_summary_is_persisted(service, steam, session_factory):
    steam.app_details = {"570": DOTA_DETAILS}

    service.get_game_summary("570")

    db = session_factory()
    try:
        row = crud.get_game_metadata(db, "570")
        assert row.payload["name"] == "Dota 2"
    finally:
        db.close()


def test_current_players_failure_is_tolerated(service, steam):
    steam.app_details = {"570": DOTA_DETAILS}
    steam.current_players_error = UpstreamError("down")

    assert service.get_game_summary("570")[0]["currentPlayers"] is None


def test_current_players_skipped_without_key(service, steam):
    steam.app_details = {"570": DOTA_DETAILS}
    steam.has_api_key = False

    assert service.get_game_summary("570")[0]["currentPlayers"] is None
    assert steam.count("players_now") == 0


def test_unknown_app_raises_not_found(service):
    with pytest.raises(NotFoundError):
        service.get_game_summary("999")


def test_summary_endpoint_not_found(client):
    response = client.get("/games/999/summary")

    assert response.status_code == 404
    assert response.json() == {"error": "not_found", "message": "App not found"}


def test_summary_endpoint_success(client, steam):
    steam.app_details = {"570": DOTA_DETAILS}

    response = client.get("/games/570/summary")

    assert response.status_code == 200
    assert response.json()["item"]["name"] == "Dota 2"
    assert response.json()["meta"]["cacheSource"] == "upstream"


# =============================================================================
# Player stats
# =============================================================================

OWNED = [
    {"appid": 570, "name": "Dota 2", "playtime_forever": 6000, "img_icon_url": "d2"},
    {"appid": 730, "name": "CS2", "playtime_forever": 90},
    {"appid": 440, "name": "TF2"},
    {"appid": 1, "name": "A", "playtime_forever": 30},
    {"appid": 2, "name": "B", "playtime_forever": 20},
    {"appid": 3, "name": "C", "playtime_forever": 10},
]


def test_build_player_stats_totals_and_top_games():
    recent = [{"appid": 570, "name": "Dota 2", "playtime_2weeks": 45, "playtime_forever": 6000}]

    payload = build_player_stats({"personaname": "x"}, OWNED, recent)

    assert payload["totals"] == {
        "ownedGames": 6,
        "recentGames": 1,
        "totalPlaytimeHours": 102.5,
    }
    assert [g["appId"] for g in payload["topGames"]] == [570, 730, 1, 2, 3]
    assert payload["topGames"][0]["playtimeHours"] == 100.0
    assert payload["recentGames"][0]["playtime2WeeksHours"] == 0.8


def test_player_stats_require_api_key(service, steam):
    steam.has_api_key = False

    with pytest.raises(MissingApiKeyError):
        service.get_player_stats("7656")


def test_player_stats_endpoint_missing_key(client, steam):
    steam.has_api_key = False

    response = client.get("/players/7656/stats")

    assert response.status_code == 500
    assert response.json()["error"] == "missing_api_key"


def test_player_stats_endpoint_upstream_failure(client, steam, monkeypatch):
    def boom(steam_id):
        raise UpstreamError("Request failed (500)", upstream_status=500)

    monkeypatch.setattr(steam, "get_owned_games", boom)

    response = client.get("/players/7656/stats")

    assert response.status_code == 500
    assert response.json()["error"] == "failed_to_fetch_player"


def test_player_stats_cached_for_five_minutes(service, steam, clock):
    steam.owned = OWNED

    service.get_player_stats("7656")
    clock.advance(299)
    service.get_player_stats("7656")
    assert steam.count("owned") == 1

    clock.advance(2)
    service.get_player_stats("7656")
    assert steam.count("owned") == 2


def test_player_snapshots_recorded_per_fetch(client, service, steam, clock):
    steam.owned = OWNED

    service.get_player_stats("7656")
    clock.advance(301)
    service.get_player_stats("7656")

    response = client.get("/players/7656/snapshots")

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert body["items"][0]["steam_id"] == "7656"
    assert body["items"][0]["snapshot"]["totals"]["ownedGames"] == 6
