"""
Game catalog and search endpoints
"""
from fastapi.testclient import TestClient
from app.main import app

client = TestClient(app)


def test_games_returns_full_catalog():
    data = client.get("/games").json()
    assert data["count"] == len(data["items"]) == 6


def test_games_filters_by_genre():
    data = client.get("/games?q=battle royale").json()
    names = {g["name"] for g in data["items"]}
    assert names == {"PUBG: BATTLEGROUNDS", "Apex Legends"}


def test_search_requires_query():
    response = client.get("/search")
    assert response.status_code == 400
    assert response.json()["error"] == "missing_query"


def test_search_matches_developer_and_tags():
    assert client.get("/search?q=valve").json()["count"] == 3
    esports = client.get("/search?q=esports").json()
    assert {g["appId"] for g in esports["items"]} == {"570", "730"}


def test_search_ignores_punctuation():
    data = client.get("/search?q=pubg:").json()
    assert data["items"][0]["appId"] == "578080"


def test_game_detail_found():
    response = client.get("/games/570")
    assert response.status_code == 200
    assert response.json()["item"]["name"] == "Dota 2"


def test_game_detail_404():
    response = client.get("/games/1")
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"
