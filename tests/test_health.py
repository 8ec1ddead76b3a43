"""
Health and version endpoints
"""
from fastapi.testclient import TestClient
from app.main import app

client = TestClient(app)


def test_health_endpoint_returns_200():
    """Test that /health returns HTTP 200"""
    response = client.get("/health")
    assert response.status_code == 200


def test_health_endpoint_returns_ok_status():
    """Test that /health returns status: ok"""
    data = client.get("/health").json()
    assert data["status"] == "ok"
    assert data["service"] == "steam-stats-view"


def test_version_endpoint():
    data = client.get("/version").json()
    assert data["name"] == "Steam Stats View"
    assert data["version"].startswith("v")
