"""
Smoke tests for service liveness and the public read endpoints.
"""

from fastapi.testclient import TestClient
from app.main import app
from app.db.database import get_db


class TestServiceUp:
    """The app boots and answers without auth."""

    def test_health_and_banner(self):
        client = TestClient(app)
        assert client.get("/health").json() == {"status": "ok"}
        assert "PumpUp" in client.get("/").json()["message"]

    def test_api_routes_mounted(self):
        """Workout, challenge and leaderboard routes are in the schema."""
        client = TestClient(app)
        paths = client.get("/openapi.json").json()["paths"]
        for path in (
            "/api/v1/workouts/sessions",
            "/api/v1/challenges/active",
            "/api/v1/leaderboard",
        ):
            assert path in paths


class TestLeaderboardSmoke:
    """Leaderboard reads against an empty database."""

    def test_empty_leaderboard(self, override_get_db):
        app.dependency_overrides[get_db] = override_get_db
        try:
            client = TestClient(app)
            response = client.get("/api/v1/leaderboard")
            assert response.status_code == 200
            assert response.json() == []

            top = client.get("/api/v1/leaderboard/top", params={"period": "weekly"})
            assert top.status_code == 200
            assert top.json() == []
        finally:
            app.dependency_overrides.clear()
