"""
Integration tests for workout endpoints.

Tests session submission with authentication and the stats reads.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from fastapi.testclient import TestClient
from app.main import app
from app.db.database import get_db
from app.utils.jwt import create_access_token


def get_auth_headers(user_id):
    """Helper to create auth headers."""
    token = create_access_token(user_id)
    return {"Authorization": f"Bearer {token}"}


def session_payload(program_id, total_reps=20, **extra):
    start = datetime.now(timezone.utc) - timedelta(minutes=10)
    payload = {
        "program_id": str(program_id),
        "start_time": start.isoformat(),
        "end_time": (start + timedelta(minutes=5)).isoformat(),
        "total_reps": total_reps,
        "total_duration": 300,
        "sets": [
            {
                "set_number": 1,
                "target_reps": 10,
                "completed_reps": 10,
                "duration": 150,
                "timestamp": start.isoformat(),
            },
            {
                "set_number": 2,
                "target_reps": 10,
                "completed_reps": total_reps - 10,
                "duration": 150,
                "timestamp": start.isoformat(),
            },
        ],
    }
    payload.update(extra)
    return payload


class TestRecordSessionEndpoint:
    """Tests for POST /api/v1/workouts/sessions."""

    def test_record_session(self, test_db, override_get_db, make_user, make_program):
        """Authenticated user records a completed session."""
        app.dependency_overrides[get_db] = override_get_db
        try:
            user = make_user()
            program = make_program(type="TARGET_REPS", target_reps=20)

            client = TestClient(app)
            response = client.post(
                "/api/v1/workouts/sessions",
                headers=get_auth_headers(user.user_id),
                json=session_payload(program.program_id),
            )

            assert response.status_code == 201
            data = response.json()
            assert data["completed"] is True
            assert data["points_awarded"] == 5
            assert data["failed_steps"] == []
            assert data["session"]["user_id"] == str(user.user_id)
            assert [s["set_number"] for s in data["session"]["sets"]] == [1, 2]
        finally:
            app.dependency_overrides.clear()

    def test_client_completed_flag_ignored(self, test_db, override_get_db, make_user, make_program):
        """A client-sent completed flag has no effect."""
        app.dependency_overrides[get_db] = override_get_db
        try:
            user = make_user()
            program = make_program(type="TARGET_REPS", target_reps=100)

            client = TestClient(app)
            response = client.post(
                "/api/v1/workouts/sessions",
                headers=get_auth_headers(user.user_id),
                json=session_payload(program.program_id, completed=True),
            )

            assert response.status_code == 201
            assert response.json()["completed"] is False
        finally:
            app.dependency_overrides.clear()

    def test_requires_authentication(self, test_db, override_get_db, make_program):
        app.dependency_overrides[get_db] = override_get_db
        try:
            program = make_program()
            client = TestClient(app)
            response = client.post(
                "/api/v1/workouts/sessions", json=session_payload(program.program_id)
            )
            assert response.status_code == 401
        finally:
            app.dependency_overrides.clear()

    def test_unknown_user_rejected(self, test_db, override_get_db, make_program):
        app.dependency_overrides[get_db] = override_get_db
        try:
            program = make_program()
            client = TestClient(app)
            response = client.post(
                "/api/v1/workouts/sessions",
                headers=get_auth_headers(uuid4()),
                json=session_payload(program.program_id),
            )
            assert response.status_code == 401
        finally:
            app.dependency_overrides.clear()

    def test_unknown_program(self, test_db, override_get_db, make_user):
        app.dependency_overrides[get_db] = override_get_db
        try:
            user = make_user()
            client = TestClient(app)
            response = client.post(
                "/api/v1/workouts/sessions",
                headers=get_auth_headers(user.user_id),
                json=session_payload(uuid4()),
            )
            assert response.status_code == 404
        finally:
            app.dependency_overrides.clear()

    def test_challenge_without_task_rejected(self, test_db, override_get_db, make_user, make_program):
        app.dependency_overrides[get_db] = override_get_db
        try:
            user = make_user()
            program = make_program()
            client = TestClient(app)
            response = client.post(
                "/api/v1/workouts/sessions",
                headers=get_auth_headers(user.user_id),
                json=session_payload(program.program_id, challenge_id=str(uuid4())),
            )
            assert response.status_code == 422
        finally:
            app.dependency_overrides.clear()


class TestStatsEndpoints:
    """Tests for stats, records and streak reads."""

    def test_stats_records_and_streak(self, test_db, override_get_db, make_user, make_program):
        app.dependency_overrides[get_db] = override_get_db
        try:
            user = make_user()
            program = make_program()
            client = TestClient(app)
            headers = get_auth_headers(user.user_id)
            client.post(
                "/api/v1/workouts/sessions",
                headers=headers,
                json=session_payload(program.program_id, total_reps=30),
            )

            stats = client.get(f"/api/v1/workouts/stats/{user.user_id}?period=week", headers=headers)
            assert stats.status_code == 200
            assert stats.json()["total_reps"] == 30
            assert stats.json()["total_workouts"] == 1

            records = client.get(f"/api/v1/workouts/records/{user.user_id}")
            assert records.status_code == 200
            assert records.json()["max_reps_in_set"] == 20

            streak = client.get(f"/api/v1/workouts/streak/{user.user_id}")
            assert streak.status_code == 200
            assert streak.json()["longest"] == 1
        finally:
            app.dependency_overrides.clear()

    def test_other_users_stats_forbidden(self, test_db, override_get_db, make_user):
        app.dependency_overrides[get_db] = override_get_db
        try:
            user = make_user()
            client = TestClient(app)
            response = client.get(
                f"/api/v1/workouts/stats/{uuid4()}",
                headers=get_auth_headers(user.user_id),
            )
            assert response.status_code == 403
        finally:
            app.dependency_overrides.clear()

    def test_invalid_period(self, test_db, override_get_db, make_user):
        app.dependency_overrides[get_db] = override_get_db
        try:
            user = make_user()
            client = TestClient(app)
            response = client.get(f"/api/v1/workouts/stats/{user.user_id}?period=decade")
            assert response.status_code == 422
        finally:
            app.dependency_overrides.clear()
