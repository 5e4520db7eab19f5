"""
Pytest configuration and fixtures for unit and integration tests.
"""

import os
import pytest
from datetime import datetime, timezone
from uuid import uuid4
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.database import Base

# Import models to register with Base.metadata
from app.models import (
    Challenge,
    ChallengeTask,
    User,
    WorkoutProgram,
    WorkoutSession,
)


# Use test database URL from env, or default to SQLite in-memory
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")


@pytest.fixture(scope="function")
def test_engine():
    """Create a test database engine."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        # SQLite in-memory for fast tests
        engine = create_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )
    else:
        # Postgres for more realistic integration tests
        engine = create_engine(TEST_DATABASE_URL, echo=False)

    # Create all tables
    Base.metadata.create_all(bind=engine)

    yield engine

    # Drop all tables after test
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def test_db(test_engine):
    """Create a test database session."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()

    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def override_get_db(test_db):
    """Override get_db dependency for FastAPI."""

    def _get_db():
        try:
            yield test_db
        finally:
            pass  # Don't close, we'll handle it in fixture

    return _get_db


@pytest.fixture
def sample_user_id():
    """Sample user ID for tests."""
    return uuid4()


@pytest.fixture
def make_user(test_db):
    """Factory for persisted users."""

    def _make_user(user_id=None, name="Tester", **kwargs):
        user = User(user_id=user_id or uuid4(), name=name, **kwargs)
        test_db.add(user)
        test_db.commit()
        return user

    return _make_user


@pytest.fixture
def make_program(test_db):
    """Factory for persisted workout programs."""

    def _make_program(type="FREE_MODE", difficulty="BEGINNER", name=None, **params):
        program = WorkoutProgram(
            name=name or f"{type.title()} program",
            type=type,
            difficulty=difficulty,
            **params,
        )
        test_db.add(program)
        test_db.commit()
        return program

    return _make_program


@pytest.fixture
def make_challenge(test_db):
    """
    Factory for a challenge with tasks.

    ``task_scores`` gives one task per entry (day 1, 2, ...) with that score.
    Returns (challenge, [tasks]).
    """

    def _make_challenge(task_scores=(10,), points=0, title="Push-up challenge"):
        challenge = Challenge(title=title, points=points, target_reps=100)
        test_db.add(challenge)
        test_db.flush()

        tasks = []
        for day, score in enumerate(task_scores, start=1):
            task = ChallengeTask(
                challenge_id=challenge.challenge_id,
                day=day,
                title=f"Day {day}",
                target_reps=10 * day,
                score=score,
            )
            test_db.add(task)
            tasks.append(task)

        test_db.commit()
        return challenge, tasks

    return _make_challenge


@pytest.fixture
def make_session(test_db):
    """Factory for stored sessions, bypassing the recorder."""

    def _make_session(user_id, program, start_time=None, total_reps=0, total_duration=0, completed=True):
        session = WorkoutSession(
            program_id=program.program_id,
            user_id=user_id,
            start_time=start_time or datetime.now(timezone.utc),
            end_time=start_time or datetime.now(timezone.utc),
            total_reps=total_reps,
            total_duration=total_duration,
            completed=completed,
        )
        test_db.add(session)
        test_db.commit()
        return session

    return _make_session
