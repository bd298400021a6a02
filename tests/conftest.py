"""
Pytest fixtures for the TrackRecord API.

Every test gets its own sqlite file database (foreign keys on) and an
application built around it with ``create_application``.
"""

from pathlib import Path
from typing import Any, Callable, Dict, Generator, List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from trackrecord.core.config import Settings
from trackrecord.db.base import Base
from trackrecord.db.session import create_session_maker
from trackrecord.main import create_application
from trackrecord.repositories import Models
import trackrecord.models  # noqa: F401 - register all models

TEST_JWT_SECRET = "test-secret-for-hs256-signing-0123456789"
TEST_PASSWORD = "pa55word-for-tests"


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
def database_path(tmp_path: Path) -> Path:
    return tmp_path / "trackrecord.db"


@pytest.fixture
def engine(database_path: Path) -> AsyncEngine:
    """Async engine over a freshly created schema."""
    sync_engine = create_engine(f"sqlite:///{database_path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()

    engine = create_async_engine(f"sqlite+aiosqlite:///{database_path}", poolclass=NullPool)
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)
    return engine


@pytest.fixture
def models(engine: AsyncEngine) -> Models:
    """Repositories bound to the test database, for tests that skip HTTP."""
    return Models.from_sessions(create_session_maker(engine))


# ---------------------------------------------------------------------------
# Test App and Client
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings() -> Settings:
    """Settings with a known signing secret and the rate limiter off."""
    return Settings(
        _env_file=None,
        environment="test",
        jwt_secret=TEST_JWT_SECRET,
        limiter_enabled=False,
    )


@pytest.fixture
def app(test_settings: Settings, engine: AsyncEngine):
    return create_application(settings=test_settings, engine=engine)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """TestClient that runs the application lifespan."""
    with TestClient(app) as client:
        yield client


# ---------------------------------------------------------------------------
# Users and tokens
# ---------------------------------------------------------------------------


@pytest.fixture
def make_user(client: TestClient) -> Callable[..., Dict[str, str]]:
    """Register a user, log in, and return the Authorization header for them."""

    def _make(email: str, name: str = "Test User", password: str = TEST_PASSWORD) -> Dict[str, str]:
        response = client.post("/v1/users", json={"name": name, "email": email, "password": password})
        assert response.status_code == 201, response.text
        response = client.post("/v1/auth/login", json={"email": email, "password": password})
        assert response.status_code == 201, response.text
        token = response.json()["authentication_token"]["token"]
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def alice(make_user) -> Dict[str, str]:
    return make_user("alice@example.com", name="Alice")


@pytest.fixture
def bob(make_user) -> Dict[str, str]:
    return make_user("bob@example.com", name="Bob")


# ---------------------------------------------------------------------------
# Domain Fixtures - Exercises
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_exercises() -> List[Dict[str, Any]]:
    return [
        {
            "name": "Bench Press",
            "description": "Flat barbell bench press",
            "category": "Strength",
            "muscle_group": "Chest",
        },
        {
            "name": "Back Squat",
            "description": "High bar back squat",
            "category": "Strength",
            "muscle_group": "Legs",
        },
        {
            "name": "Rowing",
            "description": "Indoor rower intervals",
            "category": "Cardio",
            "muscle_group": "Full Body",
        },
    ]


@pytest.fixture
def exercise_ids(client: TestClient, alice: Dict[str, str], sample_exercises) -> List[int]:
    """Seed the exercise catalogue through the API; ids in ``sample_exercises`` order."""
    ids = []
    for payload in sample_exercises:
        response = client.post("/v1/exercises", json=payload, headers=alice)
        assert response.status_code == 201, response.text
        ids.append(response.json()["exercise"]["id"])
    return ids


@pytest.fixture
def make_workout(client: TestClient) -> Callable[..., Dict[str, Any]]:
    def _make(headers: Dict[str, str], exercise_ids: List[int], name: str = "Push Day") -> Dict[str, Any]:
        payload = {
            "name": name,
            "description": "Heavy compound lifts",
            "items": [{"exercise_id": eid, "sets": 3, "reps": 10, "weight": 50} for eid in exercise_ids],
        }
        response = client.post("/v1/workouts", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["workout"]

    return _make
