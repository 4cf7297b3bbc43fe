"""
Shared pytest configuration.

Every test gets a fresh in-memory SQLite database (StaticPool keeps the
single connection alive across sessions); manager tests run against both
RosterStore implementations.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401  (registers tables on Base.metadata)
from database import Base, create_db_engine, get_db
from main import app
from models import utcnow
from schemas import GameCreate
from core.roster_store import InMemoryRosterStore, SqlRosterStore


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Each test using this fixture runs once per RosterStore implementation."""
    if request.param == "memory":
        return InMemoryRosterStore()
    return SqlRosterStore(request.getfixturevalue("db_session"))


@pytest.fixture
def memory_store():
    return InMemoryRosterStore()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_game_data():
    """Factory for a valid GameCreate scheduled tomorrow."""
    def _make(**overrides):
        data = {
            "sport": "Basketball 5v5",
            "time": utcnow() + timedelta(days=1),
            "location": "Rucker Park",
            "level": "Intermediate",
            "max_players": 10,
            "is_public": True,
            "creator_phone": "5550000000",
        }
        data.update(overrides)
        return GameCreate(**data)
    return _make
