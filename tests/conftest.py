"""
- Spins up temp test DB
- Create tables before tests run
- Provide a db_session fixture and override FastAPI's get_db so routes use the test session.
- Provide a client fixture (TestClient(app)) that already has the DB override applied.
- Pin "today" so the daily puzzle is known: 2025-03-01 -> 3 × 6 = 18.
"""
import os
import pytest
from typing import Generator

# Must be set before tilecraft.db is imported (it reads the env at import time)
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
# Ensure the app does NOT run dev-only startup hooks (e.g., auto-create tables against real DB)
os.environ.setdefault("APP_ENV", "test")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tilecraft.db import Base, get_db
from tilecraft.main import app, get_today
from tilecraft import models  # noqa: F401

# Use SQLite in-memory for tests (fast, isolated)
TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"

# Known day used throughout the tests
DAY = "2025-03-01"

@pytest.fixture(scope="session")
def engine():
    # StaticPool + check_same_thread=False lets Starlette's TestClient and SQLAlchemy
    # share ONE in-memory SQLite database across threads.
    engine = create_engine(
        TEST_DATABASE_URL,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db_session(engine) -> Generator:
    """Provide a clean session per test with rollback."""
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    db = TestingSessionLocal()
    try:
        yield db
        db.rollback()
    finally:
        db.close()

@pytest.fixture(autouse=True)
def _clean_db(engine):
    """
    Keep tests independent:
    The store commits inside requests, so data would leak between tests.
    """
    with engine.begin() as conn:
        conn.execute(text("DELETE FROM snapshots"))
    yield

@pytest.fixture(autouse=True)
def override_dep(db_session):
    """Force the app to use our test session for every request."""
    def _get_db_for_tests():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _get_db_for_tests
    yield
    app.dependency_overrides.clear()

@pytest.fixture
def set_today():
    """
    Pin the app's clock to a day key. Returns a setter so a test can move to the next day.
    Starts on DAY.
    """
    current = {"day": DAY}

    def _set(day: str) -> None:
        current["day"] = day

    app.dependency_overrides[get_today] = lambda: current["day"]
    return _set

@pytest.fixture
def client(set_today):
    # Talks to the FastAPI app in-process with the DB and clock overrides applied.
    return TestClient(app)
