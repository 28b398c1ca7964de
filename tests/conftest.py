"""
Shared pytest fixtures.

Uses a SQLite database file so no Postgres is required for tests, and a
FixedClock so "today" is always TODAY.
"""
import os
import uuid
from datetime import date

# Settings are read at import time; point them at SQLite before importing the app.
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_dotoday.db")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from dotoday.core.clock import FixedClock, get_clock
from dotoday.db.base import Base, get_db
from dotoday.main import app
from dotoday.services import goals as goal_service
import dotoday.models  # noqa: F401

SQLITE_URL = "sqlite:///./test_dotoday.db"

engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TODAY = date(2026, 3, 15)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def override_get_clock():
    return FixedClock(TODAY)


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def today() -> date:
    return TODAY


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = override_get_clock
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def user_id() -> str:
    """A fresh owner per test so listings never see other tests' goals."""
    return f"user-{uuid.uuid4()}"


@pytest.fixture()
def make_goal(db, user_id):
    def _make(owner: str | None = None, **fields):
        fields.setdefault("title", "Read 20 pages")
        return goal_service.create_goal(db, owner or user_id, **fields)
    return _make


@pytest.fixture()
def auth():
    def _headers(uid: str) -> dict[str, str]:
        return {"X-User-Id": uid}
    return _headers
