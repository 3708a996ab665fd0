"""
Shared fixtures: an in-memory SQLite database per test, a TestClient wired to
it, and helpers for creating profiles and auth headers.

Environment is pinned before the application is imported so the module-level
settings and engine never point at a real database file.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ.pop("INGEST_API_KEY", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from resolvix.api.dependencies import get_db
from resolvix.core.config import settings
from resolvix.core.database import Base
from resolvix.main import app
from resolvix.models.profile import Profile
from resolvix.services import change_feed
from resolvix.services.auth_service import create_access_token, hash_password

TEST_PASSWORD = "Test@1234"
_PASSWORD_HASH = hash_password(TEST_PASSWORD)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def fresh_change_feed(monkeypatch):
    monkeypatch.setattr(change_feed, "_change_feed", None)


@pytest.fixture(autouse=True)
def no_ingest_key(monkeypatch):
    monkeypatch.setattr(settings, "INGEST_API_KEY", None)


@pytest.fixture
def client(session_factory):
    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_profile(db):
    counter = {"n": 0}

    def _make(role: str, name: str = None, email: str = None, status: str = "active") -> Profile:
        counter["n"] += 1
        label = name or f"{role.title()} {counter['n']}"
        profile = Profile(
            email=email or f"{role}{counter['n']}@example.com",
            password_hash=_PASSWORD_HASH,
            full_name=label,
            role=role,
            status=status,
        )
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile

    return _make


@pytest.fixture
def auth_headers():
    def _headers(profile: Profile) -> dict:
        token = create_access_token(subject=str(profile.id))
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def team(make_profile):
    """admin=[A1,A2], engineer=[E1], support=[S1,S2,S3], created in that order."""
    return {
        "admin": [make_profile("admin", "A1"), make_profile("admin", "A2")],
        "engineer": [make_profile("engineer", "E1")],
        "support": [make_profile("support", "S1"), make_profile("support", "S2"), make_profile("support", "S3")],
    }
