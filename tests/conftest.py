"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from reelreview.core.auth import create_access_token
from reelreview.core.config import get_settings
from reelreview.db import get_session, install_sqlite_functions
from reelreview.main import app
from reelreview.models import Base
from reelreview.services import catalog, users
from reelreview.services.models import MovieDraft, Principal

TEST_SECRET = "test-secret-that-is-long-enough-for-hs256"


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", TEST_SECRET)
    monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def session():
    """Create a temporary in-memory database session for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    install_sqlite_functions(engine)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, future=True)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(session):
    def _override_session():
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise

    app.dependency_overrides[get_session] = _override_session
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def alice(session):
    profile = users.register_user(session, nickname="alice", email="alice@example.com", password="pw-alice")
    session.commit()
    return profile


@pytest.fixture
def bob(session):
    profile = users.register_user(session, nickname="bob", email="bob@example.com", password="pw-bob")
    session.commit()
    return profile


@pytest.fixture
def alice_principal(alice):
    return Principal(email=alice.email)


@pytest.fixture
def bob_principal(bob):
    return Principal(email=bob.email)


@pytest.fixture
def auth_header():
    def _header(email: str) -> dict:
        return {"Authorization": f"Bearer {create_access_token(email)}"}

    return _header


@pytest.fixture
def movies(session):
    inception = catalog.add_movie(
        session,
        MovieDraft(
            title="Inception",
            genres=["Sci-Fi", "Thriller"],
            release_year=2010,
            actors=["Leonardo DiCaprio", "Elliot Page"],
            description="A thief who steals corporate secrets through dream-sharing.",
        ),
    )
    matrix = catalog.add_movie(
        session,
        MovieDraft(
            title="The Matrix",
            genres=["Sci-Fi", "Action"],
            release_year=1999,
            actors=["Keanu Reeves", "Carrie-Anne Moss"],
            description="A hacker learns the truth.",
        ),
    )
    amelie = catalog.add_movie(
        session,
        MovieDraft(
            title="Amélie",
            genres=["Romance", "Comedy"],
            release_year=2001,
            actors=["Audrey Tautou"],
            description="A shy waitress decides to change the lives of those around her.",
            poster_url="posters/amelie.jpg",
        ),
    )
    session.commit()
    return {"inception": inception, "matrix": matrix, "amelie": amelie}
