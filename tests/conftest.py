"""
Test configuration and fixtures for the short links service.

Rows are seeded through a plain (sync) SQLAlchemy session on a file-based
SQLite database; the app under test talks to the same file through aiosqlite.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from main import create_app
from shortlinks.config import Settings
from shortlinks.database.connection import Base
from shortlinks.models import ShortLink


@pytest.fixture(scope="function")
def database_path(tmp_path):
    return tmp_path / "test.db"


@pytest.fixture(scope="function")
def csv_path(tmp_path):
    """Where the app looks for static links. Absent unless a test writes it."""
    return tmp_path / "links.csv"


@pytest.fixture(scope="function")
def db_session(database_path):
    """
    Create a fresh database and session for each test.
    This ensures tests are isolated and don't affect each other.
    """
    engine = create_engine(f"sqlite:///{database_path}")
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def seed_link(db_session):
    """Insert a short link row and return it."""
    def _seed(token: str, long_url: str, is_active: bool = True, click_count: int = 0) -> ShortLink:
        link = ShortLink(
            token=token,
            long_url=long_url,
            is_active=is_active,
            click_count=click_count,
        )
        db_session.add(link)
        db_session.commit()
        db_session.refresh(link)
        return link

    return _seed


@pytest.fixture(scope="function")
def settings(database_path, csv_path):
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{database_path}",
        default_redirect_url="https://example.com",
        links_csv_path=str(csv_path),
    )


@pytest.fixture(scope="function")
def app(settings, db_session):
    """App wired to the test database. Depends on db_session so tables exist first."""
    application = create_app(settings)
    yield application
    application.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(app):
    """
    Test client with the app's lifespan running.
    This is the main fixture that tests will use.
    """
    with TestClient(app) as test_client:
        yield test_client
