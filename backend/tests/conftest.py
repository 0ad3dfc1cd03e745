"""Shared pytest fixtures for all tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from app.config import Settings
from app.database import Database
from app.main import create_app
from app.services.category_service import CategoryService
from app.services.post_service import PostService

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def database():
    """Create an in-memory SQLite database with all tables.

    Yields:
        Database: Database handle shared by the test and the app under test.
    """
    database = Database(TEST_DATABASE_URL)
    await database.create_tables()
    yield database
    await database.dispose()


@pytest.fixture
async def db(database):
    """Open a session on the test database.

    Yields:
        AsyncSession: Session for calling services directly.
    """
    async with database.session_maker() as session:
        yield session


@pytest.fixture
def category_service():
    """Category service with default seeding enabled."""
    return CategoryService()


@pytest.fixture
def post_service():
    return PostService()


@pytest.fixture
def test_settings():
    """Settings pointing at an in-memory database.

    Returns:
        Settings: Test configuration object.
    """
    return Settings(
        database_url=TEST_DATABASE_URL,
        auto_create_tables=True,
        seed_default_categories=True,
        log_level="DEBUG",
        cors_origins="http://localhost:3000",
    )


@pytest.fixture
def app(test_settings, database):
    """FastAPI app wired to the test database."""
    return create_app(test_settings, database=database)


@pytest.fixture
async def client(app):
    """HTTP client that calls the app in-process.

    Yields:
        AsyncClient: Client with base URL http://test.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
