"""
Notekeeper Backend: Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── database:         Real Database gateway over a temporary SQLite file
    ├── repository:       NoteRepository bound to that database
    ├── mock_repository:  AsyncMock standing in for NoteRepository
    ├── sample_note:      A NoteRead instance for controller tests
    └── test_client:      HTTPX AsyncClient wired to the app + temp database
"""

import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock

# Configure settings BEFORE any app import; app.config reads the
# environment once when it is first imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DB_AUTO_CREATE_SCHEMA"] = "false"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.database import Database, get_database  # noqa: E402
from app.repositories.note_repository import NoteRepository  # noqa: E402
from app.schemas.note import NoteRead  # noqa: E402


@pytest_asyncio.fixture
async def database(tmp_path):
    """
    Provides a Database gateway over a fresh SQLite file with the notes table.

    Each test gets its own file, so no state leaks between tests.
    """
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'notes.db'}")
    await db.create_schema()
    yield db
    await db.dispose()


@pytest.fixture
def repository(database):
    return NoteRepository(database)


@pytest.fixture
def mock_repository():
    """
    Provides an AsyncMock with the NoteRepository interface.

    Usage:
        mock_repository.get_by_id.return_value = None
        with pytest.raises(NotFoundError): ...
    """
    return AsyncMock(spec=NoteRepository)


@pytest.fixture
def sample_note():
    now = datetime.now(timezone.utc)
    return NoteRead(
        id=1,
        title="Shopping",
        content="milk, eggs",
        tags=["home"],
        important=False,
        deleted=False,
        created_at=now,
        updated_at=now,
    )


@pytest_asyncio.fixture
async def test_client(database):
    """
    Provides an async HTTP test client for endpoint testing.

    ASGITransport does not run the lifespan, so the temporary database is
    injected by overriding the get_database dependency.
    """
    from app.main import app

    app.dependency_overrides[get_database] = lambda: database
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
