"""
Notes API — Test Configuration (conftest.py)
=============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncSession double (no real DB needed)
    ├── temp_storage: Temporary upload directory
    ├── test_settings: Settings pointing at a per-test SQLite file
    ├── app: FastAPI app built from test_settings, tables created
    └── test_client: HTTPX AsyncClient talking to `app` in-process
"""

import os
import tempfile

# Environment for the module-level app in notes_api.main, set BEFORE any
# notes_api import so the default Settings never point at a real server.
_default_dir = tempfile.mkdtemp(prefix="notes_api_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_default_dir, 'default.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_default_dir, "uploads")
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from notes_api.config import Settings  # noqa: E402
from notes_api.database import dispose_engine, init_models  # noqa: E402
from notes_api.main import create_app  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Unit-test doubles
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_note(mock_db_session):
            mock_db_session.get.return_value = note
            result = await NoteService().get_note(mock_db_session, str(note.id))
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.delete = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    """A fresh upload directory for each test."""
    storage_dir = tmp_path / "uploads"
    storage_dir.mkdir()
    return str(storage_dir)


# ══════════════════════════════════════════════════════════════════════════
# Application fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path):
    """Settings with an isolated SQLite database and upload directory."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'notes.db'}",
        upload_dir=str(tmp_path / "uploads"),
        log_level="WARNING",
        _env_file=None,
    )


@pytest_asyncio.fixture
async def app(test_settings):
    """A FastAPI app with its own database, tables already created."""
    application = create_app(test_settings)
    await init_models(application.state.engine)
    yield application
    application.dependency_overrides.clear()
    await dispose_engine(application.state.engine)


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    raise_app_exceptions=False lets tests observe the 500 envelope instead
    of the exception that Starlette re-raises after rendering it.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
