"""
Pytest configuration and fixtures.

The database URL is pointed at a throwaway SQLite file before any
lead_funnel module is imported, because settings and the engine are
created at import time.
"""
import os
import tempfile
import uuid

_TEST_DIR = tempfile.mkdtemp(prefix="lead_funnel_tests_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"
os.environ["ENVIRONMENT"] = "test"
os.environ["REGISTRATION_WEBHOOK_URL"] = ""
os.environ["GOOGLE_SHEET_ID_EXPORT"] = ""

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from lead_funnel.database import db as database  # noqa: E402
from lead_funnel.shared.schemas import FlowState, LeadProfile  # noqa: E402


@pytest.fixture
def session_id():
    return f"test-{uuid.uuid4()}"


@pytest.fixture
def make_profile():
    """Builds a LeadProfile from keyword answers."""

    def _make(**answers):
        return LeadProfile.from_answers(answers)

    return _make


@pytest.fixture
def make_state(session_id):
    def _make(**fields):
        return FlowState(sessionId=session_id, **fields)

    return _make


@pytest_asyncio.fixture
async def db():
    """An AsyncSession on the test database with all tables created."""
    await database.create_tables()
    async with database.AsyncSessionFactory() as session:
        yield session
    await database.engine.dispose()


@pytest.fixture
def app():
    """Get FastAPI application instance."""
    from lead_funnel.main import app

    return app


@pytest_asyncio.fixture
async def async_client(app):
    """Create async HTTP client for testing. ASGITransport skips the lifespan."""
    await database.create_tables()
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    await database.engine.dispose()
