"""
Pytest configuration and fixtures for the search dashboard tests
"""

import os
import sys
from collections.abc import AsyncGenerator

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH120

# Test database URL - a local SQLite file unless TEST_DATABASE_URL points elsewhere
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///./test_search_dashboard.db")

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "adminpassword"

# Settings are read at import time, so the environment is prepared first
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-at-least-32-characters"
os.environ["ADMIN_EMAIL"] = ADMIN_EMAIL
os.environ["ADMIN_PASSWORD"] = ADMIN_PASSWORD
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.pop("LOG_DIR", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from search_dashboard.database import Base  # noqa: E402

# NullPool: the app under TestClient and the async fixtures run on different event loops
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)

TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

# Now import and patch the app's database components
import search_dashboard.database as database_module  # noqa: E402
from main import app  # noqa: E402

database_module.engine = test_engine
database_module.AsyncSessionLocal = TestSessionLocal


@pytest.fixture(scope="function")
async def setup_test_database():
    """Create fresh tables for each test function that needs them."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield

    try:
        async with test_engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
    except Exception as e:
        import logging

        logging.warning(f"Error during test cleanup: {e}")


@pytest.fixture(scope="function")
async def test_db(setup_test_database) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session on freshly created tables."""
    async with TestSessionLocal() as session:
        yield session


@pytest.fixture
def client():
    """Test client for the application, without a session"""
    return TestClient(app)


@pytest.fixture
def admin_client(client, setup_test_database):
    """Test client holding an authenticated admin session stored in the test database"""
    response = client.post(
        "/admin/login",
        data={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
        follow_redirects=False,
    )
    assert response.status_code == 303
    return client


@pytest.fixture
def admin_credentials() -> dict:
    return {"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
