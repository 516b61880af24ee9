"""
Integration Test Fixtures

Provides an HTTP client against the FastAPI app. The test_client fixture
overrides get_db so every request runs on the per-test in-memory database
from the parent conftest.py.

Note: studypace.main is imported inside the fixture because it requires the
environment set up at the top of the parent conftest.py.
"""

from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture(scope="function")
async def test_client(session_maker) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    Async HTTP client bound to the app with get_db overridden.

    Each request gets its own session that commits on success and rolls
    back on error, like the production dependency.
    """
    from studypace.db.base import get_db
    from studypace.main import app

    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
