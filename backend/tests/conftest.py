"""
QuillMind Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   The environment is pointed at a throwaway SQLite database BEFORE any
       quillmind import, because settings, the engine and the service
       singletons are created at import time.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: AsyncMock session for service unit tests
    ├── db_schema:       drops and recreates every table
    ├── db_session:      real AsyncSession on the test database
    ├── fake_llm:        AsyncMock LLMService wired into the text action route
    ├── test_client:     HTTPX AsyncClient over ASGITransport
    └── auth_headers:    factory that registers + logs in a user
"""

import os
import tempfile

_TEST_DIR = tempfile.mkdtemp(prefix="quillmind_test_")

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["RETRY_MIN_WAIT"] = "0"
os.environ["DB_CREATE_TABLES"] = "false"

from typing import Awaitable, Callable, Dict  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from tenacity import wait_none  # noqa: E402

from quillmind import models  # noqa: E402,F401
from quillmind.database import Base, async_session_factory, engine  # noqa: E402
from quillmind.services.ai_service import text_action_service  # noqa: E402
from quillmind.services.gemini_service import GeminiService, gemini_service  # noqa: E402
from quillmind.services.llm_base import LLMService  # noqa: E402

DEFAULT_PASSWORD = "correct-horse-battery"


@pytest.fixture(autouse=True)
def fast_retries(monkeypatch):
    """No backoff sleeps between Gemini retries, and a closed breaker per test."""
    monkeypatch.setattr(GeminiService._call_gemini_with_retry.retry, "wait", wait_none())
    gemini_service.circuit_breaker.record_success()


@pytest.fixture
def mock_db_session():
    """
    Mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = project
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def db_schema():
    """Fresh, empty tables for every test that touches the database."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield


@pytest_asyncio.fixture
async def db_session(db_schema):
    async with async_session_factory() as session:
        yield session


@pytest.fixture
def fake_llm(monkeypatch):
    """AsyncMock provider behind POST /api/ai/action."""
    llm = AsyncMock(spec=LLMService)
    llm.generate.return_value = "Transformed text."
    monkeypatch.setattr(text_action_service, "llm", llm)
    return llm


@pytest_asyncio.fixture
async def test_client(db_schema):
    """
    HTTPX AsyncClient talking to the app in-process.

    raise_app_exceptions=False lets the catch-all 500 handler answer
    instead of the exception surfacing in the test.
    """
    from quillmind.main import app

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_headers(test_client) -> Callable[..., Awaitable[Dict[str, str]]]:
    """
    Factory: register a user, log in, return the Authorization header.

    Usage:
        headers = await auth_headers("alice")
    """

    async def _make(username: str, password: str = DEFAULT_PASSWORD) -> Dict[str, str]:
        email = f"{username}@example.com"
        response = await test_client.post(
            "/api/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        response = await test_client.post(
            "/api/auth/login",
            json={"email": email, "password": password},
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _make
