"""
Pytest configuration and fixtures.

Root-level fixtures shared across all test modules. Every test gets a fresh
application on its own in-memory database.
"""

import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

# Set test environment before the app module builds its default instance
os.environ["APP_ENV"] = "test"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from profile_api.core.config import Settings
from profile_api.main import create_app
from profile_api.models.user import User, UserRole
from profile_api.repositories.user import UserRepository

# In-memory SQLite shared through a single connection
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

API = "/api/v1"
PASSWORD = "password123"


# === Marker Configuration ===

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "admin: Tests requiring admin authentication")


# === Application Fixtures ===


@pytest.fixture
def test_settings() -> Settings:
    """Settings for an isolated test app; low bcrypt cost keeps tests fast."""
    return Settings(
        app_env="test",
        debug=False,
        database_url=TEST_DATABASE_URL,
        jwt_secret_key="test-secret",
        bcrypt_rounds=4,
        _env_file=None,
    )


@pytest_asyncio.fixture
async def app(test_settings: Settings) -> AsyncGenerator[FastAPI, None]:
    """Create the application and run its lifespan."""
    application = create_app(test_settings)
    async with application.router.lifespan_context(application):
        yield application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _insert_user(app: FastAPI, **fields) -> User:
    async with app.state.database.session() as session:
        users = UserRepository(session, app.state.password_hasher)
        return await users.create(fields)


@pytest_asyncio.fixture
async def admin_user(app: FastAPI) -> User:
    """Create admin user for tests."""
    return await _insert_user(
        app,
        first_name="Admin",
        last_name="User",
        email="admin@example.com",
        password=PASSWORD,
        role=UserRole.ADMIN,
    )


@pytest_asyncio.fixture
async def regular_user(app: FastAPI) -> User:
    """Create regular user for tests."""
    return await _insert_user(
        app,
        first_name="Regular",
        last_name="User",
        email="user@example.com",
        password=PASSWORD,
        department="Engineering",
        role=UserRole.USER,
    )


@pytest_asyncio.fixture
async def admin_token(client: AsyncClient, admin_user: User) -> str:
    """Get admin auth token."""
    response = await client.post(
        f"{API}/auth/login",
        json={"email": "admin@example.com", "password": PASSWORD},
    )
    return response.json()["data"]["token"]


@pytest_asyncio.fixture
async def user_token(client: AsyncClient, regular_user: User) -> str:
    """Get regular user auth token."""
    response = await client.post(
        f"{API}/auth/login",
        json={"email": "user@example.com", "password": PASSWORD},
    )
    return response.json()["data"]["token"]


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
