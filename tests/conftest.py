"""
Shared fixtures: an app wired to an in-memory SQLite database.
"""

from __future__ import annotations

from typing import Dict

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from auth.jwt import TokenService
from config.settings import Settings
from database.repositories import build_repositories
from database.session import build_engine, build_session_factory, create_tables
from main import create_app

TEST_SECRET = "test-jwt-secret-0123456789abcdef0123"
IN_MEMORY_DB = "sqlite+aiosqlite://"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        jwt_secret=TEST_SECRET,
        database_url=IN_MEMORY_DB,
        bcrypt_rounds=4,
        frontend_url="https://app.example.com/",
    )


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(TEST_SECRET, expiry_seconds=3600)


@pytest_asyncio.fixture
async def repos():
    engine = build_engine(IN_MEMORY_DB)
    await create_tables(engine)
    yield build_repositories(build_session_factory(engine))
    await engine.dispose()


def register(
    client: TestClient,
    username: str = "alice",
    email: str = "a@x.com",
    password: str = "longenough1",
):
    return client.post(
        "/auth/register",
        json={"username": username, "email": email, "password": password},
    )


def auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice(client) -> Dict[str, str]:
    """Registered user ``alice``; returns the auth headers."""
    response = register(client)
    assert response.status_code == 201
    return auth_headers(response.json()["token"])


@pytest.fixture
def bob(client) -> Dict[str, str]:
    response = register(client, username="bob", email="b@x.com", password="bobspassword")
    assert response.status_code == 201
    return auth_headers(response.json()["token"])
