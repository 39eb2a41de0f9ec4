"""
Shared fixtures: an app wired to an in-memory SQLite database and an
httpx client talking to it over ASGI.
"""

from typing import Dict

import httpx
import pytest
import pytest_asyncio

from auth.tokens import TokenService
from config.settings import Settings
from main import create_app

TEST_SECRET = "test-secret"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        jwt_secret=TEST_SECRET,
        database_url="sqlite+aiosqlite:///:memory:",
        bcrypt_rounds=4,
    )


@pytest.fixture
def token_service(settings) -> TokenService:
    return TokenService(settings.jwt_secret, settings.jwt_expiry_seconds)


@pytest_asyncio.fixture
async def app(settings):
    application = create_app(settings)
    async with application.router.lifespan_context(application):
        yield application


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def register(client, name: str, email: str, password: str = "secret123") -> httpx.Response:
    return await client.post(
        "/register", json={"name": name, "email": email, "password": password}
    )


@pytest_asyncio.fixture
async def auth_headers(client) -> Dict[str, str]:
    await register(client, "Admin", "admin@example.com")
    resp = await client.post(
        "/login", json={"email": "admin@example.com", "password": "secret123"}
    )
    return {"Authorization": f"Bearer {resp.json()['token']}"}
