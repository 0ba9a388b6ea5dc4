"""Shared test fixtures.

Each test gets its own SQLite file. Async store calls are driven with
asyncio.run; the engine uses NullPool so no connection outlives its loop.
"""

import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

from storefront.config import Settings
from storefront.content.store import ContentStore
from storefront.db.session import create_engine_from_settings
from storefront.main import create_app

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-secret"

IMAGE_BYTES = {
    "https://cdn.example.com/sword-red.png": b"red-png-bytes",
    "https://cdn.example.com/sword-blue.jpg": b"blue-jpg-bytes",
}


def run(coro):
    return asyncio.run(coro)


def _external_handler(request: httpx.Request) -> httpx.Response:
    """Stand-in for the image CDN and Discord's OAuth endpoints."""
    url = str(request.url)
    if url in IMAGE_BYTES:
        return httpx.Response(200, content=IMAGE_BYTES[url])
    if request.url.host == "discord.com" and request.url.path.endswith("/oauth2/token"):
        return httpx.Response(200, json={"access_token": "discord-access", "token_type": "Bearer"})
    if request.url.host == "discord.com" and request.url.path.endswith("/users/@me"):
        return httpx.Response(
            200,
            json={"id": "80351110224678912", "username": "nelly", "global_name": "Nelly", "avatar": "abc123"},
        )
    return httpx.Response(404)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'storefront.db'}",
        admin_email=ADMIN_EMAIL,
        discord_url="https://discord.gg/example",
        discord_client_id="client-id",
        discord_client_secret="client-secret",
        download_delay_ms=0,
        log_level="WARNING",
    )


@pytest.fixture
def store(settings):
    store = ContentStore(create_engine_from_settings(settings))
    run(store.create_schema())
    yield store
    run(store.dispose())


@pytest.fixture
def unconfigured_store():
    return ContentStore(None)


@pytest.fixture
def http_client():
    return httpx.AsyncClient(transport=httpx.MockTransport(_external_handler))


@pytest.fixture
def app(settings, store, http_client):
    return create_app(settings, store=store, http_client=http_client)


@pytest.fixture
def client(app):
    return TestClient(app)


def sign_in_as(client: TestClient, email: str, password: str = ADMIN_PASSWORD) -> str:
    """Register `email` through the gateway and attach its session cookie."""
    app = client.app
    result = run(app.state.auth.sign_up(email, password))
    assert result.ok, result.error
    client.cookies.set(app.state.settings.session_cookie_name, result.token)
    return result.token


@pytest.fixture
def admin_client(client):
    sign_in_as(client, ADMIN_EMAIL)
    return client


@pytest.fixture
def sample_project_fields():
    return {
        "title": "Sword",
        "description": "Stylized sword",
        "category": "Weapons",
        "image_url": "https://cdn.example.com/sword-red.png",
        "images": [
            {"url": "https://cdn.example.com/sword-red.png", "color": "#ff0000", "name": "Red"},
            {"url": "https://cdn.example.com/sword-blue.jpg", "color": "#0000ff", "name": ""},
        ],
        "tags": ["weapon", "stylized"],
        "order_index": 1,
    }
