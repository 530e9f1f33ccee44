"""
Content Library API - Pytest Configuration & Shared Fixtures

Provides reusable fixtures for:
- An in-memory MongoDB (mongomock) wrapped in a Store
- A TestClient bound to an app that uses that Store
- Sample request bodies for every resource
- Helpers to register users and build Authorization headers
"""

from typing import Any, Dict

import mongomock
import pytest
from fastapi.testclient import TestClient

from config import Settings
from database import Store
from main import create_app

# ---------------------------------------------------------------------------
# Sample payloads
# ---------------------------------------------------------------------------

SAMPLE_MUSIC: Dict[str, Any] = {
    "title": "A",
    "category": "pop",
    "audioUrl": "u",
    "tags": "t",
    "lyrics": "l",
    "meanings": "m",
}

SAMPLE_BOOK: Dict[str, Any] = {
    "title": "The Book",
    "category": ["fiction", "classics"],
    "link": "https://example.com/book.pdf",
    "tags": ["novel"],
}

SAMPLE_BLOG: Dict[str, Any] = {
    "title": "First post",
    "category": ["news"],
    "blog": "Hello world",
    "tags": ["intro"],
}

DEFAULT_PASSWORD = "s3cret-pass"


# ---------------------------------------------------------------------------
# App fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(jwt_secret="test-secret", database_name="content_library_test")


@pytest.fixture
def store(settings: Settings) -> Store:
    """Fresh in-memory database for each test."""
    return Store(mongomock.MongoClient(), settings.database_name)


@pytest.fixture
def client(settings: Settings, store: Store) -> TestClient:
    app = create_app(settings=settings, store=store)
    return TestClient(app)


# ---------------------------------------------------------------------------
# Auth helpers
# ---------------------------------------------------------------------------


def auth_header(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register_user(
    client: TestClient,
    email: str,
    password: str = DEFAULT_PASSWORD,
    role: str = "member",
    name: str = "Test User",
) -> Dict[str, Any]:
    resp = client.post(
        "/api/register",
        json={"name": name, "email": email, "password": password, "photo": "p.png", "role": role},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def login_token(client: TestClient, email: str, password: str = DEFAULT_PASSWORD) -> str:
    resp = client.post("/api/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["token"]


@pytest.fixture
def member(client: TestClient) -> Dict[str, Any]:
    data = register_user(client, "member@example.com")
    return {"id": data["userId"], "email": "member@example.com", "token": data["token"]}


@pytest.fixture
def admin(client: TestClient, store: Store) -> Dict[str, Any]:
    """A member promoted to admin directly in the store."""
    data = register_user(client, "admin@example.com", name="Admin")
    store.users.update_one({"email": "admin@example.com"}, {"$set": {"role": "admin"}})
    return {"id": data["userId"], "email": "admin@example.com", "token": data["token"]}
