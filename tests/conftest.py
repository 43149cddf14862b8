"""
Pytest configuration and fixtures.
"""

from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient

from tests.test_constants import TEST_SECRET_KEY

# Force an in-memory database when pytest runs; don't inherit from .env
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", TEST_SECRET_KEY)
os.environ["BCRYPT_ROUNDS"] = "4"  # cheapest bcrypt cost for fast credential hashing


@pytest.fixture
def kv():
    """Empty in-memory key-value store."""
    from app.services.kv_store import InMemoryKeyValueStore

    return InMemoryKeyValueStore()


@pytest.fixture
def content():
    """Fresh transient content store (isolated from the process-wide one)."""
    from app.services.file_registry import TransientContentStore

    return TransientContentStore()


@pytest.fixture
def hub(kv, content):
    """Hub store over the in-memory adapter, seeded with the demo data."""
    from app.services.hub_store import HubStore

    store = HubStore(kv, content=content)
    store.ensure_seeded()
    return store


@pytest.fixture
def client(hub) -> TestClient:
    """TestClient whose routes all share the seeded in-memory hub."""
    from app.api.deps import get_hub
    from app.main import create_app

    app = create_app()
    app.dependency_overrides[get_hub] = lambda: hub
    c = TestClient(app)
    yield c
    app.dependency_overrides.clear()


def login(client: TestClient, username: str, password: str) -> str:
    """Log in through the JSON API; the client keeps the session cookie."""
    resp = client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]
