"""Tests for the key-value persistence adapters."""

from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from app.db.session import Base
from app.services.kv_store import InMemoryKeyValueStore, KeyValueStore, SqlKeyValueStore


@pytest.fixture
def sql_store():
    """SqlKeyValueStore on a private in-memory sqlite database."""
    import app.models  # noqa: F401

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = Session(bind=engine)
    try:
        yield SqlKeyValueStore(session)
    finally:
        session.close()
        engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def store(request, sql_store) -> KeyValueStore:
    if request.param == "memory":
        return InMemoryKeyValueStore()
    return sql_store


class TestKeyValueContract:
    def test_absent_key_is_none(self, store):
        assert store.get("missing") is None

    def test_set_then_get(self, store):
        store.set("users", "[]")
        assert store.get("users") == "[]"

    def test_set_replaces_value(self, store):
        store.set("k", "1")
        store.set("k", "2")
        assert store.get("k") == "2"

    def test_delete(self, store):
        store.set("k", "1")
        store.delete("k")
        assert store.get("k") is None

    def test_delete_missing_key_is_noop(self, store):
        store.delete("never-set")

    def test_keys_by_prefix_sorted(self, store):
        store.set("session:b", "{}")
        store.set("session:a", "{}")
        store.set("workspace_files_dev", "[]")
        assert store.keys("session:") == ["session:a", "session:b"]
        assert len(store.keys()) == 3

    def test_keys_prefix_is_literal(self, store):
        """SQL wildcards in the prefix are matched literally."""
        store.set("workspace_files_dev", "[]")
        store.set("workspaceXfilesXdev", "[]")
        assert store.keys("workspace_files_") == ["workspace_files_dev"]


class TestJsonHelpers:
    def test_round_trip(self):
        store = InMemoryKeyValueStore()
        store.set_json("k", {"a": [1, 2]})
        assert store.get_json("k") == {"a": [1, 2]}

    def test_absent_returns_default(self):
        assert InMemoryKeyValueStore().get_json("k", []) == []

    def test_malformed_returns_default(self, caplog):
        store = InMemoryKeyValueStore({"k": "{not json"})
        assert store.get_json("k", []) == []
        assert "malformed JSON" in caplog.text
