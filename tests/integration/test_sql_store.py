"""Integration tests for the SQLAlchemy key-value store.

Uses a throwaway SQLite database per test.
"""

import pytest
from sqlalchemy import inspect, text

from hexwar.domain.models import owned
from hexwar.domain.movement import execute_movement
from hexwar.domain.rules_config import Rules
from hexwar.domain.session import new_session
from hexwar.repository import SqlKeyValueStore, create_store_engine
from hexwar.savegame import PersistenceGateway


@pytest.fixture
def database_url(tmp_path):
    """SQLite URL inside the test's temporary directory."""
    return f"sqlite:///{tmp_path / 'hexwar.db'}"


@pytest.fixture
def store(database_url):
    """Store bound to a fresh database; disposed after the test."""
    store = SqlKeyValueStore.from_url(database_url)
    try:
        yield store
    finally:
        store.dispose()


def test_table_is_created(store):
    """The store creates its table on first use."""
    assert "kv_entries" in inspect(store.engine).get_table_names()


def test_sqlite_uses_wal(store):
    """SQLite connections are switched to WAL journaling."""
    with store.engine.connect() as connection:
        mode = connection.execute(text("PRAGMA journal_mode")).scalar()
    assert mode.lower() == "wal"


def test_crud(store):
    """Documents can be written, replaced, listed and removed."""
    store.set("hexwar_map_b", "{}")
    store.set("hexwar_map_a", '{"v": 1}')
    store.set("hexwar_map_a", '{"v": 2}')
    store.set("hexwar_autosave", "{}")

    assert store.get("hexwar_map_a") == '{"v": 2}'
    assert store.list_keys("hexwar_map_") == ["hexwar_map_a", "hexwar_map_b"]

    store.remove("hexwar_map_a")
    store.remove("hexwar_map_a")
    assert store.get("hexwar_map_a") is None
    assert store.list_keys() == ["hexwar_autosave", "hexwar_map_b"]


def test_prefix_with_like_wildcards(store):
    """Prefixes containing LIKE wildcards match literally."""
    store.set("map_%_x", "{}")
    store.set("map_abc", "{}")
    assert store.list_keys("map_%") == ["map_%_x"]


def test_documents_survive_reconnect(database_url):
    """A new engine sees what a previous one committed."""
    first = SqlKeyValueStore(create_store_engine(database_url))
    first.set("hexwar_autosave", "{}")
    first.dispose()

    second = SqlKeyValueStore.from_url(database_url)
    try:
        assert second.get("hexwar_autosave") == "{}"
    finally:
        second.dispose()


def test_gateway_over_sql(store):
    """Autosave and maps work unchanged on top of the SQL store."""
    gateway = PersistenceGateway(store)
    session = new_session(Rules(), radius=2, starting_tiles=[(0, 0, owned(1), 3)])
    gateway.attach(session)

    assert execute_movement(
        session, session.board.index_at(0, 0), session.board.index_at(1, 0)
    ).valid
    assert gateway.save_map(session.board, "after move")

    restored = gateway.load_autosave(Rules())
    assert restored.board.tile_at(1, 0).owner == owned(1)
    assert restored.turn_state.actions_taken == 1
    assert gateway.list_maps() == ["after move"]
