"""Tests for the in-memory and JSON file key-value stores."""

from __future__ import annotations

import pytest

from hexwar.repository import JsonFileStore, MemoryStore, PersistenceUnavailableError


@pytest.fixture(params=["memory", "json"])
def store(request, tmp_path):
    if request.param == "memory":
        return MemoryStore()
    return JsonFileStore(tmp_path / "saves")


class TestKeyValueStores:
    """Behaviour shared by every store adapter."""

    def test_get_missing(self, store) -> None:
        assert store.get("absent") is None

    def test_set_and_overwrite(self, store) -> None:
        store.set("hexwar_autosave", '{"a": 1}')
        store.set("hexwar_autosave", '{"a": 2}')
        assert store.get("hexwar_autosave") == '{"a": 2}'

    def test_list_keys_by_prefix(self, store) -> None:
        store.set("hexwar_map_b", "{}")
        store.set("hexwar_map_a", "{}")
        store.set("hexwar_autosave", "{}")

        assert store.list_keys("hexwar_map_") == ["hexwar_map_a", "hexwar_map_b"]
        assert len(store.list_keys()) == 3

    def test_remove(self, store) -> None:
        store.set("k", "v")
        store.remove("k")
        store.remove("k")
        assert store.get("k") is None
        assert store.list_keys() == []

    def test_awkward_key_names(self, store) -> None:
        key = "hexwar_map_../Valley of Kings?"
        store.set(key, "{}")
        assert store.get(key) == "{}"
        assert store.list_keys("hexwar_map_") == [key]


class TestJsonFileStore:
    def test_documents_survive_a_new_instance(self, tmp_path) -> None:
        JsonFileStore(tmp_path).set("hexwar_autosave", "{}")
        assert JsonFileStore(tmp_path).get("hexwar_autosave") == "{}"

    def test_keys_stay_inside_base_path(self, tmp_path) -> None:
        base = tmp_path / "saves"
        JsonFileStore(base).set("../escape", "{}")
        assert not (tmp_path / "escape.json").exists()
        assert len(list(base.iterdir())) == 1

    def test_no_temporary_files_left(self, tmp_path) -> None:
        store = JsonFileStore(tmp_path)
        store.set("k", "v")
        assert [p.name for p in tmp_path.iterdir()] == ["k.json"]

    def test_unwritable_base_path(self, tmp_path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(PersistenceUnavailableError):
            JsonFileStore(blocker / "saves")

    def test_memory_store_seed(self) -> None:
        store = MemoryStore({"a": "1"})
        assert store.get("a") == "1"
