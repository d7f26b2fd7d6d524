"""Key-value store adapters for autosaves and named maps."""

from hexwar.repository.errors import PersistenceUnavailableError
from hexwar.repository.json_store import JsonFileStore
from hexwar.repository.memory_store import MemoryStore
from hexwar.repository.sql_store import SqlKeyValueStore, create_store_engine

__all__ = [
    "JsonFileStore",
    "MemoryStore",
    "PersistenceUnavailableError",
    "SqlKeyValueStore",
    "create_store_engine",
]
