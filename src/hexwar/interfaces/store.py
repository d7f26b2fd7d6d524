"""Key-Value Store Protocol Interface.

This module defines the protocol (interface) for the string key-value
storage that backs autosaves and named maps.
"""

from typing import Protocol


class KeyValueStore(Protocol):
    """Protocol defining string-keyed document storage.

    Implementations raise
    :class:`hexwar.repository.PersistenceUnavailableError` when the backend
    cannot be read or written.
    """

    def get(self, key: str) -> str | None:
        """Return the stored value, or ``None`` if the key is absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    def remove(self, key: str) -> None:
        """Delete ``key``; absent keys are ignored."""
        ...

    def list_keys(self, prefix: str = "") -> list[str]:
        """Return the stored keys starting with ``prefix``, sorted."""
        ...
