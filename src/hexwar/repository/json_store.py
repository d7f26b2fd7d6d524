"""File-backed key-value store keeping one JSON document per key."""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import quote, unquote

from hexwar.repository.errors import PersistenceUnavailableError

logger = logging.getLogger(__name__)

SUFFIX = ".json"


class JsonFileStore:
    """Persist documents as ``<quoted key>.json`` files under ``base_path``."""

    def __init__(self, base_path: Path) -> None:
        self.base_path = base_path
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceUnavailableError(f"cannot create {base_path}: {exc}") from exc

    def _path_for(self, key: str) -> Path:
        return self.base_path / f"{quote(key, safe='')}{SUFFIX}"

    def get(self, key: str) -> str | None:
        """Return the stored document, or ``None`` if no file exists for ``key``."""

        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise PersistenceUnavailableError(f"cannot read {path}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        """Write ``value`` atomically by replacing a temporary sibling file."""

        path = self._path_for(key)
        tmp_path = path.with_suffix(SUFFIX + ".tmp")
        try:
            tmp_path.write_text(value, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            raise PersistenceUnavailableError(f"cannot write {path}: {exc}") from exc
        logger.debug("wrote %s (%d bytes)", path.name, len(value))

    def remove(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceUnavailableError(f"cannot delete {path}: {exc}") from exc

    def list_keys(self, prefix: str = "") -> list[str]:
        """Return all stored keys starting with ``prefix``."""

        try:
            paths = list(self.base_path.glob(f"*{SUFFIX}"))
        except OSError as exc:
            raise PersistenceUnavailableError(f"cannot list {self.base_path}: {exc}") from exc

        keys = [unquote(path.name[: -len(SUFFIX)]) for path in paths]
        return sorted(key for key in keys if key.startswith(prefix))
