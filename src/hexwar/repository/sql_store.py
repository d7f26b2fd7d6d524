"""SQLAlchemy-backed key-value store.

Documents live in a single ``kv_entries`` table. SQLite databases are
configured with WAL journaling on connect, as for the rest of the
application's SQLite usage.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any, ClassVar

from sqlalchemy import DateTime, String, Text, create_engine, event, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from hexwar.repository.errors import PersistenceUnavailableError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for the store's tables."""

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
    }


class KeyValueEntry(Base):
    """One stored document."""

    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<KeyValueEntry(key={self.key!r}, size={len(self.value)})>"


def _configure_sqlite_wal(
    dbapi_connection: Any, connection_record: Any  # noqa: ARG001
) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


def create_store_engine(database_url: str, *, echo: bool = False) -> Engine:
    """Create an engine for ``database_url``; SQLite connections get WAL pragmas."""

    engine = create_engine(database_url, echo=echo, pool_pre_ping=True)
    if database_url.startswith("sqlite"):
        event.listen(engine, "connect", _configure_sqlite_wal)
    return engine


class SqlKeyValueStore:
    """Persist documents as rows of the ``kv_entries`` table."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        try:
            Base.metadata.create_all(engine)
        except SQLAlchemyError as exc:
            raise PersistenceUnavailableError(f"cannot initialise key-value table: {exc}") from exc

    @classmethod
    def from_url(cls, database_url: str) -> SqlKeyValueStore:
        return cls(create_store_engine(database_url))

    def _session(self) -> Session:
        return self._session_factory()

    def get(self, key: str) -> str | None:
        try:
            with self._session() as session:
                entry = session.get(KeyValueEntry, key)
                return entry.value if entry is not None else None
        except SQLAlchemyError as exc:
            raise PersistenceUnavailableError(f"cannot read {key!r}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        try:
            with self._session() as session, session.begin():
                entry = session.get(KeyValueEntry, key)
                if entry is None:
                    session.add(KeyValueEntry(key=key, value=value, updated_at=datetime.now(UTC)))
                else:
                    entry.value = value
                    entry.updated_at = datetime.now(UTC)
        except SQLAlchemyError as exc:
            raise PersistenceUnavailableError(f"cannot write {key!r}: {exc}") from exc
        logger.debug("stored %r (%d bytes)", key, len(value))

    def remove(self, key: str) -> None:
        try:
            with self._session() as session, session.begin():
                entry = session.get(KeyValueEntry, key)
                if entry is not None:
                    session.delete(entry)
        except SQLAlchemyError as exc:
            raise PersistenceUnavailableError(f"cannot delete {key!r}: {exc}") from exc

    def list_keys(self, prefix: str = "") -> list[str]:
        stmt = select(KeyValueEntry.key).order_by(KeyValueEntry.key)
        if prefix:
            stmt = stmt.where(KeyValueEntry.key.startswith(prefix, autoescape=True))
        try:
            with self._session() as session:
                return list(session.scalars(stmt))
        except SQLAlchemyError as exc:
            raise PersistenceUnavailableError(f"cannot list keys: {exc}") from exc

    def dispose(self) -> None:
        self.engine.dispose()
