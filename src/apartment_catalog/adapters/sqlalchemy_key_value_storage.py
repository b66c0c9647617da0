"""SQLAlchemy implementation of KeyValueStorage."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from apartment_catalog.infra.db.models.storage_entry import StorageEntryRow
from apartment_catalog.infra.db.session import get_session_local, session_scope
from apartment_catalog.ports.key_value_storage import KeyValueStorage, StorageError


class SqlAlchemyKeyValueStorage(KeyValueStorage):
    """
    Durable KeyValueStorage backed by the ``storage_entries`` table.

    - One short session per operation (storage outlives any request)
    - Upsert via ``Session.merge`` (last writer wins)
    - SQLAlchemy failures are re-raised as ``StorageError``
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        """
        Initialize storage with a session factory.

        Args:
            session_factory: Factory bound to the storage engine; defaults to the
                lazily created factory for ``CATALOG_STORAGE_URL``
        """
        self._session_factory = session_factory or get_session_local()

    def get_item(self, key: str) -> str | None:
        try:
            with session_scope(self._session_factory) as session:
                row = session.get(StorageEntryRow, key)
                return row.value if row else None
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to read '{key}': {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        try:
            with session_scope(self._session_factory) as session:
                session.merge(StorageEntryRow(key=key, value=value))
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to write '{key}': {exc}") from exc

    def remove_item(self, key: str) -> None:
        try:
            with session_scope(self._session_factory) as session:
                session.execute(delete(StorageEntryRow).where(StorageEntryRow.key == key))
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to remove '{key}': {exc}") from exc

    def keys(self) -> list[str]:
        try:
            with session_scope(self._session_factory) as session:
                return list(session.execute(select(StorageEntryRow.key)).scalars().all())
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to list keys: {exc}") from exc
