from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from apartment_catalog.infra.config import storage_url
from apartment_catalog.infra.db.models.base import Base
from apartment_catalog.infra.db.models import storage_entry  # noqa: F401

# Lazy initialization - only create engine/session when needed
_engine: Engine | None = None
_session_local: sessionmaker[Session] | None = None


def create_storage_engine(url: str) -> Engine:
    """
    Create an engine for the durable client storage and ensure its schema.

    The storage holds a single key/value table, so the schema is created
    in place instead of through migrations.
    """
    engine = create_engine(
        url,
        pool_pre_ping=True,  # Verify connection health before checkout
        future=True,
    )
    Base.metadata.create_all(engine)
    return engine


def get_engine() -> Engine:
    """Get or create the storage engine (lazy initialization)."""
    global _engine
    if _engine is None:
        _engine = create_storage_engine(storage_url())
    return _engine


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(
        bind=engine,
        class_=Session,
        expire_on_commit=False,
    )


def get_session_local() -> sessionmaker[Session]:
    """Get or create the session factory (lazy initialization)."""
    global _session_local
    if _session_local is None:
        _session_local = make_session_factory(get_engine())
    return _session_local


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Iterator[Session]:
    """Open a session from ``factory`` with automatic commit/rollback."""
    session = factory()

    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

