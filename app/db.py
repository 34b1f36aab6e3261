from __future__ import annotations

import logging
from collections.abc import Generator

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Session
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


# ---------- Declarative Base ----------
class Base(DeclarativeBase):
    pass


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _is_memory_sqlite(url: str) -> bool:
    return _is_sqlite(url) and (url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url)


def _enable_sqlite_fk(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str) -> Engine:
    if _is_sqlite(url):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if _is_memory_sqlite(url):
            # one shared connection, otherwise every session sees an empty database
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_fk)
        return engine
    return create_engine(url, pool_pre_ping=True)


# ---------- Engine / Session ----------
class Database:
    """
    Storage handle: engine + session factory.
    Built once by create_app(), kept on app.state.db, disposed at shutdown.
    """

    def __init__(self, url: str) -> None:
        self.url = url
        self.engine = make_engine(url)
        self.SessionLocal = sessionmaker(
            bind=self.engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
        )

    def create_all(self) -> None:
        # register every model on Base.metadata
        from . import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self) -> None:
        logger.info("closing database engine")
        self.engine.dispose()


# ---------- Dependency ----------
def get_db(request: Request) -> Generator[Session, None, None]:
    db = request.app.state.db.session()
    try:
        yield db
    finally:
        db.close()
