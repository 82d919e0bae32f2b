"""
Database engine and session factory for the database storage backend (SQLAlchemy 2.0).

This module exposes:
- build_engine: engine for a DATABASE_URL (SQLite or any server database)
- build_session_factory: sessionmaker bound to an engine
- create_all_tables: create tables if they do not exist yet
"""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

from playlist_api.db.models import Base


# PUBLIC_INTERFACE
def build_engine(database_url: str) -> Engine:
    """Create an engine; SQLite files get their directory created and foreign keys enabled."""
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": 15},
            future=True,
        )

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    # Pool settings tuned for typical web workloads; adjust as necessary.
    return create_engine(url, pool_pre_ping=True, pool_size=5, max_overflow=10, future=True)


# PUBLIC_INTERFACE
def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False, future=True)


# PUBLIC_INTERFACE
def create_all_tables(engine: Engine) -> None:
    """Create all tables if they do not exist yet.

    Note: In production use proper migration tooling (e.g., Alembic).
    """
    Base.metadata.create_all(bind=engine)
