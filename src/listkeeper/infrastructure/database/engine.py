"""Database engine setup for SQLite with WAL mode.

SQLite is the persistence layer: WAL mode lets match queries read while
a sync writes, and every mutating store call runs in one ACID
transaction.  SQLAlchemy Core (not ORM) is used: entries are flat rows
and the store maps them to pydantic models itself.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from listkeeper.infrastructure.database.schema import metadata


def create_db_engine(db_path: Path) -> Engine:
    """Create a SQLite engine with WAL mode and a busy timeout."""
    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA busy_timeout=5000")
        cursor.close()

    return engine


def init_database(db_path: Path) -> Engine:
    """Initialize the list database at *db_path*.

    Creates parent directories and all tables from
    :data:`schema.metadata`.  Idempotent — safe to call on an existing
    database.

    Returns the engine ready for use.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_db_engine(db_path)
    metadata.create_all(engine)
    return engine
