"""SQLite database engine and schema via SQLAlchemy Core."""

from listkeeper.infrastructure.database.engine import create_db_engine, init_database
from listkeeper.infrastructure.database.schema import list_entries, metadata

__all__ = [
    "create_db_engine",
    "init_database",
    "list_entries",
    "metadata",
]
