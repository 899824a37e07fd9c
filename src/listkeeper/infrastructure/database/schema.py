"""SQLAlchemy Core table definitions for the listkeeper database.

One table holds every entry of every list; a list has no row of its own.
The unique constraint on ``(list_name, pattern_type, pattern)`` is the
authoritative uniqueness check for all write paths.
"""

from __future__ import annotations

from sqlalchemy import (
    BigInteger,
    Column,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

list_entries = Table(
    "list_entries",
    metadata,
    # AUTOINCREMENT: ids are never handed out twice, even after deletes.
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("list_name", Text, nullable=False),
    Column("pattern", Text, nullable=False),
    Column("pattern_type", Text, nullable=False),
    Column("source", Text, nullable=False),
    Column("metadata", Text, nullable=False, default="{}", server_default="{}"),  # JSON object
    Column("created_at", BigInteger, nullable=False),  # epoch ms
    Column("updated_at", BigInteger, nullable=False),  # epoch ms
    UniqueConstraint(
        "list_name",
        "pattern_type",
        "pattern",
        name="uq_list_entries_list_name_pattern_type_pattern",
    ),
    sqlite_autoincrement=True,
)

# ---------------------------------------------------------------------------
# Lookup indexes
# ---------------------------------------------------------------------------

Index("ix_list_entries_list_name", list_entries.c.list_name)
Index("ix_list_entries_pattern", list_entries.c.pattern)
Index("ix_list_entries_list_name_pattern", list_entries.c.list_name, list_entries.c.pattern)
Index("ix_list_entries_list_name_source", list_entries.c.list_name, list_entries.c.source)
