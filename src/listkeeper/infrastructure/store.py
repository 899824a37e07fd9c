"""ListStore — the durable entry table behind every service.

The store is an explicitly opened handle: construct it once with
:meth:`ListStore.open`, inject it into services, and :meth:`close` it when
done (or use it as a context manager).  Every mutating call runs in its
own ``engine.begin()`` transaction, so no partial effect of one call is
visible to another.

Invariants enforced here:

- **Uniqueness** — the table's unique constraint is the source of truth;
  ``IntegrityError`` surfaces as :class:`UniquenessViolation`.
- **Domain strictness** — ``domain`` entries are validated against the
  injected resolver on insert and on pattern-affecting updates.
- **Timestamps** — ``created_at``/``updated_at`` are assigned here.  A
  caller-supplied ``created_at`` is kept on insert only, and
  ``updated_at`` never precedes ``created_at``.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any, Self

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError

from listkeeper.domain.entries import EntryUpdate, ListEntry, NewEntry
from listkeeper.domain.errors import EntryNotFoundError, EntryValidationError, UniquenessViolation
from listkeeper.domain.metadata import EntryMetadata
from listkeeper.domain.patterns import is_valid_domain_pattern
from listkeeper.domain.types import EntrySource, PatternType
from listkeeper.infrastructure.database.engine import init_database
from listkeeper.infrastructure.database.schema import list_entries

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine, RowMapping

    from listkeeper.domain.resolver import DomainResolver

logger = logging.getLogger(__name__)


def epoch_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


class ListStore:
    """Transactional access to list entries.

    Args:
        engine: SQLAlchemy engine with the schema already created.
        resolver: Registrable-domain resolver used to validate ``domain``
            patterns.
        clock: Returns the current time in epoch milliseconds.
    """

    def __init__(
        self,
        engine: Engine,
        resolver: DomainResolver,
        *,
        clock: Callable[[], int] = epoch_ms,
    ) -> None:
        self._engine = engine
        self._resolver = resolver
        self._clock = clock
        self._closed = False

    @classmethod
    def open(
        cls,
        db_path: Path,
        resolver: DomainResolver,
        *,
        clock: Callable[[], int] = epoch_ms,
    ) -> Self:
        """Create (if needed) and open the database at *db_path*."""
        logger.debug("Opening list store at %s", db_path)
        return cls(init_database(db_path), resolver, clock=clock)

    def close(self) -> None:
        """Dispose of the engine. Further calls raise ``RuntimeError``."""
        if not self._closed:
            self._engine.dispose()
            self._closed = True

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def resolver(self) -> DomainResolver:
        return self._resolver

    @property
    def closed(self) -> bool:
        return self._closed

    def now(self) -> int:
        return self._clock()

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """One atomic unit of work: commit on success, rollback on error."""
        self._require_open()
        with self._engine.begin() as conn:
            yield conn

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, entry: NewEntry) -> None:
        """Check *entry* against the domain-pattern rule.

        Raises:
            EntryValidationError: If a ``domain`` pattern is not a bare
                registrable domain.
        """
        self._check_pattern(entry.pattern, entry.pattern_type)

    def _check_pattern(self, pattern: str, pattern_type: PatternType) -> None:
        if pattern_type is PatternType.DOMAIN and not is_valid_domain_pattern(
            pattern, self._resolver
        ):
            msg = (
                f"Invalid domain pattern {pattern!r}: expected a registrable domain "
                "such as 'example.com' (no subdomain, scheme, or path)"
            )
            raise EntryValidationError(msg, pattern=pattern)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, entry: NewEntry) -> int:
        """Validate and persist one entry. Returns the new id.

        Raises:
            EntryValidationError: If the entry fails the domain rule.
            UniquenessViolation: If the entry's key is already taken.
        """
        self.validate(entry)
        with self.transaction() as conn:
            return self._insert_row(conn, entry, self.now())

    def bulk_insert(self, entries: Iterable[NewEntry]) -> list[int]:
        """Persist *entries* atomically: all become visible, or none do.

        Every entry is validated before anything is written.
        """
        batch = list(entries)
        for entry in batch:
            self.validate(entry)
        if not batch:
            return []
        now = self.now()
        with self.transaction() as conn:
            return [self._insert_row(conn, entry, now) for entry in batch]

    def replace_list(self, list_name: str, entries: Iterable[NewEntry]) -> list[int]:
        """Delete every entry in *list_name* (all sources) and insert *entries*.

        Both steps share one transaction, so a failed replacement leaves
        the list exactly as it was.
        """
        batch = list(entries)
        for entry in batch:
            if entry.list_name != list_name:
                msg = f"Entry for list {entry.list_name!r} passed to replace_list({list_name!r})"
                raise ValueError(msg)
            self.validate(entry)
        now = self.now()
        with self.transaction() as conn:
            conn.execute(delete(list_entries).where(list_entries.c.list_name == list_name))
            return [self._insert_row(conn, entry, now) for entry in batch]

    def update(self, entry_id: int, changes: EntryUpdate) -> ListEntry:
        """Apply a partial update and return the stored result.

        Raises:
            EntryNotFoundError: If *entry_id* does not exist.
            EntryValidationError: If the effective entry is a ``domain``
                entry whose pattern fails the domain rule.
            UniquenessViolation: If the update collides with another entry.
        """
        with self.transaction() as conn:
            row = conn.execute(
                select(list_entries).where(list_entries.c.id == entry_id)
            ).mappings().first()
            if row is None:
                raise EntryNotFoundError(entry_id)
            current = _row_to_entry(row)

            fields = changes.model_dump(exclude_unset=True, exclude={"metadata"})
            pattern = fields.get("pattern") or current.pattern
            pattern_type = fields.get("pattern_type") or current.pattern_type
            if changes.touches_pattern:
                self._check_pattern(pattern, PatternType(pattern_type))

            metadata = current.metadata
            if changes.metadata is not None:
                try:
                    metadata = metadata.merged(changes.metadata)
                except EntryValidationError as exc:
                    raise EntryValidationError(str(exc), pattern=pattern) from exc

            updated_at = max(self.now(), int(row["created_at"]))
            values: dict[str, Any] = {
                "list_name": fields.get("list_name") or current.list_name,
                "pattern": pattern,
                "pattern_type": str(pattern_type),
                "source": str(fields.get("source") or current.source),
                "metadata": _metadata_json(metadata),
                "updated_at": updated_at,
            }
            try:
                conn.execute(
                    update(list_entries).where(list_entries.c.id == entry_id).values(**values)
                )
            except IntegrityError as exc:
                msg = (
                    f"Update of entry {entry_id} collides with an existing entry: "
                    f"{values['list_name']!r} {values['pattern_type']} {pattern!r}"
                )
                raise UniquenessViolation(msg) from exc

            refreshed = conn.execute(
                select(list_entries).where(list_entries.c.id == entry_id)
            ).mappings().one()
            return _row_to_entry(refreshed)

    def delete(self, entry_id: int) -> bool:
        """Delete one entry. Returns False if it did not exist (not an error)."""
        with self.transaction() as conn:
            result = conn.execute(delete(list_entries).where(list_entries.c.id == entry_id))
        return bool(result.rowcount)

    def delete_all_in_list(self, list_name: str, source: EntrySource | None = None) -> int:
        """Delete every entry in *list_name*, optionally only from *source*.

        Returns the number of entries removed.
        """
        stmt = delete(list_entries).where(list_entries.c.list_name == list_name)
        if source is not None:
            stmt = stmt.where(list_entries.c.source == str(source))
        with self.transaction() as conn:
            result = conn.execute(stmt)
        return int(result.rowcount or 0)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, entry_id: int) -> ListEntry:
        """Fetch one entry by id.

        Raises:
            EntryNotFoundError: If *entry_id* does not exist.
        """
        entry = self._first(select(list_entries).where(list_entries.c.id == entry_id))
        if entry is None:
            raise EntryNotFoundError(entry_id)
        return entry

    def get_by_list(self, list_name: str) -> list[ListEntry]:
        return self._all(
            select(list_entries)
            .where(list_entries.c.list_name == list_name)
            .order_by(list_entries.c.id)
        )

    def get_by_list_and_source(self, list_name: str, source: EntrySource) -> list[ListEntry]:
        return self._all(
            select(list_entries)
            .where(
                list_entries.c.list_name == list_name,
                list_entries.c.source == str(source),
            )
            .order_by(list_entries.c.id)
        )

    def find_by_list_and_domain(self, list_name: str, pattern: str) -> ListEntry | None:
        """Legacy lookup by ``(list_name, pattern)`` ignoring pattern type.

        Several entries may share a pattern string across types; the
        first in storage order (lowest id) is returned.  Use
        :meth:`find_by_key` for anything uniqueness-sensitive.
        """
        return self._first(
            select(list_entries)
            .where(
                list_entries.c.list_name == list_name,
                list_entries.c.pattern == pattern,
            )
            .order_by(list_entries.c.id)
            .limit(1)
        )

    def find_by_key(
        self,
        list_name: str,
        pattern_type: PatternType,
        pattern: str,
    ) -> ListEntry | None:
        """Look up the single entry at a uniqueness key, if any."""
        return self._first(
            select(list_entries).where(
                list_entries.c.list_name == list_name,
                list_entries.c.pattern_type == str(pattern_type),
                list_entries.c.pattern == pattern,
            )
        )

    def list_names(self) -> list[str]:
        """Distinct list names currently in use, sorted."""
        stmt = (
            select(list_entries.c.list_name)
            .distinct()
            .order_by(list_entries.c.list_name)
        )
        self._require_open()
        with self._engine.connect() as conn:
            return [str(name) for name in conn.execute(stmt).scalars()]

    def count(self, list_name: str | None = None) -> int:
        stmt = select(func.count(list_entries.c.id))
        if list_name is not None:
            stmt = stmt.where(list_entries.c.list_name == list_name)
        self._require_open()
        with self._engine.connect() as conn:
            return int(conn.execute(stmt).scalar_one() or 0)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_open(self) -> None:
        if self._closed:
            raise RuntimeError("ListStore is closed")

    def _first(self, stmt: Any) -> ListEntry | None:
        self._require_open()
        with self._engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        return _row_to_entry(row) if row is not None else None

    def _all(self, stmt: Any) -> list[ListEntry]:
        self._require_open()
        with self._engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [_row_to_entry(row) for row in rows]

    def _insert_row(self, conn: Connection, entry: NewEntry, now: int) -> int:
        created_at = entry.metadata.created_at or now
        try:
            result = conn.execute(
                insert(list_entries).values(
                    list_name=entry.list_name,
                    pattern=entry.pattern,
                    pattern_type=str(entry.pattern_type),
                    source=str(entry.source),
                    metadata=_metadata_json(entry.metadata),
                    created_at=created_at,
                    updated_at=max(now, created_at),
                )
            )
        except IntegrityError as exc:
            msg = (
                f"Failed to create entry: {entry.pattern!r} ({entry.pattern_type}) "
                f"already exists in list {entry.list_name!r}"
            )
            raise UniquenessViolation(msg) from exc
        return int(result.inserted_primary_key[0])


def _metadata_json(metadata: EntryMetadata) -> str:
    """Serialize metadata for the JSON column; timestamps live in their own columns."""
    wire = metadata.to_wire()
    wire.pop("created_at", None)
    wire.pop("updated_at", None)
    return json.dumps(wire, separators=(",", ":"))


def _row_to_entry(row: RowMapping) -> ListEntry:
    metadata = EntryMetadata.from_wire(json.loads(row["metadata"] or "{}"))
    return ListEntry(
        id=row["id"],
        list_name=row["list_name"],
        pattern=row["pattern"],
        pattern_type=PatternType(row["pattern_type"]),
        source=EntrySource(row["source"]),
        metadata=metadata.with_timestamps(
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        ),
    )
