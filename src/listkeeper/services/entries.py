"""EntryService — direct CRUD on list entries.

Single-entry writes surface validation and uniqueness failures as hard
errors to the caller; there is no batch to continue.  ``bulk_create`` is
all-or-nothing, matching the store's batch contract.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from listkeeper.domain.entries import EntryUpdate, NewEntry
from listkeeper.domain.errors import (
    EntryNotFoundError,
    EntryValidationError,
    UniquenessViolation,
)
from listkeeper.domain.metadata import EntryMetadata
from listkeeper.domain.types import EntrySource, PatternType
from listkeeper.services.base import BaseService
from listkeeper.services.result import ServiceResult
from listkeeper.services.telemetry import traced

# Never writable through update(); the store assigns them.
_IMMUTABLE_FIELDS = ("id", "created_at", "updated_at")


class EntryService(BaseService):
    """Create, read, update, and delete list entries."""

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @traced
    def create_entry(
        self,
        list_name: str,
        pattern: str,
        pattern_type: PatternType | str,
        *,
        source: EntrySource | str = EntrySource.USER,
        metadata: Mapping[str, Any] | None = None,
    ) -> ServiceResult:
        """Insert one entry and return it."""
        op = "create_entry"
        try:
            entry = NewEntry(
                list_name=list_name,
                pattern=pattern,
                pattern_type=pattern_type,
                source=source,
                metadata=EntryMetadata.from_wire(metadata),
            )
            entry_id = self._store.insert(entry)
        except (ValidationError, EntryValidationError, UniquenessViolation) as exc:
            return self._error_result(op, exc, list_name=list_name)

        created = self._store.get(entry_id)
        return ServiceResult(ok=True, op=op, data={"id": entry_id, "entry": created.to_dict()})

    @traced
    def bulk_create(self, raw_entries: Iterable[Mapping[str, Any]]) -> ServiceResult:
        """Insert many entries atomically.

        Each item is a wire object carrying its own ``list_name`` plus
        ``domain``/``pattern``, ``pattern_type`` and optional ``metadata``
        and ``source``.  Any invalid item or key collision fails the whole
        batch and nothing is written.
        """
        op = "bulk_create"
        batch: list[NewEntry] = []
        for index, raw in enumerate(raw_entries):
            try:
                list_name = raw.get("list_name") if isinstance(raw, Mapping) else None
                if not isinstance(list_name, str) or not list_name:
                    raise EntryValidationError("entry is missing a list_name")
                source = raw.get("source", EntrySource.USER)
                entry = NewEntry.from_wire(raw, list_name=list_name, source=EntrySource(source))
            except (ValueError, EntryValidationError) as exc:
                return self._error_result(op, exc, index=index)
            batch.append(entry)

        try:
            ids = self._store.bulk_insert(batch)
        except (EntryValidationError, UniquenessViolation) as exc:
            return self._error_result(op, exc)
        return ServiceResult(ok=True, op=op, data={"ids": ids, "count": len(ids)})

    @traced
    def update_entry(self, entry_id: int, *, changes: Mapping[str, Any]) -> ServiceResult:
        """Merge *changes* over an existing entry.

        Keys: ``list_name``, ``pattern`` (or ``domain``), ``pattern_type``,
        ``source``, ``metadata``.  ``metadata`` is merged key by key.
        """
        op = "update_entry"
        warnings: list[str] = []
        fields = dict(changes)
        if "domain" in fields and "pattern" not in fields:
            fields["pattern"] = fields.pop("domain")
        for key in _IMMUTABLE_FIELDS:
            if key in fields:
                fields.pop(key)
                warnings.append(f"Cannot change immutable field: {key}")

        try:
            update = EntryUpdate.model_validate(fields)
            entry = self._store.update(entry_id, update)
        except (
            ValidationError,
            EntryValidationError,
            EntryNotFoundError,
            UniquenessViolation,
        ) as exc:
            return self._error_result(op, exc, id=entry_id)

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "id": entry_id,
                "fields_changed": sorted(update.model_fields_set),
                "entry": entry.to_dict(),
            },
            warnings=warnings,
        )

    @traced
    def delete_entry(self, entry_id: int) -> ServiceResult:
        deleted = self._store.delete(entry_id)
        return ServiceResult(ok=True, op="delete_entry", data={"id": entry_id, "deleted": deleted})

    @traced
    def clear_list(
        self,
        list_name: str,
        *,
        source: EntrySource | str | None = None,
    ) -> ServiceResult:
        """Delete every entry in a list, optionally only one source's."""
        op = "clear_list"
        try:
            source_filter = EntrySource(source) if source is not None else None
            count = self._store.delete_all_in_list(list_name, source_filter)
        except (ValueError, SQLAlchemyError) as exc:
            return self._error_result(op, exc, list_name=list_name)
        data: dict[str, Any] = {"list_name": list_name, "deleted": count}
        if source_filter is not None:
            data["source"] = str(source_filter)
        return ServiceResult(ok=True, op=op, data=data)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_entry(self, entry_id: int) -> ServiceResult:
        try:
            entry = self._store.get(entry_id)
        except EntryNotFoundError as exc:
            return self._error_result("get_entry", exc)
        return ServiceResult(ok=True, op="get_entry", data={"entry": entry.to_dict()})

    def get_entries(
        self,
        list_name: str,
        *,
        source: EntrySource | str | None = None,
    ) -> ServiceResult:
        """All entries of a list (optionally one source), in storage order."""
        op = "get_entries"
        try:
            source_filter = EntrySource(source) if source is not None else None
        except ValueError as exc:
            return self._error_result(op, exc)
        if source_filter is None:
            entries = self._store.get_by_list(list_name)
        else:
            entries = self._store.get_by_list_and_source(list_name, source_filter)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "list_name": list_name,
                "count": len(entries),
                "entries": [entry.to_dict() for entry in entries],
            },
        )

    def find_entry(
        self,
        list_name: str,
        pattern: str,
        *,
        pattern_type: PatternType | str | None = None,
    ) -> ServiceResult:
        """Find an entry by pattern.

        With *pattern_type* this is the exact uniqueness-key lookup;
        without it, the first entry in storage order whose pattern string
        matches is returned.
        """
        op = "find_entry"
        if pattern_type is None:
            entry = self._store.find_by_list_and_domain(list_name, pattern)
        else:
            try:
                kind = PatternType(pattern_type)
            except ValueError as exc:
                return self._error_result(op, exc)
            entry = self._store.find_by_key(list_name, kind, pattern)
        return ServiceResult(
            ok=True,
            op=op,
            data={"found": entry is not None, "entry": entry.to_dict() if entry else None},
        )

    def list_names(self) -> ServiceResult:
        names = self._store.list_names()
        return ServiceResult(ok=True, op="list_names", data={"lists": names, "count": len(names)})
