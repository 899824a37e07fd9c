"""TransferService — export a list to JSON and import it back.

Export document::

    {
      "list_name": "blocked",
      "exported_at": 1718000000000,
      "version": 1,
      "entries": [{"domain": "...", "pattern_type": "...", "metadata": {...}}]
    }

Ids and sources are not exported; the importer decides the source.
Import replaces the whole target list (every source) in one transaction,
so a rejected import leaves the list exactly as it was.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from listkeeper.domain.entries import EntryKey, ListEntry, NewEntry
from listkeeper.domain.errors import (
    EntryValidationError,
    MalformedInputError,
    UniquenessViolation,
)
from listkeeper.domain.types import EntrySource
from listkeeper.services._helpers import skipped_item
from listkeeper.services.base import BaseService
from listkeeper.services.result import ServiceResult
from listkeeper.services.telemetry import traced

EXPORT_VERSION = 1


def export_entry(entry: ListEntry) -> dict[str, Any]:
    return {
        "domain": entry.pattern,
        "pattern_type": str(entry.pattern_type),
        "metadata": entry.metadata.to_wire(),
    }


def render_document(document: Mapping[str, Any]) -> str:
    """Serialize an export document the way files are written."""
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def parse_document(raw_json: str) -> list[Any]:
    """Extract the entries array from an export document or a bare array.

    Raises:
        MalformedInputError: If *raw_json* is not JSON or has the wrong shape.
    """
    try:
        parsed = json.loads(raw_json)
    except json.JSONDecodeError as exc:
        raise MalformedInputError(f"Import data is not valid JSON: {exc}") from exc

    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict):
        entries = parsed.get("entries")
        if isinstance(entries, list):
            return entries
        raise MalformedInputError("Import document has no 'entries' array")
    msg = f"Import data must be an object or array, got {type(parsed).__name__}"
    raise MalformedInputError(msg)


class TransferService(BaseService):
    """JSON import/export of whole lists."""

    @traced
    def export_list(self, list_name: str) -> ServiceResult:
        """Build the export document for *list_name* (empty lists export too)."""
        entries = self._store.get_by_list(list_name)
        document = {
            "list_name": list_name,
            "exported_at": self._store.now(),
            "version": EXPORT_VERSION,
            "entries": [export_entry(entry) for entry in entries],
        }
        warnings: list[str] = []
        if not entries:
            warnings.append(f"List {list_name!r} has no entries")
        return ServiceResult(
            ok=True,
            op="export_list",
            data={"list_name": list_name, "count": len(entries), "document": document},
            warnings=warnings,
        )

    @traced
    def import_list(
        self,
        list_name: str,
        raw_json: str,
        *,
        source: EntrySource | str = EntrySource.USER,
    ) -> ServiceResult:
        """Replace *list_name* with the entries in *raw_json*.

        Invalid entries and repeated keys are skipped and reported in
        ``data["skipped"]``; valid ones are written with *source*.
        """
        op = "import_list"
        if not list_name:
            return ServiceResult.failure(op, "VALIDATION_FAILED", "List name must not be empty")
        try:
            entry_source = EntrySource(source)
            raw_entries = parse_document(raw_json)
        except (ValueError, MalformedInputError) as exc:
            return self._error_result(op, exc, list_name=list_name)

        batch: list[NewEntry] = []
        skipped: list[dict[str, object]] = []
        seen: set[EntryKey] = set()
        for index, raw in enumerate(raw_entries):
            try:
                entry = NewEntry.from_wire(raw, list_name=list_name, source=entry_source)
                self._store.validate(entry)
            except EntryValidationError as exc:
                skipped.append(skipped_item(index, raw, str(exc)))
                continue
            if entry.key in seen:
                skipped.append(skipped_item(index, raw, "duplicate entry in import data"))
                continue
            seen.add(entry.key)
            batch.append(entry)

        try:
            ids = self._store.replace_list(list_name, batch)
        except (UniquenessViolation, SQLAlchemyError) as exc:
            return self._error_result(op, exc, list_name=list_name)

        warnings = [
            f"Skipped entry {item.get('pattern', item['index'])!r}: {item['reason']}"
            for item in skipped
        ]
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "list_name": list_name,
                "imported": len(ids),
                "skipped": skipped,
                "source": str(entry_source),
            },
            warnings=warnings,
        )
