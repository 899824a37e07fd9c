"""MergeService — reconcile backend-pushed entries with the local store.

Pipeline per list: VALIDATE → PURGE BACKEND → RESOLVE CONFLICTS → INSERT → RESPOND

Three goals pull against each other here:

- the backend is authoritative for ``source = backend`` entries, so all
  of them are purged before the new batch lands, even ones the batch
  omits;
- uniqueness spans every source, so a ``user``/``generated`` entry sitting
  on the exact key of an incoming candidate is removed (backend wins at
  that key only);
- every other non-backend entry in the list survives the sync untouched.

Each step is its own transaction.  A reader between PURGE and INSERT can
observe a list with no backend entries.

Invalid candidates are dropped and reported in ``data["skipped"]``; they
never abort the rest of the batch.  A store failure aborts only the list
being merged.  ``apply_backend_config`` walks lists strictly in payload
order, one at a time.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

import structlog
from sqlalchemy.exc import SQLAlchemyError

from listkeeper.domain.entries import EntryKey, NewEntry
from listkeeper.domain.errors import (
    EntryValidationError,
    MalformedInputError,
    TransportError,
    UniquenessViolation,
)
from listkeeper.domain.types import EntrySource, parse_pattern_type
from listkeeper.services._helpers import skipped_item
from listkeeper.services.base import BaseService
from listkeeper.services.result import ServiceResult
from listkeeper.services.telemetry import trace_span, traced

log = structlog.get_logger(__name__)

Fetcher = Callable[[], Mapping[str, Any]]


class MergeService(BaseService):
    """Backend configuration sync."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @traced
    def merge_backend_list(self, list_name: str, candidates: Sequence[Any]) -> ServiceResult:
        """Replace the backend-sourced entries of *list_name* with *candidates*.

        Each candidate is a wire object ``{"domain": ..., "pattern_type":
        ..., "metadata": {...}}``.  Accepted candidates are stored with
        ``source = backend`` and ``metadata.sync_timestamp`` set to the
        time this merge started.
        """
        op = "merge_backend_list"
        if not list_name:
            return ServiceResult.failure(op, "VALIDATION_FAILED", "List name must not be empty")

        sync_started = self._store.now()
        skipped: list[dict[str, Any]] = []
        warnings: list[str] = []
        removed = 0
        replaced: list[dict[str, Any]] = []
        log.info("merge.start", list_name=list_name, candidates=len(candidates))

        # ── VALIDATE ─────────────────────────────────────────
        with trace_span("validate"):
            accepted = self._validate(list_name, candidates, sync_started, skipped)

        try:
            # ── PURGE BACKEND ────────────────────────────────
            with trace_span("purge_backend") as span:
                removed = self._store.delete_all_in_list(list_name, EntrySource.BACKEND)
                if span is not None:
                    span.annotate("removed", removed)

            # ── RESOLVE CONFLICTS ────────────────────────────
            with trace_span("resolve_conflicts"):
                replaced = self._resolve_conflicts(_candidate_keys(list_name, candidates))

            # ── INSERT ───────────────────────────────────────
            with trace_span("insert") as span:
                ids = self._insert(accepted, skipped)
                if span is not None:
                    span.annotate("inserted", len(ids))
        except SQLAlchemyError as exc:
            log.error("merge.failed", list_name=list_name, error=str(exc))
            return ServiceResult.failure(
                op,
                "STORE_FAILURE",
                f"Backend merge of list {list_name!r} failed: {exc}",
                detail={"list_name": list_name},
                data={
                    "list_name": list_name,
                    "removed_backend": removed,
                    "replaced": replaced,
                    "skipped": skipped,
                },
            )

        # ── RESPOND ──────────────────────────────────────────
        for item in replaced:
            warnings.append(
                f"{list_name}: backend entry replaced {item['source']} entry "
                f"{item['pattern']!r} ({item['pattern_type']})"
            )
        for item in skipped:
            warnings.append(
                f"{list_name}: skipped backend entry {item.get('pattern', '?')!r}: "
                f"{item['reason']}"
            )

        log.info(
            "merge.complete",
            list_name=list_name,
            removed_backend=removed,
            replaced=len(replaced),
            inserted=len(ids),
            skipped=len(skipped),
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "list_name": list_name,
                "removed_backend": removed,
                "replaced": replaced,
                "inserted": len(ids),
                "ids": ids,
                "skipped": skipped,
                "sync_timestamp": sync_started,
            },
            warnings=warnings,
        )

    @traced
    def apply_backend_config(self, payload: Any) -> ServiceResult:
        """Merge every list in a backend configuration payload, in order.

        Keys whose value is not an array are skipped with a warning.  A
        failed list is reported without undoing lists already merged.
        """
        op = "apply_backend_config"
        if not isinstance(payload, Mapping):
            return ServiceResult.failure(
                op,
                "MALFORMED_INPUT",
                f"Backend configuration must be an object, got {type(payload).__name__}",
            )

        warnings: list[str] = []
        lists: list[dict[str, Any]] = []
        failed: list[str] = []
        codes: set[str] = set()

        for raw_name, candidates in payload.items():
            list_name = str(raw_name)
            if not isinstance(candidates, list):
                msg = (
                    f"Skipping list {list_name!r}: expected an array of entries, "
                    f"got {type(candidates).__name__}"
                )
                log.warning("merge.list_skipped", list_name=list_name)
                warnings.append(msg)
                continue

            result = self.merge_backend_list(list_name, candidates)
            warnings.extend(result.warnings)
            summary: dict[str, Any] = {
                "list_name": list_name,
                "ok": result.ok,
                "removed_backend": result.data.get("removed_backend", 0),
                "replaced": len(result.data.get("replaced", [])),
                "inserted": result.data.get("inserted", 0),
                "skipped": len(result.data.get("skipped", [])),
            }
            if not result.ok and result.error is not None:
                summary["code"] = result.error.code
                summary["error"] = result.error.message
                codes.add(result.error.code)
                failed.append(list_name)
            lists.append(summary)

        data = {"lists": lists, "applied": [s["list_name"] for s in lists if s["ok"]]}
        if failed:
            return ServiceResult.failure(
                op,
                codes.pop() if len(codes) == 1 else "SYNC_PARTIAL",
                f"{len(failed)} of {len(lists)} lists failed to sync: {', '.join(failed)}",
                detail={"failed": failed},
                data=data,
                warnings=warnings,
            )
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    @traced
    def sync(self, fetch: Fetcher) -> ServiceResult:
        """Fetch a backend configuration and apply it.

        A fetch failure aborts the sync before any list is touched.
        """
        op = "sync"
        try:
            payload = fetch()
        except (TransportError, MalformedInputError) as exc:
            log.error("sync.fetch_failed", error=str(exc))
            return self._error_result(op, exc)

        result = self.apply_backend_config(payload)
        return result.model_copy(update={"op": op})

    # ------------------------------------------------------------------
    # Pipeline stages
    # ------------------------------------------------------------------

    def _validate(
        self,
        list_name: str,
        candidates: Sequence[Any],
        sync_started: int,
        skipped: list[dict[str, Any]],
    ) -> list[NewEntry]:
        """Parse and validate candidates; collect the rejects in *skipped*.

        A candidate repeating the key of an earlier one is a reject too:
        inserting both would break uniqueness for the whole batch.
        """
        accepted: list[NewEntry] = []
        seen: set[EntryKey] = set()
        for index, raw in enumerate(candidates):
            try:
                entry = NewEntry.from_wire(raw, list_name=list_name, source=EntrySource.BACKEND)
                self._store.validate(entry)
            except EntryValidationError as exc:
                skipped.append(skipped_item(index, raw, str(exc)))
                log.warning("merge.skipped", list_name=list_name, index=index, reason=str(exc))
                continue

            if entry.key in seen:
                reason = "duplicate of an earlier entry in the same batch"
                skipped.append(skipped_item(index, raw, reason))
                log.warning("merge.skipped", list_name=list_name, index=index, reason=reason)
                continue
            seen.add(entry.key)

            metadata = entry.metadata.with_timestamps(sync_timestamp=sync_started)
            accepted.append(entry.model_copy(update={"metadata": metadata}))
        return accepted

    def _resolve_conflicts(self, keys: Iterable[EntryKey]) -> list[dict[str, Any]]:
        """Delete any surviving entry sitting on an incoming key."""
        replaced: list[dict[str, Any]] = []
        for key in keys:
            existing = self._store.find_by_key(key.list_name, key.pattern_type, key.pattern)
            if existing is None:
                continue
            self._store.delete(existing.id)
            replaced.append(
                {
                    "id": existing.id,
                    "pattern": existing.pattern,
                    "pattern_type": str(existing.pattern_type),
                    "source": str(existing.source),
                }
            )
        return replaced

    def _insert(self, accepted: list[NewEntry], skipped: list[dict[str, Any]]) -> list[int]:
        """Insert the batch atomically.

        Conflict resolution should make a uniqueness failure impossible;
        if one happens anyway (a concurrent writer), the batch is retried
        entry by entry so only the colliding entries are lost.
        """
        try:
            return self._store.bulk_insert(accepted)
        except UniquenessViolation as exc:
            log.warning("merge.batch_conflict", error=str(exc))

        ids: list[int] = []
        for entry in accepted:
            try:
                ids.append(self._store.insert(entry))
            except UniquenessViolation as exc:
                skipped.append(
                    {
                        "index": None,
                        "pattern": entry.pattern,
                        "pattern_type": str(entry.pattern_type),
                        "reason": str(exc),
                    }
                )
        return ids


def _candidate_keys(list_name: str, candidates: Sequence[Any]) -> list[EntryKey]:
    """Keys claimed by the batch, in order, whether or not the candidate is valid.

    Only a usable pattern string and a recognized type are needed to
    claim a key; metadata and the domain rule play no part.
    """
    keys: dict[EntryKey, None] = {}
    for raw in candidates:
        if not isinstance(raw, Mapping):
            continue
        pattern = raw.get("domain", raw.get("pattern"))
        pattern_type = parse_pattern_type(raw.get("pattern_type", raw.get("patternType")))
        if isinstance(pattern, str) and pattern.strip() and pattern_type is not None:
            keys[EntryKey(list_name, pattern_type, pattern)] = None
    return list(keys)
