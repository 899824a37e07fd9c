"""Tests for TransferService import/export."""

from __future__ import annotations

import json

from listkeeper.infrastructure.store import ListStore
from listkeeper.services.entries import EntryService
from listkeeper.services.transfer import TransferService, render_document


def _triples(store: ListStore, list_name: str) -> set[tuple[str, str, str]]:
    out = set()
    for e in store.get_by_list(list_name):
        meta = e.metadata.to_wire()
        for key in ("created_at", "updated_at"):
            meta.pop(key, None)
        out.add((e.pattern, str(e.pattern_type), json.dumps(meta, sort_keys=True)))
    return out


class TestExport:
    def test_document_shape(self, store: ListStore, clock) -> None:
        EntryService(store).create_entry(
            "blocked", "example.com", "domain", metadata={"category": "ads"}
        )
        result = TransferService(store).export_list("blocked")
        assert result.ok
        doc = result.data["document"]
        assert doc["list_name"] == "blocked"
        assert doc["version"] == 1
        assert doc["exported_at"] == clock.now
        assert doc["entries"] == [
            {
                "domain": "example.com",
                "pattern_type": "domain",
                "metadata": {"category": "ads", "created_at": clock.now, "updated_at": clock.now},
            }
        ]

    def test_empty_list(self, store: ListStore) -> None:
        result = TransferService(store).export_list("nothing")
        assert result.data["document"]["entries"] == []
        assert result.warnings


class TestImport:
    def test_round_trip(self, store: ListStore) -> None:
        entries = EntryService(store)
        entries.create_entry("blocked", "example.com", "domain", metadata={"source": "import"})
        entries.create_entry("blocked", "example.com", "host", metadata={"tags": ["t"]})
        entries.create_entry("blocked", "news.example.com/x/", "host_path_prefix")
        before = _triples(store, "blocked")

        svc = TransferService(store)
        raw = render_document(svc.export_list("blocked").data["document"])
        result = svc.import_list("blocked", raw)
        assert result.ok, result.error
        assert result.data["imported"] == 3
        assert _triples(store, "blocked") == before
        found = store.find_by_list_and_domain("blocked", "example.com")
        assert found.metadata.extra == {"source": "import"}

    def test_replaces_every_source(self, store: ListStore) -> None:
        EntryService(store).create_entry("blocked", "old.com", "domain", source="backend")
        result = TransferService(store).import_list(
            "blocked", json.dumps([{"domain": "new.com", "pattern_type": "domain"}])
        )
        assert result.ok
        assert [e.pattern for e in store.get_by_list("blocked")] == ["new.com"]

    def test_source_option(self, store: ListStore) -> None:
        TransferService(store).import_list(
            "blocked",
            json.dumps([{"domain": "a.com", "pattern_type": "domain"}]),
            source="generated",
        )
        assert str(store.get_by_list("blocked")[0].source) == "generated"

    def test_invalid_entries_skipped(self, store: ListStore) -> None:
        raw = json.dumps(
            {
                "entries": [
                    {"domain": "sub.a.com", "pattern_type": "domain"},
                    {"domain": "a.com", "pattern_type": "domain"},
                    {"domain": "a.com", "pattern_type": "domain"},
                ]
            }
        )
        result = TransferService(store).import_list("blocked", raw)
        assert result.ok
        assert result.data["imported"] == 1
        assert [s["index"] for s in result.data["skipped"]] == [0, 2]

    def test_malformed_json_leaves_list_untouched(self, store: ListStore) -> None:
        EntryService(store).create_entry("blocked", "keep.com", "domain")
        result = TransferService(store).import_list("blocked", "{not json")
        assert not result.ok
        assert result.error.code == "MALFORMED_INPUT"
        assert [e.pattern for e in store.get_by_list("blocked")] == ["keep.com"]

    def test_empty_list_name(self, store: ListStore) -> None:
        raw = '{"entries": [{"domain": "a.com", "pattern_type": "domain"}]}'
        result = TransferService(store).import_list("", raw)
        assert not result.ok
        assert result.error.code == "VALIDATION_FAILED"
        assert store.count() == 0

    def test_wrong_shape(self, store: ListStore) -> None:
        result = TransferService(store).import_list("blocked", '{"items": []}')
        assert result.error.code == "MALFORMED_INPUT"

    def test_created_at_preserved(self, store: ListStore, clock) -> None:
        raw = json.dumps(
            [{"domain": "a.com", "pattern_type": "domain", "metadata": {"created_at": 1000}}]
        )
        TransferService(store).import_list("blocked", raw)
        meta = store.get_by_list("blocked")[0].metadata
        assert meta.created_at == 1000
        assert meta.updated_at == clock.now
