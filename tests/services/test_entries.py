"""Tests for EntryService."""

from __future__ import annotations

from listkeeper.infrastructure.store import ListStore
from listkeeper.services.entries import EntryService


class TestCreateEntry:
    def test_create(self, store: ListStore) -> None:
        result = EntryService(store).create_entry(
            "blocked", "example.com", "domain", metadata={"category": "ads", "origin": "ui"}
        )
        assert result.ok, result.error
        entry = result.data["entry"]
        assert entry["id"] == result.data["id"]
        assert entry["source"] == "user"
        assert entry["metadata"]["category"] == "ads"
        assert entry["metadata"]["origin"] == "ui"

    def test_domain_rule(self, store: ListStore) -> None:
        result = EntryService(store).create_entry("blocked", "mail.google.com", "domain")
        assert not result.ok
        assert result.error.code == "VALIDATION_FAILED"
        assert result.error.detail["pattern"] == "mail.google.com"

    def test_duplicate(self, store: ListStore) -> None:
        svc = EntryService(store)
        svc.create_entry("blocked", "example.com", "domain")
        result = svc.create_entry("blocked", "example.com", "domain", source="generated")
        assert not result.ok
        assert result.error.code == "DUPLICATE_ENTRY"
        assert "Failed to create entry" in result.error.message

    def test_unknown_type(self, store: ListStore) -> None:
        result = EntryService(store).create_entry("blocked", "example.com", "glob")
        assert not result.ok
        assert result.error.code == "VALIDATION_FAILED"

    def test_nested_metadata_rejected(self, store: ListStore) -> None:
        result = EntryService(store).create_entry(
            "blocked", "example.com", "host", metadata={"nested": {"a": 1}}
        )
        assert not result.ok
        assert result.error.code == "VALIDATION_FAILED"


class TestBulkCreate:
    def test_all_or_nothing(self, store: ListStore) -> None:
        svc = EntryService(store)
        result = svc.bulk_create(
            [
                {"list_name": "a", "domain": "a.com", "pattern_type": "domain"},
                {"list_name": "a", "domain": "sub.a.com", "pattern_type": "domain"},
            ]
        )
        assert not result.ok
        assert result.error.code == "VALIDATION_FAILED"
        assert store.count() == 0

    def test_success(self, store: ListStore) -> None:
        result = EntryService(store).bulk_create(
            [
                {"list_name": "a", "domain": "a.com", "pattern_type": "domain"},
                {"list_name": "b", "pattern": "b.com/x", "pattern_type": "host_path_prefix"},
            ]
        )
        assert result.ok, result.error
        assert result.data["count"] == 2
        assert store.list_names() == ["a", "b"]

    def test_missing_list_name(self, store: ListStore) -> None:
        result = EntryService(store).bulk_create([{"domain": "a.com", "pattern_type": "domain"}])
        assert not result.ok
        assert result.error.detail["index"] == 0


class TestUpdateEntry:
    def test_update(self, store: ListStore, clock) -> None:
        svc = EntryService(store)
        entry_id = svc.create_entry("blocked", "example.com", "domain").data["id"]
        clock.advance()
        result = svc.update_entry(entry_id, changes={"metadata": {"category": "news"}})
        assert result.ok, result.error
        assert result.data["fields_changed"] == ["metadata"]
        meta = result.data["entry"]["metadata"]
        assert meta["category"] == "news"
        assert meta["updated_at"] > meta["created_at"]

    def test_domain_alias_and_immutable_fields(self, store: ListStore) -> None:
        svc = EntryService(store)
        entry_id = svc.create_entry("blocked", "example.com", "host").data["id"]
        result = svc.update_entry(
            entry_id, changes={"domain": "other.com", "id": 99, "created_at": 1}
        )
        assert result.ok, result.error
        assert result.data["entry"]["pattern"] == "other.com"
        assert result.data["entry"]["id"] == entry_id
        assert len(result.warnings) == 2

    def test_not_found(self, store: ListStore) -> None:
        result = EntryService(store).update_entry(404, changes={"pattern": "x.com"})
        assert not result.ok
        assert result.error.code == "NOT_FOUND"
        assert "not found" in result.error.message
        assert result.error.detail["id"] == 404

    def test_collision(self, store: ListStore) -> None:
        svc = EntryService(store)
        svc.create_entry("blocked", "a.com", "domain")
        entry_id = svc.create_entry("blocked", "b.com", "domain").data["id"]
        result = svc.update_entry(entry_id, changes={"pattern": "a.com"})
        assert not result.ok
        assert result.error.code == "DUPLICATE_ENTRY"

    def test_unknown_field(self, store: ListStore) -> None:
        svc = EntryService(store)
        entry_id = svc.create_entry("blocked", "a.com", "domain").data["id"]
        result = svc.update_entry(entry_id, changes={"colour": "red"})
        assert not result.ok
        assert result.error.code == "VALIDATION_FAILED"


class TestDeleteAndClear:
    def test_delete(self, store: ListStore) -> None:
        svc = EntryService(store)
        entry_id = svc.create_entry("blocked", "a.com", "domain").data["id"]
        assert svc.delete_entry(entry_id).data["deleted"] is True
        assert svc.delete_entry(entry_id).data["deleted"] is False

    def test_clear_by_source(self, store: ListStore) -> None:
        svc = EntryService(store)
        svc.create_entry("blocked", "a.com", "domain", source="backend")
        svc.create_entry("blocked", "b.com", "domain")
        result = svc.clear_list("blocked", source="backend")
        assert result.ok
        assert result.data == {"list_name": "blocked", "deleted": 1, "source": "backend"}

    def test_clear_bad_source(self, store: ListStore) -> None:
        result = EntryService(store).clear_list("blocked", source="robot")
        assert not result.ok
        assert result.error.code == "VALIDATION_FAILED"


class TestReads:
    def test_get_entries(self, store: ListStore) -> None:
        svc = EntryService(store)
        svc.create_entry("blocked", "a.com", "domain", source="backend")
        svc.create_entry("blocked", "b.com", "domain")
        assert svc.get_entries("blocked").data["count"] == 2
        only_user = svc.get_entries("blocked", source="user").data["entries"]
        assert [e["pattern"] for e in only_user] == ["b.com"]

    def test_get_entry_missing(self, store: ListStore) -> None:
        result = EntryService(store).get_entry(7)
        assert result.error.code == "NOT_FOUND"

    def test_find_entry(self, store: ListStore) -> None:
        svc = EntryService(store)
        svc.create_entry("blocked", "example.com", "host")
        assert svc.find_entry("blocked", "example.com").data["found"] is True
        by_key = svc.find_entry("blocked", "example.com", pattern_type="domain")
        assert by_key.data == {"found": False, "entry": None}

    def test_list_names(self, store: ListStore) -> None:
        svc = EntryService(store)
        svc.create_entry("b", "a.com", "domain")
        svc.create_entry("a", "a.com", "domain")
        assert svc.list_names().data == {"lists": ["a", "b"], "count": 2}
