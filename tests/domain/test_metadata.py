"""Tests for typed entry metadata and its flat wire form."""

from __future__ import annotations

import pytest

from listkeeper.domain.errors import EntryValidationError
from listkeeper.domain.metadata import EntryMetadata


class TestFromWire:
    def test_none_is_empty(self) -> None:
        assert EntryMetadata.from_wire(None) == EntryMetadata()

    def test_first_class_and_extra_keys(self) -> None:
        meta = EntryMetadata.from_wire(
            {
                "category": "social",
                "source": "import",
                "tags": ["a", "b"],
                "weight": 3,
                "flags": [True, None],
            }
        )
        assert meta.category == "social"
        assert meta.tags == ["a", "b"]
        assert meta.extra == {"source": "import", "weight": 3, "flags": [True, None]}
        assert list(meta.extra) == ["source", "weight", "flags"]

    def test_camel_case_timestamps(self) -> None:
        meta = EntryMetadata.from_wire({"createdAt": 5, "syncTimestamp": 7})
        assert meta.created_at == 5
        assert meta.sync_timestamp == 7
        assert meta.extra == {}

    def test_iso_timestamp(self) -> None:
        meta = EntryMetadata.from_wire({"created_at": "2024-01-01T00:00:00Z"})
        assert meta.created_at == 1_704_067_200_000

    def test_null_tags(self) -> None:
        assert EntryMetadata.from_wire({"tags": None}).tags == []

    @pytest.mark.parametrize(
        "raw",
        [
            "not a mapping",
            ["category"],
            {"nested": {"a": 1}},
            {"list_of_objects": [{"a": 1}]},
            {"created_at": "yesterday"},
            {"tags": "single"},
            {"created_at": 10**20},
            {"sync_timestamp": -1},
        ],
    )
    def test_rejects(self, raw: object) -> None:
        with pytest.raises(EntryValidationError):
            EntryMetadata.from_wire(raw)


class TestToWire:
    def test_omits_unset_keys(self) -> None:
        assert EntryMetadata().to_wire() == {}

    def test_flat(self) -> None:
        meta = EntryMetadata(category="ads", sync_timestamp=9, extra={"origin": "x"})
        assert meta.to_wire() == {"category": "ads", "sync_timestamp": 9, "origin": "x"}

    def test_round_trip(self) -> None:
        raw = {"category": "c", "description": "d", "tags": ["t"], "created_at": 1, "k": "v"}
        assert EntryMetadata.from_wire(raw).to_wire() == raw


class TestMerged:
    def test_key_by_key(self) -> None:
        meta = EntryMetadata.from_wire({"category": "a", "origin": "x"})
        merged = meta.merged({"description": "new", "origin": "y"})
        assert merged.category == "a"
        assert merged.description == "new"
        assert merged.extra == {"origin": "y"}

    def test_original_untouched(self) -> None:
        meta = EntryMetadata(category="a")
        meta.merged({"category": "b"})
        assert meta.category == "a"

    def test_with_timestamps(self) -> None:
        meta = EntryMetadata(category="a").with_timestamps(sync_timestamp=42)
        assert meta.sync_timestamp == 42
        assert meta.category == "a"
