"""Tests for the file-based backend payload fetcher."""

from __future__ import annotations

from pathlib import Path

import pytest

from listkeeper.domain.errors import MalformedInputError, TransportError
from listkeeper.infrastructure.payload import load_payload_file


class TestLoadPayloadFile:
    def test_reads_object(self, tmp_path: Path) -> None:
        path = tmp_path / "payload.json"
        path.write_text('{"blocked": [{"domain": "a.com", "pattern_type": "domain"}]}')
        assert load_payload_file(path) == {
            "blocked": [{"domain": "a.com", "pattern_type": "domain"}]
        }

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(TransportError):
            load_payload_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "payload.json"
        path.write_text("{nope")
        with pytest.raises(MalformedInputError):
            load_payload_file(path)

    def test_array_is_not_a_payload(self, tmp_path: Path) -> None:
        path = tmp_path / "payload.json"
        path.write_text("[]")
        with pytest.raises(MalformedInputError):
            load_payload_file(path)
