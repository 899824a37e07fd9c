"""Tests for format_result mode selection."""

from __future__ import annotations

import json

from listkeeper.output.formatters import format_result
from listkeeper.services.result import ServiceResult

_ENTRY = {
    "id": 4,
    "list_name": "blocked",
    "pattern": "example.com",
    "pattern_type": "domain",
    "source": "backend",
    "metadata": {"category": "ads"},
}


class TestFormatResult:
    def test_json(self) -> None:
        result = ServiceResult(ok=True, op="get_entry", data={"entry": _ENTRY})
        assert json.loads(format_result(result, json_output=True))["data"]["entry"] == _ENTRY

    def test_json_ignores_quiet(self) -> None:
        result = ServiceResult(ok=True, op="delete_entry", data={"deleted": True})
        assert json.loads(format_result(result, json_output=True, quiet=True))["ok"] is True

    def test_human(self) -> None:
        result = ServiceResult(ok=True, op="get_entries", data={"count": 1, "entries": [_ENTRY]})
        text = format_result(result)
        assert text.startswith("OK: get_entries")
        assert "example.com" in text

    def test_quiet(self) -> None:
        result = ServiceResult(ok=True, op="delete_entry", data={"deleted": True})
        assert format_result(result, quiet=True) == "OK: delete_entry"

    def test_error(self) -> None:
        result = ServiceResult.failure("update_entry", "NOT_FOUND", "List entry 9 not found")
        assert format_result(result) == "ERROR: update_entry [NOT_FOUND]: List entry 9 not found"

    def test_verbose_meta(self) -> None:
        result = ServiceResult(ok=True, op="x", meta={"telemetry": {"name": "x"}})
        assert "meta:" in format_result(result, verbose=True)
        assert "meta:" not in format_result(result)
