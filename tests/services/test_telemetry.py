"""Tests for @traced and trace_span."""

from __future__ import annotations

from listkeeper.infrastructure.store import ListStore
from listkeeper.services.merge import MergeService
from listkeeper.services.result import ServiceResult
from listkeeper.services.telemetry import enable_telemetry, trace_span, traced


@traced
def _op() -> ServiceResult:
    with trace_span("step") as span:
        if span is not None:
            span.annotate("n", 1)
    return ServiceResult(ok=True, op="op")


class TestTraced:
    def test_disabled_by_default(self) -> None:
        assert _op().meta is None

    def test_enabled(self) -> None:
        enable_telemetry()
        tree = _op().meta["telemetry"]
        assert tree["name"] == "_op"
        assert tree["children"][0]["name"] == "step"
        assert tree["children"][0]["annotations"] == {"n": 1}

    def test_merge_spans(self, store: ListStore) -> None:
        enable_telemetry()
        result = MergeService(store).merge_backend_list("blocked", [])
        names = [child["name"] for child in result.meta["telemetry"]["children"]]
        assert names == ["validate", "purge_backend", "resolve_conflicts", "insert"]
