"""Tests for ServiceResult and ServiceError."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from listkeeper.domain.errors import (
    EntryNotFoundError,
    EntryValidationError,
    MalformedInputError,
    TransportError,
    UniquenessViolation,
)
from listkeeper.services.base import BaseService
from listkeeper.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_defaults(self) -> None:
        result = ServiceResult(ok=True, op="create_entry", data={"id": 1})
        assert result.warnings == []
        assert result.error is None
        assert result.meta is None

    def test_failure_shorthand(self) -> None:
        result = ServiceResult.failure(
            "sync", "TRANSPORT_ERROR", "down", detail={"url": "x"}, warnings=["w"]
        )
        assert result.ok is False
        assert result.error == ServiceError(
            code="TRANSPORT_ERROR", message="down", detail={"url": "x"}
        )
        assert result.warnings == ["w"]
        assert result.data == {}

    def test_json_serialization(self) -> None:
        parsed = json.loads(ServiceResult(ok=True, op="t", data={"k": "v"}).model_dump_json())
        assert parsed["data"] == {"k": "v"}

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="test")
        with pytest.raises(ValidationError):
            result.ok = False  # type: ignore[misc]


class TestErrorResult:
    @pytest.mark.parametrize(
        ("exc", "code"),
        [
            (EntryValidationError("bad", pattern="p"), "VALIDATION_FAILED"),
            (UniquenessViolation("dup"), "DUPLICATE_ENTRY"),
            (EntryNotFoundError(3), "NOT_FOUND"),
            (MalformedInputError("json"), "MALFORMED_INPUT"),
            (TransportError("down"), "TRANSPORT_ERROR"),
            (ValueError("bad enum"), "VALIDATION_FAILED"),
            (RuntimeError("boom"), "STORE_FAILURE"),
        ],
    )
    def test_codes(self, exc: Exception, code: str) -> None:
        result = BaseService._error_result("op", exc)
        assert not result.ok
        assert result.error.code == code

    def test_detail(self) -> None:
        result = BaseService._error_result("op", EntryNotFoundError(3), list_name="l")
        assert result.error.detail == {"list_name": "l", "id": 3}
        result = BaseService._error_result("op", EntryValidationError("bad", pattern="p"))
        assert result.error.detail == {"pattern": "p"}
