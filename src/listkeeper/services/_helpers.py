"""Shared service-layer helper functions."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from pydantic import ValidationError

if TYPE_CHECKING:
    from listkeeper.domain.errors import EntryValidationError


def describe_validation_error(exc: ValidationError | EntryValidationError) -> str:
    """One-line summary of a pydantic or entry validation failure."""
    if isinstance(exc, ValidationError):
        return "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'entry'}: {err['msg']}"
            for err in exc.errors()
        )
    return str(exc)


def skipped_item(index: int, raw: object, reason: str) -> dict[str, object]:
    """Report shape for an entry dropped from a batch."""
    item: dict[str, object] = {"index": index, "reason": reason}
    if isinstance(raw, Mapping):
        pattern = raw.get("domain", raw.get("pattern"))
        if pattern is not None:
            item["pattern"] = pattern
        pattern_type = raw.get("pattern_type", raw.get("patternType"))
        if pattern_type is not None:
            item["pattern_type"] = pattern_type
    return item
