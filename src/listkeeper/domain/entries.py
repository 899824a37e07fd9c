"""List entry models — persisted entries, insert requests, partial updates.

INVARIANT: ``(list_name, pattern_type, pattern)`` identifies at most one
entry, whatever its source.  :class:`EntryKey` is that triple.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, NamedTuple

from pydantic import BaseModel, Field

from listkeeper.domain.errors import EntryValidationError
from listkeeper.domain.metadata import EntryMetadata
from listkeeper.domain.types import EntrySource, PatternType, parse_pattern_type


class EntryKey(NamedTuple):
    """The uniqueness key of a list entry."""

    list_name: str
    pattern_type: PatternType
    pattern: str


class ListEntry(BaseModel):
    """An entry as persisted by the store."""

    model_config = {"frozen": True}

    id: int
    list_name: str
    pattern: str
    pattern_type: PatternType
    source: EntrySource
    metadata: EntryMetadata = Field(default_factory=EntryMetadata)

    @property
    def key(self) -> EntryKey:
        return EntryKey(self.list_name, self.pattern_type, self.pattern)

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form used in service payloads."""
        return {
            "id": self.id,
            "list_name": self.list_name,
            "pattern": self.pattern,
            "pattern_type": str(self.pattern_type),
            "source": str(self.source),
            "metadata": self.metadata.to_wire(),
        }


class NewEntry(BaseModel):
    """A request to create an entry. The store assigns id and timestamps."""

    model_config = {"frozen": True}

    list_name: str = Field(min_length=1)
    pattern: str = Field(min_length=1)
    pattern_type: PatternType
    source: EntrySource = EntrySource.USER
    metadata: EntryMetadata = Field(default_factory=EntryMetadata)

    @property
    def key(self) -> EntryKey:
        return EntryKey(self.list_name, self.pattern_type, self.pattern)

    @classmethod
    def from_wire(
        cls,
        raw: Any,
        *,
        list_name: str,
        source: EntrySource,
    ) -> NewEntry:
        """Build an entry from a wire object (backend payload or import file).

        The pattern lives under ``domain`` (legacy name) or ``pattern``; the
        type under ``pattern_type`` or ``patternType``.

        Raises:
            EntryValidationError: If the pattern is missing or blank, the
                type is missing or unknown, or metadata is malformed.
        """
        if not isinstance(raw, Mapping):
            raise EntryValidationError(f"entry must be an object, got {type(raw).__name__}")

        pattern = raw.get("domain", raw.get("pattern"))
        if not isinstance(pattern, str) or not pattern.strip():
            raise EntryValidationError("entry is missing a pattern")

        raw_type = raw.get("pattern_type", raw.get("patternType"))
        if raw_type is None:
            raise EntryValidationError("entry is missing a pattern_type", pattern=pattern)
        pattern_type = parse_pattern_type(raw_type)
        if pattern_type is None:
            raise EntryValidationError(f"unknown pattern_type: {raw_type!r}", pattern=pattern)

        try:
            metadata = EntryMetadata.from_wire(raw.get("metadata"))
        except EntryValidationError as exc:
            raise EntryValidationError(str(exc), pattern=pattern) from exc

        return cls(
            list_name=list_name,
            pattern=pattern,
            pattern_type=pattern_type,
            source=source,
            metadata=metadata,
        )


class EntryUpdate(BaseModel):
    """Partial update. Only fields explicitly set are applied.

    ``metadata`` is a wire-level mapping merged key by key over the
    current metadata; timestamps in it are ignored (the store owns them).
    """

    model_config = {"frozen": True, "extra": "forbid"}

    list_name: str | None = Field(default=None, min_length=1)
    pattern: str | None = Field(default=None, min_length=1)
    pattern_type: PatternType | None = None
    source: EntrySource | None = None
    metadata: dict[str, Any] | None = None

    @property
    def touches_pattern(self) -> bool:
        """Whether the update may change what the entry matches."""
        return bool({"pattern", "pattern_type"} & self.model_fields_set)
