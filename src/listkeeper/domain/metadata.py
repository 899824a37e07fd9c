"""Typed entry metadata with a single extension slot.

On the wire (imports, exports, backend payloads) metadata is one flat
JSON object.  Known keys map onto first-class fields; every other key is
kept, in order, in :attr:`EntryMetadata.extra`.  Extension values are
limited to scalars and flat arrays of scalars so the stored JSON column
stays checkable.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from listkeeper.domain.errors import EntryValidationError

ScalarValue = str | int | float | bool | None
ExtraValue = ScalarValue | list[ScalarValue]

TIMESTAMP_KEYS = ("created_at", "updated_at", "sync_timestamp")

# Stored in SQLite INTEGER columns (signed 64-bit).
EpochMillis = Annotated[int, Field(ge=0, le=2**63 - 1)]

FIRST_CLASS_KEYS = frozenset({"category", "description", "tags", *TIMESTAMP_KEYS})

# camelCase spellings seen in older exports and backend payloads
_KEY_ALIASES: dict[str, str] = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "syncTimestamp": "sync_timestamp",
}


class EntryMetadata(BaseModel):
    """Metadata attached to a list entry.

    Attributes:
        category: Free-form classification (e.g. ``"social"``).
        description: Human note about why the entry exists.
        tags: Labels for grouping entries inside a list.
        created_at: Epoch milliseconds; assigned by the store.
        updated_at: Epoch milliseconds; refreshed by the store on update.
        sync_timestamp: Epoch milliseconds of the backend sync that wrote
            the entry (backend entries only).
        extra: Any other wire keys, insertion-ordered.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    category: str | None = None
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    created_at: EpochMillis | None = None
    updated_at: EpochMillis | None = None
    sync_timestamp: EpochMillis | None = None
    extra: dict[str, ExtraValue] = Field(default_factory=dict)

    @field_validator(*TIMESTAMP_KEYS, mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> Any:
        """Accept ISO 8601 strings as well as epoch milliseconds."""
        if isinstance(value, str):
            try:
                parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
            except ValueError:
                return value
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=UTC)
            return int(parsed.timestamp() * 1000)
        return value

    @classmethod
    def from_wire(cls, raw: Any) -> EntryMetadata:
        """Build metadata from a flat wire mapping.

        Raises:
            EntryValidationError: If *raw* is not a mapping or a value has
                an unsupported shape.
        """
        if raw is None:
            return cls()
        if not isinstance(raw, Mapping):
            raise EntryValidationError(f"metadata must be an object, got {type(raw).__name__}")

        fields: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in raw.items():
            name = _KEY_ALIASES.get(str(key), str(key))
            if name in FIRST_CLASS_KEYS:
                fields[name] = value
            else:
                extra[name] = value
        if "tags" in fields and fields["tags"] is None:
            fields["tags"] = []

        try:
            return cls.model_validate({**fields, "extra": extra})
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
            )
            raise EntryValidationError(f"invalid metadata ({problems})") from exc

    def to_wire(self) -> dict[str, Any]:
        """Flatten back to the wire shape, omitting unset first-class keys."""
        out: dict[str, Any] = {}
        if self.category is not None:
            out["category"] = self.category
        if self.description is not None:
            out["description"] = self.description
        if self.tags:
            out["tags"] = list(self.tags)
        for key in TIMESTAMP_KEYS:
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        out.update(self.extra)
        return out

    def merged(self, changes: Mapping[str, Any]) -> EntryMetadata:
        """Return a copy with wire-level *changes* applied key by key."""
        return EntryMetadata.from_wire({**self.to_wire(), **changes})

    def with_timestamps(self, **stamps: int | None) -> EntryMetadata:
        return self.model_copy(update=stamps)
