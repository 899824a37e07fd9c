"""Exception taxonomy shared by the store, services, and fetchers.

Services translate these into :class:`ServiceError` codes; only the
matcher swallows them (a pattern or URL that cannot be parsed never
matches).
"""

from __future__ import annotations


class ListkeeperError(Exception):
    """Base class for all listkeeper errors."""


class EntryValidationError(ListkeeperError):
    """An entry is malformed or violates the domain-pattern rule."""

    def __init__(self, message: str, *, pattern: str | None = None) -> None:
        super().__init__(message)
        self.pattern = pattern


class UniquenessViolation(ListkeeperError):
    """A write would duplicate a ``(list_name, pattern_type, pattern)`` key."""


class EntryNotFoundError(ListkeeperError):
    """No entry exists with the requested id."""

    def __init__(self, entry_id: int) -> None:
        super().__init__(f"List entry {entry_id} not found")
        self.entry_id = entry_id


class MalformedInputError(ListkeeperError):
    """Import data could not be parsed into entries."""


class TransportError(ListkeeperError):
    """The backend configuration could not be retrieved."""


class DomainResolutionError(ListkeeperError):
    """A hostname has no registrable domain under the public-suffix table."""
