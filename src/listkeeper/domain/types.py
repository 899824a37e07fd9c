"""Pattern types and entry provenance enums."""

from __future__ import annotations

from enum import StrEnum


class PatternType(StrEnum):
    """How an entry's pattern string is interpreted against a URL."""

    DOMAIN = "domain"
    HOST = "host"
    EXACT_URL = "exact_url"
    HOST_PATH_PREFIX = "host_path_prefix"
    REGEX = "regex"


class EntrySource(StrEnum):
    """Who created an entry. Controls what a backend sync may delete."""

    BACKEND = "backend"
    USER = "user"
    GENERATED = "generated"


def parse_pattern_type(value: object) -> PatternType | None:
    """Return the PatternType for *value*, or None if it is not recognized."""
    if isinstance(value, PatternType):
        return value
    if not isinstance(value, str):
        return None
    try:
        return PatternType(value)
    except ValueError:
        return None
