"""MatchService — answer "does this URL match any entry in list L?".

Patterns are compiled once per ``(pattern_type, pattern)`` into a bounded
LRU cache on the service, so matching many URLs against a list never
re-parses its patterns.  Matching never fails: unparseable URLs and broken
patterns simply do not match.
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from listkeeper.domain.patterns import (
    CompiledPattern,
    NeverMatch,
    compile_pattern,
    matches_compiled,
    parse_url,
)
from listkeeper.domain.types import PatternType
from listkeeper.services.base import BaseService
from listkeeper.services.result import ServiceResult
from listkeeper.services.telemetry import traced

if TYPE_CHECKING:
    from listkeeper.domain.entries import ListEntry
    from listkeeper.infrastructure.store import ListStore


class MatchService(BaseService):
    """URL matching against stored lists."""

    def __init__(self, store: ListStore, *, cache_size: int = 2048) -> None:
        super().__init__(store)
        self._compile = lru_cache(maxsize=cache_size)(self._compile_uncached)

    def compiled(self, pattern: str, pattern_type: PatternType | str) -> CompiledPattern:
        """Compiled form of a pattern, memoized on this service."""
        return self._compile(str(pattern_type), pattern)

    def _compile_uncached(self, pattern_type: str, pattern: str) -> CompiledPattern:
        return compile_pattern(pattern, pattern_type, self.resolver)

    def matches(self, url: str, pattern: str, pattern_type: PatternType | str) -> bool:
        """Pure pattern check; no store access."""
        return matches_compiled(url, self.compiled(pattern, pattern_type), self.resolver)

    def first_match(self, url: str, list_name: str) -> ListEntry | None:
        """First entry (storage order) in *list_name* matching *url*."""
        parsed = parse_url(url)
        if parsed is None:
            return None
        for entry in self._store.get_by_list(list_name):
            if self.compiled(entry.pattern, entry.pattern_type).matches(parsed, self.resolver):
                return entry
        return None

    @traced
    def check_pattern(
        self,
        url: str,
        pattern: str,
        pattern_type: PatternType | str,
    ) -> ServiceResult:
        """ServiceResult wrapper around :meth:`matches`."""
        compiled = self.compiled(pattern, pattern_type)
        data: dict[str, object] = {
            "url": url,
            "pattern": pattern,
            "pattern_type": str(pattern_type),
            "matched": matches_compiled(url, compiled, self.resolver),
        }
        warnings: list[str] = []
        if parse_url(url) is None:
            warnings.append(f"Not an absolute URL: {url!r}")
        if isinstance(compiled, NeverMatch):
            warnings.append(f"Pattern never matches: {compiled.reason}")
        return ServiceResult(ok=True, op="check_pattern", data=data, warnings=warnings)

    @traced
    def match_url(self, url: str, list_name: str) -> ServiceResult:
        """Find the first entry in *list_name* matching *url*."""
        entry = self.first_match(url, list_name)
        return ServiceResult(
            ok=True,
            op="match_url",
            data={
                "url": url,
                "list_name": list_name,
                "matched": entry is not None,
                "entry": entry.to_dict() if entry is not None else None,
            },
        )
