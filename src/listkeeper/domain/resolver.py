"""Registrable-domain lookup contract.

The domain layer never parses public-suffix data itself; callers inject
an object satisfying :class:`DomainResolver` (see
:mod:`listkeeper.infrastructure.psl` for the tldextract-backed one).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class DomainResolver(Protocol):
    """Maps a hostname to its registrable domain (eTLD+1)."""

    def registrable_domain(self, hostname: str) -> str:
        """Return the lower-cased registrable domain of *hostname*.

        Raises:
            DomainResolutionError: If *hostname* has no registrable domain
                (bare public suffix, IP literal, single label, empty).
        """
        ...


def strip_www(host: str) -> str:
    """Drop one leading ``www.`` label, case-insensitively."""
    if host[:4].lower() == "www.":
        return host[4:]
    return host
