"""Registrable-domain resolution backed by tldextract.

The extractor is pinned to the public-suffix snapshot bundled with
tldextract: no suffix-list download is attempted and nothing is cached
on disk, so resolution is deterministic and offline.
"""

from __future__ import annotations

from functools import lru_cache

import tldextract

from listkeeper.domain.errors import DomainResolutionError


class PublicSuffixResolver:
    """Resolve hostnames to eTLD+1 using the public-suffix list.

    Args:
        include_private_suffixes: Treat PSL private-section suffixes
            (``github.io``, ``blogspot.com`` ...) as public suffixes, so
            ``alice.github.io`` is its own registrable domain.
        cache_size: Number of hostnames memoized per resolver.
    """

    def __init__(self, *, include_private_suffixes: bool = False, cache_size: int = 4096) -> None:
        self._extract = tldextract.TLDExtract(
            cache_dir=None,
            suffix_list_urls=(),
            fallback_to_snapshot=True,
            include_psl_private_domains=include_private_suffixes,
        )
        self._cached = lru_cache(maxsize=cache_size)(self._resolve)

    def registrable_domain(self, hostname: str) -> str:
        return self._cached(hostname.strip().rstrip(".").lower())

    def _resolve(self, hostname: str) -> str:
        if not hostname:
            raise DomainResolutionError("empty hostname")
        result = self._extract(hostname)
        if not result.domain or not result.suffix:
            raise DomainResolutionError(f"no registrable domain for {hostname!r}")
        return f"{result.domain}.{result.suffix}"
