"""Pattern validation, compilation, and URL matching.

Each pattern type compiles once into a small frozen variant carrying only
what it needs (a host, a host plus path, a compiled regex, ...).  Matching
a URL against a compiled pattern never re-parses the pattern, and never
raises: a URL or pattern that cannot be parsed simply does not match.

Variants::

    domain            -> DomainPattern(domain)
    host              -> HostPattern(host)
    exact_url         -> ExactUrlPattern(url)
    host_path_prefix  -> HostPathPrefixPattern(host, path)
    regex             -> RegexPattern(regex)
    (anything broken) -> NeverMatch(reason)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from urllib.parse import SplitResult, urlsplit

from listkeeper.domain.errors import DomainResolutionError
from listkeeper.domain.resolver import DomainResolver, strip_www
from listkeeper.domain.types import PatternType, parse_pattern_type

logger = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")


# ---------------------------------------------------------------------------
# URL parsing
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParsedUrl:
    """The parts of an absolute URL the matcher looks at."""

    raw: str
    hostname: str | None
    path: str


def parse_url(url: str) -> ParsedUrl | None:
    """Parse an absolute URL, or return None if it is not one."""
    if not isinstance(url, str):
        return None
    try:
        parts: SplitResult = urlsplit(url.strip())
        hostname = parts.hostname
    except ValueError:
        return None
    if not parts.scheme or not _SCHEME_RE.match(parts.scheme):
        return None
    path = parts.path or "/"
    return ParsedUrl(raw=url, hostname=hostname or None, path=path)


def _host_of(value: str) -> str | None:
    """Hostname of a full URL pattern, lower-cased."""
    parsed = parse_url(value)
    return parsed.hostname if parsed is not None else None


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------


def normalize_domain_candidate(pattern: str) -> str:
    return strip_www(pattern.strip())


def is_valid_domain_pattern(pattern: str, resolver: DomainResolver) -> bool:
    """Whether *pattern* is a bare registrable domain.

    ``www.example.com`` is read as ``example.com`` for this check only.
    Anything resembling a URL or a host+path string is rejected, and so is
    any subdomain: ``mail.google.com`` resolves to ``google.com`` and a
    domain entry always covers the whole registrable-domain family.
    """
    if not isinstance(pattern, str):
        return False
    candidate = normalize_domain_candidate(pattern)
    if not candidate or "://" in candidate or "/" in candidate:
        return False
    try:
        registrable = resolver.registrable_domain(candidate)
    except DomainResolutionError:
        return False
    return bool(registrable) and candidate == registrable


# ---------------------------------------------------------------------------
# Compiled variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DomainPattern:
    """Matches any URL whose host shares this registrable domain."""

    domain: str

    def matches(self, url: ParsedUrl, resolver: DomainResolver) -> bool:
        if url.hostname is None:
            return False
        try:
            return resolver.registrable_domain(url.hostname) == self.domain
        except DomainResolutionError:
            return False


@dataclass(frozen=True)
class HostPattern:
    """Matches one exact host (``www.`` ignored on both sides)."""

    host: str

    def matches(self, url: ParsedUrl, resolver: DomainResolver) -> bool:
        return url.hostname is not None and strip_www(url.hostname) == self.host


@dataclass(frozen=True)
class ExactUrlPattern:
    url: str

    def matches(self, url: ParsedUrl, resolver: DomainResolver) -> bool:
        return url.raw == self.url


@dataclass(frozen=True)
class HostPathPrefixPattern:
    """Matches a host plus any path starting with ``path``.

    A trailing ``/`` on the pattern path also accepts the bare path
    (``/maps/`` matches ``/maps``); there is no reverse rule.
    """

    host: str
    path: str

    def matches(self, url: ParsedUrl, resolver: DomainResolver) -> bool:
        if url.hostname is None or strip_www(url.hostname) != self.host:
            return False
        if url.path.startswith(self.path):
            return True
        return self.path.endswith("/") and url.path == self.path[:-1]


@dataclass(frozen=True)
class RegexPattern:
    """Searches the full URL string (scheme through fragment)."""

    regex: re.Pattern[str]

    def matches(self, url: ParsedUrl, resolver: DomainResolver) -> bool:
        return self.regex.search(url.raw) is not None


@dataclass(frozen=True)
class NeverMatch:
    """A pattern that could not be compiled. Matches nothing."""

    reason: str

    def matches(self, url: ParsedUrl, resolver: DomainResolver) -> bool:
        return False


CompiledPattern = (
    DomainPattern
    | HostPattern
    | ExactUrlPattern
    | HostPathPrefixPattern
    | RegexPattern
    | NeverMatch
)


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------


def _compile_domain(pattern: str, resolver: DomainResolver) -> CompiledPattern:
    if not is_valid_domain_pattern(pattern, resolver):
        return NeverMatch(f"not a registrable domain: {pattern!r}")
    return DomainPattern(normalize_domain_candidate(pattern))


def _compile_host(pattern: str) -> CompiledPattern:
    if "://" in pattern:
        host = _host_of(pattern)
    else:
        host = pattern.strip().split("/", 1)[0].lower()
    if not host:
        return NeverMatch(f"no host in {pattern!r}")
    return HostPattern(strip_www(host))


def _compile_host_path_prefix(pattern: str) -> CompiledPattern:
    if "://" in pattern:
        parsed = parse_url(pattern)
        if parsed is None or parsed.hostname is None:
            return NeverMatch(f"no host in {pattern!r}")
        host, path = parsed.hostname, parsed.path
    else:
        stripped = pattern.strip()
        if "/" not in stripped:
            return NeverMatch(f"no path in {pattern!r}")
        host, rest = stripped.split("/", 1)
        host = host.lower()
        path = "/" + rest
    if not host:
        return NeverMatch(f"no host in {pattern!r}")
    if not path.startswith("/"):
        path = "/" + path
    return HostPathPrefixPattern(host=strip_www(host), path=path)


def _compile_regex(pattern: str) -> CompiledPattern:
    try:
        return RegexPattern(re.compile(pattern))
    except re.error as exc:
        logger.debug("Invalid regex pattern %r: %s", pattern, exc)
        return NeverMatch(f"invalid regex: {exc}")


def compile_pattern(
    pattern: str,
    pattern_type: PatternType | str,
    resolver: DomainResolver,
) -> CompiledPattern:
    """Compile *pattern* for repeated matching. Never raises."""
    if not isinstance(pattern, str):
        return NeverMatch("pattern is not a string")
    kind = parse_pattern_type(pattern_type)
    match kind:
        case PatternType.DOMAIN:
            return _compile_domain(pattern, resolver)
        case PatternType.HOST:
            return _compile_host(pattern)
        case PatternType.EXACT_URL:
            return ExactUrlPattern(pattern)
        case PatternType.HOST_PATH_PREFIX:
            return _compile_host_path_prefix(pattern)
        case PatternType.REGEX:
            return _compile_regex(pattern)
        case _:
            return NeverMatch(f"unknown pattern type: {pattern_type!r}")


def matches_compiled(
    url: str | ParsedUrl,
    compiled: CompiledPattern,
    resolver: DomainResolver,
) -> bool:
    """Match an already-compiled pattern against *url*."""
    parsed = url if isinstance(url, ParsedUrl) else parse_url(url)
    if parsed is None:
        return False
    return compiled.matches(parsed, resolver)


def matches(
    url: str,
    pattern: str,
    pattern_type: PatternType | str,
    resolver: DomainResolver,
) -> bool:
    """Whether *url* matches *pattern* interpreted as *pattern_type*.

    Examples (with a public-suffix resolver)::

        matches("https://mail.google.com/inbox", "google.com", "domain")  # True
        matches("https://mail.google.com/inbox", "google.com", "host")    # False
        matches("https://example.com/maps/dir", "example.com/maps",
                "host_path_prefix")                                       # True
        matches("not-a-url", "example.com", "domain")                     # False
    """
    parsed = parse_url(url)
    if parsed is None:
        return False
    return compile_pattern(pattern, pattern_type, resolver).matches(parsed, resolver)
