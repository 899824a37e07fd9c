"""Shared pytest fixtures for listkeeper tests."""

from __future__ import annotations

import ipaddress
from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner

from listkeeper.domain.errors import DomainResolutionError
from listkeeper.infrastructure.store import ListStore
from listkeeper.services.telemetry import disable_telemetry

# Enough of the public-suffix list for the fixtures used across the suite.
_SUFFIXES = frozenset({"com", "org", "net", "io", "test", "co.uk", "com.au"})


class StubResolver:
    """Deterministic eTLD+1 resolver over a tiny suffix table."""

    def __init__(self, suffixes: frozenset[str] = _SUFFIXES) -> None:
        self.suffixes = suffixes
        self.calls = 0

    def registrable_domain(self, hostname: str) -> str:
        self.calls += 1
        host = hostname.strip().rstrip(".").lower()
        try:
            ipaddress.ip_address(host)
        except ValueError:
            pass
        else:
            raise DomainResolutionError(f"IP address: {host!r}")
        labels = host.split(".")
        # Longest matching suffix wins, as in the real list.
        for i in range(1, len(labels)):
            if ".".join(labels[i:]) in self.suffixes:
                return ".".join(labels[i - 1 :])
        raise DomainResolutionError(f"no registrable domain for {hostname!r}")


class FakeClock:
    """Epoch-ms clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1000) -> int:
        self.now += ms
        return self.now


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def resolver() -> StubResolver:
    return StubResolver()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(tmp_path: Path, resolver: StubResolver, clock: FakeClock) -> Iterator[ListStore]:
    """Open store on a temp SQLite file, closed after the test."""
    with ListStore.open(tmp_path / "lists.db", resolver, clock=clock) as s:
        yield s


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Iterator[None]:
    yield
    disable_telemetry()


@pytest.fixture
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run CLI tests from an empty temp dir with no inherited config."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("LISTKEEPER_CONFIG", raising=False)

