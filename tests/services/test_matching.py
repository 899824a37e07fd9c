"""Tests for MatchService."""

from __future__ import annotations

from listkeeper.infrastructure.store import ListStore
from listkeeper.services.entries import EntryService
from listkeeper.services.matching import MatchService


def _seed(store: ListStore) -> None:
    svc = EntryService(store)
    svc.create_entry("blocked", "example.com/news", "host_path_prefix")
    svc.create_entry("blocked", "google.com", "domain", metadata={"category": "search"})
    svc.create_entry("blocked", r"tracker\d+", "regex")


class TestMatchUrl:
    def test_first_match_in_storage_order(self, store: ListStore) -> None:
        _seed(store)
        result = MatchService(store).match_url("https://mail.google.com/inbox", "blocked")
        assert result.ok
        assert result.data["matched"] is True
        assert result.data["entry"]["pattern"] == "google.com"
        assert result.data["entry"]["metadata"]["category"] == "search"

    def test_no_match(self, store: ListStore) -> None:
        _seed(store)
        result = MatchService(store).match_url("https://example.com/sports", "blocked")
        assert result.data == {
            "url": "https://example.com/sports",
            "list_name": "blocked",
            "matched": False,
            "entry": None,
        }

    def test_complex_suffix(self, store: ListStore) -> None:
        EntryService(store).create_entry("blocked", "bbc.co.uk", "domain")
        assert MatchService(store).match_url("https://www.bbc.co.uk/", "blocked").data["matched"]

    def test_malformed_url(self, store: ListStore) -> None:
        _seed(store)
        assert MatchService(store).first_match("google.com", "blocked") is None

    def test_unknown_list(self, store: ListStore) -> None:
        assert MatchService(store).match_url("https://a.com/", "nope").data["matched"] is False

    def test_patterns_compiled_once(self, store: ListStore) -> None:
        _seed(store)
        svc = MatchService(store)
        svc.first_match("https://x.org/", "blocked")
        first = svc._compile.cache_info()
        svc.first_match("https://y.org/", "blocked")
        second = svc._compile.cache_info()
        assert first.misses == second.misses == 3
        assert second.currsize == 3

    def test_compile_cache_is_bounded(self, store: ListStore) -> None:
        svc = MatchService(store, cache_size=2)
        for host in ("a.com", "b.com", "c.com", "d.com"):
            svc.check_pattern(f"https://{host}/", host, "host")
        assert svc._compile.cache_info().currsize == 2
        # evicted patterns recompile on demand
        assert svc.matches("https://a.com/", "a.com", "host") is True


class TestCheckPattern:
    def test_match(self, store: ListStore) -> None:
        result = MatchService(store).check_pattern(
            "https://example.com/maps/dir", "example.com/maps", "host_path_prefix"
        )
        assert result.data["matched"] is True
        assert result.warnings == []

    def test_warnings(self, store: ListStore) -> None:
        result = MatchService(store).check_pattern("not a url", "mail.google.com", "domain")
        assert result.ok
        assert result.data["matched"] is False
        assert len(result.warnings) == 2
