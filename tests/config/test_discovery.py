"""Tests for listkeeper.toml discovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from listkeeper.config.discovery import CONFIG_ENV_VAR, find_config, load_config


@pytest.fixture(autouse=True)
def _no_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


class TestFindConfig:
    def test_walk_up(self, tmp_path: Path) -> None:
        (tmp_path / "listkeeper.toml").write_text("")
        deep = tmp_path / "x" / "y"
        deep.mkdir(parents=True)
        assert find_config(deep) == (tmp_path / "listkeeper.toml").resolve()

    def test_env_var_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "listkeeper.toml").write_text("")
        other = tmp_path / "other.toml"
        other.write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(other))
        assert find_config(tmp_path) == other

    def test_env_var_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "listkeeper.toml").write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "missing.toml"))
        assert find_config(tmp_path) is None


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path: Path) -> None:
        config = load_config(cwd=tmp_path)
        assert config.store.path == ".listkeeper/lists.db"

    def test_sparse_file(self, tmp_path: Path) -> None:
        path = tmp_path / "listkeeper.toml"
        path.write_text("[domains]\ninclude_private_suffixes = true\n")
        config = load_config(path)
        assert config.domains.include_private_suffixes is True
        assert config.store.path == ".listkeeper/lists.db"
