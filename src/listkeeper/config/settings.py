"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``LISTKEEPER_*`` prefix, ``__`` for nested sections
  3. TOML file    — ``listkeeper.toml`` discovered via walk-up
  4. Code defaults — baked into the section models
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from listkeeper.config.discovery import find_config
from listkeeper.config.models import DomainsConfig, StoreConfig, TransferConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``listkeeper.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            try:
                self._data = tomllib.loads(toml_path.read_text(encoding="utf-8"))
            except tomllib.TOMLDecodeError as exc:
                raise click.ClickException(f"Invalid TOML in {toml_path}: {exc}") from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# TOML path handed to settings_customise_sources during construction.
_tls = threading.local()


class ListkeeperSettings(BaseSettings):
    """Everything a CLI invocation needs, frozen after construction.

    Attributes:
        root: Directory relative paths are resolved against (parent of
            ``listkeeper.toml``, or CWD if no config was found).
        config_path: The config file actually loaded, if any.
        db_path: Explicit ``--db`` override of ``[store] path``.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "LISTKEEPER_",
        "env_nested_delimiter": "__",
    }

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None
    db_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    store: StoreConfig = Field(default_factory=StoreConfig)
    domains: DomainsConfig = Field(default_factory=DomainsConfig)
    transfer: TransferConfig = Field(default_factory=TransferConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the TOML source between env vars and defaults."""
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, getattr(_tls, "toml_path", None)),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        **cli_flags: Any,
    ) -> ListkeeperSettings:
        """Construct settings from a CLI invocation.

        Uses *config_path* when given, otherwise walk-up discovery from
        *root* (or CWD).  ``None`` flag values are dropped so they do not
        shadow env vars or the TOML file.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if not p.is_file():
                raise click.ClickException(f"Config file not found: {config_path}")
            toml_path = p
        else:
            toml_path = find_config(root)

        resolved_root = root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        flags = {key: value for key, value in cli_flags.items() if value is not None}
        _tls.toml_path = toml_path
        try:
            return cls(root=resolved_root, config_path=toml_path, **flags)
        finally:
            _tls.toml_path = None

    @property
    def database_path(self) -> Path:
        """Effective SQLite file: ``--db`` if given, else ``[store] path``."""
        path = self.db_path if self.db_path is not None else Path(self.store.path)
        return path if path.is_absolute() else self.root / path
