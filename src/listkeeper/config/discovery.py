"""Config file discovery and loading.

Walk-up finder locates listkeeper.toml, similar to how git finds .git/.
Supports the LISTKEEPER_CONFIG env var and the --config CLI flag.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

from listkeeper.config.models import ListkeeperConfig

CONFIG_FILENAME = "listkeeper.toml"
CONFIG_ENV_VAR = "LISTKEEPER_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for listkeeper.toml.

    LISTKEEPER_CONFIG, when set, wins; a path there that is not a file
    means "no config" rather than falling back to the walk.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if current.parent == current:
            return None
        current = current.parent


def load_config(path: Path | None = None, cwd: Path | None = None) -> ListkeeperConfig:
    """Load and validate a config file without env or CLI overrides."""
    if path is None:
        path = find_config(cwd)
    if path is None:
        return ListkeeperConfig()
    return ListkeeperConfig.model_validate(tomllib.loads(path.read_text(encoding="utf-8")))
