"""File-based backend configuration fetcher.

Any zero-argument callable returning the payload mapping can drive a
sync; this is the one the CLI uses, reading a JSON document from disk.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from listkeeper.domain.errors import MalformedInputError, TransportError


def load_payload_file(path: str | Path) -> dict[str, Any]:
    """Read a backend configuration payload from *path*.

    Raises:
        TransportError: If the file cannot be read.
        MalformedInputError: If it is not a JSON object.
    """
    source = Path(path)
    try:
        raw = source.read_text(encoding="utf-8")
    except OSError as exc:
        raise TransportError(f"Cannot read backend configuration {source}: {exc}") from exc

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MalformedInputError(f"Invalid JSON in {source}: {exc}") from exc

    if not isinstance(payload, dict):
        msg = f"Backend configuration in {source} must be a JSON object"
        raise MalformedInputError(msg)
    return payload
