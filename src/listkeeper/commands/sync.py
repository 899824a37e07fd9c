"""Command: apply a backend configuration payload."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from listkeeper.commands._base import ListCommand

if TYPE_CHECKING:
    from listkeeper.commands._context import AppContext


@click.command(
    cls=ListCommand,
    examples="""\
  listkeeper sync backend-config.json
  listkeeper --json sync backend-config.json""",
)
@click.argument("payload_file", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
def sync(app: AppContext, payload_file: Path) -> None:
    """Merge backend entries from PAYLOAD_FILE into the store.

    PAYLOAD_FILE maps list names to arrays of entries.  Backend entries
    not in the payload are removed; user and generated entries survive
    unless the payload claims their exact pattern.
    """
    from listkeeper.infrastructure.payload import load_payload_file
    from listkeeper.services.merge import MergeService

    app.emit(MergeService(app.store).sync(lambda: load_payload_file(payload_file)))
