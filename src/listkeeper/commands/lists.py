"""Command group: whole-list operations (show, clear, export, import)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from listkeeper.commands._base import ListGroup
from listkeeper.domain.types import EntrySource

if TYPE_CHECKING:
    from listkeeper.commands._context import AppContext

_SOURCES = click.Choice([s.value for s in EntrySource])

_LIST_EXAMPLES = """\
  listkeeper list names
  listkeeper list show blocked --source user
  listkeeper list export blocked --output blocked.json
  listkeeper list import blocked blocked.json --source user
  listkeeper list clear blocked --source backend"""


@click.group("list", cls=ListGroup, examples=_LIST_EXAMPLES)
def list_group() -> None:
    """Inspect, clear, export, and import whole lists."""


@list_group.command()
@click.pass_obj
def names(app: AppContext) -> None:
    """Names of all non-empty lists."""
    from listkeeper.services.entries import EntryService

    app.emit(EntryService(app.store).list_names())


@list_group.command()
@click.argument("list_name")
@click.option("--source", type=_SOURCES, default=None, help="Only entries from this source.")
@click.pass_obj
def show(app: AppContext, list_name: str, source: str | None) -> None:
    """Entries of LIST_NAME in storage order."""
    from listkeeper.services.entries import EntryService

    app.emit(EntryService(app.store).get_entries(list_name, source=source))


@list_group.command()
@click.argument("list_name")
@click.option("--source", type=_SOURCES, default=None, help="Only entries from this source.")
@click.pass_obj
def clear(app: AppContext, list_name: str, source: str | None) -> None:
    """Delete every entry in LIST_NAME."""
    from listkeeper.services.entries import EntryService

    app.emit(EntryService(app.store).clear_list(list_name, source=source))


@list_group.command()
@click.argument("list_name")
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the document here instead of stdout.",
)
@click.pass_obj
def export(app: AppContext, list_name: str, output_path: Path | None) -> None:
    """Export LIST_NAME as a JSON document."""
    from listkeeper.services.transfer import TransferService, render_document

    result = TransferService(app.store).export_list(list_name)
    if output_path is None and not app.settings.json_output:
        click.echo(render_document(result.data["document"]), nl=False)
        return
    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(render_document(result.data["document"]), encoding="utf-8")
        data = {k: v for k, v in result.data.items() if k != "document"}
        result = result.model_copy(update={"data": {**data, "output": str(output_path)}})
    app.emit(result)


@list_group.command("import")
@click.argument("list_name")
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--source",
    type=_SOURCES,
    default=None,
    help="Source for imported entries (default: [transfer] import_source).",
)
@click.pass_obj
def import_cmd(app: AppContext, list_name: str, input_path: Path, source: str | None) -> None:
    """Replace LIST_NAME with the entries in INPUT_PATH."""
    from listkeeper.services.transfer import TransferService

    raw = input_path.read_text(encoding="utf-8")
    entry_source = source or app.settings.transfer.import_source
    app.emit(TransferService(app.store).import_list(list_name, raw, source=entry_source))
