"""Command group: single-entry CRUD."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from listkeeper.commands._base import ListGroup
from listkeeper.domain.types import EntrySource, PatternType

if TYPE_CHECKING:
    from listkeeper.commands._context import AppContext

_PATTERN_TYPES = click.Choice([t.value for t in PatternType])
_SOURCES = click.Choice([s.value for s in EntrySource])

_ENTRY_EXAMPLES = """\
  listkeeper entry add blocked example.com --type domain --category ads
  listkeeper entry add blocked news.example.com/sports --type host_path_prefix
  listkeeper entry update 12 --category tracking
  listkeeper entry find blocked example.com --type domain
  listkeeper entry remove 12"""


@click.group(cls=ListGroup, examples=_ENTRY_EXAMPLES)
def entry() -> None:
    """Add, change, find, and remove list entries."""


@entry.command()
@click.argument("list_name")
@click.argument("pattern")
@click.option("--type", "pattern_type", type=_PATTERN_TYPES, required=True, help="Pattern type.")
@click.option("--source", type=_SOURCES, default=EntrySource.USER.value, help="Entry source.")
@click.option("--category", default=None, help="Metadata category.")
@click.option("--description", default=None, help="Metadata description.")
@click.option("--tag", "tags", multiple=True, help="Metadata tag (repeatable).")
@click.pass_obj
def add(
    app: AppContext,
    list_name: str,
    pattern: str,
    pattern_type: str,
    source: str,
    category: str | None,
    description: str | None,
    tags: tuple[str, ...],
) -> None:
    """Add PATTERN to LIST_NAME."""
    from listkeeper.services.entries import EntryService

    metadata: dict[str, object] = {}
    if category is not None:
        metadata["category"] = category
    if description is not None:
        metadata["description"] = description
    if tags:
        metadata["tags"] = list(tags)

    app.emit(
        EntryService(app.store).create_entry(
            list_name, pattern, pattern_type, source=source, metadata=metadata
        )
    )


@entry.command()
@click.argument("entry_id", type=int)
@click.option("--list", "list_name", default=None, help="Move to another list.")
@click.option("--pattern", default=None, help="New pattern.")
@click.option("--type", "pattern_type", type=_PATTERN_TYPES, default=None, help="New type.")
@click.option("--category", default=None, help="New metadata category.")
@click.option("--description", default=None, help="New metadata description.")
@click.pass_obj
def update(
    app: AppContext,
    entry_id: int,
    list_name: str | None,
    pattern: str | None,
    pattern_type: str | None,
    category: str | None,
    description: str | None,
) -> None:
    """Change fields of entry ENTRY_ID."""
    from listkeeper.services.entries import EntryService

    changes: dict[str, object] = {}
    if list_name is not None:
        changes["list_name"] = list_name
    if pattern is not None:
        changes["pattern"] = pattern
    if pattern_type is not None:
        changes["pattern_type"] = pattern_type
    metadata = {
        key: value
        for key, value in (("category", category), ("description", description))
        if value is not None
    }
    if metadata:
        changes["metadata"] = metadata

    if not changes:
        click.echo("No changes specified. Use --help for options.", err=True)
        raise SystemExit(1)

    app.emit(EntryService(app.store).update_entry(entry_id, changes=changes))


@entry.command()
@click.argument("entry_id", type=int)
@click.pass_obj
def remove(app: AppContext, entry_id: int) -> None:
    """Delete entry ENTRY_ID (a missing id is not an error)."""
    from listkeeper.services.entries import EntryService

    app.emit(EntryService(app.store).delete_entry(entry_id))


@entry.command()
@click.argument("list_name")
@click.argument("pattern")
@click.option("--type", "pattern_type", type=_PATTERN_TYPES, default=None, help="Exact type.")
@click.pass_obj
def find(app: AppContext, list_name: str, pattern: str, pattern_type: str | None) -> None:
    """Look up PATTERN in LIST_NAME."""
    from listkeeper.services.entries import EntryService

    app.emit(EntryService(app.store).find_entry(list_name, pattern, pattern_type=pattern_type))
