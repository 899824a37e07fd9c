"""Subcommand modules for listkeeper.

register_commands() imports lazily so ``listkeeper --help`` stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register command groups and standalone commands on the root group."""
    # --- Groups ---
    from listkeeper.commands.entry import entry
    from listkeeper.commands.lists import list_group

    cli.add_command(entry)
    cli.add_command(list_group)

    # --- Standalone commands ---
    from listkeeper.commands.match import check, match
    from listkeeper.commands.sync import sync

    cli.add_command(match)
    cli.add_command(check)
    cli.add_command(sync)
