"""AppContext — shared Click context for all commands.

Created once by the root group and handed to subcommands through
``@click.pass_obj``.  Opens the store lazily and owns result emission
(stdout/stderr routing and exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from listkeeper.config.logging import configure_logging
from listkeeper.output.formatters import format_result
from listkeeper.services.telemetry import enable_telemetry

if TYPE_CHECKING:
    from listkeeper.config.settings import ListkeeperSettings
    from listkeeper.infrastructure.store import ListStore
    from listkeeper.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The store is opened on first access so ``--help`` and ``--version``
    never touch the database.
    """

    def __init__(self, settings: ListkeeperSettings) -> None:
        self.settings = settings
        self._store: ListStore | None = None

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)
        if settings.verbose:
            enable_telemetry()

    @property
    def store(self) -> ListStore:
        """The open store (created lazily on first access)."""
        if self._store is None:
            from listkeeper.infrastructure.psl import PublicSuffixResolver
            from listkeeper.infrastructure.store import ListStore

            resolver = PublicSuffixResolver(
                include_private_suffixes=self.settings.domains.include_private_suffixes,
            )
            self._store = ListStore.open(self.settings.database_path, resolver)
        return self._store

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
            self._store = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: result to stdout; warnings to stderr (already inside the
          payload in JSON mode).
        * Failure: result to stderr, exit status 1.
        """
        output = format_result(
            result,
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        if result.ok:
            click.echo(output)
            if not self.settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
