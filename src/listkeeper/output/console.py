"""Rich Console factory and theme for listkeeper output.

Consoles render into a StringIO buffer so ``format_result() -> str`` stays
the only output contract.  Rich drops color codes on its own when the
buffer is not a terminal (CliRunner, pipes).
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

LISTKEEPER_THEME = Theme(
    {
        "lk.ok": "bold green",
        "lk.error": "bold red",
        "lk.warning": "bold yellow",
        "lk.op": "bold cyan",
        "lk.key": "dim",
        "lk.id": "bold blue",
        "lk.pattern": "bold",
        "lk.list": "magenta",
        "lk.match": "bold green",
        "lk.nomatch": "dim",
        "lk.source.user": "green",
        "lk.source.generated": "cyan",
        "lk.source.backend": "yellow",
    }
)

_SOURCE_STYLES: dict[str, str] = {
    "user": "lk.source.user",
    "generated": "lk.source.generated",
    "backend": "lk.source.backend",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Console writing to an in-memory buffer.

    Args:
        no_color: Disable ANSI escape codes.
        width: Fixed width; defaults to 120 so tables lay out the same
            everywhere.
    """
    return Console(
        file=StringIO(),
        theme=LISTKEEPER_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Text rendered so far into a console from :func:`create_console`."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_source(source: str) -> str:
    return _SOURCE_STYLES.get(source, "")
