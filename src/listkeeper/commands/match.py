"""Commands: match a URL against a list, or against one pattern."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from listkeeper.commands._base import ListCommand
from listkeeper.domain.types import PatternType

if TYPE_CHECKING:
    from listkeeper.commands._context import AppContext


@click.command(
    cls=ListCommand,
    examples="""\
  listkeeper match https://www.example.com/page blocked
  listkeeper --json match https://news.example.co.uk/ allowed""",
)
@click.argument("url")
@click.argument("list_name")
@click.pass_obj
def match(app: AppContext, url: str, list_name: str) -> None:
    """First entry in LIST_NAME matching URL."""
    from listkeeper.services.matching import MatchService

    app.emit(MatchService(app.store).match_url(url, list_name))


@click.command(
    cls=ListCommand,
    examples="""\
  listkeeper check https://sub.example.com/ example.com --type domain
  listkeeper check https://x.com/a/b x.com/a/ --type host_path_prefix
  listkeeper check "https://a.test/?q=1" "q=\\d+" --type regex""",
)
@click.argument("url")
@click.argument("pattern")
@click.option(
    "--type",
    "pattern_type",
    type=click.Choice([t.value for t in PatternType]),
    required=True,
    help="How PATTERN is interpreted.",
)
@click.pass_obj
def check(app: AppContext, url: str, pattern: str, pattern_type: str) -> None:
    """Test URL against a single PATTERN without touching any list."""
    from listkeeper.services.matching import MatchService

    app.emit(MatchService(app.store).check_pattern(url, pattern, pattern_type))
