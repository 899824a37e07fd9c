"""Rich/JSON output helpers.

The CLI renders a ServiceResult for humans (Rich tables and panels, see
:mod:`listkeeper.output.renderers`) or for machines (``--json``, the full
serialized result).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from listkeeper.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from listkeeper.services.result import ServiceResult


def format_result(
    result: ServiceResult,
    *,
    json_output: bool = False,
    quiet: bool = False,
    verbose: bool = False,
) -> str:
    """Format a ServiceResult for display.

    Args:
        result: The service result to format.
        json_output: Full JSON serialization (ignores *quiet*).
        quiet: Ids or names only for listings, else the status line.
        verbose: Append error detail and the telemetry tree.
    """
    if json_output:
        return result.model_dump_json(indent=2)
    if quiet:
        return render_quiet(result)
    return render_result(result, verbose=verbose)
