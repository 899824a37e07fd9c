"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a StringIO-backed Console; :func:`render_result`
picks one by ``result.op`` and returns the text.  Unknown ops fall back
to a key-value listing.

User-supplied strings (patterns, list names, metadata) always go through
``Text`` so brackets in a regex are never read as Rich markup.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from listkeeper.output.console import create_console, get_output, style_for_source

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from listkeeper.services.result import ServiceResult

    Renderer = Callable[[ServiceResult, Console], None]


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult as human-readable text.

    Plain text comes out whenever the output is not a terminal, which
    covers CliRunner and pipes.
    """
    console = create_console()
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console)
        if verbose:
            _render_meta(console, result)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output for ``--quiet``: ids or names for listings."""
    if not result.ok:
        return _error_line(result).plain

    entries = result.data.get("entries")
    if isinstance(entries, list):
        return "\n".join(str(entry["id"]) for entry in entries if "id" in entry)
    if result.op == "list_names":
        return "\n".join(result.data.get("lists", []))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text.assemble(("OK", "lk.ok"), ": ", (result.op, "lk.op")))


def _error_line(result: ServiceResult) -> Text:
    err = result.error
    line = Text.assemble(("ERROR", "lk.error"), ": ", (result.op, "lk.op"))
    if err is not None:
        line.append(f" [{err.code}]")
    line.append(": ")
    line.append(err.message if err else "Unknown error")
    return line


def _field(console: Console, key: str, value: Any) -> None:
    """Print one indented key-value line."""
    if isinstance(value, (dict, list)):
        value = json.dumps(value, separators=(",", ":"))
    if key == "id" or key.endswith("_id"):
        style = "lk.id"
    elif key == "list_name":
        style = "lk.list"
    elif key == "pattern":
        style = "lk.pattern"
    else:
        style = ""
    console.print(Text.assemble((f"  {key}: ", "lk.key"), (str(value), style)))


def _entry_line(entry: dict[str, Any]) -> Text:
    source = str(entry.get("source", ""))
    line = Text.assemble(
        (f"[{entry.get('id')}]", "lk.id"),
        " ",
        (str(entry.get("pattern", "")), "lk.pattern"),
        f" ({entry.get('pattern_type')}, ",
        (source, style_for_source(source)),
        ")",
    )
    category = (entry.get("metadata") or {}).get("category")
    if category:
        line.append(f" #{category}")
    return line


def _entry_table(entries: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="lk.id", no_wrap=True, justify="right")
    table.add_column("Pattern", style="lk.pattern")
    table.add_column("Type")
    table.add_column("Source")
    table.add_column("Category")
    for entry in entries:
        source = str(entry.get("source", ""))
        metadata = entry.get("metadata") or {}
        table.add_row(
            Text(str(entry.get("id", ""))),
            Text(str(entry.get("pattern", ""))),
            Text(str(entry.get("pattern_type", ""))),
            Text(source, style=style_for_source(source)),
            Text(str(metadata.get("category") or "")),
        )
    return table


def _count_line(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Meta block with the telemetry span tree (``--verbose`` only)."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for key, value in result.meta.items():
        if key == "telemetry":
            _render_span(console, value, indent=4)
        else:
            console.print(Text(f"    {key}: {value}"))


def _render_span(console: Console, span: dict[str, Any], indent: int) -> None:
    duration = float(span.get("duration_ms", 0.0))
    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"
    line = Text(" " * indent)
    line.append(f"{duration:>8.2f}ms", style=style)
    line.append(f"  {span.get('name', '?')}")
    annotations = span.get("annotations") or {}
    if annotations:
        line.append(f"  ({', '.join(f'{k}={v}' for k, v in annotations.items())})")
    console.print(line)
    for child in span.get("children", []):
        _render_span(console, child, indent + 4)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    console.print(_error_line(result))
    err = result.error
    if verbose and err is not None and err.detail:
        console.print(Text("  detail:", style="dim"))
        for key, value in err.detail.items():
            console.print(Text(f"    {key}: {value}"))


# ── Entry renderers ───────────────────────────────────────────────────


def _render_entry(result: ServiceResult, console: Console) -> None:
    """create/get/update/find: status, headline fields, then an entry panel."""
    _status_line(console, result)
    data = result.data
    for key in ("id", "found", "fields_changed"):
        if key in data:
            _field(console, key, data[key])
    entry = data.get("entry")
    if not entry:
        return

    metadata = dict(entry.get("metadata") or {})
    body = Text()
    body.append_text(Text.assemble(("list: ", "lk.key"), (entry["list_name"], "lk.list")))
    body.append(f"\ntype: {entry['pattern_type']}")
    source = str(entry["source"])
    body.append_text(Text.assemble("\nsource: ", (source, style_for_source(source))))
    tags = metadata.pop("tags", None)
    if tags:
        body.append(f"\ntags: {', '.join(str(tag) for tag in tags)}")
    for key, value in metadata.items():
        body.append(f"\n{key}: {value}")

    title = Text.assemble((f"[{entry['id']}]", "lk.id"), " ", (entry["pattern"], "lk.pattern"))
    console.print(Panel(body, title=title, border_style="dim", expand=False))


def _render_entries(result: ServiceResult, console: Console) -> None:
    """get_entries: one table row per entry."""
    _status_line(console, result)
    entries = result.data.get("entries", [])
    _field(console, "list_name", result.data.get("list_name", ""))
    if entries:
        console.print(_entry_table(entries))
    console.print(_count_line(len(entries), "entry", "entries"))


def _render_list_names(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    names = result.data.get("lists", [])
    if names:
        table = Table(show_header=True, pad_edge=False, expand=False)
        table.add_column("List", style="lk.list")
        for name in names:
            table.add_row(Text(name))
        console.print(table)
    console.print(_count_line(len(names), "list", "lists"))


# ── Matching renderers ────────────────────────────────────────────────


def _render_match(result: ServiceResult, console: Console) -> None:
    """match_url/check_pattern: the verdict first, then what it was tested against."""
    _status_line(console, result)
    data = result.data
    matched = bool(data.get("matched"))
    verdict = Text("MATCH", style="lk.match") if matched else Text("NO MATCH", style="lk.nomatch")
    console.print(Text.assemble(("  ", ""), verdict, "  ", data.get("url", "")))
    if "list_name" in data:
        _field(console, "list_name", data["list_name"])
    if "pattern" in data:
        _field(console, "pattern", data["pattern"])
        _field(console, "pattern_type", data.get("pattern_type", ""))
    entry = data.get("entry")
    if entry:
        console.print(Text.assemble(("  entry: ", "lk.key"), _entry_line(entry)))


# ── Merge / sync renderers ────────────────────────────────────────────


def _render_merge(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    data = result.data
    _field(console, "list_name", data.get("list_name", ""))
    for key in ("removed_backend", "replaced", "inserted", "skipped"):
        value = data.get(key, 0)
        _field(console, key, len(value) if isinstance(value, list) else value)


def _render_sync(result: ServiceResult, console: Console) -> None:
    """apply_backend_config/sync: one row per list in the payload."""
    _status_line(console, result)
    lists = result.data.get("lists", [])
    if lists:
        table = Table(show_header=True, pad_edge=False, expand=False)
        table.add_column("List", style="lk.list")
        table.add_column("Removed", justify="right")
        table.add_column("Replaced", justify="right")
        table.add_column("Inserted", justify="right")
        table.add_column("Skipped", justify="right")
        for summary in lists:
            table.add_row(
                Text(str(summary["list_name"])),
                str(summary.get("removed_backend", 0)),
                str(summary.get("replaced", 0)),
                str(summary.get("inserted", 0)),
                str(summary.get("skipped", 0)),
            )
        console.print(table)
    console.print(_count_line(len(result.data.get("applied", [])), "list", "lists") + " applied")


# ── Transfer renderers ────────────────────────────────────────────────


def _render_export(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    for key in ("list_name", "count", "output"):
        if key in result.data:
            _field(console, key, result.data[key])


def _render_import(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    data = result.data
    _field(console, "list_name", data.get("list_name", ""))
    _field(console, "imported", data.get("imported", 0))
    _field(console, "skipped", len(data.get("skipped", [])))
    _field(console, "source", data.get("source", ""))


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console) -> None:
    """Status line plus every data key."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Renderer] = {
    # Entries
    "create_entry": _render_entry,
    "get_entry": _render_entry,
    "update_entry": _render_entry,
    "find_entry": _render_entry,
    "get_entries": _render_entries,
    "list_names": _render_list_names,
    # Matching
    "match_url": _render_match,
    "check_pattern": _render_match,
    # Backend sync
    "merge_backend_list": _render_merge,
    "apply_backend_config": _render_sync,
    "sync": _render_sync,
    # Transfer
    "export_list": _render_export,
    "import_list": _render_import,
}
