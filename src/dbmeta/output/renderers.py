"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`;
unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from dbmeta.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from dbmeta.services.result import ServiceResult


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="dbm.ok"), Text(f"  {result.op}", style="dbm.op"))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="dbm.key")
    if key in ("output_file", "script", "database"):
        v = Text(str(value), style="dbm.path")
    elif key.endswith("_count") or key in ("executed", "skipped"):
        v = Text(str(value), style="dbm.count")
    else:
        v = Text(str(value))
    console.print(k, v, sep="")


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta (verbose only); telemetry becomes a timing tree."""
    if not result.meta:
        return

    console.print()
    for key, value in result.meta.items():
        if key == "telemetry":
            tree = Tree(_span_label(value), guide_style="dim")
            _add_span_children(tree, value)
            console.print(tree)
        else:
            console.print(Text(f"  {key}: {value}", style="dim"))


def _span_label(span: dict[str, Any]) -> Text:
    duration = span.get("duration_ms", 0.0)
    style = "bold red" if duration > 1000 else "yellow" if duration > 100 else "dim"
    label = Text.assemble((f"{duration:8.2f}ms", style), f"  {span.get('name', '?')}")
    annotations = span.get("annotations") or {}
    if annotations:
        label.append("  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")")
    return label


def _add_span_children(node: Tree, span: dict[str, Any]) -> None:
    for child in span.get("children", []):
        _add_span_children(node.add(_span_label(child)), child)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text("ERROR", style="dbm.error"), Text(f"  {result.op}", style="dbm.op"), Text(" — "), msg
    )

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            if v is not None:
                console.print(f"    {k}: {v}")


# ── Operation renderers ──────────────────────────────────────────────


def _render_export(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("output_file", "domain_count", "table_count", "procedure_count"):
        if key in result.data:
            _field(console, key, result.data[key])
    if verbose:
        _render_meta(console, result)


def _render_apply(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render update_db / build_db results."""
    _status_line(console, result)
    for key in ("database", "script", "executed", "skipped"):
        if key in result.data:
            _field(console, key, result.data[key])
    if verbose:
        _render_meta(console, result)


def _render_plan(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the dry-run statement list as a table."""
    _status_line(console, result)
    _field(console, "script", result.data.get("script", ""))
    _field(console, "statement_count", result.data.get("statement_count", 0))

    statements = result.data.get("statements", [])
    if statements:
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("#", justify="right", no_wrap=True)
        table.add_column("Statement")
        for item in statements:
            style = "dbm.skipped" if item.get("skipped") else ""
            label = f"{item['preview']}  (skipped)" if item.get("skipped") else item["preview"]
            table.add_row(str(item["index"] + 1), Text(label, style=style))
        console.print()
        console.print(table)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS: dict[str, Any] = {
    "export_scripts": _render_export,
    "update_db": _render_apply,
    "build_db": _render_apply,
    "plan_update": _render_plan,
}
