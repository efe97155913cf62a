"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from resquery.output.console import create_console, get_output, style_for_kind

if TYPE_CHECKING:
    from rich.console import Console

    from resquery.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
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

    d = result.data
    if result.op == "parse":
        return "\n".join(spec["text"] for spec in d.get("specs", []))
    if result.op == "resolve":
        return "\n".join(str(n) for n in d.get("numbers", []))
    if result.op == "fetch":
        return "\n".join(str(item["no"]) for item in d.get("items", []))
    if result.op == "latest":
        return str(d.get("max_value", 0))
    if result.op == "reply":
        return "\n\n".join(d.get("messages", []))
    return f"OK: {result.op}"


def compress_numbers(numbers: Sequence[int]) -> str:
    """Collapse ascending *numbers* into range syntax, e.g. ``1-3,5,7-8``."""
    parts: list[str] = []
    i = 0
    while i < len(numbers):
        j = i
        while j + 1 < len(numbers) and numbers[j + 1] == numbers[j] + 1:
            j += 1
        parts.append(str(numbers[i]) if i == j else f"{numbers[i]}-{numbers[j]}")
        i = j + 1
    return ",".join(parts)


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    label = Text("OK", style="res.ok")
    op = Text(f"  {result.op}", style="res.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="res.key")
    v = Text(str(value), style="res.no" if key in ("no", "max_value") else "")
    console.print(Text.assemble(k, v))


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="res.error")
    op = Text(f"  {result.op}", style="res.op")
    sep = Text(" — ")
    console.print(label, op, sep, msg)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")

    # Reply failures still carry the text the bot would send.
    for message in result.data.get("messages", []):
        console.print(f"  {message}", markup=False)


# ── Range renderers ───────────────────────────────────────────────────


def _render_parse(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render parsed specs as a table, one row per token."""
    _status_line(console, result)
    d = result.data
    _field(console, "expression", d.get("expression", ""))
    _field(console, "needs_upper_bound", d.get("needs_upper_bound", False))

    specs = d.get("specs", [])
    if specs:
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("Token", no_wrap=True)
        table.add_column("Kind")
        table.add_column("Start", justify="right")
        table.add_column("End", justify="right")
        table.add_column("Digits", justify="right")
        for spec in specs:
            end = spec.get("end")
            digits = spec.get("digit_count")
            table.add_row(
                Text(str(spec["text"]), style=style_for_kind(spec["kind"])),
                spec["kind"],
                str(spec["start"]),
                "" if end is None else str(end),
                "" if digits is None else str(digits),
            )
        console.print(table)
    console.print(f"\n{d.get('count', len(specs))} specs")
    if verbose:
        _render_meta(console, result)


def _render_resolve(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render resolved numbers in compressed range form."""
    _status_line(console, result)
    d = result.data
    numbers = d.get("numbers", [])
    _field(console, "expression", d.get("expression", ""))
    if d.get("max_value") is not None:
        _field(console, "max_value", d["max_value"])
    _field(console, "count", d.get("count", len(numbers)))
    if numbers:
        _field(console, "numbers", compress_numbers(numbers))
    if verbose:
        _render_meta(console, result)


# ── Post renderers ────────────────────────────────────────────────────


def _render_posts(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render fetched posts: board-style header line, then body."""
    items = result.data.get("items", [])
    for item in items:
        header = Text()
        header.append(str(item["no"]), style="res.no")
        header.append(" ")
        header.append(str(item["name_and_trip"]), style="res.name")
        header.append(" ")
        header.append(str(item["datetime_text"]), style="res.date")
        header.append(" ID: ")
        header.append(str(item["id"]), style="res.author")
        console.print(header)
        console.print(str(item["main_text"]), markup=False, soft_wrap=True)
        if item.get("oekaki_id") is not None:
            console.print(Text(f"[oekaki {item['oekaki_id']}]", style="dim"))
        console.print()

    requested = len(result.data.get("numbers", []))
    console.print(f"{result.data.get('count', len(items))} posts ({requested} requested)")
    if verbose:
        _render_meta(console, result)


def _render_reply(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render reply messages exactly as they would be sent."""
    messages = result.data.get("messages", [])
    total = len(messages)
    for index, message in enumerate(messages, start=1):
        if total > 1:
            console.print(Text(f"── message {index}/{total} ──", style="dim"))
        console.print(message, markup=False, soft_wrap=True)
    if verbose:
        _render_meta(console, result)


# ── Store renderers ──────────────────────────────────────────────────


def _render_store(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render init/load/latest results as key-value fields."""
    _status_line(console, result)
    for key in ("database_url", "path", "inserted", "total", "max_value"):
        if key in result.data:
            _field(console, key, result.data[key])
    if verbose:
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":"), ensure_ascii=False))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Ranges
    "parse": _render_parse,
    "resolve": _render_resolve,
    # Posts
    "fetch": _render_posts,
    "reply": _render_reply,
    # Store
    "init_database": _render_store,
    "load_posts": _render_store,
    "latest": _render_store,
}
