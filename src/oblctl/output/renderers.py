"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from oblctl.domain.money import MINOR_UNITS_PER_MAJOR
from oblctl.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from oblctl.services.result import ServiceResult


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
    """Render minimal output for ``--quiet`` mode.

    One value per line so the output pipes cleanly into other tools.
    """
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    data = result.data
    if result.op == "me":
        return str(data.get("me", ""))
    if result.op == "peers":
        return "\n".join(data.get("peers", []))
    if result.op == "owed_per_currency":
        return "\n".join(f"{cur} {qty}" for cur, qty in data.get("owed", {}).items())
    if result.op == "list_obligations":
        return "\n".join(str(item["linear_id"]) for item in data.get("items", []))
    if result.op == "issue_obligation":
        return str(data.get("tx_id", ""))

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def format_minor(quantity: int) -> str:
    """``500`` -> ``"5.00"``."""
    return f"{Decimal(quantity) / MINOR_UNITS_PER_MAJOR:.2f}"


def _party_label(party: dict[str, Any]) -> str:
    name = party.get("name")
    return str(name) if name else str(party.get("owning_key", "?"))


def _money_label(money: dict[str, Any]) -> str:
    return f"{format_minor(int(money['quantity']))} {money['currency']}"


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    label = Text("OK", style="obl.ok")
    op = Text(f"  {result.op}", style="obl.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="obl.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="obl.id")
    elif key in ("me", "lender", "borrower"):
        v = Text(str(value), style="obl.party")
    else:
        v = Text(str(value))
    console.print(k, v, sep="", end="")
    console.print()


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
    label = Text("ERROR", style="obl.error")
    op = Text(f"  {result.op}", style="obl.op")
    sep = Text(" — ")
    console.print(label, op, sep, msg)

    if verbose and err:
        console.print(Text(f"  code: {err.code} ({err.kind})", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Node renderers ────────────────────────────────────────────────────


def _render_me(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "me", result.data.get("me", ""))
    if verbose:
        _render_meta(console, result)


def _render_peers(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    peers = result.data.get("peers", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Peer", style="obl.party")
    for name in peers:
        table.add_row(name)
    console.print(table)
    console.print(f"\n{len(peers)} peers")
    if verbose:
        _render_meta(console, result)


# ── Obligation renderers ──────────────────────────────────────────────


def _render_owed(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render per-currency totals."""
    owed: dict[str, int] = result.data.get("owed", {})
    if not owed:
        _status_line(console, result)
        console.print(Text("  nothing owed", style="dim"))
        return

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Currency", style="obl.currency")
    table.add_column("Owed", style="obl.amount", justify="right")
    if verbose:
        table.add_column("Minor units", style="dim", justify="right")
    for currency, quantity in owed.items():
        row = [currency, format_minor(quantity)]
        if verbose:
            row.append(str(quantity))
        table.add_row(*row)
    console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_obligation_table(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    """Render list_obligations results as a table."""
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="obl.id", no_wrap=True)
    table.add_column("Borrower", style="obl.party")
    table.add_column("Lender", style="obl.party")
    table.add_column("Amount", style="obl.amount", justify="right")
    table.add_column("Paid", justify="right")

    for item in items:
        table.add_row(
            str(item.get("linear_id", "")),
            _party_label(item["borrower"]),
            _party_label(item["lender"]),
            _money_label(item["amount"]),
            _money_label(item["paid"]),
        )

    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} obligations")
    if verbose:
        _render_meta(console, result)


def _render_issued(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render an issued obligation as a panel, followed by the confirmation message."""
    _status_line(console, result)
    d = result.data
    obligation = d.get("obligation", {})
    lines = [
        f"lender:   {_party_label(obligation.get('lender', {}))}",
        f"borrower: {_party_label(obligation.get('borrower', {}))}",
        f"amount:   {_money_label(obligation['amount'])}" if "amount" in obligation else "",
        f"id:       {obligation.get('linear_id', '?')}",
    ]
    console.print(
        Panel(
            "\n".join(line for line in lines if line),
            title=f"tx {d.get('tx_id', '?')}",
            border_style="obl.ok",
            expand=False,
        )
    )
    if d.get("message"):
        console.print(Text(d["message"]))
    if verbose:
        _render_meta(console, result)


def _render_init(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("me", "path"):
        if key in result.data:
            _field(console, key, result.data[key])
    peers = result.data.get("peers", [])
    _field(console, "peers", ", ".join(peers) if peers else "(none)")


# ── Generic fallback ──────────────────────────────────────────────────


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


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Node
    "me": _render_me,
    "peers": _render_peers,
    # Obligations
    "owed_per_currency": _render_owed,
    "list_obligations": _render_obligation_table,
    "issue_obligation": _render_issued,
    # Ledger
    "init_ledger": _render_init,
}
