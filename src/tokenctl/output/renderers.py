"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO); the caller
extracts the text via ``get_output(console)``.  Renderers are dispatched by
``result.op`` in :func:`render_result`; unknown ops fall through to a
generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from tokenctl.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from tokenctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


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
    """Render minimal output for ``--quiet`` mode: one value per line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    data = result.data
    if result.op == "resolve_token":
        return str(data.get("path", ""))
    if result.op == "list_brands":
        return "\n".join(data.get("brands", []))
    if result.op == "list_token_types":
        return "\n".join(data.get("token_types", []))
    if result.op == "inventory":
        return "\n".join(entry["brand"] for entry in data.get("brands", []))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="tok.ok"), Text(f"  {result.op}", style="tok.op"))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    styles = {"path": "tok.path", "build_root": "tok.path", "brand": "tok.brand"}
    k = Text(f"  {key}: ", style="tok.key")
    if isinstance(value, (dict, list)):
        value = _json.dumps(value, separators=(",", ":"))
    console.print(k, Text(str(value), style=styles.get(key, "")), sep="")


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(f"    {k}: {v}")


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    code = f" [{err.code}]" if err else ""
    console.print(
        Text("ERROR", style="tok.error"),
        Text(f"  {result.op}", style="tok.op"),
        Text(code, style="tok.key"),
        Text(f": {msg}"),
        sep="",
    )
    if err is None:
        return

    available = err.detail.get("available_token_types")
    if available is not None:
        listed = ", ".join(available) if available else "(none)"
        console.print(f"  available token types: {listed}")
    if "expected_path" in err.detail:
        console.print(Text(f"  expected: {err.detail['expected_path']}", style="tok.path"))
    for failure in err.detail.get("failures", []):
        console.print(
            Text("  failed ", style="tok.error"),
            Text(f"{failure['brand']}/{failure['platform']}: {failure['error']}"),
            sep="",
        )

    if verbose:
        shown = {"available_token_types", "expected_path", "failures"}
        extra = {k: v for k, v in err.detail.items() if k not in shown}
        if extra:
            console.print(Text("  detail:", style="dim"))
            for k, v in extra.items():
                console.print(Text(f"    {k}: {v}"))
    if result.op == "build_tokens" and result.data:
        _render_build(result, console, verbose=verbose, status=False)


# ── Build renderers ───────────────────────────────────────────────────


def _render_build(
    result: ServiceResult,
    console: Console,
    *,
    verbose: bool = False,
    status: bool = True,
) -> None:
    """Render build_tokens: one row per completed cell."""
    d = result.data
    if status:
        _status_line(console, result)
    _field(console, "build_root", d.get("build_root", ""))
    _field(console, "published", d.get("published", False))

    cells = d.get("cells", [])
    if cells:
        table = Table(show_header=True, pad_edge=False, expand=False)
        table.add_column("Brand", style="tok.brand", no_wrap=True)
        table.add_column("Platform", style="tok.platform")
        table.add_column("Files", style="tok.count", justify="right")
        for cell in cells:
            table.add_row(cell["brand"], cell["platform"], str(cell["files"]))
        console.print(table)

    for skip in d.get("skipped", []):
        console.print(f"  skipped {skip['brand']}/{skip['platform']} (themes already built)")
    if verbose:
        for brand, categories in d.get("categories", {}).items():
            console.print(f"  {brand} categories: {', '.join(categories) or '(none)'}")
    console.print(f"{len(cells)} cells, {d.get('file_count', 0)} files")


def _render_plan(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render plan_build: the descriptor as indented JSON."""
    d = result.data
    _status_line(console, result)
    _field(console, "brand", d["brand"])
    _field(console, "platform", d["platform"])
    _field(console, "file_count", d["file_count"])
    console.print(_json.dumps(d["descriptor"], indent=2), markup=False)


# ── Lookup renderers ──────────────────────────────────────────────────


def _render_brands(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    brands = result.data.get("brands", [])
    if not brands:
        console.print("No brands found.")
        return
    for brand in brands:
        console.print(Text(brand, style="tok.brand"))


def _render_token_types(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    d = result.data
    types = d.get("token_types", [])
    heading = Text.assemble(
        (d.get("brand", ""), "tok.brand"), " / ", (d.get("format", ""), "tok.format")
    )
    console.print(heading)
    if not types:
        console.print("  No token types found.")
        return
    for token_type in types:
        console.print(f"  {token_type}")


def _render_resolve(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    for key in ("path", "brand", "token_type", "format", "content_type"):
        _field(console, key, d[key])
    if d.get("fallback"):
        console.print(Text("  served by the generic tokens file", style="tok.warning"))


def _render_inventory(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    tree = Tree(Text(str(d.get("global_dir", "")), style="tok.path"))
    for entry in d.get("brands", []):
        formats = entry.get("formats", {})
        branch = tree.add(Text(f"{entry['brand']} ({len(formats)} formats)", style="tok.brand"))
        for fmt, files in formats.items():
            leaf = branch.add(Text(f"{fmt} ({len(files)} files)", style="tok.format"))
            if verbose:
                for name in files:
                    leaf.add(name)
    console.print(tree)
    if not d.get("brands"):
        console.print("No brands found.")


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "build_tokens": _render_build,
    "plan_build": _render_plan,
    "list_brands": _render_brands,
    "list_token_types": _render_token_types,
    "resolve_token": _render_resolve,
    "inventory": _render_inventory,
}
