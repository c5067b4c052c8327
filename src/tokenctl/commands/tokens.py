"""Command group: discovery and lookups against the compiled web tree."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from tokenctl.commands._base import TokGroup
from tokenctl.services.resolver import TokenResolver
from tokenctl.services.result import ErrorCode, ServiceResult

if TYPE_CHECKING:
    from tokenctl.commands._context import AppContext

_TOKENS_EXAMPLES = """\
  tokenctl tokens brands
  tokenctl tokens types acme css
  tokenctl tokens resolve acme color css
  tokenctl tokens resolve acme css
  tokenctl tokens resolve acme tokens scss --raw > tokens.scss
  tokenctl tokens inventory"""


@click.group(cls=TokGroup, examples=_TOKENS_EXAMPLES)
@click.pass_obj
def tokens(app: AppContext) -> None:
    """List and resolve compiled token artifacts."""


@tokens.command(examples="  tokenctl tokens brands\n  tokenctl -q tokens brands")
@click.pass_obj
def brands(app: AppContext) -> None:
    """List brands with compiled web artifacts."""
    app.emit(TokenResolver(app.resolver_config).list_brands())


@tokens.command(examples="  tokenctl tokens types acme css\n  tokenctl --json tokens types acme js")
@click.argument("brand")
@click.argument("fmt", metavar="FORMAT")
@click.pass_obj
def types(app: AppContext, brand: str, fmt: str) -> None:
    """List token types available for BRAND in FORMAT."""
    app.emit(TokenResolver(app.resolver_config).list_token_types(brand, fmt))


@tokens.command(
    examples="""\
  tokenctl tokens resolve acme color css
  tokenctl tokens resolve acme tokens json
  tokenctl tokens resolve acme css
  tokenctl tokens resolve acme spacing scss --raw"""
)
@click.argument("args", nargs=-1, required=True, metavar="BRAND [TOKEN_TYPE] FORMAT")
@click.option("--raw", is_flag=True, help="Print the artifact body instead of its location.")
@click.pass_obj
def resolve(app: AppContext, args: tuple[str, ...], raw: bool) -> None:
    """Resolve a token lookup to a compiled artifact.

    With two arguments the best available file for the format is chosen.
    """
    if len(args) == 3:
        brand, token_type, fmt = args
    elif len(args) == 2:
        brand, fmt = args
        token_type = None
    else:
        raise click.UsageError("Expected BRAND [TOKEN_TYPE] FORMAT.")

    result = TokenResolver(app.resolver_config).resolve(brand, token_type, fmt)
    if raw and result.ok:
        path = Path(result.data["path"])
        try:
            body = path.read_text(encoding="utf-8")
        except OSError as exc:
            # the tree can be swapped by a rebuild between lookup and read
            result = ServiceResult.failure(
                "resolve_token",
                ErrorCode.READ_FAILED,
                f"Could not read {path}: {exc}",
                path=str(path),
            )
        else:
            click.echo(body, nl=False)
            return
    app.emit(result)


@tokens.command(examples="  tokenctl tokens inventory\n  tokenctl -v tokens inventory")
@click.pass_obj
def inventory(app: AppContext) -> None:
    """Show every brand, format, and compiled file."""
    app.emit(TokenResolver(app.resolver_config).inventory())
