"""Commands: run the build matrix and inspect per-cell descriptors."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tokenctl.commands._base import TokCommand
from tokenctl.domain.types import Platform

if TYPE_CHECKING:
    from tokenctl.commands._context import AppContext

_PLATFORM_CHOICE = click.Choice([p.value for p in Platform])


@click.command(
    cls=TokCommand,
    examples="""\
  tokenctl build
  tokenctl build --brand acme
  tokenctl build --brand acme --platform webGlobal --platform ios
  tokenctl build --fail-fast
  tokenctl --json build""",
)
@click.option("--brand", "brands", multiple=True, help="Only build this brand (repeatable).")
@click.option(
    "--platform",
    "platforms",
    multiple=True,
    type=_PLATFORM_CHOICE,
    help="Only build this platform (repeatable).",
)
@click.option(
    "--fail-fast",
    is_flag=True,
    help="Stop at the first failing cell instead of collecting failures.",
)
@click.pass_obj
def build(
    app: AppContext,
    brands: tuple[str, ...],
    platforms: tuple[str, ...],
    fail_fast: bool,
) -> None:
    """Compile every configured brand for every configured platform."""
    from tokenctl.services.build import BuildService

    svc = BuildService(app.build_config)
    app.emit(
        svc.build(
            brands=list(brands) or None,
            platforms=list(platforms) or None,
            fail_fast=True if fail_fast else None,
        )
    )


@click.command(
    cls=TokCommand,
    examples="""\
  tokenctl plan acme webGlobal
  tokenctl --json plan acme android""",
)
@click.argument("brand")
@click.argument("platform", type=_PLATFORM_CHOICE)
@click.pass_obj
def plan(app: AppContext, brand: str, platform: str) -> None:
    """Show the build descriptor for one brand and platform."""
    from tokenctl.services.planner import BuildPlanner

    app.emit(BuildPlanner(app.build_config).plan(brand, platform))
