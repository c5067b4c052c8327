"""Subcommand modules for tokenctl.

Provides register_commands(), which imports command modules lazily so
``tokenctl --help`` stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the ``tokens`` group and the standalone build commands."""
    from tokenctl.commands.build import build, plan
    from tokenctl.commands.tokens import tokens

    cli.add_command(tokens)
    cli.add_command(build)
    cli.add_command(plan)
