"""AppContext: shared Click context for all commands.

Created once by the root group and handed to subcommands through
``@click.pass_obj``.  Owns logging setup, hands out the anchored config
structs, and routes results to stdout/stderr with the right exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tokenctl.config.logging import configure_logging
from tokenctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from tokenctl.config.models import BuildConfig, ResolverConfig
    from tokenctl.config.settings import TokenctlSettings
    from tokenctl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: TokenctlSettings) -> None:
        self.settings = settings
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def build_config(self) -> BuildConfig:
        return self.settings.build_config()

    @property
    def resolver_config(self) -> ResolverConfig:
        return self.settings.resolver_config()

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: stdout.  Warnings always go to stderr so piped output stays
          clean (in JSON mode they are already part of the payload).
        * Failure: stderr, exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        click.echo(output, err=not result.ok)
        if not settings.json_output:
            for warning in result.warnings:
                click.echo(f"WARNING: {warning}", err=True)
        if not result.ok:
            raise SystemExit(1)
