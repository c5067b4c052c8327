"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  (CLI flags passed by Click)
  2. Env vars     (``TOKENCTL_*`` prefix, ``__`` for nested sections)
  3. TOML file    (``tokenctl.toml`` discovered via walk-up)
  4. Code defaults baked into the section models

The planner, orchestrator, and resolver never read settings directly; they
receive the anchored :class:`BuildConfig` / :class:`ResolverConfig` built by
:meth:`TokenctlSettings.build_config` and :meth:`TokenctlSettings.resolver_config`.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from tokenctl.config import discovery
from tokenctl.config.models import BuildConfig, ResolverConfig
from tokenctl.domain.errors import ConfigurationError


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``tokenctl.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for the TOML path during construction.
_tls = threading.local()


class TokenctlSettings(BaseSettings):
    """Unified settings for the tokenctl CLI.

    Attributes:
        project_root: Directory relative config paths resolve against
            (parent of ``tokenctl.toml``, or CWD if no config found).
        config_path: The TOML file that was loaded, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "TOKENCTL_",
        "env_nested_delimiter": "__",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    build: BuildConfig = Field(default_factory=BuildConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | Path | None = None,
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> TokenctlSettings:
        """Construct settings from a CLI invocation.

        Discovers ``tokenctl.toml`` via walk-up from *project_root* (or
        CWD) unless *config_path* is given, and merges CLI flags as the
        highest-priority overrides.
        """
        try:
            toml_path = discovery.locate_config(config_path, project_root)
        except ConfigurationError as exc:
            raise click.ClickException(str(exc)) from exc
        resolved_root = (
            project_root.resolve() if project_root else discovery.project_root(toml_path)
        )

        _tls.toml_path = toml_path
        try:
            return cls(
                project_root=resolved_root,
                config_path=toml_path,
                **cli_flags,
            )
        finally:
            _tls.toml_path = None

    def build_config(self) -> BuildConfig:
        """The [build] section with paths anchored at the project root."""
        return self.build.anchored(self.project_root)

    def resolver_config(self) -> ResolverConfig:
        """The [resolver] section, sharing the build root unless overridden."""
        return self.resolver.anchored(
            self.project_root,
            default_build_root=self.build.build_root,
        )
