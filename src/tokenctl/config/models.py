"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, tokenctl.toml only contains
overrides.  A project that keeps raw tokens under ``sd4/all-tokens`` and
builds into ``build/`` needs only a ``[build] brands`` list.

These models are the explicit configuration structs handed to
:class:`~tokenctl.services.planner.BuildPlanner`,
:class:`~tokenctl.services.build.BuildService`, and
:class:`~tokenctl.services.resolver.TokenResolver`.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from tokenctl.domain.types import (
    DEFAULT_BRANDS,
    DEFAULT_PLATFORMS,
    DEFAULT_THEMES,
    LookupFormat,
    Platform,
    WebFormat,
)


class BuildConfig(BaseModel):
    """[build] section."""

    model_config = {"frozen": True}

    brands: tuple[str, ...] = DEFAULT_BRANDS
    themes: tuple[str, ...] = DEFAULT_THEMES
    platforms: tuple[Platform, ...] = DEFAULT_PLATFORMS
    web_formats: tuple[WebFormat, ...] = tuple(WebFormat)
    source_root: Path = Path("sd4/all-tokens")
    build_root: Path = Path("build")
    templates_dir: Path | None = None
    fail_fast: bool = False
    atomic_publish: bool = True
    publish_partial: bool = False
    dedupe_themes: bool = False

    @field_validator("brands", "themes")
    @classmethod
    def _unique(cls, values: tuple[str, ...]) -> tuple[str, ...]:
        seen: set[str] = set()
        for value in values:
            if not value or "/" in value or "\\" in value or value in (".", ".."):
                msg = f"Invalid identifier: {value!r}"
                raise ValueError(msg)
            if value in seen:
                msg = f"Duplicate identifier: {value!r}"
                raise ValueError(msg)
            seen.add(value)
        return values

    def anchored(self, root: Path) -> BuildConfig:
        """Return a copy with relative paths resolved against *root*."""
        return self.model_copy(
            update={
                "source_root": _anchor(self.source_root, root),
                "build_root": _anchor(self.build_root, root),
                "templates_dir": (
                    _anchor(self.templates_dir, root) if self.templates_dir is not None else None
                ),
            }
        )


class ResolverConfig(BaseModel):
    """[resolver] section.

    ``build_root`` defaults to the [build] section's when left unset.
    """

    model_config = {"frozen": True}

    build_root: Path | None = None
    formats: tuple[str, ...] = tuple(LookupFormat)

    @property
    def global_dir(self) -> Path:
        """Directory holding ``<brand>/<format>/`` web-global artifacts."""
        return (self.build_root or Path("build")) / "web" / "global"

    def anchored(self, root: Path, *, default_build_root: Path) -> ResolverConfig:
        """Return a copy with ``build_root`` filled in and resolved against *root*."""
        build_root = self.build_root if self.build_root is not None else default_build_root
        return self.model_copy(update={"build_root": _anchor(build_root, root)})


class TokenctlConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    build: BuildConfig = Field(default_factory=BuildConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)


def _anchor(path: Path, root: Path) -> Path:
    return path if path.is_absolute() else root / path
