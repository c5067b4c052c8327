"""Jinja2 environments for artifact templates, with project overrides."""

from __future__ import annotations

from pathlib import Path

from jinja2 import (
    BaseLoader,
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    StrictUndefined,
    select_autoescape,
)


def build_template_environment(group: str, *, override_dir: Path | None = None) -> Environment:
    """Build an environment that prefers project templates over packaged ones.

    Overrides are looked up in ``<override_dir>/<group>/`` and then
    ``<override_dir>/`` so a project can drop in a single file such as
    ``css/variables.css`` without mirroring the whole tree.  XML templates
    are autoescaped; everything else is emitted verbatim.
    """
    loaders: list[BaseLoader] = []
    if override_dir is not None:
        loaders.append(FileSystemLoader([str(override_dir / group), str(override_dir)]))
    loaders.append(PackageLoader("tokenctl", f"templates/{group}"))
    return Environment(
        loader=ChoiceLoader(loaders),
        autoescape=select_autoescape(enabled_extensions=("xml",), default_for_string=False),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )
