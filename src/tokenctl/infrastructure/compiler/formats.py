"""Template-backed renderers turning transformed tokens into file contents.

Each :class:`~tokenctl.domain.types.FileFormat` maps to one Jinja2 template
under ``tokenctl/templates/formats/``.  A project can shadow any of them by
placing a file with the same relative name in its templates directory.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from jinja2 import TemplateError

from tokenctl.domain.errors import CompilationError
from tokenctl.domain.types import FileFormat
from tokenctl.infrastructure.templates import build_template_environment

Token = dict[str, Any]

NOTICE = "Do not edit directly, this file was auto-generated."

# format -> (template name, extra template context)
FORMAT_TEMPLATES: dict[FileFormat, tuple[str, dict[str, str]]] = {
    FileFormat.CSS_VARIABLES: ("css/variables.css", {}),
    FileFormat.SCSS_VARIABLES: ("scss/variables.scss", {}),
    FileFormat.JAVASCRIPT_MODULE_FLAT: ("javascript/module-flat.js", {}),
    FileFormat.JSON_FLAT: ("json/flat.json", {}),
    FileFormat.ANDROID_STRINGS: ("android/resources.xml", {"tag": "string"}),
    FileFormat.ANDROID_COLORS: ("android/resources.xml", {"tag": "color"}),
    FileFormat.ANDROID_FONT_DIMENS: ("android/resources.xml", {"tag": "dimen"}),
    FileFormat.IOS_MACROS: ("ios/macros.h", {}),
}


def scalar(value: Any) -> str:
    """Inline form of a token value; composite values become compact JSON."""
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def flat_json(tokens: list[Token]) -> str:
    """``{name: value}`` mapping of *tokens* as indented JSON."""
    mapping = {token["name"]: token["value"] for token in tokens}
    return json.dumps(mapping, indent=2, ensure_ascii=False)


class FormatRenderer:
    """Renders token lists with the template registered for each format."""

    def __init__(self, *, templates_dir: Path | None = None) -> None:
        self._env = build_template_environment("formats", override_dir=templates_dir)
        self._env.filters["scalar"] = scalar
        self._env.filters["flat_json"] = flat_json

    def supports(self, fmt: str) -> bool:
        return fmt in FORMAT_TEMPLATES

    def render(self, fmt: str, tokens: list[Token]) -> str:
        """Return the full file body for *tokens* in *fmt*.

        Raises:
            CompilationError: No template is registered for *fmt*, or the
                template failed to load or render.
        """
        if not self.supports(fmt):
            msg = f"No renderer registered for format {fmt!r}"
            raise CompilationError(msg)
        name, extra = FORMAT_TEMPLATES[FileFormat(fmt)]
        try:
            template = self._env.get_template(name)
            return template.render(tokens=tokens, notice=NOTICE, **extra)
        except TemplateError as exc:
            msg = f"Failed to render {fmt} with template {name}: {exc}"
            raise CompilationError(msg) from exc
