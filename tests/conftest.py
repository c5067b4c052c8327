"""Shared pytest fixtures and test helpers for tokenctl tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from tokenctl.config.models import BuildConfig, ResolverConfig
from tokenctl.domain.types import Platform

ACME_COLOR: dict[str, Any] = {
    "color": {
        "brand": {
            "primary": {"value": "#0055ff", "type": "color"},
            "accent": {"value": "{color.brand.primary}", "type": "color"},
        },
        "surface": {"value": "#ffffff", "type": "themeAcme"},
    }
}

ACME_SPACING: dict[str, Any] = {
    "spacing": {
        "small": {"value": "4px", "type": "dimension"},
        "large": {"value": "16px", "type": "dimension"},
    }
}


def write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def touch(path: Path, content: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def source_root(tmp_path: Path) -> Path:
    """Raw token sources for brand ``acme``: two categories and a stray file."""
    root = tmp_path / "sd4" / "all-tokens"
    write_json(root / "acme" / "color.json", ACME_COLOR)
    write_json(root / "acme" / "spacing.json", ACME_SPACING)
    touch(root / "acme" / "README.md", "not a category\n")
    return root


@pytest.fixture
def build_config(tmp_path: Path, source_root: Path) -> BuildConfig:
    """Build config for ``acme`` only, writing under ``<tmp>/build``."""
    return BuildConfig(
        brands=("acme",),
        themes=("themeAcme",),
        platforms=(Platform.WEB_GLOBAL, Platform.WEB_THEMES, Platform.IOS, Platform.ANDROID),
        source_root=source_root,
        build_root=tmp_path / "build",
    )


@pytest.fixture
def compiled_root(tmp_path: Path) -> Path:
    """A compiled build tree in the layout the resolver reads.

    ``acme`` has css (two categories plus the generic file) and js (color
    only); ``zeta`` has scss with only the generic file.
    """
    build = tmp_path / "compiled"
    global_dir = build / "web" / "global"
    touch(global_dir / "acme" / "css" / "acme-color.css", ":root { --color: #05f; }\n")
    touch(global_dir / "acme" / "css" / "acme-spacing.css", ":root { --spacing: 4px; }\n")
    touch(global_dir / "acme" / "css" / "tokens.css", ":root {}\n")
    touch(global_dir / "acme" / "js" / "acme-color.js", "module.exports = {};\n")
    touch(global_dir / "zeta" / "scss" / "tokens.scss", "$a: 1;\n")
    return build


@pytest.fixture
def resolver_config(compiled_root: Path) -> ResolverConfig:
    return ResolverConfig(build_root=compiled_root)


@pytest.fixture
def project(tmp_path: Path, source_root: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Project directory with a tokenctl.toml; CWD is changed into it."""
    (tmp_path / "tokenctl.toml").write_text(
        '[build]\nbrands = ["acme"]\nthemes = ["themeAcme"]\n',
        encoding="utf-8",
    )
    monkeypatch.delenv("TOKENCTL_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def json_payload(output: str) -> dict[str, Any]:
    """Extract the ``--json`` document from CLI output.

    Failures and log lines both go to stderr, which CliRunner merges into
    ``output``; the document is the block between a bare ``{`` and ``}`` line.
    """
    lines = output.splitlines()
    start = lines.index("{")
    end = len(lines) - 1 - lines[::-1].index("}")
    return json.loads("\n".join(lines[start : end + 1]))
