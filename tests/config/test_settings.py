"""Tests for TokenctlSettings: CLI flags, env vars, and TOML in one object."""

from __future__ import annotations

from pathlib import Path

import click
import pytest

from tokenctl.config.settings import TokenctlSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("TOKENCTL_CONFIG", "TOKENCTL_BUILD__FAIL_FAST", "TOKENCTL_QUIET"):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = TokenctlSettings.from_cli(project_root=tmp_path)
        assert settings.project_root == tmp_path.resolve()
        assert settings.json_output is False
        assert settings.build.source_root == Path("sd4/all-tokens")
        assert settings.resolver.build_root is None

    def test_frozen(self, tmp_path: Path) -> None:
        settings = TokenctlSettings.from_cli(project_root=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]


class TestTomlSource:
    def test_loads_sections(self, tmp_path: Path) -> None:
        (tmp_path / "tokenctl.toml").write_text(
            '[build]\nbrands = ["acme", "zeta"]\nfail_fast = true\n'
            '[resolver]\nformats = ["css", "json"]\n'
        )
        settings = TokenctlSettings.from_cli(project_root=tmp_path)
        assert settings.build.brands == ("acme", "zeta")
        assert settings.build.fail_fast is True
        assert settings.build.atomic_publish is True
        assert settings.resolver.formats == ("css", "json")

    def test_discovered_by_walk_up(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "tokenctl.toml").write_text('[build]\nbrands = ["acme"]\n')
        nested = tmp_path / "packages" / "web"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        settings = TokenctlSettings.from_cli()
        assert settings.build.brands == ("acme",)
        assert settings.project_root == tmp_path.resolve()

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "conf" / "tokens.toml"
        custom.parent.mkdir()
        custom.write_text('[build]\nbrands = ["custom"]\n')
        settings = TokenctlSettings.from_cli(config_path=str(custom), project_root=tmp_path)
        assert settings.build.brands == ("custom",)
        assert settings.config_path == custom

    def test_missing_explicit_config(self, tmp_path: Path) -> None:
        with pytest.raises(click.ClickException, match="not found"):
            TokenctlSettings.from_cli(config_path=str(tmp_path / "nope.toml"))

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "tokenctl.toml").write_text("[build\nbrands = ")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            TokenctlSettings.from_cli(project_root=tmp_path)


class TestPriority:
    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "tokenctl.toml").write_text("[build]\nfail_fast = false\n")
        monkeypatch.setenv("TOKENCTL_BUILD__FAIL_FAST", "true")
        settings = TokenctlSettings.from_cli(project_root=tmp_path)
        assert settings.build.fail_fast is True

    def test_cli_flags_override(self, tmp_path: Path) -> None:
        settings = TokenctlSettings.from_cli(
            project_root=tmp_path, json_output=True, quiet=True, verbose=True
        )
        assert settings.json_output is True
        assert settings.quiet is True
        assert settings.verbose is True


class TestAnchoredConfigs:
    def test_build_config_anchored(self, tmp_path: Path) -> None:
        (tmp_path / "tokenctl.toml").write_text('[build]\nbuild_root = "dist"\n')
        settings = TokenctlSettings.from_cli(project_root=tmp_path)
        cfg = settings.build_config()
        assert cfg.build_root == tmp_path.resolve() / "dist"
        assert cfg.source_root == tmp_path.resolve() / "sd4" / "all-tokens"

    def test_resolver_shares_build_root(self, tmp_path: Path) -> None:
        (tmp_path / "tokenctl.toml").write_text('[build]\nbuild_root = "dist"\n')
        settings = TokenctlSettings.from_cli(project_root=tmp_path)
        assert settings.resolver_config().global_dir == (
            tmp_path.resolve() / "dist" / "web" / "global"
        )
