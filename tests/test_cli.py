"""Tests for the root CLI group and global flags."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from tokenctl import __version__
from tokenctl.cli import cli


class TestRootGroup:
    def test_version(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    @pytest.mark.usefixtures("project")
    def test_no_subcommand_prints_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, [])
        assert result.exit_code == 0
        for name in ("build", "plan", "tokens"):
            assert name in result.output

    @pytest.mark.usefixtures("project")
    def test_help_lists_global_flags(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--help"])
        for flag in ("--json", "--quiet", "--verbose", "--log-json", "--config"):
            assert flag in result.output

    def test_missing_config_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["-c", str(tmp_path / "nope.toml"), "tokens", "brands"])
        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_invalid_toml(
        self, cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "tokenctl.toml").write_text("[build\n")
        monkeypatch.delenv("TOKENCTL_CONFIG", raising=False)
        monkeypatch.chdir(tmp_path)
        result = cli_runner.invoke(cli, ["tokens", "brands"])
        assert result.exit_code == 1
        assert "Invalid TOML" in result.output

    @pytest.mark.usefixtures("project")
    def test_explicit_config(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        other = tmp_path / "conf" / "alt.toml"
        other.parent.mkdir()
        other.write_text('[build]\nbrands = ["zeta"]\n')
        result = cli_runner.invoke(cli, ["-c", str(other), "plan", "acme", "ios"])
        assert result.exit_code == 1
        assert "UNKNOWN_BRAND" in result.output

    @pytest.mark.usefixtures("project")
    def test_verbose_logs_to_stderr(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-v", "--log-json", "build", "--platform", "ios"])
        assert result.exit_code == 0, result.output
        assert '"event": "build.start"' in result.output
        assert '"event": "build.complete"' in result.output
