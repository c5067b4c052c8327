"""Tests for TokenResolver lookups and discovery listings."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from tests.conftest import touch
from tokenctl.config.models import BuildConfig, ResolverConfig
from tokenctl.services.build import BuildService
from tokenctl.services.resolver import (
    TokenResolver,
    content_type_for,
    token_type_from_filename,
)


@pytest.fixture
def resolver(resolver_config: ResolverConfig) -> TokenResolver:
    return TokenResolver(resolver_config)


class TestResolve:
    def test_primary_candidate(self, resolver: TokenResolver, compiled_root: Path) -> None:
        result = resolver.resolve("acme", "spacing", "css")
        assert result.ok
        assert result.op == "resolve_token"
        assert result.data["path"] == str(
            compiled_root / "web" / "global" / "acme" / "css" / "acme-spacing.css"
        )
        assert result.data["content_type"] == "text/css"
        assert result.data["fallback"] is False

    def test_missing_type_lists_available(self, resolver: TokenResolver) -> None:
        result = resolver.resolve("acme", "missing", "css")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"
        assert result.error.detail["available_token_types"] == ["color", "spacing", "tokens"]
        assert result.error.detail["expected_path"] == (
            "global/acme/css/acme-missing.css or global/acme/css/tokens.css"
        )

    def test_generic_fallback(self, resolver: TokenResolver, compiled_root: Path) -> None:
        result = resolver.resolve("acme", "tokens", "css")
        assert result.ok
        assert result.data["path"].endswith("acme/css/tokens.css")
        assert result.data["fallback"] is True

    def test_brand_tokens_file_wins_over_generic(
        self, resolver: TokenResolver, compiled_root: Path
    ) -> None:
        touch(compiled_root / "web" / "global" / "acme" / "css" / "acme-tokens.css")
        result = resolver.resolve("acme", "tokens", "css")
        assert result.data["path"].endswith("acme-tokens.css")
        assert result.data["fallback"] is False

    def test_tokens_fails_without_either_file(self, resolver: TokenResolver) -> None:
        result = resolver.resolve("acme", "tokens", "js")
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"
        assert result.error.detail["available_token_types"] == ["color"]

    def test_generic_file_only_answers_tokens(self, resolver: TokenResolver) -> None:
        result = resolver.resolve("zeta", "color", "scss")
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"

    @pytest.mark.parametrize("fmt", ["xml", "CSS", "", "../css"])
    def test_invalid_format_rejected_before_filesystem(
        self, resolver: TokenResolver, monkeypatch: pytest.MonkeyPatch, fmt: str
    ) -> None:
        def no_fs(*_args: object, **_kwargs: object) -> None:
            raise AssertionError("filesystem touched")

        monkeypatch.setattr(os, "scandir", no_fs)
        monkeypatch.setattr(Path, "is_file", no_fs)
        monkeypatch.setattr(Path, "is_dir", no_fs)
        result = resolver.resolve("no-such-brand", "color", fmt)
        assert result.error is not None
        assert result.error.code == "INVALID_FORMAT"
        assert "md" in result.error.detail["supported"]

    @pytest.mark.parametrize(
        ("brand", "token_type"),
        [("..", "color"), ("acme/../../etc", "color"), ("acme", "../secret"), ("", "color")],
    )
    def test_path_escape_rejected(
        self, resolver: TokenResolver, brand: str, token_type: str
    ) -> None:
        result = resolver.resolve(brand, token_type, "css")
        assert result.error is not None
        assert result.error.code == "INVALID_PATH"

    def test_md_is_a_valid_format(self, resolver: TokenResolver, compiled_root: Path) -> None:
        touch(compiled_root / "web" / "global" / "acme" / "md" / "acme-color.md", "# color\n")
        result = resolver.resolve("acme", "color", "md")
        assert result.data["content_type"] == "text/markdown"

    def test_configured_formats(self, compiled_root: Path) -> None:
        resolver = TokenResolver(ResolverConfig(build_root=compiled_root, formats=("css",)))
        result = resolver.resolve("acme", "color", "js")
        assert result.error is not None
        assert result.error.code == "INVALID_FORMAT"


class TestResolveBestAvailable:
    def test_prefers_color(self, resolver: TokenResolver) -> None:
        result = resolver.resolve("acme", None, "css")
        assert result.ok
        assert result.data["path"].endswith("acme-color.css")
        assert result.data["token_type"] == "color"

    def test_first_when_no_color(self, resolver: TokenResolver) -> None:
        result = resolver.resolve("zeta", None, "scss")
        assert result.data["path"].endswith("tokens.scss")
        assert result.data["token_type"] == "tokens"

    def test_nothing_available(self, resolver: TokenResolver) -> None:
        result = resolver.resolve("acme", None, "json")
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"
        assert result.error.detail["available_token_types"] == []

    def test_brand_name_does_not_count_as_color(self, compiled_root: Path) -> None:
        css_dir = compiled_root / "web" / "global" / "colorado" / "css"
        touch(css_dir / "colorado-spacing.css")
        touch(css_dir / "colorado-textcolor.css")
        resolver = TokenResolver(ResolverConfig(build_root=compiled_root))
        result = resolver.resolve("colorado", None, "css")
        assert result.ok
        assert result.data["token_type"] == "textcolor"

    def test_brand_containing_color_without_color_type(self, compiled_root: Path) -> None:
        css_dir = compiled_root / "web" / "global" / "colorado" / "css"
        touch(css_dir / "colorado-spacing.css")
        touch(css_dir / "colorado-typography.css")
        resolver = TokenResolver(ResolverConfig(build_root=compiled_root))
        assert resolver.resolve("colorado", None, "css").data["token_type"] == "spacing"


class TestDiscovery:
    def test_list_brands(self, resolver: TokenResolver, compiled_root: Path) -> None:
        touch(compiled_root / "web" / "global" / "stray.txt")
        result = resolver.list_brands()
        assert result.ok
        assert result.data["brands"] == ["acme", "zeta"]

    def test_list_brands_missing_root(self, tmp_path: Path) -> None:
        result = TokenResolver(ResolverConfig(build_root=tmp_path / "none")).list_brands()
        assert result.ok
        assert result.data["brands"] == []
        assert result.warnings == [
            f"Global directory not found: {tmp_path / 'none' / 'web' / 'global'}"
        ]

    def test_list_brands_empty_root_has_no_warning(self, tmp_path: Path) -> None:
        (tmp_path / "web" / "global").mkdir(parents=True)
        result = TokenResolver(ResolverConfig(build_root=tmp_path)).list_brands()
        assert result.data["brands"] == []
        assert result.warnings == []

    def test_list_token_types(self, resolver: TokenResolver) -> None:
        result = resolver.list_token_types("acme", "css")
        assert result.data["token_types"] == ["color", "spacing", "tokens"]

    def test_list_token_types_missing_dir_is_empty(self, resolver: TokenResolver) -> None:
        result = resolver.list_token_types("acme", "scss")
        assert result.ok
        assert result.data["token_types"] == []
        assert result.warnings == []

    def test_list_token_types_unknown_brand_is_empty(self, resolver: TokenResolver) -> None:
        result = resolver.list_token_types("ghost", "css")
        assert result.ok
        assert result.data["token_types"] == []

    def test_listing_error_becomes_warning(
        self, resolver: TokenResolver, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def denied(_path: object) -> None:
            raise PermissionError("denied")

        monkeypatch.setattr(os, "scandir", denied)
        result = resolver.list_token_types("acme", "css")
        assert result.ok
        assert result.data["token_types"] == []
        assert len(result.warnings) == 1
        assert "denied" in result.warnings[0]

    def test_inventory(self, resolver: TokenResolver) -> None:
        result = resolver.inventory()
        assert result.ok
        assert result.data["brands"] == [
            {
                "brand": "acme",
                "formats": {
                    "css": ["acme-color.css", "acme-spacing.css", "tokens.css"],
                    "js": ["acme-color.js"],
                },
            },
            {"brand": "zeta", "formats": {"scss": ["tokens.scss"]}},
        ]

    def test_inventory_missing_root_warns(self, tmp_path: Path) -> None:
        result = TokenResolver(ResolverConfig(build_root=tmp_path / "none")).inventory()
        assert result.ok
        assert result.data["brands"] == []
        assert "not found" in result.warnings[0]


class TestHelpers:
    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("acme-color.css", "color"),
            ("acme-font-size.css", "font-size"),
            ("tokens.css", "tokens"),
            ("legacy.css", "legacy"),
        ],
    )
    def test_token_type_from_filename(self, filename: str, expected: str) -> None:
        assert token_type_from_filename(filename, "acme", "css") == expected

    @pytest.mark.parametrize(
        ("fmt", "expected"),
        [
            ("css", "text/css"),
            ("js", "application/javascript"),
            ("scss", "text/x-scss"),
            ("md", "text/markdown"),
            ("json", "application/json"),
            ("bin", "application/octet-stream"),
        ],
    )
    def test_content_type_for(self, fmt: str, expected: str) -> None:
        assert content_type_for(fmt) == expected


class TestBuildThenResolve:
    def test_generic_file_served_after_build(self, build_config: BuildConfig) -> None:
        BuildService(build_config).build(platforms=["webGlobal"])
        resolver = TokenResolver(ResolverConfig(build_root=build_config.build_root))
        assert resolver.list_brands().data["brands"] == ["acme"]
        result = resolver.resolve("acme", "tokens", "scss")
        assert result.ok
        assert result.data["fallback"] is True
        # Category artifacts are written as <category>.<fmt>, so they surface
        # as bare token types rather than brand-prefixed ones.
        types = resolver.list_token_types("acme", "css").data["token_types"]
        assert types == ["color", "spacing", "tokens"]
