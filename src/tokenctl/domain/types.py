"""Platforms, formats, and renderer names shared by planner and resolver.

The enum values are part of the on-disk and build-descriptor contract:
platform names key the descriptor's ``platforms`` block, format values are
file extensions, and renderer names are what the compilation engine looks up.
"""

from __future__ import annotations

from enum import StrEnum


class Platform(StrEnum):
    """Output targets, each with its own build path and file list."""

    WEB_GLOBAL = "webGlobal"
    WEB_THEMES = "webThemes"
    ANDROID = "android"
    IOS = "ios"


class WebFormat(StrEnum):
    """File formats emitted for both web platforms (in emission order)."""

    SCSS = "scss"
    CSS = "css"
    JS = "js"
    JSON = "json"


class LookupFormat(StrEnum):
    """Formats accepted by the resolver."""

    CSS = "css"
    JS = "js"
    JSON = "json"
    SCSS = "scss"
    MD = "md"


class FileFormat(StrEnum):
    """Renderer identifiers understood by the compilation engine."""

    SCSS_VARIABLES = "scss/variables"
    CSS_VARIABLES = "css/variables"
    JAVASCRIPT_MODULE_FLAT = "javascript/module-flat"
    JSON_FLAT = "json/flat"
    ANDROID_STRINGS = "android/strings"
    ANDROID_COLORS = "android/colors"
    ANDROID_FONT_DIMENS = "android/fontDimens"
    IOS_MACROS = "ios/macros"


class TransformGroup(StrEnum):
    """Transform sets applied to tokens before rendering."""

    WEB = "web"
    ANDROID = "android"
    IOS = "ios"


WEB_RENDERERS: dict[WebFormat, FileFormat] = {
    WebFormat.SCSS: FileFormat.SCSS_VARIABLES,
    WebFormat.CSS: FileFormat.CSS_VARIABLES,
    WebFormat.JS: FileFormat.JAVASCRIPT_MODULE_FLAT,
    WebFormat.JSON: FileFormat.JSON_FLAT,
}

CONTENT_TYPES: dict[str, str] = {
    "css": "text/css",
    "js": "application/javascript",
    "scss": "text/x-scss",
    "md": "text/markdown",
    "json": "application/json",
}

# Generic (unfiltered) file stem in web/global, and the token type it answers to.
GENERIC_TOKEN_TYPE = "tokens"

DEFAULT_BRANDS: tuple[str, ...] = ("brand-a", "brand-b", "brand-a-theme", "brand-b-theme")

DEFAULT_THEMES: tuple[str, ...] = (
    "themeEDSMUI",
    "themeEDSChameleonMUI",
    "themeAFIMUI",
    "themeAFIChameleonMUI",
)

DEFAULT_PLATFORMS: tuple[Platform, ...] = (
    Platform.WEB_GLOBAL,
    Platform.WEB_THEMES,
    Platform.IOS,
    Platform.ANDROID,
)
