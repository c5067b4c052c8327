"""BuildPlanner: category registry, filters, and per-platform build descriptors.

The planner holds no global state.  It is constructed with an explicit
:class:`BuildConfig` and derives the category registry from the raw-source
tree once, on first use, so one planner instance corresponds to one build
invocation.  Output layout per platform::

    webGlobal  <build>/web/global/<brand>/<fmt>/tokens.<fmt>
               <build>/web/global/<brand>/<fmt>/<category>.<fmt>
    webThemes  <build>/web/themes/<theme>/<fmt>/<theme>.<fmt>
    android    <build>/android/<brand>/xml/{tokens,colors}.xml
    ios        <build>/ios/<brand>/tokens.h
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel

from tokenctl.config.models import BuildConfig
from tokenctl.domain.descriptor import BuildDescriptor, FileSpec, PlatformConfig
from tokenctl.domain.errors import MissingSourceDirectoryError
from tokenctl.domain.filters import UNFILTERED, CategoryFilter, ThemeFilter
from tokenctl.domain.types import (
    GENERIC_TOKEN_TYPE,
    WEB_RENDERERS,
    FileFormat,
    Platform,
    TransformGroup,
)
from tokenctl.infrastructure.filesystem import read_source_entries
from tokenctl.services.result import ErrorCode, ServiceResult

logger = logging.getLogger(__name__)

_CATEGORY_SUFFIX = ".json"
_ANDROID_COLOR_CATEGORY = "color"


class CategorySpec(BaseModel):
    """Attribute spec a token must carry to land in a category file."""

    model_config = {"frozen": True}

    attributes: dict[str, str]


CategoryRegistry = dict[str, dict[str, CategorySpec]]


def build_category_registry(source_root: Path, brands: Iterable[str]) -> CategoryRegistry:
    """Scan ``<source_root>/<brand>/`` for ``*.json`` category files.

    Non-recursive; entries without the ``.json`` suffix are ignored.

    Raises:
        MissingSourceDirectoryError: A brand has no source directory.
    """
    registry: CategoryRegistry = {}
    for brand in brands:
        brand_dir = source_root / brand
        try:
            entries = read_source_entries(brand_dir)
        except OSError as exc:
            raise MissingSourceDirectoryError(brand, brand_dir) from exc

        categories: dict[str, CategorySpec] = {}
        for name in entries:
            if not name.endswith(_CATEGORY_SUFFIX):
                continue
            category = name[: -len(_CATEGORY_SUFFIX)]
            categories[category] = CategorySpec(attributes={"category": category})
            logger.debug("Discovered category %r for brand %r", category, brand)
        registry[brand] = categories
    return registry


class BuildPlanner:
    """Turns a :class:`BuildConfig` into per-(brand, platform) descriptors."""

    def __init__(self, config: BuildConfig, *, registry: CategoryRegistry | None = None) -> None:
        self._config = config
        self._registry = registry

    @property
    def config(self) -> BuildConfig:
        return self._config

    @property
    def registry(self) -> CategoryRegistry:
        """Category registry, scanned from the source tree on first access."""
        if self._registry is None:
            self._registry = build_category_registry(
                self._config.source_root, self._config.brands
            )
        return self._registry

    def categories(self, brand: str) -> list[str]:
        return list(self.registry.get(brand, {}))

    # --- Filters ---

    def category_filter(self, brand: str, category: str) -> CategoryFilter:
        """Filter for one category; unknown categories yield a fail-open filter."""
        spec = self.registry.get(brand, {}).get(category)
        return CategoryFilter(
            category=category,
            attributes=dict(spec.attributes) if spec is not None else None,
        )

    @staticmethod
    def theme_filter(theme: str) -> ThemeFilter:
        return ThemeFilter(theme=theme)

    # --- Descriptors ---

    def source_glob(self, brand: str) -> str:
        return f"{self._config.source_root.as_posix()}/{brand}/**/*.{{json,json5}}"

    def platform_config(
        self,
        brand: str,
        platform: Platform,
        *,
        build_root: Path | None = None,
    ) -> PlatformConfig:
        """Platform block for one cell, writing under *build_root* (default: config)."""
        root = build_root if build_root is not None else self._config.build_root
        builders = {
            Platform.WEB_GLOBAL: self._web_global,
            Platform.WEB_THEMES: self._web_themes,
            Platform.ANDROID: self._android,
            Platform.IOS: self._ios,
        }
        return builders[Platform(platform)](brand, root)

    def build_config(
        self,
        brand: str,
        platform: Platform,
        *,
        build_root: Path | None = None,
    ) -> BuildDescriptor:
        """Complete engine descriptor for one (brand, platform) cell."""
        platform = Platform(platform)
        return BuildDescriptor(
            source=(self.source_glob(brand),),
            platforms={
                platform.value: self.platform_config(brand, platform, build_root=build_root)
            },
        )

    def plan(self, brand: str, platform: str) -> ServiceResult:
        """Service entry point: the descriptor for one cell, JSON-ready."""
        op = "plan_build"
        if platform not in {p.value for p in Platform}:
            return ServiceResult.failure(
                op,
                ErrorCode.UNKNOWN_PLATFORM,
                f"Unknown platform {platform!r}",
                platforms=[p.value for p in Platform],
            )
        if brand not in self._config.brands:
            return ServiceResult.failure(
                op,
                ErrorCode.UNKNOWN_BRAND,
                f"Brand {brand!r} is not in the configured brand list",
                brands=list(self._config.brands),
            )
        try:
            descriptor = self.build_config(brand, Platform(platform))
        except MissingSourceDirectoryError as exc:
            return ServiceResult.failure(
                op, ErrorCode.MISSING_SOURCE_DIR, str(exc), brand=exc.brand, path=str(exc.path)
            )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "brand": brand,
                "platform": platform,
                "file_count": sum(len(block.files) for block in descriptor.platforms.values()),
                "descriptor": descriptor.model_dump(mode="json", by_alias=True),
            },
        )

    def _web_global(self, brand: str, root: Path) -> PlatformConfig:
        formats = self._config.web_formats
        files = [
            FileSpec(
                destination=f"{brand}/{fmt}/{GENERIC_TOKEN_TYPE}.{fmt}",
                format=WEB_RENDERERS[fmt],
            )
            for fmt in formats
        ]
        for category in self.categories(brand):
            token_filter = self.category_filter(brand, category)
            files.extend(
                FileSpec(
                    destination=f"{brand}/{fmt}/{category}.{fmt}",
                    format=WEB_RENDERERS[fmt],
                    filter=token_filter,
                )
                for fmt in formats
            )
        return PlatformConfig(
            transform_group=TransformGroup.WEB,
            build_path=_dir(root / "web" / "global"),
            files=tuple(files),
        )

    def _web_themes(self, brand: str, root: Path) -> PlatformConfig:
        # Theme output is brand-independent; *brand* only selects the sources.
        files = [
            FileSpec(
                destination=f"{theme}/{fmt}/{theme}.{fmt}",
                format=WEB_RENDERERS[fmt],
                filter=self.theme_filter(theme),
            )
            for theme in self._config.themes
            for fmt in self._config.web_formats
        ]
        return PlatformConfig(
            transform_group=TransformGroup.WEB,
            build_path=_dir(root / "web" / "themes"),
            files=tuple(files),
        )

    def _android(self, brand: str, root: Path) -> PlatformConfig:
        return PlatformConfig(
            transform_group=TransformGroup.ANDROID,
            build_path=_dir(root / "android" / brand),
            files=(
                FileSpec(destination="xml/tokens.xml", format=FileFormat.ANDROID_STRINGS),
                FileSpec(
                    destination="xml/colors.xml",
                    format=FileFormat.ANDROID_COLORS,
                    filter=self.category_filter(brand, _ANDROID_COLOR_CATEGORY),
                ),
            ),
        )

    def _ios(self, brand: str, root: Path) -> PlatformConfig:
        return PlatformConfig(
            transform_group=TransformGroup.IOS,
            build_path=_dir(root / "ios" / brand),
            files=(
                FileSpec(destination="tokens.h", format=FileFormat.IOS_MACROS, filter=UNFILTERED),
            ),
        )


def _dir(path: Path) -> str:
    return f"{path.as_posix()}/"
