"""BuildService: drives the brand x platform build matrix.

Cells run strictly one at a time, brand-major and platform-minor, and each
engine call blocks until its files are written, so no two cells race on an
output directory.

Failure policy: collect-and-report.  A failing cell is recorded and the
sweep continues; the result lists every failure at the end.  With
``fail_fast`` the sweep stops at the first failure instead.

Publishing: with ``atomic_publish`` (the default) the matrix is written to a
staging tree that replaces the live build root only after the sweep, so
concurrent lookups never observe a half-built tree.  If any cell failed the
staging tree is discarded unless ``publish_partial`` is set.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import structlog

from tokenctl.config.models import BuildConfig
from tokenctl.domain.errors import MissingSourceDirectoryError
from tokenctl.domain.types import Platform
from tokenctl.infrastructure.compiler import CompilerEngine, TokenCompiler
from tokenctl.infrastructure.filesystem import StagedTree
from tokenctl.services.planner import BuildPlanner
from tokenctl.services.result import ErrorCode, ServiceError, ServiceResult

logger = logging.getLogger(__name__)
log = structlog.get_logger(__name__)


class BuildService:
    """Compile every configured (brand, platform) cell into the build root."""

    def __init__(self, config: BuildConfig, *, engine: CompilerEngine | None = None) -> None:
        self._config = config
        self._engine = (
            engine if engine is not None else TokenCompiler(templates_dir=config.templates_dir)
        )

    def build(
        self,
        *,
        brands: Sequence[str] | None = None,
        platforms: Sequence[str] | None = None,
        fail_fast: bool | None = None,
    ) -> ServiceResult:
        """Run the build matrix.

        *brands* and *platforms* narrow the sweep to a subset of the
        configured lists (order still follows the configuration).  When
        narrowed, untouched cells of the live tree are carried over into
        the staging tree so publishing does not drop them.
        """
        op = "build_tokens"
        config = self._config
        stop_on_failure = config.fail_fast if fail_fast is None else fail_fast

        unknown = [brand for brand in brands or () if brand not in config.brands]
        if unknown:
            return ServiceResult.failure(
                op,
                ErrorCode.UNKNOWN_BRAND,
                f"Brands not in the configured brand list: {', '.join(unknown)}",
                brands=list(config.brands),
            )
        unknown = [name for name in platforms or () if name not in {p.value for p in Platform}]
        if unknown:
            return ServiceResult.failure(
                op,
                ErrorCode.UNKNOWN_PLATFORM,
                f"Unknown platforms: {', '.join(unknown)}",
                platforms=[p.value for p in Platform],
            )

        selected_brands = [b for b in config.brands if brands is None or b in brands]
        selected_platforms = [
            p for p in config.platforms if platforms is None or p.value in platforms
        ]
        partial_selection = (
            len(selected_brands) != len(config.brands)
            or len(selected_platforms) != len(config.platforms)
        )

        # Registry derivation is the configuration check: nothing is built
        # if any selected brand lacks a source directory.
        planner = BuildPlanner(config.model_copy(update={"brands": tuple(selected_brands)}))
        try:
            registry = planner.registry
        except MissingSourceDirectoryError as exc:
            log.error("build.config_error", brand=exc.brand, path=str(exc.path))
            return ServiceResult.failure(
                op, ErrorCode.MISSING_SOURCE_DIR, str(exc), brand=exc.brand, path=str(exc.path)
            )

        staged = StagedTree(config.build_root) if config.atomic_publish else None
        output_root = (
            staged.prepare(copy_live=partial_selection) if staged else config.build_root
        )

        log.info(
            "build.start",
            brands=selected_brands,
            platforms=[p.value for p in selected_platforms],
            output_root=str(output_root),
        )
        cells: list[dict[str, Any]] = []
        failures: list[dict[str, Any]] = []
        skipped: list[dict[str, Any]] = []
        themes_built = False
        stopped = False

        for brand in selected_brands:
            for platform in selected_platforms:
                if platform is Platform.WEB_THEMES and config.dedupe_themes and themes_built:
                    skipped.append({"brand": brand, "platform": platform.value})
                    continue
                log.info("build.cell", brand=brand, platform=platform.value)
                try:
                    written = self._build_cell(planner, brand, platform, output_root)
                except Exception as exc:
                    logger.debug("Build cell failed: %s/%s", brand, platform, exc_info=True)
                    log.warning(
                        "build.cell_failed", brand=brand, platform=platform.value, error=str(exc)
                    )
                    failures.append(
                        {"brand": brand, "platform": platform.value, "error": str(exc)}
                    )
                    if stop_on_failure:
                        stopped = True
                        break
                    continue
                if platform is Platform.WEB_THEMES:
                    themes_built = True
                cells.append({"brand": brand, "platform": platform.value, "files": len(written)})
            if stopped:
                break

        published = self._finish(staged, failed=bool(failures))
        file_count = sum(cell["files"] for cell in cells)
        log.info(
            "build.complete",
            cells=len(cells),
            failures=len(failures),
            files=file_count,
            published=published,
        )

        data: dict[str, Any] = {
            "build_root": str(config.build_root),
            "brands": selected_brands,
            "platforms": [p.value for p in selected_platforms],
            "categories": {brand: list(categories) for brand, categories in registry.items()},
            "cells": cells,
            "file_count": file_count,
            "published": published,
        }
        if skipped:
            data["skipped"] = skipped

        if failures:
            message = f"{len(failures)} of {len(cells) + len(failures)} build cells failed"
            if stopped:
                message += " (stopped at first failure)"
            return ServiceResult(
                ok=False,
                op=op,
                data=data,
                error=ServiceError(
                    code=ErrorCode.BUILD_FAILED,
                    message=message,
                    detail={"failures": failures, "published": published},
                ),
            )
        return ServiceResult(ok=True, op=op, data=data)

    def _build_cell(
        self,
        planner: BuildPlanner,
        brand: str,
        platform: Platform,
        output_root: Path,
    ) -> list[Path]:
        descriptor = planner.build_config(brand, platform, build_root=output_root)
        return self._engine.build_platform(descriptor, platform.value)

    def _finish(self, staged: StagedTree | None, *, failed: bool) -> bool:
        """Publish or discard the staging tree; return whether output went live."""
        if staged is None:
            return True
        if failed and not self._config.publish_partial:
            staged.discard()
            return False
        staged.publish()
        return True
