"""Built-in token compilation engine.

The orchestrator only depends on the :class:`CompilerEngine` protocol;
:class:`TokenCompiler` is the default implementation.  It reads the
descriptor's source globs, merges and flattens the raw trees, resolves
references, applies the platform's transform group, and writes one file per
:class:`~tokenctl.domain.descriptor.FileSpec`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

from tokenctl.domain.descriptor import BuildDescriptor, PlatformConfig
from tokenctl.domain.errors import CompilationError
from tokenctl.domain.filters import matches
from tokenctl.domain.tokens import flatten_tree, merge_trees, resolve_references
from tokenctl.infrastructure.compiler.formats import FormatRenderer
from tokenctl.infrastructure.compiler.transforms import apply_transform_group
from tokenctl.infrastructure.filesystem import (
    expand_source_glob,
    load_token_file,
    write_artifact,
)

logger = logging.getLogger(__name__)


class CompilerEngine(Protocol):
    """Anything that can build one platform block of a descriptor."""

    def build_platform(self, descriptor: BuildDescriptor, platform: str) -> list[Path]:
        """Build *platform* and return the written file paths.

        Must not return before every file is on disk.
        """
        ...


class TokenCompiler:
    """Default :class:`CompilerEngine` writing artifacts to the local filesystem.

    *templates_dir* shadows the packaged artifact templates file by file.
    """

    def __init__(self, *, templates_dir: Path | None = None) -> None:
        self._renderer = FormatRenderer(templates_dir=templates_dir)

    def build_platform(self, descriptor: BuildDescriptor, platform: str) -> list[Path]:
        platform_config = descriptor.platforms.get(platform)
        if platform_config is None:
            msg = f"Descriptor has no platform {platform!r}"
            raise CompilationError(msg)

        tokens = self.load_tokens(descriptor.source)
        apply_transform_group(platform_config.transform_group, tokens)
        return self._write_files(platform_config, tokens)

    def load_tokens(self, source_globs: tuple[str, ...]) -> list[dict[str, Any]]:
        """Merge every matched source file into one flattened token list."""
        tree: dict[str, Any] = {}
        file_paths: dict[tuple[str, ...], str] = {}
        sources = [path for pattern in source_globs for path in expand_source_glob(pattern)]
        if not sources:
            logger.warning("No token sources matched %s", ", ".join(source_globs))

        for path in sources:
            data = load_token_file(path)
            for token in flatten_tree(data):
                file_paths[tuple(token["path"])] = str(path)
            merge_trees(tree, data, origin=str(path))
            logger.debug("Loaded token source %s", path)

        tokens = flatten_tree(tree, file_paths=file_paths)
        resolve_references(tokens)
        return tokens

    def _write_files(
        self,
        platform_config: PlatformConfig,
        tokens: list[dict[str, Any]],
    ) -> list[Path]:
        build_path = Path(platform_config.build_path)
        written: list[Path] = []
        for spec in platform_config.files:
            selected = [token for token in tokens if matches(spec.filter, token)]
            target = build_path / spec.destination
            write_artifact(target, self._renderer.render(spec.format, selected))
            logger.debug("Wrote %s (%d tokens)", target, len(selected))
            written.append(target)
        return written
