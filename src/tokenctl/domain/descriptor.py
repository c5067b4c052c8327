"""Build descriptor: the declarative input of the compilation engine.

One descriptor is produced per (brand, platform) cell.  Field aliases follow
the engine's camelCase config keys, so ``model_dump(by_alias=True)`` yields
the same shape a style-dictionary config would have, with filters as tagged
values instead of functions.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from tokenctl.domain.filters import UNFILTERED, TokenFilter
from tokenctl.domain.types import FileFormat, TransformGroup


class FileSpec(BaseModel):
    """One output file: where it goes, how it is rendered, what it keeps."""

    model_config = {"frozen": True}

    destination: str
    format: FileFormat
    filter: TokenFilter = UNFILTERED


class PlatformConfig(BaseModel):
    """Platform block: transform group, output directory, and file list."""

    model_config = {"frozen": True, "populate_by_name": True}

    transform_group: TransformGroup = Field(alias="transformGroup")
    build_path: str = Field(alias="buildPath")
    files: tuple[FileSpec, ...] = ()


class BuildDescriptor(BaseModel):
    """Full engine config for one (brand, platform) cell."""

    model_config = {"frozen": True}

    source: tuple[str, ...]
    platforms: dict[str, PlatformConfig]
