"""Exception hierarchy raised below the service layer.

Services catch these at their boundary and convert them into a
:class:`~tokenctl.services.result.ServiceResult` error.
"""

from __future__ import annotations

from pathlib import Path


class TokenctlError(Exception):
    """Base class for all tokenctl errors."""


class ConfigurationError(TokenctlError):
    """Static configuration does not match the filesystem."""


class MissingSourceDirectoryError(ConfigurationError):
    """A configured brand has no raw-source directory."""

    def __init__(self, brand: str, path: Path) -> None:
        super().__init__(f"No raw-source directory for brand {brand!r}: {path}")
        self.brand = brand
        self.path = path


class CompilationError(TokenctlError):
    """The compilation engine could not produce a platform's artifacts."""


class TokenReferenceError(CompilationError):
    """A ``{a.b.c}`` token reference is broken or cyclic."""
