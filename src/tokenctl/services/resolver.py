"""TokenResolver: request-time lookups against the compiled web/global tree.

Layout consumed (read-only)::

    <build>/web/global/<brand>/<fmt>/<brand>-<tokenType>.<fmt>
    <build>/web/global/<brand>/<fmt>/tokens.<fmt>          (generic fallback)

Resolution order for ``resolve(brand, token_type, fmt)``:

1. ``fmt`` must be a configured lookup format; checked before any
   filesystem access.
2. ``<brand>-<token_type>.<fmt>``
3. only for ``token_type == "tokens"``: ``tokens.<fmt>``
4. otherwise NOT_FOUND, with the available token types as hints.

Without a token type (the legacy two-argument lookup) the best available
file is chosen: the first whose token type contains ``color``, else the
first.  The brand prefix is stripped before matching.

Discovery listings never fail hard.  A directory that cannot be listed is
logged, reported as a warning, and treated as empty.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from tokenctl.config.models import ResolverConfig
from tokenctl.domain.types import CONTENT_TYPES, GENERIC_TOKEN_TYPE
from tokenctl.infrastructure.filesystem import (
    DirectoryListing,
    ListingStatus,
    is_within,
    list_directory,
    list_files_with_suffix,
)
from tokenctl.services.result import ErrorCode, ServiceResult

logger = logging.getLogger(__name__)

_PREFERRED_LEGACY_MARKER = "color"


def content_type_for(fmt: str) -> str:
    """MIME type an HTTP layer should send an artifact of *fmt* with."""
    return CONTENT_TYPES.get(fmt, "application/octet-stream")


def token_type_from_filename(filename: str, brand: str, fmt: str) -> str:
    """Map an artifact file name back to the token type it serves.

    ``acme-color.css`` -> ``color``; ``tokens.css`` -> ``tokens``;
    anything else -> the name minus the ``.<fmt>`` suffix.
    """
    suffix = f".{fmt}"
    if filename == f"{GENERIC_TOKEN_TYPE}{suffix}":
        return GENERIC_TOKEN_TYPE
    stem = filename[: -len(suffix)] if filename.endswith(suffix) else filename
    prefix = f"{brand}-"
    if stem.startswith(prefix):
        return stem[len(prefix) :]
    return stem


class TokenResolver:
    """Answers brand / token-type / format lookups from the build tree."""

    def __init__(self, config: ResolverConfig) -> None:
        self._config = config
        self._global_dir = config.global_dir

    @property
    def global_dir(self) -> Path:
        return self._global_dir

    # --- Discovery ---

    def list_brands(self) -> ServiceResult:
        """Brands are the directories directly under the global dir."""
        listing = list_directory(self._global_dir, dirs_only=True)
        warnings = _listing_warnings(listing)
        if listing.status is ListingStatus.MISSING:
            warnings.append(f"Global directory not found: {self._global_dir}")
        return ServiceResult(
            ok=True,
            op="list_brands",
            data={"brands": list(listing.entries)},
            warnings=warnings,
        )

    def list_token_types(self, brand: str, fmt: str) -> ServiceResult:
        """Token types available for *brand* in *fmt*; empty if none."""
        op = "list_token_types"
        format_dir = self._format_dir(brand, fmt)
        if format_dir is None:
            return _invalid_path(op, brand=brand, fmt=fmt)
        listing = list_files_with_suffix(format_dir, f".{fmt}")
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "brand": brand,
                "format": fmt,
                "token_types": [
                    token_type_from_filename(name, brand, fmt) for name in listing.entries
                ],
            },
            warnings=_listing_warnings(listing),
        )

    def inventory(self) -> ServiceResult:
        """Every brand with its format directories and the files in each."""
        brands_listing = list_directory(self._global_dir, dirs_only=True)
        warnings = _listing_warnings(brands_listing)
        brands: list[dict[str, Any]] = []
        for brand in brands_listing.entries:
            formats_listing = list_directory(self._global_dir / brand, dirs_only=True)
            warnings.extend(_listing_warnings(formats_listing))
            formats: dict[str, list[str]] = {}
            for fmt in formats_listing.entries:
                files = list_files_with_suffix(self._global_dir / brand / fmt, f".{fmt}")
                warnings.extend(_listing_warnings(files))
                formats[fmt] = list(files.entries)
            brands.append({"brand": brand, "formats": formats})
        if brands_listing.status is ListingStatus.MISSING:
            warnings.append(f"Global directory not found: {self._global_dir}")
        return ServiceResult(
            ok=True,
            op="inventory",
            data={"global_dir": str(self._global_dir), "brands": brands},
            warnings=warnings,
        )

    # --- Resolution ---

    def resolve(self, brand: str, token_type: str | None, fmt: str) -> ServiceResult:
        """Resolve a lookup to an artifact path, or a structured NOT_FOUND."""
        op = "resolve_token"
        if fmt not in self._config.formats:
            return ServiceResult.failure(
                op,
                ErrorCode.INVALID_FORMAT,
                f"Invalid format. Supported: {', '.join(self._config.formats)}",
                format=fmt,
                supported=list(self._config.formats),
            )

        format_dir = self._format_dir(brand, fmt)
        if format_dir is None:
            return _invalid_path(op, brand=brand, fmt=fmt)

        if token_type is None:
            return self._resolve_best_available(op, brand, fmt, format_dir)

        if not _is_plain_name(token_type):
            return _invalid_path(op, brand=brand, fmt=fmt, token_type=token_type)

        primary = format_dir / f"{brand}-{token_type}.{fmt}"
        logger.debug("Looking for token file at %s", primary)
        if primary.is_file():
            return self._found(op, primary, brand=brand, fmt=fmt, token_type=token_type)

        if token_type == GENERIC_TOKEN_TYPE:
            generic = format_dir / f"{GENERIC_TOKEN_TYPE}.{fmt}"
            logger.debug("Looking for generic tokens file at %s", generic)
            if generic.is_file():
                return self._found(
                    op, generic, brand=brand, fmt=fmt, token_type=token_type, fallback=True
                )

        listing = list_files_with_suffix(format_dir, f".{fmt}")
        return ServiceResult.failure(
            op,
            ErrorCode.NOT_FOUND,
            f"Token type {token_type!r} for brand {brand!r} with format {fmt!r} not found",
            warnings=_listing_warnings(listing),
            available_token_types=[
                token_type_from_filename(name, brand, fmt) for name in listing.entries
            ],
            expected_path=(
                f"global/{brand}/{fmt}/{brand}-{token_type}.{fmt} "
                f"or global/{brand}/{fmt}/{GENERIC_TOKEN_TYPE}.{fmt}"
            ),
        )

    def _resolve_best_available(
        self, op: str, brand: str, fmt: str, format_dir: Path
    ) -> ServiceResult:
        listing = list_files_with_suffix(format_dir, f".{fmt}")
        if not listing.entries:
            return ServiceResult.failure(
                op,
                ErrorCode.NOT_FOUND,
                f"No {fmt} files found for brand {brand!r}",
                warnings=_listing_warnings(listing),
                available_token_types=[],
            )
        preferred = next(
            (
                name
                for name in listing.entries
                if _PREFERRED_LEGACY_MARKER in token_type_from_filename(name, brand, fmt)
            ),
            listing.entries[0],
        )
        logger.debug("Best available %s file for %s: %s", fmt, brand, preferred)
        return self._found(
            op,
            format_dir / preferred,
            brand=brand,
            fmt=fmt,
            token_type=token_type_from_filename(preferred, brand, fmt),
        )

    def _found(
        self,
        op: str,
        path: Path,
        *,
        brand: str,
        fmt: str,
        token_type: str,
        fallback: bool = False,
    ) -> ServiceResult:
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "path": str(path),
                "brand": brand,
                "format": fmt,
                "token_type": token_type,
                "content_type": content_type_for(fmt),
                "fallback": fallback,
            },
        )

    def _format_dir(self, brand: str, fmt: str) -> Path | None:
        """``<global>/<brand>/<fmt>``, or None if the request escapes the tree."""
        if not _is_plain_name(brand) or not _is_plain_name(fmt):
            return None
        candidate = self._global_dir / brand / fmt
        if not is_within(self._global_dir, candidate):
            return None
        return candidate


def _is_plain_name(value: str) -> bool:
    return bool(value) and value not in (".", "..") and "/" not in value and "\\" not in value


def _invalid_path(op: str, **detail: Any) -> ServiceResult:
    return ServiceResult.failure(
        op,
        ErrorCode.INVALID_PATH,
        "Lookup parameters must be plain names without path separators",
        **{key: value for key, value in detail.items() if value is not None},
    )


def _listing_warnings(listing: DirectoryListing) -> list[str]:
    if listing.failed:
        return [f"Could not list {listing.path}: {listing.error}"]
    return []
