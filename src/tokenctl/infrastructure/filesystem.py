"""Filesystem operations for raw token sources and compiled artifacts.

INVARIANT: Files are truth.  Neither the category registry nor the list of
available artifacts is persisted anywhere; both are re-derived from
directory listings every time they are needed.

Directory listings come back as a :class:`DirectoryListing` so callers can
tell a missing directory, an empty one, and one that failed to list apart
even where all three degrade to "nothing found".
"""

from __future__ import annotations

import glob
import json
import logging
import os
import re
import shutil
import uuid
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any

import json5

from tokenctl.domain.errors import CompilationError

logger = logging.getLogger(__name__)

_BRACE_RE = re.compile(r"\{([^{}]*,[^{}]*)\}")


class ListingStatus(StrEnum):
    OK = "ok"
    EMPTY = "empty"
    MISSING = "missing"
    ERROR = "error"


@dataclass(frozen=True)
class DirectoryListing:
    """Result of listing one directory.

    ``entries`` holds sorted entry names for OK listings and is empty for
    every other status.  ``error`` carries the OS error text for ERROR.
    """

    path: Path
    status: ListingStatus
    entries: tuple[str, ...] = ()
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.status is ListingStatus.ERROR


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


def list_directory(path: Path, *, dirs_only: bool = False) -> DirectoryListing:
    """List *path* without raising.

    OS errors (permissions, a concurrent rebuild swapping the tree) are
    logged and reported as ERROR rather than propagated.
    """
    if not path.is_dir():
        return DirectoryListing(path=path, status=ListingStatus.MISSING)
    try:
        names = []
        with os.scandir(path) as it:
            for entry in it:
                if dirs_only and not entry.is_dir():
                    continue
                names.append(entry.name)
    except OSError as exc:
        logger.warning("Failed to list %s: %s", path, exc)
        return DirectoryListing(path=path, status=ListingStatus.ERROR, error=str(exc))

    if not names:
        logger.debug("Directory is empty: %s", path)
        return DirectoryListing(path=path, status=ListingStatus.EMPTY)
    return DirectoryListing(path=path, status=ListingStatus.OK, entries=tuple(sorted(names)))


def list_files_with_suffix(path: Path, suffix: str) -> DirectoryListing:
    """List entries of *path* whose name ends with *suffix*."""
    listing = list_directory(path)
    if listing.status is not ListingStatus.OK:
        return listing
    kept = tuple(name for name in listing.entries if name.endswith(suffix))
    if not kept:
        return DirectoryListing(path=path, status=ListingStatus.EMPTY)
    return DirectoryListing(path=path, status=ListingStatus.OK, entries=kept)


def read_source_entries(brand_dir: Path) -> list[str]:
    """Return the sorted entry names of a brand's raw-source directory.

    Unlike :func:`list_directory` this raises: a brand without sources is a
    configuration error, not an empty result.
    """
    if not brand_dir.is_dir():
        msg = f"Not a directory: {brand_dir}"
        raise FileNotFoundError(msg)
    return sorted(entry.name for entry in brand_dir.iterdir())


def is_within(root: Path, candidate: Path) -> bool:
    """Return True if *candidate* resolves to a path inside *root*."""
    return candidate.resolve().is_relative_to(root.resolve())


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


def expand_source_glob(pattern: str) -> list[Path]:
    """Expand a source glob with ``**`` and one-level ``{a,b}`` alternation.

    Returns sorted, de-duplicated file paths.
    """
    patterns = [pattern]
    while True:
        expanded: list[str] = []
        changed = False
        for item in patterns:
            match = _BRACE_RE.search(item)
            if match is None:
                expanded.append(item)
                continue
            changed = True
            head, tail = item[: match.start()], item[match.end() :]
            expanded.extend(f"{head}{choice}{tail}" for choice in match.group(1).split(","))
        patterns = expanded
        if not changed:
            break

    found: set[Path] = set()
    for item in patterns:
        found.update(Path(hit) for hit in glob.glob(item, recursive=True) if Path(hit).is_file())
    return sorted(found)


def load_token_file(path: Path) -> dict[str, Any]:
    """Parse a raw token file (JSON object) or raise CompilationError.

    ``.json5`` files may use comments, unquoted keys, single quotes, and
    trailing commas; everything else is parsed as strict JSON.
    """
    is_json5 = path.suffix == ".json5"
    label = "JSON5" if is_json5 else "JSON"
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Unable to read {path}: {exc}"
        raise CompilationError(msg) from exc
    try:
        data = json5.loads(raw) if is_json5 else json.loads(raw)
    except ValueError as exc:
        msg = f"Invalid {label} in {path}: {exc}"
        raise CompilationError(msg) from exc
    if not isinstance(data, dict):
        msg = f"Expected {label} object in {path}"
        raise CompilationError(msg)
    return data


# ---------------------------------------------------------------------------
# Artifacts
# ---------------------------------------------------------------------------


def write_artifact(path: Path, content: str) -> None:
    """Write a compiled artifact, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@dataclass
class StagedTree:
    """A scratch build tree published over a live one by symlink swap.

    The live path is a symlink to a generation directory next to it.
    Publishing renames the staging tree into a new generation, points a
    fresh link at it, and moves that link over the live path with
    ``os.replace``.  Lookups that race with a rebuild therefore resolve to
    either the old tree or the new one, never to a half-written mix or to
    nothing.  All siblings live next to the live path so every rename stays
    on one filesystem.

    A live path that is still a plain directory (first publish, or a tree
    written with ``atomic_publish = false``) is moved aside once before the
    swap; only that migration has a window with no tree in place.
    """

    live: Path
    staging: Path = field(init=False)
    previous: Path = field(init=False)
    link: Path = field(init=False)

    def __post_init__(self) -> None:
        parent = self.live.parent
        self.staging = parent / f".{self.live.name}.staging"
        self.previous = parent / f".{self.live.name}.previous"
        self.link = parent / f".{self.live.name}.link"

    def prepare(self, *, copy_live: bool = False) -> Path:
        """Create the staging directory and return it.

        Starts empty, or as a copy of the live tree with *copy_live* (used
        when only part of the matrix is rebuilt).
        """
        if self.staging.exists():
            shutil.rmtree(self.staging)
        if copy_live and self.live.is_dir():
            shutil.copytree(self.live, self.staging)
        else:
            self.staging.mkdir(parents=True)
        return self.staging

    def publish(self) -> Path:
        """Swap the staging tree into place, drop the old tree, return the new generation."""
        generation = self.live.parent / f".{self.live.name}.{uuid.uuid4().hex[:12]}"
        self.staging.rename(generation)
        old_generation = self.current_generation()

        if self.link.is_symlink() or self.link.exists():
            self.link.unlink()
        self.link.symlink_to(generation.name, target_is_directory=True)

        if self.previous.exists():
            shutil.rmtree(self.previous)
        if self.live.is_dir() and not self.live.is_symlink():
            self.live.rename(self.previous)
        try:
            os.replace(self.link, self.live)
        except OSError:
            if self.previous.exists() and not self.live.exists():
                self.previous.rename(self.live)
            raise

        if old_generation is not None and old_generation != generation and old_generation.is_dir():
            shutil.rmtree(old_generation)
        if self.previous.exists():
            shutil.rmtree(self.previous)
        logger.debug("Published %s -> %s", self.live, generation.name)
        return generation

    def current_generation(self) -> Path | None:
        """Generation directory the live symlink points at, if we own it."""
        if not self.live.is_symlink():
            return None
        target = Path(os.readlink(self.live))
        if not target.is_absolute():
            target = self.live.parent / target
        if target.parent != self.live.parent or not target.name.startswith(f".{self.live.name}."):
            return None
        return target

    def discard(self) -> None:
        """Remove the staging tree, leaving the live tree untouched."""
        if self.staging.exists():
            shutil.rmtree(self.staging)
