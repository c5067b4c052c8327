"""Config file discovery.

The project root is the directory holding ``tokenctl.toml``, found by
walking up from the working directory the way git finds ``.git/``.
``--config`` and the TOKENCTL_CONFIG env var bypass the walk.
"""

from __future__ import annotations

import os
from pathlib import Path

from tokenctl.domain.errors import ConfigurationError

CONFIG_FILENAME = "tokenctl.toml"
CONFIG_ENV_VAR = "TOKENCTL_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for tokenctl.toml.

    Returns None if no file is found.  A TOKENCTL_CONFIG pointing at a
    missing file also yields None.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def locate_config(explicit: str | Path | None, start: Path | None = None) -> Path | None:
    """Return the config file to load.

    An *explicit* path must exist; otherwise discovery via :func:`find_config`.
    """
    if explicit is None:
        return find_config(start)
    path = Path(explicit)
    if not path.is_file():
        msg = f"Config file not found: {path}"
        raise ConfigurationError(msg)
    return path


def project_root(config_path: Path | None, fallback: Path | None = None) -> Path:
    """Directory that relative paths in the config are anchored at."""
    if config_path is not None:
        return config_path.resolve().parent
    return (fallback or Path.cwd()).resolve()
