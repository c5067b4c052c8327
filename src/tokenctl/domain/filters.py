"""Token filters: which compiled tokens land in which output file.

Filters are plain tagged values rather than closures so a build descriptor
can be dumped, compared in tests, and shipped to another process.  All of
them are evaluated through :func:`matches`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field


class Unfiltered(BaseModel):
    """Accept every token."""

    model_config = {"frozen": True}

    kind: Literal["unfiltered"] = "unfiltered"


class CategoryFilter(BaseModel):
    """Accept tokens whose attributes match a category's attribute spec.

    ``attributes`` is None when the category is not in the registry; the
    filter then accepts everything.
    """

    model_config = {"frozen": True}

    kind: Literal["category"] = "category"
    category: str
    attributes: dict[str, str] | None = None


class ThemeFilter(BaseModel):
    """Accept tokens tagged with a theme identifier by type, value type, or path."""

    model_config = {"frozen": True}

    kind: Literal["theme"] = "theme"
    theme: str


TokenFilter = Annotated[
    Unfiltered | CategoryFilter | ThemeFilter,
    Field(discriminator="kind"),
]

UNFILTERED = Unfiltered()


def matches(token_filter: TokenFilter, token: Any) -> bool:
    """Return True if *token* belongs in the file guarded by *token_filter*."""
    if isinstance(token_filter, Unfiltered):
        return True
    if isinstance(token_filter, CategoryFilter):
        return _matches_category(token_filter, token)
    if isinstance(token_filter, ThemeFilter):
        return _matches_theme(token_filter.theme, token)
    msg = f"Unknown filter: {token_filter!r}"
    raise TypeError(msg)


def _matches_category(token_filter: CategoryFilter, token: Any) -> bool:
    spec = token_filter.attributes
    if spec is None:
        return True
    attributes = token.get("attributes") if isinstance(token, Mapping) else None
    if not isinstance(attributes, Mapping):
        return not spec
    return all(attributes.get(key) == value for key, value in spec.items())


def _matches_theme(theme: str, token: Any) -> bool:
    if not isinstance(token, Mapping):
        return False
    if token.get("type") == theme:
        return True
    value = token.get("value")
    if isinstance(value, Mapping) and value.get("type") == theme:
        return True
    path = token.get("path")
    if isinstance(path, Sequence) and not isinstance(path, str):
        return any(part == theme for part in path)
    return False
