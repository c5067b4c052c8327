"""Token transforms applied per transform group before rendering.

Each group runs, in order: CTI attributes, name, then value transforms.
Transforms mutate the flattened token dicts in place.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

from tokenctl.domain.types import TransformGroup

Token = dict[str, Any]

_CTI_KEYS = ("category", "type", "item", "subitem", "state")
_WORD_RE = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")
_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


def attribute_cti(token: Token) -> None:
    """Derive category/type/item/subitem/state attributes from the path.

    Attributes declared on the raw token take precedence.
    """
    derived = dict(zip(_CTI_KEYS, token["path"], strict=False))
    token["attributes"] = {**derived, **token.get("attributes", {})}


def _words(path: list[str]) -> list[str]:
    words: list[str] = []
    for part in path:
        words.extend(_WORD_RE.findall(part))
    return words


def name_kebab(token: Token) -> None:
    token["name"] = "-".join(word.lower() for word in _words(token["path"]))


def name_snake(token: Token) -> None:
    token["name"] = "_".join(word.lower() for word in _words(token["path"]))


def name_pascal(token: Token) -> None:
    token["name"] = "".join(word[:1].upper() + word[1:].lower() for word in _words(token["path"]))


def color_hex8_android(token: Token) -> None:
    """Rewrite ``#RGB``/``#RRGGBB``/``#RRGGBBAA`` colour values as ``#AARRGGBB``."""
    if token.get("attributes", {}).get("category") != "color":
        return
    value = token.get("value")
    if not isinstance(value, str):
        return
    match = _HEX_RE.match(value.strip())
    if match is None:
        return
    digits = match.group(1).lower()
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    if len(digits) == 6:
        digits = "ff" + digits
    else:
        digits = digits[6:] + digits[:6]
    token["value"] = f"#{digits}"


TRANSFORM_GROUPS: dict[TransformGroup, tuple[Callable[[Token], None], ...]] = {
    TransformGroup.WEB: (attribute_cti, name_kebab),
    TransformGroup.ANDROID: (attribute_cti, name_snake, color_hex8_android),
    TransformGroup.IOS: (attribute_cti, name_pascal),
}


def apply_transform_group(group: TransformGroup, tokens: list[Token]) -> None:
    for transform in TRANSFORM_GROUPS[group]:
        for token in tokens:
            transform(token)
