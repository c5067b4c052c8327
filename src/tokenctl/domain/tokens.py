"""Raw token trees: merging, flattening, and reference resolution.

A raw token file is a nested JSON object.  Any object holding a ``value``
(or ``$value``) key is a token leaf; everything above it is grouping.  The
flattened form is a plain dict per token, which is what filters and
renderers consume::

    {"name": "color-brand-primary", "path": ["color", "brand", "primary"],
     "value": "#0055ff", "type": "color", "attributes": {...},
     "filePath": "sd4/all-tokens/acme/color.json", "original": {...}}
"""

from __future__ import annotations

import copy
import logging
import re
from collections.abc import Iterator, Mapping
from typing import Any

from tokenctl.domain.errors import TokenReferenceError

logger = logging.getLogger(__name__)

_VALUE_KEYS = ("value", "$value")
_TYPE_KEYS = ("type", "$type")
_REFERENCE_RE = re.compile(r"\{([^{}]+)\}")
_MAX_REFERENCE_DEPTH = 32


def is_token(node: Any) -> bool:
    """Return True if *node* is a token leaf."""
    return isinstance(node, Mapping) and any(key in node for key in _VALUE_KEYS)


def merge_trees(target: dict[str, Any], incoming: Mapping[str, Any], *, origin: str = "") -> None:
    """Deep-merge *incoming* into *target* in place; later values win."""
    for key, value in incoming.items():
        existing = target.get(key)
        if isinstance(existing, dict) and isinstance(value, Mapping):
            if is_token(existing) or is_token(value):
                logger.warning("Token collision at %r (from %s); later value wins", key, origin)
                target[key] = copy.deepcopy(dict(value))
            else:
                merge_trees(existing, value, origin=origin)
        else:
            if key in target:
                logger.warning("Token collision at %r (from %s); later value wins", key, origin)
            target[key] = copy.deepcopy(value) if isinstance(value, Mapping) else value


def flatten_tree(
    tree: Mapping[str, Any],
    *,
    file_paths: Mapping[tuple[str, ...], str] | None = None,
) -> list[dict[str, Any]]:
    """Flatten a merged tree into token dicts in document order.

    *file_paths* optionally maps a token path (or a prefix of one) to the
    file it was read from, recorded as ``filePath``.
    """
    tokens: list[dict[str, Any]] = []
    for path, leaf in _walk(tree, ()):
        token: dict[str, Any] = {
            key: copy.deepcopy(val)
            for key, val in leaf.items()
            if key not in _VALUE_KEYS and key not in _TYPE_KEYS
        }
        token["value"] = copy.deepcopy(_first(leaf, _VALUE_KEYS))
        token_type = _first(leaf, _TYPE_KEYS)
        if token_type is not None:
            token["type"] = token_type
        token["path"] = list(path)
        token["name"] = "-".join(path)
        token["original"] = copy.deepcopy(dict(leaf))
        attributes = leaf.get("attributes")
        token["attributes"] = dict(attributes) if isinstance(attributes, Mapping) else {}
        if file_paths:
            token["filePath"] = _lookup_file(path, file_paths)
        tokens.append(token)
    return tokens


def resolve_references(tokens: list[dict[str, Any]]) -> None:
    """Replace ``{a.b.c}`` references in string values, in place.

    A value that is exactly one reference takes the referenced value as-is
    (so non-string values survive); embedded references are interpolated.
    """
    by_path = {".".join(token["path"]): token for token in tokens}
    for token in tokens:
        token["value"] = _resolve_value(token["value"], by_path, [".".join(token["path"])])


def _resolve_value(value: Any, by_path: dict[str, dict[str, Any]], stack: list[str]) -> Any:
    if isinstance(value, dict):
        return {key: _resolve_value(val, by_path, stack) for key, val in value.items()}
    if isinstance(value, list):
        return [_resolve_value(item, by_path, stack) for item in value]
    if not isinstance(value, str) or "{" not in value:
        return value
    if len(stack) > _MAX_REFERENCE_DEPTH:
        msg = f"Reference chain too deep: {' -> '.join(stack)}"
        raise TokenReferenceError(msg)

    whole = _REFERENCE_RE.fullmatch(value)
    if whole:
        return _follow(whole.group(1), by_path, stack)

    def _substitute(match: re.Match[str]) -> str:
        return str(_follow(match.group(1), by_path, stack))

    return _REFERENCE_RE.sub(_substitute, value)


def _follow(ref: str, by_path: dict[str, dict[str, Any]], stack: list[str]) -> Any:
    ref = ref.strip()
    if ref.endswith(".value"):
        ref = ref[: -len(".value")]
    if ref in stack:
        msg = f"Circular reference: {' -> '.join([*stack, ref])}"
        raise TokenReferenceError(msg)
    target = by_path.get(ref)
    if target is None:
        msg = f"Reference {{{ref}}} in {stack[-1]!r} does not match any token"
        raise TokenReferenceError(msg)
    return _resolve_value(target["value"], by_path, [*stack, ref])


def _walk(
    node: Mapping[str, Any], path: tuple[str, ...]
) -> Iterator[tuple[tuple[str, ...], Mapping[str, Any]]]:
    for key, child in node.items():
        if key.startswith("$") or not isinstance(child, Mapping):
            continue
        child_path = (*path, str(key))
        if is_token(child):
            yield child_path, child
        else:
            yield from _walk(child, child_path)


def _first(leaf: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in leaf:
            return leaf[key]
    return None


def _lookup_file(path: tuple[str, ...], file_paths: Mapping[tuple[str, ...], str]) -> str:
    for size in range(len(path), 0, -1):
        found = file_paths.get(path[:size])
        if found is not None:
            return found
    return ""
