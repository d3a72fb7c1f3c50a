"""Ref-path patterns and concrete data paths.

A ref-path is a string such as ``$.people.*.name``: the ``$`` root followed by
dot separated tokens, where ``*`` matches any array index and ``^`` is a
placeholder filled in from a target path. A concrete path is a tuple of
tokens (``str`` keys and ``int`` indexes) addressing one location in a data
tree.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeAlias

from ._errors import RefPathError

if TYPE_CHECKING:
    from collections.abc import Generator

logger = logging.getLogger(__name__)

Token: TypeAlias = str | int
DataPath: TypeAlias = tuple[Token, ...]

ROOT_SYMBOL = "$"
PREFIX = "$."
WILDCARD = "*"
RELATIVE = "^"

MISSING = object()


def is_ref_path(value: object) -> bool:
    """Check whether a value is a ref-path string (starts with ``$.``)."""
    return isinstance(value, str) and value.startswith(PREFIX)


def split_ref_path(pattern: str) -> list[str]:
    """Split a ref-path into tokens without validating it."""
    if pattern.startswith(PREFIX):
        pattern = pattern[len(PREFIX) :]
    elif pattern == ROOT_SYMBOL:
        return []
    return pattern.split(".")


def parse_ref_path(pattern: str) -> tuple[str, ...]:
    """Parse a ref-path strictly.

    Raises:
        RefPathError: If the pattern has no ``$.`` prefix or contains empty tokens.

    """
    if not isinstance(pattern, str) or not pattern.startswith(PREFIX):
        msg = f"Ref-path must start with '{PREFIX}'. Got: {pattern!r}"
        raise RefPathError(msg)
    tokens = tuple(split_ref_path(pattern))
    if any(token == "" for token in tokens):
        msg = f"Ref-path contains an empty token: {pattern!r}"
        raise RefPathError(msg)
    return tokens


def _is_index(token: object) -> bool:
    return isinstance(token, int) and not isinstance(token, bool) and token >= 0


def _children(node: Any) -> Generator[tuple[Token, Any]]:
    if isinstance(node, dict):
        yield from node.items()
    elif isinstance(node, list):
        yield from enumerate(node)


def _lookup(node: Any, token: Token) -> Any:
    if isinstance(node, dict):
        if token in node:
            return node[token]
        if isinstance(token, int) and str(token) in node:
            return node[str(token)]
        return MISSING
    if isinstance(node, list):
        if isinstance(token, str):
            if not token.isdigit():
                return MISSING
            token = int(token)
        if isinstance(token, int) and 0 <= token < len(node):
            return node[token]
    return MISSING


def _lookup_value(tree: Any, path: DataPath | list[Token]) -> Any:
    current = tree
    for token in path:
        current = _lookup(current, token)
        if current is MISSING:
            return MISSING
    return current


def get_value(tree: Any, path: DataPath | list[Token]) -> Any:
    """Get the value at a concrete path, or ``None`` when it is absent."""
    value = _lookup_value(tree, path)
    return None if value is MISSING else value


def clear_value(tree: Any, path: DataPath) -> None:
    """Clear the value at a concrete path in place.

    Mapping entries are removed; list items are set to ``None`` so that the
    indexes of their siblings stay stable. Clearing under a missing parent is
    a no-op.
    """
    if not path:
        return
    parent = _lookup_value(tree, path[:-1])
    token = path[-1]
    if isinstance(parent, dict):
        if token in parent:
            del parent[token]
        elif isinstance(token, int) and str(token) in parent:
            del parent[str(token)]
    elif isinstance(parent, list):
        index = int(token) if isinstance(token, str) and token.isdigit() else token
        if isinstance(index, int) and 0 <= index < len(parent):
            parent[index] = None


def _token_matches(pattern_token: str, token: Token) -> bool:
    if pattern_token == WILDCARD:
        return _is_index(token)
    return str(token) == pattern_token


def _match(node: Any, tokens: list[str], prefix: DataPath, out: list[DataPath]) -> None:
    if not tokens:
        out.append(prefix)
        return
    head, rest = tokens[0], tokens[1:]
    for token, child in _children(node):
        if _token_matches(head, token):
            _match(child, rest, (*prefix, token), out)


def match_paths(pattern: str, tree: Any) -> list[DataPath]:
    """Find every concrete path in ``tree`` matching a ref-path pattern.

    A concrete path matches when it has as many tokens as the pattern and each
    token is equal to the pattern token, or the pattern token is ``*`` and the
    concrete token is a non-negative integer index. Results are in pre-order
    traversal order.

    Example:
        >>> match_paths("$.people.*.name", {"people": [{"name": "a"}, {"name": "b"}]})
        [('people', 0, 'name'), ('people', 1, 'name')]

    """
    tokens = split_ref_path(pattern)
    if not tokens:
        return []
    out: list[DataPath] = []
    _match(tree, tokens, (), out)
    return out


def pattern_for(path: DataPath | list[Token]) -> str:
    """Build the canonical ref-path for a concrete path.

    Integer tokens become ``*``. A single trailing ``.*`` is dropped: a leaf
    inside a repeated group is governed by the group item's configuration.
    """
    pattern = ROOT_SYMBOL
    for token in path:
        pattern += "." + (WILDCARD if _is_index(token) else str(token))
    if pattern.endswith("." + WILDCARD):
        pattern = pattern[: -len(WILDCARD) - 1]
    return pattern


def apply_relative_indexes(pattern: str, target_path: DataPath | list[Token] | None) -> str:
    """Replace each ``^`` token with the target path token at the same position."""
    target = tuple(target_path or ())
    tokens = []
    for position, token in enumerate(split_ref_path(pattern)):
        if token == RELATIVE:
            if position < len(target):
                token = str(target[position])
            else:
                logger.debug("No target token at position %d for %s", position, pattern)
        tokens.append(token)
    return PREFIX + ".".join(tokens)


def format_data_path(path: DataPath | list[Token]) -> str:
    """Render a concrete path as a dotted string (``people.0.name``)."""
    return ".".join(str(token) for token in path)


def data_path_from_ref(pattern: str) -> DataPath:
    """Convert a wildcard-free ref-path to a concrete path."""
    return tuple(split_ref_path(pattern))


def iter_leaves(
    node: Any,
    prefix: DataPath = (),
) -> Generator[tuple[DataPath, Any]]:
    """Yield ``(path, value)`` for every leaf under ``node`` in pre-order.

    Leaves are scalars, ``None`` and empty containers.
    """
    if isinstance(node, (dict, list)) and node:
        for token, child in _children(node):
            yield from iter_leaves(child, (*prefix, token))
    else:
        yield prefix, node
