"""
Query paths.

Trees report structural paths like `$.a.b[0].c`. Users type query paths
like `a.b.0.c`. Canonicalization maps the first onto the second; the empty
string means "no path" and never matches.
"""

from __future__ import annotations

import re

from .dom import Node, NodeKind

ROOT = "$"

_INDEX_PATTERN = re.compile(r"\[(\d+)\]")


def canonicalize(path: str) -> str:
    """
    Structural path -> query path.

    `$.a.b[0].c` -> `a.b.0.c`, `$[1]` -> `1`, `$` -> ``.
    Anything that is not a `$`-rooted path with balanced numeric brackets
    canonicalizes to the empty string.
    """
    if not path or not path.startswith(ROOT):
        return ""
    rest = _INDEX_PATTERN.sub(r".\1", path[len(ROOT):])
    if "[" in rest or "]" in rest:
        return ""
    if rest and not rest.startswith("."):
        return ""
    return rest[1:]


def node_query_path(node: Node) -> str:
    """
    Query path of a node.

    Some trees report a mapping container at the path of its last entry.
    That dangling segment is trimmed so the container does not alias its
    last child. Only an exact match with the last entry's path counts; a
    mapping that merely ends in the same key name (`x: {x: 1}`) is left
    alone.
    """
    path = node.path
    if node.kind is NodeKind.MAPPING and node.entries and path == node.entries[-1].path:
        path = path[:path.rfind(".")]
    return canonicalize(path)


def split_query(query: str) -> list[str] | None:
    """
    Split a user query into segments.

    Returns None for an empty query or one with an empty segment, a
    whitespace-only segment, or bracket notation.
    """
    if not query:
        return None
    segments = query.split(".")
    for segment in segments:
        if not segment.strip() or "[" in segment or "]" in segment:
            return None
    return segments


def is_valid_query(query: str) -> bool:
    return split_query(query) is not None


def matches(node: Node, query: str) -> bool:
    """Does the node sit exactly at this query path?"""
    if not is_valid_query(query):
        return False
    path = node_query_path(node)
    return path != "" and path == query
