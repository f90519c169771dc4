"""
Completion candidates: every query path that exists in the document.
"""

from __future__ import annotations

from .dom import Node
from .paths import node_query_path


def suggestions(root: Node) -> list[str]:
    """Unique query paths of every node in every document, sorted."""
    paths = {node_query_path(node) for node in root.depth_first()}
    paths.discard("")
    return sorted(paths)


def complete(candidates: list[str], prefix: str) -> list[str]:
    """Candidates starting with `prefix` (all of them for an empty prefix)."""
    return [c for c in candidates if c.startswith(prefix)]
