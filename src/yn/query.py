"""
Query a document tree by path.

- find_node: first node (pre-order) whose query path equals the query
- collect_tokens: every token transitively owned by a node
- query: both, once per document, aggregated into a QueryResult
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .dom import Node, NodeKind, Token
from .paths import is_valid_query, matches

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    """Matches for one query path, in document order."""
    path: str
    nodes: list[Node] = field(default_factory=list)
    tokens: dict[int, Token] = field(default_factory=dict)  # token index -> token
    owners: dict[int, Node] = field(default_factory=dict)  # token index -> matched node

    def __bool__(self) -> bool:
        return bool(self.nodes)

    def is_highlighted(self, token: Token) -> bool:
        return token.index in self.tokens

    def owner(self, token: Token) -> Node | None:
        return self.owners.get(token.index)


def find_node(root: Node, query: str) -> Node | None:
    """
    Depth-first, pre-order search for the node at `query`.

    A node is tested before its children, so the outermost match wins:
    a mapping entry is found before its key or value, which share its
    path.
    """
    if not is_valid_query(query):
        return None
    return _find(root, query)


def _find(node: Node, query: str) -> Node | None:
    if matches(node, query):
        return node
    for child in node.children():
        found = _find(child, query)
        if found is not None:
            return found
    return None


def collect_tokens(node: Node) -> dict[int, Token]:
    """
    Tokens owned by a node: its anchor / tag tokens and defining token
    plus, recursively, those of its children. Keyed by token index, in
    visiting order.
    """
    tokens: dict[int, Token] = {}
    _collect(node, tokens)
    return tokens


def _collect(node: Node, tokens: dict[int, Token]) -> None:
    for prop in node.properties:
        tokens.setdefault(prop.index, prop)
    if node.token is not None:
        tokens.setdefault(node.token.index, node.token)
    for child in node.children():
        _collect(child, tokens)


def query(root: Node, path: str) -> QueryResult:
    """
    Run a query over a DocumentSet (or any single node).

    A path may match once in each document of a multi-document stream;
    every document is searched and the matches kept in document order.
    """
    result = QueryResult(path=path)
    if not is_valid_query(path):
        return result

    scopes = root.documents if root.kind is NodeKind.DOCUMENT_SET else [root]
    for scope in scopes:
        node = find_node(scope, path)
        if node is None:
            continue
        result.nodes.append(node)
        for index, token in collect_tokens(node).items():
            result.tokens.setdefault(index, token)
            result.owners.setdefault(index, node)

    logger.debug("query %r: %d matches, %d tokens", path, len(result.nodes), len(result.tokens))
    return result
