"""
DOM - Document Object Model for yn

Two views of the same YAML text:

- a flat TokenStream, where concatenating every token's origin gives back the
  source byte for byte
- a Node tree (DocumentSet > Document > Mapping/Sequence/...) whose nodes point
  at their defining token

Key invariant: tokens never hold references to each other. Neighbours are
found by index arithmetic on the owning stream.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum


class TokenKind(Enum):
    STRING = "string"
    SINGLE_QUOTED_STRING = "single_quoted_string"
    DOUBLE_QUOTED_STRING = "double_quoted_string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOL = "bool"
    NULL = "null"
    ANCHOR = "anchor"
    ALIAS = "alias"
    MAPPING_VALUE_INDICATOR = "mapping_value_indicator"
    BLOCK_STRUCTURE_INDICATOR = "block_structure_indicator"
    FLOW_INDICATOR = "flow_indicator"
    DOCUMENT_INDICATOR = "document_indicator"
    TAG = "tag"
    DIRECTIVE = "directive"
    COMMENT = "comment"
    OTHER = "other"


INDICATOR_KINDS = frozenset({
    TokenKind.MAPPING_VALUE_INDICATOR,
    TokenKind.BLOCK_STRUCTURE_INDICATOR,
    TokenKind.FLOW_INDICATOR,
    TokenKind.DOCUMENT_INDICATOR,
})

# Indicators that introduce the token after them (":" and "-" / "?")
BLOCK_STRUCTURE_KINDS = frozenset({
    TokenKind.MAPPING_VALUE_INDICATOR,
    TokenKind.BLOCK_STRUCTURE_INDICATOR,
})

STRING_KINDS = frozenset({
    TokenKind.STRING,
    TokenKind.SINGLE_QUOTED_STRING,
    TokenKind.DOUBLE_QUOTED_STRING,
})


@dataclass(frozen=True)
class Position:
    """Where a token's significant text starts."""
    line: int  # 1-based
    column: int  # 1-based
    indent: int  # where the line content starts, past any "- " markers


@dataclass(frozen=True)
class Token:
    """A lexical unit. `origin` includes the whitespace that precedes it."""
    kind: TokenKind
    origin: str
    position: Position
    index: int

    @property
    def is_indicator(self) -> bool:
        return self.kind in INDICATOR_KINDS

    @property
    def is_block_structure(self) -> bool:
        return self.kind in BLOCK_STRUCTURE_KINDS

    @property
    def value(self) -> str:
        """Origin without the leading whitespace."""
        return self.origin.lstrip(" \t\r\n")


class TokenStream(Sequence):
    """Immutable, ordered tokens. prev/next are index lookups."""

    def __init__(self, tokens: list[Token] | None = None):
        self._tokens: tuple[Token, ...] = tuple(tokens or ())

    def __getitem__(self, index):
        return self._tokens[index]

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    def prev(self, token: Token) -> Token | None:
        if token.index <= 0:
            return None
        return self._tokens[token.index - 1]

    def next(self, token: Token) -> Token | None:
        if token.index + 1 >= len(self._tokens):
            return None
        return self._tokens[token.index + 1]

    def prev_kind(self, token: Token) -> TokenKind | None:
        prev = self.prev(token)
        return prev.kind if prev is not None else None

    def next_kind(self, token: Token) -> TokenKind | None:
        nxt = self.next(token)
        return nxt.kind if nxt is not None else None

    @property
    def text(self) -> str:
        """Source text rebuilt from origins."""
        return "".join(t.origin for t in self._tokens)


class NodeKind(Enum):
    DOCUMENT_SET = "document_set"
    DOCUMENT = "document"
    MAPPING = "mapping"
    MAPPING_ENTRY = "mapping_entry"
    SEQUENCE = "sequence"
    SCALAR = "scalar"
    ALIAS = "alias"


@dataclass(eq=False)
class Node:
    """
    A node in the document tree.

    One class, closed set of kinds. Which fields are meaningful depends on
    `kind`:

    - DOCUMENT_SET: documents
    - DOCUMENT: body (None for an empty document)
    - MAPPING: entries (MAPPING_ENTRY nodes)
    - MAPPING_ENTRY: key, value_node
    - SEQUENCE: items
    - SCALAR: value
    - ALIAS: value (the anchor name it refers to)

    Scalars and collections keep their `&anchor` / `!tag` tokens in
    `properties`.

    Nodes compare by identity.
    """
    kind: NodeKind
    path: str
    token: Token | None = None
    start: int = 0
    end: int = 0
    value: str | None = None
    key: Node | None = None
    value_node: Node | None = None
    body: Node | None = None
    documents: list[Node] = field(default_factory=list)
    entries: list[Node] = field(default_factory=list)
    items: list[Node] = field(default_factory=list)
    anchor: str | None = None
    properties: list[Token] = field(default_factory=list)  # anchor / tag tokens

    def children(self) -> Iterator[Node]:
        """Traversal children in the fixed per-kind order."""
        match self.kind:
            case NodeKind.DOCUMENT_SET:
                yield from self.documents
            case NodeKind.DOCUMENT:
                if self.body is not None:
                    yield self.body
            case NodeKind.MAPPING:
                yield from self.entries
            case NodeKind.MAPPING_ENTRY:
                if self.key is not None:
                    yield self.key
                if self.value_node is not None:
                    yield self.value_node
            case NodeKind.SEQUENCE:
                yield from self.items
            case NodeKind.SCALAR | NodeKind.ALIAS:
                return

    def depth_first(self) -> Iterator[Node]:
        """Traverse tree depth-first, yielding self then children."""
        yield self
        for child in self.children():
            yield from child.depth_first()

    @property
    def line(self) -> int | None:
        """Line of the defining token, if any."""
        return self.token.position.line if self.token is not None else None


def document_set(documents: list[Node]) -> Node:
    return Node(kind=NodeKind.DOCUMENT_SET, path="", documents=documents)


def document(body: Node | None, token: Token | None = None, start: int = 0, end: int = 0) -> Node:
    return Node(kind=NodeKind.DOCUMENT, path="", body=body, token=token, start=start, end=end)


def mapping_entry(path: str, key: Node, value: Node) -> Node:
    """Entry spans its key and value; it is defined by its key's token."""
    return Node(
        kind=NodeKind.MAPPING_ENTRY,
        path=path,
        key=key,
        value_node=value,
        token=key.token,
        start=key.start,
        end=max(key.end, value.end),
    )
