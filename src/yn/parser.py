"""
PyYAML adapter: YAML text -> (DocumentSet tree, TokenStream).

PyYAML gives two independent views of the input, scanner tokens and parser
events. Tokens become the TokenStream (origins cover the source exactly,
gaps included). Events are composed into the Node tree; each node is tied
back to its defining token through source offsets.

Structural paths follow the JSONPath-ish form trees usually report:
`$` for a document body, `.key` for mapping entries, `[i]` for sequence
items. An entry, its key node and its value node share one path.
"""

from __future__ import annotations

import logging
import re
from bisect import bisect_left, bisect_right
from dataclasses import dataclass

import yaml
from yaml import events as ev
from yaml import tokens as tk
from yaml.resolver import Resolver

from .dom import (
    Node,
    NodeKind,
    Position,
    Token,
    TokenKind,
    TokenStream,
    document,
    document_set,
    mapping_entry,
)
from .errors import InputError, ParseError

logger = logging.getLogger(__name__)

ROOT = "$"
BOM = "\ufeff"

_RESOLVER = Resolver()

_RESOLVED_KINDS = {
    "tag:yaml.org,2002:bool": TokenKind.BOOL,
    "tag:yaml.org,2002:int": TokenKind.INTEGER,
    "tag:yaml.org,2002:float": TokenKind.FLOAT,
    "tag:yaml.org,2002:null": TokenKind.NULL,
}

_FIXED_KINDS: dict[type, TokenKind] = {
    tk.AnchorToken: TokenKind.ANCHOR,
    tk.AliasToken: TokenKind.ALIAS,
    tk.TagToken: TokenKind.TAG,
    tk.DirectiveToken: TokenKind.DIRECTIVE,
    tk.ValueToken: TokenKind.MAPPING_VALUE_INDICATOR,
    tk.BlockEntryToken: TokenKind.BLOCK_STRUCTURE_INDICATOR,
    tk.FlowSequenceStartToken: TokenKind.FLOW_INDICATOR,
    tk.FlowSequenceEndToken: TokenKind.FLOW_INDICATOR,
    tk.FlowMappingStartToken: TokenKind.FLOW_INDICATOR,
    tk.FlowMappingEndToken: TokenKind.FLOW_INDICATOR,
    tk.FlowEntryToken: TokenKind.FLOW_INDICATOR,
    tk.DocumentStartToken: TokenKind.DOCUMENT_INDICATOR,
    tk.DocumentEndToken: TokenKind.DOCUMENT_INDICATOR,
}

# Node properties sitting between a node's start and its content token
_PROPERTY_TOKENS = (tk.AnchorToken, tk.TagToken)

_SCALAR_TOKENS = (tk.ScalarToken,)
_ALIAS_TOKENS = (tk.AliasToken,)
_MAPPING_TOKENS = (tk.BlockMappingStartToken, tk.FlowMappingStartToken)
_SEQUENCE_TOKENS = (tk.BlockSequenceStartToken, tk.FlowSequenceStartToken, tk.BlockEntryToken)

# Leading spaces and block indicators ("- ", "? ") before a line's content
_BLOCK_PREFIX = re.compile(r"(?:[ ]*[-?](?:[ \t]+|$))*[ ]*")


@dataclass(frozen=True)
class Parsed:
    """Output of the parser: tree, tokens, and the text both came from."""
    documents: Node
    tokens: TokenStream
    source: str


def parse(data: str | bytes) -> Parsed:
    """
    Parse YAML text into a DocumentSet tree and a TokenStream.

    Raises ParseError when PyYAML rejects the input and InputError when
    bytes are not valid UTF-8.
    """
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InputError(f"input is not valid UTF-8: {e}") from e

    try:
        raw_tokens = list(yaml.scan(data, Loader=yaml.SafeLoader))
        raw_events = list(yaml.parse(data, Loader=yaml.SafeLoader))
    except yaml.MarkedYAMLError as e:
        mark = e.problem_mark or e.context_mark
        message = e.problem or e.context or "invalid YAML"
        if mark is None:
            raise ParseError(message) from e
        raise ParseError(message, mark.line + 1, mark.column + 1) from e
    except yaml.YAMLError as e:
        raise ParseError(str(e)) from e

    lines = _LineIndex(data)
    stream, by_raw = _build_tokens(data, raw_tokens, lines)
    root = _Composer(data, raw_tokens, by_raw, raw_events).compose()

    logger.debug(
        "parsed %d chars into %d tokens, %d documents",
        len(data), len(stream), len(root.documents),
    )
    return Parsed(documents=root, tokens=stream, source=data)


class _LineIndex:
    """
    Offset -> (line, column, indent) over '\\n'-separated lines.

    Indent is where the line's content starts: leading spaces plus any
    "- " / "? " markers, so `- key: v` is indented like `  key: v`.
    """

    def __init__(self, text: str):
        self.starts = [0]
        for i, ch in enumerate(text):
            if ch == "\n":
                self.starts.append(i + 1)
        self.indents = []
        for n, start in enumerate(self.starts):
            end = self.starts[n + 1] - 1 if n + 1 < len(self.starts) else len(text)
            line = text[start:end]
            self.indents.append(_BLOCK_PREFIX.match(line).end())

    def position(self, offset: int) -> Position:
        line = bisect_right(self.starts, offset)
        return Position(
            line=line,
            column=offset - self.starts[line - 1] + 1,
            indent=self.indents[line - 1],
        )


def _token_kind(raw: tk.Token) -> TokenKind:
    if isinstance(raw, tk.ScalarToken):
        if raw.style == "'":
            return TokenKind.SINGLE_QUOTED_STRING
        if raw.style == '"':
            return TokenKind.DOUBLE_QUOTED_STRING
        if not raw.plain:
            return TokenKind.STRING  # block literal/folded
        tag = _RESOLVER.resolve(yaml.ScalarNode, raw.value, (True, False))
        return _RESOLVED_KINDS.get(tag, TokenKind.STRING)
    if isinstance(raw, tk.KeyToken) and raw.end_mark.index > raw.start_mark.index:
        return TokenKind.BLOCK_STRUCTURE_INDICATOR  # explicit "?"
    return _FIXED_KINDS.get(type(raw), TokenKind.OTHER)


def _split_comment(gap: str) -> int:
    """Length of the comment part of a gap (0 if none); the rest is whitespace."""
    last = gap.rfind("#")
    if last == -1:
        return 0
    newline = gap.find("\n", last)
    return newline if newline != -1 else len(gap)


def _build_tokens(
    text: str,
    raw_tokens: list[tk.Token],
    lines: _LineIndex,
) -> tuple[TokenStream, list[Token]]:
    """
    Turn scanner tokens into Tokens whose origins tile the source.

    Whitespace before a token is folded into its origin. Comments become
    their own COMMENT tokens. Zero-width scanner tokens (block starts/ends,
    simple keys) are kept with an empty origin so that structure stays
    visible to prev/next lookups. A leading byte order mark is its own
    OTHER token.
    """
    out: list[Token] = []
    by_raw: list[Token] = []
    cursor = 0

    def emit(kind: TokenKind, origin: str, offset: int) -> Token:
        token = Token(kind=kind, origin=origin, position=lines.position(offset), index=len(out))
        out.append(token)
        return token

    def flush_gap(upto: int) -> str:
        """Emit any comment in text[cursor:upto]; return the whitespace left."""
        gap = text[cursor:upto]
        comment_len = _split_comment(gap)
        if comment_len:
            emit(TokenKind.COMMENT, gap[:comment_len], cursor + gap.index("#"))
            gap = gap[comment_len:]
        return gap

    if text.startswith(BOM):
        emit(TokenKind.OTHER, BOM, 0)
        cursor = len(BOM)

    for raw in raw_tokens:
        start, end = raw.start_mark.index, raw.end_mark.index
        kind = _token_kind(raw)

        if isinstance(raw, tk.StreamEndToken):
            tail = flush_gap(len(text))
            if tail:
                emit(TokenKind.OTHER, tail, len(text) - len(tail))
            cursor = len(text)
            by_raw.append(emit(kind, "", len(text)))
            continue

        if end <= start:
            by_raw.append(emit(kind, "", start))
            continue

        gap = flush_gap(start)
        by_raw.append(emit(kind, gap + text[start:end], start))
        cursor = end

    return TokenStream(out), by_raw


class _Composer:
    """Builds the Node tree from parser events (cf. yaml.composer.Composer)."""

    def __init__(
        self,
        text: str,
        raw_tokens: list[tk.Token],
        by_raw: list[Token],
        raw_events: list[ev.Event],
    ):
        self.text = text
        self.raw_tokens = raw_tokens
        self.by_raw = by_raw
        self.raw_starts = [t.start_mark.index for t in raw_tokens]
        self.events = raw_events
        self.pos = 0
        self.anchors: dict[str, Node] = {}

    def peek(self) -> ev.Event:
        return self.events[self.pos]

    def take(self) -> ev.Event:
        event = self.events[self.pos]
        self.pos += 1
        return event

    def compose(self) -> Node:
        self.take()  # StreamStartEvent
        documents = []
        while not isinstance(self.peek(), ev.StreamEndEvent):
            documents.append(self.compose_document())
        self.take()
        return document_set(documents)

    def compose_document(self) -> Node:
        start_event = self.take()
        self.anchors = {}
        body = self.compose_node(ROOT)
        end_event = self.take()

        token = body.token
        if start_event.explicit:
            token = self.token_at(start_event.start_mark.index, (tk.DocumentStartToken,), end_event.end_mark.index)
        return document(
            body,
            token=token,
            start=start_event.start_mark.index,
            end=end_event.end_mark.index,
        )

    def compose_node(self, path: str) -> Node:
        event = self.peek()
        if isinstance(event, ev.AliasEvent):
            self.take()
            return Node(
                kind=NodeKind.ALIAS,
                path=path,
                value=event.anchor,
                token=self.token_for(event, _ALIAS_TOKENS),
                start=event.start_mark.index,
                end=event.end_mark.index,
            )
        if isinstance(event, ev.ScalarEvent):
            node = self.compose_scalar(path)
        elif isinstance(event, ev.SequenceStartEvent):
            node = self.compose_sequence(path)
        elif isinstance(event, ev.MappingStartEvent):
            node = self.compose_mapping(path)
        else:
            raise ParseError(f"unexpected event {type(event).__name__}")
        if node.anchor is not None:
            self.anchors[node.anchor] = node
        return node

    def compose_scalar(self, path: str) -> Node:
        event = self.take()
        return Node(
            kind=NodeKind.SCALAR,
            path=path,
            value=event.value,
            anchor=event.anchor,
            properties=self.properties_for(event),
            token=self.token_for(event, _SCALAR_TOKENS),
            start=event.start_mark.index,
            end=event.end_mark.index,
        )

    def compose_sequence(self, path: str) -> Node:
        start_event = self.take()
        node = Node(
            kind=NodeKind.SEQUENCE,
            path=path,
            anchor=start_event.anchor,
            properties=self.properties_for(start_event),
            token=self.token_for(start_event, _SEQUENCE_TOKENS),
            start=start_event.start_mark.index,
        )
        index = 0
        while not isinstance(self.peek(), ev.SequenceEndEvent):
            node.items.append(self.compose_node(f"{path}[{index}]"))
            index += 1
        end_event = self.take()
        node.end = self.collection_end(node.items, start_event, end_event)
        return node

    def compose_mapping(self, path: str) -> Node:
        start_event = self.take()
        node = Node(
            kind=NodeKind.MAPPING,
            path=path,
            anchor=start_event.anchor,
            properties=self.properties_for(start_event),
            token=self.token_for(start_event, _MAPPING_TOKENS),
            start=start_event.start_mark.index,
        )
        while not isinstance(self.peek(), ev.MappingEndEvent):
            key = self.compose_node(path)
            entry_path = f"{path}.{self.key_segment(key)}"
            for inner in key.depth_first():
                inner.path = entry_path + inner.path[len(path):]
            value = self.compose_node(entry_path)
            node.entries.append(mapping_entry(entry_path, key, value))
        end_event = self.take()
        node.end = self.collection_end(node.entries, start_event, end_event)
        return node

    def key_segment(self, key: Node) -> str:
        match key.kind:
            case NodeKind.SCALAR:
                return key.value or ""
            case NodeKind.ALIAS:
                target = self.anchors.get(key.value or "")
                if target is not None and target.kind is NodeKind.SCALAR:
                    return target.value or ""
                return f"*{key.value}"
            case _:
                return self.text[key.start:key.end].strip()

    def collection_end(self, children: list[Node], start_event: ev.Event, end_event: ev.Event) -> int:
        """Block collections end where their last child ends, not at the dedent."""
        if start_event.flow_style or not children:
            return end_event.end_mark.index
        return max(child.end for child in children)

    def properties_for(self, event: ev.NodeEvent) -> list[Token]:
        """Anchor and tag tokens written ahead of a node's content."""
        if event.anchor is None and getattr(event, "tag", None) is None:
            return []
        found = []
        i = bisect_left(self.raw_starts, event.start_mark.index)
        while i < len(self.raw_tokens):
            raw = self.raw_tokens[i]
            if isinstance(raw, _PROPERTY_TOKENS):
                found.append(self.by_raw[i])
            elif raw.end_mark.index > raw.start_mark.index:
                break
            i += 1
        return found

    def token_for(self, event: ev.Event, accept: tuple[type, ...]) -> Token | None:
        return self.token_at(event.start_mark.index, accept, event.end_mark.index)

    def token_at(self, start: int, accept: tuple[type, ...], end: int) -> Token | None:
        """
        Defining token of a node spanning [start, end).

        Skips node properties (anchor, tag) and zero-width structure to find
        the content token. A node with no token of its own (empty scalar)
        falls back to the nearest real token before it, usually the ":" or
        "-" that introduced it.
        """
        i = bisect_left(self.raw_starts, start)
        first = i
        while i < len(self.raw_tokens):
            raw = self.raw_tokens[i]
            if isinstance(raw, accept) and raw.end_mark.index <= end:
                return self.by_raw[i]
            if isinstance(raw, _PROPERTY_TOKENS) or raw.end_mark.index == raw.start_mark.index:
                i += 1
                continue
            break

        for j in range(first - 1, -1, -1):
            raw = self.raw_tokens[j]
            if raw.end_mark.index > raw.start_mark.index and raw.end_mark.index <= end:
                return self.by_raw[j]
        return None
