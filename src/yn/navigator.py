"""
Navigation state for a display surface.

Holds the parsed document, the current query, its matches and which match
has focus. Each query change re-runs query + render in full; confirming
the same query again moves focus to the next match.
"""

from __future__ import annotations

import textwrap

from .dom import Node
from .parser import Parsed
from .query import query
from .render import Printer
from .suggestions import suggestions


class Navigator:
    """Query/render/focus state. Knows nothing about terminals or keys."""

    def __init__(self, parsed: Parsed, printer: Printer | None = None, line_numbers: bool = False):
        self.parsed = parsed
        self.printer = printer or Printer()
        self.line_numbers = line_numbers
        self.path = ""
        self.content = ""
        self.matches: list[Node] = []
        self.index = -1
        self.suggestions = suggestions(parsed.documents)
        self.navigate("")

    def navigate(self, path: str) -> str:
        """Render for `path`; focus is reset (no match focused)."""
        self.path = path
        result = query(self.parsed.documents, path)
        self.content, self.matches = self.printer.render(self.parsed.tokens, result, self.line_numbers)
        self.index = -1
        return self.content

    def confirm(self, path: str) -> Node | None:
        """
        Confirm a query: a new path is rendered and its first match focused;
        the same path again cycles to the next match.
        """
        if path != self.path:
            self.navigate(path)
        return self.next_match()

    def next_match(self) -> Node | None:
        if not self.matches:
            return None
        self.index = (self.index + 1) % len(self.matches)
        return self.matches[self.index]

    def toggle_line_numbers(self) -> str:
        self.line_numbers = not self.line_numbers
        index = self.index
        self.navigate(self.path)
        self.index = index
        return self.content

    @property
    def current_match(self) -> Node | None:
        if 0 <= self.index < len(self.matches):
            return self.matches[self.index]
        return None

    @property
    def match_label(self) -> str:
        """`2/3` style indicator, empty when nothing matched."""
        if not self.matches:
            return ""
        return f"{max(self.index, 0) + 1}/{len(self.matches)}"

    def scroll_target(self, viewport_height: int) -> int:
        """First visible line that puts the focused match mid-viewport."""
        node = self.current_match
        if node is None or node.line is None:
            return 0
        return max(0, node.line - viewport_height // 2)

    def node_text(self, node: Node) -> str:
        """Source text of a node, dedented to its own column."""
        source = self.parsed.source
        line_start = source.rfind("\n", 0, node.start) + 1
        text = " " * (node.start - line_start) + source[node.start:node.end]
        return textwrap.dedent(text).strip("\n")

    def output(self) -> str:
        """The query and every match's text, `---` separated."""
        if not self.path or not self.matches:
            return ""
        nodes = "\n---\n".join(self.node_text(node) for node in self.matches)
        return f"{self.path}\n\n{nodes}\n"
