"""
Highlighting renderer.

Rebuilds the document text from the token stream, one token at a time,
styling each token by its semantic category. Tokens owned by the nodes of a
QueryResult get the highlighted palette instead of the default one.

Render functions are plain `str -> str` callables (rich styles underneath),
kept in a table keyed by Category. Multi-step styling is an ordered chain of
such functions (mux_render).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from rich.color import ColorSystem
from rich.style import Style
from rich.text import Text

from .config import Config, StyleSet
from .dom import STRING_KINDS, Node, Token, TokenKind, TokenStream
from .parser import Parsed
from .query import QueryResult, query

logger = logging.getLogger(__name__)

RenderFunc = Callable[[str], str]


class Category(Enum):
    MAP_KEY = "map_key"
    ANCHOR = "anchor"
    ALIAS = "alias"
    BOOL = "bool"
    STRING = "string"
    NUMBER = "number"
    NULL = "null"
    TAG = "tag"
    INDICATOR = "indicator"


COLOR_SYSTEMS: dict[str, ColorSystem | None] = {
    "standard": ColorSystem.STANDARD,
    "256": ColorSystem.EIGHT_BIT,
    "truecolor": ColorSystem.TRUECOLOR,
    "none": None,
}


def empty_render(text: str) -> str:
    return text


def color_render(style: Style | str, color_system: ColorSystem | None = ColorSystem.STANDARD) -> RenderFunc:
    """Wrap text in the ANSI codes of a rich style."""
    if isinstance(style, str):
        style = Style.parse(style) if style.strip() else Style.null()

    def render(text: str) -> str:
        return style.render(text, color_system=color_system)

    return render


def clean_whitespace(text: str) -> str:
    """Whitespace-only text is returned bare, without any styling around it."""
    if "\x1b" not in text:
        return text
    plain = Text.from_ansi(text).plain
    if plain and not plain.strip():
        return plain
    return text


def mux_render(*fns: RenderFunc) -> RenderFunc:
    """Apply render functions left to right."""
    def render(text: str) -> str:
        for fn in fns:
            text = fn(text)
        return text

    return render


@dataclass(frozen=True)
class RenderProperties:
    """Render function per category. Missing categories render unstyled."""
    funcs: Mapping[Category, RenderFunc] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "funcs", MappingProxyType(dict(self.funcs)))

    def render_func(self, category: Category | None) -> RenderFunc:
        if category is None:
            return empty_render
        return self.funcs.get(category, empty_render)

    @classmethod
    def from_styles(cls, styles: StyleSet, color_system: ColorSystem | None = ColorSystem.STANDARD) -> RenderProperties:
        funcs = {
            category: mux_render(
                color_render(getattr(styles, category.value), color_system),
                clean_whitespace,
            )
            for category in Category
        }
        return cls(funcs)


def categorize(tokens: TokenStream, token: Token) -> Category | None:
    """
    Semantic category of a token, by fixed precedence:

    1. indicators
    2. content right after an anchor / alias marker
    3. content right before ":" (mapping keys)
    4. the token's literal kind
    """
    if token.is_indicator:
        return Category.INDICATOR
    if token.kind is TokenKind.COMMENT:
        return None

    match tokens.prev_kind(token):
        case TokenKind.ANCHOR:
            return Category.ANCHOR
        case TokenKind.ALIAS:
            return Category.ALIAS

    if tokens.next_kind(token) is TokenKind.MAPPING_VALUE_INDICATOR:
        return Category.MAP_KEY

    match token.kind:
        case TokenKind.BOOL:
            return Category.BOOL
        case TokenKind.INTEGER | TokenKind.FLOAT:
            return Category.NUMBER
        case TokenKind.NULL:
            return Category.NULL
        case TokenKind.ANCHOR:
            return Category.ANCHOR
        case TokenKind.ALIAS:
            return Category.ALIAS
        case TokenKind.TAG:
            return Category.TAG
        case kind if kind in STRING_KINDS:
            return Category.STRING
    return None


def highlight_state(tokens: TokenStream, token: Token, result: QueryResult) -> tuple[bool, Node | None]:
    """
    (highlighted, owning matched node) for a token.

    ":" and "-" have no node of their own; they follow the token they
    introduce.
    """
    if result.is_highlighted(token):
        return True, result.owner(token)
    if token.is_block_structure:
        nxt = tokens.next(token)
        if nxt is not None and result.is_highlighted(nxt):
            return True, result.owner(nxt)
    return False, None


@dataclass(frozen=True)
class Printer:
    """Immutable render configuration: two palettes and a gutter."""
    default: RenderProperties = field(default_factory=RenderProperties)
    highlighted: RenderProperties = field(default_factory=RenderProperties)
    gutter: RenderFunc = empty_render
    gutter_separator: str = " │ "

    @classmethod
    def from_config(cls, config: Config, color: bool = True) -> Printer:
        if not color:
            return cls(gutter_separator=config.display.gutter_separator)
        color_system = COLOR_SYSTEMS[config.display.color_system]
        return cls(
            default=RenderProperties.from_styles(config.styles.default, color_system),
            highlighted=RenderProperties.from_styles(config.styles.highlighted, color_system),
            gutter=color_render(config.display.gutter_style, color_system),
            gutter_separator=config.display.gutter_separator,
        )

    def render_func(self, tokens: TokenStream, token: Token, highlighted: bool) -> RenderFunc:
        props = self.highlighted if highlighted else self.default
        return props.render_func(categorize(tokens, token))

    def render(
        self,
        tokens: TokenStream,
        result: QueryResult | None = None,
        line_numbers: bool = False,
    ) -> tuple[str, list[Node]]:
        """
        Render the whole stream; returns (text, matched nodes).

        A token's origin may span lines (leading newlines, block scalars).
        Its first piece continues the current output line, every other
        piece starts a new one. On highlighted continuation lines the
        owning node's indentation stays unstyled.
        """
        if not tokens:
            return "", []
        if result is None:
            result = QueryResult(path="")

        lines: list[str] = []
        current: list[str] = []

        for token in tokens:
            if not token.origin:
                continue
            highlighted, owner = highlight_state(tokens, token, result)
            style = self.render_func(tokens, token, highlighted)

            pieces = token.origin.split("\n")
            for n, piece in enumerate(pieces):
                if n:
                    lines.append("".join(current))
                    current = []
                # "\r" of a CRLF break is part of the break, never styled
                eol = "\r" if n + 1 < len(pieces) and piece.endswith("\r") else ""
                text = piece[:len(piece) - len(eol)]
                indent = 0
                if n and highlighted and owner is not None and owner.token is not None:
                    lead = len(text) - len(text.lstrip(" "))
                    indent = min(owner.token.position.indent, lead)
                current.append(text[:indent])
                if text[indent:]:
                    current.append(style(text[indent:]))
                current.append(eol)

        lines.append("".join(current))

        if line_numbers:
            lines = self._number(lines)

        logger.debug("rendered %d lines, %d matches", len(lines), len(result.nodes))
        return "\n".join(lines), list(result.nodes)

    def _number(self, lines: list[str]) -> list[str]:
        width = len(str(len(lines)))
        return [
            self.gutter(f"{n:0{width}d}{self.gutter_separator}") + line
            for n, line in enumerate(lines, start=1)
        ]


def render(
    tokens: TokenStream,
    result: QueryResult | None = None,
    line_numbers: bool = False,
    printer: Printer | None = None,
) -> tuple[str, list[Node]]:
    """Render with an explicit printer (default palette if omitted)."""
    printer = printer or Printer.from_config(Config())
    return printer.render(tokens, result, line_numbers)


def render_query(
    parsed: Parsed,
    path: str,
    line_numbers: bool = False,
    printer: Printer | None = None,
) -> tuple[str, list[Node]]:
    """Query + render in one step."""
    return render(parsed.tokens, query(parsed.documents, path), line_numbers, printer)
