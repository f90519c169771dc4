"""
CLI interface for yn.

Reads YAML from a file or stdin, highlights the nodes at a query path and
prints the colored document (or the matched nodes, or path suggestions).
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from rich.errors import StyleSyntaxError

from .config import Config, get_config
from .errors import InputError, YnError
from .navigator import Navigator
from .parser import parse
from .render import Printer
from .suggestions import complete

logger = logging.getLogger(__name__)


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="yn",
        description="YAML navigator: highlight the nodes at a dotted path",
    )

    parser.add_argument(
        "file",
        nargs="?",
        help="Input file (reads from stdin if not provided)",
    )

    parser.add_argument(
        "--query",
        "-q",
        type=str,
        default="",
        help="Dotted path to highlight (e.g. spec.containers.0.image)",
    )

    parser.add_argument(
        "--line-numbers",
        "-n",
        action="store_true",
        default=None,
        help="Prefix lines with line numbers",
    )

    parser.add_argument(
        "--no-color",
        action="store_false",
        dest="color",
        default=True,
        help="Disable colors and highlighting styles",
    )

    parser.add_argument(
        "--output",
        "-o",
        action="store_true",
        help="Print the matched nodes instead of the whole document",
    )

    parser.add_argument(
        "--suggest",
        "-s",
        action="store_true",
        help="List every query path in the document (filtered by --query as a prefix)",
    )

    parser.add_argument(
        "--match",
        "-m",
        type=int,
        help="Start output around the Nth match (1-based)",
    )

    parser.add_argument(
        "--height",
        type=int,
        default=24,
        help="Viewport height used to place --match mid-screen (default: 24)",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log debug information to stderr",
    )

    return parser.parse_args(args)


def read_input(filepath: str | None, config: Config) -> str:
    """Read from file or stdin. Empty or oversized input is an InputError."""
    if filepath:
        size = os.path.getsize(filepath)
        if size > config.io.max_file_size:
            raise InputError(
                f"{filepath} is {size:,} bytes, over the {config.io.max_file_size:,} byte limit"
            )
        with open(filepath, encoding="utf-8") as f:
            content = f.read()
    else:
        content = sys.stdin.read()

    if not content.strip():
        raise InputError("input cannot be empty")
    return content


def select_lines(content: str, start: int, height: int) -> str:
    """`height` lines starting at 0-based line `start`."""
    lines = content.split("\n")
    return "\n".join(lines[start:start + height])


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parsed = parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    config = get_config()
    line_numbers = config.display.line_numbers if parsed.line_numbers is None else parsed.line_numbers

    # Read content
    try:
        content = read_input(parsed.file, config)
    except FileNotFoundError:
        print(f"Error: File not found: {parsed.file}", file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError, InputError) as e:
        print(f"Error reading input: {e}", file=sys.stderr)
        return 1

    try:
        document = parse(content)
    except YnError as e:
        print(f"Error on parsing input: {e}", file=sys.stderr)
        return 1

    if parsed.suggest:
        navigator = Navigator(document)
        for path in complete(navigator.suggestions, parsed.query):
            print(path)
        return 0

    try:
        printer = Printer.from_config(config, color=parsed.color)
    except StyleSyntaxError as e:
        print(f"Error: invalid style in config: {e}", file=sys.stderr)
        return 1

    navigator = Navigator(document, printer=printer, line_numbers=line_numbers)
    navigator.navigate(parsed.query)

    if parsed.query and not navigator.matches:
        print(f"No match for {parsed.query!r}", file=sys.stderr)

    if parsed.output:
        output = navigator.output()
        if output:
            print(output, end="")
        return 0

    content = navigator.content
    if parsed.match is not None and navigator.matches:
        for _ in range(max(parsed.match, 1)):
            navigator.next_match()
        start = navigator.scroll_target(parsed.height)
        logger.debug("match %s at line %s, scrolled to %d", navigator.match_label, navigator.current_match.line, start)
        content = select_lines(content, start, parsed.height)

    print(content)
    return 0


if __name__ == "__main__":
    sys.exit(main())
