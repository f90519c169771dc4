"""
Shared fixtures and helpers.
"""

import re
from pathlib import Path

import pytest

from yn.parser import parse
from yn.render import Category, Printer, RenderProperties

FIXTURES = Path(__file__).parent / "fixtures"

SCENARIO = "a:\n  b: 1\n  c:\n    - x\n    - y\n"
MULTI = "a: 1\n---\na: 2\n"

_ANSI = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(text: str) -> str:
    return _ANSI.sub("", text)


def bracket(text: str) -> str:
    return f"<{text}>"


@pytest.fixture
def scenario():
    return parse(SCENARIO)


@pytest.fixture
def multi():
    return parse(MULTI)


@pytest.fixture
def bracket_printer():
    """Highlighted tokens come out as <text>, everything else plain."""
    return Printer(highlighted=RenderProperties({category: bracket for category in Category}))
