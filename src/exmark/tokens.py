"""Token categories, the token record, and secondary word classification."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Category(Enum):
    TEXT = "textC"  # single newline, space or carriage return
    INT = "int"
    ATOM = "atom"  # :name
    BITWISE = "bitwise"  # &&, |||, <<<, ...
    FUNCTION = "funcion"  # module reference ending in '.', e.g. IO.
    MODULE = "module"  # @attribute
    TIME = "tiempo"  # ~N[2020-01-01 00:00:00]
    COMMENT = "comentario"
    PIPE = "pipe"
    DOT = "dot"
    BOOL = "bool"
    KEYWORD = "keyword"
    IDENTIFIER = "identifier"

    # Structural markers, named after their own character
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    LBRACE = "{"
    RBRACE = "}"


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Token:
    """A scanned token: category, 1-based line, and the exact source text."""

    category: Category
    line: int
    text: str

    @property
    def value(self) -> int | str:
        """Parsed integer for INT tokens, the text otherwise."""
        if self.category is Category.INT:
            return int(self.text)
        return self.text


PIPE_OPERATORS = frozenset({"|>"})
DOT_COMMA = frozenset({".", ","})
KEYWORDS = frozenset(
    {
        "defmodule",
        "do",
        "do:",
        "use",
        "def",
        "end",
        "fn",
        "-",
        "+",
        "if",
        "else",
        "=",
        "!",
        ">",
        "<",
        ":",
        "=>",
        "==",
        "!=",
        "<>",
    }
)
BOOLEANS = frozenset({"true", "false", "nil"})

# Keywords that open a function or module head, and those that close it
SIGNATURE_KEYWORDS = frozenset({"def", "defmodule"})
BODY_KEYWORDS = frozenset({"do", "do:"})


def analyze(text: str) -> Category:
    """Refine a word-like or symbol-like match into its category.

    The checks run in a fixed order (pipe, dot/comma, keyword, boolean) and
    anything left over is an identifier.
    """
    if text in PIPE_OPERATORS:
        return Category.PIPE
    if text in DOT_COMMA:
        return Category.DOT
    if text in KEYWORDS:
        return Category.KEYWORD
    if text in BOOLEANS:
        return Category.BOOL
    return Category.IDENTIFIER


def bracket_category(ch: str) -> Category:
    """Return the structural category whose value is the bracket *ch*."""
    return Category(ch)
