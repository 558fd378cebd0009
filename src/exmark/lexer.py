"""exmark scanner — converts source text into a flat token stream.

The scanner is table driven. Every rule pairs a compiled pattern with a
classifier; at each offset all rules are tried, the longest match wins and
ties go to the rule declared first (maximal munch). A rule without a
classifier consumes its match without emitting a token.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from exmark.errors import UnscannableCharacter
from exmark.tokens import Category, Position, Token, analyze, bracket_category

logger = logging.getLogger(__name__)

_ACCENTED = "áéíóúÁÉÍÓÚñÑüÜ"
_PUNCTUATION = ".,;:=!?+-*/\\|&<>%$^~\"'`_#@¿¡" + _ACCENTED


def _constant(category: Category) -> Callable[[str], Category]:
    return lambda _text: category


@dataclass(frozen=True, slots=True)
class _Rule:
    name: str
    pattern: re.Pattern[str]
    classify: Callable[[str], Category] | None


# Declaration order is the tie-break order.
_RULES: tuple[_Rule, ...] = (
    _Rule("tab", re.compile(r"\t"), None),
    _Rule("blank", re.compile(r"[\n \r]"), _constant(Category.TEXT)),
    _Rule("int", re.compile(r"[0-9]+"), _constant(Category.INT)),
    _Rule("bracket", re.compile(r"[()\[\]{}]"), bracket_category),
    _Rule("atom", re.compile(r":[A-Za-z0-9]+"), _constant(Category.ATOM)),
    _Rule("and", re.compile(r"&&+"), _constant(Category.BITWISE)),
    _Rule("bitwise", re.compile(r"[|~^<>]{3}"), _constant(Category.BITWISE)),
    _Rule("function", re.compile(r"[A-Z][A-Za-z]*\."), _constant(Category.FUNCTION)),
    _Rule("word", re.compile(rf"[A-Za-z][A-Za-z0-9?:{_ACCENTED}]*"), analyze),
    _Rule("pipe", re.compile(r"\|>"), analyze),
    _Rule("comment", re.compile(rf"#[ -~¿¡{_ACCENTED}]*"), _constant(Category.COMMENT)),
    # Only a single character between the quote groups; multi-line
    # docstrings fall through to the punctuation rule.
    _Rule("docstring", re.compile(r'"""."""'), _constant(Category.COMMENT)),
    _Rule("attribute", re.compile(r"@[A-Za-z0-9()`#,]+"), _constant(Category.MODULE)),
    _Rule("sigil", re.compile(r"~[A-Z]\[[0-9:\- ]*\]"), _constant(Category.TIME)),
    _Rule(
        "symbol",
        re.compile("[" + "".join(re.escape(ch) for ch in _PUNCTUATION) + "]"),
        analyze,
    ),
)


class Scanner:
    """Tokenize exmark source text into a list of Token objects."""

    def __init__(self, source: str, filename: str = "input.ex") -> None:
        self._source = source
        self._filename = filename
        self._pos = 0
        self._line = 1
        self._line_start = 0
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Scan the full source and return the token list."""
        while self._pos < len(self._source):
            rule, text = self._longest_match()
            if rule is None:
                raise UnscannableCharacter(
                    self._source[self._pos], self._current_pos(), self._source, self._filename
                )
            if rule.classify is not None:
                self._tokens.append(Token(rule.classify(text), self._line, text))
            self._advance(text)

        logger.debug("scanned %d tokens from %s", len(self._tokens), self._filename)
        return self._tokens

    def _longest_match(self) -> tuple[_Rule | None, str]:
        best: _Rule | None = None
        best_text = ""
        for rule in _RULES:
            m = rule.pattern.match(self._source, self._pos)
            # Strictly longer only, so earlier rules keep ties
            if m is not None and len(m.group()) > len(best_text):
                best = rule
                best_text = m.group()
        return best, best_text

    def _current_pos(self) -> Position:
        return Position(self._line, self._pos - self._line_start + 1, self._pos)

    def _advance(self, text: str) -> None:
        self._pos += len(text)
        if text == "\n":
            self._line += 1
            self._line_start = self._pos


def tokenize(source: str, filename: str = "input.ex") -> list[Token]:
    """Convenience function: scan source text and return the token list."""
    return Scanner(source, filename).tokenize()
