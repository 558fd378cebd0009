"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from exmark.lexer import tokenize
from exmark.render import render_tokens
from exmark.tokens import Category, Token


@pytest.fixture
def lex():
    """Return a helper that scans source and returns the token list."""

    def _lex(source: str) -> list[Token]:
        return tokenize(source)

    return _lex


@pytest.fixture
def categories(lex):
    """Return a helper that scans source and returns only the categories."""

    def _categories(source: str) -> list[Category]:
        return [t.category for t in lex(source)]

    return _categories


@pytest.fixture
def markup():
    """Return a helper that scans and renders source without the document wrapper."""

    def _markup(source: str) -> str:
        return render_tokens(tokenize(source))

    return _markup


@pytest.fixture
def write_sources(tmp_path: Path):
    """Return a helper that writes {relative path: text} under tmp_path/src."""

    def _write(files: dict[str, str]) -> Path:
        root = tmp_path / "src"
        for rel, text in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        return root

    return _write
