"""exmark — Elixir source highlighter."""

from __future__ import annotations

__version__ = "0.1.0"


def highlight(source: str, name: str = "input.ex", location: str | None = None) -> str:
    """Scan and render Elixir source to a highlighted HTML document."""
    from exmark.lexer import tokenize
    from exmark.render import render

    tokens = tokenize(source, name)
    return render(tokens, name, location if location is not None else name)
