"""HTML renderer — converts a token stream to a highlighted HTML fragment."""

from __future__ import annotations

import io
from collections.abc import Iterable
from enum import Enum, auto
from typing import TextIO

from exmark.tokens import BODY_KEYWORDS, SIGNATURE_KEYWORDS, Category, Token

NEWLINE_MARKER = "\n <span style='color:#C19875'> ·</span> "

DOCUMENT_STYLE = "<style> pre{background-color: #292F36;} </style>"


class Mode(Enum):
    GENERAL = auto()
    SIGNATURE = auto()  # after def/defmodule, before '(' or 'do'
    PARAMETERS = auto()  # inside the parameter list of a signature


# ---------------------------------------------------------------------------
# Palettes
# ---------------------------------------------------------------------------

# category -> (colour, italic)
_GENERAL_STYLES: dict[Category, tuple[str, bool]] = {
    Category.ATOM: ("#EAC435", True),
    Category.COMMENT: ("#565857", True),
    Category.PIPE: ("#B80C09", False),
    Category.KEYWORD: ("#1098F7", False),
    Category.BOOL: ("#4ECDC4", True),
    Category.DOT: ("#FBFBFF", False),
    Category.FUNCTION: ("#D7B884", False),
    Category.MODULE: ("#C73E1D", False),
    Category.TIME: ("#FFAD69", False),
    Category.BITWISE: ("#EE7B30", False),
}
_GENERAL_DEFAULT = ("#FBFBFF", False)

_SIGNATURE_STYLES: dict[Category, tuple[str, bool]] = {
    Category.ATOM: ("#EAC435", False),
    Category.DOT: ("#9A8BBB", False),
}
_SIGNATURE_DEFAULT = ("#03DDB2", False)

PUNCTUATION_COLOR = "#9A8BBB"
KEYWORD_COLOR = _GENERAL_STYLES[Category.KEYWORD][0]


# ---------------------------------------------------------------------------
# HTML helpers
# ---------------------------------------------------------------------------


def _escape_html(text: str) -> str:
    """Escape text for HTML body content."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _escape_attr(text: str) -> str:
    """Escape text for a single-quoted HTML attribute value."""
    return _escape_html(text).replace("'", "&#x27;")


def _span(color: str, text: str, italic: bool = False) -> str:
    body = _escape_html(text)
    if italic:
        body = f"<i>{body}</i>"
    return f"<span style='color:{color};'>{body}</span>"


def _is_newline(tok: Token) -> bool:
    return tok.category is Category.TEXT and tok.text == "\n"


def render_general(tok: Token) -> str:
    """Render a token with the full top-level palette."""
    if _is_newline(tok):
        return NEWLINE_MARKER
    if tok.category is Category.TEXT:
        return tok.text
    color, italic = _GENERAL_STYLES.get(tok.category, _GENERAL_DEFAULT)
    return _span(color, tok.text, italic)


def render_signature(tok: Token) -> str:
    """Render a token with the reduced palette used inside signatures."""
    if _is_newline(tok):
        return NEWLINE_MARKER
    color, italic = _SIGNATURE_STYLES.get(tok.category, _SIGNATURE_DEFAULT)
    return _span(color, tok.text, italic)


# ---------------------------------------------------------------------------
# Token stream walk
# ---------------------------------------------------------------------------


def iter_markup(tokens: Iterable[Token]) -> Iterable[str]:
    """Yield the markup for each token, tracking signature mode.

    A def/defmodule keyword switches to SIGNATURE for the tokens after it.
    There, '(' opens PARAMETERS and 'do'/'do:' returns to GENERAL; inside
    PARAMETERS, ')' returns to GENERAL. An unbalanced head leaves the rest
    of the stream in the reduced palette.
    """
    mode = Mode.GENERAL
    for tok in tokens:
        if mode is Mode.GENERAL:
            yield render_general(tok)
            if tok.category is Category.KEYWORD and tok.text in SIGNATURE_KEYWORDS:
                mode = Mode.SIGNATURE
        elif mode is Mode.SIGNATURE:
            if tok.text == "(":
                yield _span(PUNCTUATION_COLOR, tok.text)
                mode = Mode.PARAMETERS
            elif tok.text in BODY_KEYWORDS:
                yield _span(KEYWORD_COLOR, tok.text)
                mode = Mode.GENERAL
            else:
                yield render_signature(tok)
        else:
            if tok.text == ")":
                yield _span(PUNCTUATION_COLOR, tok.text)
                mode = Mode.GENERAL
            else:
                yield render_signature(tok)


def render_tokens(tokens: Iterable[Token]) -> str:
    """Render a token stream to highlighted markup, without the document wrapper."""
    return "".join(iter_markup(tokens))


def write_document(tokens: Iterable[Token], sink: TextIO, name: str, location: str) -> None:
    """Write a complete highlighted document for one source file to *sink*.

    *name* is the file's base name and *location* the path it was read
    from; both end up as attributes on the wrapping ``<file>`` element.
    """
    sink.write(DOCUMENT_STYLE)
    sink.write(f"<file name='{_escape_attr(name)}' ubicacion='{_escape_attr(location)}'>")
    sink.write("<pre><code> <span style='color:#C19875'> ·</span> ")
    for markup in iter_markup(tokens):
        sink.write(markup)
    sink.write("</code></pre><br></file>")


def render(tokens: Iterable[Token], name: str, location: str) -> str:
    """Render a complete highlighted document for one source file."""
    buf = io.StringIO()
    write_document(tokens, buf, name, location)
    return buf.getvalue()
