"""--debug token dump to stderr."""

from __future__ import annotations

import sys
from collections.abc import Iterable
from typing import TextIO

from exmark.tokens import Token


def dump_tokens(
    tokens: Iterable[Token], *, file: TextIO | None = None, name: str = ""
) -> None:
    """Print one line per token to *file* (default: the current stderr)."""
    out = sys.stderr if file is None else file
    if name:
        out.write(f"Tokens {name}\n")
    for tok in tokens:
        out.write(f"  {tok.line:>4}  {tok.category.value:<12} {tok.text!r}\n")
