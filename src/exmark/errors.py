"""Error types with formatted source context."""

from __future__ import annotations

import unicodedata

from exmark.tokens import Position


def _cell_width(ch: str) -> int:
    """Terminal cells taken by *ch*: two for wide East Asian forms, else one."""
    return 2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1


def _underline(source_line: str, col: int) -> str:
    """Pad to column *col* of *source_line* and mark the character there.

    Tabs in the prefix are kept so the caret lines up under the same tab
    stops as the echoed line; wide characters count double.
    """
    prefix = source_line[: col - 1]
    pad = "".join(ch if ch == "\t" else " " * _cell_width(ch) for ch in prefix)
    target = source_line[col - 1 : col]
    return pad + "^" * (_cell_width(target) if target else 1)


class ScanError(Exception):
    """Raised when the scanner cannot continue, with position and source context."""

    def __init__(
        self, message: str, position: Position, source: str, filename: str = "input.ex"
    ) -> None:
        self.message = message
        self.position = position
        self.source = source
        self.filename = filename
        super().__init__(self.format())

    def format(self, filename: str | None = None) -> str:
        filename = filename if filename is not None else self.filename
        lines = self.source.split("\n")
        line_idx = self.position.line - 1
        col = self.position.column

        if 0 <= line_idx < len(lines):
            source_line = lines[line_idx].rstrip("\r")
        else:
            source_line = ""

        line_num = str(self.position.line)
        gutter = " " * (len(line_num) + 1)

        return (
            f"error: {self.message}\n"
            f"{gutter}--> {filename}:{line_num}:{col}\n"
            f"{gutter}|\n"
            f"{line_num} | {source_line}\n"
            f"{gutter}| {_underline(source_line, col)}"
        )


class UnscannableCharacter(ScanError):
    """A character that no scan rule accepts."""

    def __init__(
        self, char: str, position: Position, source: str, filename: str = "input.ex"
    ) -> None:
        self.char = char
        super().__init__(f"unscannable character {char!r}", position, source, filename)


class ConfigError(Exception):
    """Raised when a config file holds a value of the wrong shape."""


class SourceDecodeError(ValueError):
    """Raised when a source file is not valid UTF-8."""

    def __init__(self, path: object, reason: UnicodeDecodeError) -> None:
        self.path = path
        self.reason = reason
        super().__init__(
            f"{path}: not valid UTF-8 (byte 0x{reason.object[reason.start]:02x}"
            f" at offset {reason.start})"
        )
