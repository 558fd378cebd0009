"""Minimal LSP server for exmark — scan diagnostics only."""

from __future__ import annotations

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from exmark import __version__
from exmark.errors import ScanError, UnscannableCharacter
from exmark.lexer import tokenize


def _utf16_len(text: str) -> int:
    return len(text.encode("utf-16-le")) // 2


def _error_range(exc: ScanError) -> Range:
    """Range covering the offending character, in UTF-16 code units."""
    line = exc.position.line - 1
    lines = exc.source.split("\n")
    text = lines[line] if 0 <= line < len(lines) else ""
    start = _utf16_len(text[: exc.position.column - 1])
    width = _utf16_len(exc.char) if isinstance(exc, UnscannableCharacter) else 1
    return Range(
        start=Position(line=line, character=start),
        end=Position(line=line, character=start + width),
    )


server = LanguageServer("exmark-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full)


def _validate(ls: LanguageServer, uri: str) -> None:
    """Scan the document and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    filename = uri.rsplit("/", 1)[-1] if "/" in uri else uri
    diagnostics: list[Diagnostic] = []

    try:
        tokenize(doc.source, filename)
    except ScanError as exc:
        diagnostics.append(
            Diagnostic(
                range=_error_range(exc),
                message=exc.message,
                severity=DiagnosticSeverity.Error,
                source="exmark",
            )
        )

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
