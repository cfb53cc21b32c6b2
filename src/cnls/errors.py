"""Error types and syntax diagnostics with formatted source context."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from cnls.tokens import Span


def _render_context(message: str, source: bytes, span: Span, filename: str) -> str:
    """Render an error header, a ``-->`` location and the offending line with carets."""
    lo = min(span.lo, len(source))
    line_start = source.rfind(b"\n", 0, lo) + 1
    line_end = source.find(b"\n", lo)
    if line_end == -1:
        line_end = len(source)

    source_line = source[line_start:line_end].rstrip(b"\r").decode("utf-8", errors="replace")
    line = source.count(b"\n", 0, lo) + 1
    col = len(source[line_start:lo].decode("utf-8", errors="replace")) + 1

    # Underline the span on its first line, at least one caret
    hi = min(max(span.hi, lo), line_end)
    underline_len = max(1, len(source[lo:hi].decode("utf-8", errors="replace")))

    pad = " " * (col - 1)
    carets = "^" * underline_len

    line_num = str(line)
    gutter_width = len(line_num) + 1

    blank_gutter = " " * gutter_width + "|"
    line_gutter = f"{line_num:>{gutter_width - 1}} |"

    return (
        f"error: {message}\n"
        f"{' ' * gutter_width}--> {filename}:{line}:{col}\n"
        f"{blank_gutter}\n"
        f"{line_gutter} {source_line}\n"
        f"{blank_gutter} {pad}{carets}"
    )


@dataclass(frozen=True, slots=True)
class SyntaxDiagnostic:
    """A recoverable syntax error reported by the parser (ERROR or MISSING node)."""

    message: str
    span: Span

    def format(self, source: bytes, filename: str = "<unknown>") -> str:
        return _render_context(self.message, source, self.span, filename)


class ScopeError(ValueError):
    """Raised when a scope string does not follow ``<tag>:<id,...>``."""

    def __init__(self, message: str, text: str) -> None:
        self.message = message
        self.text = text
        super().__init__(self.format())

    def format(self) -> str:
        return f"invalid scope {self.text!r}: {self.message}"


class PositionError(LookupError):
    """Raised when an editor position does not map into the document."""

    def __init__(self, message: str, line: int, line_count: int) -> None:
        self.message = message
        self.line = line
        self.line_count = line_count
        super().__init__(f"{message} (line {line}, document has {line_count} lines)")


class SourceError(Exception):
    """Raised when a source document cannot be parsed at all."""

    def __init__(self, message: str, path: str) -> None:
        self.message = message
        self.path = path
        super().__init__(f"{path}: {message}")


class StylesheetError(Exception):
    """Raised when a stylesheet cannot be read or decoded."""

    def __init__(self, message: str, path: Path) -> None:
        self.message = message
        self.path = path
        super().__init__(f"{path}: {message}")


class RuleReadError(Exception):
    """Raised when a resolved rule span can no longer be read back from disk."""

    def __init__(self, message: str, path: Path, span: Span) -> None:
        self.message = message
        self.path = path
        self.span = span
        super().__init__(f"{path}: {message} (bytes {span.lo}..{span.hi})")
