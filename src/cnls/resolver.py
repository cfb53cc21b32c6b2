"""Resolve a class-name token to its defining rule among stylesheets."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from pygls.uris import from_fs_path

from cnls.errors import RuleReadError, StylesheetError
from cnls.positions import UTF16, LineIndex
from cnls.stylesheet import ClassNameEntry, build_index
from cnls.tokens import Span

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StylesheetMatch:
    """The stylesheet and entry a token resolved to."""

    path: Path
    entry: ClassNameEntry

    @property
    def span(self) -> Span:
        return self.entry.span


@dataclass(frozen=True, slots=True)
class DefinitionResult:
    """Location of a rule in editor coordinates (zero-based)."""

    uri: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int


def resolve(token: str, paths: Iterable[Path]) -> StylesheetMatch | None:
    """First entry equal to token, searching stylesheets in the given order.

    Each stylesheet is indexed afresh; unreadable ones are logged and skipped.
    """
    for path in paths:
        try:
            index = build_index(path)
        except StylesheetError as exc:
            logger.error("%s", exc)
            continue

        entry = index.find(token)
        if entry is not None:
            logger.info("found class rule %r in css file %s", token, path)
            return StylesheetMatch(path, entry)

    return None


def _read_source(path: Path, span: Span) -> bytes:
    try:
        source = path.read_bytes()
    except OSError as exc:
        raise RuleReadError(f"failed to open css source file: {exc.strerror or exc}", path, span) from exc
    if span.hi > len(source):
        raise RuleReadError("file is shorter than the rule span", path, span)
    return source


def read_rule_text(path: Path, span: Span) -> str:
    """Re-read the verbatim text of a rule from disk."""
    source = _read_source(path, span)
    try:
        return source[span.lo : span.hi].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise RuleReadError("failed to read utf-8 string", path, span) from exc


def rule_location(path: Path, span: Span, encoding: str = UTF16) -> DefinitionResult:
    """Express a rule span as a location in the stylesheet's own lines."""
    uri = from_fs_path(str(path))
    if uri is None:
        raise RuleReadError("failed to get uri from css file path", path, span)

    lines = LineIndex(_read_source(path, span))
    start_line, start_col = lines.position_at(span.lo, encoding)
    end_line, end_col = lines.position_at(span.hi, encoding)
    return DefinitionResult(uri, start_line, start_col, end_line, end_col)
