"""Shared test fixtures and helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from cnls.finder import find_class_name
from cnls.scope import DEFAULT_SCOPES, Scope
from cnls.source import parse_source
from cnls.stylesheet import StylesheetIndex, index_stylesheet
from cnls.tokens import Token


def offset_of(source: str, needle: str, delta: int = 0) -> int:
    """Byte offset of the first occurrence of needle in source, plus delta."""
    index = source.index(needle)
    return len(source[:index].encode("utf-8")) + delta


def utf16_column(line: str, needle: str, delta: int = 0) -> int:
    """UTF-16 column of needle within a single line, plus delta."""
    prefix = line[: line.index(needle)]
    return len(prefix.encode("utf-16-le")) // 2 + delta


@pytest.fixture
def find_in():
    """Return a helper that parses source and finds the token at a byte offset."""

    def _find(
        source: str,
        cursor: int,
        path: str = "App.tsx",
        scopes: tuple[Scope, ...] = DEFAULT_SCOPES,
    ) -> Token | None:
        data = source.encode("utf-8")
        parsed = parse_source(path, data)
        return find_class_name(parsed.root, data, cursor, scopes)

    return _find


@pytest.fixture
def index_css():
    """Return a helper that indexes stylesheet text without touching disk."""

    def _index(source: str, path: str = "styles.css") -> StylesheetIndex:
        return index_stylesheet(source.encode("utf-8"), Path(path))

    return _index


class Project:
    """A workspace root on disk with a helper to write files into it."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def write(self, rel: str, text: str | bytes = "") -> Path:
        path = self.root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(text, bytes):
            path.write_bytes(text)
        else:
            path.write_text(text, encoding="utf-8")
        return path


@pytest.fixture
def project(tmp_path: Path) -> Project:
    """A fresh, empty workspace root."""
    root = tmp_path / "project"
    root.mkdir()
    return Project(root)


def values(index: StylesheetIndex) -> list[str]:
    """Class names of an index, in scan order."""
    return [entry.value for entry in index.entries]
