"""Parsing of JavaScript/TypeScript source documents with tree-sitter."""

from __future__ import annotations

import os
from dataclasses import dataclass

import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser, Tree

from cnls.errors import SourceError, SyntaxDiagnostic
from cnls.syntax import collect_diagnostics

TYPESCRIPT_LANGUAGE = Language(tstypescript.language_typescript())
TSX_LANGUAGE = Language(tstypescript.language_tsx())

# The TSX grammar is a superset of JavaScript with JSX.
_LANGUAGES_BY_EXTENSION = {
    ".ts": TYPESCRIPT_LANGUAGE,
    ".mts": TYPESCRIPT_LANGUAGE,
    ".cts": TYPESCRIPT_LANGUAGE,
    ".tsx": TSX_LANGUAGE,
    ".js": TSX_LANGUAGE,
    ".jsx": TSX_LANGUAGE,
    ".mjs": TSX_LANGUAGE,
    ".cjs": TSX_LANGUAGE,
}


@dataclass(frozen=True, slots=True)
class ParsedSource:
    """A parsed document: its bytes, syntax tree and recoverable syntax errors."""

    path: str
    source: bytes
    tree: Tree
    diagnostics: tuple[SyntaxDiagnostic, ...]

    @property
    def root(self) -> Node:
        return self.tree.root_node


def language_for(path: str) -> Language:
    """Pick the grammar for a file path or URI by its extension."""
    ext = os.path.splitext(path)[1].lower()
    if not ext:
        raise SourceError("unknown filetype, missing extension", path)
    language = _LANGUAGES_BY_EXTENSION.get(ext)
    if language is None:
        raise SourceError(f"unknown filetype: {ext}", path)
    return language


def parse_source(path: str, source: bytes) -> ParsedSource:
    """Parse source with the grammar matching path. Raises SourceError."""
    parser = Parser(language_for(path))
    tree = parser.parse(source)
    return ParsedSource(path, source, tree, tuple(collect_diagnostics(tree.root_node)))
