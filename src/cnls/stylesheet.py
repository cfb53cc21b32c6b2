"""Class-name index of a CSS stylesheet, built with tree-sitter.

Every class selector found under a qualified rule becomes one entry carrying
the span of that whole rule, so navigation lands on the rule block. Entries
keep the document order of their selectors.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

import tree_sitter_css as tscss
from tree_sitter import Language, Node, Parser

from cnls.errors import StylesheetError, SyntaxDiagnostic
from cnls.syntax import collect_diagnostics, node_span
from cnls.tokens import Span, is_ascii_whitespace

CSS_LANGUAGE = Language(tscss.language())

logger = logging.getLogger(__name__)

_CSS_ESCAPE = re.compile(r"\\(?:([0-9a-fA-F]{1,6})[ \t\n\r\f]?|(.))", re.DOTALL)


@dataclass(frozen=True, slots=True)
class ClassNameEntry:
    """A class name (no leading dot) and the span of its enclosing rule."""

    value: str
    span: Span


@dataclass(frozen=True, slots=True)
class StylesheetIndex:
    """All class-name entries of one stylesheet, in scan order."""

    path: Path
    entries: tuple[ClassNameEntry, ...]
    diagnostics: tuple[SyntaxDiagnostic, ...] = ()

    def find(self, value: str) -> ClassNameEntry | None:
        """First entry whose value equals value exactly."""
        for entry in self.entries:
            if entry.value == value:
                return entry
        return None


def unescape_identifier(text: str) -> str:
    r"""Decode CSS escapes, e.g. ``md\:flex`` -> ``md:flex``."""
    if "\\" not in text:
        return text

    def _replace(m: re.Match[str]) -> str:
        if m.group(1) is not None:
            code = int(m.group(1), 16)
            if code == 0 or code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
                return "\ufffd"
            return chr(code)
        return m.group(2)

    return _CSS_ESCAPE.sub(_replace, text)


def _is_class_value(value: str) -> bool:
    # Escapes can decode to whitespace or a leading dot, which no token in
    # a class attribute can ever equal.
    if not value or value.startswith("."):
        return False
    return not any(ord(ch) < 128 and is_ascii_whitespace(ord(ch)) for ch in value)


def collect_class_names(root: Node, source: bytes) -> list[ClassNameEntry]:
    """Walk the stylesheet tree and collect class selectors under qualified rules.

    Pseudo-classes are separate selector nodes, so ``.foo:hover`` yields
    ``foo`` only. Class selectors outside any rule_set yield nothing.
    """
    entries: list[ClassNameEntry] = []
    # (node, span of innermost enclosing rule, parent is a class selector)
    stack: list[tuple[Node, Span | None, bool]] = [(root, None, False)]
    while stack:
        node, rule, in_class_selector = stack.pop()

        if node.type == "rule_set":
            rule = node_span(node)
        elif node.type == "class_name" and in_class_selector:
            if rule is not None:
                raw = source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")
                value = unescape_identifier(raw)
                if _is_class_value(value):
                    entries.append(ClassNameEntry(value, rule))
                else:
                    logger.debug("skipping class selector %r: not a single class token", raw)
            continue

        is_class_selector = node.type == "class_selector"
        for child in reversed(node.children):
            stack.append((child, rule, is_class_selector))

    return entries


def index_stylesheet(source: bytes, path: Path) -> StylesheetIndex:
    """Parse stylesheet source and index its class names."""
    tree = Parser(CSS_LANGUAGE).parse(source)
    diagnostics = tuple(collect_diagnostics(tree.root_node))
    entries = tuple(collect_class_names(tree.root_node, source))
    return StylesheetIndex(path, entries, diagnostics)


def build_index(path: Path) -> StylesheetIndex:
    """Read and index a stylesheet file. Raises StylesheetError.

    Syntax errors are logged; rules that did parse are still indexed.
    """
    try:
        source = path.read_bytes()
    except OSError as exc:
        raise StylesheetError(f"failed to read stylesheet: {exc.strerror or exc}", path) from exc

    try:
        source.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise StylesheetError(f"stylesheet is not valid UTF-8: {exc.reason}", path) from exc

    index = index_stylesheet(source, path)
    if index.diagnostics:
        logger.warning("%s: %d syntax error(s) in stylesheet", path, len(index.diagnostics))
        for diagnostic in index.diagnostics:
            logger.debug("%s", diagnostic.format(source, str(path)))
    return index
