"""Hover and definition queries over a workspace snapshot.

A query reads the document text and the scope tuple once, then works on its
own copies: the source is parsed, the cursor is mapped to a byte offset, the
token under it is looked up in freshly indexed stylesheets. Every failure is
logged and turns into an empty result.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from cnls.discovery import find_stylesheets
from cnls.errors import PositionError, RuleReadError, SourceError
from cnls.finder import find_class_name
from cnls.positions import UTF16, LineIndex
from cnls.resolver import DefinitionResult, StylesheetMatch, read_rule_text, resolve, rule_location
from cnls.scope import Scope
from cnls.source import parse_source
from cnls.tokens import Token
from cnls.workspace import WorkspaceState

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HoverResult:
    """Hover contents: the verbatim rule text and its display language."""

    language: str
    text: str


def class_name_at(
    path: str,
    text: str,
    line: int,
    character: int,
    scopes: Sequence[Scope],
    encoding: str = UTF16,
) -> Token | None:
    """Token under (line, character) in text, if it sits in an in-scope string."""
    source = text.encode("utf-8")
    try:
        cursor = LineIndex(source).offset_at(line, character, encoding)
    except PositionError as exc:
        logger.info("%s: %s", path, exc)
        return None
    logger.debug("resolved cursor %d:%d to byte %d", line, character, cursor)

    try:
        parsed = parse_source(path, source)
    except SourceError as exc:
        logger.error("%s", exc)
        return None

    for diagnostic in parsed.diagnostics:
        logger.debug("%s", diagnostic.format(source, path))

    return find_class_name(parsed.root, source, cursor, scopes)


def find_definition_at(
    state: WorkspaceState,
    uri: str,
    line: int,
    character: int,
    encoding: str = UTF16,
) -> StylesheetMatch | None:
    """Resolve the class name under the cursor to its stylesheet rule."""
    text = state.document(uri)
    if text is None:
        logger.warning("document is not open: %s", uri)
        return None

    token = class_name_at(uri, text, line, character, state.scopes, encoding)
    if token is None:
        return None

    root = state.root
    if root is None:
        logger.error("must define the root_path for cnls")
        return None

    return resolve(token.value, find_stylesheets(root, state.exclude))


def query_hover(
    state: WorkspaceState,
    uri: str,
    line: int,
    character: int,
    encoding: str = UTF16,
) -> HoverResult | None:
    match = find_definition_at(state, uri, line, character, encoding)
    if match is None:
        return None

    try:
        text = read_rule_text(match.path, match.span)
    except RuleReadError as exc:
        logger.error("%s", exc)
        return None

    return HoverResult("css", text)


def query_definition(
    state: WorkspaceState,
    uri: str,
    line: int,
    character: int,
    encoding: str = UTF16,
) -> DefinitionResult | None:
    match = find_definition_at(state, uri, line, character, encoding)
    if match is None:
        return None

    try:
        return rule_location(match.path, match.span, encoding)
    except RuleReadError as exc:
        logger.error("%s", exc)
        return None
