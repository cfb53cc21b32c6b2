"""Find the class-name token under the cursor inside scoped string literals.

The tree is walked depth-first in document order. Each node carries its own
``in_scope`` flag: a node that opens a scope (a JSX attribute, a call to a
plain identifier, or an object entry whose name is configured) marks its value
subtree in-scope, every other child inherits the flag of its parent. String
literals are only inspected while in-scope, and the walk stops at the first
token found.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from tree_sitter import Node

from cnls.scope import Scope, ScopeVariant, matches
from cnls.tokens import Token, extract_token

logger = logging.getLogger(__name__)


def _text(node: Node, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def scoped_subtree(node: Node, source: bytes, scopes: Sequence[Scope]) -> Node | None:
    """Return the subtree that node opens a scope over, if it opens one."""
    if node.type == "jsx_attribute":
        children = node.named_children
        if len(children) < 2 or children[0].type != "property_identifier":
            return None
        if matches(scopes, _text(children[0], source), ScopeVariant.ATTRIBUTE_NAME):
            return children[1]

    elif node.type == "call_expression":
        callee = node.child_by_field_name("function")
        if callee is None or callee.type != "identifier":
            return None
        if matches(scopes, _text(callee, source), ScopeVariant.FUNCTION_CALL):
            return node.child_by_field_name("arguments")

    elif node.type == "pair":
        key = node.child_by_field_name("key")
        if key is None or key.type != "property_identifier":
            return None
        if matches(scopes, _text(key, source), ScopeVariant.OBJECT_KEY):
            return node.child_by_field_name("value")

    return None


def _string_token(node: Node, source: bytes, cursor: int) -> Token | None:
    # Content excludes the surrounding quotes
    if node.end_byte - node.start_byte < 2:
        return None
    content_start = node.start_byte + 1
    value = source[content_start : node.end_byte - 1]
    return extract_token(value, content_start, cursor)


def find_class_name(
    root: Node, source: bytes, cursor: int, scopes: Sequence[Scope]
) -> Token | None:
    """Return the first token under cursor in an in-scope string, in document order."""
    stack: list[tuple[Node, bool]] = [(root, False)]
    while stack:
        node, in_scope = stack.pop()

        if node.type == "string":
            if in_scope:
                token = _string_token(node, source, cursor)
                if token is not None:
                    logger.info("resolved class name on cursor: %r", token.value)
                    return token
            continue

        scoped = scoped_subtree(node, source, scopes)
        children = node.children
        for child in reversed(children):
            stack.append((child, in_scope or (scoped is not None and child == scoped)))

    return None
