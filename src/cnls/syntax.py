"""Tree-sitter helpers shared by the source and stylesheet parsers."""

from __future__ import annotations

from tree_sitter import Node

from cnls.errors import SyntaxDiagnostic
from cnls.tokens import Span


def node_span(node: Node) -> Span:
    return Span(node.start_byte, node.end_byte)


def collect_diagnostics(root: Node) -> list[SyntaxDiagnostic]:
    """Collect ERROR and MISSING nodes in document order.

    Subtrees without errors are skipped; an ERROR node is reported once,
    without descending into it.
    """
    diagnostics: list[SyntaxDiagnostic] = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_error:
            diagnostics.append(SyntaxDiagnostic("syntax error", node_span(node)))
            continue
        if node.is_missing:
            diagnostics.append(SyntaxDiagnostic(f"missing '{node.type}'", node_span(node)))
            continue
        if node.has_error:
            stack.extend(reversed(node.children))
    return diagnostics
