"""Heap allocation and release shapes shared by the memory rules."""

from __future__ import annotations

from typing import Optional

from cppreview.ast.nodes import NodeKind, SyntaxNode, referenced_name, strip_parens_casts

ALLOCATION_FUNCTIONS = frozenset({"malloc", "calloc", "realloc", "strdup", "strndup"})
RELEASE_FUNCTIONS = frozenset({"free"})


def allocation_kind(expr: Optional[SyntaxNode]) -> Optional[str]:
    """
    Classify a heap allocation expression.

    Returns:
        "new" for a new expression, the function name for a C allocator
        call, or None when ``expr`` does not allocate
    """
    expr = strip_parens_casts(expr)
    if expr is None:
        return None
    if expr.kind == NodeKind.NEW:
        return "new[]" if expr.has_flag("array") else "new"
    if expr.kind == NodeKind.CALL and expr.callee_name in ALLOCATION_FUNCTIONS:
        return expr.callee_name
    return None


def released_variable(node: SyntaxNode) -> Optional[str]:
    """Name of the variable released by ``delete x``, ``delete[] x`` or ``free(x)``."""
    if node.kind == NodeKind.DELETE:
        return referenced_name(node.child("argument"))
    if node.kind == NodeKind.CALL and node.callee_name in RELEASE_FUNCTIONS:
        args = node.arguments
        if args:
            return referenced_name(args[0])
    return None


def release_spelling(node: SyntaxNode) -> str:
    if node.kind == NodeKind.DELETE:
        return "delete[]" if node.has_flag("array") else "delete"
    return node.callee_name or "free"


def matching_release(kind: str) -> str:
    if kind == "new":
        return "delete"
    if kind == "new[]":
        return "delete[]"
    return "free"
