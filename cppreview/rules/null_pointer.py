"""Null pointer dereference detection."""

from __future__ import annotations

from typing import Optional

from cppreview.ast.nodes import NodeKind, SyntaxNode, SyntaxTree, is_null_literal, strip_parens_casts
from cppreview.models.base import Severity
from cppreview.models.issue import IssueSink
from cppreview.rules.base import Rule


class NullPointerRule(Rule):
    """
    Flags dereferences of values that are syntactically null.

    Within a function, a pointer variable whose initializer or latest plain
    assignment is ``nullptr``, ``NULL`` or ``0`` is considered null until it
    is assigned something else. Control flow is not modeled, so a guarded
    dereference such as ``if (p) *p = 1;`` is still reported.
    """

    rule_id = "NULL-PTR-001"
    name = "Null Pointer Dereference"
    description = "Detects potential null pointer dereferences"

    def check(self, tree: SyntaxTree, sink: IssueSink) -> None:
        for function in tree.functions():
            self._check_function(tree, sink, function)

    def _check_function(self, tree: SyntaxTree, sink: IssueSink, function: SyntaxNode) -> None:
        pointers: set[str] = set()
        null_vars: set[str] = set()

        for node in function.walk():
            if node.kind in (NodeKind.VAR_DECL, NodeKind.PARAM):
                if node.name and node.type is not None and node.type.is_pointer:
                    pointers.add(node.name)
                    if is_null_literal(node.child("value")):
                        null_vars.add(node.name)
                    else:
                        null_vars.discard(node.name)
            elif node.kind == NodeKind.BINARY and node.operator == "=":
                target = strip_parens_casts(node.child("left"))
                if target is not None and target.kind == NodeKind.DECL_REF and target.name in pointers:
                    if is_null_literal(node.child("right")):
                        null_vars.add(target.name)
                    else:
                        null_vars.discard(target.name)
            else:
                base = _dereferenced(node)
                if base is not None and self._is_null(base, null_vars):
                    self.report(
                        tree, sink, node, Severity.CRITICAL,
                        "Dereferencing a null pointer will cause undefined behavior and likely crash",
                        "Check for null before dereferencing, or use smart pointers "
                        "(std::unique_ptr, std::shared_ptr) which provide better safety guarantees",
                    )

    @staticmethod
    def _is_null(expr: SyntaxNode, null_vars: set[str]) -> bool:
        if is_null_literal(expr):
            return True
        inner = strip_parens_casts(expr)
        return inner is not None and inner.kind == NodeKind.DECL_REF and inner.name in null_vars


def _dereferenced(node: SyntaxNode) -> Optional[SyntaxNode]:
    """Pointer operand of ``*e``, ``e->m`` or ``e[i]``."""
    if node.kind == NodeKind.UNARY and node.operator == "*":
        return node.child("argument")
    if node.kind == NodeKind.MEMBER and node.operator == "->":
        return node.child("argument")
    if node.kind == NodeKind.SUBSCRIPT:
        return node.child("argument")
    return None
