"""Expensive by-value copies inside loops."""

from __future__ import annotations

from typing import Optional

from cppreview.ast.nodes import LOOP_KINDS, NodeKind, SyntaxNode, SyntaxTree
from cppreview.ast.types import TypeInfo
from cppreview.models.base import Severity
from cppreview.models.issue import IssueSink
from cppreview.rules.base import Rule


class LoopCopyRule(Rule):
    """
    Flags containers and large records copied on every loop iteration.

    A record is considered expensive when it has more than
    ``expensive_field_threshold`` fields. Each declaration is reported at
    most once, even when loops are nested.
    """

    rule_id = "LOOP-COPY-001"
    name = "Expensive Copy in Loop"
    description = "Detects expensive copy operations in loops"

    def __init__(self, expensive_field_threshold: int = 2) -> None:
        self.expensive_field_threshold = expensive_field_threshold

    def check(self, tree: SyntaxTree, sink: IssueSink) -> None:
        reported: set[int] = set()

        for loop in tree.walk():
            if loop.kind not in LOOP_KINDS:
                continue

            if loop.kind == NodeKind.RANGE_FOR:
                declarator = loop.child("declarator")
                if declarator is not None and id(declarator) not in reported and self._is_expensive(declarator.type):
                    reported.add(id(declarator))
                    self._report_range_copy(tree, sink, loop, declarator)

            body = loop.child("body")
            if body is None:
                continue
            for node in body.walk():
                if (
                    node.kind == NodeKind.VAR_DECL
                    and id(node) not in reported
                    and node.child("value") is not None
                    and self._is_expensive(node.type)
                ):
                    reported.add(id(node))
                    self._report_body_copy(tree, sink, node)

    def _is_expensive(self, type_info: Optional[TypeInfo]) -> bool:
        if type_info is None or type_info.is_reference or type_info.is_pointer or type_info.is_array:
            return False
        if type_info.is_container:
            return True
        return (
            type_info.is_record
            and type_info.field_count is not None
            and type_info.field_count > self.expensive_field_threshold
        )

    def _report_range_copy(self, tree: SyntaxTree, sink: IssueSink, loop: SyntaxNode,
                           declarator: SyntaxNode) -> None:
        var_name = declarator.name
        self.report(
            tree, sink, declarator, Severity.MEDIUM,
            f"Range-based for loop is copying elements. Each iteration copies the entire "
            f"{declarator.type.spelling}.",
            "Use const reference in range-based for loop:\n"
            f"  for (const auto& {var_name} : container) {{ ... }}\n"
            "Or use reference if you need to modify:\n"
            f"  for (auto& {var_name} : container) {{ ... }}",
            snippet=tree.snippet(loop),
        )

    def _report_body_copy(self, tree: SyntaxTree, sink: IssueSink, decl: SyntaxNode) -> None:
        var_name = decl.name
        type_name = decl.type.spelling
        self.report(
            tree, sink, decl, Severity.MEDIUM,
            f"Expensive copy operation in loop: Variable '{var_name}' of type '{type_name}' is being copied. "
            "This can significantly impact performance in tight loops.",
            "Use const reference to avoid copying:\n"
            f"  const {type_name}& {var_name} = ...;\n"
            "Or use std::move if the original value is no longer needed:\n"
            f"  {type_name} {var_name} = std::move(...);",
        )
