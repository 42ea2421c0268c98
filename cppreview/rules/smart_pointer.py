"""Suggest smart pointers for raw owning pointers."""

from __future__ import annotations

from cppreview.ast.nodes import NodeKind, SyntaxNode, SyntaxTree, strip_parens_casts
from cppreview.models.base import Severity
from cppreview.models.issue import IssueSink
from cppreview.rules.base import Rule


class SmartPointerRule(Rule):
    """
    Flags raw pointer variables initialized directly by ``new``.

    Variables already typed as owning smart pointers are excluded at type
    level; the spelling is consulted only for aliases the resolver could not
    see through.
    """

    rule_id = "SMART-PTR-001"
    name = "Smart Pointer Suggestion"
    description = "Suggests using smart pointers instead of raw pointers"

    def check(self, tree: SyntaxTree, sink: IssueSink) -> None:
        for node in tree.walk():
            if node.kind != NodeKind.VAR_DECL or not self._is_raw_pointer_with_new(node):
                continue
            pointee = node.type.pointee or "T"
            self.report(
                tree, sink, node, Severity.SUGGESTION,
                f"Consider using smart pointers instead of raw pointer '{node.name}'. "
                "Smart pointers provide automatic memory management and prevent memory leaks.",
                "Replace with std::unique_ptr for exclusive ownership:\n"
                f"  auto {node.name} = std::make_unique<{pointee}>();\n"
                "Or if constructing with parameters:\n"
                f"  auto {node.name} = std::make_unique<{pointee}>(args...);",
            )

    @staticmethod
    def _is_raw_pointer_with_new(decl: SyntaxNode) -> bool:
        type_info = decl.type
        if type_info is None or not type_info.is_pointer:
            return False
        if type_info.is_owning_pointer or type_info.spelled_owning():
            return False
        init = strip_parens_casts(decl.child("value"))
        return init is not None and init.kind == NodeKind.NEW
