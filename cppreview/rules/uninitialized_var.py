"""Uninitialized local variable detection."""

from __future__ import annotations

from cppreview.ast.nodes import NodeKind, SyntaxNode, SyntaxTree
from cppreview.models.base import Severity
from cppreview.models.issue import IssueSink
from cppreview.rules.base import Rule

_SKIP_FLAGS = ("static", "extern", "loop_variable")


class UninitializedVarRule(Rule):
    """Flags builtin or pointer locals declared without an initializer."""

    rule_id = "UNINIT-VAR-001"
    name = "Uninitialized Variable"
    description = "Detects variables that are declared but not initialized"

    def check(self, tree: SyntaxTree, sink: IssueSink) -> None:
        for function in tree.functions():
            for node in function.walk():
                if node.kind == NodeKind.VAR_DECL and self._should_check(node):
                    type_name = node.type.spelling
                    self.report(
                        tree, sink, node, Severity.HIGH,
                        f"Variable '{node.name}' of type '{type_name}' is declared but not initialized. "
                        "Using uninitialized variables leads to undefined behavior",
                        f"Initialize the variable at declaration, e.g., '{type_name} {node.name} = <value>;' "
                        f"or use '{{}}' for zero-initialization: '{type_name} {node.name}{{}};'",
                    )

    @staticmethod
    def _should_check(node: SyntaxNode) -> bool:
        if node.child("value") is not None or node.type is None or not node.name:
            return False
        if any(node.has_flag(flag) for flag in _SKIP_FLAGS):
            return False
        type_info = node.type
        if type_info.is_reference or type_info.is_array:
            return False
        # Class types with a default constructor initialize themselves.
        if type_info.is_record and type_info.has_default_constructor:
            return False
        return type_info.is_pointer or type_info.is_builtin
