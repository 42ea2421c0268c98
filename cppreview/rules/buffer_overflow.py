"""Out-of-bounds subscripts on constant-size arrays."""

from __future__ import annotations

from typing import Optional

from cppreview.ast.nodes import NodeKind, SyntaxNode, SyntaxTree, strip_parens_casts, try_evaluate_int
from cppreview.models.base import Severity
from cppreview.models.issue import IssueSink
from cppreview.rules.base import Rule


class BufferOverflowRule(Rule):
    """
    Checks subscripts against declared array capacities.

    A constant index outside ``[0, size)`` is Critical. A non-constant
    index into an array no larger than ``small_array_threshold`` gets a Low
    advisory instead. Negative constant indices are reported even when the
    array size is unknown.
    """

    rule_id = "BUFFER-OVERFLOW-001"
    name = "Buffer Overflow"
    description = "Detects potential buffer overflows from array access"

    def __init__(self, small_array_threshold: int = 10) -> None:
        self.small_array_threshold = small_array_threshold

    def check(self, tree: SyntaxTree, sink: IssueSink) -> None:
        file_arrays: dict[str, int] = {}
        file_constants: dict[str, int] = {}
        for node in tree.walk():
            if node.kind == NodeKind.VAR_DECL and node.enclosing(NodeKind.FUNCTION) is None:
                _record_declaration(node, file_arrays, file_constants)

        for function in tree.functions():
            self._check_function(tree, sink, function, dict(file_arrays), dict(file_constants))

    def _check_function(
        self,
        tree: SyntaxTree,
        sink: IssueSink,
        function: SyntaxNode,
        arrays: dict[str, int],
        constants: dict[str, int],
    ) -> None:
        for node in function.walk():
            if node.kind in (NodeKind.VAR_DECL, NodeKind.PARAM):
                _record_declaration(node, arrays, constants)
            elif node.kind == NodeKind.SUBSCRIPT:
                self._check_subscript(tree, sink, node, arrays, constants)

    def _check_subscript(
        self,
        tree: SyntaxTree,
        sink: IssueSink,
        node: SyntaxNode,
        arrays: dict[str, int],
        constants: dict[str, int],
    ) -> None:
        base = strip_parens_casts(node.child("argument"))
        if base is None or base.kind != NodeKind.DECL_REF or not base.name:
            return
        index = try_evaluate_int(node.child("index"), constants)
        size = arrays.get(base.name)

        if size is None:
            if index is not None and index < 0:
                self.report(
                    tree, sink, node, Severity.CRITICAL,
                    f"Array access with negative index {index} will cause buffer underflow.",
                    "Use non-negative array indices:\n"
                    "  - Ensure index >= 0 before array access\n"
                    "  - Use unsigned types for array indices\n"
                    "  - Consider using std::vector with at() for bounds checking",
                )
            return

        if index is not None:
            if index < 0 or index >= size:
                direction = "underflow" if index < 0 else "overflow"
                self.report(
                    tree, sink, node, Severity.CRITICAL,
                    f"Buffer {direction}: Array '{base.name}' has size {size} but accessed with index {index}.",
                    f"Ensure array index is within valid range [0, {size - 1}]:\n"
                    "  - Add bounds checking: if (index < size) { array[index] }\n"
                    "  - Use std::array or std::vector with at() for automatic bounds checking\n"
                    "  - Fix the constant index to be within valid range",
                )
        elif size <= self.small_array_threshold:
            self.report(
                tree, sink, node, Severity.LOW,
                f"Array '{base.name}' accessed with non-constant index. "
                f"Array has size {size}. Consider adding bounds checking.",
                "Add bounds checking for dynamic array access:\n"
                f"  - if (index >= 0 && index < {size}) {{ array[index] }}\n"
                "  - Use std::array::at() or std::vector::at() for automatic bounds checking\n"
                "  - Use assertions: assert(index >= 0 && index < size)",
            )


def _record_declaration(node: SyntaxNode, arrays: dict[str, int], constants: dict[str, int]) -> None:
    """Track array capacities and foldable constants; shadowing forgets both."""
    name = node.name
    if not name:
        return
    arrays.pop(name, None)
    constants.pop(name, None)
    type_info = node.type
    # Array parameters decay to pointers; their extent is not enforced.
    if type_info is None or node.kind == NodeKind.PARAM:
        return
    if type_info.is_array and type_info.array_size is not None:
        arrays[name] = type_info.array_size
        return
    if type_info.is_integer and node.has_flag("const"):
        value: Optional[int] = try_evaluate_int(node.child("value"), constants)
        if value is not None:
            constants[name] = value
