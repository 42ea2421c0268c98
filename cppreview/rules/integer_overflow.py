"""Integer arithmetic overflow and narrowing conversions."""

from __future__ import annotations

from typing import Optional

from cppreview.ast.nodes import NodeKind, SyntaxNode, SyntaxTree
from cppreview.ast.types import TypeInfo
from cppreview.models.base import Severity
from cppreview.models.issue import IssueSink
from cppreview.rules.base import Rule

_OPERATION_NAMES = {
    "+": "addition", "+=": "addition",
    "-": "subtraction", "-=": "subtraction",
    "*": "multiplication", "*=": "multiplication",
}
_MULTIPLY = ("*", "*=")
_CHECKED_CASTS = ("c_style", "static_cast")


class IntegerOverflowRule(Rule):
    """
    Flags overflow-prone integer arithmetic and narrowing casts.

    Addition, subtraction and multiplication on operands of 16 bits or
    fewer are High. Multiplication of 32-bit operands is Medium. A C-style
    or static_cast conversion to a narrower integer type is Medium.
    """

    rule_id = "INTEGER-OVERFLOW-001"
    name = "Integer Overflow"
    description = "Detects potential integer overflow in arithmetic operations"

    def check(self, tree: SyntaxTree, sink: IssueSink) -> None:
        for node in tree.walk():
            if node.kind == NodeKind.BINARY and node.operator in _OPERATION_NAMES:
                self._check_arithmetic(tree, sink, node)
            elif node.kind == NodeKind.CAST and any(node.has_flag(style) for style in _CHECKED_CASTS):
                self._check_narrowing(tree, sink, node)

    def _check_arithmetic(self, tree: SyntaxTree, sink: IssueSink, node: SyntaxNode) -> None:
        left = _integer_width(node.child("left"))
        right = _integer_width(node.child("right"))
        if left is None or right is None:
            return
        max_bits = max(left, right)

        if max_bits <= 16:
            severity = Severity.HIGH
        elif max_bits == 32 and node.operator in _MULTIPLY:
            severity = Severity.MEDIUM
        else:
            return

        self.report(
            tree, sink, node, severity,
            f"Potential integer overflow in {_OPERATION_NAMES[node.operator]} with {max_bits}-bit "
            "integer types. Consider using larger types or overflow checking.",
            "Use larger integer types (e.g., int64_t, long long) or add overflow checks:\n"
            "  - For C++: Use std::numeric_limits to check bounds\n"
            "  - For GCC/Clang: Use __builtin_add_overflow() family of functions\n"
            "  - Consider using safe integer libraries",
        )

    def _check_narrowing(self, tree: SyntaxTree, sink: IssueSink, node: SyntaxNode) -> None:
        source_bits = _integer_width(node.child("argument"))
        target_bits = _width_of(node.type)
        if source_bits is None or target_bits is None or source_bits <= target_bits:
            return
        self.report(
            tree, sink, node, Severity.MEDIUM,
            f"Narrowing integer conversion from {source_bits}-bit to {target_bits}-bit type may truncate data.",
            "Ensure the value fits in the target type:\n"
            "  - Add range checking before conversion\n"
            "  - Use static_assert with std::numeric_limits for compile-time checks\n"
            "  - Consider using a wider type if possible",
        )


def _integer_width(expr: Optional[SyntaxNode]) -> Optional[int]:
    if expr is None:
        return None
    return _width_of(expr.type)


def _width_of(type_info: Optional[TypeInfo]) -> Optional[int]:
    if type_info is None or not type_info.is_integer:
        return None
    return type_info.integer_width
