"""Assignment used as a condition (``=`` typed for ``==``)."""

from __future__ import annotations

from cppreview.ast.nodes import NodeKind, SyntaxTree
from cppreview.models.base import Severity
from cppreview.models.issue import IssueSink
from cppreview.rules.base import Rule

_CHECKED_STATEMENTS = (NodeKind.IF, NodeKind.WHILE, NodeKind.FOR)


class AssignmentInConditionRule(Rule):
    """
    Flags a plain ``=`` that is the direct condition of if/while/for.

    Compound assignments are left alone, and so is an assignment wrapped in
    an extra pair of parentheses, which is the accepted way of saying the
    assignment is intended.
    """

    rule_id = "ASSIGN-COND-001"
    name = "Assignment in Condition"
    description = "Detects assignment operators used in conditional expressions"

    def check(self, tree: SyntaxTree, sink: IssueSink) -> None:
        for node in tree.walk():
            if node.kind not in _CHECKED_STATEMENTS:
                continue
            condition = node.child("condition")
            if condition is None or condition.kind != NodeKind.BINARY or condition.operator != "=":
                continue
            self.report(
                tree, sink, node, Severity.HIGH,
                "Assignment operator (=) used in conditional expression. "
                "This is likely a bug - did you mean to use comparison operator (==)?",
                "Replace '=' with '==' for comparison. If assignment was intentional, "
                "make it explicit by adding extra parentheses: if ((a = b))",
                snippet=condition.text or tree.snippet(node),
            )
