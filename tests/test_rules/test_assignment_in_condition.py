"""Tests for AssignmentInConditionRule."""

import pytest

from cppreview.models.base import Severity
from cppreview.rules import AssignmentInConditionRule


class TestAssignmentInConditionRule:
    """Test condition operator checks."""

    def test_plain_assignment_in_if(self, b, run_rule):
        condition = b.assign(b.ref("x", "int"), b.num(5), text="x = 5")
        tree = b.unit(b.function("f", [b.if_(condition, [], line=2)], line=1))
        issues = run_rule(AssignmentInConditionRule(), tree)
        assert len(issues) == 1
        assert issues[0].severity == Severity.HIGH
        assert issues[0].line == 2
        assert issues[0].code_snippet == "x = 5"

    def test_comparison_is_fine(self, b, run_rule):
        condition = b.binary("==", b.ref("x", "int"), b.num(5))
        tree = b.unit(b.function("f", [b.if_(condition, [], line=2)], line=1))
        assert run_rule(AssignmentInConditionRule(), tree) == []

    def test_compound_assignment_is_fine(self, b, run_rule):
        condition = b.assign(b.ref("x", "int"), b.num(5), operator="+=")
        tree = b.unit(b.function("f", [b.if_(condition, [], line=2)], line=1))
        assert run_rule(AssignmentInConditionRule(), tree) == []

    def test_parenthesized_assignment_is_intentional(self, b, run_rule):
        condition = b.paren(b.assign(b.ref("x", "int"), b.num(5)))
        tree = b.unit(b.function("f", [b.if_(condition, [], line=2)], line=1))
        assert run_rule(AssignmentInConditionRule(), tree) == []

    @pytest.mark.parametrize("loop", ["while", "for"])
    def test_loops(self, b, run_rule, loop):
        condition = b.assign(b.ref("x", "int"), b.num(0))
        if loop == "while":
            stmt = b.while_(condition, [], line=2)
        else:
            stmt = b.for_(None, condition, None, [], line=2)
        tree = b.unit(b.function("f", [stmt], line=1))
        assert len(run_rule(AssignmentInConditionRule(), tree)) == 1

    def test_do_while_is_not_checked(self, b, run_rule):
        tree = b.unit(b.function("f", [
            b.do_([], b.assign(b.ref("x", "int"), b.num(0)), line=2),
        ], line=1))
        assert run_rule(AssignmentInConditionRule(), tree) == []
