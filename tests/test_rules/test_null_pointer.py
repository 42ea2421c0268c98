"""Tests for NullPointerRule."""

from cppreview.models.base import Severity
from cppreview.rules import NullPointerRule


class TestNullPointerRule:
    """Test syntactic null tracking."""

    def test_deref_of_nullptr(self, b, run_rule):
        tree = b.unit(b.function("f", [
            b.var("p", "int*", b.null(), line=2),
            b.expr(b.assign(b.deref(b.ref("p"), line=3), b.num(1)), line=3),
        ], line=1))
        issues = run_rule(NullPointerRule(), tree)
        assert len(issues) == 1
        assert issues[0].severity == Severity.CRITICAL
        assert issues[0].line == 3

    def test_null_macro_and_zero(self, b, run_rule):
        tree = b.unit(b.function("f", [
            b.var("p", "int*", b.null("NULL"), line=2),
            b.var("q", "int*", b.num(0), line=3),
            b.expr(b.deref(b.ref("p")), line=4),
            b.expr(b.deref(b.ref("q")), line=5),
        ], line=1))
        assert [issue.line for issue in run_rule(NullPointerRule(), tree)] == [4, 5]

    def test_arrow_and_subscript(self, b, run_rule):
        tree = b.unit(b.function("f", [
            b.var("s", "Node*", b.null(), line=2),
            b.expr(b.member(b.ref("s"), "next", arrow=True), line=3),
            b.expr(b.index(b.ref("s"), b.num(0)), line=4),
        ], line=1))
        assert [issue.line for issue in run_rule(NullPointerRule(), tree)] == [3, 4]

    def test_reassignment_clears_null(self, b, run_rule):
        tree = b.unit(b.function("f", [
            b.var("x", "int", b.num(0), line=2),
            b.var("p", "int*", b.null(), line=3),
            b.expr(b.assign(b.ref("p"), b.address_of(b.ref("x"))), line=4),
            b.expr(b.deref(b.ref("p")), line=5),
        ], line=1))
        assert run_rule(NullPointerRule(), tree) == []

    def test_assignment_of_null(self, b, run_rule):
        tree = b.unit(b.function("f", [
            b.var("x", "int", b.num(0), line=2),
            b.var("p", "int*", b.address_of(b.ref("x")), line=3),
            b.expr(b.assign(b.ref("p"), b.null()), line=4),
            b.expr(b.deref(b.ref("p")), line=5),
        ], line=1))
        assert [issue.line for issue in run_rule(NullPointerRule(), tree)] == [5]

    def test_guarded_dereference_is_still_reported(self, b, run_rule):
        tree = b.unit(b.function("f", [
            b.var("p", "int*", b.null(), line=2),
            b.if_(b.ref("p"), [b.expr(b.assign(b.deref(b.ref("p")), b.num(1)), line=3)], line=3),
        ], line=1))
        assert len(run_rule(NullPointerRule(), tree)) == 1

    def test_literal_null_dereference(self, b, run_rule):
        tree = b.unit(b.function("f", [
            b.expr(b.deref(b.cast("int*", b.num(0), style="c_style")), line=2),
        ], line=1))
        assert len(run_rule(NullPointerRule(), tree)) == 1

    def test_valid_pointer(self, b, run_rule):
        tree = b.unit(b.function("f", [
            b.expr(b.deref(b.ref("p")), line=2),
        ], params=[b.param("p", "int*")], line=1))
        assert run_rule(NullPointerRule(), tree) == []
