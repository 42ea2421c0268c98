"""Tests for IntegerOverflowRule."""

import pytest

from cppreview.models.base import Severity
from cppreview.rules import IntegerOverflowRule


def arithmetic(b, operator, left_type, right_type):
    return b.unit(b.function("f", [
        b.expr(b.binary(operator, b.ref("a", left_type), b.ref("c", right_type)), line=2),
    ], line=1))


class TestIntegerOverflowRule:
    """Test arithmetic and narrowing checks."""

    @pytest.mark.parametrize("operator", ["+", "-", "*", "+=", "-=", "*="])
    def test_narrow_operands(self, b, run_rule, operator):
        issues = run_rule(IntegerOverflowRule(), arithmetic(b, operator, "short", "short"))
        assert len(issues) == 1
        assert issues[0].severity == Severity.HIGH
        assert "16-bit" in issues[0].description

    def test_int_multiplication(self, b, run_rule):
        issues = run_rule(IntegerOverflowRule(), arithmetic(b, "*", "int", "int"))
        assert len(issues) == 1
        assert issues[0].severity == Severity.MEDIUM
        assert "multiplication" in issues[0].description

    def test_int_addition_is_fine(self, b, run_rule):
        assert run_rule(IntegerOverflowRule(), arithmetic(b, "+", "int", "int")) == []

    def test_wide_operand_is_fine(self, b, run_rule):
        assert run_rule(IntegerOverflowRule(), arithmetic(b, "*", "int", "long long")) == []

    def test_non_integer_operands(self, b, run_rule):
        assert run_rule(IntegerOverflowRule(), arithmetic(b, "+", "double", "short")) == []
        assert run_rule(IntegerOverflowRule(), arithmetic(b, "+", "char*", "short")) == []

    def test_division_is_not_checked(self, b, run_rule):
        assert run_rule(IntegerOverflowRule(), arithmetic(b, "/", "short", "short")) == []

    @pytest.mark.parametrize("style", ["c_style", "static_cast"])
    def test_narrowing_cast(self, b, run_rule, style):
        tree = b.unit(b.function("f", [
            b.expr(b.cast("short", b.ref("big", "long"), style=style), line=2),
        ], line=1))
        issues = run_rule(IntegerOverflowRule(), tree)
        assert len(issues) == 1
        assert issues[0].severity == Severity.MEDIUM
        assert "64-bit to 16-bit" in issues[0].description

    def test_reinterpret_cast_is_not_checked(self, b, run_rule):
        tree = b.unit(b.function("f", [
            b.expr(b.cast("short", b.ref("big", "long"), style="reinterpret_cast"), line=2),
        ], line=1))
        assert run_rule(IntegerOverflowRule(), tree) == []

    def test_widening_cast(self, b, run_rule):
        tree = b.unit(b.function("f", [
            b.expr(b.cast("long", b.ref("small", "short")), line=2),
        ], line=1))
        assert run_rule(IntegerOverflowRule(), tree) == []
