"""Tests for SmartPointerRule."""

from cppreview.models.base import Severity
from cppreview.rules import SmartPointerRule


class TestSmartPointerRule:
    """Test raw owning pointer suggestions."""

    def test_raw_pointer_from_new(self, b, run_rule):
        tree = b.unit(b.function("f", [b.var("w", "Widget*", b.new("Widget"), line=2)], line=1))
        issues = run_rule(SmartPointerRule(), tree)
        assert len(issues) == 1
        assert issues[0].severity == Severity.SUGGESTION
        assert "std::make_unique<Widget>" in issues[0].suggestion

    def test_smart_pointer_is_fine(self, b, run_rule):
        tree = b.unit(b.function("f", [
            b.var("w", "std::unique_ptr<Widget>", b.new("Widget"), line=2),
        ], line=1))
        assert run_rule(SmartPointerRule(), tree) == []

    def test_pointer_not_from_new(self, b, run_rule):
        tree = b.unit(b.function("f", [
            b.var("p", "int*", b.call("malloc", b.num(4)), line=2),
        ], line=1))
        assert run_rule(SmartPointerRule(), tree) == []

    def test_global_raw_pointer(self, b, run_rule):
        tree = b.unit(b.var("instance", "Widget*", b.new("Widget"), line=1))
        assert len(run_rule(SmartPointerRule(), tree)) == 1
