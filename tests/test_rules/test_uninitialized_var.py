"""Tests for UninitializedVarRule."""

import pytest

from cppreview.models.base import Severity
from cppreview.rules import UninitializedVarRule


def single_decl(b, decl):
    return b.unit(b.function("f", [decl], line=1))


class TestUninitializedVarRule:
    """Test declarations without initializers."""

    @pytest.mark.parametrize("type_spelling", ["int", "double", "char*", "unsigned long"])
    def test_builtin_or_pointer(self, b, run_rule, type_spelling):
        issues = run_rule(UninitializedVarRule(), single_decl(b, b.var("x", type_spelling, line=2)))
        assert len(issues) == 1
        assert issues[0].severity == Severity.HIGH
        assert issues[0].line == 2
        assert "'x'" in issues[0].description

    def test_initialized(self, b, run_rule):
        assert run_rule(UninitializedVarRule(), single_decl(b, b.var("x", "int", b.num(0)))) == []

    def test_static_local(self, b, run_rule):
        decl = b.var("counter", "int", flags=("static",))
        assert run_rule(UninitializedVarRule(), single_decl(b, decl)) == []

    def test_array_is_skipped(self, b, run_rule):
        assert run_rule(UninitializedVarRule(), single_decl(b, b.var("buf", "char", array_size=8))) == []

    def test_class_with_default_constructor(self, b, run_rule):
        assert run_rule(UninitializedVarRule(), single_decl(b, b.var("s", "std::string"))) == []

    def test_unknown_record_is_skipped(self, b, run_rule):
        assert run_rule(UninitializedVarRule(), single_decl(b, b.var("w", "Widget"))) == []

    def test_globals_are_not_checked(self, b, run_rule):
        tree = b.unit(b.var("g", "int", line=1), b.function("f", [], line=2))
        assert run_rule(UninitializedVarRule(), tree) == []

    def test_range_for_variable(self, b, run_rule):
        loop = b.range_for("v", "int", b.ref("values", "std::vector<int>"), [], line=2)
        assert run_rule(UninitializedVarRule(), single_decl(b, loop)) == []
