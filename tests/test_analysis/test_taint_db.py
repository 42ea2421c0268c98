"""Tests for the taint classification tables."""

import pytest

from cppreview.analysis.taint_db import SANITIZERS, SINKS, SOURCES, split_words
from cppreview.models.base import Severity
from cppreview.models.taint_flow import RiskType, TaintType


class TestSplitWords:
    """Test identifier splitting."""

    @pytest.mark.parametrize("name,expected", [
        ("executeQuery", ["execute", "query"]),
        ("HTTPRequest_v2", ["http", "request", "v"]),
        ("run_sql", ["run", "sql"]),
        ("db::Query", ["db", "query"]),
        ("Requery", ["requery"]),
    ])
    def test_split(self, name, expected):
        assert split_words(name) == expected


class TestClassification:
    """Test exact and keyword lookups."""

    def test_exact_source(self):
        category = SOURCES.classify("getenv")
        assert category is not None
        assert category.taint_type == TaintType.ENVIRONMENT

    def test_qualified_name(self):
        assert SOURCES.classify("std::getenv").taint_type == TaintType.ENVIRONMENT

    def test_keyword_source(self):
        assert SOURCES.classify("readUserInput").taint_type == TaintType.USER_INPUT

    def test_exact_sink(self):
        category = SINKS.classify("system")
        assert category.risk_type == RiskType.COMMAND_INJECTION
        assert category.severity == Severity.CRITICAL

    def test_path_sink_is_high(self):
        category = SINKS.classify("fopen")
        assert category.risk_type == RiskType.PATH_TRAVERSAL
        assert category.severity == Severity.HIGH

    def test_keyword_requires_whole_word(self):
        assert SINKS.classify("Requery") is None
        assert SINKS.classify("runQuery").risk_type == RiskType.SQL_INJECTION

    def test_exact_tier_wins_over_keyword_tier(self):
        # "execute" is an exact SQL sink although "exec" is a command keyword.
        assert SINKS.classify("execute").risk_type == RiskType.SQL_INJECTION

    def test_first_category_wins_within_tier(self):
        # Both "query" (sql) and "exec" (command) are keywords here.
        assert SINKS.classify("exec_query").risk_type == RiskType.SQL_INJECTION

    def test_sanitizers(self):
        assert "escapeshellarg" in SANITIZERS
        assert "sanitize_input" in SANITIZERS
        assert "validatePath" in SANITIZERS
        assert "system" not in SANITIZERS

    def test_empty_name(self):
        assert SOURCES.classify(None) is None
        assert SOURCES.classify("") is None
