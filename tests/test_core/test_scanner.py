"""
Tests for file discovery and per-unit analysis.
"""

from pathlib import Path

import pytest

from cppreview.core.config import AnalysisConfig, ReviewConfig
from cppreview.core.scanner import Scanner, ScanResult, UnitResult
from cppreview.models.base import CodeLocation, Severity
from cppreview.models.issue import Issue


def make_issue(rule_id, severity):
    return Issue(CodeLocation(Path("a.cpp"), 1, 1), severity, rule_id, "finding")


class TestDiscovery:
    """Test file discovery."""

    def test_walks_directories_in_sorted_order(self, tmp_path):
        (tmp_path / "b.cpp").write_text("")
        (tmp_path / "a.c").write_text("")
        (tmp_path / "notes.txt").write_text("")
        sub = tmp_path / "sub"
        sub.mkdir()
        (sub / "c.hpp").write_text("")
        files = Scanner().discover_files([tmp_path])
        assert [f.name for f in files] == ["a.c", "b.cpp", "c.hpp"]

    def test_explicit_file_is_kept(self, tmp_path):
        odd = tmp_path / "kernel.inc"
        odd.write_text("")
        assert Scanner().discover_files([odd]) == [odd]

    def test_duplicates_are_removed(self, tmp_path):
        source = tmp_path / "a.cpp"
        source.write_text("")
        assert Scanner().discover_files([tmp_path, source]) == [source]

    def test_exclude_patterns(self, tmp_path):
        build = tmp_path / "build"
        build.mkdir()
        (build / "gen.cpp").write_text("")
        (tmp_path / "main.cpp").write_text("")
        files = Scanner().discover_files([tmp_path])
        assert [f.name for f in files] == ["main.cpp"]

    def test_custom_exclude(self, tmp_path):
        (tmp_path / "main.cpp").write_text("")
        (tmp_path / "main_test.cpp").write_text("")
        config = ReviewConfig(analysis=AnalysisConfig(exclude_patterns=["*_test.cpp"]))
        assert [f.name for f in Scanner(config).discover_files([tmp_path])] == ["main.cpp"]

    def test_oversized_files_are_skipped(self, tmp_path):
        config = ReviewConfig(analysis=AnalysisConfig(max_file_size_mb=1))
        (tmp_path / "huge.cpp").write_bytes(b"/" * (1024 * 1024 + 1))
        (tmp_path / "small.cpp").write_text("")
        assert [f.name for f in Scanner(config).discover_files([tmp_path])] == ["small.cpp"]

    def test_missing_path(self, tmp_path):
        assert Scanner().discover_files([tmp_path / "nowhere"]) == []


class TestScanResult:
    """Test merged results."""

    def test_counts(self):
        result = ScanResult(units=[
            UnitResult(Path("a.cpp"), issues=[make_issue("X-1", Severity.CRITICAL), make_issue("Y-1", Severity.LOW)]),
            UnitResult(Path("b.cpp"), issues=[make_issue("X-1", Severity.HIGH)]),
            UnitResult(Path("c.cpp"), failed=True, error="unreadable"),
        ])
        assert len(result.issues) == 3
        assert result.files_scanned == 3
        assert [u.file_path.name for u in result.failed_units] == ["c.cpp"]
        assert not result.all_failed
        assert result.count_at_or_above(Severity.HIGH) == 2
        assert result.counts_by_rule() == {"X-1": 2, "Y-1": 1}
        assert result.counts_by_severity()[Severity.LOW] == 1

    def test_all_failed(self):
        assert ScanResult(units=[UnitResult(Path("a.c"), failed=True)]).all_failed
        assert not ScanResult().all_failed

    def test_to_dict(self):
        result = ScanResult(units=[UnitResult(Path("a.cpp"), issues=[make_issue("X-1", Severity.LOW)])],
                            rule_count=11)
        data = result.to_dict()
        assert data["rule_count"] == 11
        assert data["summary"]["total"] == 1
        assert data["summary"]["by_severity"]["low"] == 1
        assert data["issues"][0]["rule_id"] == "X-1"
        assert data["failed_units"] == []


class TestAnalysis:
    """Test analysis of real sources."""

    @pytest.fixture(autouse=True)
    def _grammar(self):
        pytest.importorskip("tree_sitter_cpp")

    def test_analyze_file(self, sample_cpp_file):
        unit = Scanner().analyze_file(sample_cpp_file)
        assert not unit.failed
        rule_ids = {issue.rule_id for issue in unit.issues}
        assert "NULL-PTR-001" in rule_ids
        assert "UNSAFE-C-FUNC-001" in rule_ids
        assert len(unit.outcomes) == 11
        assert unit.failed_rules == []

    def test_clean_file(self, clean_cpp_file):
        assert Scanner().analyze_file(clean_cpp_file).issues == []

    def test_unreadable_file(self, tmp_path):
        unit = Scanner().analyze_file(tmp_path / "gone.cpp")
        assert unit.failed
        assert "Cannot read file" in unit.error

    def test_syntax_errors_are_tolerated(self):
        unit = Scanner().analyze_source("void f() { int x = ; gets(0); }")
        assert not unit.failed

    def test_strict_parse_fails_the_unit(self):
        config = ReviewConfig(analysis=AnalysisConfig(strict_parse=True))
        unit = Scanner(config).analyze_source("void f( {")
        assert unit.failed
        assert "syntax errors" in unit.error

    def test_severity_overrides(self):
        config = ReviewConfig(analysis=AnalysisConfig(rule_severity={"UNSAFE-C-FUNC-001": "low"}))
        unit = Scanner(config).analyze_source('void f(char *d) { strcpy(d, "x"); }')
        unsafe = [i for i in unit.issues if i.rule_id == "UNSAFE-C-FUNC-001"]
        assert unsafe and all(i.severity == Severity.LOW for i in unsafe)

    def test_disabled_rules(self):
        config = ReviewConfig(analysis=AnalysisConfig(disabled_rules=["UNSAFE-C-FUNC-001"]))
        unit = Scanner(config).analyze_source('void f(char *d) { strcpy(d, "x"); }')
        assert all(i.rule_id != "UNSAFE-C-FUNC-001" for i in unit.issues)
        assert len(unit.outcomes) == 10

    def test_scan_keeps_file_order(self, tmp_path):
        (tmp_path / "b.cpp").write_text("void f() { gets(0); }\n")
        (tmp_path / "a.cpp").write_text("void g() { gets(0); }\n")
        result = Scanner().scan([tmp_path])
        assert [u.file_path.name for u in result.units] == ["a.cpp", "b.cpp"]
        assert result.rule_count == 11
        assert [i.file_path.name for i in result.issues] == ["a.cpp", "b.cpp"]

    def test_scan_with_workers(self, tmp_path):
        for name in ("a.cpp", "b.cpp", "c.cpp"):
            (tmp_path / name).write_text("void f() { gets(0); }\n")
        config = ReviewConfig(analysis=AnalysisConfig(workers=2))
        result = Scanner(config).scan([tmp_path])
        assert [u.file_path.name for u in result.units] == ["a.cpp", "b.cpp", "c.cpp"]
        assert len(result.issues) == 3
