"""Tests for the reporters."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from rich.console import Console

from cppreview.core.scanner import ScanResult, UnitResult
from cppreview.models.base import CodeLocation, Severity
from cppreview.models.issue import Issue
from cppreview.reporting import (
    ConsoleReporter,
    JSONReporter,
    ReportConfig,
    ReporterRegistry,
    ReportMetadata,
)


def make_issue(rule_id: str, severity: Severity, line: int = 1) -> Issue:
    return Issue(
        location=CodeLocation(Path("src/main.cpp"), line, 5),
        severity=severity,
        rule_id=rule_id,
        description=f"{rule_id} finding",
        suggestion="Fix it",
        code_snippet="strcpy(buf, src);",
    )


@pytest.fixture
def sample_scan_result() -> ScanResult:
    """Create a scan result with issues and one failed unit."""
    return ScanResult(
        units=[
            UnitResult(Path("src/main.cpp"), issues=[
                make_issue("NULL-PTR-001", Severity.CRITICAL, 3),
                make_issue("UNSAFE-C-FUNC-001", Severity.CRITICAL, 8),
                make_issue("SMART-PTR-001", Severity.SUGGESTION, 12),
            ]),
            UnitResult(Path("src/broken.cpp"), failed=True, error="Cannot read file\nPath: src/broken.cpp"),
        ],
        rule_count=11,
        duration_ms=12.5,
    )


@pytest.fixture
def empty_scan_result() -> ScanResult:
    return ScanResult(units=[UnitResult(Path("clean.cpp"))], rule_count=11)


def render(reporter_config: ReportConfig, result: ScanResult) -> str:
    console = Console(record=True, width=200, force_terminal=False)
    reporter = ConsoleReporter(reporter_config, ReportMetadata(tool_version="1.0.0"), console=console)
    return reporter.generate(result)


class TestReporterRegistry:
    """Test reporter lookup."""

    def test_formats_registered(self):
        assert set(ReporterRegistry.list_formats()) >= {"console", "json"}

    def test_create(self):
        assert isinstance(ReporterRegistry.create("json"), JSONReporter)
        assert ReporterRegistry.create("xml") is None


class TestConsoleReporter:
    """Test the console reporter."""

    def test_summary_and_issues(self, sample_scan_result):
        output = render(ReportConfig(), sample_scan_result)
        assert "Review Summary" in output
        assert "Files scanned: 2" in output
        assert "Issues: 3" in output
        assert "NULL-PTR-001" in output
        assert "src/main.cpp:3:5" in output
        assert "strcpy(buf, src);" in output
        assert "Failed translation units" in output
        assert "src/broken.cpp" in output

    def test_no_issues(self, empty_scan_result):
        assert "No issues found!" in render(ReportConfig(), empty_scan_result)

    def test_snippets_can_be_hidden(self, sample_scan_result):
        output = render(ReportConfig(include_code_snippets=False), sample_scan_result)
        assert "strcpy(buf, src);" not in output

    def test_min_severity(self, sample_scan_result):
        output = render(ReportConfig(min_severity=Severity.CRITICAL), sample_scan_result)
        assert "Issues: 2" in output
        assert "SMART-PTR-001" not in output

    def test_format_properties(self):
        reporter = ConsoleReporter()
        assert reporter.format_name == "console"
        assert reporter.file_extension == ".txt"


class TestJSONReporter:
    """Test the JSON reporter."""

    def test_structure(self, sample_scan_result):
        metadata = ReportMetadata(tool_version="1.0.0", targets=["src"])
        data = json.loads(JSONReporter(metadata=metadata).generate(sample_scan_result))
        assert data["metadata"]["tool"] == {"name": "cppreview", "version": "1.0.0"}
        assert data["metadata"]["scan"]["targets"] == ["src"]
        assert data["metadata"]["scan"]["files_scanned"] == 2
        assert data["metadata"]["scan"]["rule_count"] == 11
        assert data["summary"]["total_issues"] == 3
        assert data["summary"]["by_severity"]["critical"] == 2
        assert data["summary"]["by_severity"]["high"] == 0
        assert data["summary"]["by_rule"]["NULL-PTR-001"] == 1
        assert [i["rule_id"] for i in data["issues"]] == ["NULL-PTR-001", "UNSAFE-C-FUNC-001", "SMART-PTR-001"]
        assert data["failed_units"][0]["file_path"] == str(Path("src/broken.cpp"))

    def test_issue_fields(self, sample_scan_result):
        issue = json.loads(JSONReporter().generate(sample_scan_result))["issues"][0]
        assert issue["severity"] == "critical"
        assert issue["location"] == {"file_path": str(Path("src/main.cpp")), "line": 3, "column": 5}
        assert issue["suggestion"] == "Fix it"
        assert issue["code_snippet"] == "strcpy(buf, src);"

    def test_snippets_can_be_dropped(self, sample_scan_result):
        reporter = JSONReporter(ReportConfig(include_code_snippets=False))
        issue = json.loads(reporter.generate(sample_scan_result))["issues"][0]
        assert "code_snippet" not in issue

    def test_max_issues(self, sample_scan_result):
        reporter = JSONReporter(ReportConfig(max_issues=1))
        assert len(json.loads(reporter.generate(sample_scan_result))["issues"]) == 1

    def test_write(self, sample_scan_result, tmp_path):
        output = tmp_path / "reports" / "scan.json"
        written = JSONReporter().write(sample_scan_result, output)
        assert written == output
        assert json.loads(output.read_text())["summary"]["total_issues"] == 3

    def test_write_default_name(self, sample_scan_result, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        written = JSONReporter().write(sample_scan_result)
        assert written.name.startswith("cppreview_report_")
        assert written.suffix == ".json"
        assert (tmp_path / written).exists()
