"""Tests for severity, locations, issues and the issue sink."""

import threading
from pathlib import Path

import pytest

from cppreview.models.base import CodeLocation, Severity
from cppreview.models.issue import Issue, IssueSink


def make_issue(rule_id="TEST-001", severity=Severity.HIGH, line=1) -> Issue:
    return Issue(
        location=CodeLocation(Path("a.cpp"), line, 1),
        severity=severity,
        rule_id=rule_id,
        description="something is wrong",
    )


class TestSeverity:
    """Test severity ordering."""

    def test_total_order(self):
        """Severities compare by rank, critical highest."""
        assert Severity.CRITICAL > Severity.HIGH > Severity.MEDIUM > Severity.LOW > Severity.SUGGESTION
        assert max(Severity) == Severity.CRITICAL
        assert min(Severity) == Severity.SUGGESTION

    def test_from_string_is_case_insensitive(self):
        assert Severity.from_string(" High ") == Severity.HIGH

    def test_from_string_rejects_unknown(self):
        with pytest.raises(ValueError):
            Severity.from_string("fatal")


class TestCodeLocation:
    """Test source locations."""

    def test_string_path_is_converted(self):
        location = CodeLocation("src/a.cpp", 3, 7)
        assert location.file_path == Path("src/a.cpp")

    def test_uri(self):
        assert CodeLocation(Path("a.cpp"), 3, 7).to_uri() == "a.cpp:3:7"

    def test_dict_roundtrip(self):
        location = CodeLocation(Path("a.cpp"), 3, 7)
        assert CodeLocation.from_dict(location.to_dict()) == location


class TestIssue:
    """Test the issue value type."""

    def test_is_immutable(self):
        issue = make_issue()
        with pytest.raises(AttributeError):
            issue.line = 4  # type: ignore[misc]

    def test_to_dict(self):
        data = make_issue().to_dict()
        assert data["rule_id"] == "TEST-001"
        assert data["severity"] == "high"
        assert data["location"]["line"] == 1
        assert data["suggestion"] is None

    def test_from_dict(self):
        issue = make_issue(severity=Severity.LOW, line=9)
        assert Issue.from_dict(issue.to_dict()) == issue


class TestIssueSink:
    """Test the append-only sink."""

    def test_keeps_insertion_order(self):
        sink = IssueSink()
        for line in (5, 1, 3):
            sink.record(make_issue(line=line))
        assert [issue.line for issue in sink.all()] == [5, 1, 3]

    def test_never_deduplicates(self):
        sink = IssueSink()
        sink.record(make_issue())
        sink.record(make_issue())
        assert len(sink) == 2

    def test_all_returns_a_copy(self):
        sink = IssueSink()
        sink.record(make_issue())
        sink.all().clear()
        assert len(sink) == 1

    def test_count_at_or_above(self):
        sink = IssueSink()
        for severity in (Severity.CRITICAL, Severity.HIGH, Severity.LOW, Severity.SUGGESTION):
            sink.record(make_issue(severity=severity))
        assert sink.count_at_or_above(Severity.CRITICAL) == 1
        assert sink.count_at_or_above(Severity.HIGH) == 2
        assert sink.count_at_or_above(Severity.SUGGESTION) == 4

    def test_counts_by_severity(self):
        sink = IssueSink()
        sink.record(make_issue(severity=Severity.MEDIUM))
        sink.record(make_issue(severity=Severity.MEDIUM))
        counts = sink.counts_by_severity()
        assert counts[Severity.MEDIUM] == 2
        assert counts[Severity.CRITICAL] == 0

    def test_severity_override_applied_on_record(self):
        sink = IssueSink({"TEST-001": Severity.LOW})
        sink.record(make_issue(severity=Severity.CRITICAL))
        sink.record(make_issue(rule_id="OTHER-001", severity=Severity.CRITICAL))
        assert [issue.severity for issue in sink] == [Severity.LOW, Severity.CRITICAL]

    def test_concurrent_records_are_all_kept(self):
        sink = IssueSink()

        def worker():
            for _ in range(200):
                sink.record(make_issue())

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert len(sink) == 800
