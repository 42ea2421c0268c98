"""
JSON Reporter for cppreview.

Generates structured JSON output for programmatic consumption.
"""

from __future__ import annotations

import json
from typing import Any

from cppreview.core.scanner import ScanResult
from cppreview.models.base import Severity
from cppreview.models.issue import Issue
from cppreview.reporting.base import BaseReporter, ReporterRegistry


@ReporterRegistry.register("json")
class JSONReporter(BaseReporter):
    """
    JSON format reporter.

    The report holds metadata, a summary by severity and by rule, the issues
    in report order and the translation units that failed.
    """

    @property
    def format_name(self) -> str:
        return "json"

    @property
    def file_extension(self) -> str:
        return ".json"

    def generate(self, scan_result: ScanResult) -> str:
        """Generate JSON report."""
        issues = self.filter_issues(scan_result.issues)

        report = {
            "metadata": self._create_metadata(scan_result),
            "summary": self._create_summary(issues),
            "issues": [self._issue_to_dict(i) for i in issues],
            "failed_units": [unit.to_dict() for unit in scan_result.failed_units],
        }
        return json.dumps(report, indent=2, default=str)

    def _create_metadata(self, scan_result: ScanResult) -> dict[str, Any]:
        return {
            "tool": {
                "name": self.metadata.tool_name,
                "version": self.metadata.tool_version,
            },
            "scan": {
                "targets": self.metadata.targets,
                "files_scanned": scan_result.files_scanned,
                "rule_count": scan_result.rule_count,
                "duration_ms": round(scan_result.duration_ms, 2),
            },
            "generated_at": self.metadata.generated_at.isoformat(),
        }

    def _create_summary(self, issues: list[Issue]) -> dict[str, Any]:
        by_severity = {sev.value: 0 for sev in Severity}
        by_rule: dict[str, int] = {}
        for issue in issues:
            by_severity[issue.severity.value] += 1
            by_rule[issue.rule_id] = by_rule.get(issue.rule_id, 0) + 1
        return {
            "total_issues": len(issues),
            "by_severity": by_severity,
            "by_rule": by_rule,
        }

    def _issue_to_dict(self, issue: Issue) -> dict[str, Any]:
        result = issue.to_dict()
        if not self.config.include_code_snippets:
            result.pop("code_snippet", None)
        return result
