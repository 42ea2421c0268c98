"""
Console Reporter for cppreview.

Generates rich text output for terminal display using Rich library.
"""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from cppreview.core.scanner import ScanResult, UnitResult
from cppreview.models.base import Severity
from cppreview.models.issue import Issue
from cppreview.reporting.base import BaseReporter, ReportConfig, ReportMetadata, ReporterRegistry

SEVERITY_STYLES: dict[Severity, str] = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "cyan",
    Severity.SUGGESTION: "dim",
}


@ReporterRegistry.register("console")
class ConsoleReporter(BaseReporter):
    """
    Console format reporter.

    Prints a summary panel, per-severity and per-rule tables and one block
    per issue, grouped in the order the rules reported them.
    """

    def __init__(
        self,
        config: Optional[ReportConfig] = None,
        metadata: Optional[ReportMetadata] = None,
        console: Optional[Console] = None,
    ) -> None:
        super().__init__(config, metadata)
        self.console = console or Console()

    @property
    def format_name(self) -> str:
        return "console"

    @property
    def file_extension(self) -> str:
        return ".txt"

    def generate(self, scan_result: ScanResult) -> str:
        """Generate console report as plain text."""
        with self.console.capture() as capture:
            self.display(scan_result)
        return capture.get()

    def display(self, scan_result: ScanResult) -> None:
        """Display the report to the console."""
        issues = self.filter_issues(scan_result.issues)

        self._display_header(scan_result, issues)
        self._display_issues(issues)

        if scan_result.failed_units:
            self._display_failures(scan_result.failed_units)

    def _display_header(self, scan_result: ScanResult, issues: list[Issue]) -> None:
        style = "green" if not issues else _severity_style(max(i.severity for i in issues))
        self.console.print(Panel.fit(
            f"[bold]{self.metadata.tool_name}[/] {self.metadata.tool_version}\n\n"
            f"Files scanned: {scan_result.files_scanned}\n"
            f"Rules: {scan_result.rule_count}\n"
            f"Issues: {len(issues)}\n"
            f"Duration: {scan_result.duration_ms / 1000:.2f}s",
            title="Review Summary",
            border_style=style,
        ))

    def _display_issues(self, issues: list[Issue]) -> None:
        if not issues:
            self.console.print("[bold green]No issues found![/]")
            return

        severity_table = Table(title="Issues by Severity")
        severity_table.add_column("Severity", style="cyan")
        severity_table.add_column("Count", justify="right")
        for severity in Severity:
            count = sum(1 for i in issues if i.severity == severity)
            if count:
                severity_table.add_row(severity.value.upper(), str(count), style=_severity_style(severity))
        self.console.print(severity_table)

        rule_table = Table(title="Issues by Rule")
        rule_table.add_column("Rule", style="cyan")
        rule_table.add_column("Count", justify="right")
        by_rule: dict[str, int] = {}
        for issue in issues:
            by_rule[issue.rule_id] = by_rule.get(issue.rule_id, 0) + 1
        for rule_id, count in by_rule.items():
            rule_table.add_row(rule_id, str(count))
        self.console.print(rule_table)
        self.console.print()

        self.console.print("[bold]Issues:[/]")
        self.console.print()
        for index, issue in enumerate(issues, 1):
            self._display_issue(issue, index)

    def _display_issue(self, issue: Issue, index: int) -> None:
        style = _severity_style(issue.severity)
        self.console.print(
            f"[bold]{index}. [{style}][{issue.severity.value.upper()}][/{style}] {issue.rule_id}[/] "
            f"{issue.location.to_uri()}",
            highlight=False,
        )
        self.console.print(f"   {escape(issue.description)}", highlight=False)
        if self.config.include_code_snippets and issue.code_snippet:
            self.console.print(f"   [dim]Code:[/] {escape(issue.code_snippet)}", highlight=False)
        if issue.suggestion:
            self.console.print(f"   [dim]Fix:[/] {escape(issue.suggestion)}", highlight=False)
        self.console.print()

    def _display_failures(self, units: list[UnitResult]) -> None:
        self.console.print("[bold yellow]Failed translation units:[/]")
        for unit in units:
            first_line = (unit.error or "unknown error").splitlines()[0]
            self.console.print(f"  [yellow]- {unit.file_path}:[/] {escape(first_line)}", highlight=False)
        self.console.print()


def _severity_style(severity: Severity) -> str:
    return SEVERITY_STYLES.get(severity, "white")
