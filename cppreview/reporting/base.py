"""
Base Reporter for cppreview.

Provides the abstract base class for all report formatters and the registry
the CLI uses to look them up by format name.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from cppreview.core.scanner import ScanResult
from cppreview.models.base import Severity
from cppreview.models.issue import Issue


@dataclass
class ReportConfig:
    """Configuration for report generation."""

    include_code_snippets: bool = True
    max_issues: Optional[int] = None  # None = all issues
    min_severity: Optional[Severity] = None
    output_path: Optional[Path] = None


@dataclass
class ReportMetadata:
    """Metadata for the report."""

    tool_name: str = "cppreview"
    tool_version: str = "1.0.0"
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    targets: list[str] = field(default_factory=list)
    custom: dict[str, Any] = field(default_factory=dict)


class BaseReporter(ABC):
    """
    Abstract base class for report generators.

    Subclasses implement specific output formats (console, JSON).
    """

    def __init__(
        self,
        config: Optional[ReportConfig] = None,
        metadata: Optional[ReportMetadata] = None,
    ) -> None:
        self.config = config or ReportConfig()
        self.metadata = metadata or ReportMetadata()

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Get the format name (e.g., 'console', 'json')."""
        ...

    @property
    @abstractmethod
    def file_extension(self) -> str:
        ...

    @abstractmethod
    def generate(self, scan_result: ScanResult) -> str:
        """
        Generate the report content.

        Args:
            scan_result: The scan result to report.

        Returns:
            The report as a string.
        """
        ...

    def write(self, scan_result: ScanResult, output_path: Optional[Path] = None) -> Path:
        """
        Generate and write the report to a file.

        Args:
            scan_result: The scan result to report.
            output_path: Output file path. If None, uses config or generates default.

        Returns:
            The path to the written file.
        """
        path = output_path or self.config.output_path
        if path is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            path = Path(f"cppreview_report_{timestamp}{self.file_extension}")

        content = self.generate(scan_result)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def filter_issues(self, issues: list[Issue]) -> list[Issue]:
        """Apply the severity threshold and the issue cap."""
        filtered = issues
        if self.config.min_severity is not None:
            filtered = [i for i in filtered if i.severity >= self.config.min_severity]
        if self.config.max_issues is not None:
            filtered = filtered[:self.config.max_issues]
        return filtered


class ReporterRegistry:
    """Registry for available reporters."""

    _reporters: dict[str, type[BaseReporter]] = {}

    @classmethod
    def register(cls, name: str) -> Any:
        """Decorator to register a reporter."""
        def decorator(reporter_class: type[BaseReporter]) -> type[BaseReporter]:
            cls._reporters[name] = reporter_class
            return reporter_class
        return decorator

    @classmethod
    def get(cls, name: str) -> Optional[type[BaseReporter]]:
        return cls._reporters.get(name)

    @classmethod
    def list_formats(cls) -> list[str]:
        return list(cls._reporters.keys())

    @classmethod
    def create(
        cls,
        name: str,
        config: Optional[ReportConfig] = None,
        metadata: Optional[ReportMetadata] = None,
    ) -> Optional[BaseReporter]:
        """Create a reporter instance by name."""
        reporter_class = cls.get(name)
        if reporter_class:
            return reporter_class(config=config, metadata=metadata)
        return None
