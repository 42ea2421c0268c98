"""
Reporting module for rendering scan results.

Provides reporters for:
- Console (Rich terminal output)
- JSON (programmatic consumption)
"""

from cppreview.reporting.base import (
    BaseReporter,
    ReportConfig,
    ReporterRegistry,
    ReportMetadata,
)
from cppreview.reporting.console import ConsoleReporter
from cppreview.reporting.json_reporter import JSONReporter

__all__ = [
    # Base
    "BaseReporter",
    "ReportConfig",
    "ReporterRegistry",
    "ReportMetadata",
    # Reporters
    "ConsoleReporter",
    "JSONReporter",
]
