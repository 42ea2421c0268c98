"""Core module containing configuration and the scan driver."""

from cppreview.core.config import (
    AnalysisConfig,
    LoggingConfig,
    ReportingConfig,
    ReviewConfig,
    get_default_config,
    validate_config,
)
from cppreview.core.scanner import Scanner, ScanResult, UnitResult

__all__ = [
    "ReviewConfig",
    "AnalysisConfig",
    "ReportingConfig",
    "LoggingConfig",
    "get_default_config",
    "validate_config",
    # Scanner
    "Scanner",
    "ScanResult",
    "UnitResult",
]
