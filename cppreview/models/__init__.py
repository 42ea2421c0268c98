"""Data models for cppreview."""

from cppreview.models.base import CodeLocation, Severity
from cppreview.models.issue import Issue, IssueSink
from cppreview.models.taint_flow import (
    RiskType,
    TaintPath,
    TaintSink,
    TaintSource,
    TaintType,
)

__all__ = [
    # Base types
    "CodeLocation",
    "Severity",
    # Findings
    "Issue",
    "IssueSink",
    # Taint flow
    "RiskType",
    "TaintPath",
    "TaintSink",
    "TaintSource",
    "TaintType",
]
