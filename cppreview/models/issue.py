"""
Issue model and the append-only Issue Sink.

An Issue is one complete finding. The sink collects issues from every rule
of a translation unit in insertion order; it never rejects and never
deduplicates, since each rule is authoritative for its own identifier.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Iterator, Optional

from cppreview.models.base import CodeLocation, Severity


@dataclass(frozen=True)
class Issue:
    """A single reported finding."""

    location: CodeLocation
    severity: Severity
    rule_id: str
    description: str
    suggestion: Optional[str] = None
    code_snippet: Optional[str] = None

    @property
    def file_path(self) -> Path:
        return self.location.file_path

    @property
    def line(self) -> int:
        return self.location.line

    @property
    def column(self) -> int:
        return self.location.column

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "rule_id": self.rule_id,
            "severity": self.severity.value,
            "location": self.location.to_dict(),
            "description": self.description,
            "suggestion": self.suggestion,
            "code_snippet": self.code_snippet,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Issue":
        """Deserialize from dictionary."""
        return cls(
            location=CodeLocation.from_dict(data["location"]),
            severity=Severity.from_string(data["severity"]),
            rule_id=data["rule_id"],
            description=data["description"],
            suggestion=data.get("suggestion"),
            code_snippet=data.get("code_snippet"),
        )


class IssueSink:
    """
    Append-only collector of issues.

    Optional per-rule severity overrides are applied when an issue is
    recorded, so the stored issue is final. ``record`` is serialized by a
    lock, which makes a sink safe to share between threads.
    """

    def __init__(self, severity_overrides: Optional[dict[str, Severity]] = None) -> None:
        self._issues: list[Issue] = []
        self._overrides: dict[str, Severity] = dict(severity_overrides or {})
        self._lock = threading.Lock()

    def record(self, issue: Issue) -> None:
        """Append one issue."""
        override = self._overrides.get(issue.rule_id)
        if override is not None and override != issue.severity:
            issue = replace(issue, severity=override)
        with self._lock:
            self._issues.append(issue)

    def all(self) -> list[Issue]:
        """All issues in insertion order."""
        with self._lock:
            return list(self._issues)

    def count_at_or_above(self, severity: Severity) -> int:
        """Number of issues whose severity is at least ``severity``."""
        with self._lock:
            return sum(1 for issue in self._issues if issue.severity >= severity)

    def counts_by_severity(self) -> dict[Severity, int]:
        counts = {sev: 0 for sev in Severity}
        for issue in self.all():
            counts[issue.severity] += 1
        return counts

    def __len__(self) -> int:
        with self._lock:
            return len(self._issues)

    def __iter__(self) -> Iterator[Issue]:
        return iter(self.all())
