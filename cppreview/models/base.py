"""
Core enums and base classes used throughout cppreview.

This module defines the fundamental data types for:
- Severity levels (totally ordered, compared by rank)
- Source code locations
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional


class Severity(Enum):
    """Severity levels for findings, from most to least severe."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    SUGGESTION = "suggestion"

    @classmethod
    def from_string(cls, value: str) -> "Severity":
        """Create Severity from string, case-insensitive."""
        return cls(value.strip().lower())

    @property
    def rank(self) -> int:
        """Numeric rank; higher means more severe."""
        return _SEVERITY_RANK[self]

    def __lt__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_RANK = {
    Severity.SUGGESTION: 0,
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}


@dataclass(frozen=True)
class CodeLocation:
    """
    Location in source code.

    Lines and columns are 1-based; a line of 0 means the location is unknown.
    """

    file_path: Path
    line: int
    column: int

    def __post_init__(self) -> None:
        """Ensure file_path is a Path object."""
        if isinstance(self.file_path, str):
            object.__setattr__(self, "file_path", Path(self.file_path))

    @classmethod
    def unknown(cls, file_path: Optional[Path] = None) -> "CodeLocation":
        return cls(file_path or Path("<unknown>"), 0, 0)

    def to_uri(self) -> str:
        """
        Convert to URI string format.

        Returns:
            String in format "file:line:column"
        """
        return f"{self.file_path}:{self.line}:{self.column}"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "file_path": str(self.file_path),
            "line": self.line,
            "column": self.column,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CodeLocation":
        """Deserialize from dictionary."""
        return cls(
            file_path=Path(data["file_path"]),
            line=data["line"],
            column=data["column"],
        )
