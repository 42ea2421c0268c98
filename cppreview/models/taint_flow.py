"""
Taint flow models.

These models describe one reconstructed data flow inside a function:
- TaintType: provenance classification of a tainted value
- RiskType: vulnerability category of a sensitive sink
- TaintSource: point where a value became untrusted
- TaintSink: sensitive call that received tainted arguments
- TaintPath: one source -> propagation -> sink flow
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from cppreview.models.base import CodeLocation, Severity


class TaintType(Enum):
    """Where a tainted value came from."""

    USER_INPUT = "user_input"
    NETWORK_DATA = "network_data"
    FILE_DATA = "file_data"
    ENVIRONMENT = "environment"
    DATABASE = "database"
    UNKNOWN = "unknown"


class RiskType(Enum):
    """Risk category of a sink."""

    SQL_INJECTION = "sql_injection"
    COMMAND_INJECTION = "command_injection"
    PATH_TRAVERSAL = "path_traversal"
    GENERIC = "generic"

    @property
    def label(self) -> str:
        """Human-readable category name used in issue text."""
        return {
            RiskType.SQL_INJECTION: "SQL injection",
            RiskType.COMMAND_INJECTION: "command injection",
            RiskType.PATH_TRAVERSAL: "path traversal",
            RiskType.GENERIC: "tainted data",
        }[self]


@dataclass(frozen=True)
class TaintSource:
    """
    Point where a value became untrusted.

    ``variable_name`` is the name currently holding the value; propagation
    copies the record under the new name (see ``renamed``).
    """

    variable_name: str
    taint_type: TaintType
    location: CodeLocation
    description: str

    def renamed(self, variable_name: str) -> "TaintSource":
        """Copy of this provenance record carried by another variable."""
        return replace(self, variable_name=variable_name)

    @property
    def line(self) -> int:
        return self.location.line

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "variable_name": self.variable_name,
            "taint_type": self.taint_type.value,
            "location": self.location.to_dict(),
            "description": self.description,
        }


@dataclass(frozen=True)
class TaintSink:
    """Sensitive call reached by tainted arguments."""

    function_name: str
    tainted_args: tuple[int, ...]
    location: CodeLocation
    risk_type: RiskType
    severity: Severity

    @property
    def line(self) -> int:
        return self.location.line

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "function_name": self.function_name,
            "tainted_args": list(self.tainted_args),
            "location": self.location.to_dict(),
            "risk_type": self.risk_type.value,
            "severity": self.severity.value,
        }


@dataclass(frozen=True)
class TaintPath:
    """One reconstructed flow, produced per (source, sink) match."""

    source: TaintSource
    sink: TaintSink
    propagation: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "source": self.source.to_dict(),
            "propagation": list(self.propagation),
            "sink": self.sink.to_dict(),
        }
