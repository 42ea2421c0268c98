"""
Base class for analysis rules.

A rule is one independent check: given a syntax tree and an issue sink, it
walks the tree and records an Issue for every node shape it recognizes as a
defect. Shapes a rule does not understand are skipped, never raised on.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from cppreview.ast.nodes import SyntaxNode, SyntaxTree
from cppreview.models.base import Severity
from cppreview.models.issue import Issue, IssueSink


@dataclass(frozen=True)
class RuleInfo:
    """One row of the rule identifier table."""

    rule_id: str
    name: str
    description: str

    def to_dict(self) -> dict[str, str]:
        return {"rule_id": self.rule_id, "name": self.name, "description": self.description}


class Rule(ABC):
    """
    Abstract base class for rules.

    Subclasses set ``rule_id``, ``name`` and ``description`` and implement
    ``check``. Any state a rule needs lives in locals of ``check`` (or in
    helper objects it creates), so running a rule twice over the same tree
    yields the same issues.
    """

    rule_id: str = ""
    name: str = ""
    description: str = ""

    @abstractmethod
    def check(self, tree: SyntaxTree, sink: IssueSink) -> None:
        """
        Analyze one translation unit.

        Args:
            tree: Syntax tree of the unit
            sink: Collector receiving the issues found
        """
        ...

    def info(self) -> RuleInfo:
        return RuleInfo(self.rule_id, self.name, self.description)

    def report(
        self,
        tree: SyntaxTree,
        sink: IssueSink,
        node: SyntaxNode,
        severity: Severity,
        description: str,
        suggestion: Optional[str] = None,
        snippet: Optional[str] = None,
    ) -> Issue:
        """Build a complete Issue at ``node`` and record it."""
        issue = Issue(
            location=node.location,
            severity=severity,
            rule_id=self.rule_id,
            description=description,
            suggestion=suggestion,
            code_snippet=snippet if snippet is not None else tree.snippet(node),
        )
        sink.record(issue)
        return issue

    def __repr__(self) -> str:
        return f"{type(self).__name__}(rule_id={self.rule_id!r})"
