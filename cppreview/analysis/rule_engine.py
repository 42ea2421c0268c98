"""
Rule engine for cppreview.

The engine owns an ordered list of rules and runs each of them over a
translation unit. Registration order is execution order, which keeps report
ordering reproducible. A rule that raises is logged with its identifier and
recorded as a failed RuleOutcome; the remaining rules still run.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Iterator, Optional

from cppreview.analysis.taint_analysis import TaintAnalysisRule
from cppreview.ast.nodes import SyntaxTree
from cppreview.models.issue import IssueSink
from cppreview.rules import (
    AssignmentInConditionRule,
    BufferOverflowRule,
    IntegerOverflowRule,
    LoopCopyRule,
    MemoryLeakRule,
    NullPointerRule,
    Rule,
    RuleInfo,
    SmartPointerRule,
    UninitializedVarRule,
    UnsafeCFunctionsRule,
    UseAfterFreeRule,
)
from cppreview.utils.logging import get_logger

if TYPE_CHECKING:
    from cppreview.core.config import AnalysisConfig

logger = get_logger("rule_engine", parent="analysis")


@dataclass(frozen=True)
class RuleOutcome:
    """Result of running one rule over one translation unit."""

    rule_id: str
    succeeded: bool
    issues_reported: int
    error: Optional[str] = None
    duration_ms: float = 0.0


class RuleEngine:
    """Ordered collection of rules run over each translation unit."""

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: list[Rule] = []
        for rule in rules:
            self.register(rule)

    def register(self, rule: Rule) -> None:
        """Append a rule; it runs after every rule registered before it."""
        if any(existing.rule_id == rule.rule_id for existing in self._rules):
            logger.warning("Rule registered twice", rule_id=rule.rule_id)
        self._rules.append(rule)
        logger.debug("Registered rule", rule_id=rule.rule_id)

    def run_all(self, tree: SyntaxTree, sink: IssueSink) -> list[RuleOutcome]:
        """
        Run every registered rule over ``tree``.

        Args:
            tree: Syntax tree of one translation unit
            sink: Collector shared by all rules

        Returns:
            One outcome per rule, in execution order
        """
        outcomes: list[RuleOutcome] = []
        for rule in self._rules:
            before = len(sink)
            start = time.perf_counter()
            try:
                rule.check(tree, sink)
            except Exception as e:
                duration_ms = (time.perf_counter() - start) * 1000
                logger.error(
                    "Rule failed",
                    exc=e,
                    rule_id=rule.rule_id,
                    file=str(tree.file_path),
                )
                outcomes.append(RuleOutcome(
                    rule_id=rule.rule_id,
                    succeeded=False,
                    issues_reported=len(sink) - before,
                    error=f"{type(e).__name__}: {e}",
                    duration_ms=duration_ms,
                ))
                continue

            duration_ms = (time.perf_counter() - start) * 1000
            outcomes.append(RuleOutcome(
                rule_id=rule.rule_id,
                succeeded=True,
                issues_reported=len(sink) - before,
                duration_ms=duration_ms,
            ))
        return outcomes

    def count(self) -> int:
        """Number of active rules."""
        return len(self._rules)

    def rule_table(self) -> list[RuleInfo]:
        """Identifier table (id, name, description) in execution order."""
        return [rule.info() for rule in self._rules]

    def get(self, rule_id: str) -> Optional[Rule]:
        for rule in self._rules:
            if rule.rule_id == rule_id:
                return rule
        return None

    @property
    def rules(self) -> list[Rule]:
        return list(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(list(self._rules))

    def __len__(self) -> int:
        return len(self._rules)


def default_rules(
    small_array_threshold: int = 10,
    expensive_field_threshold: int = 2,
    max_taint_depth: int = 200,
    collect_taint_paths: bool = False,
) -> list[Rule]:
    """All built-in rules in their canonical order."""
    return [
        NullPointerRule(),
        UninitializedVarRule(),
        AssignmentInConditionRule(),
        UnsafeCFunctionsRule(),
        MemoryLeakRule(),
        SmartPointerRule(),
        LoopCopyRule(expensive_field_threshold=expensive_field_threshold),
        IntegerOverflowRule(),
        BufferOverflowRule(small_array_threshold=small_array_threshold),
        UseAfterFreeRule(),
        TaintAnalysisRule(max_depth=max_taint_depth, collect_paths=collect_taint_paths),
    ]


KNOWN_RULE_IDS: tuple[str, ...] = tuple(rule.rule_id for rule in default_rules())


def create_default_engine(
    config: Optional["AnalysisConfig"] = None,
    collect_taint_paths: bool = False,
) -> RuleEngine:
    """
    Build an engine with every built-in rule that is not disabled.

    Args:
        config: Analysis settings (thresholds, disabled rules)
        collect_taint_paths: Keep taint paths on the taint rule

    Returns:
        Configured RuleEngine
    """
    if config is None:
        rules = default_rules(collect_taint_paths=collect_taint_paths)
        disabled: set[str] = set()
    else:
        rules = default_rules(
            small_array_threshold=config.small_array_threshold,
            expensive_field_threshold=config.expensive_field_threshold,
            max_taint_depth=config.max_taint_depth,
            collect_taint_paths=collect_taint_paths,
        )
        disabled = set(config.disabled_rules)

    engine = RuleEngine()
    for rule in rules:
        if rule.rule_id in disabled:
            logger.debug("Rule disabled by configuration", rule_id=rule.rule_id)
            continue
        engine.register(rule)
    return engine
