"""Rule engine and taint analysis."""

from cppreview.analysis.rule_engine import (
    KNOWN_RULE_IDS,
    RuleEngine,
    RuleOutcome,
    create_default_engine,
    default_rules,
)
from cppreview.analysis.taint_analysis import TaintAnalysisRule, TaintAnalyzer

__all__ = [
    "KNOWN_RULE_IDS",
    "RuleEngine",
    "RuleOutcome",
    "TaintAnalysisRule",
    "TaintAnalyzer",
    "create_default_engine",
    "default_rules",
]
