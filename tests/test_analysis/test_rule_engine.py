"""Tests for the rule engine."""

from cppreview.analysis.rule_engine import (
    KNOWN_RULE_IDS,
    RuleEngine,
    create_default_engine,
    default_rules,
)
from cppreview.core.config import AnalysisConfig
from cppreview.models.base import Severity
from cppreview.models.issue import IssueSink
from cppreview.rules import Rule


class ExplodingRule(Rule):
    rule_id = "EXPLODE-001"
    name = "Exploding"
    description = "Always raises"

    def check(self, tree, sink):
        raise RuntimeError("boom")


class MarkerRule(Rule):
    """Records one issue at the translation unit root."""

    description = "Records a marker issue"

    def __init__(self, rule_id):
        self.rule_id = rule_id
        self.name = rule_id

    def check(self, tree, sink):
        self.report(tree, sink, tree.root, Severity.LOW, f"marker from {self.rule_id}")


def defective_unit(b):
    """A function with several defects for the full rule set."""
    return b.unit(b.function("main", [
        b.var("p", "int*", b.null(), line=2),
        b.expr(b.assign(b.deref(b.ref("p")), b.num(1)), line=3),
        b.var("buf", "char", array_size=8, line=4),
        b.expr(b.call("strcpy", b.ref("buf"), b.string("hello")), line=5),
        b.var("cmd", "char*", b.call("getenv", b.string("CMD")), line=6),
        b.expr(b.call("system", b.ref("cmd")), line=7),
    ], return_type="int", line=1))


class TestRuleEngine:
    """Test registration and execution."""

    def test_registration_order_is_execution_order(self, b):
        engine = RuleEngine([MarkerRule("B-001"), MarkerRule("A-001")])
        sink = IssueSink()
        outcomes = engine.run_all(b.unit(), sink)
        assert [o.rule_id for o in outcomes] == ["B-001", "A-001"]
        assert [i.rule_id for i in sink.all()] == ["B-001", "A-001"]

    def test_failing_rule_does_not_stop_others(self, b):
        engine = RuleEngine([ExplodingRule(), MarkerRule("AFTER-001")])
        sink = IssueSink()
        outcomes = engine.run_all(b.unit(), sink)
        assert not outcomes[0].succeeded
        assert "RuntimeError: boom" in outcomes[0].error
        assert outcomes[1].succeeded
        assert outcomes[1].issues_reported == 1
        assert len(sink) == 1

    def test_rule_table(self):
        engine = RuleEngine([MarkerRule("X-001")])
        table = engine.rule_table()
        assert table[0].rule_id == "X-001"
        assert table[0].to_dict()["description"] == "Records a marker issue"
        assert engine.count() == len(engine) == 1
        assert engine.get("X-001") is not None
        assert engine.get("missing") is None

    def test_issues_from_each_rule_are_contiguous(self, b):
        engine = create_default_engine()
        sink = IssueSink()
        engine.run_all(defective_unit(b), sink)
        seen: list[str] = []
        for issue in sink.all():
            if not seen or seen[-1] != issue.rule_id:
                assert issue.rule_id not in seen
                seen.append(issue.rule_id)
        assert seen == [rule_id for rule_id in KNOWN_RULE_IDS if rule_id in seen]


class TestDefaultEngine:
    """Test the built-in rule set."""

    def test_known_rule_ids(self):
        assert len(KNOWN_RULE_IDS) == 11
        assert len(set(KNOWN_RULE_IDS)) == 11
        assert KNOWN_RULE_IDS[-1] == "TAINT-ANALYSIS-001"
        assert [rule.rule_id for rule in default_rules()] == list(KNOWN_RULE_IDS)

    def test_finds_expected_defects(self, b):
        sink = IssueSink()
        outcomes = create_default_engine().run_all(defective_unit(b), sink)
        assert all(o.succeeded for o in outcomes)
        found = {issue.rule_id for issue in sink.all()}
        assert {"NULL-PTR-001", "UNSAFE-C-FUNC-001", "TAINT-ANALYSIS-001"} <= found

    def test_running_twice_gives_the_same_issues(self, b):
        tree = defective_unit(b)
        engine = create_default_engine()
        first, second = IssueSink(), IssueSink()
        engine.run_all(tree, first)
        engine.run_all(tree, second)
        assert first.all() == second.all()

    def test_disabled_rules(self, b):
        config = AnalysisConfig(disabled_rules=["NULL-PTR-001", "TAINT-ANALYSIS-001"])
        engine = create_default_engine(config)
        assert engine.count() == 9
        sink = IssueSink()
        engine.run_all(defective_unit(b), sink)
        found = {issue.rule_id for issue in sink.all()}
        assert "NULL-PTR-001" not in found
        assert "TAINT-ANALYSIS-001" not in found

    def test_thresholds_from_config(self):
        config = AnalysisConfig(small_array_threshold=3, expensive_field_threshold=7, max_taint_depth=50)
        engine = create_default_engine(config)
        assert engine.get("BUFFER-OVERFLOW-001").small_array_threshold == 3
        assert engine.get("LOOP-COPY-001").expensive_field_threshold == 7
        assert engine.get("TAINT-ANALYSIS-001").max_depth == 50

    def test_collect_taint_paths(self, b):
        engine = create_default_engine(collect_taint_paths=True)
        engine.run_all(defective_unit(b), IssueSink())
        assert len(engine.get("TAINT-ANALYSIS-001").paths) == 1
