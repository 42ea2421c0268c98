"""
Taint propagation analysis.

Tracks untrusted data inside each function body: a value becomes tainted
when it is assigned the result of a source call, the taint follows plain
assignments from variable to variable, a sanitizer call clears it, and a
tainted variable passed to a sink call produces a TaintPath and an Issue.

The analysis is a single pre-order pass per function. It is flow- and
path-insensitive within the function and does not cross function
boundaries: every function gets a fresh TaintAnalyzer.
"""

from __future__ import annotations

from typing import NamedTuple, Optional

from cppreview.analysis.taint_db import (
    SANITIZERS,
    SINKS,
    SOURCES,
    Category,
    ClassificationTable,
    SinkCategory,
    SourceCategory,
)
from cppreview.ast.nodes import NodeKind, SyntaxNode, SyntaxTree, strip_parens_casts
from cppreview.models.issue import Issue, IssueSink
from cppreview.models.taint_flow import RiskType, TaintPath, TaintSink, TaintSource
from cppreview.rules.base import Rule
from cppreview.utils.logging import get_logger

logger = get_logger("taint", parent="analysis")

DEFAULT_MAX_DEPTH = 200

_FIX_EXAMPLES = {
    RiskType.SQL_INJECTION: (
        "// Use a parameterized query\n"
        'sqlite3_prepare_v2(db, "SELECT * FROM users WHERE id = ?", -1, &stmt, nullptr);\n'
        "sqlite3_bind_text(stmt, 1, {var}, -1, SQLITE_TRANSIENT);\n"
    ),
    RiskType.COMMAND_INJECTION: (
        "// Validate the input against an allow-list\n"
        "if (!isValidCommand({var})) {{\n"
        '    throw std::invalid_argument("Invalid command");\n'
        "}}\n"
    ),
    RiskType.PATH_TRAVERSAL: (
        "// Canonicalize the path and check it stays inside the allowed directory\n"
        "std::filesystem::path safe_path = std::filesystem::canonical({var});\n"
        'if (safe_path.string().rfind("/safe/directory/", 0) != 0) {{\n'
        '    throw std::invalid_argument("Invalid path");\n'
        "}}\n"
    ),
}


class _Taint(NamedTuple):
    """Taint state of one variable: provenance plus the names it passed through."""

    source: TaintSource
    trail: tuple[str, ...]
    origin: str


def resolve_variable_name(expr: Optional[SyntaxNode]) -> Optional[str]:
    """
    Name whose taint state an expression carries.

    A variable reference is its own name, a member access is the member
    name, a subscript or dereference is its base (recursively). Calls and
    anything else resolve to None, so return values are never tracked.
    """
    while True:
        expr = strip_parens_casts(expr)
        if expr is None:
            return None
        if expr.kind == NodeKind.DECL_REF:
            return expr.name
        if expr.kind == NodeKind.MEMBER:
            return expr.name
        if expr.kind == NodeKind.SUBSCRIPT or (expr.kind == NodeKind.UNARY and expr.operator == "*"):
            expr = expr.child("argument")
            continue
        return None


class TaintAnalyzer:
    """
    Taint tracker for one function.

    Taint state lives in a single mapping from variable name to its
    provenance, so a name is tainted exactly when it has a source record.
    """

    def __init__(
        self,
        tree: SyntaxTree,
        sink: IssueSink,
        rule_id: str = "TAINT-ANALYSIS-001",
        max_depth: int = DEFAULT_MAX_DEPTH,
        sources: ClassificationTable[SourceCategory] = SOURCES,
        sinks: ClassificationTable[SinkCategory] = SINKS,
        sanitizers: ClassificationTable[Category] = SANITIZERS,
    ) -> None:
        self.tree = tree
        self.sink = sink
        self.rule_id = rule_id
        self.max_depth = max_depth
        self.sources = sources
        self.sinks = sinks
        self.sanitizers = sanitizers
        self.paths: list[TaintPath] = []
        self.truncated_subtrees = 0
        self._state: dict[str, _Taint] = {}

    @property
    def tainted(self) -> frozenset[str]:
        return frozenset(self._state)

    def source_of(self, name: str) -> Optional[TaintSource]:
        taint = self._state.get(name)
        return taint.source if taint is not None else None

    def analyze_function(self, function: SyntaxNode) -> list[TaintPath]:
        """
        Run the analysis over one function body.

        Returns:
            Taint paths found in this function
        """
        self._state.clear()
        body = function.child("body")
        if body is None:
            return []

        found_before = len(self.paths)
        stack: list[tuple[SyntaxNode, int]] = [(body, 0)]
        while stack:
            node, depth = stack.pop()
            if depth > self.max_depth:
                self.truncated_subtrees += 1
                if self.truncated_subtrees == 1:
                    logger.warning(
                        "Taint analysis depth limit reached, skipping subtree",
                        function=function.name,
                        line=node.line,
                        max_depth=self.max_depth,
                    )
                continue
            self._visit(node)
            stack.extend((child, depth + 1) for child in reversed(node.children))

        return self.paths[found_before:]

    def _visit(self, node: SyntaxNode) -> None:
        if node.kind == NodeKind.BINARY and node.operator == "=":
            target = resolve_variable_name(node.child("left"))
            if target:
                self._assign(target, node.child("right"))
        elif node.kind == NodeKind.VAR_DECL and node.name and node.child("value") is not None:
            self._assign(node.name, node.child("value"))
        elif node.kind == NodeKind.CALL:
            self._handle_call(node)

    def _assign(self, target: str, value: Optional[SyntaxNode]) -> None:
        value = strip_parens_casts(value)
        if value is None:
            return

        origin_name = resolve_variable_name(value)
        if origin_name is not None and origin_name in self._state:
            taint = self._state[origin_name]
            self._state[target] = _Taint(taint.source.renamed(target), taint.trail + (target,), taint.origin)
            return

        if value.kind == NodeKind.CALL:
            # A sanitizer's result is trusted even when its name also reads as a source.
            if self.sanitizers.classify(value.callee_name) is not None:
                self._state.pop(target, None)
                return
            category = self.sources.classify(value.callee_name)
            if category is not None:
                func_name = value.callee_name or ""
                source = TaintSource(
                    variable_name=target,
                    taint_type=category.taint_type,
                    location=value.location,
                    description=f"Tainted data from {func_name}",
                )
                self._state[target] = _Taint(source, (target,), func_name)

    def _handle_call(self, call: SyntaxNode) -> None:
        func_name = call.callee_name
        if not func_name:
            return

        if self.sanitizers.classify(func_name) is not None:
            for arg in call.arguments:
                name = resolve_variable_name(arg)
                if name is not None:
                    self._state.pop(name, None)
            return

        category = self.sinks.classify(func_name)
        if category is None:
            return
        for index, arg in enumerate(call.arguments):
            name = resolve_variable_name(arg)
            if name is None or name not in self._state:
                continue
            taint = self._state[name]
            sink = TaintSink(
                function_name=func_name,
                tainted_args=(index,),
                location=call.location,
                risk_type=category.risk_type,
                severity=category.severity,
            )
            path = TaintPath(taint.source, sink, taint.trail)
            self.paths.append(path)
            self.sink.record(self._build_issue(call, name, taint, sink))

    def _build_issue(self, call: SyntaxNode, var_name: str, taint: _Taint, sink: TaintSink) -> Issue:
        source_line = taint.source.line
        description = (
            f"Potential {sink.risk_type.label} vulnerability: untrusted data in '{var_name}' "
            f"(from {taint.origin} at line {source_line}) reaches sensitive function '{sink.function_name}'"
        )
        suggestion = (
            "Validate and sanitize the input data:\n"
            f"1. Validate '{var_name}' immediately after line {source_line}\n"
            "2. Use parameterized queries or prepared statements\n"
            "3. Apply the appropriate escaping function\n"
            "4. Enforce allow-list validation\n"
        )
        example = _FIX_EXAMPLES.get(sink.risk_type)
        if example is not None:
            suggestion += "\nExample fix:\n" + example.format(var=var_name)
        return Issue(
            location=sink.location,
            severity=sink.severity,
            rule_id=self.rule_id,
            description=description,
            suggestion=suggestion,
            code_snippet=self.tree.snippet(call),
        )


class TaintAnalysisRule(Rule):
    """
    Rule wrapper running a fresh TaintAnalyzer over every function.

    With ``collect_paths`` enabled, the taint paths of the last ``check``
    are kept in ``paths`` for callers that want the full flows.
    """

    rule_id = "TAINT-ANALYSIS-001"
    name = "Data Flow Taint Analysis"
    description = "Tracks untrusted data from input sources to sensitive sinks"

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH, collect_paths: bool = False) -> None:
        self.max_depth = max_depth
        self.collect_paths = collect_paths
        self.paths: list[TaintPath] = []

    def check(self, tree: SyntaxTree, sink: IssueSink) -> None:
        self.paths = []
        for function in tree.functions():
            analyzer = TaintAnalyzer(tree, sink, rule_id=self.rule_id, max_depth=self.max_depth)
            found = analyzer.analyze_function(function)
            if self.collect_paths:
                self.paths.extend(found)
