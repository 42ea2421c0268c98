"""Heap allocations that are never released."""

from __future__ import annotations

from dataclasses import dataclass

from cppreview.ast.nodes import NodeKind, SyntaxNode, SyntaxTree, referenced_name
from cppreview.models.base import Severity
from cppreview.models.issue import IssueSink
from cppreview.rules.base import Rule
from cppreview.rules.memory import allocation_kind, matching_release, released_variable


@dataclass
class _Allocation:
    decl: SyntaxNode
    kind: str
    released: bool = False
    returned: bool = False


class MemoryLeakRule(Rule):
    """
    Flags locals initialized by a heap allocation that are neither released
    nor returned anywhere in the function.

    This is a single pass over each function body, not a liveness analysis:
    a release on any branch counts as a release on every path.
    """

    rule_id = "MEMORY-LEAK-001"
    name = "Memory Leak"
    description = "Detects potential memory leaks from new without delete"

    def check(self, tree: SyntaxTree, sink: IssueSink) -> None:
        for function in tree.functions():
            self._check_function(tree, sink, function)

    def _check_function(self, tree: SyntaxTree, sink: IssueSink, function: SyntaxNode) -> None:
        allocations: list[_Allocation] = []
        # Releases and returns are attributed to the latest declaration of a name.
        current: dict[str, _Allocation] = {}

        for node in function.walk():
            if node.kind == NodeKind.VAR_DECL and node.name:
                kind = allocation_kind(node.child("value"))
                if kind is not None and not _is_owning(node):
                    allocation = _Allocation(node, kind)
                    allocations.append(allocation)
                    current[node.name] = allocation
                continue

            if node.kind == NodeKind.RETURN:
                name = referenced_name(node.child("argument"))
                if name in current:
                    current[name].returned = True
                continue

            name = released_variable(node)
            if name in current:
                current[name].released = True

        for allocation in allocations:
            if allocation.released or allocation.returned:
                continue
            var_name = allocation.decl.name
            how = allocation.kind
            release = matching_release(how)
            self.report(
                tree, sink, allocation.decl, Severity.HIGH,
                f"Potential memory leak: Variable '{var_name}' is allocated with '{how}' but never "
                f"released with '{release}'. This will cause memory leak when the variable goes out of scope.",
                f"Use '{release}' to free the memory, or better yet, use smart pointers "
                "(std::unique_ptr or std::shared_ptr) for automatic memory management. "
                f"Example: auto {var_name} = std::make_unique<T>();",
            )


def _is_owning(decl: SyntaxNode) -> bool:
    type_info = decl.type
    if type_info is None:
        return False
    return type_info.is_owning_pointer or type_info.spelled_owning()
