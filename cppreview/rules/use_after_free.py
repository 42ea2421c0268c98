"""Use of heap memory after it has been released."""

from __future__ import annotations

from typing import NamedTuple, Optional

from cppreview.ast.nodes import NodeKind, SyntaxNode, SyntaxTree, referenced_name, strip_parens_casts
from cppreview.models.base import Severity
from cppreview.models.issue import IssueSink
from cppreview.rules.base import Rule
from cppreview.rules.memory import release_spelling, released_variable


class _Release(NamedTuple):
    line: int
    spelling: str

    @property
    def verb(self) -> str:
        return "freed" if self.spelling == "free" else "deleted"


class UseAfterFreeRule(Rule):
    """
    Flags uses of a pointer after ``delete``/``free`` within one function.

    A use is a dereference, an arrow access, a subscript, or passing the
    pointer to a call. Releasing it a second time is reported as a double
    free. Assigning the pointer a new value ends tracking.
    """

    rule_id = "USE-AFTER-FREE-001"
    name = "Use After Free"
    description = "Detects use of pointers after they have been deleted"

    def check(self, tree: SyntaxTree, sink: IssueSink) -> None:
        for function in tree.functions():
            body = function.child("body")
            if body is not None:
                self._check_function(tree, sink, body)

    def _check_function(self, tree: SyntaxTree, sink: IssueSink, body: SyntaxNode) -> None:
        released: dict[str, _Release] = {}

        for node, entering in body.traverse():
            if not entering:
                # Reassignment takes effect once the right-hand side is evaluated.
                reassigned = _reassigned_variable(node)
                if reassigned is not None:
                    released.pop(reassigned, None)
                continue

            name = released_variable(node)
            if name is not None:
                previous = released.get(name)
                if previous is not None:
                    self._report_double_free(tree, sink, node, name, previous)
                else:
                    released[name] = _Release(node.line, release_spelling(node))
                continue

            if node.kind == NodeKind.CALL:
                for arg in node.arguments:
                    arg_name = referenced_name(arg)
                    if arg_name in released:
                        self._report_argument_use(tree, sink, arg, arg_name, released[arg_name])
                continue

            base = _dereferenced_pointer(node)
            if base is not None and base in released:
                release = released[base]
                self.report(
                    tree, sink, node, Severity.CRITICAL,
                    f"Use-after-free detected: Dereferencing pointer '{base}' after it has been "
                    f"{release.verb} at line {release.line}.",
                    f"Pointer was {release.verb} at line {release.line}. "
                    "Do not use pointers after deletion:\n"
                    "  - Set pointer to nullptr after delete: delete ptr; ptr = nullptr;\n"
                    "  - Use smart pointers that automatically manage lifetime\n"
                    "  - Add a check: if (ptr != nullptr) { use ptr }",
                )

    def _report_argument_use(self, tree: SyntaxTree, sink: IssueSink, arg: SyntaxNode, name: str,
                             release: _Release) -> None:
        self.report(
            tree, sink, arg, Severity.CRITICAL,
            f"Use-after-free: Pointer '{name}' is used after being {release.verb} at line {release.line}.",
            "Do not use a pointer after deleting it:\n"
            "  - Set pointer to nullptr after delete\n"
            "  - Use smart pointers (std::unique_ptr, std::shared_ptr)\n"
            "  - Restructure code to avoid using deleted pointers",
            snippet=tree.snippet(arg.parent or arg),
        )

    def _report_double_free(self, tree: SyntaxTree, sink: IssueSink, node: SyntaxNode, name: str,
                            previous: _Release) -> None:
        self.report(
            tree, sink, node, Severity.CRITICAL,
            f"Double free: Pointer '{name}' is released again after being {previous.verb} "
            f"at line {previous.line}.",
            "Release each allocation exactly once:\n"
            "  - Set pointer to nullptr after delete/free\n"
            "  - Use smart pointers that automatically manage lifetime",
        )


def _dereferenced_pointer(node: SyntaxNode) -> Optional[str]:
    """Variable dereferenced by ``*p``, ``p->m`` or ``p[i]``."""
    if node.kind == NodeKind.UNARY and node.operator == "*":
        return referenced_name(node.child("argument"))
    if node.kind == NodeKind.MEMBER and node.operator == "->":
        return referenced_name(node.child("argument"))
    if node.kind == NodeKind.SUBSCRIPT:
        return referenced_name(node.child("argument"))
    return None


def _reassigned_variable(node: SyntaxNode) -> Optional[str]:
    if node.kind == NodeKind.BINARY and node.operator == "=":
        target = strip_parens_casts(node.child("left"))
        if target is not None and target.kind == NodeKind.DECL_REF:
            return target.name
    if node.kind == NodeKind.VAR_DECL:
        return node.name
    return None
