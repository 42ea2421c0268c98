"""Calls to C library functions without bounds checking."""

from __future__ import annotations

from typing import NamedTuple

from cppreview.ast.nodes import NodeKind, SyntaxTree
from cppreview.models.base import Severity
from cppreview.models.issue import IssueSink
from cppreview.rules.base import Rule


class UnsafeFunction(NamedTuple):
    safe_alternative: str
    reason: str


UNSAFE_FUNCTIONS: dict[str, UnsafeFunction] = {
    "strcpy": UnsafeFunction("std::string, strncpy, or strcpy_s",
                             "No bounds checking - can cause buffer overflow"),
    "strcat": UnsafeFunction("std::string, strncat, or strcat_s",
                             "No bounds checking - can cause buffer overflow"),
    "sprintf": UnsafeFunction("snprintf or std::stringstream",
                              "No bounds checking - can cause buffer overflow"),
    "gets": UnsafeFunction("std::getline, fgets, or std::cin",
                           "No bounds checking - extremely dangerous, removed in C11"),
    "scanf": UnsafeFunction("std::cin with width specifiers",
                            "Can cause buffer overflow without width specifiers"),
    "vsprintf": UnsafeFunction("vsnprintf", "No bounds checking - can cause buffer overflow"),
    "strncpy": UnsafeFunction("std::string or ensure null-termination",
                              "May not null-terminate the result"),
    "strncat": UnsafeFunction("std::string", "Complex bounds checking required"),
}


class UnsafeCFunctionsRule(Rule):
    """Flags direct calls to the functions in UNSAFE_FUNCTIONS."""

    rule_id = "UNSAFE-C-FUNC-001"
    name = "Unsafe C Function"
    description = "Detects use of unsafe C functions like strcpy, sprintf, gets"

    def check(self, tree: SyntaxTree, sink: IssueSink) -> None:
        for node in tree.walk():
            if node.kind != NodeKind.CALL:
                continue
            callee = node.child("function")
            # Method calls that happen to share a name are not the C functions.
            if callee is not None and callee.kind != NodeKind.DECL_REF:
                continue
            func_name = node.callee_name
            info = UNSAFE_FUNCTIONS.get(func_name or "")
            if info is None:
                continue
            self.report(
                tree, sink, node, Severity.CRITICAL,
                f"Use of unsafe C function '{func_name}': {info.reason}",
                f"Replace '{func_name}' with {info.safe_alternative}. In modern C++, prefer using "
                "std::string for string operations to avoid manual memory management",
            )
