"""Syntax tree model consumed by the rules."""

from cppreview.ast.builder import TreeBuilder
from cppreview.ast.nodes import (
    LOOP_KINDS,
    NodeKind,
    SyntaxNode,
    SyntaxTree,
    is_null_literal,
    referenced_name,
    strip_parens_casts,
    try_evaluate_int,
    unqualified,
)
from cppreview.ast.types import RecordInfo, TypeInfo, TypeResolver, resolve_type

__all__ = [
    "LOOP_KINDS",
    "NodeKind",
    "RecordInfo",
    "SyntaxNode",
    "SyntaxTree",
    "TreeBuilder",
    "TypeInfo",
    "TypeResolver",
    "is_null_literal",
    "referenced_name",
    "resolve_type",
    "strip_parens_casts",
    "try_evaluate_int",
    "unqualified",
]
