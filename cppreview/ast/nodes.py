"""
Syntax tree consumed by the analysis core.

A SyntaxTree owns its nodes; each SyntaxNode keeps its children in source
order, exposes the semantically named ones through ``fields`` (mirroring
tree-sitter field names) and holds a non-owning ``parent`` back-link. Rules
only read the tree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, Mapping, Optional, Union

from cppreview.ast.types import TypeInfo
from cppreview.models.base import CodeLocation


class NodeKind(Enum):
    """Kinds of syntax tree nodes."""

    TRANSLATION_UNIT = "translation_unit"
    FUNCTION = "function"
    RECORD = "record"
    FIELD = "field"
    VAR_DECL = "var_decl"
    PARAM = "param"
    COMPOUND = "compound"
    EXPR_STMT = "expr_stmt"
    IF = "if"
    WHILE = "while"
    DO = "do"
    FOR = "for"
    RANGE_FOR = "range_for"
    RETURN = "return"
    CALL = "call"
    BINARY = "binary"
    UNARY = "unary"
    MEMBER = "member"
    SUBSCRIPT = "subscript"
    DECL_REF = "decl_ref"
    INT_LITERAL = "int_literal"
    NULL_LITERAL = "null_literal"
    STRING_LITERAL = "string_literal"
    NEW = "new"
    DELETE = "delete"
    CAST = "cast"
    PAREN = "paren"
    UNKNOWN = "unknown"


LOOP_KINDS = frozenset({NodeKind.WHILE, NodeKind.DO, NodeKind.FOR, NodeKind.RANGE_FOR})

ASSIGNMENT_OPERATORS = frozenset({
    "=", "+=", "-=", "*=", "/=", "%=", "<<=", ">>=", "&=", "|=", "^=",
})


@dataclass(eq=False)
class SyntaxNode:
    """
    One node of the syntax tree.

    Nodes compare by identity, so they can be used as dictionary keys.
    """

    kind: NodeKind
    location: CodeLocation
    name: Optional[str] = None
    type: Optional[TypeInfo] = None
    operator: Optional[str] = None
    value: Union[int, str, None] = None
    text: str = ""
    flags: frozenset[str] = frozenset()
    children: list["SyntaxNode"] = field(default_factory=list, repr=False)
    fields: dict[str, "SyntaxNode"] = field(default_factory=dict, repr=False)
    parent: Optional["SyntaxNode"] = field(default=None, repr=False)

    def add_child(self, node: Optional["SyntaxNode"], field_name: Optional[str] = None) -> None:
        """Append ``node`` (ignored when None), optionally under a field name."""
        if node is None:
            return
        node.parent = self
        self.children.append(node)
        if field_name is not None:
            self.fields[field_name] = node

    def get_child_by_field_name(self, field_name: str) -> Optional["SyntaxNode"]:
        return self.fields.get(field_name)

    child = get_child_by_field_name

    def has_flag(self, flag: str) -> bool:
        return flag in self.flags

    @property
    def line(self) -> int:
        return self.location.line

    @property
    def arguments(self) -> list["SyntaxNode"]:
        """Positional arguments of a call or new expression."""
        callee = self.fields.get("function")
        return [c for c in self.children if c is not callee]

    @property
    def callee_name(self) -> Optional[str]:
        """Call target without namespace qualification, None when indirect."""
        if self.kind != NodeKind.CALL or not self.name:
            return None
        return unqualified(self.name)

    def walk(self) -> Iterator["SyntaxNode"]:
        """Depth-first pre-order traversal starting at this node."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def traverse(self) -> Iterator[tuple["SyntaxNode", bool]]:
        """
        Depth-first traversal reporting both visits of each node.

        Yields ``(node, True)`` before a node's children and
        ``(node, False)`` after them, in source order.
        """
        stack: list[tuple[SyntaxNode, bool]] = [(self, True)]
        while stack:
            node, entering = stack.pop()
            yield node, entering
            if entering:
                stack.append((node, False))
                stack.extend((child, True) for child in reversed(node.children))

    def ancestors(self) -> Iterator["SyntaxNode"]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def enclosing(self, *kinds: NodeKind) -> Optional["SyntaxNode"]:
        """Nearest ancestor of one of the given kinds."""
        for node in self.ancestors():
            if node.kind in kinds:
                return node
        return None


class SyntaxTree:
    """One parsed translation unit."""

    def __init__(self, root: SyntaxNode, file_path: Union[str, Path], source: str = "") -> None:
        self.root = root
        self.file_path = Path(file_path)
        self.source = source
        self._lines = source.splitlines()

    def walk(self) -> Iterator[SyntaxNode]:
        return self.root.walk()

    def functions(self) -> Iterator[SyntaxNode]:
        """Function definitions, in source order."""
        for node in self.walk():
            if node.kind == NodeKind.FUNCTION and node.child("body") is not None:
                yield node

    def line_text(self, line: int) -> Optional[str]:
        if 1 <= line <= len(self._lines):
            return self._lines[line - 1].strip()
        return None

    def snippet(self, node: SyntaxNode) -> Optional[str]:
        """Source text for a node: its own text, else its line."""
        if node.text:
            return node.text
        return self.line_text(node.line)

    def __len__(self) -> int:
        return sum(1 for _ in self.walk())


def unqualified(name: str) -> str:
    """Strip namespace qualification: ``std::strcpy`` -> ``strcpy``."""
    return name.rsplit("::", 1)[-1]


def strip_parens_casts(node: Optional[SyntaxNode]) -> Optional[SyntaxNode]:
    """Peel off parentheses and casts around an expression."""
    while node is not None and node.kind in (NodeKind.PAREN, NodeKind.CAST):
        node = node.child("argument")
    return node


def is_null_literal(node: Optional[SyntaxNode]) -> bool:
    """``nullptr``, ``NULL`` or a literal zero, possibly wrapped."""
    node = strip_parens_casts(node)
    if node is None:
        return False
    if node.kind == NodeKind.NULL_LITERAL:
        return True
    return node.kind == NodeKind.INT_LITERAL and node.value == 0


def referenced_name(node: Optional[SyntaxNode]) -> Optional[str]:
    """Name of a plain variable reference, ignoring parentheses and casts."""
    node = strip_parens_casts(node)
    if node is not None and node.kind == NodeKind.DECL_REF:
        return node.name
    return None


_INT_MIN = -(2 ** 63)
_INT_MAX = 2 ** 64 - 1


def try_evaluate_int(
    node: Optional[SyntaxNode],
    constants: Optional[Mapping[str, int]] = None,
    _depth: int = 0,
) -> Optional[int]:
    """
    Evaluate a constant integer expression.

    Args:
        node: Expression node
        constants: Names bound to known constant values

    Returns:
        The value, or None when the expression is not a constant integer
    """
    if node is None or _depth > 64:
        return None
    kind = node.kind

    if kind == NodeKind.INT_LITERAL:
        return node.value if isinstance(node.value, int) else None
    if kind in (NodeKind.PAREN, NodeKind.CAST):
        if kind == NodeKind.CAST and node.type is not None and not node.type.is_integer:
            return None
        return try_evaluate_int(node.child("argument"), constants, _depth + 1)
    if kind == NodeKind.DECL_REF:
        if constants and node.name in constants:
            return constants[node.name]
        return None
    if kind == NodeKind.UNARY:
        operand = try_evaluate_int(node.child("argument"), constants, _depth + 1)
        if operand is None:
            return None
        if node.operator == "-":
            return -operand
        if node.operator == "+":
            return operand
        if node.operator == "~":
            return ~operand
        return None
    if kind == NodeKind.BINARY:
        left = try_evaluate_int(node.child("left"), constants, _depth + 1)
        right = try_evaluate_int(node.child("right"), constants, _depth + 1)
        if left is None or right is None:
            return None
        result = _apply_binary(node.operator, left, right)
        if result is None or not _INT_MIN <= result <= _INT_MAX:
            return None
        return result
    return None


def _apply_binary(op: Optional[str], left: int, right: int) -> Optional[int]:
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if op in ("/", "%"):
        if right == 0:
            return None
        # C truncates toward zero.
        quotient = abs(left) // abs(right)
        if (left < 0) != (right < 0):
            quotient = -quotient
        return quotient if op == "/" else left - quotient * right
    if op in ("<<", ">>"):
        if right < 0 or right > 63:
            return None
        return left << right if op == "<<" else left >> right
    if op == "&":
        return left & right
    if op == "|":
        return left | right
    if op == "^":
        return left ^ right
    return None
