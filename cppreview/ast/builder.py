"""
Programmatic construction of syntax trees.

TreeBuilder is used by the tree-sitter front-end and by tests. Each factory
returns a SyntaxNode with its children attached; ``unit`` wraps top-level
declarations into a SyntaxTree. Nodes built without a line inherit their
parent's line when the unit is assembled.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from cppreview.ast.nodes import ASSIGNMENT_OPERATORS, NodeKind, SyntaxNode, SyntaxTree
from cppreview.ast.types import (
    BOOL_TYPE,
    CHAR_POINTER_TYPE,
    INT_TYPE,
    LONG_TYPE,
    NULLPTR_TYPE,
    RecordInfo,
    TypeInfo,
    TypeResolver,
)
from cppreview.models.base import CodeLocation

Body = Union[SyntaxNode, Sequence[SyntaxNode], None]

_COMPARISON_OPERATORS = frozenset({"==", "!=", "<", ">", "<=", ">=", "&&", "||"})
_INT32_MAX = 2 ** 31 - 1


class TreeBuilder:
    """Factory for SyntaxNode trees of one translation unit."""

    def __init__(
        self,
        file_path: Union[str, Path] = "test.cpp",
        source: str = "",
        resolver: Optional[TypeResolver] = None,
    ) -> None:
        self.file_path = Path(file_path)
        self.source = source
        self.resolver = resolver or TypeResolver()
        self.symbols: dict[str, TypeInfo] = {}

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def _make(
        self,
        kind: NodeKind,
        line: Optional[int] = None,
        column: Optional[int] = None,
        *,
        text: str = "",
        flags: Iterable[str] = (),
        **attrs,
    ) -> SyntaxNode:
        location = CodeLocation(self.file_path, line or 0, column or (1 if line else 0))
        return SyntaxNode(kind=kind, location=location, text=text, flags=frozenset(flags), **attrs)

    def resolve(self, spelling: Union[str, TypeInfo, None], array_size: Optional[int] = None) -> Optional[TypeInfo]:
        if spelling is None or isinstance(spelling, TypeInfo):
            return spelling
        return self.resolver.resolve(spelling, array_size)

    def declare(self, name: str, type_info: Optional[TypeInfo]) -> None:
        if type_info is not None:
            self.symbols[name] = type_info

    def _as_block(self, body: Body, line: Optional[int] = None) -> Optional[SyntaxNode]:
        if body is None or isinstance(body, SyntaxNode):
            return body
        return self.block(*body, line=line)

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def unit(self, *decls: SyntaxNode) -> SyntaxTree:
        """Assemble top-level declarations into a translation unit."""
        root = self._make(NodeKind.TRANSLATION_UNIT, 1, 1)
        for decl in decls:
            root.add_child(decl)
        _inherit_lines(root)
        return SyntaxTree(root, self.file_path, self.source)

    def function(
        self,
        name: str,
        body: Body,
        params: Sequence[SyntaxNode] = (),
        return_type: str = "void",
        line: Optional[int] = None,
        column: Optional[int] = None,
        flags: Iterable[str] = (),
        text: str = "",
    ) -> SyntaxNode:
        node = self._make(
            NodeKind.FUNCTION, line, column,
            name=name, type=self.resolve(return_type), flags=flags, text=text,
        )
        for param in params:
            node.add_child(param)
        node.add_child(self._as_block(body, line), "body")
        return node

    def param(self, name: Optional[str], type_spelling: Union[str, TypeInfo], line: Optional[int] = None,
              column: Optional[int] = None) -> SyntaxNode:
        type_info = self.resolve(type_spelling)
        if name:
            self.declare(name, type_info)
        return self._make(NodeKind.PARAM, line, column, name=name, type=type_info)

    def record(
        self,
        name: str,
        fields: Sequence[tuple[str, str]],
        has_default_constructor: bool = True,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> SyntaxNode:
        """Class/struct definition; registers the record with the resolver."""
        node = self._make(NodeKind.RECORD, line, column, name=name)
        for field_name, field_type in fields:
            node.add_child(self._make(NodeKind.FIELD, line, name=field_name, type=self.resolve(field_type)))
        self.resolver.add_record(RecordInfo(name, len(fields), has_default_constructor))
        return node

    def var(
        self,
        name: str,
        type_spelling: Union[str, TypeInfo],
        init: Optional[SyntaxNode] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
        flags: Iterable[str] = (),
        array_size: Optional[int] = None,
        text: str = "",
    ) -> SyntaxNode:
        """Variable declaration, optionally with an initializer."""
        type_info = self.resolve(type_spelling, array_size)
        if _is_plain_auto(type_info) and init is not None and init.type is not None:
            type_info = replace(init.type, is_reference=False)
        flag_set = set(flags)
        if type_info is not None and type_info.is_const:
            flag_set.add("const")
        node = self._make(NodeKind.VAR_DECL, line, column, name=name, type=type_info, flags=flag_set, text=text)
        node.add_child(init, "value")
        self.declare(name, type_info)
        return node

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def block(self, *stmts: SyntaxNode, line: Optional[int] = None, column: Optional[int] = None) -> SyntaxNode:
        node = self._make(NodeKind.COMPOUND, line, column)
        for stmt in stmts:
            node.add_child(stmt)
        return node

    def expr(self, expression: SyntaxNode, line: Optional[int] = None, column: Optional[int] = None,
             text: str = "") -> SyntaxNode:
        node = self._make(NodeKind.EXPR_STMT, line or expression.location.line or None, column, text=text)
        node.add_child(expression, "expression")
        return node

    def if_(self, condition: SyntaxNode, consequence: Body, alternative: Body = None,
            line: Optional[int] = None, column: Optional[int] = None) -> SyntaxNode:
        node = self._make(NodeKind.IF, line, column)
        node.add_child(condition, "condition")
        node.add_child(self._as_block(consequence), "consequence")
        node.add_child(self._as_block(alternative), "alternative")
        return node

    def while_(self, condition: SyntaxNode, body: Body, line: Optional[int] = None,
               column: Optional[int] = None) -> SyntaxNode:
        node = self._make(NodeKind.WHILE, line, column)
        node.add_child(condition, "condition")
        node.add_child(self._as_block(body), "body")
        return node

    def do_(self, body: Body, condition: SyntaxNode, line: Optional[int] = None,
            column: Optional[int] = None) -> SyntaxNode:
        node = self._make(NodeKind.DO, line, column)
        node.add_child(self._as_block(body), "body")
        node.add_child(condition, "condition")
        return node

    def for_(
        self,
        initializer: Optional[SyntaxNode],
        condition: Optional[SyntaxNode],
        update: Optional[SyntaxNode],
        body: Body,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> SyntaxNode:
        node = self._make(NodeKind.FOR, line, column)
        node.add_child(initializer, "initializer")
        node.add_child(condition, "condition")
        node.add_child(update, "update")
        node.add_child(self._as_block(body), "body")
        return node

    def range_for(
        self,
        name: str,
        type_spelling: Union[str, TypeInfo],
        right: SyntaxNode,
        body: Body,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> SyntaxNode:
        """``for (type name : right) body``."""
        type_info = self.resolve(type_spelling)
        if _is_plain_auto(type_info) and right.type is not None:
            type_info = right.type.element_type(self.resolver)
        declarator = self.var(name, type_info, line=line, column=column, flags=("loop_variable",))
        node = self._make(NodeKind.RANGE_FOR, line, column)
        node.add_child(declarator, "declarator")
        node.add_child(right, "right")
        node.add_child(self._as_block(body), "body")
        return node

    def ret(self, value: Optional[SyntaxNode] = None, line: Optional[int] = None,
            column: Optional[int] = None) -> SyntaxNode:
        node = self._make(NodeKind.RETURN, line, column)
        node.add_child(value, "argument")
        return node

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def call(
        self,
        name: Optional[str],
        *args: SyntaxNode,
        callee: Optional[SyntaxNode] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
        type_spelling: Union[str, TypeInfo, None] = None,
        text: str = "",
    ) -> SyntaxNode:
        """Call expression; ``name`` is None for indirect calls."""
        node = self._make(
            NodeKind.CALL, line, column, name=name, type=self.resolve(type_spelling), text=text,
        )
        if callee is None and name is not None:
            callee = self._make(NodeKind.DECL_REF, line, column, name=name)
        node.add_child(callee, "function")
        for arg in args:
            node.add_child(arg)
        return node

    def method_call(self, obj: SyntaxNode, method: str, *args: SyntaxNode, arrow: bool = False,
                    line: Optional[int] = None, column: Optional[int] = None) -> SyntaxNode:
        callee = self.member(obj, method, arrow=arrow, line=line, column=column)
        return self.call(method, *args, callee=callee, line=line, column=column)

    def binary(self, operator: str, left: SyntaxNode, right: SyntaxNode, line: Optional[int] = None,
               column: Optional[int] = None, text: str = "") -> SyntaxNode:
        node = self._make(
            NodeKind.BINARY, line, column,
            operator=operator, type=_binary_type(operator, left, right), text=text,
        )
        node.add_child(left, "left")
        node.add_child(right, "right")
        return node

    def assign(self, left: SyntaxNode, right: SyntaxNode, operator: str = "=", line: Optional[int] = None,
               column: Optional[int] = None, text: str = "") -> SyntaxNode:
        return self.binary(operator, left, right, line=line, column=column, text=text)

    def unary(self, operator: str, operand: SyntaxNode, line: Optional[int] = None,
              column: Optional[int] = None, text: str = "", postfix: bool = False) -> SyntaxNode:
        type_info = operand.type
        if operator == "*":
            type_info = operand.type.element_type(self.resolver) if operand.type is not None and (
                operand.type.is_pointer or operand.type.is_array) else None
        elif operator == "&":
            type_info = operand.type.pointer_to() if operand.type is not None else None
        elif operator == "!":
            type_info = BOOL_TYPE
        node = self._make(
            NodeKind.UNARY, line, column,
            operator=operator, type=type_info, text=text, flags=("postfix",) if postfix else (),
        )
        node.add_child(operand, "argument")
        return node

    def deref(self, operand: SyntaxNode, line: Optional[int] = None, column: Optional[int] = None) -> SyntaxNode:
        return self.unary("*", operand, line=line, column=column)

    def address_of(self, operand: SyntaxNode, line: Optional[int] = None,
                   column: Optional[int] = None) -> SyntaxNode:
        return self.unary("&", operand, line=line, column=column)

    def member(self, obj: SyntaxNode, member_name: str, arrow: bool = False, line: Optional[int] = None,
               column: Optional[int] = None, type_spelling: Union[str, TypeInfo, None] = None) -> SyntaxNode:
        node = self._make(
            NodeKind.MEMBER, line, column,
            name=member_name, operator="->" if arrow else ".", type=self.resolve(type_spelling),
        )
        node.add_child(obj, "argument")
        return node

    def index(self, base: SyntaxNode, index: SyntaxNode, line: Optional[int] = None,
              column: Optional[int] = None, text: str = "") -> SyntaxNode:
        type_info = None
        if base.type is not None and (base.type.is_array or base.type.is_pointer):
            type_info = base.type.element_type(self.resolver)
        node = self._make(NodeKind.SUBSCRIPT, line, column, type=type_info, text=text)
        node.add_child(base, "argument")
        node.add_child(index, "index")
        return node

    def ref(self, name: str, type_info: Union[str, TypeInfo, None] = None, line: Optional[int] = None,
            column: Optional[int] = None) -> SyntaxNode:
        resolved = self.resolve(type_info) if type_info is not None else self.symbols.get(name)
        return self._make(NodeKind.DECL_REF, line, column, name=name, type=resolved, text=name)

    def num(self, value: int, line: Optional[int] = None, column: Optional[int] = None,
            text: Optional[str] = None) -> SyntaxNode:
        type_info = INT_TYPE if -_INT32_MAX - 1 <= value <= _INT32_MAX else LONG_TYPE
        return self._make(
            NodeKind.INT_LITERAL, line, column, value=value, type=type_info,
            text=text if text is not None else str(value),
        )

    def null(self, spelling: str = "nullptr", line: Optional[int] = None,
             column: Optional[int] = None) -> SyntaxNode:
        return self._make(NodeKind.NULL_LITERAL, line, column, type=NULLPTR_TYPE, text=spelling)

    def string(self, value: str, line: Optional[int] = None, column: Optional[int] = None) -> SyntaxNode:
        return self._make(
            NodeKind.STRING_LITERAL, line, column, value=value, type=CHAR_POINTER_TYPE, text=f'"{value}"',
        )

    def new(
        self,
        type_spelling: Union[str, TypeInfo],
        *args: SyntaxNode,
        array_size: Optional[SyntaxNode] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
        text: str = "",
    ) -> SyntaxNode:
        """``new T(args)`` or ``new T[size]``; the node's type is ``T*``."""
        allocated = self.resolve(type_spelling)
        node = self._make(
            NodeKind.NEW, line, column,
            type=allocated.pointer_to() if allocated is not None else None,
            flags=("array",) if array_size is not None else (),
            text=text,
        )
        node.add_child(array_size, "size")
        for arg in args:
            node.add_child(arg)
        return node

    def delete(self, operand: SyntaxNode, array: bool = False, line: Optional[int] = None,
               column: Optional[int] = None, text: str = "") -> SyntaxNode:
        node = self._make(NodeKind.DELETE, line, column, flags=("array",) if array else (), text=text)
        node.add_child(operand, "argument")
        return node

    def cast(self, type_spelling: Union[str, TypeInfo], operand: SyntaxNode, style: str = "static_cast",
             line: Optional[int] = None, column: Optional[int] = None, text: str = "") -> SyntaxNode:
        """Explicit conversion; ``style`` is ``c_style`` or the C++ cast keyword."""
        node = self._make(
            NodeKind.CAST, line, column, type=self.resolve(type_spelling), flags=(style,), text=text,
        )
        node.add_child(operand, "argument")
        return node

    def paren(self, inner: SyntaxNode, line: Optional[int] = None, column: Optional[int] = None) -> SyntaxNode:
        node = self._make(NodeKind.PAREN, line, column, type=inner.type)
        node.add_child(inner, "argument")
        return node

    def unknown(self, *children: SyntaxNode, line: Optional[int] = None, column: Optional[int] = None,
                text: str = "") -> SyntaxNode:
        node = self._make(NodeKind.UNKNOWN, line, column, text=text)
        for child in children:
            node.add_child(child)
        return node


def _binary_type(operator: str, left: SyntaxNode, right: SyntaxNode) -> Optional[TypeInfo]:
    if operator in ASSIGNMENT_OPERATORS:
        return left.type
    if operator in _COMPARISON_OPERATORS:
        return BOOL_TYPE
    lt, rt = left.type, right.type
    if lt is not None and lt.is_pointer:
        return lt
    if lt is not None and rt is not None and lt.is_integer and rt.is_integer:
        # Integer promotion: nothing narrower than int survives arithmetic.
        width = max(32, lt.integer_width or 0, rt.integer_width or 0)
        return LONG_TYPE if width > 32 else INT_TYPE
    return lt


def _inherit_lines(root: SyntaxNode) -> None:
    for node in root.walk():
        if node.location.line == 0 and node.parent is not None and node.parent.location.line:
            node.location = CodeLocation(node.location.file_path, node.parent.location.line,
                                         node.parent.location.column)


def _is_plain_auto(type_info: Optional[TypeInfo]) -> bool:
    """``auto`` or ``const auto`` declared by value, to be deduced from the initializer."""
    return (
        type_info is not None
        and type_info.base_name == "auto"
        and not (type_info.is_pointer or type_info.is_reference or type_info.is_array)
    )
