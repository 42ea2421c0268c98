"""
Conversion of tree-sitter C/C++ trees into cppreview syntax trees.

The converter walks the concrete syntax tree produced by tree-sitter-cpp and
builds the typed SyntaxTree the rules consume. Declarations are tracked in
lexical scopes so variable references carry the declared type; records,
typedefs and using-aliases are registered with the TypeResolver as they are
encountered. Constructs without a dedicated node kind become UNKNOWN nodes
whose children are still converted, so calls and declarations nested inside
them remain visible to the rules.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

from cppreview.ast.builder import TreeBuilder
from cppreview.ast.nodes import NodeKind, SyntaxNode, SyntaxTree, try_evaluate_int, unqualified
from cppreview.ast.types import TypeInfo
from cppreview.context.tree_sitter_parser import FrontendError, TreeSitterParser
from cppreview.utils.logging import ComponentLogger

CAST_KEYWORDS = frozenset({"static_cast", "reinterpret_cast", "const_cast", "dynamic_cast"})
RECORD_SPECIFIERS = frozenset({"class_specifier", "struct_specifier", "union_specifier"})
# Statements and expressions nested deeper than this become UNKNOWN leaves.
MAX_NESTING_DEPTH = 150

# Containers whose named children are top-level declarations.
_TRANSPARENT = frozenset({
    "declaration_list", "linkage_specification", "template_declaration", "preproc_if",
    "preproc_ifdef", "preproc_else", "preproc_elif", "preproc_elifdef", "ERROR",
})
_STATEMENTS = frozenset({
    "compound_statement", "declaration", "expression_statement", "if_statement",
    "while_statement", "do_statement", "for_statement", "for_range_loop", "return_statement",
    "switch_statement", "case_statement", "break_statement", "continue_statement",
    "goto_statement", "labeled_statement", "try_statement", "catch_clause", "throw_statement",
    "type_definition", "alias_declaration", "class_specifier", "struct_specifier",
})
_WRAPPER_DECLARATORS = frozenset({
    "pointer_declarator", "reference_declarator", "parenthesized_declarator",
    "attributed_declarator", "init_declarator",
})
_NAME_NODES = frozenset({
    "identifier", "field_identifier", "qualified_identifier", "destructor_name",
    "operator_name", "type_identifier", "structured_binding_declarator",
})


def parse_int_literal(text: str) -> Optional[int]:
    """Value of a C integer literal (``0x1F``, ``10u``, ``1'000``), None for floats."""
    literal = text.replace("'", "").lower().rstrip("ulz")
    try:
        if literal.startswith("0x"):
            return int(literal[2:], 16)
        if literal.startswith("0b"):
            return int(literal[2:], 2)
        if len(literal) > 1 and literal.startswith("0") and literal.isdigit():
            return int(literal, 8)
        return int(literal, 10)
    except ValueError:
        return None


def _strip_template_arguments(name: str) -> str:
    """``std::make_unique<Foo>`` -> ``std::make_unique``."""
    depth = 0
    out: list[str] = []
    for ch in name:
        if ch == "<":
            depth += 1
        elif ch == ">":
            depth -= 1
        elif depth == 0:
            out.append(ch)
    return "".join(out)


class TreeConverter:
    """Builds a SyntaxTree from one tree-sitter tree."""

    def __init__(self, source: bytes, file_path: Union[str, Path]) -> None:
        self.source = source
        self.file_path = Path(file_path)
        self.builder = TreeBuilder(self.file_path, source.decode("utf-8", errors="replace"))
        self.resolver = self.builder.resolver
        self.logger = ComponentLogger("converter", parent="context")
        self._scopes: list[dict[str, TypeInfo]] = [{}]
        self._constants: dict[str, int] = {}
        self._record_fields: dict[str, dict[str, TypeInfo]] = {}
        self._depth = 0
        self.truncated_subtrees = 0

    def convert(self, ts_tree: Any) -> SyntaxTree:
        """
        Convert a parsed translation unit.

        Statements and expressions nested past MAX_NESTING_DEPTH are kept
        as UNKNOWN leaves; the rest of the unit is converted normally.

        Raises:
            FrontendError: If declarations nest too deeply to convert
        """
        try:
            decls = self._top_level(ts_tree.root_node)
        except RecursionError as e:
            raise FrontendError("Source nesting too deep to convert", self.file_path) from e
        tree = self.builder.unit(*decls)
        self.logger.debug(f"Converted {self.file_path}", declarations=len(decls),
                          records=len(self.resolver.records),
                          truncated=self.truncated_subtrees)
        return tree

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _text(self, ts: Any) -> str:
        return self.source[ts.start_byte:ts.end_byte].decode("utf-8", errors="replace")

    def _norm(self, ts: Any) -> str:
        return " ".join(self._text(ts).split())

    def _snippet(self, ts: Any) -> str:
        lines = self._text(ts).strip().splitlines()
        if not lines:
            return ""
        return lines[0].strip() if len(lines) == 1 else lines[0].strip() + " ..."

    @staticmethod
    def _pos(ts: Any) -> tuple[int, int]:
        row, column = ts.start_point
        return row + 1, column + 1

    @staticmethod
    def _named(ts: Any) -> list[Any]:
        return [child for child in ts.named_children if child.type != "comment"]

    def _push_scope(self, initial: Optional[dict[str, TypeInfo]] = None) -> None:
        self._scopes.append(dict(initial or {}))

    def _pop_scope(self) -> None:
        if len(self._scopes) > 1:
            self._scopes.pop()

    def _declare(self, name: str, type_info: Optional[TypeInfo]) -> None:
        if type_info is not None:
            self._scopes[-1][name] = type_info

    def _lookup(self, name: str) -> Optional[TypeInfo]:
        for scope in reversed(self._scopes):
            if name in scope:
                return scope[name]
        return None

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _top_level(self, ts: Any) -> list[SyntaxNode]:
        out: list[SyntaxNode] = []
        for child in self._named(ts):
            kind = child.type
            if kind == "function_definition":
                function = self._function(child)
                if function is not None:
                    out.append(function)
            elif kind == "declaration":
                out.extend(self._declaration(child))
            elif kind in RECORD_SPECIFIERS:
                out.extend(self._record(child))
            elif kind == "type_definition":
                out.extend(self._typedef(child))
            elif kind == "alias_declaration":
                self._alias(child)
            elif kind == "namespace_definition":
                body = child.child_by_field_name("body")
                if body is not None:
                    out.extend(self._top_level(body))
            elif kind in _TRANSPARENT:
                out.extend(self._top_level(child))
        return out

    def _function(self, ts: Any, owner: Optional[str] = None,
                  members: Optional[dict[str, TypeInfo]] = None) -> Optional[SyntaxNode]:
        function_declarator = self._find_function_declarator(ts.child_by_field_name("declarator"))
        if function_declarator is None:
            return None
        name_ts = function_declarator.child_by_field_name("declarator")
        name = self._norm(name_ts) if name_ts is not None else "<anonymous>"
        if owner and "::" not in name:
            name = f"{owner}::{name}"

        line, column = self._pos(ts)
        return_type = self._type_spelling(ts) or "void"
        self.builder.symbols.clear()

        self._push_scope(members)
        params = self._parameters(function_declarator)
        body_ts = ts.child_by_field_name("body")
        body = self._compound(body_ts) if body_ts is not None and body_ts.type == "compound_statement" else None
        self._pop_scope()

        return self.builder.function(
            name, body, params, return_type, line, column,
            flags=self._storage_flags(ts), text=self._snippet(ts),
        )

    def _find_function_declarator(self, ts: Any) -> Optional[Any]:
        while ts is not None:
            if ts.type == "function_declarator":
                return ts
            if ts.type not in _WRAPPER_DECLARATORS:
                return None
            ts = self._inner_declarator(ts)
        return None

    def _inner_declarator(self, ts: Any) -> Optional[Any]:
        inner = ts.child_by_field_name("declarator")
        if inner is not None:
            return inner
        named = self._named(ts)
        return named[-1] if named else None

    def _parameters(self, function_declarator: Any) -> list[SyntaxNode]:
        params: list[SyntaxNode] = []
        plist = function_declarator.child_by_field_name("parameters")
        if plist is None:
            return params
        for param_ts in self._named(plist):
            if param_ts.type not in ("parameter_declaration", "optional_parameter_declaration"):
                continue
            base = self._type_spelling(param_ts)
            declarator = param_ts.child_by_field_name("declarator")
            name: Optional[str] = None
            spelling = base
            if declarator is not None:
                info = self._declarator_info(declarator, base)
                if info is not None:
                    name, spelling, _, is_array = info
                    if is_array:
                        spelling += "*"
            type_info = self.builder.resolve(spelling)
            line, column = self._pos(param_ts)
            params.append(self.builder.param(name, type_info, line, column))
            if name:
                self._declare(name, type_info)
        return params

    def _type_spelling(self, ts: Any) -> str:
        type_ts = ts.child_by_field_name("type")
        if type_ts is None:
            return ""
        if type_ts.type in RECORD_SPECIFIERS or type_ts.type == "enum_specifier":
            name_ts = type_ts.child_by_field_name("name")
            base = self._norm(name_ts) if name_ts is not None else "<anonymous>"
            if type_ts.type == "enum_specifier":
                base = "int"
        else:
            base = self._norm(type_ts)
        qualifiers = [self._norm(c) for c in ts.named_children if c.type == "type_qualifier"]
        return " ".join(qualifiers + [base])

    def _storage_flags(self, ts: Any) -> set[str]:
        flags = {self._norm(c) for c in ts.named_children if c.type == "storage_class_specifier"}
        if any(self._norm(c) == "constexpr" for c in ts.named_children if c.type == "type_qualifier"):
            flags.add("const")
        return flags

    def _declarator_info(self, ts: Any, base: str) -> Optional[tuple[Optional[str], str, Optional[int], bool]]:
        """
        Unwrap a declarator.

        Returns:
            (name, type spelling, innermost array extent, is_array), or None
            for function declarators
        """
        suffix = ""
        array_size: Optional[int] = None
        is_array = False
        name: Optional[str] = None
        while ts is not None:
            kind = ts.type
            if kind in _NAME_NODES:
                name = self._norm(ts)
                break
            if kind == "function_declarator":
                return None
            if kind == "pointer_declarator":
                suffix += "*"
            elif kind == "reference_declarator":
                suffix += "&&" if self._text(ts).lstrip().startswith("&&") else "&"
            elif kind == "array_declarator":
                is_array = True
                size_ts = ts.child_by_field_name("size")
                array_size = self._evaluate_size(size_ts) if size_ts is not None else None
            elif kind not in _WRAPPER_DECLARATORS:
                break
            ts = self._inner_declarator(ts)
        return name, base + suffix, array_size, is_array

    def _evaluate_size(self, ts: Any) -> Optional[int]:
        value = try_evaluate_int(self._expression(ts), self._constants)
        return value if value is not None and value >= 0 else None

    def _declaration(self, ts: Any) -> list[SyntaxNode]:
        out: list[SyntaxNode] = []
        type_ts = ts.child_by_field_name("type")
        if type_ts is not None and type_ts.type in RECORD_SPECIFIERS and type_ts.child_by_field_name("body"):
            out.extend(self._record(type_ts))

        base = self._type_spelling(ts)
        flags = self._storage_flags(ts)
        for declarator in ts.children_by_field_name("declarator"):
            value_ts = None
            target = declarator
            if declarator.type == "init_declarator":
                value_ts = declarator.child_by_field_name("value")
                target = declarator.child_by_field_name("declarator")
            info = self._declarator_info(target, base)
            if info is None or not info[0]:
                continue
            name, spelling, array_size, is_array = info

            value = self._expression(value_ts) if value_ts is not None else None
            if is_array and array_size is None and value is not None and value.kind == NodeKind.STRING_LITERAL:
                array_size = len(str(value.value)) + 1

            if is_array:
                type_info = self.builder.resolve(spelling if array_size is not None else spelling + "[]",
                                                 array_size)
            else:
                type_info = self.builder.resolve(spelling)

            line, column = self._pos(declarator)
            var = self.builder.var(name, type_info, value, line, column, flags, text=self._snippet(ts))
            self._declare(name, var.type)
            if var.type is not None and var.type.is_integer and var.has_flag("const"):
                constant = try_evaluate_int(value, self._constants)
                if constant is not None:
                    self._constants[name] = constant
            out.append(var)
        return out

    def _record(self, ts: Any, name_override: Optional[str] = None) -> list[SyntaxNode]:
        body = ts.child_by_field_name("body")
        if body is None:
            return []
        name_ts = ts.child_by_field_name("name")
        name = name_override or (self._norm(name_ts) if name_ts is not None else "<anonymous>")
        short_name = unqualified(name)

        fields: list[tuple[str, str]] = []
        methods: list[Any] = []
        constructor_arities: list[int] = []
        for member in self._named(body):
            kind = member.type
            if kind == "template_declaration":
                member = next((c for c in self._named(member) if c.type == "function_definition"), None)
                if member is None:
                    continue
                kind = member.type
            if kind == "field_declaration":
                base = self._type_spelling(member)
                for declarator in member.children_by_field_name("declarator"):
                    info = self._declarator_info(declarator, base)
                    if info is not None and info[0]:
                        field_name, spelling, array_size, is_array = info
                        fields.append((field_name, f"{spelling}[{array_size}]" if is_array and array_size else spelling))
                    arity = self._constructor_arity(declarator, short_name)
                    if arity is not None:
                        constructor_arities.append(arity)
            elif kind in ("function_definition", "declaration"):
                for declarator in member.children_by_field_name("declarator"):
                    arity = self._constructor_arity(declarator, short_name)
                    if arity is not None:
                        constructor_arities.append(arity)
                if kind == "function_definition":
                    methods.append(member)

        has_default = not constructor_arities or 0 in constructor_arities
        line, column = self._pos(ts)
        record = self.builder.record(name, fields, has_default, line, column)
        member_types = {field.name: field.type for field in record.children if field.name and field.type}
        self._record_fields[name] = member_types
        self._record_fields[short_name] = member_types

        out = [record]
        for method in methods:
            function = self._function(method, owner=name, members=member_types)
            if function is not None:
                out.append(function)
        return out

    def _constructor_arity(self, declarator: Any, class_name: str) -> Optional[int]:
        """Required parameter count when ``declarator`` declares a constructor."""
        function_declarator = self._find_function_declarator(declarator)
        if function_declarator is None:
            return None
        name_ts = function_declarator.child_by_field_name("declarator")
        if name_ts is None or unqualified(self._norm(name_ts)) != class_name:
            return None
        plist = function_declarator.child_by_field_name("parameters")
        if plist is None:
            return 0
        required = [p for p in self._named(plist) if p.type == "parameter_declaration"]
        if len(required) == 1 and self._norm(required[0]) == "void":
            return 0
        return len(required)

    def _typedef(self, ts: Any) -> list[SyntaxNode]:
        out: list[SyntaxNode] = []
        type_ts = ts.child_by_field_name("type")
        declarators = ts.children_by_field_name("declarator")
        base = self._type_spelling(ts)
        if type_ts is not None and type_ts.type in RECORD_SPECIFIERS and type_ts.child_by_field_name("body"):
            anonymous = type_ts.child_by_field_name("name") is None
            if anonymous and declarators:
                record_name = self._norm(declarators[0])
                out.extend(self._record(type_ts, name_override=record_name))
                base = record_name
            else:
                out.extend(self._record(type_ts))
        for declarator in declarators:
            info = self._declarator_info(declarator, base)
            if info is not None and info[0] and info[0] != base:
                self.resolver.add_alias(info[0], info[1])
        return out

    def _alias(self, ts: Any) -> None:
        name_ts = ts.child_by_field_name("name")
        type_ts = ts.child_by_field_name("type")
        if name_ts is not None and type_ts is not None:
            self.resolver.add_alias(self._norm(name_ts), self._norm(type_ts))

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _statement(self, ts: Any) -> list[SyntaxNode]:
        if self._depth >= MAX_NESTING_DEPTH:
            return [self._truncated(ts)]
        self._depth += 1
        try:
            return self._convert_statement(ts)
        finally:
            self._depth -= 1

    def _convert_statement(self, ts: Any) -> list[SyntaxNode]:
        kind = ts.type
        if kind == "compound_statement":
            return [self._compound(ts)]
        if kind == "declaration":
            return self._declaration(ts)
        if kind == "expression_statement":
            named = self._named(ts)
            if not named:
                return []
            expression = self._expression(named[0])
            if expression is None:
                return []
            line, column = self._pos(ts)
            return [self.builder.expr(expression, line, column, text=self._snippet(ts))]
        if kind == "if_statement":
            return [self._if(ts)]
        if kind == "while_statement":
            return [self._while(ts)]
        if kind == "do_statement":
            return [self._do(ts)]
        if kind == "for_statement":
            return [self._for(ts)]
        if kind == "for_range_loop":
            return [self._range_for(ts)]
        if kind == "return_statement":
            named = self._named(ts)
            line, column = self._pos(ts)
            value = self._expression(named[0]) if named else None
            return [self.builder.ret(value, line, column)]
        if kind == "type_definition":
            return self._typedef(ts)
        if kind == "alias_declaration":
            self._alias(ts)
            return []
        if kind in RECORD_SPECIFIERS:
            return self._record(ts)
        if kind == "comment":
            return []
        return [self._generic(ts)]

    def _statement_node(self, ts: Any) -> Optional[SyntaxNode]:
        if ts is None:
            return None
        nodes = self._statement(ts)
        if not nodes:
            return None
        if len(nodes) == 1:
            return nodes[0]
        line, column = self._pos(ts)
        return self.builder.block(*nodes, line=line, column=column)

    def _compound(self, ts: Any) -> SyntaxNode:
        self._push_scope()
        statements: list[SyntaxNode] = []
        for child in self._named(ts):
            statements.extend(self._statement(child))
        self._pop_scope()
        line, column = self._pos(ts)
        return self.builder.block(*statements, line=line, column=column)

    def _condition(self, ts: Any) -> Optional[SyntaxNode]:
        """Condition of if/while/do, without the statement's own parentheses."""
        if ts is None:
            return None
        if ts.type == "condition_clause":
            value = ts.child_by_field_name("value")
            if value is None:
                return None
            if value.type.endswith("declaration"):
                return self._condition_declaration(value)
            return self._expression(value)
        if ts.type == "parenthesized_expression":
            named = self._named(ts)
            return self._expression(named[0]) if named else None
        return self._expression(ts)

    def _condition_declaration(self, ts: Any) -> Optional[SyntaxNode]:
        declarator = ts.child_by_field_name("declarator")
        if declarator is None:
            return None
        if declarator.type == "init_declarator":
            decls = self._declaration(ts)
            return decls[0] if decls else None
        info = self._declarator_info(declarator, self._type_spelling(ts))
        if info is None or not info[0]:
            return None
        value = self._expression(ts.child_by_field_name("value"))
        line, column = self._pos(ts)
        var = self.builder.var(info[0], info[1], value, line, column, text=self._snippet(ts))
        self._declare(info[0], var.type)
        return var

    def _if(self, ts: Any) -> SyntaxNode:
        line, column = self._pos(ts)
        self._push_scope()
        condition = self._condition(ts.child_by_field_name("condition"))
        consequence = self._statement_node(ts.child_by_field_name("consequence"))
        alternative_ts = ts.child_by_field_name("alternative")
        if alternative_ts is not None and alternative_ts.type == "else_clause":
            named = self._named(alternative_ts)
            alternative_ts = named[0] if named else None
        alternative = self._statement_node(alternative_ts)
        self._pop_scope()
        return self.builder.if_(condition, consequence, alternative, line, column)

    def _while(self, ts: Any) -> SyntaxNode:
        line, column = self._pos(ts)
        self._push_scope()
        condition = self._condition(ts.child_by_field_name("condition"))
        body = self._statement_node(ts.child_by_field_name("body"))
        self._pop_scope()
        return self.builder.while_(condition, body, line, column)

    def _do(self, ts: Any) -> SyntaxNode:
        line, column = self._pos(ts)
        body = self._statement_node(ts.child_by_field_name("body"))
        condition = self._condition(ts.child_by_field_name("condition"))
        return self.builder.do_(body, condition, line, column)

    def _for(self, ts: Any) -> SyntaxNode:
        line, column = self._pos(ts)
        self._push_scope()
        init_ts = ts.child_by_field_name("initializer") or ts.child_by_field_name("init")
        initializer: Optional[SyntaxNode] = None
        if init_ts is not None:
            if init_ts.type == "declaration":
                decls = self._declaration(init_ts)
                if len(decls) == 1:
                    initializer = decls[0]
                elif decls:
                    initializer = self.builder.block(*decls, line=line, column=column)
            else:
                initializer = self._expression(init_ts)
        condition = self._condition(ts.child_by_field_name("condition"))
        update = self._expression(ts.child_by_field_name("update"))
        body = self._statement_node(ts.child_by_field_name("body"))
        self._pop_scope()
        return self.builder.for_(initializer, condition, update, body, line, column)

    def _range_for(self, ts: Any) -> SyntaxNode:
        line, column = self._pos(ts)
        self._push_scope()
        right = self._expression(ts.child_by_field_name("right"))
        if right is None:
            right = self.builder.unknown(line=line, column=column)

        base = self._type_spelling(ts)
        declarator = ts.child_by_field_name("declarator")
        name = "<binding>"
        spelling = base
        if declarator is not None:
            info = self._declarator_info(declarator, base)
            if info is not None and info[0]:
                name, spelling = info[0], info[1]
        type_info = self.builder.resolve(spelling)
        if type_info is not None and type_info.base_name == "auto" and not (
            type_info.is_reference or type_info.is_pointer
        ) and right.type is not None:
            type_info = right.type.element_type(self.resolver)
        self._declare(name, type_info)

        body = self._statement_node(ts.child_by_field_name("body"))
        self._pop_scope()
        return self.builder.range_for(name, type_info, right, body, line, column)

    def _generic(self, ts: Any) -> SyntaxNode:
        line, column = self._pos(ts)
        children = [child for child in (self._any(c) for c in self._named(ts)) if child is not None]
        return self.builder.unknown(*children, line=line, column=column, text=self._snippet(ts))

    def _truncated(self, ts: Any) -> SyntaxNode:
        line, column = self._pos(ts)
        self.truncated_subtrees += 1
        if self.truncated_subtrees == 1:
            self.logger.warning(
                "Nesting depth limit reached, skipping subtree",
                file=str(self.file_path),
                line=line,
                max_depth=MAX_NESTING_DEPTH,
            )
        return self.builder.unknown(line=line, column=column, text=self._snippet(ts))

    def _any(self, ts: Any) -> Optional[SyntaxNode]:
        if ts.type in _STATEMENTS:
            return self._statement_node(ts)
        return self._expression(ts)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _expression(self, ts: Any) -> Optional[SyntaxNode]:
        if ts is None:
            return None
        if self._depth >= MAX_NESTING_DEPTH:
            return self._truncated(ts)
        self._depth += 1
        try:
            return self._convert_expression(ts)
        finally:
            self._depth -= 1

    def _convert_expression(self, ts: Any) -> Optional[SyntaxNode]:
        kind = ts.type
        line, column = self._pos(ts)
        b = self.builder

        if kind in ("identifier", "field_identifier", "this", "namespace_identifier"):
            name = self._norm(ts)
            if name == "NULL":
                return b.null(name, line, column)
            return b.ref(name, self._lookup(name), line, column)
        if kind == "qualified_identifier":
            name = self._norm(ts)
            return b.ref(name, self._lookup(name) or self._lookup(unqualified(name)), line, column)
        if kind == "number_literal":
            text = self._norm(ts)
            value = parse_int_literal(text)
            if value is not None:
                return b.num(value, line, column, text=text)
            node = b.unknown(line=line, column=column, text=text)
            node.type = self.resolver.resolve("double")
            return node
        if kind == "char_literal":
            node = b.unknown(line=line, column=column, text=self._norm(ts))
            node.type = self.resolver.resolve("char")
            return node
        if kind in ("string_literal", "raw_string_literal", "concatenated_string"):
            return b.string(self._string_value(ts), line, column)
        if kind in ("null", "nullptr"):
            return b.null(self._norm(ts), line, column)
        if kind in ("true", "false"):
            node = b.unknown(line=line, column=column, text=kind)
            node.type = self.resolver.resolve("bool")
            return node
        if kind == "parenthesized_expression":
            named = self._named(ts)
            inner = self._expression(named[0]) if named else None
            if inner is None:
                return b.unknown(line=line, column=column, text=self._snippet(ts))
            return b.paren(inner, line, column)
        if kind == "assignment_expression":
            left = self._expression(ts.child_by_field_name("left"))
            right = self._expression(ts.child_by_field_name("right"))
            if left is None or right is None:
                return self._generic(ts)
            return b.assign(left, right, self._operator(ts, "="), line, column, text=self._snippet(ts))
        if kind == "binary_expression":
            return self._binary_chain(ts)
        if kind in ("unary_expression", "pointer_expression"):
            operand = self._expression(ts.child_by_field_name("argument"))
            if operand is None:
                return self._generic(ts)
            return b.unary(self._operator(ts, "?"), operand, line, column, text=self._snippet(ts))
        if kind == "update_expression":
            operand_ts = ts.child_by_field_name("argument")
            operand = self._expression(operand_ts)
            if operand is None:
                return self._generic(ts)
            postfix = operand_ts is not None and ts.children and ts.children[0].start_byte == operand_ts.start_byte
            return b.unary(self._operator(ts, "++"), operand, line, column, text=self._snippet(ts),
                           postfix=bool(postfix))
        if kind == "field_expression":
            return self._field_expression(ts)
        if kind == "subscript_expression":
            return self._subscript(ts)
        if kind == "call_expression":
            return self._call(ts)
        if kind == "cast_expression":
            type_ts = ts.child_by_field_name("type")
            operand = self._expression(ts.child_by_field_name("value"))
            if type_ts is None or operand is None:
                return self._generic(ts)
            return b.cast(self._norm(type_ts), operand, "c_style", line, column, text=self._snippet(ts))
        if kind == "new_expression":
            return self._new(ts)
        if kind == "delete_expression":
            named = self._named(ts)
            operand = self._expression(named[-1]) if named else None
            if operand is None:
                return self._generic(ts)
            array = any(child.type == "[" for child in ts.children)
            return b.delete(operand, array, line, column, text=self._snippet(ts))
        if kind in ("sizeof_expression", "alignof_expression"):
            # Unevaluated operand: nothing inside is executed.
            node = b.unknown(line=line, column=column, text=self._snippet(ts))
            node.type = self.resolver.resolve("size_t")
            return node
        return self._generic(ts)

    def _operator(self, ts: Any, default: str) -> str:
        op_ts = ts.child_by_field_name("operator")
        if op_ts is not None:
            return self._norm(op_ts)
        for child in ts.children:
            if not child.is_named:
                return self._text(child)
        return default

    def _binary_chain(self, ts: Any) -> SyntaxNode:
        """Left-nested chains (``a + b + c + ...``) are folded without recursion."""
        spine = []
        current = ts
        while current is not None and current.type == "binary_expression":
            spine.append(current)
            current = current.child_by_field_name("left")

        node = self._expression(current)
        if node is None:
            node = self.builder.unknown(line=self._pos(ts)[0])
        for binary_ts in reversed(spine):
            line, column = self._pos(binary_ts)
            right = self._expression(binary_ts.child_by_field_name("right"))
            if right is None:
                right = self.builder.unknown(line=line, column=column)
            node = self.builder.binary(self._operator(binary_ts, "?"), node, right, line, column,
                                       text=self._snippet(binary_ts))
        return node

    def _field_expression(self, ts: Any) -> SyntaxNode:
        line, column = self._pos(ts)
        obj = self._expression(ts.child_by_field_name("argument"))
        field_ts = ts.child_by_field_name("field")
        if obj is None or field_ts is None:
            return self._generic(ts)
        field_name = self._norm(field_ts)
        arrow = self._operator(ts, ".") == "->"
        return self.builder.member(obj, field_name, arrow, line, column,
                                   type_spelling=self._member_type(obj, field_name, arrow))

    def _member_type(self, obj: SyntaxNode, field_name: str, arrow: bool) -> Optional[TypeInfo]:
        if obj.type is None:
            return None
        record = obj.type.pointee if arrow else (obj.type.base_name or obj.type.spelling)
        if not record:
            return None
        fields = self._record_fields.get(record) or self._record_fields.get(unqualified(record))
        return fields.get(field_name) if fields else None

    def _subscript(self, ts: Any) -> SyntaxNode:
        line, column = self._pos(ts)
        base = self._expression(ts.child_by_field_name("argument"))
        index_ts = ts.child_by_field_name("index")
        if index_ts is None:
            indices = ts.child_by_field_name("indices")
            if indices is not None:
                named = self._named(indices)
                index_ts = named[0] if named else None
        index = self._expression(index_ts)
        if base is None or index is None:
            return self._generic(ts)
        return self.builder.index(base, index, line, column, text=self._snippet(ts))

    def _call(self, ts: Any) -> SyntaxNode:
        line, column = self._pos(ts)
        b = self.builder
        function_ts = ts.child_by_field_name("function")
        arguments_ts = ts.child_by_field_name("arguments")
        args = []
        if arguments_ts is not None:
            args = [a for a in (self._expression(c) for c in self._named(arguments_ts)) if a is not None]
        text = self._snippet(ts)

        if function_ts is None:
            return b.call(None, *args, callee=b.unknown(line=line, column=column), line=line, column=column,
                          text=text)

        kind = function_ts.type
        if kind == "template_function":
            name_ts = function_ts.child_by_field_name("name")
            keyword = self._norm(name_ts) if name_ts is not None else ""
            if keyword in CAST_KEYWORDS:
                targets_ts = function_ts.child_by_field_name("arguments")
                target = self._norm(targets_ts)[1:-1].strip() if targets_ts is not None else ""
                operand = args[0] if args else b.unknown(line=line, column=column)
                return b.cast(target, operand, keyword, line, column, text=text)
        if kind in ("identifier", "qualified_identifier", "template_function"):
            name = _strip_template_arguments(self._norm(function_ts))
            return b.call(name, *args, line=line, column=column, text=text)
        if kind == "field_expression":
            callee = self._field_expression(function_ts)
            return b.call(callee.name, *args, callee=callee, line=line, column=column, text=text)
        if kind == "primitive_type" and len(args) == 1:
            # Functional cast: short(x)
            return b.cast(self._norm(function_ts), args[0], "functional", line, column, text=text)
        callee = self._expression(function_ts)
        return b.call(None, *args, callee=callee, line=line, column=column, text=text)

    def _new(self, ts: Any) -> SyntaxNode:
        line, column = self._pos(ts)
        type_ts = ts.child_by_field_name("type")
        spelling = self._norm(type_ts) if type_ts is not None else "void"
        size: Optional[SyntaxNode] = None
        declarator = ts.child_by_field_name("declarator")
        if declarator is not None:
            length = declarator.child_by_field_name("length")
            if length is None:
                named = self._named(declarator)
                length = named[0] if named else None
            size = self._expression(length) or self.builder.unknown(line=line, column=column)
        args: list[SyntaxNode] = []
        arguments_ts = ts.child_by_field_name("arguments")
        if arguments_ts is not None:
            args = [a for a in (self._expression(c) for c in self._named(arguments_ts)) if a is not None]
        return self.builder.new(spelling, *args, array_size=size, line=line, column=column,
                                text=self._snippet(ts))

    def _string_value(self, ts: Any) -> str:
        if ts.type == "concatenated_string":
            return "".join(self._string_value(c) for c in self._named(ts)
                           if c.type in ("string_literal", "raw_string_literal"))
        text = self._text(ts)
        start = text.find('"')
        end = text.rfind('"')
        if start < 0 or end <= start:
            return text
        return text[start + 1:end]


def convert_tree(ts_tree: Any, source: bytes, file_path: Union[str, Path]) -> SyntaxTree:
    """Convert a tree-sitter tree of ``source`` into a SyntaxTree."""
    return TreeConverter(source, file_path).convert(ts_tree)


def parse_source(
    code: Union[str, bytes],
    file_path: Union[str, Path] = "input.cpp",
    parser: Optional[TreeSitterParser] = None,
    strict: bool = False,
) -> SyntaxTree:
    """
    Parse and convert C/C++ source held in memory.

    Args:
        code: Source text or bytes
        file_path: Path recorded on the tree and on issue locations
        parser: Parser to reuse (a new one is created otherwise)
        strict: Reject sources containing syntax errors

    Raises:
        FrontendError: If the source cannot be parsed, or has syntax errors in strict mode
    """
    source = code.encode("utf-8") if isinstance(code, str) else code
    parser = parser or TreeSitterParser()
    ts_tree = parser.parse_bytes(source, Path(file_path))
    if strict and ts_tree.root_node.has_error:
        raise FrontendError("Source contains syntax errors", Path(file_path))
    return convert_tree(ts_tree, source, file_path)
