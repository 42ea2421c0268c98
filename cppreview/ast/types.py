"""
Type descriptors for the syntax tree.

A TypeInfo answers the questions rules ask about a declaration or an
expression: is it a pointer, a reference, a builtin, an integer (and how
wide), an array (and how large), a class type (and how many fields), or an
owning smart pointer. TypeResolver builds descriptors from C/C++ type
spellings, consulting the records and aliases declared so far.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Optional

_QUALIFIERS = ("const", "volatile", "static", "extern", "register", "mutable",
               "constexpr", "inline", "thread_local", "typename")
_ELABORATED = ("struct", "class", "enum", "union")
# Alias chains longer than this (or cyclic ones) resolve to a plain descriptor.
MAX_ALIAS_DEPTH = 8

INTEGER_WIDTHS: dict[str, int] = {
    "short": 16, "short int": 16, "signed short": 16, "signed short int": 16,
    "unsigned short": 16, "unsigned short int": 16,
    "int": 32, "signed": 32, "signed int": 32, "unsigned": 32, "unsigned int": 32,
    "long": 64, "long int": 64, "signed long": 64, "signed long int": 64,
    "unsigned long": 64, "unsigned long int": 64,
    "long long": 64, "long long int": 64, "signed long long": 64,
    "unsigned long long": 64, "unsigned long long int": 64,
    "int8_t": 8, "uint8_t": 8, "int16_t": 16, "uint16_t": 16,
    "int32_t": 32, "uint32_t": 32, "int64_t": 64, "uint64_t": 64,
    "size_t": 64, "ssize_t": 64, "ptrdiff_t": 64, "intptr_t": 64, "uintptr_t": 64,
}

# Builtins that never take part in integer arithmetic checks.
OTHER_BUILTINS = frozenset({
    "char", "signed char", "unsigned char", "wchar_t", "char8_t", "char16_t",
    "char32_t", "bool", "_Bool", "float", "double", "long double", "void",
})

_SMART_POINTER_RE = re.compile(r"^(?:std::)?(unique_ptr|shared_ptr|weak_ptr|auto_ptr)\s*<")
_OWNING_SPELLING_RE = re.compile(r"\b(unique_ptr|shared_ptr|weak_ptr|auto_ptr)\b")
_CONTAINER_RE = re.compile(
    r"^(?:std::)?(vector|string|wstring|basic_string|map|multimap|set|multiset|"
    r"list|forward_list|deque|unordered_map|unordered_set|array)\b"
)
_ARRAY_SUFFIX_RE = re.compile(r"\[\s*([^\]]*)\s*\]$")
_CONST_RE = re.compile(r"(?<![\w:])(const|constexpr)(?![\w:])")
_STRING_RE = re.compile(r"^(?:std::)?(string|basic_string<char>)$")
_WSTRING_RE = re.compile(r"^(?:std::)?wstring$")


def template_arguments(spelling: str) -> list[str]:
    """Top-level template arguments: ``map<int, vector<int>>`` -> ``["int", "vector<int>"]``."""
    start = spelling.find("<")
    if start < 0 or not spelling.endswith(">"):
        return []
    args: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in spelling[start + 1:-1]:
        if ch == "<":
            depth += 1
        elif ch == ">":
            depth -= 1
        elif ch == "," and depth == 0:
            args.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    if current:
        args.append("".join(current).strip())
    return [arg for arg in args if arg]


@dataclass(frozen=True)
class RecordInfo:
    """A class/struct declared in the translation unit."""

    name: str
    field_count: int
    has_default_constructor: bool = True


@dataclass(frozen=True)
class TypeInfo:
    """Descriptor of a C/C++ type."""

    spelling: str
    base_name: str = ""
    is_pointer: bool = False
    is_reference: bool = False
    is_builtin: bool = False
    integer_width: Optional[int] = None
    is_array: bool = False
    array_size: Optional[int] = None
    is_record: bool = False
    field_count: Optional[int] = None
    has_default_constructor: bool = False
    is_owning_pointer: bool = False
    is_const: bool = False
    pointee: Optional[str] = None

    @property
    def is_integer(self) -> bool:
        return self.integer_width is not None and not (
            self.is_pointer or self.is_reference or self.is_array
        )

    @property
    def is_container(self) -> bool:
        return bool(_CONTAINER_RE.match(self.base_name or self.spelling))

    @property
    def is_builtin_or_pointer(self) -> bool:
        return self.is_pointer or (self.is_builtin and not self.is_array)

    def spelled_owning(self) -> bool:
        """Fallback for aliases the resolver could not see through."""
        return bool(_OWNING_SPELLING_RE.search(self.spelling))

    def pointer_to(self) -> "TypeInfo":
        """Descriptor of a pointer to this type."""
        return TypeInfo(
            spelling=f"{self.spelling}*",
            base_name=self.base_name,
            is_pointer=True,
            is_builtin=False,
            pointee=self.spelling,
        )

    def element_type(self, resolver: Optional["TypeResolver"] = None) -> "TypeInfo":
        """Element type of an array or container, or pointee of a pointer."""
        resolver = resolver or TypeResolver()
        if self.is_array or self.is_pointer:
            return resolver.resolve(self.pointee or self.base_name or self.spelling)
        base = self.base_name or self.spelling
        if _STRING_RE.match(base):
            return resolver.resolve("char")
        if _WSTRING_RE.match(base):
            return resolver.resolve("wchar_t")
        args = template_arguments(base)
        if self.is_container and args:
            if re.match(r"^(?:std::)?(unordered_)?(multi)?map\b", base) and len(args) >= 2:
                return resolver.resolve(f"std::pair<const {args[0]}, {args[1]}>")
            return resolver.resolve(args[0])
        return TypeInfo(spelling="auto")


def _normalize(spelling: str) -> str:
    spelling = re.sub(r"\s+", " ", spelling.strip())
    spelling = re.sub(r"\s*([*&<>,\[\]])\s*", r"\1", spelling)
    return spelling.replace(",", ", ")


def _strip_words(spelling: str, words: tuple[str, ...]) -> tuple[str, bool]:
    found = False
    for word in words:
        pattern = re.compile(rf"(?<![\w:]){word}(?![\w:])")
        if pattern.search(spelling):
            found = True
            spelling = pattern.sub("", spelling)
    return re.sub(r"\s+", " ", spelling).strip(), found


class TypeResolver:
    """
    Turns type spellings into TypeInfo descriptors.

    Records and aliases are registered as the front-end encounters their
    declarations, so lookups reflect what is visible at that point.
    """

    def __init__(self) -> None:
        self.records: dict[str, RecordInfo] = {}
        self.aliases: dict[str, str] = {}

    def add_record(self, record: RecordInfo) -> None:
        self.records[record.name] = record

    def add_alias(self, name: str, target: str) -> None:
        self.aliases[name] = target

    def resolve(self, spelling: str, array_size: Optional[int] = None, _depth: int = 0) -> TypeInfo:
        """
        Build a descriptor for ``spelling``.

        Args:
            spelling: Type as written, e.g. "const unsigned short", "char[16]"
            array_size: Explicit array extent when the declarator carried it

        Returns:
            TypeInfo for the spelling (unknown names yield a plain descriptor)
        """
        text = _normalize(spelling)
        canonical = text

        # Declarator suffixes: array extent, then pointer / reference.
        is_array = False
        match = _ARRAY_SUFFIX_RE.search(text)
        if match:
            is_array = True
            extent = match.group(1).strip()
            if array_size is None and extent.isdigit():
                array_size = int(extent)
            text = text[: match.start()].strip()
        elif array_size is not None:
            is_array = True
            canonical = f"{text}[{array_size}]"

        text, _ = _strip_words(text, ("const", "volatile"))
        is_pointer = False
        is_reference = False
        if not is_array:
            if text.endswith("&"):
                is_reference = True
                text = text.rstrip("&").strip()
            if text.endswith("*"):
                is_pointer = True
                text = text[:-1].strip()
                text, _ = _strip_words(text, ("const", "volatile"))

        base, _ = _strip_words(text, _QUALIFIERS)
        base, _ = _strip_words(base, _ELABORATED)
        is_const = bool(_CONST_RE.search(canonical))

        if is_pointer:
            return TypeInfo(
                spelling=canonical,
                base_name=base,
                is_pointer=True,
                is_reference=is_reference,
                is_const=is_const,
                pointee=base,
                is_owning_pointer=False,
            )

        info = self._resolve_base(base, _depth)
        return replace(
            info,
            spelling=canonical,
            base_name=base,
            is_reference=is_reference,
            is_array=is_array,
            array_size=array_size if is_array else None,
            is_const=is_const,
            # An array is an aggregate: its element width is not the variable's.
            integer_width=None if is_array else info.integer_width,
            pointee=base if is_array else info.pointee,
        )

    def _resolve_base(self, base: str, _depth: int = 0) -> TypeInfo:
        unqualified = base[5:] if base.startswith("std::") else base
        if unqualified in INTEGER_WIDTHS:
            return TypeInfo(spelling=base, is_builtin=True, integer_width=INTEGER_WIDTHS[unqualified])
        if base in OTHER_BUILTINS:
            return TypeInfo(spelling=base, is_builtin=True)

        if _SMART_POINTER_RE.match(base):
            return TypeInfo(
                spelling=base,
                is_record=True,
                has_default_constructor=True,
                is_owning_pointer=True,
            )
        if _CONTAINER_RE.match(base):
            return TypeInfo(spelling=base, is_record=True, has_default_constructor=True)

        if base in self.aliases and _depth < MAX_ALIAS_DEPTH:
            target = self.resolve(self.aliases[base], _depth=_depth + 1)
            return replace(target, spelling=base)

        record = self.records.get(base) or self.records.get(base.rsplit("::", 1)[-1])
        if record is not None:
            return TypeInfo(
                spelling=base,
                is_record=True,
                field_count=record.field_count,
                has_default_constructor=record.has_default_constructor,
            )
        return TypeInfo(spelling=base)


_default_resolver = TypeResolver()


def resolve_type(spelling: str, array_size: Optional[int] = None) -> TypeInfo:
    """Resolve a spelling without any translation-unit context."""
    return _default_resolver.resolve(spelling, array_size)


INT_TYPE = resolve_type("int")
LONG_TYPE = resolve_type("long")
BOOL_TYPE = resolve_type("bool")
CHAR_POINTER_TYPE = resolve_type("const char*")
NULLPTR_TYPE = TypeInfo(spelling="std::nullptr_t", is_builtin=True)
