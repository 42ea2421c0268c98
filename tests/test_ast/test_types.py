"""Tests for type descriptors and the type resolver."""

import pytest

from cppreview.ast.types import RecordInfo, TypeResolver, resolve_type, template_arguments


class TestResolveType:
    """Test spelling resolution without translation-unit context."""

    def test_integer_widths(self):
        assert resolve_type("int").integer_width == 32
        assert resolve_type("short").integer_width == 16
        assert resolve_type("unsigned long long").integer_width == 64
        assert resolve_type("std::size_t").integer_width == 64

    def test_const_integer(self):
        info = resolve_type("const unsigned short")
        assert info.is_integer
        assert info.is_const
        assert info.integer_width == 16

    def test_pointer(self):
        info = resolve_type("char *")
        assert info.is_pointer
        assert info.pointee == "char"
        assert not info.is_integer
        assert info.is_builtin_or_pointer

    def test_reference(self):
        info = resolve_type("const std::string&")
        assert info.is_reference
        assert info.is_container

    def test_array_with_extent(self):
        info = resolve_type("char[16]")
        assert info.is_array
        assert info.array_size == 16
        assert info.integer_width is None

    def test_array_with_explicit_size(self):
        info = resolve_type("int", array_size=4)
        assert info.is_array
        assert info.array_size == 4
        assert info.spelling == "int[4]"

    def test_smart_pointer_is_owning(self):
        info = resolve_type("std::unique_ptr<Widget>")
        assert info.is_owning_pointer
        assert info.is_record

    def test_unknown_name_is_plain(self):
        info = resolve_type("Mystery")
        assert not info.is_record
        assert not info.is_builtin


class TestTypeResolver:
    """Test resolution against declared records and aliases."""

    def test_record_lookup(self):
        resolver = TypeResolver()
        resolver.add_record(RecordInfo("Big", 5, has_default_constructor=False))
        info = resolver.resolve("const Big&")
        assert info.is_record
        assert info.field_count == 5
        assert not info.has_default_constructor
        assert info.is_reference

    def test_elaborated_record(self):
        resolver = TypeResolver()
        resolver.add_record(RecordInfo("Point", 2))
        assert resolver.resolve("struct Point").field_count == 2

    def test_alias_of_smart_pointer(self):
        resolver = TypeResolver()
        resolver.add_alias("WidgetPtr", "std::shared_ptr<Widget>")
        assert resolver.resolve("WidgetPtr").is_owning_pointer

    def test_alias_of_integer(self):
        resolver = TypeResolver()
        resolver.add_alias("u16", "unsigned short")
        assert resolver.resolve("u16").integer_width == 16

    def test_alias_chain(self):
        resolver = TypeResolver()
        resolver.add_alias("Small", "short")
        resolver.add_alias("Tiny", "Small")
        assert resolver.resolve("Tiny").integer_width == 16

    def test_alias_cycle_terminates(self):
        resolver = TypeResolver()
        resolver.add_alias("A", "B")
        resolver.add_alias("B", "A")
        info = resolver.resolve("A")
        assert not info.is_builtin
        assert info.integer_width is None

    def test_alias_cycle_in_source(self):
        pytest.importorskip("tree_sitter_cpp")
        from cppreview.context.tree_converter import parse_source

        tree = parse_source("using A = B;\nusing B = A;\nvoid f() { A value; }\n")
        assert [fn.name for fn in tree.functions()] == ["f"]


class TestElementType:
    """Test element types of arrays, pointers and containers."""

    def test_vector(self):
        assert resolve_type("std::vector<int>").element_type().integer_width == 32

    def test_string(self):
        assert resolve_type("std::string").element_type().spelling == "char"

    def test_array(self):
        assert resolve_type("short[4]").element_type().integer_width == 16

    def test_map_yields_pair(self):
        element = resolve_type("std::map<int, std::string>").element_type()
        assert element.base_name.startswith("std::pair")

    def test_template_arguments(self):
        assert template_arguments("map<int, vector<int>>") == ["int", "vector<int>"]
        assert template_arguments("int") == []
