"""Front-end: tree-sitter parsing and syntax tree conversion."""

from cppreview.context.tree_converter import TreeConverter, convert_tree, parse_int_literal, parse_source
from cppreview.context.tree_sitter_parser import (
    LANGUAGE_EXTENSIONS,
    FrontendError,
    TreeSitterParser,
)

__all__ = [
    "FrontendError",
    "LANGUAGE_EXTENSIONS",
    "TreeConverter",
    "TreeSitterParser",
    "convert_tree",
    "parse_int_literal",
    "parse_source",
]
