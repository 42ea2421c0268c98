"""
C/C++ parsing using Tree-sitter.

Detects C/C++ sources by extension and parses them with the tree-sitter C++
grammar, which also accepts the C code found in mixed projects. Failures are
raised as FrontendError so the caller can mark the translation unit failed
and move on.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from cppreview.utils.logging import ComponentLogger

LANGUAGE_EXTENSIONS: dict[str, str] = {
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".hh": "cpp",
    ".hxx": "cpp",
    ".c++": "cpp",
    ".h++": "cpp",
    ".ipp": "cpp",
}


class FrontendError(Exception):
    """A translation unit could not be turned into a syntax tree."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        self.path = path
        if path:
            message = f"{message}\nPath: {path}"
        super().__init__(message)


class TreeSitterParser:
    """Tree-sitter front-end for C and C++."""

    def __init__(self) -> None:
        self.logger = ComponentLogger("tree_sitter", parent="context")
        self._parser: Optional[Any] = None

    def _get_parser(self) -> Any:
        """
        Get or create the C++ parser.

        Raises:
            FrontendError: If the tree-sitter grammar is not installed
        """
        if self._parser is None:
            try:
                import tree_sitter_cpp
                from tree_sitter import Language, Parser
            except ImportError as e:
                raise FrontendError(f"tree-sitter C++ grammar is not available: {e}") from e

            self._parser = Parser(Language(tree_sitter_cpp.language()))
            self.logger.debug("Loaded tree-sitter C++ parser")
        return self._parser

    def detect_language(self, file_path: Path) -> Optional[str]:
        """
        Detect language from file extension.

        Returns:
            "c" or "cpp", or None if the file is not C/C++
        """
        return LANGUAGE_EXTENSIONS.get(file_path.suffix.lower())

    def is_supported(self, file_path: Path) -> bool:
        return self.detect_language(file_path) is not None

    def parse_bytes(self, content: bytes, file_path: Optional[Path] = None) -> Any:
        """
        Parse source bytes into a tree-sitter tree.

        Raises:
            FrontendError: If the parser fails
        """
        parser = self._get_parser()
        try:
            tree = parser.parse(content)
        except Exception as e:
            raise FrontendError(f"Failed to parse source: {e}", file_path) from e

        if tree.root_node.has_error:
            self.logger.debug("Source contains syntax errors", file=str(file_path or "<memory>"))
        return tree

    def parse_string(self, content: str, file_path: Optional[Path] = None) -> Any:
        return self.parse_bytes(content.encode("utf-8"), file_path)

    def parse_file(self, file_path: Path) -> tuple[Any, bytes]:
        """
        Parse a single file.

        Returns:
            The tree-sitter tree and the raw file content

        Raises:
            FrontendError: If the file cannot be read or parsed
        """
        try:
            content = file_path.read_bytes()
        except OSError as e:
            raise FrontendError(f"Cannot read file: {e}", file_path) from e
        tree = self.parse_bytes(content, file_path)
        self.logger.debug(f"Parsed {file_path}", language=self.detect_language(file_path))
        return tree, content

    def get_extensions(self) -> list[str]:
        return list(LANGUAGE_EXTENSIONS)
