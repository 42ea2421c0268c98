"""
cppreview - static review of C and C++ sources.

Parses each translation unit with tree-sitter, runs structural defect rules
and an intra-procedural taint analysis over it, and collects the findings
as issues.
"""

__version__ = "1.0.0"

from cppreview.core.config import ReviewConfig

__all__ = ["__version__", "ReviewConfig"]
