"""
Classification tables for taint analysis.

Function names are classified as sources (where untrusted data enters),
sinks (where it must not arrive unchecked) and sanitizers (which make it
trusted again). Every table is an ordered list of categories, each with a
set of exact names and a tuple of keywords used for wrapper functions.

Matching is two-tier. Exact names are tried first across all categories,
then keywords. A keyword matches only a whole word of the name, where words
are separated at ``::``, ``_``, digits and camelCase boundaries, so
``executeQuery`` contains the word ``query`` but ``Requery`` does not. In
each tier the first category in table order wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Generic, Optional, Sequence, TypeVar

from cppreview.ast.nodes import unqualified
from cppreview.models.base import Severity
from cppreview.models.taint_flow import RiskType, TaintType

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")
_NON_LETTERS = re.compile(r"[^A-Za-z]+")


def split_words(name: str) -> list[str]:
    """
    Split an identifier into lowercase words.

    >>> split_words("executeQuery")
    ['execute', 'query']
    >>> split_words("HTTPRequest_v2")
    ['http', 'request', 'v']
    """
    spaced = _ACRONYM_BOUNDARY.sub(r"\1 \2", name)
    spaced = _CAMEL_BOUNDARY.sub(r"\1 \2", spaced)
    return [word.lower() for word in _NON_LETTERS.split(spaced.replace(" ", "_")) if word]


@dataclass(frozen=True)
class Category:
    """One classification category."""

    label: str
    exact: frozenset[str]
    keywords: tuple[str, ...] = ()

    def matches_exact(self, name: str) -> bool:
        return name in self.exact

    def matches_keyword(self, words: Sequence[str]) -> bool:
        return any(keyword in words for keyword in self.keywords)


@dataclass(frozen=True)
class SourceCategory(Category):
    taint_type: TaintType = TaintType.UNKNOWN


@dataclass(frozen=True)
class SinkCategory(Category):
    risk_type: RiskType = RiskType.GENERIC
    severity: Severity = Severity.MEDIUM


C = TypeVar("C", bound=Category)


class ClassificationTable(Generic[C]):
    """Ordered categories with exact-then-keyword lookup."""

    def __init__(self, categories: Sequence[C]) -> None:
        self.categories: tuple[C, ...] = tuple(categories)

    def classify(self, function_name: Optional[str]) -> Optional[C]:
        """
        Find the category of a function.

        Args:
            function_name: Callee name, qualified or not

        Returns:
            The first matching category, or None
        """
        if not function_name:
            return None
        name = unqualified(function_name)

        for category in self.categories:
            if category.matches_exact(name):
                return category

        words = split_words(name)
        for category in self.categories:
            if category.matches_keyword(words):
                return category
        return None

    def __contains__(self, function_name: object) -> bool:
        return isinstance(function_name, str) and self.classify(function_name) is not None

    def __iter__(self):
        return iter(self.categories)

    def __len__(self) -> int:
        return len(self.categories)


SOURCES: ClassificationTable[SourceCategory] = ClassificationTable([
    SourceCategory(
        "environment",
        frozenset({"getenv", "secure_getenv", "_wgetenv"}),
        taint_type=TaintType.ENVIRONMENT,
    ),
    SourceCategory(
        "user input",
        frozenset({"gets", "fgets", "getline", "scanf", "getchar", "getch", "read",
                   "readline", "getopt", "getopt_long", "cin"}),
        ("input", "read"),
        taint_type=TaintType.USER_INPUT,
    ),
    SourceCategory(
        "network",
        frozenset({"recv", "recvfrom", "recvmsg", "readv", "SSL_read", "accept", "accept4"}),
        ("recv",),
        taint_type=TaintType.NETWORK_DATA,
    ),
    SourceCategory(
        "file",
        frozenset({"fread", "fgetc", "getc", "fscanf", "readfile", "file_get_contents"}),
        taint_type=TaintType.FILE_DATA,
    ),
    SourceCategory(
        "database",
        frozenset({"mysql_fetch_row", "PQgetvalue", "sqlite3_column_text"}),
        taint_type=TaintType.DATABASE,
    ),
])

SINKS: ClassificationTable[SinkCategory] = ClassificationTable([
    SinkCategory(
        "sql",
        frozenset({"mysql_query", "mysql_real_query", "PQexec", "PQexecParams", "sqlite3_exec",
                   "sqlite3_prepare", "sqlite3_prepare_v2", "execute", "query", "executeQuery",
                   "executeSql", "executeUpdate"}),
        ("query", "sql"),
        risk_type=RiskType.SQL_INJECTION,
        severity=Severity.CRITICAL,
    ),
    SinkCategory(
        "command",
        frozenset({"system", "popen", "_popen", "exec", "execl", "execlp", "execle", "execv",
                   "execvp", "execvpe", "ShellExecute", "ShellExecuteA", "ShellExecuteW",
                   "WinExec", "CreateProcess"}),
        ("shell", "exec", "spawn"),
        risk_type=RiskType.COMMAND_INJECTION,
        severity=Severity.CRITICAL,
    ),
    SinkCategory(
        "path",
        frozenset({"fopen", "open", "openat", "creat", "freopen", "remove", "unlink", "rmdir",
                   "mkdir", "chmod", "rename"}),
        risk_type=RiskType.PATH_TRAVERSAL,
        severity=Severity.HIGH,
    ),
    SinkCategory(
        "format string",
        frozenset({"printf", "fprintf", "sprintf", "snprintf", "vprintf", "vfprintf", "vsprintf",
                   "syslog"}),
        risk_type=RiskType.GENERIC,
        severity=Severity.MEDIUM,
    ),
])

SANITIZERS: ClassificationTable[Category] = ClassificationTable([
    Category(
        "sanitizer",
        frozenset({"htmlspecialchars", "mysql_real_escape_string", "pg_escape_string",
                   "escapeshellarg", "realpath", "canonicalize"}),
        ("escape", "sanitize", "sanitise", "validate", "filter", "quote"),
    ),
])
