"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from cppreview.ast.builder import TreeBuilder
from cppreview.models.issue import IssueSink

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def b() -> TreeBuilder:
    """Builder for hand-made syntax trees."""
    return TreeBuilder("test.cpp")


@pytest.fixture
def sink() -> IssueSink:
    return IssueSink()


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def sample_cpp_file(tmp_path):
    """Create a small C++ file with one defect of each common kind."""
    code = '''#include <cstdlib>
#include <cstring>

int main() {
    int* p = nullptr;
    *p = 1;
    char buf[8];
    strcpy(buf, "hello");
    return 0;
}
'''
    file_path = tmp_path / "sample.cpp"
    file_path.write_text(code)
    return file_path


@pytest.fixture
def clean_cpp_file(tmp_path):
    """Create a C++ file without findings."""
    code = '''int add(int a, int b) {
    return a + b;
}
'''
    file_path = tmp_path / "clean.cpp"
    file_path.write_text(code)
    return file_path


@pytest.fixture
def run_rule():
    """Run one rule over a tree and return the recorded issues."""

    def run(rule, tree):
        sink = IssueSink()
        rule.check(tree, sink)
        return sink.all()

    return run
