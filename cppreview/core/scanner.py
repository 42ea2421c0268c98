"""
File discovery and per-unit analysis driver for cppreview.

Each translation unit is parsed, converted and run through its own
RuleEngine and IssueSink. A unit whose front-end fails is recorded as failed
and the batch continues. With more than one worker, units are analyzed in a
process pool and the results are merged back in file order.
"""

from __future__ import annotations

import fnmatch
import os
import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from cppreview.analysis.rule_engine import RuleOutcome, create_default_engine
from cppreview.context.tree_converter import convert_tree
from cppreview.context.tree_sitter_parser import FrontendError, TreeSitterParser
from cppreview.core.config import ReviewConfig
from cppreview.models.base import Severity
from cppreview.models.issue import Issue, IssueSink
from cppreview.utils.logging import get_logger, get_unit_logger

logger = get_logger("scanner", parent="core")

# Directories never descended into.
DEFAULT_EXCLUDED_DIRS = frozenset({
    ".git", ".svn", ".hg", "__pycache__", "node_modules", ".cppreview_cache",
})


@dataclass
class UnitResult:
    """Outcome of analyzing one translation unit."""

    file_path: Path
    issues: list[Issue] = field(default_factory=list)
    outcomes: list[RuleOutcome] = field(default_factory=list)
    failed: bool = False
    error: Optional[str] = None
    duration_ms: float = 0.0

    @property
    def failed_rules(self) -> list[str]:
        return [outcome.rule_id for outcome in self.outcomes if not outcome.succeeded]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "file_path": str(self.file_path),
            "failed": self.failed,
            "error": self.error,
            "issues": len(self.issues),
            "failed_rules": self.failed_rules,
            "duration_ms": round(self.duration_ms, 2),
        }


@dataclass
class ScanResult:
    """Merged results of a scan, units in file order."""

    units: list[UnitResult] = field(default_factory=list)
    rule_count: int = 0
    duration_ms: float = 0.0

    @property
    def issues(self) -> list[Issue]:
        return [issue for unit in self.units for issue in unit.issues]

    @property
    def failed_units(self) -> list[UnitResult]:
        return [unit for unit in self.units if unit.failed]

    @property
    def files_scanned(self) -> int:
        return len(self.units)

    @property
    def all_failed(self) -> bool:
        return bool(self.units) and len(self.failed_units) == len(self.units)

    def count_at_or_above(self, severity: Severity) -> int:
        return sum(1 for issue in self.issues if issue.severity >= severity)

    def counts_by_severity(self) -> dict[Severity, int]:
        counts = {sev: 0 for sev in Severity}
        for issue in self.issues:
            counts[issue.severity] += 1
        return counts

    def counts_by_rule(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for issue in self.issues:
            counts[issue.rule_id] = counts.get(issue.rule_id, 0) + 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "files_scanned": self.files_scanned,
            "rule_count": self.rule_count,
            "duration_ms": round(self.duration_ms, 2),
            "summary": {
                "total": len(self.issues),
                "by_severity": {sev.value: n for sev, n in self.counts_by_severity().items()},
                "by_rule": self.counts_by_rule(),
            },
            "issues": [issue.to_dict() for issue in self.issues],
            "failed_units": [unit.to_dict() for unit in self.failed_units],
        }


class Scanner:
    """
    Discovers C/C++ files and analyzes them one translation unit at a time.

    Example:
        scanner = Scanner(ReviewConfig.load())
        result = scanner.scan([Path("src")])
    """

    def __init__(self, config: Optional[ReviewConfig] = None) -> None:
        self.config = config or ReviewConfig()
        self.parser = TreeSitterParser()
        self.max_file_size = self.config.analysis.max_file_size_mb * 1024 * 1024

    @property
    def rule_count(self) -> int:
        return create_default_engine(self.config.analysis).count()

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def discover_files(self, paths: Iterable[Union[str, Path]]) -> list[Path]:
        """
        Collect the C/C++ files under ``paths``.

        Files given explicitly are kept even when their extension is not a
        C/C++ one; directories are walked in sorted order.

        Returns:
            Unique files in discovery order
        """
        files: list[Path] = []
        seen: set[Path] = set()

        def add(path: Path) -> None:
            resolved = path.resolve()
            if resolved not in seen:
                seen.add(resolved)
                files.append(path)

        for root in (Path(p) for p in paths):
            if root.is_file():
                if not self._is_excluded(root):
                    add(root)
                continue
            if not root.is_dir():
                logger.warning("Path does not exist", path=str(root))
                continue

            for dirpath, dirnames, filenames in os.walk(root):
                current_dir = Path(dirpath)
                dirnames[:] = sorted(
                    d for d in dirnames
                    if d not in DEFAULT_EXCLUDED_DIRS and not self._is_excluded(current_dir / d)
                )
                for filename in sorted(filenames):
                    file_path = current_dir / filename
                    if self._should_scan_file(file_path):
                        add(file_path)

        logger.info(f"Discovered {len(files)} files")
        return files

    def _should_scan_file(self, file_path: Path) -> bool:
        if not self.parser.is_supported(file_path):
            return False
        if self._is_excluded(file_path):
            return False
        try:
            if file_path.stat().st_size > self.max_file_size:
                logger.debug("Skipping oversized file", path=str(file_path))
                return False
        except OSError:
            return False
        return True

    def _is_excluded(self, path: Path) -> bool:
        path_str = path.as_posix()
        for pattern in self.config.analysis.exclude_patterns:
            if "*" in pattern or "?" in pattern:
                # "**/build/**" should also match a relative "build/x.c".
                if fnmatch.fnmatch(path_str, pattern) or fnmatch.fnmatch("/" + path_str, pattern):
                    return True
                if fnmatch.fnmatch(path_str + "/", pattern) or fnmatch.fnmatch("/" + path_str + "/", pattern):
                    return True
            elif pattern in path_str:
                return True
        return False

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def analyze_source(self, code: Union[str, bytes], file_path: Union[str, Path] = "input.cpp") -> UnitResult:
        """Analyze source held in memory as one translation unit."""
        source = code.encode("utf-8") if isinstance(code, str) else code
        return self._analyze(source, Path(file_path))

    def analyze_file(self, path: Union[str, Path]) -> UnitResult:
        """Analyze one file; read failures yield a failed UnitResult."""
        path = Path(path)
        try:
            source = path.read_bytes()
        except OSError as e:
            error = str(FrontendError(f"Cannot read file: {e}", path))
            get_unit_logger(path).unit_failed(error)
            return UnitResult(file_path=path, failed=True, error=error)
        return self._analyze(source, path)

    def _analyze(self, source: bytes, path: Path) -> UnitResult:
        unit_logger = get_unit_logger(path)
        start = time.perf_counter()
        try:
            ts_tree = self.parser.parse_bytes(source, path)
            if ts_tree.root_node.has_error:
                if self.config.analysis.strict_parse:
                    raise FrontendError("Source contains syntax errors", path)
                unit_logger.warning("Source contains syntax errors; analyzing the recovered tree")
            tree = convert_tree(ts_tree, source, path)
        except FrontendError as e:
            unit_logger.unit_failed(str(e))
            return UnitResult(
                file_path=path,
                failed=True,
                error=str(e),
                duration_ms=(time.perf_counter() - start) * 1000,
            )

        sink = IssueSink(self.config.analysis.severity_overrides())
        engine = create_default_engine(self.config.analysis)
        outcomes = engine.run_all(tree, sink)
        duration_ms = (time.perf_counter() - start) * 1000
        unit_logger.unit_complete(len(sink), duration_ms, rules=engine.count())
        return UnitResult(
            file_path=path,
            issues=sink.all(),
            outcomes=outcomes,
            duration_ms=duration_ms,
        )

    def scan(self, paths: Iterable[Union[str, Path]]) -> ScanResult:
        """
        Discover and analyze every C/C++ file under ``paths``.

        Returns:
            ScanResult with units in discovery order
        """
        start = time.perf_counter()
        files = self.discover_files(paths)
        workers = self.config.analysis.workers

        if workers > 1 and len(files) > 1:
            logger.info("Analyzing in process pool", workers=workers, files=len(files))
            config_data = self.config.model_dump(mode="json")
            with ProcessPoolExecutor(max_workers=workers) as executor:
                units = list(executor.map(_analyze_in_worker, [config_data] * len(files), files))
        else:
            units = [self.analyze_file(path) for path in files]

        result = ScanResult(
            units=units,
            rule_count=self.rule_count,
            duration_ms=(time.perf_counter() - start) * 1000,
        )
        logger.info(
            "Scan complete",
            files=result.files_scanned,
            issues=len(result.issues),
            failed=len(result.failed_units),
        )
        return result


def _analyze_in_worker(config_data: dict[str, Any], path: Path) -> UnitResult:
    return Scanner(ReviewConfig(**config_data)).analyze_file(path)
