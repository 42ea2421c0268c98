"""
Centralized structured logging for cppreview.

Provides:
- Rich console output with colors and formatting
- Optional JSON format for machine parsing
- File logging with rotation
- Component-aware logging with key=value context
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler

# Log output goes to stderr so reports on stdout stay machine readable.
console = Console(stderr=True)

DEFAULT_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
ROOT_LOGGER = "cppreview"


class JSONFormatter(logging.Formatter):
    """Format log records as JSON for machine parsing."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "context"):
            log_data["context"] = record.context

        return json.dumps(log_data, default=str)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    json_format: bool = False,
    max_file_size_mb: int = 10,
    backup_count: int = 5,
) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path for file logging
        json_format: Use JSON format for log output
        max_file_size_mb: Maximum log file size before rotation
        backup_count: Number of backup files to keep

    Returns:
        Configured package logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()

    if json_format:
        console_handler: logging.Handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler = RichHandler(
            console=console,
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
        console_handler.setFormatter(logging.Formatter("%(message)s"))

    console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        if json_format:
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))

        file_handler.setLevel(logging.DEBUG)  # File gets all messages
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


class ComponentLogger:
    """
    Logger with component context for structured logging.

    Keyword context passed to any method is appended to the message as
    ``key=value`` pairs and attached to the record as ``context``.
    """

    def __init__(self, component: str, parent: Optional[str] = None):
        """
        Initialize a component logger.

        Args:
            component: Name of the component (e.g., "rule_engine", "taint")
            parent: Optional parent component for hierarchical logging
        """
        self.component = component
        logger_name = f"{ROOT_LOGGER}.{parent}.{component}" if parent else f"{ROOT_LOGGER}.{component}"
        self._logger = logging.getLogger(logger_name)

    def _format_message(self, msg: str, **context: Any) -> str:
        if context:
            context_str = " | ".join(f"{k}={v}" for k, v in context.items())
            return f"{msg} | {context_str}"
        return msg

    def _add_context(self, **context: Any) -> dict[str, Any]:
        return {"component": self.component, **context}

    def debug(self, msg: str, **context: Any) -> None:
        extra = {"context": self._add_context(**context)}
        self._logger.debug(self._format_message(msg, **context), extra=extra)

    def info(self, msg: str, **context: Any) -> None:
        extra = {"context": self._add_context(**context)}
        self._logger.info(self._format_message(msg, **context), extra=extra)

    def warning(self, msg: str, **context: Any) -> None:
        extra = {"context": self._add_context(**context)}
        self._logger.warning(self._format_message(msg, **context), extra=extra)

    def error(self, msg: str, exc: Optional[BaseException] = None, **context: Any) -> None:
        """Log error message with optional exception."""
        extra = {"context": self._add_context(**context)}
        self._logger.error(
            self._format_message(msg, **context),
            exc_info=exc if exc is not None else None,
            extra=extra,
        )

    def exception(self, msg: str, **context: Any) -> None:
        """Log exception with traceback."""
        extra = {"context": self._add_context(**context)}
        self._logger.exception(self._format_message(msg, **context), extra=extra)


class UnitLogger(ComponentLogger):
    """Logger bound to one translation unit."""

    def __init__(self, file_path: Path):
        super().__init__("unit", parent="scanner")
        self.file_path = str(file_path)

    def _add_context(self, **context: Any) -> dict[str, Any]:
        return {"file": self.file_path, **super()._add_context(**context)}

    def unit_complete(self, issues: int, duration_ms: float, **context: Any) -> None:
        self.debug(
            "Analyzed translation unit",
            file=self.file_path,
            issues=issues,
            duration_ms=round(duration_ms, 2),
            **context,
        )

    def unit_failed(self, error: str, **context: Any) -> None:
        self.warning("Analysis failed for translation unit", file=self.file_path, error=error, **context)


def get_logger(component: str, parent: Optional[str] = None) -> ComponentLogger:
    """
    Factory function to get a component logger.

    Args:
        component: Name of the component
        parent: Optional parent component name

    Returns:
        ComponentLogger instance
    """
    return ComponentLogger(component, parent)


def get_unit_logger(file_path: Path) -> UnitLogger:
    return UnitLogger(file_path)
