"""Utility modules for logging."""

from cppreview.utils.logging import ComponentLogger, get_logger, setup_logging

__all__ = ["setup_logging", "ComponentLogger", "get_logger"]
