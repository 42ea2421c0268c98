"""Command-line interface for cppreview."""

from cppreview.cli.commands import cli

__all__ = ["cli"]
