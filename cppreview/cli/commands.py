"""
CLI commands for cppreview.

Provides the main command-line interface using Click.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from cppreview import __version__
from cppreview.analysis.rule_engine import KNOWN_RULE_IDS, create_default_engine, default_rules
from cppreview.core.config import PROJECT_CONFIG_NAME, ReviewConfig, validate_config
from cppreview.core.scanner import Scanner, ScanResult
from cppreview.models.base import Severity
from cppreview.reporting.base import ReportConfig, ReporterRegistry, ReportMetadata
from cppreview.reporting.console import ConsoleReporter
from cppreview.utils.logging import setup_logging

console = Console()
err_console = Console(stderr=True)

# Exit codes
EXIT_SUCCESS = 0
EXIT_ISSUES = 1
EXIT_CONFIG_ERROR = 2
EXIT_RUNTIME_ERROR = 3

SEVERITY_CHOICES = [sev.value for sev in Severity]


@click.group()
@click.version_option(version=__version__, prog_name="cppreview")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output (DEBUG level)")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output (ERROR level)")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    help="Write logs to file",
)
@click.option("--json-logs", is_flag=True, help="Output logs in JSON format")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    log_file: Optional[Path],
    json_logs: bool,
) -> None:
    """cppreview - static review of C and C++ sources.

    Runs structural defect rules and a taint analysis over each
    translation unit and reports the issues found.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["log_file"] = log_file
    ctx.obj["json_logs"] = json_logs

    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "ERROR"
    else:
        level = "WARNING"

    setup_logging(
        level=level,
        log_file=log_file,
        json_format=json_logs,
    )


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@click.option(
    "-f",
    "--format",
    "output_format",
    type=click.Choice(["console", "json"]),
    help="Output format",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    help="Write the report to a file",
)
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Configuration file path",
)
@click.option(
    "--fail-on",
    type=click.Choice(SEVERITY_CHOICES + ["none"]),
    help="Exit with code 1 if issues >= severity (default: critical)",
)
@click.option(
    "--min-severity",
    type=click.Choice(SEVERITY_CHOICES),
    help="Only report issues at or above this severity",
)
@click.option(
    "--disable",
    multiple=True,
    help="Rule identifier to disable (can be specified multiple times)",
)
@click.option(
    "--exclude",
    multiple=True,
    help="Glob patterns to exclude (can be specified multiple times)",
)
@click.option("--workers", type=click.IntRange(min=1), help="Number of worker processes")
@click.option("--strict", is_flag=True, help="Treat syntax errors as unit failures")
@click.pass_context
def scan(
    ctx: click.Context,
    paths: tuple[Path, ...],
    output_format: Optional[str],
    output: Optional[Path],
    config: Optional[Path],
    fail_on: Optional[str],
    min_severity: Optional[str],
    disable: tuple[str, ...],
    exclude: tuple[str, ...],
    workers: Optional[int],
    strict: bool,
) -> None:
    """Scan C/C++ files or directories.

    PATHS are the files and directories to analyze.

    Examples:

        cppreview scan src/

        cppreview scan main.cpp util.c --format json -o report.json

        cppreview scan . --disable UNINIT-VAR-001 --fail-on high
    """
    cli_args = {
        "format": output_format,
        "output": output,
        "fail_on": fail_on,
        "disable": disable,
        "exclude": exclude,
        "workers": workers,
        "strict": strict,
        "verbose": ctx.obj.get("verbose"),
        "quiet": ctx.obj.get("quiet"),
        "log_file": ctx.obj.get("log_file"),
        "json_logs": ctx.obj.get("json_logs"),
    }

    try:
        project_path = paths[0] if paths[0].is_dir() else paths[0].parent
        cfg = ReviewConfig.load(cli_args=cli_args, project_path=project_path, config_file=config)
        for warning in validate_config(cfg):
            err_console.print(f"[yellow]Warning:[/] {warning}")
    except (ValidationError, ValueError, OSError) as e:
        err_console.print(f"[red]Configuration error:[/] {e}")
        sys.exit(EXIT_CONFIG_ERROR)

    setup_logging(
        level=cfg.logging.level,
        log_file=cfg.logging.file,
        json_format=cfg.logging.json_format,
        max_file_size_mb=cfg.logging.max_file_size_mb,
        backup_count=cfg.logging.backup_count,
    )

    try:
        result = Scanner(cfg).scan(paths)
    except Exception as e:
        err_console.print(f"\n[red]Scan failed:[/] {e}")
        if ctx.obj.get("verbose"):
            import traceback
            err_console.print(traceback.format_exc())
        sys.exit(EXIT_RUNTIME_ERROR)

    try:
        _write_report(result, cfg, paths, min_severity, quiet=ctx.obj.get("quiet", False))
    except OSError as e:
        err_console.print(f"[red]Cannot write report:[/] {e}")
        sys.exit(EXIT_RUNTIME_ERROR)

    sys.exit(_exit_code(result, cfg))


def _write_report(
    result: ScanResult,
    cfg: ReviewConfig,
    paths: tuple[Path, ...],
    min_severity: Optional[str],
    quiet: bool,
) -> None:
    report_config = ReportConfig(
        include_code_snippets=cfg.reporting.include_code_snippets,
        min_severity=Severity.from_string(min_severity) if min_severity else None,
        output_path=cfg.reporting.output,
    )
    metadata = ReportMetadata(tool_version=__version__, targets=[str(p) for p in paths])

    if cfg.reporting.format == "console" and cfg.reporting.output is None:
        if not quiet:
            ConsoleReporter(report_config, metadata, console=console).display(result)
        return

    reporter = ReporterRegistry.create(cfg.reporting.format, report_config, metadata)
    if reporter is None:
        raise ValueError(f"No reporter for format: {cfg.reporting.format}")
    if cfg.reporting.output is None:
        click.echo(reporter.generate(result))
        return
    written = reporter.write(result)
    if not quiet:
        err_console.print(f"[green]Report written:[/] {written}")


def _exit_code(result: ScanResult, cfg: ReviewConfig) -> int:
    if result.all_failed:
        return EXIT_RUNTIME_ERROR
    threshold = cfg.reporting.fail_severity()
    if threshold is not None and result.count_at_or_above(threshold) > 0:
        return EXIT_ISSUES
    return EXIT_SUCCESS


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print the table as JSON")
def rules(as_json: bool) -> None:
    """List the analysis rules and their identifiers.

    Rules are listed in execution order, which is also the order their
    issues appear in reports.
    """
    table_rows = create_default_engine().rule_table()
    if as_json:
        import json

        click.echo(json.dumps([row.to_dict() for row in table_rows], indent=2))
        return

    table = Table(title="Analysis Rules")
    table.add_column("Identifier", style="cyan", no_wrap=True)
    table.add_column("Name", style="green")
    table.add_column("Description")
    for row in table_rows:
        table.add_row(row.rule_id, row.name, row.description)
    console.print(table)


@cli.command()
def version() -> None:
    """Show version and system information."""
    console.print(Panel.fit(
        f"[bold]cppreview[/] v{__version__}\n\n"
        "Static review of C and C++ sources",
        title="Version Info",
    ))

    import platform

    table = Table(title="System Information")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("Python", platform.python_version())
    table.add_row("Platform", platform.platform())
    table.add_row("Rules", str(len(default_rules())))
    table.add_row("tree-sitter", _package_version("tree-sitter"))
    table.add_row("tree-sitter-cpp", _package_version("tree-sitter-cpp"))

    console.print(table)


def _package_version(name: str) -> str:
    from importlib.metadata import PackageNotFoundError
    from importlib.metadata import version as distribution_version

    try:
        return distribution_version(name)
    except PackageNotFoundError:
        return "not installed"


@cli.command()
@click.argument("path", type=click.Path(path_type=Path), default=".")
@click.option("--force", is_flag=True, help="Overwrite existing configuration")
def init(path: Path, force: bool) -> None:
    """Initialize .cppreview.yml configuration in a directory.

    Creates a configuration file holding every option at its default.

    Examples:

        cppreview init

        cppreview init ./my-project --force
    """
    config_path = path / PROJECT_CONFIG_NAME

    if config_path.exists() and not force:
        console.print(f"[yellow]Configuration already exists:[/] {config_path}")
        console.print("Use --force to overwrite")
        return

    path.mkdir(parents=True, exist_ok=True)
    ReviewConfig().to_yaml(config_path)

    console.print(f"[green]Created configuration:[/] {config_path}")
    console.print(f"\nKnown rule identifiers: {', '.join(KNOWN_RULE_IDS)}")
    console.print("Run 'cppreview scan .' to analyze your sources.")
