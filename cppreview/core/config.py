"""
Hierarchical configuration management for cppreview.

Configuration priority (highest to lowest):
1. CLI arguments
2. Environment variables (CPPREVIEW_*)
3. Project config (.cppreview.yml)
4. User config (~/.cppreview/config.yml)
5. Default values
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cppreview.models.base import Severity

PROJECT_CONFIG_NAME = ".cppreview.yml"
CPP_STANDARDS = ("c89", "c99", "c11", "c17", "c++11", "c++14", "c++17", "c++20", "c++23")


class AnalysisConfig(BaseModel):
    """Configuration for the rule engine and file discovery."""

    disabled_rules: list[str] = Field(default_factory=list)
    rule_severity: dict[str, str] = Field(default_factory=dict)
    cpp_standard: str = "c++17"
    max_taint_depth: int = 200
    small_array_threshold: int = 10
    expensive_field_threshold: int = 2
    exclude_patterns: list[str] = Field(
        default_factory=lambda: [
            "**/.git/**",
            "**/build/**",
            "**/cmake-build-*/**",
            "**/third_party/**",
            "**/vendor/**",
        ]
    )
    max_file_size_mb: int = 10
    workers: int = 1
    strict_parse: bool = False

    @field_validator("rule_severity")
    @classmethod
    def validate_rule_severity(cls, v: dict[str, str]) -> dict[str, str]:
        """Validate severity override values."""
        valid = {sev.value for sev in Severity}
        normalized: dict[str, str] = {}
        for rule_id, level in v.items():
            level = str(level).strip().lower()
            if level not in valid:
                raise ValueError(f"Invalid severity for {rule_id}: {level}. Must be one of {sorted(valid)}")
            normalized[rule_id] = level
        return normalized

    @field_validator("cpp_standard")
    @classmethod
    def validate_standard(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in CPP_STANDARDS:
            raise ValueError(f"Invalid language standard: {v}. Must be one of {CPP_STANDARDS}")
        return v_lower

    @field_validator("max_taint_depth", "small_array_threshold", "expensive_field_threshold", "workers")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("value must be at least 1")
        return v

    def severity_overrides(self) -> dict[str, Severity]:
        """Per-rule overrides as Severity values, for the IssueSink."""
        return {rule_id: Severity.from_string(level) for rule_id, level in self.rule_severity.items()}


class ReportingConfig(BaseModel):
    """Configuration for report generation."""

    format: str = "console"
    output: Optional[Path] = None
    fail_on: str = "critical"
    include_code_snippets: bool = True

    @field_validator("output", mode="before")
    @classmethod
    def validate_output(cls, v: Any) -> Optional[Path]:
        """Ensure output is a Path or None."""
        if v is None:
            return None
        if isinstance(v, str):
            return Path(v)
        return v

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate report format."""
        valid_formats = {"console", "json"}
        if v not in valid_formats:
            raise ValueError(f"Invalid format: {v}. Must be one of {valid_formats}")
        return v

    @field_validator("fail_on")
    @classmethod
    def validate_fail_on(cls, v: str) -> str:
        valid = {sev.value for sev in Severity} | {"none"}
        v_lower = v.strip().lower()
        if v_lower not in valid:
            raise ValueError(f"Invalid fail_on level: {v}. Must be one of {sorted(valid)}")
        return v_lower

    def fail_severity(self) -> Optional[Severity]:
        """Threshold that makes a scan fail, None when it never fails on issues."""
        if self.fail_on == "none":
            return None
        return Severity.from_string(self.fail_on)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "WARNING"
    file: Optional[Path] = None
    json_format: bool = False
    max_file_size_mb: int = 10
    backup_count: int = 5

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("file", mode="before")
    @classmethod
    def validate_file(cls, v: Any) -> Optional[Path]:
        """Ensure file is a Path or None."""
        if v is None:
            return None
        if isinstance(v, str):
            return Path(v)
        return v


class ReviewConfig(BaseSettings):
    """
    Main configuration model with hierarchical loading.

    Loads configuration from:
    1. Default values (lowest priority)
    2. User config file (~/.cppreview/config.yml)
    3. Project config file (.cppreview.yml)
    4. Environment variables (CPPREVIEW_*)
    5. CLI arguments (highest priority)
    """

    model_config = SettingsConfigDict(
        env_prefix="CPPREVIEW_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    reporting: ReportingConfig = Field(default_factory=ReportingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(
        cls,
        cli_args: Optional[dict[str, Any]] = None,
        project_path: Optional[Path] = None,
        config_file: Optional[Path] = None,
    ) -> ReviewConfig:
        """
        Load configuration from multiple sources with priority.

        Args:
            cli_args: Command-line arguments (highest priority)
            project_path: Directory holding .cppreview.yml
            config_file: Explicit config file, read instead of .cppreview.yml

        Returns:
            Merged configuration
        """
        config_dict: dict[str, Any] = {}
        project_path = project_path or Path.cwd()

        # 1. User config
        user_config_path = Path.home() / ".cppreview" / "config.yml"
        if user_config_path.exists():
            config_dict = _deep_merge(config_dict, _read_yaml(user_config_path))

        # 2. Project config (or the explicit file)
        project_config_path = config_file or project_path / PROJECT_CONFIG_NAME
        if project_config_path.exists():
            config_dict = _deep_merge(config_dict, _read_yaml(project_config_path))

        # 3. Environment variables are applied by pydantic-settings on instantiation.
        # Init kwargs take precedence over them, so file values that the
        # environment also sets are dropped here.
        config_dict = _drop_env_overridden(config_dict)

        # 4. CLI arguments
        if cli_args:
            config_dict = _deep_merge(config_dict, _flatten_cli_args(cli_args))

        return cls(**config_dict)

    def to_yaml(self, path: Path) -> None:
        """Write configuration to YAML file."""
        with open(path, "w") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)


def _read_yaml(path: Path) -> dict[str, Any]:
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _drop_env_overridden(config: dict[str, Any]) -> dict[str, Any]:
    env_keys = {key.upper() for key in os.environ}
    result: dict[str, Any] = {}
    for section, values in config.items():
        if isinstance(values, dict):
            kept = {
                key: value for key, value in values.items()
                if f"CPPREVIEW_{section}__{key}".upper() not in env_keys
            }
            result[section] = kept
        elif f"CPPREVIEW_{section}".upper() not in env_keys:
            result[section] = values
    return result


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary with values to override

    Returns:
        Merged dictionary
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _flatten_cli_args(args: dict[str, Any]) -> dict[str, Any]:
    """
    Convert flat CLI arguments to nested config structure.

    Examples:
        {"format": "json"} -> {"reporting": {"format": "json"}}
        {"disable": ("UNINIT-VAR-001",)} -> {"analysis": {"disabled_rules": ["UNINIT-VAR-001"]}}
    """
    result: dict[str, Any] = {}

    mappings = {
        "verbose": ("logging", "level", lambda v: "DEBUG" if v else None),
        "quiet": ("logging", "level", lambda v: "ERROR" if v else None),
        "log_file": ("logging", "file", Path),
        "json_logs": ("logging", "json_format", lambda v: True if v else None),
        "format": ("reporting", "format", str),
        "output": ("reporting", "output", Path),
        "fail_on": ("reporting", "fail_on", str),
        "disable": ("analysis", "disabled_rules", lambda v: list(v) if v else None),
        "exclude": ("analysis", "exclude_patterns", lambda v: list(v) if v else None),
        "workers": ("analysis", "workers", int),
        "strict": ("analysis", "strict_parse", lambda v: True if v else None),
        "config": None,  # Handled by load()
    }

    for key, value in args.items():
        if value is None:
            continue

        if key in mappings and mappings[key] is not None:
            section, subkey, transform = mappings[key]
            transformed = transform(value)
            if transformed is not None:
                result.setdefault(section, {})[subkey] = transformed
        elif key not in mappings:
            result[key] = value

    return result


def get_default_config() -> ReviewConfig:
    """Get configuration with all defaults."""
    return ReviewConfig()


def validate_config(config: ReviewConfig, known_rule_ids: Optional[tuple[str, ...]] = None) -> list[str]:
    """
    Validate configuration and return list of warnings.

    Returns:
        List of warning messages (empty if all valid)
    """
    if known_rule_ids is None:
        from cppreview.analysis.rule_engine import KNOWN_RULE_IDS

        known_rule_ids = KNOWN_RULE_IDS

    warnings: list[str] = []
    known = set(known_rule_ids)

    for rule_id in config.analysis.disabled_rules:
        if rule_id not in known:
            warnings.append(f"Unknown rule in disabled_rules: {rule_id}")
    for rule_id in config.analysis.rule_severity:
        if rule_id not in known:
            warnings.append(f"Unknown rule in rule_severity: {rule_id}")

    if known and known.issubset(config.analysis.disabled_rules):
        warnings.append("All rules are disabled; scans will report nothing")

    if config.reporting.format == "json" and config.reporting.output is None:
        warnings.append("JSON format without an output file; the report is written to stdout")

    return warnings
