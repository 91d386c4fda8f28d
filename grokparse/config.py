from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError
from .render import OutputFormat


class RunConfig(BaseModel):
    """Settings for one grokparse run, from YAML and/or the command line."""
    pattern: str = Field(description="Grok template every line is matched against")
    inputs: list[str] = Field(default_factory=list, description="Input globs; empty or ['-'] reads stdin")
    output: Path | None = Field(default=None, description="Output file; errors go to '<output>.err'")
    patterns_dir: Path | None = Field(default=None, description="Directory of '<name> <definition>' files")
    no_default_patterns: bool = Field(default=False, description="Start from an empty fragment catalog")
    named_only: bool = Field(default=False, description="Only capture placeholders with a field alias")
    format: OutputFormat = Field(default=OutputFormat.JSON)
    stats: bool = Field(default=True, description="Emit parsed/failed counts at the end of the run")

    @field_validator("pattern")
    @classmethod
    def _validate_pattern(cls, v: str) -> str:
        if not v:
            raise ValueError("pattern must not be empty")
        return v

    @field_validator("inputs", mode="before")
    @classmethod
    def _listify_inputs(cls, v: Any) -> Any:
        # A single glob may be given as a plain string in YAML
        if isinstance(v, str):
            return [v]
        return v


def load_config(path: str | Path) -> dict[str, Any]:
    """Load raw settings from the YAML file at 'path'."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"{path}: invalid YAML ({e})") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping of settings at top level")
    return data


def build_config(file_values: dict[str, Any] | None = None, **overrides: Any) -> RunConfig:
    """Merge file values with command-line overrides and validate.

    Overrides that are None were not given and leave file values alone.
    """
    merged: dict[str, Any] = dict(file_values or {})
    merged.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return RunConfig.model_validate(merged)
    except ValidationError as e:
        # Re-raise with a cleaner message for CLI users
        raise ConfigError(str(e)) from e
