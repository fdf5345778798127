"""Configuration models for cronguard jobs.

Defines Pydantic models for loading and validating YAML job configurations.
Configuration is always passed explicitly at construction; nothing here reads
process-wide state.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from cronguard.core.constants import (
    DEFAULT_BASE_DELAY_MS,
    DEFAULT_MAX_DELAY_MS,
    DEFAULT_MAX_RETRIES,
)
from cronguard.core.models import BatchResult

RetryCallback = Callable[[int, int, BatchResult], None]
"""on_retry(attempt_number, delay_ms, last_result), invoked between attempts."""


class RetryConfig(BaseModel):
    """Bounded exponential-backoff settings for a batch job."""

    model_config = ConfigDict(frozen=True)

    max_retries: int = Field(
        default=DEFAULT_MAX_RETRIES, ge=0, description="Retries after the first attempt"
    )
    base_delay_ms: int = Field(
        default=DEFAULT_BASE_DELAY_MS, gt=0, description="Delay before the first retry"
    )
    max_delay_ms: int = Field(
        default=DEFAULT_MAX_DELAY_MS, gt=0, description="Cap for any single delay"
    )
    on_retry: RetryCallback | None = Field(
        default=None,
        exclude=True,
        description="Hook invoked synchronously before each backoff wait",
    )

    @model_validator(mode="after")
    def _validate_delay_range(self) -> "RetryConfig":
        if self.base_delay_ms > self.max_delay_ms:
            raise ValueError(
                f"base_delay_ms ({self.base_delay_ms}) must not exceed "
                f"max_delay_ms ({self.max_delay_ms})"
            )
        return self


class LogConfig(BaseModel):
    """Configuration for structured logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Minimum log level to capture",
    )
    format: Literal["json", "console", "both"] = Field(
        default="json",
        description="Output format: json for log aggregation, console for humans, "
        "both for console output to stderr and to file_path",
    )
    file_path: Path | None = Field(
        default=None,
        description="Path for log file output (required if format='both')",
    )
    max_file_size_mb: int = Field(default=50, gt=0, le=1000)
    backup_count: int = Field(default=5, ge=0, le=100)
    include_timestamps: bool = True
    include_context: bool = True

    @model_validator(mode="after")
    def _validate_file_path(self) -> "LogConfig":
        if self.format == "both" and self.file_path is None:
            raise ValueError("file_path is required when format='both'")
        return self


class JobConfig(BaseModel):
    """Complete configuration for one scheduled batch job."""

    name: str = Field(min_length=1, description="Job name used in every log line")
    batch_type: Literal["news", "terms"] = Field(
        default="news", description="Pipeline family, selects the step taxonomy"
    )
    retry: RetryConfig = Field(default_factory=RetryConfig)
    logging: LogConfig = Field(default_factory=LogConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "JobConfig":
        """Load job configuration from a YAML file."""
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data)

    @classmethod
    def from_yaml_string(cls, yaml_str: str) -> "JobConfig":
        """Load job configuration from a YAML string."""
        data = yaml.safe_load(yaml_str)
        return cls.model_validate(data)
