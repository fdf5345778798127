"""Core domain models and configuration."""

from cronguard.core.config import JobConfig, LogConfig, RetryConfig
from cronguard.core.errors import (
    BatchStep,
    ConfigurationError,
    CronGuardError,
    ErrorClassifier,
    LoggerNotStartedError,
    TermsBatchStep,
)
from cronguard.core.models import (
    BatchErrorInfo,
    BatchResult,
    NewsBatchResult,
    NewsSummaryData,
    RetryResult,
    Term,
    TermDifficulty,
    TermsBatchResult,
)

__all__ = [
    "BatchErrorInfo",
    "BatchResult",
    "BatchStep",
    "ConfigurationError",
    "CronGuardError",
    "ErrorClassifier",
    "JobConfig",
    "LogConfig",
    "LoggerNotStartedError",
    "NewsBatchResult",
    "NewsSummaryData",
    "RetryConfig",
    "RetryResult",
    "Term",
    "TermDifficulty",
    "TermsBatchResult",
    "TermsBatchStep",
]
