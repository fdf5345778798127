"""cronguard: retry, timeout monitoring and step ledgers for scheduled batch jobs."""

__version__ = "0.1.0"

from cronguard.core import (
    BatchErrorInfo,
    BatchResult,
    BatchStep,
    ConfigurationError,
    CronGuardError,
    ErrorClassifier,
    JobConfig,
    LogConfig,
    LoggerNotStartedError,
    NewsBatchResult,
    RetryConfig,
    RetryResult,
    TermsBatchResult,
    TermsBatchStep,
)
from cronguard.execution import (
    BatchJobRunner,
    ExecutionLogger,
    JobSummary,
    RetryController,
    StepLogger,
    StepLogSummary,
    format_duration,
)

__all__ = [
    "__version__",
    "BatchErrorInfo",
    "BatchJobRunner",
    "BatchResult",
    "BatchStep",
    "ConfigurationError",
    "CronGuardError",
    "ErrorClassifier",
    "ExecutionLogger",
    "JobConfig",
    "JobSummary",
    "LogConfig",
    "LoggerNotStartedError",
    "NewsBatchResult",
    "RetryConfig",
    "RetryController",
    "RetryResult",
    "StepLogSummary",
    "StepLogger",
    "TermsBatchResult",
    "TermsBatchStep",
    "format_duration",
]
