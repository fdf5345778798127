"""Execution layer: retry, lifetime tracking, step ledger and reporting."""

from cronguard.execution.execution_logger import (
    ExecutionLogger,
    JobSummary,
    LogEntry,
    StepRecord,
    format_duration,
)
from cronguard.execution.failure_report import BatchErrorLogEntry, FailureReporter
from cronguard.execution.partial_success import (
    NewsPartialSuccessAnalyzer,
    PartialSuccessNotification,
    PartialSuccessType,
    TermsPartialSuccessAnalyzer,
    TermsPartialSuccessType,
)
from cronguard.execution.retry import RetryController, calculate_delay, execute_with_retry
from cronguard.execution.runner import BatchJobRunner
from cronguard.execution.step_logger import StepLogEntry, StepLogger, StepLogSummary

__all__ = [
    "BatchErrorLogEntry",
    "BatchJobRunner",
    "ExecutionLogger",
    "FailureReporter",
    "JobSummary",
    "LogEntry",
    "NewsPartialSuccessAnalyzer",
    "PartialSuccessNotification",
    "PartialSuccessType",
    "RetryController",
    "StepLogEntry",
    "StepLogSummary",
    "StepLogger",
    "StepRecord",
    "TermsPartialSuccessAnalyzer",
    "TermsPartialSuccessType",
    "calculate_delay",
    "execute_with_retry",
    "format_duration",
]
