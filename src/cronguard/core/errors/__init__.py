"""Error classification and exceptions.

Re-exports all public symbols.
"""

from cronguard.core.errors.codes import BatchStep, StepType, TermsBatchStep
from cronguard.core.errors.exceptions import (
    ConfigurationError,
    CronGuardError,
    LoggerNotStartedError,
)
from cronguard.core.errors.classifier import ErrorClassifier

__all__ = [
    "BatchStep",
    "StepType",
    "TermsBatchStep",
    "ConfigurationError",
    "CronGuardError",
    "LoggerNotStartedError",
    "ErrorClassifier",
]
