"""Exception hierarchy for cronguard.

All library exceptions inherit from CronGuardError, enabling callers to catch
broad (CronGuardError) or narrow (e.g., LoggerNotStartedError). Business
failures of a batch job are never exceptions: they travel as BatchResult values.
"""

from __future__ import annotations


class CronGuardError(Exception):
    """Base exception for all cronguard errors."""


class ConfigurationError(CronGuardError):
    """Raised when a job or one of its collaborators is misconfigured.

    RetryController treats this as fatal: it is surfaced immediately and never
    retried, since another attempt cannot fix a missing key or bad setting.
    """


class LoggerNotStartedError(CronGuardError):
    """Raised when ExecutionLogger.end() is called before start()."""
