"""Detailed reporting once a batch has failed for good.

After the retry loop gives up, FailureReporter turns the RetryResult into a
BatchErrorLogEntry, writes a human-readable summary to the log, and hands the
entry to an optional sink (typically an ``error_logs`` collection writer
supplied by the storage layer). Reporting is best-effort: a failing sink is
logged and never masks the batch failure itself.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Literal

from cronguard.core.logging import get_logger
from cronguard.core.models import RetryResult
from cronguard.utils.time import utc_now

BatchType = Literal["news", "terms"]
FailureSink = Callable[["BatchErrorLogEntry"], "Awaitable[None] | None"]


@dataclass(frozen=True)
class BatchErrorLogEntry:
    """Record of a final batch failure, shaped for the error log store."""

    batch_type: BatchType
    date: str
    attempt_count: int
    total_retries: int
    total_processing_time_ms: int
    partial_success: bool
    exception_occurred: bool
    errors: tuple[dict[str, str], ...]
    timestamp: str = field(default_factory=lambda: utc_now().isoformat())
    context: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "batchType": self.batch_type,
            "date": self.date,
            "attemptCount": self.attempt_count,
            "totalRetries": self.total_retries,
            "totalProcessingTimeMs": self.total_processing_time_ms,
            "partialSuccess": self.partial_success,
            "exceptionOccurred": self.exception_occurred,
            "errors": [dict(error) for error in self.errors],
            "timestamp": self.timestamp,
        }
        if self.context is not None:
            result["context"] = dict(self.context)
        return result


class FailureReporter:
    """Report a batch whose retries are exhausted."""

    def __init__(self, batch_type: BatchType, *, sink: FailureSink | None = None) -> None:
        """Initialize the reporter.

        Args:
            batch_type: Which pipeline family failed.
            sink: Optional callable (sync or async) that persists the entry.
        """
        self.batch_type = batch_type
        self._sink = sink
        self._logger = get_logger("failure_report", batch_type=batch_type)

    def build_entry(
        self,
        retry_result: RetryResult,
        context: dict[str, Any] | None = None,
    ) -> BatchErrorLogEntry:
        return BatchErrorLogEntry(
            batch_type=self.batch_type,
            date=retry_result.date,
            attempt_count=retry_result.attempt_count,
            total_retries=retry_result.total_retries,
            total_processing_time_ms=retry_result.total_processing_time_ms,
            partial_success=retry_result.partial_success,
            exception_occurred=retry_result.exception_occurred,
            errors=tuple(
                {
                    "type": error.type,
                    "message": error.message,
                    "timestamp": error.timestamp.isoformat(),
                }
                for error in retry_result.errors
            ),
            context=dict(context) if context is not None else None,
        )

    async def log_final_failure(
        self,
        retry_result: RetryResult,
        context: dict[str, Any] | None = None,
    ) -> BatchErrorLogEntry:
        """Build the failure entry and pass it to the sink.

        Returns:
            The entry, whether or not the sink accepted it.
        """
        entry = self.build_entry(retry_result, context)
        if self._sink is None:
            self._logger.info("failure_entry_built", **_entry_fields(entry))
            return entry

        try:
            written = self._sink(entry)
            if inspect.isawaitable(written):
                await written
        except Exception as exc:
            self._logger.error(
                "failure_entry_save_failed",
                date=entry.date,
                error_type=type(exc).__name__,
                error=str(exc),
            )
        else:
            self._logger.info("failure_entry_saved", **_entry_fields(entry))
        return entry

    def log_summary(self, retry_result: RetryResult) -> None:
        """Write the final-failure summary to the log."""
        self._logger.error(
            "final_failure_summary",
            date=retry_result.date,
            attempts=retry_result.attempt_count,
            retries=retry_result.total_retries,
            total_processing_time_ms=retry_result.total_processing_time_ms,
            error_count=len(retry_result.errors),
        )
        for error in retry_result.errors:
            self._logger.error(
                "final_failure_error", error_type=error.type, error=error.message
            )


def _entry_fields(entry: BatchErrorLogEntry) -> dict[str, Any]:
    return {
        "date": entry.date,
        "attempts": entry.attempt_count,
        "error_count": len(entry.errors),
    }
