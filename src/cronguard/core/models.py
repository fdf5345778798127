"""Result models exchanged between batch pipelines and the retry layer.

A pipeline reports each run as a BatchResult. Sub-step failures travel inside
it as BatchErrorInfo records; they are values, not exceptions. RetryController
wraps the last BatchResult of a retry loop into a RetryResult.

All models are frozen: a result is immutable once returned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from cronguard.utils.time import format_date_jst, utc_now


@dataclass(frozen=True)
class BatchErrorInfo:
    """A single sub-step failure reported by a pipeline.

    Attributes:
        type: Free-form tag naming where the failure happened
            (e.g., "japan-news-fetch"). Unknown tags are allowed.
        message: Human-readable error description.
        timestamp: When the failure happened (UTC).
    """

    type: str
    message: str
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class BatchResult:
    """Outcome of one run of a batch pipeline.

    Attributes:
        success: Every step completed.
        partial_success: Some valid output was produced despite failures.
        processing_time_ms: Wall-clock duration of the run.
        date: Batch date (YYYY-MM-DD, JST).
        errors: Sub-step failures in the order they occurred.
    """

    success: bool
    partial_success: bool = False
    processing_time_ms: int = 0
    date: str = field(default_factory=format_date_jst)
    errors: tuple[BatchErrorInfo, ...] = ()

    def __post_init__(self) -> None:
        # Accept any iterable from callers but store an immutable tuple
        object.__setattr__(self, "errors", tuple(self.errors))

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary using the external field names."""
        return {
            "success": self.success,
            "partialSuccess": self.partial_success,
            "processingTimeMs": self.processing_time_ms,
            "date": self.date,
            "errors": [error.to_dict() for error in self.errors],
        }


@dataclass(frozen=True)
class NewsSummaryData:
    """Summarized news ready for storage."""

    title: str
    summary: str
    character_count: int
    updated_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class NewsBatchResult(BatchResult):
    """BatchResult of the news pipeline, with its domain flags."""

    world_news: NewsSummaryData | None = None
    japan_news: NewsSummaryData | None = None
    database_saved: bool = False
    metadata_updated: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update({
            "hasWorldNews": self.world_news is not None,
            "hasJapanNews": self.japan_news is not None,
            "databaseSaved": self.database_saved,
            "metadataUpdated": self.metadata_updated,
        })
        return data


class TermDifficulty(str, Enum):
    """Difficulty level of a generated investment term."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


@dataclass(frozen=True)
class Term:
    """A generated investment term."""

    name: str
    description: str
    difficulty: TermDifficulty


@dataclass(frozen=True)
class TermsBatchResult(BatchResult):
    """BatchResult of the investment-terms pipeline, with its domain flags."""

    terms: tuple[Term, ...] = ()
    database_saved: bool = False
    history_updated: bool = False
    metadata_updated: bool = False

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "terms", tuple(self.terms))

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update({
            "termCount": len(self.terms),
            "databaseSaved": self.database_saved,
            "historyUpdated": self.history_updated,
            "metadataUpdated": self.metadata_updated,
        })
        return data


@dataclass(frozen=True)
class RetryResult:
    """Final outcome of a retry loop.

    Extends the last BatchResult with the retry bookkeeping. Callers inspect
    ``success`` / ``partial_success`` rather than catching exceptions.

    Attributes:
        final_result: The BatchResult of the last attempt (synthetic when that
            attempt raised).
        attempt_count: Attempts made, including the first one.
        total_retries: Attempts made after the first one.
        exception_occurred: At least one attempt raised.
        total_processing_time_ms: Duration of the whole loop, backoff included.
    """

    final_result: BatchResult
    attempt_count: int
    total_retries: int
    exception_occurred: bool = False
    total_processing_time_ms: int = 0

    def __post_init__(self) -> None:
        if self.attempt_count < 1:
            raise ValueError(f"attempt_count must be >= 1, got {self.attempt_count}")
        if self.total_retries != self.attempt_count - 1:
            raise ValueError(
                f"total_retries ({self.total_retries}) must equal "
                f"attempt_count - 1 ({self.attempt_count - 1})"
            )

    @property
    def success(self) -> bool:
        return self.final_result.success

    @property
    def partial_success(self) -> bool:
        return self.final_result.partial_success

    @property
    def processing_time_ms(self) -> int:
        return self.final_result.processing_time_ms

    @property
    def date(self) -> str:
        return self.final_result.date

    @property
    def errors(self) -> tuple[BatchErrorInfo, ...]:
        return self.final_result.errors

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary using the external field names."""
        return {
            **self.final_result.to_dict(),
            "attemptCount": self.attempt_count,
            "totalRetries": self.total_retries,
            "exceptionOccurred": self.exception_occurred,
            "totalProcessingTimeMs": self.total_processing_time_ms,
        }
