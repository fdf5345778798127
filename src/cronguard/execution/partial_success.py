"""Partial-success detection for news and terms batch results.

A batch that produced some valid output is accepted as terminal by the retry
layer. These analyzers explain *which* part succeeded, whether the output is
worth saving, and build an operator notification for it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Literal

from cronguard.core.logging import get_logger
from cronguard.core.models import NewsBatchResult, TermDifficulty, TermsBatchResult
from cronguard.utils.time import utc_now

NotificationSeverity = Literal["info", "warning", "error"]
NewsKind = Literal["world", "japan"]

EXPECTED_TERM_COUNT = 3
EXPECTED_DIFFICULTIES: tuple[TermDifficulty, ...] = (
    TermDifficulty.BEGINNER,
    TermDifficulty.INTERMEDIATE,
    TermDifficulty.ADVANCED,
)


class PartialSuccessType(str, Enum):
    """Outcome categories of a news batch."""

    FULL_SUCCESS = "full-success"
    WORLD_NEWS_ONLY = "world-news-only"
    JAPAN_NEWS_ONLY = "japan-news-only"
    FULL_FAILURE = "full-failure"


class TermsPartialSuccessType(str, Enum):
    """Outcome categories of a terms batch, by number of generated terms."""

    FULL_SUCCESS = "full-success"
    TWO_TERMS = "two-terms"
    ONE_TERM = "one-term"
    FULL_FAILURE = "full-failure"


@dataclass(frozen=True)
class NewsPartialSuccessAnalysis:
    is_partial_success: bool
    type: PartialSuccessType
    successful_news: tuple[NewsKind, ...]
    failed_news: tuple[NewsKind, ...]
    failure_reasons: tuple[str, ...]
    should_save: bool
    should_retry: bool


@dataclass(frozen=True)
class TermsPartialSuccessAnalysis:
    is_partial_success: bool
    type: TermsPartialSuccessType
    generated_count: int
    missing_count: int
    generated_difficulties: tuple[TermDifficulty, ...]
    missing_difficulties: tuple[TermDifficulty, ...]
    failure_reasons: tuple[str, ...]
    should_save: bool
    should_retry: bool


@dataclass(frozen=True)
class PartialSuccessNotification:
    """Operator-facing notification describing a batch outcome."""

    title: str
    message: str
    severity: NotificationSeverity
    details: dict[str, Any]
    timestamp: datetime = field(default_factory=utc_now)


class NewsPartialSuccessAnalyzer:
    """Classify a news batch by which of its two feeds produced a summary."""

    def __init__(self) -> None:
        self._logger = get_logger("partial_success", batch_type="news")

    def analyze(self, result: NewsBatchResult) -> NewsPartialSuccessAnalysis:
        has_world = result.world_news is not None
        has_japan = result.japan_news is not None

        successful: list[NewsKind] = []
        failed: list[NewsKind] = []
        (successful if has_world else failed).append("world")
        (successful if has_japan else failed).append("japan")

        if has_world and has_japan:
            outcome = PartialSuccessType.FULL_SUCCESS
        elif has_world:
            outcome = PartialSuccessType.WORLD_NEWS_ONLY
        elif has_japan:
            outcome = PartialSuccessType.JAPAN_NEWS_ONLY
        else:
            outcome = PartialSuccessType.FULL_FAILURE

        return NewsPartialSuccessAnalysis(
            is_partial_success=outcome
            in (PartialSuccessType.WORLD_NEWS_ONLY, PartialSuccessType.JAPAN_NEWS_ONLY),
            type=outcome,
            successful_news=tuple(successful),
            failed_news=tuple(failed),
            failure_reasons=tuple(error.message for error in result.errors),
            should_save=has_world or has_japan,
            should_retry=outcome is PartialSuccessType.FULL_FAILURE,
        )

    def create_notification(
        self, analysis: NewsPartialSuccessAnalysis, date: str
    ) -> PartialSuccessNotification:
        severity: NotificationSeverity
        if analysis.type is PartialSuccessType.FULL_SUCCESS:
            title = f"News batch succeeded ({date})"
            message = "Both world and Japan news were processed."
            severity = "info"
        elif analysis.type is PartialSuccessType.WORLD_NEWS_ONLY:
            title = f"News batch partially succeeded ({date})"
            message = "Only world news was processed. Fetching Japan news failed."
            severity = "warning"
        elif analysis.type is PartialSuccessType.JAPAN_NEWS_ONLY:
            title = f"News batch partially succeeded ({date})"
            message = "Only Japan news was processed. Fetching world news failed."
            severity = "warning"
        else:
            title = f"News batch failed ({date})"
            message = "Processing failed for both world and Japan news."
            severity = "error"

        return PartialSuccessNotification(
            title=title,
            message=message,
            severity=severity,
            details={
                "successful_news": list(analysis.successful_news),
                "failed_news": list(analysis.failed_news),
                "failure_reasons": list(analysis.failure_reasons),
            },
        )

    def log_partial_success(self, result: NewsBatchResult) -> NewsPartialSuccessAnalysis:
        """Analyze ``result`` and log it when it is a partial success."""
        analysis = self.analyze(result)
        if analysis.is_partial_success:
            self._logger.warning(
                "partial_success_detected",
                outcome=analysis.type.value,
                successful_news=list(analysis.successful_news),
                failed_news=list(analysis.failed_news),
                failure_reasons=list(analysis.failure_reasons),
            )
        return analysis


class TermsPartialSuccessAnalyzer:
    """Classify a terms batch by how many of its three terms were generated."""

    def __init__(self) -> None:
        self._logger = get_logger("partial_success", batch_type="terms")

    def analyze(self, result: TermsBatchResult) -> TermsPartialSuccessAnalysis:
        generated = tuple(term.difficulty for term in result.terms)
        missing = tuple(d for d in EXPECTED_DIFFICULTIES if d not in generated)
        count = len(generated)

        if count >= EXPECTED_TERM_COUNT:
            outcome = TermsPartialSuccessType.FULL_SUCCESS
        elif count == 2:
            outcome = TermsPartialSuccessType.TWO_TERMS
        elif count == 1:
            outcome = TermsPartialSuccessType.ONE_TERM
        else:
            outcome = TermsPartialSuccessType.FULL_FAILURE

        return TermsPartialSuccessAnalysis(
            is_partial_success=outcome
            in (TermsPartialSuccessType.TWO_TERMS, TermsPartialSuccessType.ONE_TERM),
            type=outcome,
            generated_count=count,
            missing_count=max(0, EXPECTED_TERM_COUNT - count),
            generated_difficulties=generated,
            missing_difficulties=missing,
            failure_reasons=tuple(error.message for error in result.errors),
            should_save=count > 0,
            should_retry=outcome is TermsPartialSuccessType.FULL_FAILURE,
        )

    def create_notification(
        self, analysis: TermsPartialSuccessAnalysis, date: str
    ) -> PartialSuccessNotification:
        missing = "/".join(d.value for d in analysis.missing_difficulties)
        severity: NotificationSeverity
        if analysis.type is TermsPartialSuccessType.FULL_SUCCESS:
            title = f"Terms batch succeeded ({date})"
            message = "All three terms (beginner, intermediate, advanced) were generated."
            severity = "info"
        elif analysis.type is TermsPartialSuccessType.FULL_FAILURE:
            title = f"Terms batch failed ({date})"
            message = "Generating every term failed."
            severity = "error"
        else:
            title = f"Terms batch partially succeeded ({date})"
            message = (
                f"Only {analysis.generated_count} term(s) were generated. "
                f"Generating the {missing} term(s) failed."
            )
            severity = "warning"

        return PartialSuccessNotification(
            title=title,
            message=message,
            severity=severity,
            details={
                "generated_count": analysis.generated_count,
                "missing_count": analysis.missing_count,
                "generated_difficulties": [d.value for d in analysis.generated_difficulties],
                "missing_difficulties": [d.value for d in analysis.missing_difficulties],
                "failure_reasons": list(analysis.failure_reasons),
            },
        )

    def log_partial_success(self, result: TermsBatchResult) -> TermsPartialSuccessAnalysis:
        """Analyze ``result`` and log it when it is a partial success."""
        analysis = self.analyze(result)
        if analysis.is_partial_success:
            self._logger.warning(
                "partial_success_detected",
                outcome=analysis.type.value,
                generated=f"{analysis.generated_count}/{EXPECTED_TERM_COUNT}",
                missing_difficulties=[d.value for d in analysis.missing_difficulties],
                failure_reasons=list(analysis.failure_reasons),
            )
        return analysis
