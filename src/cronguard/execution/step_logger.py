"""Per-step outcome ledger for one batch job execution.

Records which pipeline steps succeeded and which failed so that a failure can
be attributed to the fetch, summary or storage phase that caused it. Entries
are append-only; every accessor hands out a fresh list.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Generic, TypeVar

from cronguard.core.errors import BatchStep, ErrorClassifier, StepType
from cronguard.core.logging import get_logger
from cronguard.core.models import BatchErrorInfo
from cronguard.utils.time import utc_now

S = TypeVar("S", bound=StepType)


@dataclass(frozen=True)
class StepLogEntry(Generic[S]):
    """Outcome of a single step. Never mutated after creation."""

    step: S
    success: bool
    error: BatchErrorInfo | None = None
    timestamp: datetime = field(default_factory=utc_now)
    metadata: Mapping[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "step": self.step.value,
            "success": self.success,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.error is not None:
            result["error"] = self.error.to_dict()
        if self.metadata is not None:
            result["metadata"] = dict(self.metadata)
        return result


@dataclass(frozen=True)
class StepLogSummary(Generic[S]):
    """Aggregate of all entries in a StepLogger.

    ``failed_steps`` / ``successful_steps`` keep entry order and may repeat a
    step that was logged more than once.
    """

    total_steps: int
    success_count: int
    error_count: int
    failed_steps: tuple[S, ...] = ()
    successful_steps: tuple[S, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalSteps": self.total_steps,
            "successCount": self.success_count,
            "errorCount": self.error_count,
            "failedSteps": [step.value for step in self.failed_steps],
            "successfulSteps": [step.value for step in self.successful_steps],
        }


class StepLogger(Generic[S]):
    """Record per-step success and failure for one job execution.

    Example:
        steps = StepLogger()
        steps.log_step_success(BatchStep.WORLD_NEWS_FETCH, {"article_count": 10})
        steps.log_errors_from_batch_result(result.errors)
        summary = steps.get_summary()
    """

    def __init__(
        self,
        classifier: ErrorClassifier[S] | None = None,
        *,
        name: str = "step_logger",
    ) -> None:
        """Initialize an empty ledger.

        Args:
            classifier: Maps BatchErrorInfo.type tags to steps. Defaults to
                the news pipeline's BatchStep taxonomy.
            name: Component name used for log lines.
        """
        self.classifier: ErrorClassifier[S] = classifier or ErrorClassifier(BatchStep)  # type: ignore[arg-type]
        self._logger = get_logger(name)
        self._logs: list[StepLogEntry[S]] = []

    def log_step_success(self, step: S, metadata: Mapping[str, Any] | None = None) -> None:
        """Append a success entry for ``step``."""
        frozen = MappingProxyType(dict(metadata)) if metadata is not None else None
        self._logs.append(StepLogEntry(step=step, success=True, metadata=frozen))
        kw: dict[str, Any] = {}
        if metadata is not None:
            kw["metadata"] = dict(metadata)
        self._logger.info("step_succeeded", step=step.value, **kw)

    def log_step_error(self, step: S, error: BatchErrorInfo) -> None:
        """Append a failure entry for ``step`` carrying its error."""
        self._logs.append(StepLogEntry(step=step, success=False, error=error))
        self._logger.error(
            "step_failed",
            step=step.value,
            error_type=error.type,
            error=error.message,
        )

    def log_errors_from_batch_result(self, errors: Iterable[BatchErrorInfo]) -> None:
        """Classify and record each error of a BatchResult, keeping input order."""
        for error in errors:
            self.log_step_error(self.classifier.classify(error.type), error)

    def get_logs(self) -> list[StepLogEntry[S]]:
        """Return all entries in insertion order."""
        return list(self._logs)

    def get_logs_by_step(self, step: S) -> list[StepLogEntry[S]]:
        """Return the entries recorded for ``step``."""
        return [entry for entry in self._logs if entry.step == step]

    def get_error_logs(self) -> list[StepLogEntry[S]]:
        """Return only the failure entries."""
        return [entry for entry in self._logs if not entry.success]

    def get_summary(self) -> StepLogSummary[S]:
        """Aggregate all entries into a StepLogSummary."""
        successful = [entry.step for entry in self._logs if entry.success]
        failed = [entry.step for entry in self._logs if not entry.success]
        return StepLogSummary(
            total_steps=len(self._logs),
            success_count=len(successful),
            error_count=len(failed),
            failed_steps=tuple(failed),
            successful_steps=tuple(successful),
        )

    def clear(self) -> None:
        """Drop every recorded entry."""
        self._logs = []
