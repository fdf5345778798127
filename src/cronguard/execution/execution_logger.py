"""Execution-lifetime tracking for a single batch job invocation.

ExecutionLogger records when a job started, the timing of each of its steps,
and every structured entry it logs, then produces a JobSummary when the job
ends. It also watches the host's execution budget: callers poll
``check_timeout()`` between steps and abort remaining work themselves when it
returns True. Nothing here cancels anything.

Example usage:
    tracker = ExecutionLogger("news-batch")
    tracker.start()
    ...
    tracker.log_step("world-news-fetch", True, 1200)
    if tracker.check_timeout():
        return tracker.end(TimeoutError("budget exhausted"))
    summary = tracker.end()
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

from cronguard.core.constants import (
    HARD_TIMEOUT_MS,
    MS_PER_SECOND,
    SECONDS_PER_MINUTE,
    TIMEOUT_WARNING_MS,
)
from cronguard.core.errors import LoggerNotStartedError
from cronguard.core.logging import get_logger
from cronguard.utils.time import ms_to_iso, now_ms

LogLevel = Literal["info", "warn", "error"]

_LEVEL_METHODS: dict[str, str] = {
    "info": "info",
    "warn": "warning",
    "error": "error",
}


def _format_number(value: float) -> str:
    # 1.5 -> "1.5", 2.0 -> "2"
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def format_duration(ms: float) -> str:
    """Render a millisecond duration for humans.

    - under one second: ``"500ms"``
    - under one minute: fractional seconds, ``"1.5s"``
    - otherwise: ``"1m 5s"`` with the seconds rounded half up

    Args:
        ms: Duration in milliseconds.

    Returns:
        The formatted duration.
    """
    if ms < MS_PER_SECOND:
        return f"{_format_number(ms)}ms"

    seconds = ms / MS_PER_SECOND
    if seconds < SECONDS_PER_MINUTE:
        return f"{_format_number(seconds)}s"

    minutes = math.floor(seconds / SECONDS_PER_MINUTE)
    remaining_seconds = math.floor(seconds % SECONDS_PER_MINUTE + 0.5)
    return f"{minutes}m {remaining_seconds}s"


@dataclass(frozen=True)
class LogEntry:
    """One structured entry written by an ExecutionLogger."""

    timestamp: str
    level: LogLevel
    job_name: str
    message: str
    data: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "timestamp": self.timestamp,
            "level": self.level,
            "jobName": self.job_name,
            "message": self.message,
        }
        if self.data is not None:
            result["data"] = dict(self.data)
        return result


@dataclass(frozen=True)
class StepRecord:
    """Timing outcome of one named step, as included in a JobSummary."""

    name: str
    success: bool
    duration_ms: int
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "success": self.success,
            "durationMs": self.duration_ms,
        }
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass(frozen=True)
class JobSummary:
    """Terminal summary of a job invocation.

    ``to_dict()`` is the contract consumed by log aggregation and monitoring,
    so its field names are fixed.
    """

    job_name: str
    start_time: str
    end_time: str
    duration_ms: int
    duration_formatted: str
    success: bool
    error: str | None = None
    steps: tuple[StepRecord, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "jobName": self.job_name,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "durationMs": self.duration_ms,
            "durationFormatted": self.duration_formatted,
            "success": self.success,
            "steps": [step.to_dict() for step in self.steps],
        }
        if self.error is not None:
            result["error"] = self.error
        return result


class ExecutionLogger:
    """Track one job invocation's wall-clock lifetime and timeout budget.

    Owned by a single execution: construct it at job start and discard it
    after reading the summary. Not safe to share between concurrent jobs.
    """

    def __init__(
        self,
        job_name: str,
        *,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        """Initialize the logger.

        Args:
            job_name: Job name stamped on every entry (e.g., "news-batch").
            clock: Returns epoch milliseconds; replaced in tests.
        """
        self.job_name = job_name
        self._clock = clock
        self._logger = get_logger("execution", job_name=job_name)
        self._start_time: int | None = None
        self._entries: list[LogEntry] = []
        self._steps: list[StepRecord] = []
        self._has_warned = False
        self._timed_out = False

    def start(self) -> None:
        """Record the start of the job and reset all per-run state."""
        self._start_time = self._clock()
        self._entries = []
        self._steps = []
        self._has_warned = False
        self._timed_out = False
        self.log("info", "Starting cron job", {"start_time": ms_to_iso(self._start_time)})

    def log(
        self,
        level: LogLevel,
        message: str,
        data: dict[str, Any] | None = None,
    ) -> None:
        """Append a structured entry and write it to the log sink immediately.

        Args:
            level: One of "info", "warn", "error".
            message: Human-readable message.
            data: Optional structured payload.

        Raises:
            ValueError: If the level is not one of the three above.
        """
        method = _LEVEL_METHODS.get(level)
        if method is None:
            raise ValueError(f"Unsupported log level: {level!r}")

        entry = LogEntry(
            timestamp=ms_to_iso(self._clock()),
            level=level,
            job_name=self.job_name,
            message=message,
            data=dict(data) if data is not None else None,
        )
        self._entries.append(entry)

        kw: dict[str, Any] = {}
        if data is not None:
            kw["data"] = entry.data
        getattr(self._logger, method)(message, **kw)

    def log_step(
        self,
        name: str,
        success: bool,
        duration_ms: int,
        error: str | None = None,
    ) -> None:
        """Record one step's timing outcome for the final summary."""
        self._steps.append(
            StepRecord(name=name, success=success, duration_ms=duration_ms, error=error)
        )
        if success:
            self._logger.info("step_completed", step=name, duration_ms=duration_ms)
        else:
            self._logger.error(
                "step_failed", step=name, duration_ms=duration_ms, error=error
            )

    def elapsed_ms(self) -> int | None:
        """Milliseconds since start(), or None if not started."""
        if self._start_time is None:
            return None
        return self._clock() - self._start_time

    def check_timeout(self) -> bool:
        """Check the elapsed time against the host's execution budget.

        Emits a single warning the first time the warning threshold is
        crossed and a single error the first time the hard timeout is reached.
        Advisory only: the caller decides what to abort.

        Returns:
            True once the hard timeout has been reached.
        """
        elapsed = self.elapsed_ms()
        if elapsed is None:
            return False

        if elapsed >= HARD_TIMEOUT_MS:
            if self._timed_out:
                return True
            self._timed_out = True
            self.log(
                "error",
                f"TIMEOUT: Job exceeded {format_duration(HARD_TIMEOUT_MS)}",
                {"elapsed_ms": elapsed},
            )
            return True

        if elapsed >= TIMEOUT_WARNING_MS and not self._has_warned:
            self._has_warned = True
            self.log(
                "warn",
                f"WARNING: Job approaching timeout ({format_duration(elapsed)} elapsed)",
                {"elapsed_ms": elapsed},
            )

        return False

    def end(self, error: BaseException | str | None = None) -> JobSummary:
        """Finish tracking and build the JobSummary.

        Args:
            error: The failure that ended the job, if any.

        Returns:
            JobSummary with success = (error is None).

        Raises:
            LoggerNotStartedError: If start() was never called.
        """
        if self._start_time is None:
            raise LoggerNotStartedError(f"ExecutionLogger for {self.job_name!r} was not started")

        end_time = self._clock()
        duration_ms = end_time - self._start_time
        error_message = None if error is None else str(error)

        summary = JobSummary(
            job_name=self.job_name,
            start_time=ms_to_iso(self._start_time),
            end_time=ms_to_iso(end_time),
            duration_ms=duration_ms,
            duration_formatted=format_duration(duration_ms),
            success=error is None,
            error=error_message,
            steps=tuple(self._steps),
        )

        if summary.success:
            self._logger.info(
                f"Completed successfully in {summary.duration_formatted}",
                duration_ms=duration_ms,
            )
        else:
            self._logger.error(
                f"Failed after {summary.duration_formatted}: {error_message}",
                duration_ms=duration_ms,
            )
        return summary

    def get_entries(self) -> list[LogEntry]:
        """Return a copy of the entries recorded since start()."""
        return list(self._entries)

    def get_start_time(self) -> int | None:
        """Return the start timestamp in epoch milliseconds, if started."""
        return self._start_time
