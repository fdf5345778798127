"""Bounded exponential-backoff retry around a batch job.

The controller decides between three outcomes after each attempt:
- success or partial success → accept and stop (a partial run already wrote
  some output, so re-running it could duplicate those writes)
- business failure or raised exception → back off and try again
- ConfigurationError → surface immediately, another attempt cannot help

Once the loop has started it never raises for a failed job: the caller gets a
RetryResult and inspects ``success`` / ``partial_success``. A failing on_retry
hook is logged and the loop carries on.

Example usage:
    from cronguard.core.config import RetryConfig
    from cronguard.execution.retry import RetryController

    controller = RetryController(RetryConfig(max_retries=3))
    result = await controller.execute_with_retry(pipeline.run)
    if not (result.success or result.partial_success):
        reporter.log_summary(result)
"""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable
from typing import Any

from cronguard.core.config import RetryConfig
from cronguard.core.constants import EXCEPTION_ERROR_TAG
from cronguard.core.errors import ConfigurationError
from cronguard.core.logging import get_logger
from cronguard.core.models import BatchErrorInfo, BatchResult, RetryResult

# Module-level logger
_logger = get_logger("retry")

JobFn = Callable[[], "Awaitable[BatchResult] | BatchResult"]
SleepFn = Callable[[float], Awaitable[Any]]


def calculate_delay(config: RetryConfig, attempt_number: int) -> int:
    """Backoff delay in milliseconds after the given failed attempt.

    ``min(base_delay_ms * 2 ** (attempt_number - 1), max_delay_ms)``, with no
    jitter: the schedule is deterministic.

    Args:
        config: Retry settings.
        attempt_number: 1-based number of the attempt that just failed.

    Returns:
        Delay in milliseconds.
    """
    if attempt_number < 1:
        raise ValueError(f"attempt_number must be >= 1, got {attempt_number}")
    # Clamp the exponent first so huge attempt numbers stay cheap
    exponential = config.base_delay_ms * 2 ** min(attempt_number - 1, 64)
    return min(exponential, config.max_delay_ms)


def _exception_result(exc: BaseException) -> BatchResult:
    """Stand-in BatchResult for an attempt that raised instead of returning."""
    return BatchResult(
        success=False,
        partial_success=False,
        errors=(BatchErrorInfo(type=EXCEPTION_ERROR_TAG, message=str(exc) or type(exc).__name__),),
    )


class RetryController:
    """Run a batch job with bounded exponential-backoff retry.

    Stateless apart from its immutable config, so one controller may serve
    many job invocations as long as they run one after another. Attempts of a
    single call never overlap.
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        *,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        """Initialize the controller.

        Args:
            config: Retry settings. Uses defaults if not provided.
            sleep: Awaitable sleep taking seconds; replaced in tests.
        """
        self.config = config or RetryConfig()
        self._sleep = sleep

    def get_config(self) -> dict[str, int]:
        """Return the tunables (the on_retry hook is not included)."""
        return {
            "max_retries": self.config.max_retries,
            "base_delay_ms": self.config.base_delay_ms,
            "max_delay_ms": self.config.max_delay_ms,
        }

    def calculate_delay(self, attempt_number: int) -> int:
        """Backoff delay in milliseconds after the given failed attempt."""
        return calculate_delay(self.config, attempt_number)

    async def execute_with_retry(self, job_fn: JobFn) -> RetryResult:
        """Invoke ``job_fn`` until it is accepted or attempts run out.

        Args:
            job_fn: Zero-argument callable returning a BatchResult, or an
                awaitable of one. It may raise.

        Returns:
            RetryResult wrapping the last BatchResult.

        Raises:
            ConfigurationError: Re-raised from job_fn without retrying.
        """
        started = time.monotonic()
        max_attempts = self.config.max_retries + 1
        exception_occurred = False
        last_result: BatchResult | None = None
        attempt = 0

        for attempt in range(1, max_attempts + 1):
            try:
                outcome = job_fn()
                if inspect.isawaitable(outcome):
                    outcome = await outcome
                last_result = outcome
            except ConfigurationError as exc:
                _logger.error(
                    "attempt_configuration_error",
                    attempt=attempt,
                    error=str(exc),
                )
                raise
            except Exception as exc:
                exception_occurred = True
                last_result = _exception_result(exc)
                _logger.warning(
                    "attempt_raised",
                    attempt=attempt,
                    max_attempts=max_attempts,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
            else:
                if last_result.success or last_result.partial_success:
                    _logger.info(
                        "attempt_accepted",
                        attempt=attempt,
                        success=last_result.success,
                        partial_success=last_result.partial_success,
                    )
                    break
                _logger.warning(
                    "attempt_failed",
                    attempt=attempt,
                    max_attempts=max_attempts,
                    error_count=len(last_result.errors),
                )

            if attempt >= max_attempts:
                break

            delay_ms = self.calculate_delay(attempt)
            _logger.info("retry_scheduled", attempt=attempt, delay_ms=delay_ms)
            if self.config.on_retry is not None:
                try:
                    self.config.on_retry(attempt, delay_ms, last_result)
                except Exception as exc:
                    _logger.warning(
                        "on_retry_failed",
                        attempt=attempt,
                        error_type=type(exc).__name__,
                        error=str(exc),
                    )
            await self._sleep(delay_ms / 1000)

        if last_result is None:  # pragma: no cover - loop always runs at least once
            raise RuntimeError("retry loop finished without an attempt")

        total_ms = int((time.monotonic() - started) * 1000)
        result = RetryResult(
            final_result=last_result,
            attempt_count=attempt,
            total_retries=attempt - 1,
            exception_occurred=exception_occurred,
            total_processing_time_ms=total_ms,
        )
        log = _logger.info if (result.success or result.partial_success) else _logger.error
        log(
            "retry_finished",
            attempts=result.attempt_count,
            retries=result.total_retries,
            success=result.success,
            partial_success=result.partial_success,
            exception_occurred=exception_occurred,
            total_processing_time_ms=total_ms,
        )
        return result


async def execute_with_retry(
    job_fn: JobFn,
    config: RetryConfig | None = None,
) -> RetryResult:
    """One-off convenience wrapper around RetryController.execute_with_retry."""
    return await RetryController(config).execute_with_retry(job_fn)
