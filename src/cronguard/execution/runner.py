"""Job runner: one scheduled invocation of a batch pipeline, end to end.

BatchJobRunner composes the retry controller with the reporting pieces:

1. binds an ExecutionContext (job name, run id, attempt) so that every log line
   of the invocation can be correlated;
2. runs the pipeline under RetryController;
3. on partial success, logs which part of the batch survived;
4. on final failure, writes the failure summary and the failure report.

Scheduling and trigger authentication stay with the caller.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable
from typing import Any

from cronguard.core.config import JobConfig, RetryCallback
from cronguard.core.logging import (
    ExecutionContext,
    configure_logging,
    get_logger,
    with_context,
)
from cronguard.core.models import BatchResult, NewsBatchResult, RetryResult, TermsBatchResult
from cronguard.execution.failure_report import FailureReporter
from cronguard.execution.partial_success import (
    NewsPartialSuccessAnalyzer,
    TermsPartialSuccessAnalyzer,
)
from cronguard.execution.retry import JobFn, RetryController, SleepFn

_logger = get_logger("runner")


class BatchJobRunner:
    """Run a batch pipeline with retry, correlation and failure reporting."""

    def __init__(
        self,
        job_config: JobConfig,
        *,
        failure_reporter: FailureReporter | None = None,
        sleep: SleepFn = asyncio.sleep,
        configure_logs: bool = True,
    ) -> None:
        """Initialize the runner.

        Args:
            job_config: Job name, batch type, retry and logging settings.
            failure_reporter: Reporter used after final failure. Defaults to a
                log-only reporter for the job's batch type.
            sleep: Awaitable sleep passed through to RetryController.
            configure_logs: Apply job_config.logging to the process-wide
                logging setup. Pass False when the host configures logging.
        """
        if configure_logs:
            configure_logging(**job_config.logging.model_dump())
        self.job_config = job_config
        self.failure_reporter = failure_reporter or FailureReporter(job_config.batch_type)
        self._sleep = sleep

    def _on_retry(self, ctx: ExecutionContext) -> RetryCallback:
        user_hook = self.job_config.retry.on_retry

        def hook(attempt: int, delay_ms: int, last_result: BatchResult) -> None:
            with with_context(ctx.with_attempt(attempt)):
                _logger.warning(
                    "job_retrying",
                    delay_ms=delay_ms,
                    errors=[error.type for error in last_result.errors],
                )
            if user_hook is not None:
                user_hook(attempt, delay_ms, last_result)

        return hook

    async def run(self, job_fn: JobFn, *, run_id: str | None = None) -> RetryResult:
        """Execute one invocation of the job.

        Args:
            job_fn: The pipeline; zero-argument, returns a BatchResult or an
                awaitable of one.
            run_id: Optional correlation ID; generated when omitted.

        Returns:
            The RetryResult of the invocation.
        """
        ctx_fields: dict[str, Any] = {"run_id": run_id} if run_id is not None else {}
        ctx = ExecutionContext(job_name=self.job_config.name, component="runner", **ctx_fields)

        retry_config = self.job_config.retry.model_copy(update={"on_retry": self._on_retry(ctx)})
        controller = RetryController(retry_config, sleep=self._sleep)
        attempt = 0

        async def attempt_fn() -> BatchResult:
            nonlocal attempt
            attempt += 1
            with with_context(ctx.with_attempt(attempt)):
                outcome: BatchResult | Awaitable[BatchResult] = job_fn()
                if inspect.isawaitable(outcome):
                    outcome = await outcome
                return outcome  # type: ignore[return-value]

        with with_context(ctx):
            _logger.info("job_started", batch_type=self.job_config.batch_type)
            result = await controller.execute_with_retry(attempt_fn)

            if result.success:
                _logger.info("job_succeeded", attempts=result.attempt_count)
            elif result.partial_success:
                self._log_partial_success(result.final_result)
            else:
                self.failure_reporter.log_summary(result)
                await self.failure_reporter.log_final_failure(
                    result, context={"job_name": ctx.job_name, "run_id": ctx.run_id}
                )
        return result

    def _log_partial_success(self, final_result: BatchResult) -> None:
        if isinstance(final_result, NewsBatchResult):
            NewsPartialSuccessAnalyzer().log_partial_success(final_result)
        elif isinstance(final_result, TermsBatchResult):
            TermsPartialSuccessAnalyzer().log_partial_success(final_result)
        else:
            _logger.warning("job_partially_succeeded", errors=len(final_result.errors))
