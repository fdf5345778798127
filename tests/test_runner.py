"""Tests for cronguard.execution.runner module."""

import json
import logging
from pathlib import Path

import pytest
from structlog.testing import capture_logs

from cronguard.core.config import JobConfig, LogConfig, RetryConfig
from cronguard.core.logging import get_current_context
from cronguard.core.models import (
    BatchErrorInfo,
    BatchResult,
    NewsBatchResult,
    NewsSummaryData,
)
from cronguard.execution.failure_report import BatchErrorLogEntry, FailureReporter
from cronguard.execution.runner import BatchJobRunner


def _job_config(**retry) -> JobConfig:
    return JobConfig(name="news-batch", retry=RetryConfig(**retry))


def _failed() -> BatchResult:
    return BatchResult(
        success=False,
        date="2024-01-15",
        errors=(BatchErrorInfo(type="world-news-fetch", message="HTTP 503"),),
    )


class TestRun:
    """Tests for BatchJobRunner.run."""

    @pytest.mark.asyncio
    async def test_success(self, fake_sleep):
        runner = BatchJobRunner(_job_config(), sleep=fake_sleep)

        with capture_logs() as logs:
            result = await runner.run(lambda: BatchResult(success=True))

        assert result.success is True
        events = [log["event"] for log in logs]
        assert "job_started" in events
        assert "job_succeeded" in events

    @pytest.mark.asyncio
    async def test_attempt_context_is_bound(self, fake_sleep):
        """The job sees an ExecutionContext carrying the current attempt."""
        seen = []

        def job() -> BatchResult:
            seen.append(get_current_context())
            return _failed() if len(seen) < 3 else BatchResult(success=True)

        runner = BatchJobRunner(_job_config(), sleep=fake_sleep)
        await runner.run(job, run_id="run-42")

        assert [ctx.attempt for ctx in seen] == [1, 2, 3]
        assert {ctx.run_id for ctx in seen} == {"run-42"}
        assert {ctx.job_name for ctx in seen} == {"news-batch"}
        assert get_current_context() is None

    @pytest.mark.asyncio
    async def test_async_job(self, fake_sleep):
        async def job() -> BatchResult:
            return BatchResult(success=True)

        result = await BatchJobRunner(_job_config(), sleep=fake_sleep).run(job)
        assert result.success is True

    @pytest.mark.asyncio
    async def test_user_hook_still_called(self, fake_sleep):
        """A hook from the job config runs alongside the runner's own logging."""
        seen: list[tuple[int, int]] = []
        config = _job_config(max_retries=2, on_retry=lambda a, d, _r: seen.append((a, d)))

        with capture_logs() as logs:
            await BatchJobRunner(config, sleep=fake_sleep).run(_failed)

        assert seen == [(1, 1000), (2, 2000)]
        retrying = [log for log in logs if log["event"] == "job_retrying"]
        assert [log["delay_ms"] for log in retrying] == [1000, 2000]
        assert fake_sleep.calls == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_partial_success_is_analyzed(self, fake_sleep):
        partial = NewsBatchResult(
            success=False,
            partial_success=True,
            errors=(BatchErrorInfo(type="japan-news-fetch", message="timeout"),),
            world_news=NewsSummaryData(title="World", summary="...", character_count=3),
        )

        with capture_logs() as logs:
            result = await BatchJobRunner(_job_config(), sleep=fake_sleep).run(lambda: partial)

        assert result.partial_success is True
        detected = [log for log in logs if log["event"] == "partial_success_detected"]
        assert detected[0]["outcome"] == "world-news-only"

    @pytest.mark.asyncio
    async def test_final_failure_is_reported(self, fake_sleep):
        saved: list[BatchErrorLogEntry] = []
        reporter = FailureReporter("news", sink=saved.append)
        runner = BatchJobRunner(
            _job_config(max_retries=1), failure_reporter=reporter, sleep=fake_sleep
        )

        with capture_logs() as logs:
            result = await runner.run(_failed, run_id="run-7")

        assert result.success is False
        assert result.attempt_count == 2
        assert len(saved) == 1
        assert saved[0].context == {"job_name": "news-batch", "run_id": "run-7"}
        assert saved[0].attempt_count == 2
        assert "final_failure_summary" in [log["event"] for log in logs]

    @pytest.mark.asyncio
    async def test_job_config_is_not_mutated(self, fake_sleep):
        config = _job_config(max_retries=0)
        await BatchJobRunner(config, sleep=fake_sleep).run(_failed)
        assert config.retry.on_retry is None


class TestLoggingSetup:
    """Tests for applying the job's logging config."""

    @pytest.mark.asyncio
    async def test_job_log_file_is_written(self, tmp_path: Path, fake_sleep):
        """The runner routes logs to the file named in the job config."""
        log_file = tmp_path / "logs" / "news-batch.log"
        config = JobConfig(
            name="news-batch",
            logging=LogConfig(format="json", file_path=log_file),
        )

        await BatchJobRunner(config, sleep=fake_sleep).run(lambda: BatchResult(success=True))
        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = log_file.read_text(encoding="utf-8").splitlines()
        records = [json.loads(line) for line in lines if line.startswith("{")]
        events = [record["event"] for record in records]
        assert "job_started" in events
        assert "job_succeeded" in events
        assert {record["job_name"] for record in records if record["event"] == "job_started"} == {
            "news-batch"
        }

    def test_level_is_applied(self, tmp_path: Path):
        config = JobConfig(
            name="news-batch",
            logging=LogConfig(level="WARNING", format="json", file_path=tmp_path / "job.log"),
        )
        BatchJobRunner(config)
        assert logging.getLogger().level == logging.WARNING

    def test_can_leave_logging_to_host(self, tmp_path: Path):
        """configure_logs=False leaves the host's handlers in place."""
        root = logging.getLogger()
        host_handler = logging.NullHandler()
        root.addHandler(host_handler)

        config = JobConfig(
            name="news-batch",
            logging=LogConfig(format="json", file_path=tmp_path / "job.log"),
        )
        BatchJobRunner(config, configure_logs=False)

        assert host_handler in root.handlers
        assert not (tmp_path / "job.log").exists()
