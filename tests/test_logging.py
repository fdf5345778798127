"""Tests for cronguard.core.logging module."""

from __future__ import annotations

import inspect
import json
import logging
from pathlib import Path

import pytest
from structlog.testing import capture_logs

from cronguard.core.config import LogConfig
from cronguard.core.logging import (
    SENSITIVE_PATTERNS,
    CronGuardLogger,
    ExecutionContext,
    _add_context,
    _sanitize_event_dict,
    _sanitize_value,
    clear_context,
    configure_logging,
    get_current_context,
    get_logger,
    set_context,
    with_context,
)


def _flush_root_handlers() -> None:
    for handler in logging.getLogger().handlers:
        handler.flush()


class TestSensitivePatterns:
    """Tests for sensitive field detection and sanitization."""

    def test_known_sensitive_patterns(self):
        assert "api_key" in SENSITIVE_PATTERNS
        assert "token" in SENSITIVE_PATTERNS
        assert "password" in SENSITIVE_PATTERNS

    @pytest.mark.parametrize("key", ["api_key", "API_KEY", "gemini_api_key", "bearer_token"])
    def test_sanitize_value_redacts(self, key):
        assert _sanitize_value(key, "sk-12345") == "[REDACTED]"

    def test_sanitize_value_keeps_normal_fields(self):
        assert _sanitize_value("attempt", 2) == 2

    def test_sanitize_event_dict_nested(self):
        """Dict values are sanitized one level deep."""
        event = _sanitize_event_dict(
            None,
            "info",
            {"event": "x", "data": {"secret": "s", "count": 3}, "password": "p"},
        )
        assert event["password"] == "[REDACTED]"
        assert event["data"] == {"secret": "[REDACTED]", "count": 3}
        assert event["event"] == "x"


class TestExecutionContext:
    """Tests for ExecutionContext and context helpers."""

    def test_generates_run_id(self):
        first = ExecutionContext(job_name="news-batch")
        second = ExecutionContext(job_name="news-batch")
        assert first.run_id != second.run_id

    def test_with_attempt_returns_copy(self):
        ctx = ExecutionContext(job_name="news-batch", run_id="r1")
        retried = ctx.with_attempt(2)

        assert ctx.attempt is None
        assert retried.attempt == 2
        assert retried.run_id == "r1"

    def test_to_dict_omits_missing_attempt(self):
        ctx = ExecutionContext(job_name="news-batch", run_id="r1", component="runner")
        assert ctx.to_dict() == {"job_name": "news-batch", "run_id": "r1", "component": "runner"}
        assert ctx.with_attempt(1).to_dict()["attempt"] == 1

    def test_with_context_restores_previous(self):
        outer = ExecutionContext(job_name="outer")
        inner = ExecutionContext(job_name="inner")

        with with_context(outer):
            with with_context(inner):
                assert get_current_context() is inner
            assert get_current_context() is outer
        assert get_current_context() is None

    def test_set_and_clear(self):
        ctx = ExecutionContext(job_name="news-batch")
        set_context(ctx)
        assert get_current_context() is ctx
        clear_context()
        assert get_current_context() is None

    def test_add_context_processor(self):
        """Context fields are merged without overriding explicit keys."""
        ctx = ExecutionContext(job_name="news-batch", run_id="r1", attempt=2, component="runner")
        with with_context(ctx):
            event = _add_context(None, "info", {"event": "x", "component": "retry"})

        assert event["job_name"] == "news-batch"
        assert event["run_id"] == "r1"
        assert event["attempt"] == 2
        assert event["component"] == "retry"

    def test_add_context_without_context(self):
        assert _add_context(None, "info", {"event": "x"}) == {"event": "x"}


class TestCronGuardLogger:
    """Tests for the component logger wrapper."""

    def test_get_logger_binds_component(self):
        logger = get_logger("retry", job_name="news-batch")
        assert isinstance(logger, CronGuardLogger)

        with capture_logs() as logs:
            logger.info("attempt_failed", attempt=1)

        assert logs == [
            {
                "component": "retry",
                "job_name": "news-batch",
                "attempt": 1,
                "event": "attempt_failed",
                "log_level": "info",
            }
        ]

    def test_bind_does_not_mutate_parent(self):
        parent = get_logger("retry")
        child = parent.bind(run_id="r1")

        with capture_logs() as logs:
            parent.warning("a")
            child.error("b")

        assert "run_id" not in logs[0]
        assert logs[1]["run_id"] == "r1"
        assert logs[1]["log_level"] == "error"


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_both_requires_file_path(self):
        with pytest.raises(ValueError, match="file_path is required"):
            configure_logging(format="both")

    def test_json_file_output(self, tmp_path: Path):
        """JSON lines land in the file with context merged and secrets redacted."""
        log_file = tmp_path / "logs" / "job.log"
        configure_logging(level="INFO", format="json", file_path=log_file)

        ctx = ExecutionContext(job_name="news-batch", run_id="r1")
        with with_context(ctx):
            get_logger("runner").info("job_started", api_key="sk-1")
        _flush_root_handlers()

        [line] = log_file.read_text(encoding="utf-8").splitlines()
        record = json.loads(line)
        assert record["event"] == "job_started"
        assert record["component"] == "runner"
        assert record["job_name"] == "news-batch"
        assert record["run_id"] == "r1"
        assert record["api_key"] == "[REDACTED]"
        assert record["level"] == "info"
        assert "timestamp" in record

    def test_level_filters(self, tmp_path: Path):
        log_file = tmp_path / "job.log"
        configure_logging(level="WARNING", format="json", file_path=log_file)

        logger = get_logger("retry")
        logger.info("hidden")
        logger.warning("shown")
        _flush_root_handlers()

        events = [json.loads(line)["event"] for line in log_file.read_text().splitlines()]
        assert events == ["shown"]

    def test_without_timestamps(self, tmp_path: Path):
        log_file = tmp_path / "job.log"
        configure_logging(format="json", file_path=log_file, include_timestamps=False)

        get_logger("retry").info("x")
        _flush_root_handlers()

        record = json.loads(log_file.read_text().splitlines()[0])
        assert "timestamp" not in record

    def test_default_format_matches_log_config(self, capsys):
        """Calling with no arguments renders JSON, like a default LogConfig."""
        assert inspect.signature(configure_logging).parameters["format"].default == LogConfig().format

        configure_logging()
        get_logger("retry").info("defaults_applied")
        _flush_root_handlers()

        record = json.loads(capsys.readouterr().out.splitlines()[-1])
        assert record["event"] == "defaults_applied"

    def test_log_config_fields_are_accepted(self, tmp_path: Path):
        """Every LogConfig field maps onto a configure_logging argument."""
        log_file = tmp_path / "job.log"
        configure_logging(**LogConfig(format="json", file_path=log_file).model_dump())

        get_logger("retry").warning("x")
        _flush_root_handlers()

        assert json.loads(log_file.read_text().splitlines()[0])["event"] == "x"
