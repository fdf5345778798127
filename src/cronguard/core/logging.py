"""Structured logging infrastructure for cronguard.

Provides structured logging using structlog with batch-specific context such as
job_name, run_id and attempt. Supports console and JSON output, plus an
optional rotating log file.

Example usage:
    from cronguard.core.logging import get_logger, configure_logging, with_context

    # Configure once at startup
    configure_logging(level="DEBUG", format="json")

    # Get a component-specific logger
    logger = get_logger("retry")

    # Log with auto-context
    logger.info("attempt_failed", attempt=2)

    # Use execution context for automatic correlation
    ctx = ExecutionContext(job_name="news-batch")
    with with_context(ctx):
        logger.info("job_started")  # Automatically includes job_name, run_id
"""

from __future__ import annotations

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Literal

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# Sensitive field patterns that should never be logged
SENSITIVE_PATTERNS = frozenset({
    "api_key",
    "apikey",
    "api-key",
    "token",
    "secret",
    "password",
    "credential",
    "authorization",
    "bearer",
})


@dataclass(frozen=True)
class ExecutionContext:
    """Immutable context for correlating log entries across one job invocation.

    Attributes:
        job_name: The job being run (e.g., "news-batch").
        run_id: Unique ID for this invocation.
        attempt: Current attempt number within the retry loop (None outside it).
        component: Component name for the current operation.
    """

    job_name: str
    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    attempt: int | None = None
    component: str = "unknown"

    def with_attempt(self, attempt: int) -> ExecutionContext:
        """Create a new context with the specified attempt number."""
        return replace(self, attempt=attempt)

    def with_component(self, component: str) -> ExecutionContext:
        """Create a new context with the specified component."""
        return replace(self, component=component)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging (excludes None values)."""
        result: dict[str, Any] = {
            "job_name": self.job_name,
            "run_id": self.run_id,
            "component": self.component,
        }
        if self.attempt is not None:
            result["attempt"] = self.attempt
        return result


# Task-safe context variable; each asyncio task sees its own value
_current_context: ContextVar[ExecutionContext | None] = ContextVar(
    "cronguard_context", default=None
)


def get_current_context() -> ExecutionContext | None:
    """Get the current ExecutionContext if set."""
    return _current_context.get()


def set_context(ctx: ExecutionContext) -> None:
    """Set the current ExecutionContext.

    Generally prefer using `with_context()` for automatic cleanup.
    """
    _current_context.set(ctx)


def clear_context() -> None:
    """Clear the current ExecutionContext."""
    _current_context.set(None)


@contextmanager
def with_context(ctx: ExecutionContext) -> Iterator[ExecutionContext]:
    """Context manager that sets ExecutionContext for the duration of a block.

    Args:
        ctx: The ExecutionContext to use for the block.

    Yields:
        The ExecutionContext that was set.
    """
    token = _current_context.set(ctx)
    try:
        yield ctx
    finally:
        _current_context.reset(token)


def _sanitize_value(key: str, value: Any) -> Any:
    """Return "[REDACTED]" when the key looks sensitive, else the value."""
    key_lower = key.lower()
    for pattern in SENSITIVE_PATTERNS:
        if pattern in key_lower:
            return "[REDACTED]"
    return value


def _sanitize_event_dict(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that redacts sensitive fields, one level deep."""
    sanitized: EventDict = {}
    for key, value in event_dict.items():
        if isinstance(value, dict):
            sanitized[key] = {k: _sanitize_value(k, v) for k, v in value.items()}
        else:
            sanitized[key] = _sanitize_value(key, value)
    return sanitized


def _add_timestamp(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that adds an ISO8601 UTC timestamp."""
    event_dict["timestamp"] = datetime.now(UTC).isoformat()
    return event_dict


def _add_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that merges the current ExecutionContext.

    Explicit bindings take precedence over context fields.
    """
    ctx = get_current_context()
    if ctx is not None:
        for key, value in ctx.to_dict().items():
            if key not in event_dict:
                event_dict[key] = value
    return event_dict


class CronGuardLogger:
    """Component logger wrapper around structlog.

    Loggers are resolved lazily on every call so that loggers created at module
    import time still respect configuration set later via configure_logging().
    """

    def __init__(self, component: str, **initial_context: Any) -> None:
        """Initialize a logger for a component.

        Args:
            component: The component name (e.g., "retry", "execution").
            **initial_context: Additional context to bind (e.g., job_name).
        """
        self._component = component
        self._context: dict[str, Any] = {"component": component, **initial_context}

    def _get_logger(self) -> structlog.stdlib.BoundLogger:
        logger: structlog.stdlib.BoundLogger = structlog.get_logger().bind(**self._context)
        return logger

    def bind(self, **context: Any) -> CronGuardLogger:
        """Create a new logger with additional bound context."""
        new_logger = CronGuardLogger.__new__(CronGuardLogger)
        new_logger._component = self._component
        new_logger._context = {**self._context, **context}
        return new_logger

    def debug(self, event: str, **kw: Any) -> None:
        self._get_logger().debug(event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._get_logger().info(event, **kw)

    def warning(self, event: str, **kw: Any) -> None:
        self._get_logger().warning(event, **kw)

    def error(self, event: str, **kw: Any) -> None:
        self._get_logger().error(event, **kw)

    def exception(self, event: str, **kw: Any) -> None:
        """Log an error with traceback; call from within an exception handler."""
        self._get_logger().exception(event, **kw)


def _get_processors(
    renderer: Processor,
    include_timestamps: bool,
    include_context: bool,
) -> list[Processor]:
    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,  # Filter before processing
        structlog.stdlib.add_log_level,
        _sanitize_event_dict,
    ]

    if include_context:
        processors.append(_add_context)

    if include_timestamps:
        processors.append(_add_timestamp)

    processors.extend([
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ])

    return processors


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO",
    format: Literal["json", "console", "both"] = "json",  # noqa: A002
    file_path: Path | None = None,
    max_file_size_mb: int = 50,
    backup_count: int = 5,
    include_timestamps: bool = True,
    include_context: bool = True,
) -> None:
    """Configure cronguard structured logging.

    Call once at process startup, before the first job runs. Log writes are
    synchronous, so every line is flushed to its handler before the call that
    produced it returns.

    Args:
        level: Minimum log level to capture.
        format: "json" for structured output, "console" for human-readable,
            "both" for console output to stderr and to a file (requires file_path).
        file_path: Optional file path for log output. Required if format="both".
        max_file_size_mb: Maximum log file size before rotation (MB).
        backup_count: Number of rotated log files to keep.
        include_timestamps: Whether to include ISO8601 timestamps.
        include_context: Whether to merge the active ExecutionContext.

    Raises:
        ValueError: If format="both" but file_path is not provided.
    """
    if format == "both" and file_path is None:
        raise ValueError("file_path is required when format='both'")

    log_level = getattr(logging, level)
    handlers: list[logging.Handler] = []

    if format in ("console", "both"):
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        handlers.append(console_handler)

    if format in ("json", "both"):
        if file_path:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                file_path,
                maxBytes=max_file_size_mb * 1024 * 1024,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setLevel(log_level)
            handlers.append(file_handler)
        else:
            # JSON to stdout if no file specified
            json_handler = logging.StreamHandler(sys.stdout)
            json_handler.setLevel(log_level)
            handlers.append(json_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        root_logger.addHandler(handler)

    renderer: Processor
    if format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=format == "console")

    # NOTE: cache_logger_on_first_use=False keeps module-level loggers in step
    # with configuration applied after import
    structlog.configure(
        processors=_get_processors(renderer, include_timestamps, include_context),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(component: str, **initial_context: Any) -> CronGuardLogger:
    """Get a cronguard logger for a component.

    Args:
        component: The component name (e.g., "retry", "step_logger").
        **initial_context: Additional context to bind.

    Returns:
        A CronGuardLogger bound to the component.
    """
    return CronGuardLogger(component, **initial_context)


__all__ = [
    "ExecutionContext",
    "CronGuardLogger",
    "SENSITIVE_PATTERNS",
    "clear_context",
    "configure_logging",
    "get_current_context",
    "get_logger",
    "set_context",
    "with_context",
]
